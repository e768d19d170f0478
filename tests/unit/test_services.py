"""
Unit tests for the stock ledger services.
"""
from unittest.mock import Mock, patch

import cloudinary
import pytest
from django.db import OperationalError

from apps.core.exceptions import ExternalServiceError, PersistenceError, ProductNotFound
from apps.inventory.models import MovementKind, Product, StockMovement
from apps.inventory.records import ProductRecord
from apps.inventory.services.catalog_service import CatalogService
from apps.inventory.services.image_service import ImageUrlResolver
from apps.inventory.services.ledger_service import StockLedger
from apps.inventory.services.reconciliation_service import StockReconciliationService
from apps.inventory.services.stock_level_service import StockLevelService
from apps.inventory.tasks import check_stock_levels
from tests.conftest import TEST_CLOUD_NAME
from tests.helpers import at


def ledger_state(product):
    """Every ledger column the services may write, for before/after comparisons."""
    return list(
        StockMovement.objects.filter(product=product).order_by('id').values_list(
            'id', 'initial_quantity', 'current_quantity', 'minimum_stock',
            'maximum_stock', 'kind', 'moved_at'
        )
    )


class TestLatestMovement:
    """Test StockLedger lookups."""

    def test_none_without_movements(self, screwdriver):
        assert StockLedger.latest_movement(screwdriver.id) is None

    def test_recency_beats_magnitude(self, screwdriver, make_movement):
        """The 11:00 movement wins over the larger 10:00 one."""
        # Inserted out of time order so the row id cannot decide
        make_movement(screwdriver, current=15, moved_at=at(11))
        make_movement(screwdriver, current=20, moved_at=at(10))

        latest = StockLedger.latest_movement(screwdriver.id)

        assert latest.current_quantity == 15
        assert latest.moved_at == at(11)

    def test_equal_timestamps_resolve_to_highest_id(self, screwdriver, make_movement):
        make_movement(screwdriver, current=8, moved_at=at(10))
        second = make_movement(screwdriver, current=3, moved_at=at(10))

        assert StockLedger.latest_movement(screwdriver.id).id == second.id
        assert StockLedger.latest_movement_per_product([screwdriver.id])[screwdriver.id].id == second.id

    def test_batch_only_contains_products_with_movements(
        self, screwdriver, hammer, drill, make_movement
    ):
        make_movement(screwdriver, current=20, moved_at=at(10))
        make_movement(screwdriver, current=15, moved_at=at(11))
        make_movement(drill, current=4, moved_at=at(9))

        latest = StockLedger.latest_movement_per_product({screwdriver.id, hammer.id, drill.id})

        assert set(latest) == {screwdriver.id, drill.id}
        assert latest[screwdriver.id].current_quantity == 15
        assert latest[drill.id].current_quantity == 4

    def test_batch_runs_a_single_query(
        self, screwdriver, hammer, make_movement, django_assert_num_queries
    ):
        for hour in range(8, 12):
            make_movement(screwdriver, current=hour, moved_at=at(hour))
            make_movement(hammer, current=hour * 2, moved_at=at(hour))

        with django_assert_num_queries(1):
            latest = StockLedger.latest_movement_per_product([screwdriver.id, hammer.id])

        assert latest[screwdriver.id].current_quantity == 11
        assert latest[hammer.id].current_quantity == 22

    def test_batch_with_no_ids_skips_the_database(self, django_assert_num_queries):
        with django_assert_num_queries(0):
            assert StockLedger.latest_movement_per_product([]) == {}

    def test_database_failure_raises_persistence_error(self, screwdriver):
        with patch(
            'apps.inventory.services.ledger_service.StockMovement.objects.filter',
            side_effect=OperationalError('database unreachable')
        ):
            with pytest.raises(PersistenceError, match='latest_movement'):
                StockLedger.latest_movement(screwdriver.id)


class TestAppendRestock:
    """Test StockLedger.append_restock."""

    def test_appends_movement_on_top_of_latest(self, screwdriver, make_movement, principal):
        make_movement(screwdriver, current=20, moved_at=at(10), minimum=2, maximum=40)
        make_movement(screwdriver, current=15, moved_at=at(11), minimum=2, maximum=40)

        movement = StockLedger.append_restock(screwdriver.id, 10, performed_by=principal)

        assert movement.current_quantity == 25
        assert movement.initial_quantity == 10
        assert movement.minimum_stock == 2
        assert movement.maximum_stock == 40
        assert movement.kind == MovementKind.RESTOCK
        assert movement.performed_by_id == principal.user_id
        assert StockLedger.movement_count(screwdriver.id) == 3
        assert StockLedger.latest_movement(screwdriver.id) == movement

    def test_movement_count_increases_by_one(self, stocked_hammer, principal):
        before = StockLedger.movement_count(stocked_hammer.id)

        StockLedger.append_restock(stocked_hammer.id, 5, performed_by=principal)

        assert StockLedger.movement_count(stocked_hammer.id) == before + 1

    def test_consecutive_restocks_accumulate(self, stocked_hammer, principal):
        StockLedger.append_restock(stocked_hammer.id, 5, performed_by=principal)
        StockLedger.append_restock(stocked_hammer.id, 7, performed_by=principal)

        assert StockLedger.latest_movement(stocked_hammer.id).current_quantity == 32

    def test_negative_amount_is_accepted(self, stocked_hammer, principal):
        movement = StockLedger.append_restock(stocked_hammer.id, -25, performed_by=principal)

        assert movement.current_quantity == -5

    def test_without_stock_record_is_a_no_op(self, screwdriver, principal):
        """
        Known gap: a restock needs an existing movement, so the first
        stock of a product can only come from set_stock.
        """
        result = StockLedger.append_restock(screwdriver.id, 10, performed_by=principal)

        assert result is None
        assert StockLedger.movement_count(screwdriver.id) == 0

    def test_unknown_product_raises_not_found(self, principal):
        with pytest.raises(ProductNotFound):
            StockLedger.append_restock(999999, 10, performed_by=principal)

    def test_locks_product_before_reading_latest(self, stocked_hammer, principal):
        calls = []
        lock = StockLedger._lock_product
        read = StockMovement.objects.filter

        def record_lock(product_id):
            calls.append('lock')
            return lock(product_id)

        def record_read(*args, **kwargs):
            calls.append('read')
            return read(*args, **kwargs)

        with patch.object(StockLedger, '_lock_product', side_effect=record_lock), \
                patch('apps.inventory.services.ledger_service.StockMovement.objects.filter',
                      side_effect=record_read):
            StockLedger.append_restock(stocked_hammer.id, 1, performed_by=principal)

        assert calls[0] == 'lock'
        assert 'read' in calls

    def test_write_failure_raises_persistence_error(self, stocked_hammer, principal):
        with patch(
            'apps.inventory.services.ledger_service.StockMovement.objects.create',
            side_effect=OperationalError('write conflict')
        ):
            with pytest.raises(PersistenceError):
                StockLedger.append_restock(stocked_hammer.id, 1, performed_by=principal)

        assert StockLedger.movement_count(stocked_hammer.id) == 1


class TestSetStock:
    """Test StockLedger.set_stock."""

    def test_creates_initial_movement_with_default_thresholds(self, screwdriver, principal):
        movement = StockLedger.set_stock(screwdriver.id, 12, performed_by=principal)

        assert movement.initial_quantity == 12
        assert movement.current_quantity == 12
        assert movement.minimum_stock == 5
        assert movement.maximum_stock == 30
        assert movement.kind == MovementKind.INITIAL
        assert movement.performed_by_id == principal.user_id
        assert StockLedger.movement_count(screwdriver.id) == 1

    def test_default_thresholds_follow_settings(self, screwdriver, principal, settings):
        settings.STOCK_LEDGER = dict(
            settings.STOCK_LEDGER, DEFAULT_MINIMUM_STOCK=1, DEFAULT_MAXIMUM_STOCK=99
        )

        movement = StockLedger.set_stock(screwdriver.id, 12, performed_by=principal)

        assert (movement.minimum_stock, movement.maximum_stock) == (1, 99)

    def test_overwrites_existing_movement_in_place(self, screwdriver, make_movement, principal):
        original = make_movement(screwdriver, current=20, moved_at=at(10), minimum=3, maximum=50)

        movement = StockLedger.set_stock(screwdriver.id, 7, performed_by=principal)

        assert movement.id == original.id
        assert movement.initial_quantity == 7
        assert movement.current_quantity == 7
        assert movement.moved_at == at(10)
        assert movement.kind == MovementKind.INITIAL
        assert (movement.minimum_stock, movement.maximum_stock) == (3, 50)
        assert StockLedger.movement_count(screwdriver.id) == 1

    def test_is_idempotent(self, screwdriver, principal):
        StockLedger.set_stock(screwdriver.id, 9, performed_by=principal)
        state = ledger_state(screwdriver)

        StockLedger.set_stock(screwdriver.id, 9, performed_by=principal)

        assert ledger_state(screwdriver) == state

    def test_overwrites_first_movement_not_latest(self, screwdriver, make_movement, principal):
        """
        With restocks after the first movement, the overwrite does not
        change the current stock, which the latest movement defines.
        """
        first = make_movement(screwdriver, current=10, moved_at=at(9))
        make_movement(screwdriver, current=25, initial=15, moved_at=at(12),
                      kind=MovementKind.RESTOCK)

        movement = StockLedger.set_stock(screwdriver.id, 4, performed_by=principal)

        assert movement.id == first.id
        assert StockLedger.latest_movement(screwdriver.id).current_quantity == 25

    def test_then_restock_builds_on_set_value(self, screwdriver, principal):
        StockLedger.set_stock(screwdriver.id, 10, performed_by=principal)

        movement = StockLedger.append_restock(screwdriver.id, 6, performed_by=principal)

        assert movement.current_quantity == 16

    def test_unknown_product_raises_not_found(self, principal):
        with pytest.raises(ProductNotFound):
            StockLedger.set_stock(999999, 10, performed_by=principal)


class TestMovementHistory:
    """Test StockLedger.movement_history."""

    def test_newest_first_with_limit(self, screwdriver, make_movement):
        for hour in (9, 11, 10):
            make_movement(screwdriver, current=hour, moved_at=at(hour))

        history = StockLedger.movement_history(screwdriver.id, limit=2)

        assert [m.current_quantity for m in history] == [11, 10]

    def test_default_limit_from_settings(self, screwdriver, make_movement, settings):
        settings.STOCK_LEDGER = dict(settings.STOCK_LEDGER, MOVEMENT_HISTORY_LIMIT=1)
        make_movement(screwdriver, current=1, moved_at=at(9))
        make_movement(screwdriver, current=2, moved_at=at(10))

        assert len(StockLedger.movement_history(screwdriver.id)) == 1


class TestCatalogService:
    """Test CatalogService queries."""

    def test_list_products_ordered_by_name(self, screwdriver, hammer, drill):
        names = [p.name for p in CatalogService.list_products()]
        assert names == ['Destornillador', 'Martillo', 'Taladro']

    def test_search_matches_name_or_code_ignoring_case(self, screwdriver, hammer, drill):
        assert [p.id for p in CatalogService.search_products('MARTI')] == [hammer.id]
        assert [p.id for p in CatalogService.search_products('tld')] == [drill.id]
        assert CatalogService.search_products('xyz') == []

    def test_get_product(self, hammer):
        assert CatalogService.get_product(hammer.id).code == 'MRT-002'

    def test_get_missing_product(self):
        with pytest.raises(ProductNotFound):
            CatalogService.get_product(424242)

    def test_filter_products_in_memory(self):
        products = [
            ProductRecord(id=1, name='Cinta métrica', code='CNT-1', photo=''),
            ProductRecord(id=2, name='Sierra', code='SRR-2', photo=''),
        ]

        assert CatalogService.filter_products('MÉTRICA', products) == [products[0]]
        assert CatalogService.filter_products('srr', products) == [products[1]]


class TestImageUrlResolver:
    """Test ImageUrlResolver fallback chain."""

    @pytest.mark.parametrize('photo_ref', ['', '   ', None])
    def test_empty_reference_uses_fallback(self, photo_ref):
        assert ImageUrlResolver().resolve(photo_ref) == '/static/img/no-image.png'

    @pytest.mark.parametrize('url', [
        'https://x/y.png',
        'http://cdn.example.com/a.jpg',
        'HTTPS://CDN.EXAMPLE.COM/B.JPG',
    ])
    def test_absolute_url_is_unchanged(self, url):
        builder = Mock()

        assert ImageUrlResolver(url_builder=builder).resolve(url) == url
        builder.assert_not_called()

    def test_public_id_becomes_secure_cloudinary_url(self):
        url = ImageUrlResolver().resolve('abc123')

        assert url.startswith(f'https://res.cloudinary.com/{TEST_CLOUD_NAME}/image/upload/')
        assert url.endswith('/abc123')

    def test_public_id_goes_through_builder(self):
        builder = Mock(return_value='https://images.example.com/abc123')

        assert ImageUrlResolver(url_builder=builder).resolve('abc123') == 'https://images.example.com/abc123'
        builder.assert_called_once_with('abc123')

    def test_builder_failure_raises_external_service_error(self):
        builder = Mock(side_effect=RuntimeError('host down'))

        with pytest.raises(ExternalServiceError):
            ImageUrlResolver(url_builder=builder).resolve('abc123')

    def test_unconfigured_cloud_raises_external_service_error(self):
        cloudinary.config(cloud_name=None)

        with pytest.raises(ExternalServiceError):
            ImageUrlResolver().resolve('abc123')

    def test_fallback_from_settings(self, settings):
        settings.STOCK_LEDGER = dict(settings.STOCK_LEDGER, FALLBACK_IMAGE='img/placeholder.jpg')

        assert ImageUrlResolver().resolve('') == '/static/img/placeholder.jpg'


class TestStockReconciliationService:
    """Test StockReconciliationService."""

    @pytest.fixture
    def service(self):
        return StockReconciliationService(
            image_resolver=ImageUrlResolver(url_builder=lambda ref: f'https://img.test/{ref}')
        )

    @pytest.fixture
    def catalog(self, screwdriver, hammer, drill, make_movement):
        make_movement(hammer, current=20, moved_at=at(10))
        make_movement(hammer, current=15, moved_at=at(11))
        make_movement(drill, current=0, moved_at=at(9))
        return [ProductRecord.from_model(p) for p in (drill, screwdriver, hammer)]

    def test_partition_is_complete_and_disjoint(self, service, catalog):
        overview = service.reconcile(catalog)

        without_ids = {p.id for p in overview.without_stock}
        with_ids = {p.id for p in overview.with_stock}
        assert without_ids.isdisjoint(with_ids)
        assert without_ids | with_ids == {p.id for p in catalog}

    def test_products_with_movements_have_stock(self, service, catalog, screwdriver):
        overview = service.reconcile(catalog)

        assert [p.id for p in overview.without_stock] == [screwdriver.id]
        assert set(overview.latest_by_product) == {p.id for p in overview.with_stock}

    def test_zero_stock_still_counts_as_stock_record(self, service, catalog, drill):
        overview = service.reconcile(catalog)

        assert drill.id in {p.id for p in overview.with_stock}
        assert overview.current_stock(drill.id) == 0

    def test_input_order_is_preserved(self, service, catalog, drill, hammer):
        overview = service.reconcile(catalog)

        assert [p.id for p in overview.with_stock] == [drill.id, hammer.id]

    def test_latest_movement_is_attached(self, service, catalog, hammer, screwdriver):
        overview = service.reconcile(catalog)

        assert overview.current_stock(hammer.id) == 15
        assert overview.current_stock(screwdriver.id) is None

    def test_image_urls_follow_the_fallback_chain(self, service, catalog, screwdriver, hammer, drill):
        overview = service.reconcile(catalog)

        assert overview.image_urls == {
            screwdriver.id: '/static/img/no-image.png',
            hammer.id: 'https://cdn.example.com/martillo.png',
            drill.id: 'https://img.test/productos/taladro',
        }

    def test_unresolvable_photo_falls_back_per_product(self, catalog, screwdriver, hammer, drill):
        def builder(ref):
            raise RuntimeError('host down')

        service = StockReconciliationService(image_resolver=ImageUrlResolver(url_builder=builder))

        overview = service.reconcile(catalog)

        assert overview.image_urls == {
            screwdriver.id: '/static/img/no-image.png',
            hammer.id: 'https://cdn.example.com/martillo.png',
            drill.id: '/static/img/no-image.png',
        }
        assert overview.current_stock(hammer.id) == 15

    def test_single_ledger_query(self, service, catalog, django_assert_num_queries):
        with django_assert_num_queries(1):
            service.reconcile(catalog)

    def test_empty_catalog(self, service):
        overview = service.reconcile([])

        assert overview.without_stock == []
        assert overview.with_stock == []
        assert overview.latest_by_product == {}

    def test_overview_covers_whole_catalog(self, service, catalog):
        overview = service.overview()

        assert len(overview.without_stock) + len(overview.with_stock) == Product.objects.count()

    @pytest.mark.parametrize('query', ['', '   ', '\t', None])
    def test_blank_search_signals_redirect(self, service, catalog, query):
        assert service.search(query) is None
        assert service.search(query, catalog) is None

    def test_search_in_catalog(self, service, catalog, hammer):
        overview = service.search('martillo')

        assert [p.id for p in overview.with_stock] == [hammer.id]
        assert overview.without_stock == []

    def test_search_by_code_in_given_products(self, service, catalog, screwdriver):
        overview = service.search('dst', catalog)

        assert [p.id for p in overview.without_stock] == [screwdriver.id]
        assert overview.with_stock == []

    def test_search_without_matches(self, service, catalog):
        overview = service.search('no-such-product')

        assert overview.without_stock == []
        assert overview.with_stock == []


class TestStockLevelService:
    """Test StockLevelService and the periodic task."""

    @pytest.fixture
    def levels(self, screwdriver, hammer, drill, make_movement):
        make_movement(screwdriver, current=3, moved_at=at(10))
        make_movement(hammer, current=35, moved_at=at(10))
        make_movement(hammer, current=12, moved_at=at(9))

    def test_report(self, levels, screwdriver, hammer, drill):
        report = StockLevelService.report()

        assert [p.id for p, _m in report.below_minimum] == [screwdriver.id]
        assert [p.id for p, _m in report.above_maximum] == [hammer.id]
        assert [p.id for p in report.without_stock] == [drill.id]

    def test_check_stock_levels_task(self, levels, screwdriver, hammer, drill):
        result = check_stock_levels.apply().get()

        assert result['status'] == 'success'
        assert result['below_minimum'] == [screwdriver.id]
        assert result['above_maximum'] == [hammer.id]
        assert result['without_stock'] == [drill.id]
