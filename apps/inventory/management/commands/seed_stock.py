"""
Django management command to seed the catalog and stock ledger with demo data.
"""
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from apps.core.exceptions import StockLedgerError
from apps.core.principal import Principal
from apps.inventory.models import Product, StockMovement
from apps.inventory.services.ledger_service import StockLedger

User = get_user_model()

PRODUCTS = [
    {'code': 'DST-001', 'name': 'Destornillador plano', 'photo': '', 'stock': 12},
    {'code': 'MRT-002', 'name': 'Martillo de carpintero', 'photo': '', 'stock': 4},
    {'code': 'TLD-003', 'name': 'Taladro percutor', 'photo': 'productos/taladro', 'stock': 2},
    {'code': 'LLV-004', 'name': 'Llave inglesa 10"', 'photo': '', 'stock': 30},
    {'code': 'CNT-005', 'name': 'Cinta aislante', 'photo': '', 'stock': None},
    {'code': 'GNT-006', 'name': 'Guantes de nitrilo', 'photo': '', 'stock': None},
]


class Command(BaseCommand):
    help = 'Seed the catalog and stock ledger with demo products'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Delete existing movements and products before seeding',
        )
        parser.add_argument(
            '--products-only',
            action='store_true',
            help='Create products without any stock movement',
        )
        parser.add_argument(
            '--user',
            help='Username recorded on the seeded movements',
        )

    def handle(self, *args, **options):
        principal = self.get_principal(options['user'])

        if options['clear']:
            self.clear_data()

        try:
            with transaction.atomic():
                products = self.create_products()
                if not options['products_only']:
                    self.create_stock(products, principal)
        except StockLedgerError as e:
            raise CommandError(f'Error seeding data: {e}')

        self.stdout.write(self.style.SUCCESS('Successfully seeded stock data!'))

    def get_principal(self, username):
        if not username:
            return Principal.system()
        try:
            return Principal.from_user(User.objects.get(username=username))
        except User.DoesNotExist:
            raise CommandError(f'User "{username}" does not exist')

    def clear_data(self):
        self.stdout.write('Clearing existing data...')
        # Movements protect their products
        StockMovement.objects.all().delete()
        Product.objects.all().delete()
        self.stdout.write(self.style.WARNING('Existing data cleared.'))

    def create_products(self):
        self.stdout.write('Creating products...')

        products = []
        for data in PRODUCTS:
            product, _created = Product.objects.get_or_create(
                code=data['code'],
                defaults={'name': data['name'], 'photo': data['photo']}
            )
            products.append((product, data['stock']))

        self.stdout.write(f'{len(products)} products available.')
        return products

    def create_stock(self, products, principal):
        """Initial stock for products that have none yet; some stay unstocked."""
        self.stdout.write('Creating stock movements...')

        created = 0
        for product, quantity in products:
            if quantity is None or StockLedger.latest_movement(product.id) is not None:
                continue
            StockLedger.set_stock(product.id, quantity, principal)
            created += 1

        self.stdout.write(f'Created {created} initial movements.')
