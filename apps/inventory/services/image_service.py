"""
Image URL resolution for product photos.
"""
import logging
from typing import Callable, Optional

import cloudinary.utils
from django.conf import settings
from django.templatetags.static import static

from apps.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


def build_cloudinary_url(public_id: str) -> str:
    """Secure (https) delivery URL for a Cloudinary public id."""
    url, _options = cloudinary.utils.cloudinary_url(public_id, secure=True)
    return url


class ImageUrlResolver:
    """
    Turn a product photo reference into a displayable URL.

    An empty reference maps to the fallback image, an absolute URL is
    kept as is, and anything else is a Cloudinary public id.
    """

    def __init__(
        self,
        url_builder: Callable[[str], str] = build_cloudinary_url,
        fallback: Optional[str] = None
    ):
        self.url_builder = url_builder
        self._fallback = fallback

    @property
    def fallback(self) -> str:
        if self._fallback is None:
            self._fallback = static(settings.STOCK_LEDGER['FALLBACK_IMAGE'])
        return self._fallback

    def resolve(self, photo_ref: Optional[str]) -> str:
        if not photo_ref or not photo_ref.strip():
            return self.fallback

        if photo_ref.lower().startswith('http'):
            return photo_ref

        try:
            return self.url_builder(photo_ref)
        except Exception as e:
            logger.error(
                f"Image host failed for {photo_ref!r}: {e}",
                extra={'photo_ref': photo_ref, 'event_type': 'image_host_error'}
            )
            raise ExternalServiceError(f"Cannot build image URL for {photo_ref!r}") from e
