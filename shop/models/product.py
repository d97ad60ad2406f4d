"""
Product record.

Products are not a table of their own; they live as plain dicts inside
``Customer.products``. This module builds those dicts and holds the
normalization rules applied to user input.
"""
import math
import random
import string
import time
from datetime import datetime, timezone

from shop.exceptions import ValidationError


class PaymentStatus:
    """Allowed product payment statuses."""
    PAID = 'paid'
    UNPAID = 'unpaid'


PLACEHOLDER_IMAGE_URL = 'https://via.placeholder.com/150?text=No+Image'

_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_SUFFIX_LENGTH = 6


def normalize_status(value) -> str:
    """
    Normalize a payment status.

    Allow-list, not validation: only the exact literal 'paid' is kept,
    anything else (None, '', 'PAID', 'xyz') becomes 'unpaid'.
    """
    if value == PaymentStatus.PAID:
        return PaymentStatus.PAID
    return PaymentStatus.UNPAID


def parse_price(value) -> float:
    """
    Coerce a price from form input.

    Missing, unparseable and non-finite values become 0.
    Negative prices are accepted as-is.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, str):
        value = value.strip()
        # float() also takes digit separators ('1_000'); prices never do
        if not value or '_' in value:
            return 0
    try:
        price = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(price):
        return 0
    return price


def generate_product_id() -> str:
    """
    Generate a product id: epoch milliseconds + 6 random base36 chars.

    Unique enough inside a single customer's product list; not
    cryptographically random and not globally unique.
    """
    millis = int(time.time() * 1000)
    suffix = ''.join(random.choices(_ID_ALPHABET, k=_ID_SUFFIX_LENGTH))
    return f"{millis}{suffix}"


def build_product(name, price=None, status=None, image=None) -> dict:
    """
    Build a new product record.

    Args:
        name: Product name (required)
        price: Raw price input, see parse_price
        status: Raw status input, see normalize_status
        image: Uploaded image URL, placeholder when empty

    Returns:
        dict with id, name, price, status, image and date

    Raises:
        ValidationError: If name is missing or blank
    """
    name = str(name or '').strip()
    if not name:
        raise ValidationError('Product name is required')

    return {
        'id': generate_product_id(),
        'name': name,
        'price': parse_price(price),
        'status': normalize_status(status),
        'image': image or PLACEHOLDER_IMAGE_URL,
        'date': datetime.now(timezone.utc).isoformat(),
    }
