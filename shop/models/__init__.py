"""Models package - exports the Customer model and product record helpers."""
from shop.models.customer import Customer
from shop.models.product import (
    PaymentStatus, PLACEHOLDER_IMAGE_URL,
    build_product, generate_product_id, normalize_status, parse_price
)

__all__ = [
    'Customer',
    'PaymentStatus', 'PLACEHOLDER_IMAGE_URL',
    'build_product', 'generate_product_id', 'normalize_status', 'parse_price',
]
