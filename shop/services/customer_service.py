"""Customer service - record rules on top of the customer repository."""
import logging
from typing import List, Optional

from shop.exceptions import NotFoundError, ValidationError
from shop.models import Customer, build_product, normalize_status

logger = logging.getLogger(__name__)


def list_customers(repository) -> List[Customer]:
    """All customers ordered by creation time, newest first."""
    return repository.list_customers()


def get_customer(repository, customer_id: int) -> Customer:
    """
    Get a customer by id.

    Raises:
        NotFoundError: If the customer does not exist
    """
    customer = repository.get(customer_id)
    if not customer:
        raise NotFoundError(f'Customer {customer_id} not found')
    return customer


def create_customer(repository, name: Optional[str], first_product: Optional[dict]) -> Customer:
    """
    Create a customer together with its first product.

    Args:
        repository: CustomerRepository
        name: Customer name (required)
        first_product: dict with 'name' (required) and optional
            'price', 'status', 'image'

    Returns:
        The persisted Customer

    Raises:
        ValidationError: If the customer or product name is missing
        ServiceError: If the database fails
    """
    name = str(name or '').strip()
    first_product = first_product or {}
    if not name:
        raise ValidationError('Customer name is required')
    if not str(first_product.get('name') or '').strip():
        raise ValidationError('Product name is required')

    product = build_product(
        first_product.get('name'),
        price=first_product.get('price'),
        status=first_product.get('status'),
        image=first_product.get('image'),
    )
    customer = repository.create(name, [product])
    logger.info(f"[CUSTOMERS] Customer '{name}' created with product {product['id']}")
    return customer


def append_product(repository, customer_id: int, product: dict) -> Customer:
    """Append an already built product; existing products are left untouched."""
    return repository.append_product(customer_id, product)


def add_product(repository, customer_id: int, name: Optional[str], price=None,
                status=None, image=None) -> Customer:
    """
    Build a product from raw input and append it to a customer.

    Raises:
        ValidationError: If the product name is missing
        NotFoundError: If the customer does not exist
    """
    product = build_product(name, price=price, status=status, image=image)
    customer = append_product(repository, customer_id, product)
    logger.info(f"[CUSTOMERS] Product {product['id']} added to customer {customer_id}")
    return customer


def update_product_status(repository, customer_id: int, product_id: Optional[str],
                          new_status: Optional[str]) -> List[dict]:
    """
    Change the payment status of one product.

    Only the targeted product's ``status`` changes; the status goes through
    the same allow-list as on creation.

    Returns:
        The customer's updated product list

    Raises:
        ValidationError: If product_id or new_status is missing
        NotFoundError: If the customer or the product does not exist
    """
    if not product_id:
        raise ValidationError('productId is required')
    if new_status is None or new_status == '':
        raise ValidationError('newStatus is required')

    product_id = str(product_id)
    status = normalize_status(new_status)

    def _set_status(products):
        for product in products:
            if product.get('id') == product_id:
                product['status'] = status
                return products
        raise NotFoundError(f'Product {product_id} not found for customer {customer_id}')

    customer = repository.update_products(customer_id, _set_status)
    logger.info(f"[CUSTOMERS] Product {product_id} of customer {customer_id} marked {status}")
    return [dict(p) for p in customer.products]


def delete_customer(repository, customer_id: int) -> bool:
    """Delete a customer and its products; unknown ids are ignored."""
    return repository.delete(customer_id)
