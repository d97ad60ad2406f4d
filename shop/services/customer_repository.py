"""
Customer repository - persistence of Customer documents.

The ``customer`` table plays the role of the customers collection: one row
per customer, with its products embedded as a JSON array. Every write runs
in its own transaction; array mutations lock the customer row first so
concurrent appends or status changes on the same customer are serialized
instead of overwriting each other.
"""
import logging
from typing import Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from shop.exceptions import NotFoundError, ServiceError, ShopError
from shop.models import Customer
from shop.models.customer import utcnow

logger = logging.getLogger(__name__)

# Largest value a BIGINT primary key can hold
MAX_CUSTOMER_ID = 2 ** 63 - 1


def _is_valid_id(customer_id) -> bool:
    """Ids outside the column range cannot exist; they are treated as unknown."""
    return isinstance(customer_id, int) and 0 < customer_id <= MAX_CUSTOMER_ID


class CustomerRepository:
    """
    SQLAlchemy-backed store for customers.

    Usage:
        repo = CustomerRepository(db_session)
        customer = repo.create('Sara', [product])
        repo.append_product(customer.id, other_product)
    """

    def __init__(self, session):
        self.session = session

    def list_customers(self) -> List[Customer]:
        """All customers, newest first."""
        try:
            return self.session.query(Customer).order_by(
                Customer.created_at.desc(),
                Customer.id.desc()
            ).all()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"[CUSTOMERS] ✗ List failed: {e}")
            raise ServiceError(str(e))

    def get(self, customer_id: int) -> Optional[Customer]:
        """Customer by id, or None."""
        if not _is_valid_id(customer_id):
            return None
        try:
            return self.session.query(Customer).filter(Customer.id == customer_id).first()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"[CUSTOMERS] ✗ Get {customer_id} failed: {e}")
            raise ServiceError(str(e))

    def create(self, name: str, products: List[dict]) -> Customer:
        """Insert a customer; id and created_at are assigned here, never by the caller."""
        try:
            customer = Customer(name=name, created_at=utcnow(), products=list(products))
            self.session.add(customer)
            self.session.commit()
            logger.info(f"[CUSTOMERS] ✓ Customer {customer.id} created")
            return customer
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"[CUSTOMERS] ✗ Create failed: {e}")
            raise ServiceError(str(e))

    def append_product(self, customer_id: int, product: dict) -> Customer:
        """
        Append one product to the customer's array.

        Raises:
            NotFoundError: If the customer does not exist
            ServiceError: If the database fails
        """
        return self.update_products(customer_id, lambda products: products + [product])

    def update_products(self, customer_id: int, mutate: Callable[[List[dict]], List[dict]]) -> Customer:
        """
        Read-modify-write of the products array under a row lock.

        Args:
            customer_id: Customer to update
            mutate: Receives a copy of the current products, returns the new list

        Raises:
            NotFoundError: If the customer does not exist (or mutate raises it)
            ServiceError: If the database fails
        """
        if not _is_valid_id(customer_id):
            raise NotFoundError(f'Customer {customer_id} not found')

        try:
            customer = self.session.query(Customer).filter(
                Customer.id == customer_id
            ).with_for_update().first()

            if not customer:
                raise NotFoundError(f'Customer {customer_id} not found')

            current = [dict(p) for p in (customer.products or [])]
            # Assign a new list so SQLAlchemy flags the JSON column as dirty
            customer.products = mutate(current)
            self.session.commit()
            return customer
        except ShopError:
            self.session.rollback()
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"[CUSTOMERS] ✗ Update of customer {customer_id} failed: {e}")
            raise ServiceError(str(e))

    def delete(self, customer_id: int) -> bool:
        """
        Delete a customer and, with it, all embedded products.

        Deleting an unknown id is a no-op.

        Returns:
            True if a row was deleted
        """
        if not _is_valid_id(customer_id):
            return False
        try:
            deleted = self.session.query(Customer).filter(
                Customer.id == customer_id
            ).delete(synchronize_session=False)
            self.session.commit()
            if deleted:
                logger.info(f"[CUSTOMERS] ✓ Customer {customer_id} deleted")
            return bool(deleted)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"[CUSTOMERS] ✗ Delete of customer {customer_id} failed: {e}")
            raise ServiceError(str(e))
