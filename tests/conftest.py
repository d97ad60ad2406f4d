import pytest
import os

# Force an in-memory SQLite database for the whole test run
os.environ['DATABASE_URL'] = 'sqlite://'

from shop import create_app
from shop.database import create_tables, drop_tables


class FakeImageStore:
    """Stands in for StorageService; records uploads instead of calling S3."""

    def __init__(self):
        self.uploads = []
        self.fail = False

    def upload_image(self, file):
        if self.fail:
            raise RuntimeError('storage unavailable')
        self.uploads.append(file.filename)
        return f'https://cdn.test/shop/{file.filename}'


class BrokenRepository:
    """Repository whose every call fails like an unreachable database."""

    def _fail(self, *args, **kwargs):
        from shop.exceptions import ServiceError
        raise ServiceError('could not connect to server: Connection refused')

    list_customers = get = create = append_product = update_products = delete = _fail


@pytest.fixture
def image_store():
    """Fake image store shared by the app and the test."""
    return FakeImageStore()


@pytest.fixture
def app(image_store):
    """Create application instance with a fresh database."""
    app = create_app('config.Config', image_store=image_store)
    app.config['TESTING'] = True

    engine = app.extensions['db_engine']
    create_tables(engine)
    yield app
    app.extensions['db_session'].remove()
    drop_tables(engine)
    engine.dispose()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def repository(app):
    """The CustomerRepository wired into the app."""
    return app.extensions['customer_repository']


@pytest.fixture
def broken_client(image_store):
    """Client for an app whose database is down."""
    app = create_app('config.Config', repository=BrokenRepository(), image_store=image_store)
    app.config['TESTING'] = True
    return app.test_client()


@pytest.fixture
def sara(repository):
    """Customer 'Sara' with one paid product, as served by the API."""
    from shop.services import customer_service
    customer = customer_service.create_customer(
        repository, 'Sara', {'name': 'Dress', 'price': '120', 'status': 'paid'}
    )
    return customer.to_dict()
