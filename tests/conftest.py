import os
import tempfile
from pathlib import Path

import pytest

# Point the service at a throwaway SQLite database before anything imports settings.
_DB_DIR = tempfile.mkdtemp(prefix="orderflow-tests-")
os.environ["DATABASE_DSN"] = f"sqlite:///{Path(_DB_DIR) / 'orders.db'}"
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_USERS_PER_MINUTE", "0")
os.environ.setdefault("RATE_LIMIT_ORDERS_PER_MINUTE", "0")
os.environ.setdefault("LOG_FORMAT", "console")
os.environ.setdefault("LOG_LEVEL", "WARNING")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))
        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)


@pytest.fixture(scope="session")
def engine():
    from orderflow.db import models  # noqa: F401
    from orderflow.db.session import Base, engine

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(autouse=True)
def clean_db(request):
    """Empty every table after each test that touched the database."""
    yield
    if "engine" not in request.fixturenames:
        return
    from orderflow.db.session import Base, engine

    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def session_factory(engine):
    from orderflow.db.session import make_session_factory

    return make_session_factory(engine)


@pytest.fixture
def transactions(session_factory):
    from orderflow.db.transaction import SqlTransactionManager

    return SqlTransactionManager(session_factory)


@pytest.fixture
def user_service(transactions):
    from orderflow.services.users import UserService

    return UserService(transactions)


@pytest.fixture
def product_service(transactions):
    from orderflow.services.products import ProductService

    return ProductService(transactions)


@pytest.fixture
def order_service(transactions):
    from orderflow.services.orders import OrderService

    return OrderService(transactions)


@pytest.fixture
def user(user_service):
    return user_service.register_user(first_name="Ada", last_name="Lovelace", age=25, password="s3cretpass")


@pytest.fixture
def product(product_service):
    return product_service.create_product(description="Mechanical keyboard", tags=["hardware"], quantity=10, price=1000)


@pytest.fixture
def client(engine):
    from fastapi.testclient import TestClient

    from orderflow.main import app

    with TestClient(app) as c:
        yield c
