import uuid
from fastapi import Depends
from orderflow.core.config import settings
from orderflow.db.session import SessionLocal
from orderflow.db.transaction import SqlTransactionManager
from orderflow.domain.errors import InvalidIdentifier
from orderflow.domain.repositories import TransactionManager
from orderflow.services.orders import OrderService
from orderflow.services.products import ProductService
from orderflow.services.users import UserService
from orderflow.api.ratelimit import RateLimiter

_transactions = SqlTransactionManager(SessionLocal)

users_rate_limit = RateLimiter(settings.RATE_LIMIT_USERS_PER_MINUTE, settings.RATE_LIMIT_USERS_BURST)
orders_rate_limit = RateLimiter(settings.RATE_LIMIT_ORDERS_PER_MINUTE, settings.RATE_LIMIT_ORDERS_BURST)

def get_transaction_manager() -> TransactionManager:
    return _transactions

def get_user_service(tx: TransactionManager = Depends(get_transaction_manager)) -> UserService:
    return UserService(tx)

def get_product_service(tx: TransactionManager = Depends(get_transaction_manager)) -> ProductService:
    return ProductService(tx)

def get_order_service(tx: TransactionManager = Depends(get_transaction_manager)) -> OrderService:
    return OrderService(tx)

def parse_id(value: str) -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except ValueError:
        raise InvalidIdentifier(f"invalid identifier format: {value!r}") from None
