import uuid

from orderflow.core.config import settings
from orderflow.core.logging import get_logger
from orderflow.domain.repositories import TransactionManager
from orderflow.domain.user import User

logger = get_logger(__name__)


class UserService:
    def __init__(
        self,
        transactions: TransactionManager,
        min_age: int = settings.MIN_USER_AGE,
        min_password_length: int = settings.MIN_PASSWORD_LENGTH,
    ):
        self.transactions = transactions
        self.min_age = min_age
        self.min_password_length = min_password_length

    def register_user(
        self,
        first_name: str,
        last_name: str,
        age: int,
        password: str,
        is_married: bool = False,
    ) -> User:
        user = User(first_name=first_name, last_name=last_name, age=age, is_married=is_married)
        user.validate_for_creation(password, self.min_age, self.min_password_length)
        user.set_password(password)
        self.transactions.with_transaction(lambda repos: repos.users.create(user))
        logger.info("user registered", user_id=str(user.id))
        return user

    def get_user(self, user_id: uuid.UUID) -> User:
        return self.transactions.with_transaction(lambda repos: repos.users.get_by_id(user_id))
