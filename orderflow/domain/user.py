import uuid
from dataclasses import dataclass, field
from datetime import datetime

from orderflow.core.clock import now_utc
from orderflow.domain.errors import (
    FirstNameRequired,
    LastNameRequired,
    PasswordTooShort,
    UserTooYoung,
)
from orderflow.security.utils import hash_password, verify_password


@dataclass
class User:
    first_name: str
    last_name: str
    age: int
    is_married: bool = False
    password_hash: str = field(default="", repr=False)
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=now_utc)
    updated_at: datetime = field(default_factory=now_utc)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def validate_for_creation(self, plain_password: str, min_age: int, min_password_length: int) -> None:
        if not self.first_name:
            raise FirstNameRequired()
        if not self.last_name:
            raise LastNameRequired()
        if self.age < min_age:
            raise UserTooYoung()
        if len(plain_password) < min_password_length:
            raise PasswordTooShort()

    def set_password(self, plain_password: str) -> None:
        self.password_hash = hash_password(plain_password)

    def check_password(self, plain_password: str) -> bool:
        if not self.password_hash:
            return False
        return verify_password(plain_password, self.password_hash)
