import uuid

from orderflow.core.logging import get_logger
from orderflow.domain.product import Product
from orderflow.domain.repositories import TransactionalRepositories, TransactionManager

logger = get_logger(__name__)


class ProductService:
    def __init__(self, transactions: TransactionManager):
        self.transactions = transactions

    def create_product(self, description: str, tags: list[str] | None, quantity: int, price: int) -> Product:
        product = Product(description=description, tags=list(tags or []), quantity=quantity, price=price)
        product.validate_for_creation()
        self.transactions.with_transaction(lambda repos: repos.products.create(product))
        logger.info("product created", product_id=str(product.id), quantity=product.quantity, price=product.price)
        return product

    def get_product(self, product_id: uuid.UUID) -> Product:
        return self.transactions.with_transaction(lambda repos: repos.products.get_by_id(product_id))

    def list_products(self, limit: int, offset: int) -> tuple[list[Product], int]:
        """One page of the catalogue plus the size of the whole catalogue."""
        return self.transactions.with_transaction(
            lambda repos: (repos.products.get_all(limit, offset), repos.products.count())
        )

    def update_product(
        self,
        product_id: uuid.UUID,
        description: str | None = None,
        tags: list[str] | None = None,
        quantity: int | None = None,
        price: int | None = None,
    ) -> Product:
        """Administrative update, serialized with reservations by the row lock."""

        def work(repos: TransactionalRepositories) -> Product:
            product = repos.products.get_by_id_for_update(product_id)
            product.update_details(description=description, tags=tags, quantity=quantity, price=price)
            repos.products.update(product)
            return product

        product = self.transactions.with_transaction(work)
        logger.info("product updated", product_id=str(product_id))
        return product
