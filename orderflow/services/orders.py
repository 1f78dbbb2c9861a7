"""Order workflows: creation with stock reservation, confirm, cancel, reads."""

import uuid
from dataclasses import dataclass
from typing import Sequence

from orderflow.core.deadline import Deadline
from orderflow.core.logging import get_logger
from orderflow.domain.errors import DomainError, OrderMustHaveItems
from orderflow.domain.order import Order
from orderflow.domain.repositories import TransactionalRepositories, TransactionManager

logger = get_logger(__name__)


@dataclass(frozen=True)
class OrderItemRequest:
    product_id: uuid.UUID
    quantity: int


class OrderService:
    def __init__(self, transactions: TransactionManager):
        self.transactions = transactions

    def create_order(
        self,
        user_id: uuid.UUID,
        items: Sequence[OrderItemRequest],
        deadline: Deadline | None = None,
    ) -> Order:
        """Create a pending order and reserve stock for every line.

        Products are locked in request order; callers touching several
        products should sort the lines by product id so that concurrent
        orders acquire locks in the same order. Any failure rolls back the
        whole unit of work: no reservation, no order row.
        """
        if not items:
            raise OrderMustHaveItems()

        def work(repos: TransactionalRepositories) -> Order:
            repos.users.get_by_id(user_id)
            order = Order(user_id=user_id)
            for line in items:
                product = repos.products.get_by_id_for_update(line.product_id)
                order.add_item(product, line.quantity)
                product.reserve_quantity(line.quantity)
                repos.products.update(product)
            repos.orders.create(order)
            return order

        try:
            order = self.transactions.with_transaction(work, deadline=deadline)
        except DomainError as exc:
            logger.warning("order creation aborted", user_id=str(user_id), code=exc.code, reason=exc.message)
            raise
        logger.info(
            "order created",
            order_id=str(order.id),
            user_id=str(user_id),
            items=len(order.items),
            total=order.total,
        )
        return order

    def get_order(self, order_id: uuid.UUID) -> Order:
        return self.transactions.with_transaction(lambda repos: repos.orders.get_by_id(order_id))

    def list_user_orders(self, user_id: uuid.UUID, limit: int, offset: int) -> list[Order]:
        return self.transactions.with_transaction(
            lambda repos: repos.orders.get_by_user_id(user_id, limit, offset)
        )

    # Confirm and cancel touch no inventory and take no locks: concurrent
    # calls on the same order are last-write-wins.

    def confirm_order(self, order_id: uuid.UUID) -> Order:
        def work(repos: TransactionalRepositories) -> Order:
            order = repos.orders.get_by_id(order_id)
            order.confirm()
            repos.orders.update(order)
            return order

        order = self.transactions.with_transaction(work)
        logger.info("order confirmed", order_id=str(order_id))
        return order

    def cancel_order(self, order_id: uuid.UUID) -> Order:
        def work(repos: TransactionalRepositories) -> Order:
            order = repos.orders.get_by_id(order_id)
            order.cancel()
            repos.orders.update(order)
            return order

        order = self.transactions.with_transaction(work)
        logger.info("order cancelled", order_id=str(order_id))
        return order
