import uuid
from unittest import mock

import pytest

from orderflow.core.deadline import Deadline
from orderflow.db.session import make_engine, make_session_factory
from orderflow.db.transaction import SqlTransactionManager
from orderflow.domain.errors import (
    DeadlineExceeded,
    InsufficientQuantity,
    LockTimeout,
    OrderMustHaveItems,
    UserNotFound,
)
from orderflow.domain.product import Product
from orderflow.services.orders import OrderItemRequest, OrderService


def product_count(transactions):
    return transactions.with_transaction(lambda repos: repos.products.count())


class TestWithTransaction:
    def test_commits_when_work_returns(self, transactions):
        product = Product(description="Kept", price=100, quantity=1)
        result = transactions.with_transaction(lambda repos: repos.products.create(product) or "done")

        assert result == "done"
        assert transactions.with_transaction(lambda repos: repos.products.get_by_id(product.id)).description == "Kept"

    def test_rolls_back_when_work_raises(self, transactions):
        def work(repos):
            repos.products.create(Product(description="Discarded", price=100, quantity=1))
            raise InsufficientQuantity()

        with pytest.raises(InsufficientQuantity):
            transactions.with_transaction(work)
        assert product_count(transactions) == 0

    def test_rolls_back_on_unexpected_fault(self, transactions):
        def work(repos):
            repos.products.create(Product(description="Discarded", price=100, quantity=1))
            raise KeyError("boom")

        with pytest.raises(KeyError):
            transactions.with_transaction(work)
        assert product_count(transactions) == 0

    def test_each_call_gets_fresh_repositories(self, transactions):
        seen = []
        transactions.with_transaction(lambda repos: seen.append(repos))
        transactions.with_transaction(lambda repos: seen.append(repos))
        assert seen[0] is not seen[1]
        assert seen[0].products.session is not seen[1].products.session

    def test_nested_calls_are_rejected(self, transactions):
        def outer(repos):
            repos.products.create(Product(description="Outer", price=100, quantity=1))
            transactions.with_transaction(lambda inner: None)

        with pytest.raises(RuntimeError, match="nested"):
            transactions.with_transaction(outer)
        assert product_count(transactions) == 0
        # the manager is usable again afterwards
        assert product_count(transactions) == 0


class TestDeadlines:
    def test_expired_deadline_never_opens_work(self, transactions):
        work = mock.Mock()
        with pytest.raises(DeadlineExceeded):
            transactions.with_transaction(work, deadline=Deadline(expires_at=0.0))
        work.assert_not_called()

    def test_cancellation_during_work_rolls_back(self, transactions):
        deadline = Deadline.after(60)

        def work(repos):
            repos.products.create(Product(description="Cancelled", price=100, quantity=1))
            deadline.cancel()

        with pytest.raises(DeadlineExceeded):
            transactions.with_transaction(work, deadline=deadline)
        assert product_count(transactions) == 0

    def test_repositories_check_the_deadline(self, transactions):
        deadline = Deadline.after(60)

        def work(repos):
            deadline.cancel()
            repos.products.get_all(10, 0)

        with pytest.raises(DeadlineExceeded):
            transactions.with_transaction(work, deadline=deadline)


class TestLockWaits:
    @pytest.fixture
    def held_write_lock(self, engine):
        """A second connection holding the database write lock."""
        blocker = make_engine(str(engine.url))
        conn = blocker.connect()
        trans = conn.begin()
        yield
        trans.rollback()
        conn.close()
        blocker.dispose()

    @pytest.fixture
    def impatient_transactions(self, engine):
        fast = make_engine(str(engine.url), lock_timeout_ms=100)
        yield SqlTransactionManager(make_session_factory(fast), lock_timeout_ms=100)
        fast.dispose()

    def test_lock_wait_times_out(self, user, product, held_write_lock, impatient_transactions):
        with pytest.raises(LockTimeout):
            OrderService(impatient_transactions).create_order(user.id, [OrderItemRequest(product.id, 1)])

    def test_deadline_expiring_while_blocked(self, user, product, held_write_lock, impatient_transactions):
        with pytest.raises(DeadlineExceeded):
            OrderService(impatient_transactions).create_order(
                user.id, [OrderItemRequest(product.id, 1)], deadline=Deadline.after(0.01)
            )


class TestWorkflowAgainstContracts:
    """The workflow only talks to the repository contracts."""

    @pytest.fixture
    def repos(self):
        return mock.Mock()

    @pytest.fixture
    def fake_transactions(self, repos):
        manager = mock.Mock()
        manager.with_transaction.side_effect = lambda work, deadline=None: work(repos)
        return manager

    def test_empty_request_never_opens_a_transaction(self, fake_transactions):
        with pytest.raises(OrderMustHaveItems):
            OrderService(fake_transactions).create_order(uuid.uuid4(), [])
        fake_transactions.with_transaction.assert_not_called()

    def test_products_are_locked_in_request_order(self, fake_transactions, repos):
        products = {pid: Product(id=pid, description=f"p{n}", price=10, quantity=5)
                    for n, pid in enumerate([uuid.uuid4(), uuid.uuid4(), uuid.uuid4()])}
        repos.products.get_by_id_for_update.side_effect = lambda pid: products[pid]
        requested = list(products)[::-1]

        order = OrderService(fake_transactions).create_order(
            uuid.uuid4(), [OrderItemRequest(pid, 2) for pid in requested]
        )

        locked = [c.args[0] for c in repos.products.get_by_id_for_update.call_args_list]
        assert locked == requested
        assert [c.args[0].id for c in repos.products.update.call_args_list] == requested
        repos.orders.create.assert_called_once_with(order)
        assert all(p.quantity == 3 for p in products.values())
        repos.products.get_by_id.assert_not_called()

    def test_user_is_checked_before_any_lock(self, fake_transactions, repos):
        repos.users.get_by_id.side_effect = UserNotFound()
        with pytest.raises(UserNotFound):
            OrderService(fake_transactions).create_order(uuid.uuid4(), [OrderItemRequest(uuid.uuid4(), 1)])
        repos.products.get_by_id_for_update.assert_not_called()
        repos.orders.create.assert_not_called()
