import pytest

from orderflow.core.deadline import Deadline
from orderflow.domain.errors import DeadlineExceeded


def test_no_expiry():
    deadline = Deadline.after(None)
    assert deadline.remaining() is None
    assert not deadline.expired()
    deadline.check()


def test_non_positive_means_no_expiry():
    assert Deadline.after(0).expires_at is None


def test_expired():
    deadline = Deadline(expires_at=0.0)
    assert deadline.expired()
    assert deadline.remaining() == 0.0
    with pytest.raises(DeadlineExceeded):
        deadline.check()


def test_future_deadline_has_budget():
    deadline = Deadline.after(60)
    assert 0 < deadline.remaining() <= 60
    deadline.check()


def test_cancel():
    deadline = Deadline.after(60)
    deadline.cancel()
    assert deadline.cancelled
    with pytest.raises(DeadlineExceeded, match="cancelled"):
        deadline.check()
