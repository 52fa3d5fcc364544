"""Shared fixtures for the expense tracker tests."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from api.app import create_app
from expense_core.models import Category, Expense
from expense_core.storage import MemoryStorage
from expense_core.store import ExpenseStore


class FakeClock:
    """Controllable clock returning UTC-aware datetimes."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 6, 20, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage, clock):
    return ExpenseStore(storage, clock=clock)


@pytest.fixture
def make_expense():
    counter = {"n": 0}

    def _make(category=Category.FOOD, amount="10.00", when=date(2024, 6, 1), description="Lunch"):
        counter["n"] += 1
        stamp = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)
        return Expense(
            id=f"exp-{counter['n']}",
            amount=Decimal(amount),
            category=Category(category),
            description=description,
            date=when,
            created_at=stamp,
            updated_at=stamp,
        )

    return _make


@pytest.fixture
def client(storage, clock):
    app = create_app(storage=storage, clock=clock)
    app.config.update(TESTING=True)
    return app.test_client()
