"""Persistence store for the expense collection.

The whole collection lives as one JSON array under a single storage key and
is rewritten in full on every mutation. Storage failures never propagate:
they are logged and reported through :class:`StoreStatus` so the caller can
keep working on an empty or unsaved collection and decide whether to warn.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import InvalidOperation
from enum import Enum
from typing import Callable, Dict, Iterable, Iterator, List, Mapping, Sequence, Tuple
from uuid import uuid4

from .exceptions import PersistenceError, RecordNotFoundError, ValidationError
from .models import Expense
from .storage import KeyValueStorage
from .validators import validate_expense, validate_fields

logger = logging.getLogger(__name__)

STORAGE_KEY = "expense-tracker-data"


class StoreStatus(str, Enum):
    OK = "ok"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class StoreResult:
    """The full collection after a store operation, tagged with storage health."""

    expenses: Tuple[Expense, ...]
    status: StoreStatus = StoreStatus.OK

    @property
    def ok(self) -> bool:
        return self.status is StoreStatus.OK

    def __len__(self) -> int:
        return len(self.expenses)

    def __iter__(self) -> Iterator[Expense]:
        return iter(self.expenses)

    def __getitem__(self, index: int) -> Expense:
        return self.expenses[index]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _combine(first: StoreStatus, second: StoreStatus) -> StoreStatus:
    if first is StoreStatus.UNAVAILABLE or second is StoreStatus.UNAVAILABLE:
        return StoreStatus.UNAVAILABLE
    return StoreStatus.OK


class ExpenseStore:
    """Loads, mutates and saves the expense collection as one blob."""

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = STORAGE_KEY,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._storage = storage
        self._key = key
        self._clock = clock

    # Public API -----------------------------------------------------------
    def load(self) -> StoreResult:
        """Return the persisted collection in insertion order."""
        try:
            raw = self._storage.get_item(self._key)
        except PersistenceError as exc:
            logger.warning("Error loading expenses from storage: %s", exc)
            return StoreResult((), StoreStatus.UNAVAILABLE)

        if raw is None:
            return StoreResult(())

        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("Corrupted expense data under %r: %s", self._key, exc)
            return StoreResult((), StoreStatus.UNAVAILABLE)

        if not isinstance(payload, list):
            logger.warning("Expected list payload under %r, got %s", self._key, type(payload).__name__)
            return StoreResult((), StoreStatus.UNAVAILABLE)

        return StoreResult(tuple(self._hydrate(payload)))

    def save(self, expenses: Iterable[Expense]) -> StoreStatus:
        """Overwrite the persisted blob with ``expenses``."""
        blob = json.dumps([expense.to_dict() for expense in expenses])
        try:
            self._storage.set_item(self._key, blob)
        except PersistenceError as exc:
            logger.error("Error saving expenses to storage: %s", exc)
            return StoreStatus.UNAVAILABLE
        return StoreStatus.OK

    def add(self, expense: Expense) -> StoreResult:
        """Append a complete record; invalid records raise before anything is written."""
        expense = validate_expense(expense)
        loaded = self.load()
        if any(existing.id == expense.id for existing in loaded):
            raise ValidationError(
                f"Expense {expense.id} already exists", {"id": "Expense id must be unique"}
            )
        expenses = list(loaded.expenses)
        expenses.append(expense)
        logger.debug("Adding expense %s", expense.id)
        return self._persist(expenses, loaded.status)

    def create(self, payload: Mapping[str, object]) -> StoreResult:
        """Validate a form submission and add it as a new expense."""
        cleaned = validate_fields(payload)
        now = self._clock()
        expense = Expense(
            id=str(uuid4()),
            created_at=now,
            updated_at=now,
            **cleaned,  # type: ignore[arg-type]
        )
        return self.add(expense)

    def update(self, expense_id: str, changes: Mapping[str, object]) -> StoreResult:
        """Merge editable ``changes`` into the matching expense.

        Unknown ids leave the collection untouched. ``id`` and the timestamps
        are never taken from ``changes``.
        """
        cleaned = validate_fields(changes, partial=True)
        loaded = self.load()
        expenses = list(loaded.expenses)
        for index, existing in enumerate(expenses):
            if existing.id == expense_id:
                break
        else:
            logger.debug("Update skipped, expense %s not found", expense_id)
            return loaded

        # updated_at never moves backwards, even if the clock does.
        updated_at = max(self._clock(), existing.updated_at)
        expenses[index] = dataclasses.replace(existing, updated_at=updated_at, **cleaned)
        logger.debug("Updating expense %s", expense_id)
        return self._persist(expenses, loaded.status)

    def delete(self, expense_id: str) -> StoreResult:
        loaded = self.load()
        remaining = [expense for expense in loaded if expense.id != expense_id]
        if len(remaining) == len(loaded):
            logger.debug("Delete skipped, expense %s not found", expense_id)
            return loaded
        logger.debug("Deleting expense %s", expense_id)
        return self._persist(remaining, loaded.status)

    def clear(self) -> StoreStatus:
        """Remove every persisted expense."""
        try:
            self._storage.remove_item(self._key)
        except PersistenceError as exc:
            logger.error("Error clearing expenses from storage: %s", exc)
            return StoreStatus.UNAVAILABLE
        return StoreStatus.OK

    def get(self, expense_id: str) -> Expense:
        """Return an expense or raise if it does not exist."""
        for expense in self.load():
            if expense.id == expense_id:
                return expense
        raise RecordNotFoundError(f"Expense {expense_id} not found")

    # Internal helpers -----------------------------------------------------
    def _persist(self, expenses: Sequence[Expense], load_status: StoreStatus) -> StoreResult:
        status = self.save(expenses)
        return StoreResult(tuple(expenses), _combine(load_status, status))

    def _hydrate(self, payload: List[object]) -> Iterator[Expense]:
        seen: Dict[str, int] = {}
        for position, item in enumerate(payload):
            if not isinstance(item, dict):
                logger.warning("Skipping stored expense #%d: not an object", position)
                continue
            try:
                # Raw check first so missing or null fields are not coerced by from_dict.
                validate_fields(item)
                expense = validate_expense(Expense.from_dict(item))
            except (KeyError, TypeError, ValueError, InvalidOperation) as exc:
                logger.warning("Skipping stored expense #%d: %s", position, exc)
                continue
            if expense.id in seen:
                logger.warning(
                    "Skipping stored expense #%d: duplicate id %s (first at #%d)",
                    position,
                    expense.id,
                    seen[expense.id],
                )
                continue
            seen[expense.id] = position
            yield expense
