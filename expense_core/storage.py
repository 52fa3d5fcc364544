"""Local key-value storage media backing the expense store."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from .exceptions import StorageUnavailableError

KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{1,100}$")


class KeyValueStorage(ABC):
    """String-keyed, string-valued storage in the style of browser localStorage."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value or None when the key is absent."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete ``key``; absent keys are ignored."""


def _check_quota(key: str, value: str, quota_bytes: Optional[int]) -> None:
    if quota_bytes is None:
        return
    size = len(key.encode("utf-8")) + len(value.encode("utf-8"))
    if size > quota_bytes:
        raise StorageUnavailableError(
            f"Storage quota exceeded writing {key!r} ({size} > {quota_bytes} bytes)"
        )


class MemoryStorage(KeyValueStorage):
    """Process-local storage, used for tests and ephemeral sessions."""

    def __init__(self, quota_bytes: Optional[int] = None) -> None:
        self._items: Dict[str, str] = {}
        self._quota_bytes = quota_bytes
        self.available = True

    def get_item(self, key: str) -> Optional[str]:
        self._ensure_available()
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._ensure_available()
        _check_quota(key, value, self._quota_bytes)
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._ensure_available()
        self._items.pop(key, None)

    def _ensure_available(self) -> None:
        if not self.available:
            raise StorageUnavailableError("Storage is disabled")


class JSONFileStorage(KeyValueStorage):
    """Directory-backed storage with crash-safe writes, one file per key."""

    def __init__(self, base_path: Path, quota_bytes: Optional[int] = None) -> None:
        self._base_path = base_path
        self._quota_bytes = quota_bytes
        try:
            self._base_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageUnavailableError(f"Unable to create {base_path}") from exc

    def get_item(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageUnavailableError(f"Unable to read from {path}") from exc

    def set_item(self, key: str, value: str) -> None:
        _check_quota(key, value, self._quota_bytes)
        path = self._path_for(key)
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            with temp_path.open("w", encoding="utf-8") as handle:
                handle.write(value)
                handle.flush()
            # Path.replace is an atomic rename on POSIX.
            temp_path.replace(path)
        except OSError as exc:
            temp_path.unlink(missing_ok=True)
            raise StorageUnavailableError(f"Unable to write to {path}") from exc

    def remove_item(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise StorageUnavailableError(f"Unable to remove {path}") from exc

    def _path_for(self, key: str) -> Path:
        if not KEY_PATTERN.fullmatch(key) or key.startswith("."):
            raise StorageUnavailableError(f"Invalid storage key {key!r}")
        return self._base_path / f"{key}.json"

    @property
    def base_path(self) -> Path:
        return self._base_path
