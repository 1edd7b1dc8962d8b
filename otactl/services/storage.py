"""Persistence of the account registry.

``mutate`` is the only write path: it holds the storage locks across
load, change and save, so label assignment and the rollout check (both
read-then-write on a deployment's latest release) are serialized. A change
callback returning ``Err`` leaves the stored document untouched.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Protocol, TypeVar

from otactl.core.result import Err, Ok, Result
from otactl.platform.files import atomic_write_json, exclusive_lock
from otactl.release import errors
from otactl.release.errors import ReleaseError
from otactl.services.accounts import AccountRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AccountStorage(Protocol):
    def read(self) -> Result[AccountRegistry, ReleaseError]:
        """Return a private snapshot; changing it does not touch the store."""
        ...

    def mutate(
        self, change: Callable[[AccountRegistry], Result[T, ReleaseError]]
    ) -> Result[T, ReleaseError]:
        """Apply ``change`` to a fresh snapshot and persist it if it returns Ok."""
        ...


class JsonAccountStorage:
    """Registry stored as one JSON document, replaced atomically on every write.

    Writers take an exclusive lock on ``<store>.lock`` next to the document,
    so separate ``otactl`` processes apply their mutations one at a time.
    """

    def __init__(self, path: Path, *, current_account: str) -> None:
        self.path = path
        self.lock_path = path.with_name(f"{path.name}.lock")
        self._current_account = current_account
        self._lock = threading.RLock()

    def read(self) -> Result[AccountRegistry, ReleaseError]:
        with self._lock:
            return self._load()

    def mutate(
        self, change: Callable[[AccountRegistry], Result[T, ReleaseError]]
    ) -> Result[T, ReleaseError]:
        with self._lock:
            try:
                with exclusive_lock(self.lock_path):
                    return self._mutate_locked(change)
            except OSError as e:
                return Err(errors.storage_failed(f"cannot lock store: {e}", str(self.lock_path)))

    def _mutate_locked(
        self, change: Callable[[AccountRegistry], Result[T, ReleaseError]]
    ) -> Result[T, ReleaseError]:
        loaded = self._load()
        if isinstance(loaded, Err):
            return loaded
        registry = loaded.value

        outcome = change(registry)
        if isinstance(outcome, Err):
            logger.debug("store unchanged: %s", outcome.error.kind)
            return outcome

        try:
            atomic_write_json(self.path, registry.to_wire())
        except OSError as e:
            return Err(errors.storage_failed(f"cannot write store: {e}", str(self.path)))
        logger.debug("store saved: %s", self.path)
        return outcome

    def _load(self) -> Result[AccountRegistry, ReleaseError]:
        if not self.path.exists():
            return Ok(AccountRegistry(current_account=self._current_account))

        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            return Err(errors.storage_failed(f"cannot read store: {e}", str(self.path)))

        try:
            obj: object = json.loads(text)
        except json.JSONDecodeError as e:
            return Err(errors.storage_failed(f"invalid JSON in store: {e}", str(self.path)))

        return AccountRegistry.from_wire(obj, current_account=self._current_account)


class MemoryAccountStorage:
    """In-process storage with the same snapshot semantics as the JSON file.

    The registry is kept in wire form so that readers never share objects
    with writers.
    """

    def __init__(self, *, current_account: str) -> None:
        self._current_account = current_account
        self._document: object = AccountRegistry(current_account=current_account).to_wire()
        self._lock = threading.RLock()

    def read(self) -> Result[AccountRegistry, ReleaseError]:
        with self._lock:
            return AccountRegistry.from_wire(
                self._document, current_account=self._current_account
            )

    def mutate(
        self, change: Callable[[AccountRegistry], Result[T, ReleaseError]]
    ) -> Result[T, ReleaseError]:
        with self._lock:
            loaded = self.read()
            if isinstance(loaded, Err):
                return loaded
            outcome = change(loaded.value)
            if isinstance(outcome, Ok):
                self._document = loaded.value.to_wire()
            return outcome
