"""Tests for account storage backends."""

from __future__ import annotations

import json
import threading
from collections.abc import Callable
from pathlib import Path

import pytest

from otactl.core.result import Err, Ok, Result
from otactl.release import errors
from otactl.release.errors import ReleaseError
from otactl.services.accounts import AccountRegistry
from otactl.services.storage import JsonAccountStorage, MemoryAccountStorage

ME = "me@example.com"


def _add(name: str) -> Callable[[AccountRegistry], Result[str, ReleaseError]]:
    def change(registry: AccountRegistry) -> Result[str, ReleaseError]:
        return registry.add_app(name).map(lambda app: app.name)

    return change


class TestJsonAccountStorage:
    def test_missing_file_is_empty_registry(self, tmp_path: Path) -> None:
        storage = JsonAccountStorage(tmp_path / "store.json", current_account=ME)
        result = storage.read()
        assert isinstance(result, Ok)
        assert result.value.list_apps() == ()
        assert not (tmp_path / "store.json").exists()

    def test_mutate_persists(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "store.json"
        storage = JsonAccountStorage(path, current_account=ME)

        assert storage.mutate(_add("A")) == Ok("A")

        data = json.loads(path.read_text(encoding="utf-8"))
        assert [app["name"] for app in data["apps"]] == ["A"]
        reread = JsonAccountStorage(path, current_account=ME).read().unwrap()
        assert reread.get_app("A").unwrap().owner == ME

    def test_err_leaves_file_untouched(self, tmp_path: Path) -> None:
        path = tmp_path / "store.json"
        storage = JsonAccountStorage(path, current_account=ME)
        storage.mutate(_add("A"))
        before = path.read_bytes()

        def failing(registry: AccountRegistry) -> Result[None, ReleaseError]:
            registry.remove_app("A")
            return Err(errors.release_identical())

        result = storage.mutate(failing)
        assert isinstance(result, Err)
        assert path.read_bytes() == before

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "store.json"
        path.write_text("{not json", encoding="utf-8")
        result = JsonAccountStorage(path, current_account=ME).read()
        assert isinstance(result, Err)
        assert result.error.kind == "storage_failed"
        assert result.error.hint == str(path)

    def test_read_returns_snapshot(self, tmp_path: Path) -> None:
        storage = JsonAccountStorage(tmp_path / "store.json", current_account=ME)
        storage.mutate(_add("A"))
        snapshot = storage.read().unwrap()
        snapshot.remove_app("A")
        assert [a.name for a in storage.read().unwrap().list_apps()] == ["A"]

    def test_concurrent_mutations_are_serialized(self, tmp_path: Path) -> None:
        storage = JsonAccountStorage(tmp_path / "store.json", current_account=ME)
        names = [f"app-{i}" for i in range(16)]
        threads = [threading.Thread(target=storage.mutate, args=(_add(n),)) for n in names]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        stored = sorted(a.name for a in storage.read().unwrap().list_apps())
        assert stored == sorted(names)

    def test_separate_instances_do_not_lose_updates(self, tmp_path: Path) -> None:
        path = tmp_path / "store.json"
        first = JsonAccountStorage(path, current_account=ME)
        second = JsonAccountStorage(path, current_account=ME)
        entered = threading.Event()
        proceed = threading.Event()

        def slow_add(registry: AccountRegistry) -> Result[str, ReleaseError]:
            entered.set()
            proceed.wait(timeout=5)
            return registry.add_app("A").map(lambda app: app.name)

        writer = threading.Thread(target=first.mutate, args=(slow_add,))
        writer.start()
        assert entered.wait(timeout=5)

        contender = threading.Thread(target=second.mutate, args=(_add("B"),))
        contender.start()
        contender.join(timeout=0.2)
        assert contender.is_alive()

        proceed.set()
        writer.join(timeout=5)
        contender.join(timeout=5)

        reread = JsonAccountStorage(path, current_account=ME).read().unwrap()
        stored = sorted(a.name for a in reread.list_apps())
        assert stored == ["A", "B"]
        assert (tmp_path / "store.json.lock").exists()

    def test_lock_failure(self, tmp_path: Path) -> None:
        path = tmp_path / "store.json"
        (tmp_path / "store.json.lock").mkdir()

        result = JsonAccountStorage(path, current_account=ME).mutate(_add("A"))

        assert isinstance(result, Err)
        assert result.error.kind == "storage_failed"
        assert not path.exists()

    def test_write_failure(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        import otactl.services.storage as storage_module

        def boom(path: Path, payload: object) -> None:
            raise PermissionError("read-only")

        monkeypatch.setattr(storage_module, "atomic_write_json", boom)
        storage = JsonAccountStorage(tmp_path / "store.json", current_account=ME)

        result = storage.mutate(_add("A"))
        assert isinstance(result, Err)
        assert result.error.kind == "storage_failed"


class TestMemoryAccountStorage:
    def test_mutate_and_read(self) -> None:
        storage = MemoryAccountStorage(current_account=ME)
        assert storage.mutate(_add("A")) == Ok("A")
        assert [a.name for a in storage.read().unwrap().list_apps()] == ["A"]

    def test_err_discards_changes(self) -> None:
        storage = MemoryAccountStorage(current_account=ME)

        def failing(registry: AccountRegistry) -> Result[None, ReleaseError]:
            registry.add_app("A")
            return Err(errors.app_conflict("A"))

        storage.mutate(failing)
        assert storage.read().unwrap().list_apps() == ()
