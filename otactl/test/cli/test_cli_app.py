from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path

import pytest
import typer

from otactl import __version__
from otactl.cli.app import _main  # pyright: ignore[reportPrivateUsage]
from otactl.core.config import CONFIG_ENV, STORE_ENV


@pytest.fixture(autouse=True)
def _restore_logger() -> Iterator[None]:
    logger = logging.getLogger("otactl")
    level, handlers = logger.level, list(logger.handlers)
    yield
    logger.setLevel(level)
    logger.handlers[:] = handlers


def test_version_exits_cleanly(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(typer.Exit) as exc:
        _main(version=True, config=None, store=None, verbose=False)
    assert exc.value.exit_code == 0
    assert capsys.readouterr().out.strip() == __version__


def test_paths_are_exported(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv(CONFIG_ENV, "")
    monkeypatch.setenv(STORE_ENV, "")

    _main(
        version=False,
        config=tmp_path / "config.toml",
        store=tmp_path / "store.json",
        verbose=True,
    )

    assert os.environ[CONFIG_ENV] == str(tmp_path / "config.toml")
    assert os.environ[STORE_ENV] == str(tmp_path / "store.json")
    assert logging.getLogger("otactl").level == logging.DEBUG
