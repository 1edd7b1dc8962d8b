from __future__ import annotations

import pytest

from otactl.release.semver import is_valid_range


@pytest.mark.parametrize(
    "value",
    [
        "1.0.0",
        "v1.2.3",
        "1.2",
        "1",
        "1.x",
        "1.2.X",
        "*",
        "^1.2.3",
        "~1.2",
        "~> 1.2",
        ">=1.0.0 <2.0.0",
        ">= 1.0.0",
        "1.0.0 - 2.0.0",
        "1.2.3-beta.1",
        "1.2.3+build.5",
        "1.x || 2.x",
        "1.x || ",
    ],
)
def test_valid_ranges(value: str) -> None:
    assert is_valid_range(value)


@pytest.mark.parametrize(
    "value",
    [
        "",
        "   ",
        "abc",
        "1.0.0.0",
        "01.0.0",
        "1..0",
        ">>1.0.0",
        "1.0.0 -",
        "1.2.3-",
    ],
)
def test_invalid_ranges(value: str) -> None:
    assert not is_valid_range(value)
