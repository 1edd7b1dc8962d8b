"""Option bags for the mutating release operations.

Each operation gets an explicit dataclass; ``None`` means "not specified"
and defaults are applied by the state machine, never by presence checks on
a dict. Values arriving from untyped sources (CLI strings, JSON) go through
``parse_bool_option`` / ``parse_rollout_option`` first.
"""

from __future__ import annotations

from dataclasses import dataclass

from otactl.core.result import Err, Ok, Result
from otactl.release import errors
from otactl.release.errors import ReleaseError
from otactl.release.model import ROLLOUT_FULL

_TRUE = {"true", "yes", "y", "1", "on"}
_FALSE = {"false", "no", "n", "0", "off"}


@dataclass(frozen=True, slots=True)
class ReleaseOptions:
    description: str | None = None
    is_disabled: bool | None = None
    is_mandatory: bool | None = None
    rollout: int | None = None
    no_duplicate_release_error: bool = False


@dataclass(frozen=True, slots=True)
class PatchOptions:
    """``label`` selects the release (latest when None); the rest are the patch."""

    label: str | None = None
    description: str | None = None
    is_disabled: bool | None = None
    is_mandatory: bool | None = None
    rollout: int | None = None
    app_version: str | None = None

    def has_changes(self) -> bool:
        return any(
            value is not None
            for value in (
                self.description,
                self.is_disabled,
                self.is_mandatory,
                self.rollout,
                self.app_version,
            )
        )


@dataclass(frozen=True, slots=True)
class PromoteOptions:
    description: str | None = None
    is_disabled: bool | None = None
    is_mandatory: bool | None = None
    rollout: int | None = None
    app_version: str | None = None
    no_duplicate_release_error: bool = False


def parse_bool_option(name: str, raw: str | None) -> Result[bool | None, ReleaseError]:
    """Parse a CLI boolean such as ``--disabled true``; None passes through."""
    if raw is None:
        return Ok(None)
    value = raw.strip().lower()
    if value in _TRUE:
        return Ok(True)
    if value in _FALSE:
        return Ok(False)
    return Err(errors.invalid_option(name, raw, "a boolean (true or false)"))


def parse_rollout_option(raw: str | None) -> Result[int | None, ReleaseError]:
    """Parse ``--rollout 25`` or ``--rollout 25%``; range is checked later."""
    if raw is None:
        return Ok(None)
    text = raw.strip().removesuffix("%").strip()
    try:
        return Ok(int(text))
    except ValueError:
        return Err(errors.invalid_rollout(raw))


def check_flag(name: str, value: object) -> Result[None, ReleaseError]:
    """Flags must be real booleans; the string "true" is not accepted here."""
    if value is None or isinstance(value, bool):
        return Ok(None)
    return Err(errors.invalid_option(name, value, "a boolean"))


def check_rollout_range(value: object) -> Result[int, ReleaseError]:
    if isinstance(value, bool) or not isinstance(value, int):
        return Err(errors.invalid_rollout(value))
    if not 0 < value <= ROLLOUT_FULL:
        return Err(errors.invalid_rollout(value))
    return Ok(value)
