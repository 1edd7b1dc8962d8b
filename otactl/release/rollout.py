"""Rollout percentage rules.

A release with ``rollout < 100`` is a staged rollout. While an enabled
staged rollout is the deployment's current release, nothing new may be
released on top of it; its rollout can only move up, and a completed
(100%) rollout cannot be reopened.
"""

from __future__ import annotations

from otactl.core.result import Err, Ok, Result
from otactl.release import errors
from otactl.release.errors import ReleaseError
from otactl.release.model import ROLLOUT_FULL, Package
from otactl.release.options import check_rollout_range


def validate_new_release(
    requested_rollout: int | None,
    current: Package | None,
) -> Result[int, ReleaseError]:
    """Return the rollout for a release appended on top of ``current``.

    ``current`` is the deployment's latest package, whatever binary version
    it targets. A disabled staged rollout no longer reaches clients and does
    not block.
    """
    rollout = ROLLOUT_FULL if requested_rollout is None else requested_rollout
    checked = check_rollout_range(rollout)
    if isinstance(checked, Err):
        return checked

    if current is not None and current.is_pending_rollout:
        return Err(errors.rollback_in_progress(current.label))

    return Ok(checked.value)


def validate_patch(current: Package, requested_rollout: int) -> Result[int, ReleaseError]:
    """Return the new rollout for ``current``; it may only increase."""
    checked = check_rollout_range(requested_rollout)
    if isinstance(checked, Err):
        return checked

    if current.rollout == ROLLOUT_FULL:
        return Err(errors.rollout_against_full())

    if checked.value <= current.rollout:
        return Err(errors.rollout_must_increase(current.rollout))

    return Ok(min(checked.value, ROLLOUT_FULL))
