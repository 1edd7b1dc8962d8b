"""The release state machine.

Four mutating entry points (release, patch, promote, rollback) plus
history clearing, each acting on ``PackageHistoryStore`` instances that the
caller loaded and will persist. Every entry point either performs exactly
one store mutation or returns ``Err`` with the store untouched: all checks
run before the single ``append``/``replace``/``clear`` call.

Input problems (bad flags, rollout out of range, invalid semver) are
reported before any rule that depends on the history.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, replace

from otactl.core.result import Err, Ok, Result
from otactl.release import errors
from otactl.release.errors import ReleaseError
from otactl.release.history import PackageHistoryStore
from otactl.release.model import BundleDescriptor, Package, ReleaseCandidate
from otactl.release.options import (
    PatchOptions,
    PromoteOptions,
    ReleaseOptions,
    check_flag,
    check_rollout_range,
)
from otactl.release.rollout import validate_new_release, validate_patch
from otactl.release.semver import is_valid_range

Clock = Callable[[], int]


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True, slots=True)
class ReleaseOutcome:
    """Result of an append-style operation.

    ``package`` is None only when ``skipped`` is set: the content was
    identical to the current release and the caller asked for that to be a
    no-op instead of an error.
    """

    package: Package | None
    skipped: bool = False


def _check_flags(
    is_disabled: object, is_mandatory: object
) -> Result[None, ReleaseError]:
    disabled = check_flag("disabled", is_disabled)
    if isinstance(disabled, Err):
        return disabled
    return check_flag("mandatory", is_mandatory)


def _check_semver(app_version: str | None) -> Result[None, ReleaseError]:
    if app_version is not None and not is_valid_range(app_version):
        return Err(errors.invalid_semver(app_version))
    return Ok(None)


class ReleaseStateMachine:
    """Applies release rules to package histories.

    Args:
        clock: epoch-milliseconds source used for promoted releases.
    """

    def __init__(self, *, clock: Clock = _now_ms) -> None:
        self._clock = clock

    # ------------------------------------------------------------------
    # Release
    # ------------------------------------------------------------------

    def release(
        self,
        store: PackageHistoryStore,
        bundle: BundleDescriptor,
        app_version: str,
        options: ReleaseOptions,
    ) -> Result[ReleaseOutcome, ReleaseError]:
        if not is_valid_range(app_version):
            return Err(errors.invalid_semver(app_version))

        flags = _check_flags(options.is_disabled, options.is_mandatory)
        if isinstance(flags, Err):
            return flags

        if options.rollout is not None:
            in_range = check_rollout_range(options.rollout)
            if isinstance(in_range, Err):
                return in_range

        if bundle.is_binary:
            return Err(errors.binary_zip_rejected())

        candidate = ReleaseCandidate(
            app_version=app_version,
            package_hash=bundle.package_hash,
            size=bundle.size,
            upload_time=bundle.upload_time,
            release_method="Upload",
            description=options.description,
            is_disabled=bool(options.is_disabled),
            is_mandatory=bool(options.is_mandatory),
        )
        return self._append_new(
            store,
            candidate,
            requested_rollout=options.rollout,
            allow_duplicate=options.no_duplicate_release_error,
        )

    # ------------------------------------------------------------------
    # Patch
    # ------------------------------------------------------------------

    def patch(
        self, store: PackageHistoryStore, options: PatchOptions
    ) -> Result[Package, ReleaseError]:
        if not options.has_changes():
            return Err(errors.patch_none_specified())

        flags = _check_flags(options.is_disabled, options.is_mandatory)
        if isinstance(flags, Err):
            return flags

        if options.rollout is not None:
            in_range = check_rollout_range(options.rollout)
            if isinstance(in_range, Err):
                return in_range

        semver = _check_semver(options.app_version)
        if isinstance(semver, Err):
            return semver

        latest = store.latest()
        if latest is None:
            return Err(errors.deployment_no_releases())

        target = latest
        if options.label is not None:
            found = store.find(options.label)
            if found is None:
                return Err(errors.patch_label_not_found(options.label))
            target = found

        updated = target
        if options.rollout is not None:
            rollout = validate_patch(target, options.rollout)
            if isinstance(rollout, Err):
                return rollout
            updated = replace(updated, rollout=rollout.value)

        if options.description is not None:
            updated = replace(updated, description=options.description)
        if options.is_disabled is not None:
            updated = replace(updated, is_disabled=options.is_disabled)
        if options.is_mandatory is not None:
            updated = replace(updated, is_mandatory=options.is_mandatory)
        if options.app_version is not None:
            updated = replace(updated, app_version=options.app_version)

        return store.replace(target.label, updated)

    # ------------------------------------------------------------------
    # Promote
    # ------------------------------------------------------------------

    def promote(
        self,
        source: PackageHistoryStore,
        destination: PackageHistoryStore,
        options: PromoteOptions,
    ) -> Result[ReleaseOutcome, ReleaseError]:
        flags = _check_flags(options.is_disabled, options.is_mandatory)
        if isinstance(flags, Err):
            return flags

        if options.rollout is not None:
            in_range = check_rollout_range(options.rollout)
            if isinstance(in_range, Err):
                return in_range

        semver = _check_semver(options.app_version)
        if isinstance(semver, Err):
            return semver

        promoted = source.latest_enabled()
        if promoted is None:
            return Err(errors.promote_no_releases())

        candidate = ReleaseCandidate(
            app_version=options.app_version
            if options.app_version is not None
            else promoted.app_version,
            package_hash=promoted.package_hash,
            size=promoted.size,
            upload_time=self._clock(),
            release_method="Promote",
            description=options.description
            if options.description is not None
            else promoted.description,
            is_disabled=options.is_disabled
            if options.is_disabled is not None
            else promoted.is_disabled,
            is_mandatory=options.is_mandatory
            if options.is_mandatory is not None
            else promoted.is_mandatory,
        )
        return self._append_new(
            destination,
            candidate,
            requested_rollout=options.rollout,
            allow_duplicate=options.no_duplicate_release_error,
        )

    # ------------------------------------------------------------------
    # Rollback
    # ------------------------------------------------------------------

    def rollback(
        self, store: PackageHistoryStore, target_label: str | None = None
    ) -> Result[Package, ReleaseError]:
        latest = store.latest()
        if latest is None:
            return Err(errors.rollback_no_releases())

        if target_label is None:
            target = store.previous()
            if target is None:
                return Err(errors.rollback_no_prior_releases())
        else:
            found = store.find(target_label)
            if found is None:
                return Err(errors.rollback_label_not_found(target_label))
            if found.label == latest.label:
                return Err(errors.rollback_already_latest(target_label))
            target = found

        return store.append(target.to_candidate(release_method="Rollback"))

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def clear(self, store: PackageHistoryStore) -> None:
        """Empty the history; the next release is labelled v1 again."""
        store.clear()

    # ------------------------------------------------------------------

    def _append_new(
        self,
        store: PackageHistoryStore,
        candidate: ReleaseCandidate,
        *,
        requested_rollout: int | None,
        allow_duplicate: bool,
    ) -> Result[ReleaseOutcome, ReleaseError]:
        """Shared tail of release and promote: duplicate guard, rollout rule, append."""
        current = store.latest()
        if current is not None and current.package_hash == candidate.package_hash:
            if allow_duplicate:
                return Ok(ReleaseOutcome(package=None, skipped=True))
            return Err(errors.release_identical())

        rollout = validate_new_release(requested_rollout, current)
        if isinstance(rollout, Err):
            return rollout

        appended = store.append(replace(candidate, rollout=rollout.value))
        if isinstance(appended, Err):
            return appended
        return Ok(ReleaseOutcome(package=appended.value))
