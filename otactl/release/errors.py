"""Error taxonomy for the release bounded context.

Every refusal is a ``ReleaseError`` value with a stable ``kind`` and a fixed
message template, so tooling and tests can match on either. Constructors
below are the only place message text is written.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ErrorKind = Literal[
    # resolution (account collaborator)
    "app_not_found",
    "deployment_not_found",
    "app_conflict",
    "deployment_conflict",
    "collaborator_not_found",
    "collaborator_conflict",
    # input validation
    "invalid_semver",
    "invalid_option",
    "invalid_rollout",
    "invalid_format",
    "bundle_not_found",
    "bundle_empty",
    # release rules
    "binary_zip_rejected",
    "release_identical",
    "rollback_in_progress",
    "deployment_no_releases",
    "patch_label_not_found",
    "patch_none_specified",
    "rollout_against_full",
    "rollout_must_increase",
    "promote_no_releases",
    "rollback_no_releases",
    "rollback_no_prior_releases",
    "rollback_label_not_found",
    "rollback_already_latest",
    # store
    "not_found",
    "history_corrupt",
    "storage_failed",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Canonical error payload, rendered by ``output.errors.CommandValidator``."""

    kind: ErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message


# -----------------------------------------------------------------------------
# Resolution
# -----------------------------------------------------------------------------


def app_not_found(app_name: str) -> ReleaseError:
    return ReleaseError("app_not_found", f'App "{app_name}" does not exist.')


def app_conflict(app_name: str) -> ReleaseError:
    return ReleaseError("app_conflict", f"An app named '{app_name}' already exists.")


def deployment_not_found(deployment_name: str) -> ReleaseError:
    return ReleaseError(
        "deployment_not_found", f'Deployment "{deployment_name}" does not exist.'
    )


def deployment_conflict(deployment_name: str) -> ReleaseError:
    return ReleaseError(
        "deployment_conflict", f"A deployment named '{deployment_name}' already exists."
    )


def collaborator_not_found(email: str, app_name: str) -> ReleaseError:
    return ReleaseError(
        "collaborator_not_found",
        f'The user "{email}" is not a collaborator on the "{app_name}" app.',
    )


def collaborator_conflict(email: str, app_name: str) -> ReleaseError:
    return ReleaseError(
        "collaborator_conflict",
        f'The user "{email}" is already a collaborator on the "{app_name}" app.',
    )


# -----------------------------------------------------------------------------
# Input validation
# -----------------------------------------------------------------------------


def invalid_semver(value: str) -> ReleaseError:
    return ReleaseError(
        "invalid_semver",
        f'"{value}" is not a valid target binary version range.',
        hint='use a semver range such as "1.0.0", "*" or "^1.2.3"',
    )


def invalid_option(name: str, value: object, expected: str) -> ReleaseError:
    return ReleaseError(
        "invalid_option", f'Invalid value {value!r} for "{name}": expected {expected}.'
    )


def invalid_rollout(value: object) -> ReleaseError:
    return ReleaseError(
        "invalid_rollout",
        f"Rollout value must be an integer between 1 and 100 inclusive, got {value!r}.",
    )


def invalid_format(value: str) -> ReleaseError:
    return ReleaseError(
        "invalid_format",
        f'Invalid format "{value}".',
        hint="valid formats are: table, json",
    )


def bundle_not_found(path: str) -> ReleaseError:
    return ReleaseError(
        "bundle_not_found", f'Unable to find or read "{path}" in the CWD or at the specified path.'
    )


def bundle_empty(path: str) -> ReleaseError:
    return ReleaseError("bundle_empty", f'The update contents at "{path}" are empty.')


# -----------------------------------------------------------------------------
# Release rules
# -----------------------------------------------------------------------------


def binary_zip_rejected() -> ReleaseError:
    return ReleaseError(
        "binary_zip_rejected",
        "It is unnecessary to package releases in a .zip or binary file. Please specify the "
        "direct path to the update content's directory or file.",
    )


def release_identical() -> ReleaseError:
    return ReleaseError(
        "release_identical",
        "The uploaded package is identical to the contents of the specified deployment's "
        "current release.",
        hint="pass --no-duplicate-release-error to treat this as a warning",
    )


def rollback_in_progress(label: str) -> ReleaseError:
    return ReleaseError(
        "rollback_in_progress",
        "Please update the previous release to 100% rollout before releasing a new package.",
        hint=f'release "{label}" is still rolling out',
    )


def deployment_no_releases() -> ReleaseError:
    return ReleaseError("deployment_no_releases", "Deployment has no releases.")


def patch_label_not_found(label: str) -> ReleaseError:
    return ReleaseError(
        "patch_label_not_found", f'Release not found for given label "{label}".'
    )


def patch_none_specified() -> ReleaseError:
    return ReleaseError(
        "patch_none_specified", "At least one property must be specified to patch a release."
    )


def rollout_against_full() -> ReleaseError:
    return ReleaseError(
        "rollout_against_full", "Cannot update rollout value for a completed rollout release."
    )


def rollout_must_increase(current: int) -> ReleaseError:
    return ReleaseError(
        "rollout_must_increase",
        f'Rollout value must be greater than "{current}", the existing value.',
    )


def promote_no_releases() -> ReleaseError:
    return ReleaseError(
        "promote_no_releases", "Cannot promote from a deployment with no enabled releases."
    )


def rollback_no_releases() -> ReleaseError:
    return ReleaseError(
        "rollback_no_releases",
        "Cannot perform rollback because there are no releases on this deployment.",
    )


def rollback_no_prior_releases() -> ReleaseError:
    return ReleaseError(
        "rollback_no_prior_releases",
        "Cannot perform rollback because there are no prior releases to rollback to.",
    )


def rollback_label_not_found(label: str) -> ReleaseError:
    return ReleaseError(
        "rollback_label_not_found", f'Label "{label}" does not exist in the deployment history.'
    )


def rollback_already_latest(label: str) -> ReleaseError:
    return ReleaseError(
        "rollback_already_latest",
        f'Cannot perform rollback because "{label}" is already the latest release.',
    )


# -----------------------------------------------------------------------------
# Store
# -----------------------------------------------------------------------------


def not_found(label: str) -> ReleaseError:
    return ReleaseError("not_found", f'Release "{label}" is not in the deployment history.')


def history_corrupt(detail: str) -> ReleaseError:
    return ReleaseError(
        "history_corrupt",
        f"Package history is corrupt: {detail}",
        hint="repair the store file by hand; otactl will not rewrite a corrupt history",
    )


def storage_failed(detail: str, path: str | None = None) -> ReleaseError:
    return ReleaseError("storage_failed", f"Account store unavailable: {detail}", hint=path)
