"""Error presentation and success confirmations.

Centralized error formatting and exit code mapping for consistent UX. The
``CommandValidator`` holds no business logic: it turns outcomes produced by
the services into console lines and exit codes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from otactl.core.config import ConfigError
from otactl.core.errors import ErrorCode
from otactl.output.console import Style
from otactl.release.errors import ErrorKind, ReleaseError

if TYPE_CHECKING:
    from otactl.output.console import ConsoleProtocol
    from otactl.release.model import BundleDescriptor

__all__ = ["CommandValidator", "exit_code_for", "print_release_error"]


_USER_ERRORS: frozenset[ErrorKind] = frozenset(
    {
        "invalid_semver",
        "invalid_option",
        "invalid_rollout",
        "invalid_format",
        "bundle_empty",
        "binary_zip_rejected",
        "patch_none_specified",
    }
)
_NOT_FOUND: frozenset[ErrorKind] = frozenset(
    {
        "app_not_found",
        "deployment_not_found",
        "collaborator_not_found",
        "bundle_not_found",
        "patch_label_not_found",
        "rollback_label_not_found",
        "not_found",
    }
)
_CONFLICTS: frozenset[ErrorKind] = frozenset(
    {"app_conflict", "deployment_conflict", "collaborator_conflict", "release_identical"}
)


def exit_code_for(error: ReleaseError) -> ErrorCode:
    """Get exit code for a release error."""
    kind = error.kind
    if kind in _USER_ERRORS:
        return ErrorCode.USER_ERROR
    if kind in _NOT_FOUND:
        return ErrorCode.NOT_FOUND
    if kind in _CONFLICTS:
        return ErrorCode.CONFLICT
    match kind:
        case "storage_failed":
            return ErrorCode.IO_ERROR
        case "history_corrupt":
            return ErrorCode.INTERNAL_ERROR
        case _:
            return ErrorCode.STATE_ERROR


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


class CommandValidator:
    """Renders command outcomes on a console."""

    def __init__(self, console: ConsoleProtocol) -> None:
        self.console = console

    # -- failures -------------------------------------------------------

    def fail(self, error: ReleaseError) -> int:
        """Report ``error`` and return the exit code the command should use."""
        print_release_error(error, self.console)
        return int(exit_code_for(error))

    def fail_config(self, error: ConfigError) -> int:
        self.console.error(error.message)
        if error.path is not None:
            self.console.print(f"hint: config file {error.path}", Style.DIM)
        return int(ErrorCode.USER_ERROR)

    # -- release operations ---------------------------------------------

    def released(self, *, app_name: str, deployment_name: str, bundle: BundleDescriptor) -> None:
        what = "directory" if bundle.is_directory else "file"
        self.console.success(
            f'Successfully released an update containing the "{bundle.path}" {what} '
            f'to the "{deployment_name}" deployment of the "{app_name}" app.'
        )

    def release_skipped(self) -> None:
        self.console.warning(
            "The uploaded package was not released because it is identical to the contents "
            "of the specified deployment's current release."
        )

    def patched(self, *, app_name: str, deployment_name: str, label: str) -> None:
        self.console.success(
            f'Successfully updated the "{label}" release of "{app_name}" app\'s '
            f'"{deployment_name}" deployment.'
        )

    def promoted(self, *, app_name: str, source: str, destination: str) -> None:
        self.console.success(
            f'Successfully promoted the "{source}" deployment of the "{app_name}" app '
            f'to the "{destination}" deployment.'
        )

    def rolled_back(self, *, app_name: str, deployment_name: str) -> None:
        self.console.success(
            f'Successfully performed a rollback on the "{deployment_name}" deployment '
            f'of the "{app_name}" app.'
        )

    def history_cleared(self, *, app_name: str, deployment_name: str) -> None:
        self.console.success(
            f'Successfully cleared the release history associated with the "{deployment_name}" '
            f'deployment from the "{app_name}" app.'
        )

    # -- apps -----------------------------------------------------------

    def app_added(self, app_name: str) -> None:
        self.console.success(
            f'Successfully added the "{app_name}" app, along with the following default '
            "deployments:"
        )

    def app_renamed(self, old_name: str, new_name: str) -> None:
        self.console.success(f'Successfully renamed the "{old_name}" app to "{new_name}".')

    def app_removed(self, app_name: str) -> None:
        self.console.success(f'Successfully removed the "{app_name}" app.')

    def app_transferred(self, app_name: str, email: str) -> None:
        self.console.success(
            f'Successfully transferred the ownership of app "{app_name}" to the account '
            f'with email "{email}".'
        )

    # -- deployments ----------------------------------------------------

    def deployment_added(self, app_name: str, deployment_name: str, key: str) -> None:
        self.console.success(
            f'Successfully added the "{deployment_name}" deployment with key "{key}" '
            f'to the "{app_name}" app.'
        )

    def deployment_renamed(self, app_name: str, old_name: str, new_name: str) -> None:
        self.console.success(
            f'Successfully renamed the "{old_name}" deployment to "{new_name}" '
            f'for the "{app_name}" app.'
        )

    def deployment_removed(self, app_name: str, deployment_name: str) -> None:
        self.console.success(
            f'Successfully removed the "{deployment_name}" deployment from the "{app_name}" app.'
        )

    # -- collaborators --------------------------------------------------

    def collaborator_added(self, app_name: str, email: str) -> None:
        self.console.success(
            f'Successfully added "{email}" as a collaborator to the app "{app_name}".'
        )

    def collaborator_removed(self, app_name: str, email: str) -> None:
        self.console.success(
            f'Successfully removed "{email}" as a collaborator from the app "{app_name}".'
        )

    def cancelled(self, thing: str) -> None:
        self.console.print(f"{thing} removal cancelled.")
