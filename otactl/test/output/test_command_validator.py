from __future__ import annotations

from pathlib import Path

import pytest

from otactl.core.config import ConfigError
from otactl.core.errors import ErrorCode
from otactl.output.console import MockConsole, Style
from otactl.output.errors import CommandValidator, exit_code_for
from otactl.release import errors
from otactl.release.errors import ReleaseError
from otactl.release.model import BundleDescriptor


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (errors.invalid_semver("x"), ErrorCode.USER_ERROR),
        (errors.invalid_rollout(0), ErrorCode.USER_ERROR),
        (errors.patch_none_specified(), ErrorCode.USER_ERROR),
        (errors.binary_zip_rejected(), ErrorCode.USER_ERROR),
        (errors.bundle_empty("/x"), ErrorCode.USER_ERROR),
        (errors.app_not_found("A"), ErrorCode.NOT_FOUND),
        (errors.bundle_not_found("/x"), ErrorCode.NOT_FOUND),
        (errors.rollback_label_not_found("v9"), ErrorCode.NOT_FOUND),
        (errors.app_conflict("A"), ErrorCode.CONFLICT),
        (errors.release_identical(), ErrorCode.CONFLICT),
        (errors.rollback_in_progress("v1"), ErrorCode.STATE_ERROR),
        (errors.rollout_must_increase(20), ErrorCode.STATE_ERROR),
        (errors.rollback_already_latest("v2"), ErrorCode.STATE_ERROR),
        (errors.storage_failed("disk full"), ErrorCode.IO_ERROR),
        (errors.history_corrupt("bad label"), ErrorCode.INTERNAL_ERROR),
    ],
)
def test_exit_code_for(error: ReleaseError, code: ErrorCode) -> None:
    assert exit_code_for(error) == code


class TestCommandValidator:
    def test_fail_prints_message_and_hint(self) -> None:
        console = MockConsole()
        code = CommandValidator(console).fail(errors.release_identical())

        assert code == int(ErrorCode.CONFLICT)
        assert console.outputs[0].message.startswith("[Error]  The uploaded package is identical")
        assert console.outputs[1].style == Style.DIM
        assert "--no-duplicate-release-error" in console.outputs[1].message

    def test_fail_without_hint(self) -> None:
        console = MockConsole()
        CommandValidator(console).fail(errors.app_not_found("A"))
        assert console.messages == ['[Error]  App "A" does not exist.']

    def test_fail_config(self) -> None:
        console = MockConsole()
        code = CommandValidator(console).fail_config(
            ConfigError("Invalid TOML syntax: x", path=Path("/c.toml"))
        )
        assert code == int(ErrorCode.USER_ERROR)
        assert console.messages[0] == "[Error]  Invalid TOML syntax: x"

    def test_release_confirmation_names_directory_or_file(self) -> None:
        console = MockConsole()
        validator = CommandValidator(console)
        directory = BundleDescriptor(
            path="dist", package_hash="h", size=1, upload_time=1, is_directory=True
        )
        single = BundleDescriptor(path="main.js", package_hash="h", size=1, upload_time=1)

        validator.released(app_name="A", deployment_name="Staging", bundle=directory)
        validator.released(app_name="A", deployment_name="Staging", bundle=single)

        assert console.messages == [
            'Successfully released an update containing the "dist" directory to the '
            '"Staging" deployment of the "A" app.',
            'Successfully released an update containing the "main.js" file to the '
            '"Staging" deployment of the "A" app.',
        ]

    def test_skipped_is_a_warning(self) -> None:
        console = MockConsole()
        CommandValidator(console).release_skipped()
        assert console.has_warning()
        assert not console.has_error()

    def test_cancelled(self) -> None:
        console = MockConsole()
        CommandValidator(console).cancelled("Deployment")
        assert console.messages == ["Deployment removal cancelled."]
