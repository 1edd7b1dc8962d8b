"""release, patch, promote and rollback commands."""

from __future__ import annotations

from pathlib import Path

import typer

from otactl.cli.commands._helpers import unwrap_or_exit
from otactl.cli.context import CLIContext, build_context
from otactl.core.result import Err, Ok, Result
from otactl.release.errors import ReleaseError
from otactl.release.options import (
    PatchOptions,
    PromoteOptions,
    ReleaseOptions,
    parse_bool_option,
    parse_rollout_option,
)
from otactl.services.packaging import describe_bundle

type Flags = tuple[bool | None, bool | None, int | None]


def _parse_flags(
    disabled: str | None, mandatory: str | None, rollout: str | None
) -> Result[Flags, ReleaseError]:
    is_disabled = parse_bool_option("disabled", disabled)
    if isinstance(is_disabled, Err):
        return is_disabled
    is_mandatory = parse_bool_option("mandatory", mandatory)
    if isinstance(is_mandatory, Err):
        return is_mandatory
    percent = parse_rollout_option(rollout)
    if isinstance(percent, Err):
        return percent
    return Ok((is_disabled.value, is_mandatory.value, percent.value))


def _flags_or_exit(
    ctx: CLIContext, disabled: str | None, mandatory: str | None, rollout: str | None
) -> Flags:
    return unwrap_or_exit(_parse_flags(disabled, mandatory, rollout), ctx)


def release(
    app_name: str = typer.Argument(..., help="Name of the app to release the update for"),
    update_contents_path: Path = typer.Argument(
        ..., help="Path to the update content (a file or a directory)"
    ),
    target_binary_version: str = typer.Argument(
        ..., help="Semver range of the binary versions this update targets (e.g. 1.1.0, ~1.2.3)"
    ),
    deployment_name: str = typer.Option(
        "Staging", "--deployment-name", "-d", help="Deployment to release the update to"
    ),
    description: str | None = typer.Option(
        None, "--description", "--des", help="Description of the changes in this release"
    ),
    disabled: str | None = typer.Option(
        None, "--disabled", "-x", help="Whether clients are prevented from downloading it"
    ),
    mandatory: str | None = typer.Option(
        None, "--mandatory", "-m", help="Whether the release is mandatory"
    ),
    rollout: str | None = typer.Option(
        None, "--rollout", "-r", help="Percentage of users to receive the release (N or N%)"
    ),
    no_duplicate_release_error: bool = typer.Option(
        False,
        "--no-duplicate-release-error",
        help="Warn instead of failing when the content matches the current release",
    ),
) -> None:
    """Release an update to a deployment."""
    ctx = build_context()
    is_disabled, is_mandatory, percent = _flags_or_exit(ctx, disabled, mandatory, rollout)
    bundle = unwrap_or_exit(describe_bundle(update_contents_path), ctx)

    outcome = unwrap_or_exit(
        ctx.releases.release(
            app_name=app_name,
            deployment_name=deployment_name,
            bundle=bundle,
            app_version=target_binary_version,
            options=ReleaseOptions(
                description=description,
                is_disabled=is_disabled,
                is_mandatory=is_mandatory,
                rollout=percent,
                no_duplicate_release_error=no_duplicate_release_error,
            ),
        ),
        ctx,
    )
    if outcome.skipped:
        ctx.validator.release_skipped()
        return
    ctx.validator.released(app_name=app_name, deployment_name=deployment_name, bundle=bundle)


def patch(
    app_name: str = typer.Argument(..., help="Name of the app"),
    deployment_name: str = typer.Argument(..., help="Deployment holding the release"),
    label: str | None = typer.Option(
        None, "--label", "-l", help="Release to patch (defaults to the latest)"
    ),
    description: str | None = typer.Option(None, "--description", "--des"),
    disabled: str | None = typer.Option(None, "--disabled", "-x"),
    mandatory: str | None = typer.Option(None, "--mandatory", "-m"),
    rollout: str | None = typer.Option(
        None, "--rollout", "-r", help="New rollout percentage; may only increase"
    ),
    target_binary_version: str | None = typer.Option(
        None, "--target-binary-version", "-t", help="New semver range of binary versions"
    ),
) -> None:
    """Update the metadata of an existing release."""
    ctx = build_context()
    is_disabled, is_mandatory, percent = _flags_or_exit(ctx, disabled, mandatory, rollout)

    package = unwrap_or_exit(
        ctx.releases.patch(
            app_name=app_name,
            deployment_name=deployment_name,
            options=PatchOptions(
                label=label,
                description=description,
                is_disabled=is_disabled,
                is_mandatory=is_mandatory,
                rollout=percent,
                app_version=target_binary_version,
            ),
        ),
        ctx,
    )
    ctx.validator.patched(
        app_name=app_name, deployment_name=deployment_name, label=package.label
    )


def promote(
    app_name: str = typer.Argument(..., help="Name of the app"),
    source_deployment_name: str = typer.Argument(..., help="Deployment to promote from"),
    destination_deployment_name: str = typer.Argument(..., help="Deployment to promote to"),
    description: str | None = typer.Option(None, "--description", "--des"),
    disabled: str | None = typer.Option(None, "--disabled", "-x"),
    mandatory: str | None = typer.Option(None, "--mandatory", "-m"),
    rollout: str | None = typer.Option(None, "--rollout", "-r"),
    target_binary_version: str | None = typer.Option(
        None, "--target-binary-version", "-t"
    ),
    no_duplicate_release_error: bool = typer.Option(False, "--no-duplicate-release-error"),
) -> None:
    """Promote the latest enabled release of one deployment to another."""
    ctx = build_context()
    is_disabled, is_mandatory, percent = _flags_or_exit(ctx, disabled, mandatory, rollout)

    outcome = unwrap_or_exit(
        ctx.releases.promote(
            app_name=app_name,
            source_deployment=source_deployment_name,
            destination_deployment=destination_deployment_name,
            options=PromoteOptions(
                description=description,
                is_disabled=is_disabled,
                is_mandatory=is_mandatory,
                rollout=percent,
                app_version=target_binary_version,
                no_duplicate_release_error=no_duplicate_release_error,
            ),
        ),
        ctx,
    )
    if outcome.skipped:
        ctx.validator.release_skipped()
        return
    ctx.validator.promoted(
        app_name=app_name,
        source=source_deployment_name,
        destination=destination_deployment_name,
    )


def rollback(
    app_name: str = typer.Argument(..., help="Name of the app"),
    deployment_name: str = typer.Argument(..., help="Deployment to roll back"),
    target_release: str | None = typer.Option(
        None, "--target-release", "-r", help="Label to roll back to (defaults to the previous)"
    ),
) -> None:
    """Re-release a previous release's content under a new label."""
    ctx = build_context()
    unwrap_or_exit(
        ctx.releases.rollback(
            app_name=app_name, deployment_name=deployment_name, target_label=target_release
        ),
        ctx,
    )
    ctx.validator.rolled_back(app_name=app_name, deployment_name=deployment_name)
