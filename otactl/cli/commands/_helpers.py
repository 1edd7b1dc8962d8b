"""Shared helpers for CLI commands."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING, TypeVar

import typer

from otactl.core.config import OutputFormat
from otactl.core.result import Err, Ok, Result
from otactl.release import errors
from otactl.release.errors import ReleaseError
from otactl.release.model import Package

if TYPE_CHECKING:
    from otactl.cli.context import CLIContext


T = TypeVar("T")


def unwrap_or_exit[T](result: Result[T, ReleaseError], ctx: CLIContext) -> T:
    """Return the Ok value, or report the error and exit with its code.

    This helper reduces boilerplate for the common pattern:
        match result:
            case Err(e):
                raise typer.Exit(code=ctx.validator.fail(e))
            case Ok(value):
                ...
    """
    if isinstance(result, Err):
        raise typer.Exit(code=ctx.validator.fail(result.error))
    return result.value


def resolve_format(raw: str | None, ctx: CLIContext) -> Result[OutputFormat, ReleaseError]:
    """``--format`` wins over ``[output] format`` from the config."""
    if raw is None:
        return Ok(ctx.config.output.format)
    value = raw.strip().lower()
    if value == "table":
        return Ok("table")
    if value == "json":
        return Ok("json")
    return Err(errors.invalid_format(raw))


def print_json(ctx: CLIContext, payload: object) -> None:
    ctx.console.raw(json.dumps(payload, indent=2))


def confirm(question: str, *, yes: bool) -> bool:
    if yes:
        return True
    return typer.confirm(question, default=False)


def format_time(epoch_ms: int) -> str:
    stamp = datetime.fromtimestamp(epoch_ms / 1000, tz=UTC).astimezone()
    return stamp.strftime("%b %d, %Y %H:%M")


def format_rollout(package: Package) -> str:
    if package.is_partial_rollout:
        return f"{package.rollout}%"
    return ""


def package_summary(package: Package | None) -> str:
    """Multi-line cell describing the current release of a deployment."""
    if package is None:
        return "No updates released"
    lines = [
        f"Label: {package.label}",
        f"App Version: {package.app_version}",
        f"Mandatory: {'Yes' if package.is_mandatory else 'No'}",
        f"Release Time: {format_time(package.upload_time)}",
        f"Released By: {package.release_method}",
    ]
    if package.description:
        lines.append(f"Description: {package.description}")
    if package.is_partial_rollout:
        lines.append(f"Rollout: {package.rollout}%")
    if package.is_disabled:
        lines.append("Disabled: Yes")
    return "\n".join(lines)
