"""deployment add|ls|rename|rm|history|clear."""

from __future__ import annotations

import typer

from otactl.cli.commands._helpers import (
    confirm,
    format_rollout,
    format_time,
    package_summary,
    print_json,
    resolve_format,
    unwrap_or_exit,
)
from otactl.cli.context import build_context

deployment_app = typer.Typer(
    add_completion=False, no_args_is_help=True, help="Manage app deployments."
)


@deployment_app.command("add")
def add_deployment(
    app_name: str = typer.Argument(...),
    deployment_name: str = typer.Argument(..., help="Name of the new deployment"),
) -> None:
    ctx = build_context()
    deployment = unwrap_or_exit(ctx.accounts.add_deployment(app_name, deployment_name), ctx)
    ctx.validator.deployment_added(app_name, deployment.name, deployment.key)


@deployment_app.command("ls")
def list_deployments(
    app_name: str = typer.Argument(...),
    display_keys: bool = typer.Option(
        False, "--display-keys", "-k", help="Show the deployment keys"
    ),
    format_: str | None = typer.Option(None, "--format", help="Output format: table or json"),
) -> None:
    """List deployments with their current release only."""
    ctx = build_context()
    fmt = unwrap_or_exit(resolve_format(format_, ctx), ctx)
    views = unwrap_or_exit(ctx.releases.deployments(app_name=app_name), ctx)

    if fmt == "json":
        print_json(
            ctx,
            [
                {
                    "name": view.name,
                    "key": view.key,
                    "package": view.package.to_wire() if view.package is not None else None,
                }
                for view in views
            ],
        )
        return

    columns = ["Name", "Deployment Key", "Update Metadata"]
    if not display_keys:
        columns.remove("Deployment Key")
    rows: list[list[str]] = []
    for view in views:
        row = [view.name, view.key] if display_keys else [view.name]
        row.append(package_summary(view.package))
        rows.append(row)
    ctx.console.table(columns, rows)


@deployment_app.command("rename")
def rename_deployment(
    app_name: str = typer.Argument(...),
    current_deployment_name: str = typer.Argument(...),
    new_deployment_name: str = typer.Argument(...),
) -> None:
    ctx = build_context()
    unwrap_or_exit(
        ctx.accounts.rename_deployment(app_name, current_deployment_name, new_deployment_name),
        ctx,
    )
    ctx.validator.deployment_renamed(app_name, current_deployment_name, new_deployment_name)


@deployment_app.command("rm")
def remove_deployment(
    app_name: str = typer.Argument(...),
    deployment_name: str = typer.Argument(...),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Remove a deployment and its release history."""
    ctx = build_context()
    question = (
        "Are you sure you want to remove this deployment? Note that its deployment key "
        "will be PERMANENTLY unrecoverable."
    )
    if not confirm(question, yes=yes):
        ctx.validator.cancelled("Deployment")
        return
    unwrap_or_exit(ctx.accounts.remove_deployment(app_name, deployment_name), ctx)
    ctx.validator.deployment_removed(app_name, deployment_name)


@deployment_app.command("history")
def deployment_history(
    app_name: str = typer.Argument(...),
    deployment_name: str = typer.Argument(...),
    format_: str | None = typer.Option(None, "--format", help="Output format: table or json"),
) -> None:
    """Show the release history of a deployment, oldest first."""
    ctx = build_context()
    fmt = unwrap_or_exit(resolve_format(format_, ctx), ctx)
    packages = unwrap_or_exit(
        ctx.releases.history(app_name=app_name, deployment_name=deployment_name), ctx
    )

    if fmt == "json":
        print_json(ctx, [package.to_wire() for package in packages])
        return

    ctx.console.table(
        ["Label", "Release Time", "App Version", "Mandatory", "Description", "Rollout", "Disabled"],
        [
            [
                package.label,
                f"{format_time(package.upload_time)} ({package.release_method})",
                package.app_version,
                "Yes" if package.is_mandatory else "No",
                package.description or "",
                format_rollout(package),
                "Yes" if package.is_disabled else "No",
            ]
            for package in packages
        ],
    )


@deployment_app.command("clear")
def clear_history(
    app_name: str = typer.Argument(...),
    deployment_name: str = typer.Argument(...),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Clear the release history of a deployment."""
    ctx = build_context()
    question = (
        "Are you sure you want to clear the release history for this deployment? "
        "This cannot be undone."
    )
    if not confirm(question, yes=yes):
        ctx.validator.cancelled("Release history")
        return
    unwrap_or_exit(
        ctx.releases.clear_history(app_name=app_name, deployment_name=deployment_name), ctx
    )
    ctx.validator.history_cleared(app_name=app_name, deployment_name=deployment_name)
