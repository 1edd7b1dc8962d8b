"""app add|ls|rename|rm|transfer."""

from __future__ import annotations

import typer

from otactl.cli.commands._helpers import (
    confirm,
    print_json,
    resolve_format,
    unwrap_or_exit,
)
from otactl.cli.context import build_context

app_app = typer.Typer(add_completion=False, no_args_is_help=True, help="Manage apps.")


@app_app.command("add")
def add_app(app_name: str = typer.Argument(..., help="Name of the new app")) -> None:
    """Create an app with the configured default deployments."""
    ctx = build_context()
    app = unwrap_or_exit(ctx.accounts.add_app(app_name), ctx)
    ctx.validator.app_added(app.name)
    ctx.console.table(
        ["Name", "Deployment Key"], [[d.name, d.key] for d in app.deployments]
    )


@app_app.command("ls")
def list_apps(
    format_: str | None = typer.Option(None, "--format", help="Output format: table or json"),
) -> None:
    """List the apps of the current account."""
    ctx = build_context()
    fmt = unwrap_or_exit(resolve_format(format_, ctx), ctx)
    apps = unwrap_or_exit(ctx.accounts.list_apps(), ctx)

    if fmt == "json":
        print_json(
            ctx,
            [
                {
                    "name": app.name,
                    "owner": app.owner,
                    "deployments": [d.name for d in app.deployments],
                }
                for app in apps
            ],
        )
        return

    ctx.console.table(
        ["Name", "Owner", "Deployments"],
        [
            [app.name, app.owner or "", ", ".join(d.name for d in app.deployments)]
            for app in apps
        ],
    )


@app_app.command("rename")
def rename_app(
    current_app_name: str = typer.Argument(...),
    new_app_name: str = typer.Argument(...),
) -> None:
    ctx = build_context()
    unwrap_or_exit(ctx.accounts.rename_app(current_app_name, new_app_name), ctx)
    ctx.validator.app_renamed(current_app_name, new_app_name)


@app_app.command("rm")
def remove_app(
    app_name: str = typer.Argument(...),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Remove an app together with its deployments and release history."""
    ctx = build_context()
    question = (
        "Are you sure you want to remove this app? Note that its deployment keys "
        "will be PERMANENTLY unrecoverable."
    )
    if not confirm(question, yes=yes):
        ctx.validator.cancelled("App")
        return
    unwrap_or_exit(ctx.accounts.remove_app(app_name), ctx)
    ctx.validator.app_removed(app_name)


@app_app.command("transfer")
def transfer_app(
    app_name: str = typer.Argument(...),
    email: str = typer.Argument(..., help="Account that becomes the owner"),
    yes: bool = typer.Option(False, "--yes", "-y"),
) -> None:
    ctx = build_context()
    if not confirm(
        "Are you sure you want to transfer the ownership of this app to another account?",
        yes=yes,
    ):
        ctx.console.print("App transfer cancelled.")
        return
    unwrap_or_exit(ctx.accounts.transfer_app(app_name, email), ctx)
    ctx.validator.app_transferred(app_name, email)
