"""collaborator add|ls|rm."""

from __future__ import annotations

import typer

from otactl.cli.commands._helpers import (
    confirm,
    print_json,
    resolve_format,
    unwrap_or_exit,
)
from otactl.cli.context import build_context

collaborator_app = typer.Typer(
    add_completion=False, no_args_is_help=True, help="Manage app collaborators."
)


@collaborator_app.command("add")
def add_collaborator(
    app_name: str = typer.Argument(...),
    email: str = typer.Argument(..., help="Account to add as a collaborator"),
) -> None:
    ctx = build_context()
    unwrap_or_exit(ctx.accounts.add_collaborator(app_name, email), ctx)
    ctx.validator.collaborator_added(app_name, email)


@collaborator_app.command("ls")
def list_collaborators(
    app_name: str = typer.Argument(...),
    format_: str | None = typer.Option(None, "--format", help="Output format: table or json"),
) -> None:
    ctx = build_context()
    fmt = unwrap_or_exit(resolve_format(format_, ctx), ctx)
    app = unwrap_or_exit(ctx.accounts.get_app(app_name), ctx)
    current = ctx.config.account.email

    if fmt == "json":
        print_json(
            ctx,
            {
                email: {"permission": permission, "isCurrentAccount": email == current}
                for email, permission in app.collaborators.items()
            },
        )
        return

    rows: list[list[str]] = []
    for email, permission in app.collaborators.items():
        marks: list[str] = []
        if permission == "Owner":
            marks.append("Owner")
        if email == current:
            marks.append("You")
        rows.append([f"{email} ({', '.join(marks)})" if marks else email])
    ctx.console.table(["E-mail Address"], rows)


@collaborator_app.command("rm")
def remove_collaborator(
    app_name: str = typer.Argument(...),
    email: str = typer.Argument(...),
    yes: bool = typer.Option(False, "--yes", "-y"),
) -> None:
    ctx = build_context()
    if not confirm("Are you sure you want to remove this collaborator?", yes=yes):
        ctx.validator.cancelled("Collaborator")
        return
    unwrap_or_exit(ctx.accounts.remove_collaborator(app_name, email), ctx)
    ctx.validator.collaborator_removed(app_name, email)
