from __future__ import annotations

import os
from pathlib import Path

import typer

from otactl import __version__
from otactl.cli.commands.app_cmd import app_app
from otactl.cli.commands.collaborator_cmd import collaborator_app
from otactl.cli.commands.deployment_cmd import deployment_app
from otactl.cli.commands.release_cmd import patch, promote, release, rollback
from otactl.core.config import CONFIG_ENV, STORE_ENV
from otactl.output.log import configure_logging


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="Release over-the-air updates to app deployments.",
)


# Commands
app.command()(release)
app.command()(patch)
app.command()(promote)
app.command()(rollback)

# Sub-apps
app.add_typer(app_app, name="app")
app.add_typer(deployment_app, name="deployment")
app.add_typer(collaborator_app, name="collaborator")


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    config: Path | None = typer.Option(
        None, "--config", help=f"Config file (overrides ${CONFIG_ENV})"
    ),
    store: Path | None = typer.Option(
        None, "--store", help=f"Account store file (overrides ${STORE_ENV} and store.path)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr."),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    configure_logging(verbose=verbose)

    if config is not None:
        os.environ[CONFIG_ENV] = str(config.expanduser())
    if store is not None:
        os.environ[STORE_ENV] = str(store.expanduser())


def main() -> None:
    app()
