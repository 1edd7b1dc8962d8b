from __future__ import annotations

from dataclasses import dataclass

import typer

from otactl.core.config import (
    Config,
    load_config_or_default,
    resolve_config_path,
    resolve_store_path,
)
from otactl.core.result import Err
from otactl.output.console import ConsoleProtocol, RichConsole
from otactl.output.errors import CommandValidator
from otactl.services.account_service import AccountService
from otactl.services.release_service import ReleaseService
from otactl.services.storage import AccountStorage, JsonAccountStorage


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: Config
    console: ConsoleProtocol
    storage: AccountStorage
    accounts: AccountService
    releases: ReleaseService
    validator: CommandValidator


def make_context(
    *, config: Config, console: ConsoleProtocol, storage: AccountStorage
) -> CLIContext:
    return CLIContext(
        config=config,
        console=console,
        storage=storage,
        accounts=AccountService(
            storage=storage, default_deployments=config.apps.default_deployments
        ),
        releases=ReleaseService(storage=storage),
        validator=CommandValidator(console),
    )


def build_context() -> CLIContext:
    console = RichConsole()
    config_result = load_config_or_default(resolve_config_path())
    if isinstance(config_result, Err):
        code = CommandValidator(console).fail_config(config_result.error)
        raise typer.Exit(code=code)

    config = config_result.value
    storage = JsonAccountStorage(
        resolve_store_path(config), current_account=config.account.email
    )
    return make_context(config=config, console=console, storage=storage)
