from __future__ import annotations

import logging
from collections.abc import Sequence

from otactl.core.config import DEFAULT_DEPLOYMENTS
from otactl.core.result import Err, Ok, Result
from otactl.release.errors import ReleaseError
from otactl.services.accounts import AccountRegistry, App, Deployment
from otactl.services.storage import AccountStorage

logger = logging.getLogger(__name__)


class AccountService:
    """App, deployment and collaborator commands, each one atomic store write."""

    def __init__(
        self,
        *,
        storage: AccountStorage,
        default_deployments: Sequence[str] = DEFAULT_DEPLOYMENTS,
    ) -> None:
        self._storage = storage
        self._default_deployments = tuple(default_deployments)

    def list_apps(self) -> Result[tuple[App, ...], ReleaseError]:
        return self._storage.read().map(AccountRegistry.list_apps)

    def get_app(self, app_name: str) -> Result[App, ReleaseError]:
        registry = self._storage.read()
        if isinstance(registry, Err):
            return registry
        return registry.value.get_app(app_name)

    def add_app(self, app_name: str) -> Result[App, ReleaseError]:
        result = self._storage.mutate(
            lambda r: r.add_app(app_name, default_deployments=self._default_deployments)
        )
        if isinstance(result, Ok):
            logger.info("added app %s", app_name)
        return result

    def rename_app(self, old_name: str, new_name: str) -> Result[App, ReleaseError]:
        result = self._storage.mutate(lambda r: r.rename_app(old_name, new_name))
        if isinstance(result, Ok):
            logger.info("renamed app %s to %s", old_name, new_name)
        return result

    def remove_app(self, app_name: str) -> Result[App, ReleaseError]:
        result = self._storage.mutate(lambda r: r.remove_app(app_name))
        if isinstance(result, Ok):
            logger.info("removed app %s", app_name)
        return result

    def transfer_app(self, app_name: str, email: str) -> Result[App, ReleaseError]:
        result = self._storage.mutate(lambda r: r.transfer_app(app_name, email))
        if isinstance(result, Ok):
            logger.info("transferred app %s to %s", app_name, email)
        return result

    def add_collaborator(self, app_name: str, email: str) -> Result[App, ReleaseError]:
        return self._storage.mutate(lambda r: r.add_collaborator(app_name, email))

    def remove_collaborator(self, app_name: str, email: str) -> Result[App, ReleaseError]:
        return self._storage.mutate(lambda r: r.remove_collaborator(app_name, email))

    def add_deployment(self, app_name: str, deployment_name: str) -> Result[Deployment, ReleaseError]:
        result = self._storage.mutate(lambda r: r.add_deployment(app_name, deployment_name))
        if isinstance(result, Ok):
            logger.info("added deployment %s/%s", app_name, deployment_name)
        return result

    def rename_deployment(
        self, app_name: str, old_name: str, new_name: str
    ) -> Result[Deployment, ReleaseError]:
        return self._storage.mutate(lambda r: r.rename_deployment(app_name, old_name, new_name))

    def remove_deployment(
        self, app_name: str, deployment_name: str
    ) -> Result[Deployment, ReleaseError]:
        result = self._storage.mutate(lambda r: r.remove_deployment(app_name, deployment_name))
        if isinstance(result, Ok):
            logger.info("removed deployment %s/%s and its history", app_name, deployment_name)
        return result
