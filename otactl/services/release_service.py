"""Command-level release orchestration.

Each method resolves the app and deployment(s), runs one state machine
operation on the deployment's history and persists the result, all inside
a single ``AccountStorage.mutate`` call. Bundle hashing happens before this
layer is reached and is not part of the atomic mutation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from otactl.core.result import Err, Ok, Result
from otactl.release.errors import ReleaseError
from otactl.release.machine import ReleaseOutcome, ReleaseStateMachine
from otactl.release.model import BundleDescriptor, Package
from otactl.release.options import PatchOptions, PromoteOptions, ReleaseOptions
from otactl.services.accounts import AccountRegistry
from otactl.services.storage import AccountStorage

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DeploymentView:
    """Read-only deployment listing entry: only the current package is inline."""

    name: str
    key: str
    package: Package | None


class ReleaseService:
    def __init__(
        self,
        *,
        storage: AccountStorage,
        machine: ReleaseStateMachine | None = None,
    ) -> None:
        self._storage = storage
        self._machine = machine or ReleaseStateMachine()

    # -- mutations ------------------------------------------------------

    def release(
        self,
        *,
        app_name: str,
        deployment_name: str,
        bundle: BundleDescriptor,
        app_version: str,
        options: ReleaseOptions,
    ) -> Result[ReleaseOutcome, ReleaseError]:
        def change(registry: AccountRegistry) -> Result[ReleaseOutcome, ReleaseError]:
            history = registry.get_history(app_name, deployment_name)
            if isinstance(history, Err):
                return history
            return self._machine.release(history.value, bundle, app_version, options)

        result = self._storage.mutate(change)
        self._log_outcome("release", app_name, deployment_name, result)
        return result

    def patch(
        self,
        *,
        app_name: str,
        deployment_name: str,
        options: PatchOptions,
    ) -> Result[Package, ReleaseError]:
        def change(registry: AccountRegistry) -> Result[Package, ReleaseError]:
            history = registry.get_history(app_name, deployment_name)
            if isinstance(history, Err):
                return history
            return self._machine.patch(history.value, options)

        result = self._storage.mutate(change)
        if isinstance(result, Ok):
            logger.info(
                "patched %s on %s/%s", result.value.label, app_name, deployment_name
            )
        else:
            logger.debug("patch refused on %s/%s: %s", app_name, deployment_name, result.error.kind)
        return result

    def promote(
        self,
        *,
        app_name: str,
        source_deployment: str,
        destination_deployment: str,
        options: PromoteOptions,
    ) -> Result[ReleaseOutcome, ReleaseError]:
        def change(registry: AccountRegistry) -> Result[ReleaseOutcome, ReleaseError]:
            source = registry.get_history(app_name, source_deployment)
            if isinstance(source, Err):
                return source
            destination = registry.get_history(app_name, destination_deployment)
            if isinstance(destination, Err):
                return destination
            return self._machine.promote(source.value, destination.value, options)

        result = self._storage.mutate(change)
        self._log_outcome("promote", app_name, destination_deployment, result)
        return result

    def rollback(
        self,
        *,
        app_name: str,
        deployment_name: str,
        target_label: str | None = None,
    ) -> Result[Package, ReleaseError]:
        def change(registry: AccountRegistry) -> Result[Package, ReleaseError]:
            history = registry.get_history(app_name, deployment_name)
            if isinstance(history, Err):
                return history
            return self._machine.rollback(history.value, target_label)

        result = self._storage.mutate(change)
        if isinstance(result, Ok):
            logger.info(
                "rolled back %s/%s to %s content as %s",
                app_name,
                deployment_name,
                target_label or "previous",
                result.value.label,
            )
        return result

    def clear_history(
        self, *, app_name: str, deployment_name: str
    ) -> Result[None, ReleaseError]:
        def change(registry: AccountRegistry) -> Result[None, ReleaseError]:
            deployment = registry.get_deployment(app_name, deployment_name)
            if isinstance(deployment, Err):
                return deployment
            if deployment.value.unreadable is not None:
                logger.warning(
                    "discarding unreadable history of %s/%s: %s",
                    app_name,
                    deployment_name,
                    deployment.value.unreadable.message,
                )
                deployment.value.discard_unreadable_history()
            self._machine.clear(deployment.value.history)
            return Ok(None)

        result = self._storage.mutate(change)
        if isinstance(result, Ok):
            logger.info("cleared history of %s/%s", app_name, deployment_name)
        return result

    # -- queries --------------------------------------------------------

    def history(
        self, *, app_name: str, deployment_name: str
    ) -> Result[tuple[Package, ...], ReleaseError]:
        registry = self._storage.read()
        if isinstance(registry, Err):
            return registry
        history = registry.value.get_history(app_name, deployment_name)
        if isinstance(history, Err):
            return history
        return Ok(history.value.snapshot())

    def deployments(self, *, app_name: str) -> Result[tuple[DeploymentView, ...], ReleaseError]:
        registry = self._storage.read()
        if isinstance(registry, Err):
            return registry
        app = registry.value.get_app(app_name)
        if isinstance(app, Err):
            return app
        views: list[DeploymentView] = []
        for deployment in app.value.deployments:
            history = deployment.checked_history()
            if isinstance(history, Err):
                return history
            views.append(
                DeploymentView(
                    name=deployment.name, key=deployment.key, package=history.value.latest()
                )
            )
        return Ok(tuple(views))

    def _log_outcome(
        self,
        operation: str,
        app_name: str,
        deployment_name: str,
        result: Result[ReleaseOutcome, ReleaseError],
    ) -> None:
        match result:
            case Ok(ReleaseOutcome(package=None, skipped=True)):
                logger.info(
                    "%s to %s/%s skipped: content identical to current release",
                    operation,
                    app_name,
                    deployment_name,
                )
            case Ok(ReleaseOutcome(package=Package() as package)):
                logger.info(
                    "%s %s to %s/%s (rollout %d%%)",
                    operation,
                    package.label,
                    app_name,
                    deployment_name,
                    package.rollout,
                )
            case Err(error):
                logger.debug(
                    "%s refused on %s/%s: %s", operation, app_name, deployment_name, error.kind
                )
            case _:
                pass
