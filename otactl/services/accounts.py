"""Apps, deployments and collaborators.

This is the "account" side the release core depends on: name resolution,
CRUD and the access keys handed to client apps. Package histories hang off
``Deployment`` as ``PackageHistoryStore`` instances, but only the release
state machine mutates them.
"""

from __future__ import annotations

import secrets
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from typing import Literal

from otactl.core.config import DEFAULT_DEPLOYMENTS
from otactl.core.result import Err, Ok, Result
from otactl.core.structured import as_obj_list, as_str_dict, get_list, get_str, get_table
from otactl.release import errors
from otactl.release.errors import ReleaseError
from otactl.release.history import PackageHistoryStore

Permission = Literal["Owner", "Collaborator"]

ACCESS_KEY_BYTES = 27
STORE_SCHEMA = 1


def generate_access_key() -> str:
    return secrets.token_urlsafe(ACCESS_KEY_BYTES)


def _empty_history() -> PackageHistoryStore:
    return PackageHistoryStore()


@dataclass
class Deployment:
    """A release channel of an app.

    ``unreadable`` holds the decode error of a stored history that could not
    be loaded; ``stored_history`` keeps that raw data so saving the registry
    does not drop it.
    """

    name: str
    key: str
    history: PackageHistoryStore = field(default_factory=_empty_history)
    unreadable: ReleaseError | None = None
    stored_history: object = None

    def checked_history(self) -> Result[PackageHistoryStore, ReleaseError]:
        if self.unreadable is not None:
            return Err(self.unreadable)
        return Ok(self.history)

    def discard_unreadable_history(self) -> None:
        self.history = PackageHistoryStore()
        self.unreadable = None
        self.stored_history = None

    def to_wire(self, *, include_history: bool = True) -> dict[str, object]:
        current = self.history.latest()
        out: dict[str, object] = {
            "name": self.name,
            "key": self.key,
            "package": current.to_wire() if current is not None else None,
        }
        if include_history:
            out["history"] = (
                self.stored_history if self.unreadable is not None else self.history.to_wire()
            )
        return out


@dataclass
class App:
    name: str
    collaborators: dict[str, Permission]
    deployments: list[Deployment] = field(default_factory=list)

    @property
    def owner(self) -> str | None:
        for email, permission in self.collaborators.items():
            if permission == "Owner":
                return email
        return None

    def find_deployment(self, name: str) -> Deployment | None:
        for deployment in self.deployments:
            if deployment.name == name:
                return deployment
        return None

    def to_wire(self) -> dict[str, object]:
        return {
            "name": self.name,
            "collaborators": {
                email: {"permission": permission}
                for email, permission in self.collaborators.items()
            },
            "deployments": [d.to_wire() for d in self.deployments],
        }


class AccountRegistry:
    """All apps visible to ``current_account``.

    Every method either mutates and returns ``Ok`` or leaves the registry
    untouched and returns ``Err``.
    """

    def __init__(self, *, current_account: str, apps: Iterable[App] = ()) -> None:
        self.current_account = current_account
        self._apps: list[App] = list(apps)

    # -- apps -----------------------------------------------------------

    def list_apps(self) -> tuple[App, ...]:
        return tuple(self._apps)

    def get_app(self, app_name: str) -> Result[App, ReleaseError]:
        for app in self._apps:
            if app.name == app_name:
                return Ok(app)
        return Err(errors.app_not_found(app_name))

    def add_app(
        self,
        app_name: str,
        *,
        default_deployments: Iterable[str] = DEFAULT_DEPLOYMENTS,
    ) -> Result[App, ReleaseError]:
        if any(a.name == app_name for a in self._apps):
            return Err(errors.app_conflict(app_name))
        app = App(
            name=app_name,
            collaborators={self.current_account: "Owner"},
            deployments=[
                Deployment(name=name, key=generate_access_key()) for name in default_deployments
            ],
        )
        self._apps.append(app)
        return Ok(app)

    def rename_app(self, old_name: str, new_name: str) -> Result[App, ReleaseError]:
        found = self.get_app(old_name)
        if isinstance(found, Err):
            return found
        if old_name != new_name and any(a.name == new_name for a in self._apps):
            return Err(errors.app_conflict(new_name))
        found.value.name = new_name
        return Ok(found.value)

    def remove_app(self, app_name: str) -> Result[App, ReleaseError]:
        found = self.get_app(app_name)
        if isinstance(found, Err):
            return found
        self._apps.remove(found.value)
        return Ok(found.value)

    def transfer_app(self, app_name: str, email: str) -> Result[App, ReleaseError]:
        """Make ``email`` the owner; the previous owner stays as a collaborator."""
        found = self.get_app(app_name)
        if isinstance(found, Err):
            return found
        app = found.value
        if app.owner == email:
            return Err(
                errors.invalid_option("email", email, "an account other than the current owner")
            )
        previous = app.owner
        if previous is not None:
            app.collaborators[previous] = "Collaborator"
        app.collaborators[email] = "Owner"
        return Ok(app)

    # -- collaborators --------------------------------------------------

    def add_collaborator(self, app_name: str, email: str) -> Result[App, ReleaseError]:
        found = self.get_app(app_name)
        if isinstance(found, Err):
            return found
        app = found.value
        if email in app.collaborators:
            return Err(errors.collaborator_conflict(email, app_name))
        app.collaborators[email] = "Collaborator"
        return Ok(app)

    def remove_collaborator(self, app_name: str, email: str) -> Result[App, ReleaseError]:
        found = self.get_app(app_name)
        if isinstance(found, Err):
            return found
        app = found.value
        permission = app.collaborators.get(email)
        if permission is None:
            return Err(errors.collaborator_not_found(email, app_name))
        if permission == "Owner":
            return Err(
                errors.invalid_option("email", email, "a collaborator (the owner cannot be removed)")
            )
        del app.collaborators[email]
        return Ok(app)

    # -- deployments ----------------------------------------------------

    def get_deployment(
        self, app_name: str, deployment_name: str
    ) -> Result[Deployment, ReleaseError]:
        found = self.get_app(app_name)
        if isinstance(found, Err):
            return found
        deployment = found.value.find_deployment(deployment_name)
        if deployment is None:
            return Err(errors.deployment_not_found(deployment_name))
        return Ok(deployment)

    def get_history(
        self, app_name: str, deployment_name: str
    ) -> Result[PackageHistoryStore, ReleaseError]:
        """Resolve a deployment's history; an unreadable one is ``history_corrupt``."""
        deployment = self.get_deployment(app_name, deployment_name)
        if isinstance(deployment, Err):
            return deployment
        return deployment.value.checked_history()

    def add_deployment(
        self, app_name: str, deployment_name: str
    ) -> Result[Deployment, ReleaseError]:
        found = self.get_app(app_name)
        if isinstance(found, Err):
            return found
        app = found.value
        if app.find_deployment(deployment_name) is not None:
            return Err(errors.deployment_conflict(deployment_name))
        deployment = Deployment(name=deployment_name, key=generate_access_key())
        app.deployments.append(deployment)
        return Ok(deployment)

    def rename_deployment(
        self, app_name: str, old_name: str, new_name: str
    ) -> Result[Deployment, ReleaseError]:
        found = self.get_deployment(app_name, old_name)
        if isinstance(found, Err):
            return found
        app = self.get_app(app_name).unwrap()
        if old_name != new_name and app.find_deployment(new_name) is not None:
            return Err(errors.deployment_conflict(new_name))
        found.value.name = new_name
        return Ok(found.value)

    def remove_deployment(
        self, app_name: str, deployment_name: str
    ) -> Result[Deployment, ReleaseError]:
        found = self.get_deployment(app_name, deployment_name)
        if isinstance(found, Err):
            return found
        app = self.get_app(app_name).unwrap()
        app.deployments.remove(found.value)
        return Ok(found.value)

    # -- wire -----------------------------------------------------------

    def to_wire(self) -> dict[str, object]:
        return {
            "schema": STORE_SCHEMA,
            "account": self.current_account,
            "apps": [app.to_wire() for app in self._apps],
        }

    @classmethod
    def from_wire(
        cls, obj: object, *, current_account: str
    ) -> Result[AccountRegistry, ReleaseError]:
        """Decode the store document; ``current_account`` comes from config."""
        data = as_str_dict(obj)
        if data is None:
            return Err(errors.storage_failed("store root must be a JSON object"))

        apps: list[App] = []
        for raw_app in get_list(data, "apps") or []:
            decoded = _app_from_wire(raw_app)
            if isinstance(decoded, Err):
                return decoded
            apps.append(decoded.value)
        return Ok(cls(current_account=current_account, apps=apps))


def _app_from_wire(obj: object) -> Result[App, ReleaseError]:
    data = as_str_dict(obj)
    name = get_str(data, "name") if data is not None else None
    if data is None or name is None:
        return Err(errors.storage_failed("app entry without a name"))

    collaborators: dict[str, Permission] = {}
    for email, props in (get_table(data, "collaborators") or {}).items():
        table = as_str_dict(props) or {}
        collaborators[email] = "Owner" if get_str(table, "permission") == "Owner" else "Collaborator"

    deployments: list[Deployment] = []
    for raw in as_obj_list(data.get("deployments")) or []:
        table = as_str_dict(raw)
        deployment_name = get_str(table, "name") if table is not None else None
        key = get_str(table, "key") if table is not None else None
        if table is None or deployment_name is None or key is None:
            return Err(errors.storage_failed(f'deployment entry of app "{name}" is incomplete'))
        raw_history = table.get("history", [])
        history = PackageHistoryStore.from_wire(raw_history)
        if isinstance(history, Err):
            deployments.append(
                Deployment(
                    name=deployment_name,
                    key=key,
                    unreadable=replace(history.error, hint=f"{name}/{deployment_name}"),
                    stored_history=raw_history,
                )
            )
            continue
        deployments.append(Deployment(name=deployment_name, key=key, history=history.value))

    return Ok(App(name=name, collaborators=collaborators, deployments=deployments))
