from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

from otactl.core.result import Err, Ok, Result
from otactl.core.structured import as_str_dict, get_bool, get_int, get_str
from otactl.release import errors
from otactl.release.errors import ReleaseError

ReleaseMethod = Literal["Upload", "Promote", "Rollback"]

ROLLOUT_FULL = 100

_LABEL_RE = re.compile(r"^v([1-9]\d*)$")


def format_label(number: int) -> str:
    return f"v{number}"


def parse_label(label: str) -> int | None:
    """Return N for a ``"v" + N`` label, or None if the label is malformed."""
    m = _LABEL_RE.match(label)
    if m is None:
        return None
    return int(m.group(1))


@dataclass(frozen=True, slots=True)
class BundleDescriptor:
    """Fingerprint of uploaded update content, produced by the packaging layer."""

    path: str
    package_hash: str
    size: int
    upload_time: int
    is_directory: bool = False
    # .zip/.apk/.ipa or zip-magic content; releases of these are refused.
    is_binary: bool = False


@dataclass(frozen=True, slots=True)
class ReleaseCandidate:
    """Every Package field except the label, which only the history store assigns."""

    app_version: str
    package_hash: str
    size: int
    upload_time: int
    release_method: ReleaseMethod
    description: str | None = None
    is_disabled: bool = False
    is_mandatory: bool = False
    rollout: int = ROLLOUT_FULL


@dataclass(frozen=True, slots=True)
class Package:
    """One release in a deployment's history."""

    label: str
    app_version: str
    package_hash: str
    size: int
    upload_time: int
    release_method: ReleaseMethod
    description: str | None = None
    is_disabled: bool = False
    is_mandatory: bool = False
    rollout: int = ROLLOUT_FULL

    @property
    def is_partial_rollout(self) -> bool:
        return self.rollout < ROLLOUT_FULL

    @property
    def is_pending_rollout(self) -> bool:
        """A partial rollout that clients can still receive."""
        return self.is_partial_rollout and not self.is_disabled

    @classmethod
    def from_candidate(cls, candidate: ReleaseCandidate, *, label: str) -> Package:
        return cls(
            label=label,
            app_version=candidate.app_version,
            package_hash=candidate.package_hash,
            size=candidate.size,
            upload_time=candidate.upload_time,
            release_method=candidate.release_method,
            description=candidate.description,
            is_disabled=candidate.is_disabled,
            is_mandatory=candidate.is_mandatory,
            rollout=candidate.rollout,
        )

    def to_candidate(self, *, release_method: ReleaseMethod) -> ReleaseCandidate:
        """Copy every field except the label, under a new release method."""
        return ReleaseCandidate(
            app_version=self.app_version,
            package_hash=self.package_hash,
            size=self.size,
            upload_time=self.upload_time,
            release_method=release_method,
            description=self.description,
            is_disabled=self.is_disabled,
            is_mandatory=self.is_mandatory,
            rollout=self.rollout,
        )

    def to_wire(self) -> dict[str, object]:
        return {
            "label": self.label,
            "appVersion": self.app_version,
            "packageHash": self.package_hash,
            "size": self.size,
            "uploadTime": self.upload_time,
            "description": self.description,
            "isDisabled": self.is_disabled,
            "isMandatory": self.is_mandatory,
            "rollout": self.rollout,
            "releaseMethod": self.release_method,
        }


def package_from_wire(obj: object) -> Result[Package, ReleaseError]:
    """Decode one history entry; any shape problem is a corrupt history."""
    data = as_str_dict(obj)
    if data is None:
        return Err(errors.history_corrupt("history entry is not a JSON object"))

    label = get_str(data, "label")
    if label is None:
        return Err(errors.history_corrupt("history entry has no label"))

    app_version = get_str(data, "appVersion")
    package_hash = get_str(data, "packageHash")
    size = get_int(data, "size")
    upload_time = get_int(data, "uploadTime")
    rollout = get_int(data, "rollout")
    method = get_str(data, "releaseMethod")
    if app_version is None or package_hash is None or size is None or upload_time is None:
        return Err(errors.history_corrupt(f'release "{label}" is missing content fields'))
    if rollout is None or not 0 < rollout <= ROLLOUT_FULL:
        return Err(errors.history_corrupt(f'release "{label}" has an invalid rollout'))

    release_method: ReleaseMethod
    match method:
        case "Upload" | "Promote" | "Rollback":
            release_method = method
        case _:
            return Err(
                errors.history_corrupt(f'release "{label}" has unknown release method {method!r}')
            )

    raw_description = data.get("description")
    if raw_description is not None and not isinstance(raw_description, str):
        return Err(errors.history_corrupt(f'release "{label}" has a non-string description'))

    return Ok(
        Package(
            label=label,
            app_version=app_version,
            package_hash=package_hash,
            size=size,
            upload_time=upload_time,
            release_method=release_method,
            description=raw_description,
            is_disabled=get_bool(data, "isDisabled") or False,
            is_mandatory=get_bool(data, "isMandatory") or False,
            rollout=rollout,
        )
    )
