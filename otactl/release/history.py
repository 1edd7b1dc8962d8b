"""Ordered package log of a single deployment.

The store is the only place labels are computed: the next label is always
the latest label's number plus one (``v1`` for an empty history), so labels
are strictly increasing in append order. Mutators are meant to be called by
``ReleaseStateMachine`` only.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import replace

from otactl.core.result import Err, Ok, Result
from otactl.core.structured import as_obj_list
from otactl.release import errors
from otactl.release.errors import ReleaseError
from otactl.release.model import (
    Package,
    ReleaseCandidate,
    format_label,
    package_from_wire,
    parse_label,
)


class PackageHistoryStore:
    """Oldest-first sequence of Packages; the last entry is the current release."""

    def __init__(self, packages: Iterable[Package] = ()) -> None:
        self._packages: list[Package] = list(packages)

    def __len__(self) -> int:
        return len(self._packages)

    def __iter__(self) -> Iterator[Package]:
        return iter(tuple(self._packages))

    def snapshot(self) -> tuple[Package, ...]:
        return tuple(self._packages)

    def latest(self) -> Package | None:
        if not self._packages:
            return None
        return self._packages[-1]

    def previous(self) -> Package | None:
        """The entry appended just before the current one."""
        if len(self._packages) < 2:
            return None
        return self._packages[-2]

    def find(self, label: str) -> Package | None:
        for package in self._packages:
            if package.label == label:
                return package
        return None

    def latest_enabled(self) -> Package | None:
        for package in reversed(self._packages):
            if not package.is_disabled:
                return package
        return None

    def next_label(self) -> Result[str, ReleaseError]:
        current = self.latest()
        if current is None:
            return Ok(format_label(1))
        number = parse_label(current.label)
        if number is None:
            return Err(errors.history_corrupt(f"unparseable label {current.label!r}"))
        return Ok(format_label(number + 1))

    def append(self, candidate: ReleaseCandidate) -> Result[Package, ReleaseError]:
        label = self.next_label()
        if isinstance(label, Err):
            return label
        package = Package.from_candidate(candidate, label=label.value)
        self._packages.append(package)
        return Ok(package)

    def replace(self, label: str, updated: Package) -> Result[Package, ReleaseError]:
        """Swap the entry with ``label`` in place; the stored label never changes."""
        for index, package in enumerate(self._packages):
            if package.label == label:
                stored = replace(updated, label=label)
                self._packages[index] = stored
                return Ok(stored)
        return Err(errors.not_found(label))

    def clear(self) -> None:
        self._packages.clear()

    def to_wire(self) -> list[dict[str, object]]:
        return [package.to_wire() for package in self._packages]

    @classmethod
    def from_wire(cls, obj: object) -> Result[PackageHistoryStore, ReleaseError]:
        """Decode a stored history; labels must be well formed and increasing."""
        items = as_obj_list(obj)
        if items is None:
            return Err(errors.history_corrupt("package history is not a JSON array"))

        packages: list[Package] = []
        last_number = 0
        for item in items:
            decoded = package_from_wire(item)
            if isinstance(decoded, Err):
                return decoded
            package = decoded.value
            number = parse_label(package.label)
            if number is None:
                return Err(errors.history_corrupt(f"unparseable label {package.label!r}"))
            if number <= last_number:
                return Err(
                    errors.history_corrupt(
                        f"label {package.label!r} is out of order after {format_label(last_number)!r}"
                    )
                )
            last_number = number
            packages.append(package)
        return Ok(cls(packages))
