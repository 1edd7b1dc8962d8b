"""Release bounded context.

- model: Package, ReleaseCandidate, BundleDescriptor and the wire format
- history: the per-deployment package log (sole owner of labels)
- rollout: staged rollout rules
- machine: release, patch, promote, rollback, clear
- errors: the error taxonomy shared by every layer above
"""

from __future__ import annotations

from .errors import ReleaseError
from .history import PackageHistoryStore
from .machine import ReleaseOutcome, ReleaseStateMachine
from .model import BundleDescriptor, Package, ReleaseCandidate, ReleaseMethod
from .options import PatchOptions, PromoteOptions, ReleaseOptions

__all__ = [
    "BundleDescriptor",
    "Package",
    "PackageHistoryStore",
    "PatchOptions",
    "PromoteOptions",
    "ReleaseCandidate",
    "ReleaseError",
    "ReleaseMethod",
    "ReleaseOptions",
    "ReleaseOutcome",
    "ReleaseStateMachine",
]
