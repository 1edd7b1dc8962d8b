"""Error codes for CLI exit status.

Every error kind surfaced by a command maps onto one of these codes, so
scripts driving ``otactl`` can tell a typo from a refused release without
parsing messages.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success
    - 1: User error (bad option value, invalid semver range, bad format)
    - 2: Not found (unknown app, deployment, collaborator, label, bundle path)
    - 3: Conflict (name already taken, identical release content)
    - 4: State error (a release rule refused the mutation)
    - 5: I/O error (store file unreadable or unwritable)
    - 6: Internal error (corrupt package history)
    """

    OK = 0
    USER_ERROR = 1
    NOT_FOUND = 2
    CONFLICT = 3
    STATE_ERROR = 4
    IO_ERROR = 5
    INTERNAL_ERROR = 6

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
