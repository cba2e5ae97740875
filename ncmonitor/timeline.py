"""
timeline.py - Create/use consistency checking for ncmonitor.

The Timeline remembers the last successful CREATE of every filesystem
object (keyed by ``dev|inode``) and checks each later use of that object
against it.  A use whose normalized path differs from the create's is a
:class:`Violation`.

Within one audit event PATH records are listed last-touched-first, so
:meth:`Timeline.apply_event` replays them from the last to the first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ncmonitor.errors import UnknownOperationError
from ncmonitor.extractor import Operation, PathAction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Violation:
    """A CREATE and a later USE of the same object under different paths."""

    create: PathAction
    use: PathAction

    def to_dict(self) -> dict:
        return {"create": self.create.to_dict(), "use": self.use.to_dict()}


class Timeline:
    """Replays PathActions and reports create/use name mismatches.

    Parameters:
        log_bad_open: Log successful uses made by ``open``/``openat`` with
                      O_CREAT set (diagnostic only).
    """

    def __init__(self, log_bad_open: bool = False) -> None:
        self.log_bad_open = log_bad_open
        self._history: dict[str, PathAction] = {}

    def __len__(self) -> int:
        return len(self._history)

    def __contains__(self, identity: str) -> bool:
        return identity in self._history

    def lookup(self, identity: str) -> PathAction | None:
        """Most recent recorded CREATE for *identity*, if any."""
        return self._history.get(identity)

    def apply_event(self, actions: list[PathAction]) -> list[Violation]:
        """Apply one event's actions in causal (reverse trace) order."""
        violations = []
        for action in reversed(actions):
            violation = self.apply(action)
            if violation is not None:
                violations.append(violation)
        return violations

    def apply(self, action: PathAction) -> Violation | None:
        """Apply a single action and return the violation it exposes, if any."""
        op = action.operation
        if op == Operation.CREATE:
            self._record_create(action)
        elif op in (Operation.NORMAL, Operation.PARENT):
            return self._verify_use(action)
        elif op == Operation.DELETE:
            self._history.pop(action.identity, None)
        elif op == Operation.UNKNOWN:
            logger.debug("op=UNKNOWN: %s", action.describe(verbose=True))
        else:
            raise UnknownOperationError(f"unhandled PATH operation {op!r}")
        return None

    def _record_create(self, action: PathAction) -> None:
        # A failed create must not poison later matches
        if not action.syscall_succeeded:
            return
        if action.is_null_path:
            return
        self._history[action.identity] = action

    def _verify_use(self, action: PathAction) -> Violation | None:
        if not action.syscall_succeeded:
            return None

        if self.log_bad_open and action.syscall.flag_create():
            logger.info("use with O_CREAT: %s", action.describe(verbose=True))

        if action.is_null_path:
            return None

        create = self._history.get(action.identity)
        if create is None:
            return None

        if create.normalized_path != action.normalized_path:
            return Violation(create=create, use=action)
        return None
