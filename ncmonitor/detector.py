"""
detector.py - Name confusion detection orchestrator for ncmonitor.

Ties the pipeline together for one closed audit event:
  1. Extract PathActions from the event's records.
  2. Replay them against the Timeline in causal order.
  3. Hand any violations to the reporter.

This module does NOT read files or print anything itself.  Input comes
from :mod:`ncmonitor.monitor`, output goes through :mod:`ncmonitor.reporter`.
"""

from __future__ import annotations

import logging
from typing import Callable

from ncmonitor.events import Event
from ncmonitor.extractor import PathActionExtractor
from ncmonitor.syscalls import SyscallResolver
from ncmonitor.timeline import Timeline, Violation

logger = logging.getLogger(__name__)


class Detector:
    """Stateful create/use detector fed one event at a time.

    Parameters:
        names:        Syscall number to name lookup (numeric if omitted).
        log_bad_open: Forwarded to the Timeline.
        on_violation: Called with each Violation as it is found.
    """

    def __init__(
        self,
        names: SyscallResolver | None = None,
        log_bad_open: bool = False,
        on_violation: Callable[[Violation], None] | None = None,
    ) -> None:
        self._extractor = PathActionExtractor(names)
        self.timeline = Timeline(log_bad_open=log_bad_open)
        self._on_violation = on_violation
        self.events_processed = 0
        self.actions_processed = 0
        self.violations_found = 0

    def process_event(self, event: Event) -> list[Violation]:
        """Replay one event and return the violations it produced."""
        actions = self._extractor.extract(event)
        violations = self.timeline.apply_event(actions)

        self.events_processed += 1
        self.actions_processed += len(actions)
        self.violations_found += len(violations)

        if self._on_violation is not None:
            for violation in violations:
                self._on_violation(violation)
        return violations

    def get_statistics(self) -> dict[str, int]:
        return {
            "events": self.events_processed,
            "path_actions": self.actions_processed,
            "violations": self.violations_found,
            "tracked_creates": len(self.timeline),
        }
