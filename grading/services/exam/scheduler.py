from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Dict, List

from .state_machine import ExamSessionRunner

logger = logging.getLogger(__name__)


class SessionScheduler:
    """
    Drives every active exam countdown from one loop.

    Each registered runner gets at most one tick per pass. Runners that have
    been submitted or cancelled are dropped on the next pass.
    """

    def __init__(self, interval_s: float = 1.0):
        self.interval_s = float(interval_s)
        self._runners: Dict[str, ExamSessionRunner] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._runners)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._runners

    def register(self, runner: ExamSessionRunner) -> None:
        with self._lock:
            self._runners[runner.session.id] = runner

    def unregister(self, session_id: str) -> ExamSessionRunner | None:
        with self._lock:
            return self._runners.pop(session_id, None)

    def tick_all(self) -> List[str]:
        """Advance every active session by one second; returns auto-submitted ids."""
        with self._lock:
            runners = list(self._runners.values())

        expired: List[str] = []
        for runner in runners:
            if runner.is_active and runner.tick():
                expired.append(runner.session.id)

        with self._lock:
            for sid in [sid for sid, r in self._runners.items() if not r.is_active]:
                self._runners.pop(sid, None)
        if expired:
            logger.info(" EXAM_SCHEDULER_AUTO_SUBMIT sessions=%s", ",".join(expired))
        return expired

    def run(self, stop_event: threading.Event) -> None:
        logger.info(" EXAM_SCHEDULER_START interval_s=%s", self.interval_s)
        while not stop_event.wait(self.interval_s):
            self.tick_all()
        logger.info(" EXAM_SCHEDULER_STOP active=%s", len(self._runners))
