# ==============================
# Progress Service
# ==============================
"""
Settings-aware facade over the pure progress modules.

Holds configuration and a logger only; every call takes its inputs explicitly and
returns new values. Persistence, publishing and CSI single-writer coordination
stay with the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence

from agentrun.config.schema import Settings
from agentrun.contracts.csi_schema import CSI, ThreadStatusRecord
from agentrun.contracts.step_schema import OrchestrationStep, StepStatus
from agentrun.logging.logger import LOGGER_NAME, LogContext, with_context
from agentrun.orchestrator import csi as csi_ops
from agentrun.orchestrator.dependencies import DependencyCycleError, next_executable_steps
from agentrun.orchestrator.progress import csi_from_steps, is_complete, overall_progress, overall_status
from agentrun.orchestrator.state import CSI_PENDING
from agentrun.orchestrator.thread_status import ThreadMessage, summarize_thread


@dataclass(frozen=True)
class ProgressReport:
    """Point-in-time view of a run's step plan."""
    progress: int
    status: StepStatus
    complete: bool
    next_steps: List[OrchestrationStep]
    csi: CSI


class ProgressService:
    def __init__(self, *, settings: Settings, logger: Optional[logging.Logger] = None) -> None:
        self.settings = settings
        self.logger = logger or logging.getLogger(LOGGER_NAME)
        self.sentinels: FrozenSet[str] = frozenset(settings.progress.completion_sentinels)

    @classmethod
    def from_settings(cls, settings: Settings, *, logger: Optional[logging.Logger] = None) -> "ProgressService":
        return cls(settings=settings, logger=logger)

    # ------------------------------------------------------------------ steps
    def plan(self, steps: Sequence[OrchestrationStep], *, run_id: Optional[str] = None) -> List[OrchestrationStep]:
        """Next executable steps; raises DependencyCycleError when cycle checks are enabled."""
        log = with_context(self.logger, LogContext(run_id=run_id))
        try:
            frontier = next_executable_steps(steps, check_cycles=self.settings.progress.check_cycles)
        except DependencyCycleError as exc:
            log.warning("dependency cycle: %s", " -> ".join(exc.cycle))
            raise
        log.debug("frontier=%s", [s.step_id for s in frontier])
        return frontier

    def report(
        self,
        steps: Sequence[OrchestrationStep],
        *,
        run_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ProgressReport:
        report = ProgressReport(
            progress=overall_progress(steps),
            status=overall_status(steps),
            complete=is_complete(steps),
            next_steps=self.plan(steps, run_id=run_id),
            csi=csi_from_steps(steps, now=now),
        )
        with_context(self.logger, LogContext(run_id=run_id)).info(
            "run progress=%s status=%s complete=%s", report.progress, report.status.value, report.complete
        )
        return report

    # ------------------------------------------------------------------ csi
    def start_csi(
        self,
        current_step: str = CSI_PENDING,
        metadata: Optional[Dict[str, Any]] = None,
        *,
        total_steps: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> CSI:
        return csi_ops.create_csi(
            current_step,
            total_steps or self.settings.progress.default_total_steps,
            metadata,
            now=now,
        )

    def advance(
        self,
        csi: CSI,
        completed_step: str,
        next_step: str,
        metadata: Optional[Dict[str, Any]] = None,
        *,
        run_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> CSI:
        updated = csi_ops.update_csi(
            csi,
            completed_step,
            next_step,
            metadata,
            clamp=self.settings.progress.clamp_progress,
            now=now,
        )
        log = with_context(self.logger, LogContext(run_id=run_id, step_id=completed_step))
        if updated.current_progress > 100:
            log.warning("csi progress %s exceeds 100; duplicate completions?", updated.current_progress)
        log.debug("csi advanced to %s (%s%%)", updated.current_step, updated.current_progress)
        return updated

    def is_csi_complete(self, csi: CSI) -> bool:
        return csi_ops.is_csi_complete(csi)

    # ------------------------------------------------------------------ threads
    def thread_status(self, thread_id: str, messages: Iterable[ThreadMessage]) -> ThreadStatusRecord:
        record = summarize_thread(thread_id, messages, sentinels=self.sentinels)
        with_context(self.logger, LogContext(thread_id=thread_id)).debug(
            "thread status=%s realtime=%s", record.status.value, record.should_enable_realtime
        )
        return record
