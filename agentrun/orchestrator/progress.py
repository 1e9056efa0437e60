# ==============================
# Progress Aggregator
# ==============================
"""
Aggregate progress/status over a run's steps.

Two completion notions coexist on purpose:
- overall_status(): "completed" only when every step is completed or skipped;
  any failure (with nothing running) reports "failed".
- is_complete(): every step is terminal (completed/failed/skipped), i.e.
  finished, not necessarily successful.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence, Union

from agentrun.contracts.csi_schema import CSI, MessageStatus
from agentrun.contracts.step_schema import OrchestrationStep, StepStatus
from agentrun.orchestrator.state import CSI_PENDING, STEP_DONE, STEP_TERMINAL, TASK_ACTIVE, TASK_PROGRESS, TASK_TERMINAL
from agentrun.utils.timeutil import now_iso, round_half_up


def overall_progress(steps: Sequence[OrchestrationStep]) -> int:
    """Unweighted mean of step progress, rounded; 0 for no steps."""
    if not steps:
        return 0
    return round_half_up(sum(s.progress for s in steps) / len(steps))


def overall_status(steps: Sequence[OrchestrationStep]) -> StepStatus:
    """
    Priority order: running > failed > completed (all completed/skipped) > pending.

    A running step dominates failures: failures surface once nothing is in flight.
    """
    if not steps:
        return StepStatus.PENDING
    if any(s.status == StepStatus.RUNNING for s in steps):
        return StepStatus.RUNNING
    if any(s.status == StepStatus.FAILED for s in steps):
        return StepStatus.FAILED
    if all(s.status in STEP_DONE for s in steps):
        return StepStatus.COMPLETED
    return StepStatus.PENDING


def is_complete(steps: Sequence[OrchestrationStep]) -> bool:
    return bool(steps) and all(s.status in STEP_TERMINAL for s in steps)


def csi_from_steps(steps: Sequence[OrchestrationStep], *, now: Optional[datetime] = None) -> CSI:
    """
    Build a CSI snapshot from an orchestration plan.

    Progress here is the mean step progress, not the completed-count ratio the
    tracker's update path uses.
    """
    running = next((s for s in steps if s.status == StepStatus.RUNNING), None)
    return CSI(
        completed_steps=[s.step_name for s in steps if s.status == StepStatus.COMPLETED],
        current_progress=overall_progress(steps),
        total_steps=max(len(steps), 1),
        current_step=running.step_name if running is not None else CSI_PENDING,
        metadata={
            "timestamp": now_iso(now),
            "stepsStatus": [
                {"stepName": s.step_name, "status": s.status.value, "progress": s.progress}
                for s in steps
            ],
        },
    )


# ==============================
# Agent Task Status
# ==============================
def _task_status(status: Union[MessageStatus, str]) -> Optional[MessageStatus]:
    try:
        return MessageStatus(status)
    except ValueError:
        return None


def is_task_completed(status: Union[MessageStatus, str]) -> bool:
    """Finished in any way: completed, failed or cancelled."""
    return _task_status(status) in TASK_TERMINAL


def is_task_active(status: Union[MessageStatus, str]) -> bool:
    return _task_status(status) in TASK_ACTIVE


def task_progress(status: Union[MessageStatus, str]) -> int:
    """Coarse progress implied by a task status alone; unknown statuses map to 0."""
    task = _task_status(status)
    return TASK_PROGRESS.get(task, 0) if task is not None else 0
