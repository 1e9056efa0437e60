# ==============================
# Step Factory
# ==============================
"""
Creation and update of OrchestrationStep values.

Pure: every function returns a new step and never mutates its input. The new
metadata dict extends the old one; the two never share a reference.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from agentrun.contracts.step_schema import OrchestrationStep, StepError, StepKind, StepStatus
from agentrun.utils.timeutil import epoch_ms, now_iso, parse_iso, utc_now


def create_step(
    step_id: str,
    step_name: str,
    step_type: StepKind,
    dependencies: Iterable[str] = (),
    *,
    now: Optional[datetime] = None,
) -> OrchestrationStep:
    """New pending step with progress 0 and seeded timing metadata."""
    return OrchestrationStep(
        step_id=step_id,
        step_name=step_name,
        step_type=step_type,
        status=StepStatus.PENDING,
        progress=0,
        dependencies=list(dependencies),
        metadata={"startedAt": now_iso(now), "retryCount": 0},
    )


def update_step(
    step: OrchestrationStep,
    status: StepStatus,
    progress: int,
    result: Any = None,
    metadata: Optional[Dict[str, Any]] = None,
    *,
    now: Optional[datetime] = None,
) -> OrchestrationStep:
    """
    Return a copy of `step` with new status/progress/result.

    completed/failed stamp completedAt. Elapsed milliseconds are written as both
    durationMs and duration (the older key read by existing consumers), only when
    metadata.startedAt is present and parseable.

    Raises pydantic.ValidationError for values outside the step contract
    (e.g. progress > 100).
    """
    merged: Dict[str, Any] = {**step.metadata, **(metadata or {})}
    status = StepStatus(status)

    if status in (StepStatus.COMPLETED, StepStatus.FAILED):
        ts = utc_now(now)
        merged["completedAt"] = now_iso(ts)
        started = parse_iso(step.metadata.get("startedAt"))
        if started is not None:
            elapsed_ms = int((ts - started).total_seconds() * 1000)
            merged["durationMs"] = elapsed_ms
            merged["duration"] = elapsed_ms

    return OrchestrationStep.model_validate(
        {
            **step.model_dump(),
            "status": status,
            "progress": progress,
            "result": result,
            "metadata": merged,
        }
    )


def create_step_error(
    message: str,
    code: str,
    retry: bool = False,
    details: Any = None,
) -> StepError:
    return StepError(message=message, code=code, retry=retry, details=details)


def generate_orchestration_id(user_id: str, thread_id: str, *, now: Optional[datetime] = None) -> str:
    return f"orch_{user_id[:8]}_{thread_id[:8]}_{epoch_ms(now)}"


def create_content_generation_steps(*, now: Optional[datetime] = None) -> List[OrchestrationStep]:
    """Standard plan for a content generation run."""
    return [
        create_step("intent_analysis", "Intent Analysis", StepKind.ANALYSIS, now=now),
        create_step("brand_analysis", "Brand Analysis", StepKind.ANALYSIS, ["intent_analysis"], now=now),
        create_step(
            "complexity_assessment",
            "Complexity Assessment",
            StepKind.ANALYSIS,
            ["intent_analysis", "brand_analysis"],
            now=now,
        ),
        create_step("execution_planning", "Execution Planning", StepKind.COORDINATION, ["complexity_assessment"], now=now),
        create_step("content_generation", "Content Generation", StepKind.EXECUTION, ["execution_planning"], now=now),
        create_step("finalization", "Finalization", StepKind.COMPLETION, ["content_generation"], now=now),
    ]
