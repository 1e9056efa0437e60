# ==============================
# Decomposition Tracker
# ==============================
"""
Helpers for the decomposition phase of a run.

Pure, like the rest of the orchestrator package: steps are immutable values and
every update returns a new one. Progress here is count-based (completed steps
over all steps), unlike overall_progress which averages per-step percentages.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Sequence, Union

from agentrun.contracts.decomposition_schema import (
    DecompositionContext,
    DecompositionEvent,
    DecompositionKind,
    DecompositionStatus,
    DecompositionStep,
)
from agentrun.contracts.request_schema import BrandContext
from agentrun.utils.timeutil import now_iso, round_half_up

_FINISHED = frozenset({DecompositionStatus.COMPLETED, DecompositionStatus.FAILED})


def create_decomposition_step(
    step_name: str,
    step_type: DecompositionKind,
    metadata: Optional[Dict[str, Any]] = None,
    *,
    now: Optional[datetime] = None,
) -> DecompositionStep:
    return DecompositionStep(
        step_name=step_name,
        step_type=step_type,
        status=DecompositionStatus.PENDING,
        metadata=dict(metadata or {}),
        timestamp=now_iso(now),
    )


def update_decomposition_step(
    step: DecompositionStep,
    status: DecompositionStatus,
    result: Any = None,
    metadata: Optional[Dict[str, Any]] = None,
    *,
    now: Optional[datetime] = None,
) -> DecompositionStep:
    """New step with status/result replaced, metadata merged and timestamp restamped."""
    return DecompositionStep.model_validate(
        {
            **step.model_dump(),
            "status": status,
            "result": result,
            "metadata": {**step.metadata, **(metadata or {})},
            "timestamp": now_iso(now),
        }
    )


def calculate_decomposition_progress(steps: Sequence[DecompositionStep]) -> int:
    """Share of completed steps as a half-up rounded percentage; 0 for no steps."""
    if not steps:
        return 0
    done = sum(1 for s in steps if s.status == DecompositionStatus.COMPLETED)
    return round_half_up(done / len(steps) * 100)


def is_decomposition_complete(steps: Sequence[DecompositionStep]) -> bool:
    """True when there is at least one step and every step completed or failed."""
    return bool(steps) and all(s.status in _FINISHED for s in steps)


def get_current_decomposition_step(steps: Sequence[DecompositionStep]) -> Optional[DecompositionStep]:
    """First running step, else first pending step, else None."""
    for wanted in (DecompositionStatus.RUNNING, DecompositionStatus.PENDING):
        for s in steps:
            if s.status == wanted:
                return s
    return None


def transform_brand_context(context: Union[DecompositionContext, Mapping[str, Any]]) -> BrandContext:
    """
    Flatten a decomposition context into the BrandContext shape.

    colors keeps the non-empty palette values in primary/secondary/accent/neutral
    order; an empty messaging string becomes None.
    """
    if not isinstance(context, DecompositionContext):
        context = DecompositionContext.model_validate(context)

    kit = context.brand_kit
    colors = [c for c in kit.colors.model_dump().values() if c] if kit.colors else []
    return BrandContext(
        brand_name=kit.brand_name,
        colors=colors,
        messaging=kit.messaging or None,
        reference_images=list(context.reference_images),
    )


def validate_decomposition_event(data: Any) -> DecompositionEvent:
    """Strict parse; raises pydantic.ValidationError on malformed input."""
    return DecompositionEvent.model_validate(data)
