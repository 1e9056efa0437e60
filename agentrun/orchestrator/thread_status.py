# ==============================
# Thread Status Analyzer
# ==============================
"""
Derive a thread's execution status from its step-event messages.

Stateless reducer: every call re-derives the answer from the full message window
it is given. Only order-independent aggregations (any/max/min/count) are used, so
duplicated or reordered messages produce the same result.

Messages may be MessageMetadata models or plain mappings with camelCase or
snake_case keys.
"""

from __future__ import annotations

from datetime import datetime
from typing import AbstractSet, Any, Iterable, List, Mapping, Optional, Sequence, Union

from agentrun.contracts.csi_schema import (
    DEFAULT_TOTAL_STEPS,
    MessageMetadata,
    MessageStatus,
    ThreadAnalysis,
    ThreadExecutionStatus,
    ThreadStatusRecord,
)
from agentrun.orchestrator.state import COMPLETION_SENTINELS, CSI_COMPLETED, MESSAGE_ACTIVE
from agentrun.utils.timeutil import parse_iso, round_half_up, to_iso

ThreadMessage = Union[MessageMetadata, Mapping[str, Any]]

_KEYS = {
    "step": ("step",),
    "status": ("status",),
    "progress": ("progress",),
    "step_number": ("stepNumber", "step_number"),
    "total_steps": ("totalSteps", "total_steps"),
    "timestamp": ("timestamp",),
}


# ==============================
# Message Access
# ==============================
def _field(msg: ThreadMessage, name: str) -> Any:
    if isinstance(msg, MessageMetadata):
        return getattr(msg, name)
    for key in _KEYS[name]:
        if key in msg:
            return msg[key]
    return None


def _status(msg: ThreadMessage) -> Optional[MessageStatus]:
    raw = _field(msg, "status")
    if raw is None:
        return None
    try:
        return MessageStatus(raw)
    except ValueError:
        return None


def _is_final_completion(msg: ThreadMessage, sentinels: AbstractSet[str]) -> bool:
    return _status(msg) == MessageStatus.COMPLETED and _field(msg, "step") in sentinels


# ==============================
# Public API
# ==============================
def extract_status_from_metadata(
    metadata: Optional[ThreadMessage],
    *,
    sentinels: AbstractSet[str] = COMPLETION_SENTINELS,
) -> ThreadExecutionStatus:
    """Status implied by a single message (e.g. the latest one of a thread)."""
    if metadata is None:
        return ThreadExecutionStatus.PENDING
    if _is_final_completion(metadata, sentinels):
        return ThreadExecutionStatus.COMPLETED
    status = _status(metadata)
    if status == MessageStatus.FAILED:
        return ThreadExecutionStatus.FAILED
    if status == MessageStatus.CANCELLED:
        return ThreadExecutionStatus.CANCELLED
    if status == MessageStatus.RUNNING:
        return ThreadExecutionStatus.RUNNING
    return ThreadExecutionStatus.PENDING


def analyze_thread_state(
    messages: Iterable[ThreadMessage],
    *,
    sentinels: AbstractSet[str] = COMPLETION_SENTINELS,
) -> ThreadAnalysis:
    """
    Consolidate a thread's message window.

    A final-completion sentinel wins over anything still running and flips the
    client from realtime events to the historical summary.
    """
    window = list(messages)

    has_running = any(_status(m) in MESSAGE_ACTIVE for m in window)
    has_final = any(_is_final_completion(m, sentinels) for m in window)

    progress_values = [p for p in (_field(m, "progress") or 0 for m in window) if p > 0]
    totals = [t for t in (_field(m, "total_steps") for m in window) if t]

    if has_final:
        execution_status = ThreadExecutionStatus.COMPLETED
    elif has_running:
        execution_status = ThreadExecutionStatus.RUNNING
    else:
        execution_status = ThreadExecutionStatus.PENDING

    return ThreadAnalysis(
        has_running_steps=has_running,
        has_final_completion=has_final,
        should_switch_to_historical=has_final,
        should_enable_realtime=not has_final,
        execution_status=execution_status,
        current_progress=round_half_up(max(progress_values)) if progress_values else 0,
        completed_steps=sum(1 for m in window if _status(m) == MessageStatus.COMPLETED),
        total_steps=max(totals) if totals else DEFAULT_TOTAL_STEPS,
    )


def summarize_thread(
    thread_id: str,
    messages: Iterable[ThreadMessage],
    *,
    sentinels: AbstractSet[str] = COMPLETION_SENTINELS,
) -> ThreadStatusRecord:
    """
    Build the user-visible status record of a thread.

    Beyond analyze_thread_state(): a window with nothing in flight and a failed
    (or cancelled) message reports FAILED (or CANCELLED) with the failed step
    names in `error`.
    """
    window = list(messages)
    analysis = analyze_thread_state(window, sentinels=sentinels)
    statuses = {_status(m) for m in window}

    status = analysis.execution_status
    error: Optional[str] = None
    if status == ThreadExecutionStatus.PENDING:
        if MessageStatus.FAILED in statuses:
            status = ThreadExecutionStatus.FAILED
            failed = sorted({str(_field(m, "step") or "unknown") for m in window if _status(m) == MessageStatus.FAILED})
            error = f"Failed steps: {', '.join(failed)}"
        elif MessageStatus.CANCELLED in statuses:
            status = ThreadExecutionStatus.CANCELLED

    timestamps = _timestamps(window)
    completion_times = _timestamps(m for m in window if _is_final_completion(m, sentinels))

    return ThreadStatusRecord(
        thread_id=thread_id,
        status=status,
        current_step=_current_step(window, analysis.has_final_completion),
        total_steps=analysis.total_steps,
        completed_steps=analysis.completed_steps,
        progress=analysis.current_progress,
        should_enable_realtime=analysis.should_enable_realtime,
        should_switch_to_historical=analysis.should_switch_to_historical,
        started_at=to_iso(min(timestamps)) if timestamps else None,
        completed_at=to_iso(max(completion_times)) if completion_times else None,
        error=error,
    )


# ==============================
# Helpers
# ==============================
def _current_step(window: Sequence[ThreadMessage], finished: bool) -> Optional[str]:
    if finished:
        return CSI_COMPLETED
    active = [
        (int(_field(m, "step_number") or 0), str(_field(m, "step")))
        for m in window
        if _status(m) in MESSAGE_ACTIVE and _field(m, "step")
    ]
    # furthest step wins; name breaks ties so input order never matters
    return max(active)[1] if active else None


def _timestamps(window: Iterable[ThreadMessage]) -> List[datetime]:
    out: List[datetime] = []
    for m in window:
        ts = parse_iso(_field(m, "timestamp"))
        if ts is not None:
            out.append(ts)
    return out
