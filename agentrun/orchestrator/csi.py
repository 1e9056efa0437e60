# ==============================
# CSI Tracker
# ==============================
"""
Current Step Information (CSI) tracking.

Every function returns a new value; nothing is mutated in place.

Single-writer rule:
update_csi() appends to completed_steps and recomputes progress from the new
length. Two uncoordinated callers updating the same CSI will lose one append.
Serialize updates upstream (per-run lock, version compare-and-swap).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Union

from agentrun.contracts.csi_schema import CSI, DEFAULT_TOTAL_STEPS, MessageMetadata, MessageStatus
from agentrun.orchestrator.state import CSI_COMPLETED, CSI_PENDING
from agentrun.utils.timeutil import epoch_ms, now_iso, round_half_up, utc_now

CSIUpdates = Union[CSI, Mapping[str, Any]]


# ==============================
# Tracker
# ==============================
def create_csi(
    current_step: str = CSI_PENDING,
    total_steps: int = DEFAULT_TOTAL_STEPS,
    metadata: Optional[Dict[str, Any]] = None,
    *,
    now: Optional[datetime] = None,
) -> CSI:
    return CSI(
        completed_steps=[],
        current_progress=0,
        total_steps=total_steps,
        current_step=current_step,
        metadata={"createdAt": now_iso(now), **(metadata or {})},
    )


def update_csi(
    csi: CSI,
    completed_step: str,
    new_current_step: str,
    metadata: Optional[Dict[str, Any]] = None,
    *,
    clamp: bool = False,
    now: Optional[datetime] = None,
) -> CSI:
    """
    Record `completed_step` and move the pointer to `new_current_step`.

    No de-duplication. Progress is round(len(completed) / total * 100) and may
    exceed 100 unless clamp=True.
    """
    completed = [*csi.completed_steps, completed_step]
    progress = round_half_up(len(completed) / csi.total_steps * 100)
    if clamp:
        progress = min(progress, 100)
    return CSI.model_validate(
        {
            **csi.model_dump(),
            "completed_steps": completed,
            "current_progress": progress,
            "current_step": new_current_step,
            "metadata": {**csi.metadata, **(metadata or {}), "updatedAt": now_iso(now)},
        }
    )


def is_csi_complete(csi: CSI) -> bool:
    # any one condition suffices
    return (
        csi.current_progress >= 100
        or len(csi.completed_steps) >= csi.total_steps
        or csi.current_step == CSI_COMPLETED
    )


def merge_csi(existing: CSI, updates: CSIUpdates, *, now: Optional[datetime] = None) -> CSI:
    """
    Shallow merge: fields present in `updates` win.

    completed_steps is replaced wholesale (never concatenated) and only when
    provided; metadata is merged over the existing bag and stamped updatedAt.
    Raises pydantic.ValidationError when the merged value breaks the CSI contract.
    """
    if isinstance(updates, CSI):
        patch = updates.model_dump(exclude_unset=True)
    else:
        patch = _normalize_keys(updates)

    patch_meta = patch.pop("metadata", None) or {}
    if patch.get("completed_steps") is None:
        patch.pop("completed_steps", None)

    # re-validate so a malformed patch raises instead of yielding a broken CSI
    return CSI.model_validate(
        {
            **existing.model_dump(),
            **patch,
            "metadata": {**existing.metadata, **patch_meta, "updatedAt": now_iso(now)},
        }
    )


def parse_csi(data: Any) -> CSI:
    """Strict parse; raises pydantic.ValidationError on malformed input."""
    return CSI.model_validate(data)


def _normalize_keys(updates: Mapping[str, Any]) -> Dict[str, Any]:
    aliases = {field.alias: name for name, field in CSI.model_fields.items() if field.alias}
    out: Dict[str, Any] = {}
    for key, value in updates.items():
        name = aliases.get(key, key)
        if name not in CSI.model_fields:
            raise KeyError(f"Unknown CSI field: {key}")
        out[name] = value
    return out


# ==============================
# Step Progress + Message Factories
# ==============================
def calculate_step_progress(step_number: int, total_steps: int, is_completed: bool = False) -> int:
    """Completed: n/total. Running: shown slightly short of n/total."""
    if is_completed:
        return round_half_up(step_number / total_steps * 100)
    return round_half_up((step_number - 0.1) / total_steps * 100)


def create_step_metadata(
    step_name: str,
    agent_type: str,
    step_number: int,
    total_steps: int,
    tool_name: str,
    *,
    now: Optional[datetime] = None,
    **overrides: Any,
) -> MessageMetadata:
    base: Dict[str, Any] = {
        "type": "agent_step",
        "step": step_name,
        "status": MessageStatus.PENDING,
        "progress": round_half_up(step_number / total_steps * 100),
        "agent_type": agent_type,
        "tool_name": tool_name,
        "timestamp": now_iso(now),
        "step_number": step_number,
        "total_steps": total_steps,
        "generated_assets": [],
    }
    return MessageMetadata.model_validate({**base, **overrides})


def create_versioned_metadata(
    step: str,
    status: MessageStatus,
    progress: int,
    *,
    now: Optional[datetime] = None,
    **overrides: Any,
) -> MessageMetadata:
    """Message metadata stamped with a status version (epoch ms) for ordering."""
    stamp = utc_now(now)
    ts = now_iso(stamp)
    base: Dict[str, Any] = {
        "type": "agent_step",
        "step": step,
        "status": status,
        "progress": progress,
        "timestamp": ts,
        "status_version": epoch_ms(stamp),
        "emission_timestamp": ts,
        "generated_assets": [],
    }
    return MessageMetadata.model_validate({**base, **overrides})


def parse_message_metadata(data: Any) -> MessageMetadata:
    """Strict parse; raises pydantic.ValidationError on malformed input."""
    return MessageMetadata.model_validate(data)
