# ==============================
# Tests: CSI Tracker
# ==============================
from __future__ import annotations

from datetime import timedelta

import pytest
from pydantic import ValidationError

from agentrun.contracts.csi_schema import CSI, MessageStatus
from agentrun.orchestrator.csi import (
    calculate_step_progress,
    create_csi,
    create_step_metadata,
    create_versioned_metadata,
    is_csi_complete,
    merge_csi,
    parse_csi,
    parse_message_metadata,
    update_csi,
)


def test_create_defaults(fixed_now) -> None:
    csi = create_csi(now=fixed_now, metadata={"runId": "r1"})
    assert csi.current_step == "pending"
    assert csi.total_steps == 4
    assert csi.completed_steps == []
    assert csi.current_progress == 0
    assert csi.metadata == {"createdAt": "2025-03-01T12:00:00.000Z", "runId": "r1"}


def test_four_updates_reach_completion(fixed_now) -> None:
    csi = create_csi("intent", 4, now=fixed_now)
    for i, (done, nxt) in enumerate([("intent", "brand"), ("brand", "plan"), ("plan", "generate")]):
        csi = update_csi(csi, done, nxt, now=fixed_now + timedelta(seconds=i))
    assert csi.current_progress == 75
    assert is_csi_complete(csi) is False

    csi = update_csi(csi, "generate", "completed", now=fixed_now)
    assert csi.current_progress == 100
    assert csi.completed_steps == ["intent", "brand", "plan", "generate"]
    assert is_csi_complete(csi) is True


@pytest.mark.parametrize("n,total", [(1, 3), (2, 3), (5, 7), (1, 8)])
def test_progress_formula(n: int, total: int) -> None:
    csi = create_csi(total_steps=total)
    for i in range(n):
        csi = update_csi(csi, f"step_{i}", f"step_{i + 1}")
    assert len(csi.completed_steps) == n
    assert csi.completed_steps == [f"step_{i}" for i in range(n)]
    assert csi.current_progress == int(n / total * 100 + 0.5)


def test_update_does_not_mutate_input(fixed_now) -> None:
    csi = create_csi(now=fixed_now)
    updated = update_csi(csi, "a", "b", {"note": "x"}, now=fixed_now)
    assert csi.completed_steps == []
    assert "updatedAt" not in csi.metadata
    assert updated.metadata["createdAt"] == csi.metadata["createdAt"]
    assert updated.metadata["note"] == "x"
    assert updated.metadata["updatedAt"] == "2025-03-01T12:00:00.000Z"


def test_duplicate_completions_exceed_100_unless_clamped() -> None:
    csi = create_csi(total_steps=2)
    for _ in range(3):
        csi = update_csi(csi, "same", "same")
    assert csi.completed_steps == ["same", "same", "same"]
    assert csi.current_progress == 150

    clamped = update_csi(create_csi(total_steps=1), "a", "b", clamp=True)
    clamped = update_csi(clamped, "a", "b", clamp=True)
    assert clamped.current_progress == 100


def test_complete_when_current_step_is_completed() -> None:
    csi = create_csi(current_step="completed")
    assert csi.current_progress == 0
    assert csi.completed_steps == []
    assert is_csi_complete(csi) is True


def test_complete_by_count_alone() -> None:
    csi = CSI(completed_steps=["a", "b"], current_progress=10, total_steps=2, current_step="b")
    assert is_csi_complete(csi) is True


def test_merge_replaces_completed_steps_and_merges_metadata(fixed_now) -> None:
    existing = CSI(completed_steps=["a"], current_progress=25, current_step="b", metadata={"createdAt": "t0", "k": 1})
    merged = merge_csi(
        existing,
        {"completedSteps": ["x", "y"], "currentStep": "z", "metadata": {"k": 2}},
        now=fixed_now,
    )
    assert merged.completed_steps == ["x", "y"]
    assert merged.current_step == "z"
    assert merged.current_progress == 25
    assert merged.metadata == {"createdAt": "t0", "k": 2, "updatedAt": "2025-03-01T12:00:00.000Z"}


def test_merge_keeps_completed_steps_when_absent() -> None:
    existing = CSI(completed_steps=["a"], current_step="b")
    merged = merge_csi(existing, {"current_progress": 50})
    assert merged.completed_steps == ["a"]
    assert merged.current_progress == 50
    assert "updatedAt" in merged.metadata


def test_merge_accepts_partial_csi_model() -> None:
    existing = CSI(completed_steps=["a"], total_steps=6, current_step="b")
    merged = merge_csi(existing, CSI(current_step="c"))
    assert merged.current_step == "c"
    assert merged.total_steps == 6
    assert merged.completed_steps == ["a"]


def test_merge_rejects_unknown_fields() -> None:
    with pytest.raises(KeyError):
        merge_csi(CSI(), {"bogus": 1})


def test_calculate_step_progress() -> None:
    assert calculate_step_progress(2, 4, is_completed=True) == 50
    assert calculate_step_progress(3, 5) == 58
    assert calculate_step_progress(1, 3) == 30


def test_step_metadata_factories(fixed_now) -> None:
    meta = create_step_metadata("brand_analysis", "CONTENT_GENERATION_AGENT", 2, 4, "brand_tool", now=fixed_now)
    assert meta.status == MessageStatus.PENDING
    assert meta.progress == 50
    assert meta.step_number == 2
    assert meta.timestamp == "2025-03-01T12:00:00.000Z"

    overridden = create_step_metadata("x", "A", 1, 4, "t", status="running", progress=10)
    assert overridden.status == MessageStatus.RUNNING
    assert overridden.progress == 10

    versioned = create_versioned_metadata("final_completion", MessageStatus.COMPLETED, 100, now=fixed_now)
    assert versioned.status_version == int(fixed_now.timestamp() * 1000)
    assert versioned.emission_timestamp == versioned.timestamp


def test_strict_parsers_raise() -> None:
    assert parse_csi({"completedSteps": ["a"], "totalSteps": 2}).completed_steps == ["a"]
    with pytest.raises(ValidationError):
        parse_csi({"totalSteps": -1})
    with pytest.raises(ValidationError):
        parse_message_metadata({"status": "exploded"})


def test_merge_revalidates_the_merged_value() -> None:
    with pytest.raises(ValidationError):
        merge_csi(create_csi(), {"totalSteps": 0})
    with pytest.raises(ValidationError):
        merge_csi(create_csi(), {"completedSteps": "ab"})


def test_update_rejects_non_string_step_names() -> None:
    with pytest.raises(ValidationError):
        update_csi(create_csi(), None, "next")
