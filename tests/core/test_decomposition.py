# ==============================
# Tests: Decomposition Tracker
# ==============================
from __future__ import annotations

from datetime import timedelta

import pytest
from pydantic import ValidationError

from agentrun.contracts.decomposition_schema import DecompositionKind, DecompositionStatus
from agentrun.contracts.request_schema import AgentType, BrandContext
from agentrun.orchestrator.decomposition import (
    calculate_decomposition_progress,
    create_decomposition_step,
    get_current_decomposition_step,
    is_decomposition_complete,
    transform_brand_context,
    update_decomposition_step,
    validate_decomposition_event,
)

THREAD = "0e9d8c7b-6a5f-4e3d-9c2b-1a0f9e8d7c6b"

CONTEXT = {
    "brandKit": {
        "id": "kit-1",
        "brand_name": "Acme",
        "colors": {"primary": "#111111", "secondary": "", "accent": "#ff0000"},
        "messaging": "Bold and friendly",
    },
    "referenceImages": [{"url": "https://cdn.example.com/a.png", "type": "product", "description": "Hero"}],
}


def _steps(*statuses):
    return [
        update_decomposition_step(create_decomposition_step(f"step {i}", DecompositionKind.ANALYSIS), st)
        for i, st in enumerate(statuses)
    ]


def test_create_step_is_pending_and_stamped(fixed_now) -> None:
    step = create_decomposition_step("analyze", DecompositionKind.ANALYSIS, {"source": "prompt"}, now=fixed_now)
    assert step.status == DecompositionStatus.PENDING
    assert step.metadata == {"source": "prompt"}
    assert step.timestamp == "2025-03-01T12:00:00.000Z"
    assert step.to_dict()["stepName"] == "analyze"


def test_update_step_merges_metadata_and_restamps(fixed_now) -> None:
    step = create_decomposition_step("plan", DecompositionKind.PLANNING, {"a": 1}, now=fixed_now)
    later = fixed_now + timedelta(seconds=3)
    done = update_decomposition_step(step, DecompositionStatus.COMPLETED, {"plan": []}, {"b": 2}, now=later)

    assert done.status == DecompositionStatus.COMPLETED
    assert done.result == {"plan": []}
    assert done.metadata == {"a": 1, "b": 2}
    assert done.timestamp == "2025-03-01T12:00:03.000Z"
    assert step.status == DecompositionStatus.PENDING
    assert step.metadata == {"a": 1}


def test_update_step_rejects_unknown_status(fixed_now) -> None:
    step = create_decomposition_step("plan", DecompositionKind.PLANNING, now=fixed_now)
    with pytest.raises(ValidationError):
        update_decomposition_step(step, "skipped", now=fixed_now)


@pytest.mark.parametrize(
    "statuses, expected",
    [
        ((), 0),
        (("completed", "pending", "pending"), 33),
        (("completed", "completed", "running"), 67),
        (("completed", "failed"), 50),
        (("completed", "completed"), 100),
    ],
)
def test_progress_counts_completed_steps(statuses, expected) -> None:
    assert calculate_decomposition_progress(_steps(*statuses)) == expected


def test_complete_requires_every_step_finished() -> None:
    assert is_decomposition_complete([]) is False
    assert is_decomposition_complete(_steps("completed", "failed")) is True
    assert is_decomposition_complete(_steps("completed", "running")) is False


def test_current_step_prefers_running_over_pending() -> None:
    steps = _steps("completed", "pending", "running")
    assert get_current_decomposition_step(steps) is steps[2]

    steps = _steps("completed", "pending", "pending")
    assert get_current_decomposition_step(steps) is steps[1]

    assert get_current_decomposition_step(_steps("completed", "failed")) is None


def test_transform_brand_context_flattens_palette() -> None:
    brand = transform_brand_context(CONTEXT)
    assert isinstance(brand, BrandContext)
    assert brand.brand_name == "Acme"
    assert brand.colors == ["#111111", "#ff0000"]
    assert brand.messaging == "Bold and friendly"
    assert brand.reference_images[0].description == "Hero"


def test_transform_brand_context_without_colors_or_messaging() -> None:
    brand = transform_brand_context({"brandKit": {"id": "kit-1", "brand_name": "Acme", "messaging": ""}})
    assert brand.colors == []
    assert brand.messaging is None
    assert brand.reference_images == []


def test_validate_decomposition_event() -> None:
    event = validate_decomposition_event(
        {
            "threadId": THREAD,
            "userId": "user-1",
            "agentType": "CONTENT_GENERATION_AGENT",
            "prompt": "Spring launch",
            "context": CONTEXT,
        }
    )
    assert event.agent_type == AgentType.CONTENT_GENERATION_AGENT
    assert event.context.brand_kit.colors is not None and event.context.brand_kit.colors.primary == "#111111"

    with pytest.raises(ValidationError):
        validate_decomposition_event({"threadId": "not-a-uuid", "userId": "", "prompt": "", "context": {}})
