# ==============================
# Testing Fixtures
# ==============================
from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from agentrun.config.schema import Settings
from agentrun.contracts.step_schema import OrchestrationStep, StepKind
from agentrun.orchestrator.steps import create_step


@pytest.fixture
def fixed_now() -> datetime:
    """Deterministic clock for timestamp stamping."""
    return datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def chain_steps(fixed_now: datetime) -> List[OrchestrationStep]:
    """a <- b <- c, all pending."""
    return [
        create_step("a", "Step A", StepKind.ANALYSIS, now=fixed_now),
        create_step("b", "Step B", StepKind.PLANNING, ["a"], now=fixed_now),
        create_step("c", "Step C", StepKind.EXECUTION, ["b"], now=fixed_now),
    ]
