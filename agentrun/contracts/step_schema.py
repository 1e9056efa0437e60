# ==============================
# Step Contracts
# ==============================
"""
Step contracts for agentrun.

These models define the stable representation of one unit of orchestration work
inside an agent run, plus the structured error attached to a failed step.

Intended usage:
- orchestrator.steps creates/updates OrchestrationStep values
- orchestrator.dependencies and orchestrator.progress read them
- Callers persist/publish them (no persistence here)

Steps are immutable values. "Updating" a step means building a new one.
Python field names are snake_case; the camelCase wire names are accepted and
emitted as aliases.
"""

# ==============================
# Imports
# ==============================
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# ==============================
# Enums
# ==============================
class StepStatus(str, Enum):
    """Lifecycle status for a step: pending -> running -> completed|failed|skipped."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class StepKind(str, Enum):
    """What a step does in the run."""
    DECOMPOSITION = "decomposition"
    ANALYSIS = "analysis"
    PLANNING = "planning"
    COORDINATION = "coordination"
    EXECUTION = "execution"
    COMPLETION = "completion"


# ==============================
# Models
# ==============================
class StepError(BaseModel):
    """Structured error for a failed step. Errors are data, not control flow."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    message: str = Field(..., description="Human readable message.")
    code: str = Field(..., description="Machine-readable error code.")
    retry: bool = Field(default=False, description="Whether a new attempt might succeed.")
    details: Optional[Any] = Field(default=None, description="Optional structured details.")


class OrchestrationStep(BaseModel):
    """
    One step of an orchestration plan.

    Notes:
    - dependencies lists step ids that must be completed before this step may run.
    - metadata is opaque to the resolver/aggregator and carried through unchanged.
      The tracker writes startedAt / completedAt / duration / retryCount into it.
    """
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    step_id: str = Field(..., min_length=1, alias="stepId", description="Unique step id within the run.")
    step_name: str = Field(..., alias="stepName", description="Human-friendly step name.")
    step_type: StepKind = Field(..., alias="stepType", description="Step kind.")
    status: StepStatus = Field(default=StepStatus.PENDING, description="Current step status.")
    progress: int = Field(default=0, ge=0, le=100, description="Step progress percentage.")

    result: Optional[Any] = Field(default=None, description="Optional result payload.")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Timing/result metadata.")
    dependencies: List[str] = Field(default_factory=list, description="Step ids this step waits on.")
    error: Optional[StepError] = Field(default=None, description="Structured error if the step failed.")

    def to_dict(self) -> Dict[str, Any]:
        """Stable serialization wrapper (wire names)."""
        return self.model_dump(mode="json", by_alias=True)
