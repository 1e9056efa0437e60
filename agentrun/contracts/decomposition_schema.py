# ==============================
# Decomposition Contracts
# ==============================
"""
Decomposition contracts: the event that starts a decomposition and the
lightweight step records it produces.

DecompositionStep is simpler than OrchestrationStep: no ids, no dependencies,
no numeric progress. Progress is derived from the count of completed steps.
"""

# ==============================
# Imports
# ==============================
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from agentrun.contracts.request_schema import AgentType, ReferenceImageRef


# ==============================
# Enums
# ==============================
class DecompositionStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class DecompositionKind(str, Enum):
    ANALYSIS = "analysis"
    PLANNING = "planning"
    COORDINATION = "coordination"
    EXECUTION = "execution"


# ==============================
# Event
# ==============================
class BrandColors(BaseModel):
    model_config = ConfigDict(extra="forbid")

    primary: Optional[str] = None
    secondary: Optional[str] = None
    accent: Optional[str] = None
    neutral: Optional[str] = None


class BrandKit(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    brand_name: str
    colors: Optional[BrandColors] = None
    messaging: Optional[str] = None


class DecompositionContext(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    brand_kit: BrandKit = Field(..., alias="brandKit")
    reference_images: List[ReferenceImageRef] = Field(default_factory=list, alias="referenceImages")


class DecompositionEvent(BaseModel):
    """Inbound request to decompose a prompt into steps for one thread."""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    thread_id: UUID = Field(..., alias="threadId")
    user_id: str = Field(..., min_length=1, alias="userId")
    agent_type: AgentType = Field(..., alias="agentType")
    prompt: str = Field(..., min_length=1)
    context: DecompositionContext


# ==============================
# Step
# ==============================
class DecompositionStep(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    step_name: str = Field(..., alias="stepName")
    step_type: DecompositionKind = Field(..., alias="stepType")
    status: DecompositionStatus = DecompositionStatus.PENDING
    result: Optional[Any] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    timestamp: str = Field(..., description="ISO-8601 time of the last change.")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
