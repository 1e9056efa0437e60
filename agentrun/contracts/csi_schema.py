# ==============================
# CSI + Thread Contracts
# ==============================
"""
Current Step Information (CSI) and thread-status contracts for agentrun.

These models define:
- CSI: the single per-run progress summary threaded through tracker updates
- MessageMetadata: one step-event message as emitted to realtime subscribers
- ThreadAnalysis / ThreadStatusRecord: read models derived from a message window

Wire names are camelCase; Python names are snake_case (aliases both ways).
"""

# ==============================
# Imports
# ==============================
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from agentrun.utils.timeutil import now_iso

DEFAULT_TOTAL_STEPS = 4


# ==============================
# Enums
# ==============================
class MessageStatus(str, Enum):
    """Status carried by a step-event message."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class MessageType(str, Enum):
    AGENT_STEP = "agent_step"
    SYSTEM_MESSAGE = "system_message"
    USER_MESSAGE = "user_message"
    COMPLETION = "completion"


class ThreadExecutionStatus(str, Enum):
    """Consolidated execution status of one thread (PENDING doubles as idle)."""
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


# ==============================
# CSI
# ==============================
class CSI(BaseModel):
    """
    Current Step Information for one run/thread.

    current_progress is derived by the tracker and is deliberately not capped
    at 100: duplicate completions push it past 100.
    """
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    completed_steps: List[str] = Field(default_factory=list, alias="completedSteps")
    current_progress: int = Field(default=0, ge=0, alias="currentProgress")
    total_steps: int = Field(default=DEFAULT_TOTAL_STEPS, gt=0, alias="totalSteps")
    current_step: str = Field(default="pending", alias="currentStep")
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Stable serialization wrapper (wire names)."""
        return self.model_dump(mode="json", by_alias=True)


# ==============================
# Step-Event Messages
# ==============================
class GeneratedAsset(BaseModel):
    model_config = ConfigDict(extra="forbid")

    url: str
    type: str
    concept: Optional[str] = None


class ExecutionStats(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    api_calls: Optional[int] = Field(default=None, ge=0, alias="apiCalls")
    storage_bytes: Optional[int] = Field(default=None, ge=0, alias="storageBytes")
    execution_time_ms: Optional[int] = Field(default=None, ge=0, alias="executionTimeMs")


class MessageMetadata(BaseModel):
    """Metadata attached to one step-event message of a thread."""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    type: MessageType = Field(default=MessageType.AGENT_STEP)
    step: Optional[str] = None
    status: MessageStatus = Field(default=MessageStatus.PENDING)
    progress: int = Field(default=0, ge=0, le=100)
    agent_type: Optional[str] = Field(default=None, alias="agentType")
    tool_name: Optional[str] = Field(default=None, alias="toolName")
    timestamp: str = Field(default_factory=now_iso)
    step_number: Optional[int] = Field(default=None, gt=0, alias="stepNumber")
    total_steps: Optional[int] = Field(default=None, gt=0, alias="totalSteps")
    brand_context: Optional[str] = Field(default=None, alias="brandContext")
    reference_images: Optional[int] = Field(default=None, ge=0, alias="referenceImages")
    generated_assets: List[GeneratedAsset] = Field(default_factory=list, alias="generatedAssets")
    execution_stats: Optional[ExecutionStats] = Field(default=None, alias="executionStats")
    status_version: Optional[int] = Field(default=None, alias="statusVersion")
    kv_lock_released: Optional[bool] = Field(default=None, alias="kvLockReleased")
    emission_timestamp: Optional[str] = Field(default=None, alias="emissionTimestamp")

    def to_dict(self) -> Dict[str, Any]:
        """Stable serialization wrapper (wire names, unset optionals dropped)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ==============================
# Thread Read Models
# ==============================
class ThreadAnalysis(BaseModel):
    """Result of re-deriving a thread's state from its message window."""
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    has_running_steps: bool = Field(..., alias="hasRunningSteps")
    has_final_completion: bool = Field(..., alias="hasFinalCompletion")
    should_switch_to_historical: bool = Field(..., alias="shouldSwitchToHistorical")
    should_enable_realtime: bool = Field(..., alias="shouldEnableRealtime")
    execution_status: ThreadExecutionStatus = Field(..., alias="executionStatus")
    current_progress: int = Field(..., alias="currentProgress")
    completed_steps: int = Field(..., alias="completedSteps")
    total_steps: int = Field(..., alias="totalSteps")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ThreadStatusRecord(BaseModel):
    """
    User-visible execution status of a thread.

    A read model: recomputed on demand from step-event messages, never stored
    as an entity of its own.
    """
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    thread_id: str = Field(..., alias="threadId")
    status: ThreadExecutionStatus
    current_step: Optional[str] = Field(default=None, alias="currentStep")
    total_steps: Optional[int] = Field(default=None, alias="totalSteps")
    completed_steps: Optional[int] = Field(default=None, alias="completedSteps")
    progress: Optional[int] = None
    should_enable_realtime: bool = Field(..., alias="shouldEnableRealtime")
    should_switch_to_historical: bool = Field(..., alias="shouldSwitchToHistorical")
    started_at: Optional[str] = Field(default=None, alias="startedAt")
    completed_at: Optional[str] = Field(default=None, alias="completedAt")
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
