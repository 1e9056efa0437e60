# ==============================
# Entry-Point Request Contracts
# ==============================
"""
Request shapes accepted at agent-run entry points.

These are pure types + defaults. agentrun.validation.validators wraps them into
ValidationResult envelopes; callers hand the validated models to the core.
"""

# ==============================
# Imports
# ==============================
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import AnyUrl, BaseModel, ConfigDict, Field

MAX_PROMPT_LENGTH = 2000
MAX_REFERENCE_IMAGES = 5
DEFAULT_LOCK_TTL_MS = 900_000  # 15 minutes


# ==============================
# Enums
# ==============================
class AgentType(str, Enum):
    CONTENT_GENERATION_AGENT = "CONTENT_GENERATION_AGENT"
    TEXT_ANALYSIS_AGENT = "TEXT_ANALYSIS_AGENT"


class ExecutionPriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


# ==============================
# Models
# ==============================
class ReferenceImage(BaseModel):
    model_config = ConfigDict(extra="forbid")

    url: AnyUrl
    type: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)


class ReferenceImageRef(BaseModel):
    """Reference image as carried inside a brand context (url not checked)."""
    model_config = ConfigDict(extra="forbid")

    url: str
    type: str
    description: str


class BrandContext(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    brand_name: str
    colors: List[str] = Field(default_factory=list)
    messaging: Optional[str] = None
    reference_images: List[ReferenceImageRef] = Field(default_factory=list, alias="referenceImages")


class OrchestrationRequest(BaseModel):
    """Request to start an orchestrated agent run on a thread."""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    thread_id: UUID = Field(..., alias="threadId")
    user_id: str = Field(..., min_length=1, alias="userId")
    agent_type: AgentType = Field(..., alias="agentType")
    prompt: str = Field(..., min_length=1)
    brand_context: BrandContext = Field(..., alias="brandContext")
    execution_priority: ExecutionPriority = Field(default=ExecutionPriority.NORMAL, alias="executionPriority")
    max_retries: int = Field(default=1, ge=0, le=3, alias="maxRetries")
    metadata: Optional[Dict[str, Any]] = None


class PreInitRequest(BaseModel):
    """Checks applied before a run is initialized."""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    user_id: UUID = Field(..., alias="userId")
    thread_id: UUID = Field(..., alias="threadId")
    run_id: Optional[UUID] = Field(default=None, alias="runId")
    prompt: str = Field(..., min_length=1, max_length=MAX_PROMPT_LENGTH)
    brand_kit_id: UUID = Field(..., alias="brandKitId")
    agent_type: AgentType = Field(..., alias="agentType")
    creative_count: int = Field(default=1, ge=1, le=10, alias="creativeCount")
    reference_images: List[ReferenceImage] = Field(
        default_factory=list, max_length=MAX_REFERENCE_IMAGES, alias="referenceImages"
    )
    execution_priority: ExecutionPriority = Field(default=ExecutionPriority.NORMAL, alias="executionPriority")
    max_retries: int = Field(default=1, ge=0, le=3, alias="maxRetries")


class KVLockMeta(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    run_id: UUID = Field(..., alias="runId")
    lock_acquired: int = Field(..., gt=0, alias="lockAcquired")
    process_id: Optional[str] = Field(default=None, alias="processId")
    expires_at: Optional[str] = Field(default=None, alias="expiresAt")


class KVLockRequest(BaseModel):
    """Metadata describing a per-thread single-writer lock held upstream."""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    user_id: UUID = Field(..., alias="userId")
    thread_id: UUID = Field(..., alias="threadId")
    lock_key: str = Field(..., min_length=1, alias="lockKey")
    ttl: int = Field(default=DEFAULT_LOCK_TTL_MS, gt=0, description="Lock TTL in milliseconds.")
    metadata: KVLockMeta


class AuthState(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    user_id: UUID = Field(..., alias="userId")
    has_session: bool = Field(..., alias="hasSession")
    has_token: bool = Field(..., alias="hasToken")
    is_admin: bool = Field(default=False, alias="isAdmin")
    token_length: Optional[int] = Field(default=None, gt=0, alias="tokenLength")
    session_cookie_found: bool = Field(default=False, alias="sessionCookieFound")
    jwt_valid: bool = Field(default=False, alias="jwtValid")
