# ==============================
# Config Schemas (Pydantic)
# ==============================
"""
Pydantic settings models for agentrun.

Notes:
- No env reads here. No file IO here. Pure types + defaults.
- loader.py builds a single Settings object with precedence merging.

Precedence (implemented in loader.py):
env > .env > configs/*.yaml > defaults
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ==============================
# App Settings
# ==============================


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    env: str = Field(default="local", description="Environment name (local/stage/prod)")
    debug: bool = Field(default=False)


# ==============================
# Logging Settings
# ==============================


class LoggingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: str = Field(default="INFO")
    console: bool = Field(default=True, description="Emit JSON lines to stdout")


# ==============================
# Progress Settings
# ==============================


class ProgressConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    default_total_steps: int = Field(default=4, gt=0, description="Step count assumed before a plan is known")
    clamp_progress: bool = Field(
        default=False,
        description="Cap CSI progress at 100. Off by default: >100 signals duplicate completions.",
    )
    check_cycles: bool = Field(default=False, description="Reject cyclic step graphs when planning")
    completion_sentinels: List[str] = Field(
        default_factory=lambda: ["final_completion", "enhanced_completion"],
        description="Step names whose completed message marks a thread as finished",
    )

    @field_validator("completion_sentinels")
    @classmethod
    def _non_empty_sentinels(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("completion_sentinels must not be empty")
        return v


# ==============================
# Top-Level Settings
# ==============================


class Settings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    app: AppConfig = Field(default_factory=AppConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    progress: ProgressConfig = Field(default_factory=ProgressConfig)
