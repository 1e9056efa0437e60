# ==============================
# Validation Contracts
# ==============================
"""
Validation result envelope for agentrun entry points.

Validators never raise on bad input: they return a ValidationResult carrying
ValidationError records (field, message, code, severity). No core module should
invent its own validation result shape.
"""

# ==============================
# Imports
# ==============================
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

# ==============================
# Typing
# ==============================
T = TypeVar("T")


# ==============================
# Enums
# ==============================
class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


# ==============================
# Models
# ==============================
class ValidationError(BaseModel):
    """One rejected field. `code` is machine-readable (e.g. uuid_parsing, too_long)."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    field: str = Field(..., description="Dotted path of the offending field.")
    message: str = Field(..., description="Human readable message.")
    code: str = Field(..., description="Machine-readable error code.")
    severity: Severity = Field(default=Severity.ERROR)
    context: Optional[Dict[str, Any]] = Field(default=None, description="Optional structured context.")


class ValidationMeta(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    validated_at: str = Field(..., alias="validatedAt")
    validation_duration: int = Field(default=0, ge=0, alias="validationDuration", description="Milliseconds.")
    validator: str = Field(...)


class ValidationResult(BaseModel, Generic[T]):
    """
    Standard envelope for validation outcomes.

    Pattern:
      success: bool
      data: T | None
      errors: [ValidationError] | None
      warnings: [str] | None
      metadata: ValidationMeta | None
    """
    model_config = ConfigDict(extra="forbid")

    success: bool
    data: Optional[T] = None
    errors: Optional[List[ValidationError]] = None
    warnings: Optional[List[str]] = None
    metadata: Optional[ValidationMeta] = None

    @model_validator(mode="after")
    def _enforce_error_contract(self) -> "ValidationResult[T]":
        if not self.success and not self.errors:
            raise ValueError("errors are required when success=False")
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Stable serialization wrapper."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
