# ==============================
# Entry-Point Validators
# ==============================
"""
Validation layer for agent-run entry points.

Every validate_* function returns a ValidationResult and never raises for bad
input: pydantic errors are translated into ValidationError records with dotted
field paths and pydantic's machine-readable error type as `code`.

No side effects.
"""

from __future__ import annotations

import time
from typing import Annotated, Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, Field, StringConstraints, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from agentrun.contracts.request_schema import (
    MAX_PROMPT_LENGTH,
    MAX_REFERENCE_IMAGES,
    AuthState,
    KVLockRequest,
    OrchestrationRequest,
    PreInitRequest,
    ReferenceImage,
)
from agentrun.contracts.validation_schema import Severity, ValidationError, ValidationMeta, ValidationResult
from agentrun.utils.timeutil import now_iso

M = TypeVar("M", bound=BaseModel)

_UUID = TypeAdapter(Annotated[str, Field(pattern=r"^[0-9a-fA-F]{8}-([0-9a-fA-F]{4}-){3}[0-9a-fA-F]{12}$")])
_PROMPT = TypeAdapter(Annotated[str, StringConstraints(min_length=1, max_length=MAX_PROMPT_LENGTH)])
_REFERENCE_IMAGES = TypeAdapter(Annotated[List[ReferenceImage], Field(max_length=MAX_REFERENCE_IMAGES)])


# ==============================
# Helpers
# ==============================
def _to_errors(exc: PydanticValidationError, *, prefix: Optional[str] = None) -> List[ValidationError]:
    out: List[ValidationError] = []
    for err in exc.errors():
        path = ".".join(str(p) for p in err["loc"])
        if prefix:
            path = f"{prefix}.{path}" if path else prefix
        out.append(
            ValidationError(
                field=path or "unknown",
                message=err["msg"],
                code=err["type"],
                severity=Severity.ERROR,
            )
        )
    return out


def _meta(started: float, validator: str) -> ValidationMeta:
    return ValidationMeta(
        validated_at=now_iso(),
        validation_duration=int(round((time.perf_counter() - started) * 1000)),
        validator=validator,
    )


def _validate_model(model: Type[M], data: Any) -> ValidationResult[M]:
    started = time.perf_counter()
    try:
        parsed = model.model_validate(data)
    except PydanticValidationError as exc:
        return ValidationResult(success=False, errors=_to_errors(exc), metadata=_meta(started, model.__name__))
    return ValidationResult(success=True, data=parsed, metadata=_meta(started, model.__name__))


# ==============================
# Public API
# ==============================
def validate_orchestration_request(data: Any) -> ValidationResult[OrchestrationRequest]:
    return _validate_model(OrchestrationRequest, data)


def validate_pre_init(data: Any) -> ValidationResult[PreInitRequest]:
    return _validate_model(PreInitRequest, data)


def validate_kv_lock(data: Any) -> ValidationResult[KVLockRequest]:
    return _validate_model(KVLockRequest, data)


def validate_auth(data: Any) -> ValidationResult[AuthState]:
    """Schema check plus warnings for suspicious-but-valid auth states."""
    result = _validate_model(AuthState, data)
    if not result.success or result.data is None:
        return result

    warnings: List[str] = []
    if not result.data.has_session and not result.data.has_token:
        warnings.append("No session or token found - authentication may be invalid")
    if result.data.has_token and not result.data.jwt_valid:
        warnings.append("Token present but JWT validation failed")
    if warnings:
        result = result.model_copy(update={"warnings": warnings})
    return result


def validate_prompt(prompt: Any) -> ValidationResult[str]:
    try:
        value = _PROMPT.validate_python(prompt)
    except PydanticValidationError as exc:
        return ValidationResult(success=False, errors=_to_errors(exc, prefix="prompt"))
    return ValidationResult(success=True, data=value)


def validate_reference_images(images: Any) -> ValidationResult[List[ReferenceImage]]:
    try:
        value = _REFERENCE_IMAGES.validate_python(images)
    except PydanticValidationError as exc:
        return ValidationResult(success=False, errors=_to_errors(exc, prefix="referenceImages"))
    return ValidationResult(success=True, data=value)


def validate_thread_id(thread_id: Any) -> bool:
    return _is_uuid(thread_id)


def validate_user_id(user_id: Any) -> bool:
    return _is_uuid(user_id)


def _is_uuid(value: Any) -> bool:
    try:
        _UUID.validate_python(value)
    except PydanticValidationError:
        return False
    return True


def create_validation_error(
    field: str,
    message: str,
    code: str,
    severity: Severity = Severity.ERROR,
    context: Optional[Dict[str, Any]] = None,
) -> ValidationError:
    return ValidationError(field=field, message=message, code=code, severity=severity, context=context)


def combine_validation_results(*results: ValidationResult[Any]) -> ValidationResult[List[Any]]:
    """
    Fold several results into one.

    success only if all succeeded; data lists successful payloads in order and
    is dropped on any failure; errors and warnings are concatenated.
    """
    errors: List[ValidationError] = []
    warnings: List[str] = []
    data: List[Any] = []
    ok = True

    for r in results:
        if not r.success:
            ok = False
            errors.extend(r.errors or [])
        elif r.data is not None:
            data.append(r.data)
        warnings.extend(r.warnings or [])

    return ValidationResult(
        success=ok,
        data=data if ok else None,
        errors=errors or None,
        warnings=warnings or None,
        metadata=ValidationMeta(validated_at=now_iso(), validation_duration=0, validator="combined"),
    )
