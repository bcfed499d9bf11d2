"""
Strata Schema Exceptions — Fault-domain-integrated validation errors.

Validation errors participate in the fault domain system and produce the
standard validation-error response body (error shape plus an ``issues``
array).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ..faults.core import Fault, FaultDomain, Severity


PathSegment = Union[str, int]


@dataclass(frozen=True)
class ValidationIssue:
    """
    A single validation failure.

    Attributes:
        path: Location of the offending value inside the payload
        message: Human-readable explanation
        kind: Constraint that failed (``required``, ``type``, ``minimum`` ...)
    """
    path: Tuple[PathSegment, ...]
    message: str
    kind: str = "type"

    def prefixed(self, *segments: PathSegment) -> "ValidationIssue":
        return ValidationIssue(tuple(segments) + self.path, self.message, self.kind)

    def to_dict(self) -> Dict[str, Any]:
        return {"path": list(self.path), "message": self.message, "code": self.kind}


# ── Faults ───────────────────────────────────────────────────────────────

class CastFault(Fault):
    """
    Raised by a facet when a single value cannot be cast or fails a
    constraint. The owning validator attaches the payload path.
    """

    domain = FaultDomain.VALIDATION
    severity = Severity.INFO
    code = "SC100"
    public = True

    def __init__(self, message: str = "Invalid value", *, kind: str = "type"):
        super().__init__(message=message, metadata={"kind": kind})
        self.kind = kind


class ValidationFault(Fault):
    """Aggregated validation failure for one payload."""

    domain = FaultDomain.VALIDATION
    severity = Severity.INFO
    code = "VALIDATION_ERROR"
    public = True
    status = 400

    def __init__(
        self,
        issues: Sequence[ValidationIssue],
        message: str = "Request validation failed",
        *,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        self.issues: List[ValidationIssue] = list(issues)
        super().__init__(
            message=message,
            metadata={**(metadata or {}), "issue_count": len(self.issues)},
        )

    def prefixed(self, *segments: PathSegment) -> "ValidationFault":
        return ValidationFault([issue.prefixed(*segments) for issue in self.issues], self.message)

    def as_response_body(self) -> Dict[str, Any]:
        """Structured error payload matching ``ValidationErrorResponse``."""
        return {
            "code": self.code,
            "message": self.message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "issues": [issue.to_dict() for issue in self.issues],
        }
