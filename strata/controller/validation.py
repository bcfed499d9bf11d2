"""
Request Validation

Runs a route's body/params/query validators and produces the standard
400 payload when any issue is found. The request pipeline (external)
short-circuits on a failed result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from ..schemas.adapter import ValidationResult, to_validator
from ..schemas.exceptions import ValidationFault, ValidationIssue
from ..schemas.facets import as_facet
from .metadata import RouteDescriptor


@dataclass(frozen=True)
class ValidatedRequest:
    """
    Validation outcome for one request.

    Issue paths start with the payload location (``body``, ``params``
    or ``query``).
    """
    ok: bool
    body: Any = None
    params: Dict[str, Any] = field(default_factory=dict)
    query: Dict[str, Any] = field(default_factory=dict)
    issues: Tuple[ValidationIssue, ...] = ()

    def __bool__(self) -> bool:
        return self.ok

    def to_fault(self) -> ValidationFault:
        return ValidationFault(self.issues)

    def error_response(self) -> Tuple[int, Dict[str, Any]]:
        """``(status, body)`` for the standard validation-error response."""
        fault = self.to_fault()
        return fault.status, fault.as_response_body()


class RequestValidator:
    """
    Validators for one route, derived from the same schemas the document
    is generated from.

    Path and query values arrive as text, so their validators coerce
    numeric and boolean strings.
    """

    def __init__(self, route: RouteDescriptor):
        self.route = route
        self._body = to_validator(route.body) if route.body is not None else None
        self._body_required = route.body is not None and as_facet(route.body).required
        self._params = to_validator(route.params, coerce=True) if route.params is not None else None
        self._query = to_validator(route.query, coerce=True) if route.query is not None else None

    def validate(
        self,
        *,
        body: Any = None,
        params: Optional[Mapping[str, Any]] = None,
        query: Optional[Mapping[str, Any]] = None,
    ) -> ValidatedRequest:
        issues = []
        validated: Dict[str, Any] = {
            "body": body,
            "params": dict(params or {}),
            "query": dict(query or {}),
        }

        if self._body is not None:
            if body is None:
                if self._body_required:
                    issues.append(
                        ValidationIssue(("body",), "Request body is required", "required")
                    )
            else:
                self._collect("body", self._body(body), validated, issues)
        if self._params is not None:
            self._collect("params", self._params(validated["params"]), validated, issues)
        if self._query is not None:
            self._collect("query", self._query(validated["query"]), validated, issues)

        if issues:
            return ValidatedRequest(ok=False, issues=tuple(issues))
        return ValidatedRequest(ok=True, **validated)

    def validate_or_raise(self, **payload: Any) -> ValidatedRequest:
        result = self.validate(**payload)
        if not result.ok:
            raise result.to_fault()
        return result

    @staticmethod
    def _collect(location: str, result: ValidationResult, validated: Dict[str, Any], issues: list) -> None:
        if result.ok:
            validated[location] = result.value
        else:
            issues.extend(issue.prefixed(location) for issue in result.issues)
