"""
Strata Faults - Domain-specific fault types.

Provides concrete fault classes for each domain:
- CONFIG faults
- ROUTING faults
- OPENAPI assembly faults
"""

from typing import Any, Optional, Sequence

from .core import Fault, FaultDomain, Severity


# ============================================================================
# CONFIG Faults
# ============================================================================

class ConfigFault(Fault):
    """Base class for configuration faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.FATAL,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.CONFIG,
            severity=severity,
            retryable=False,
            public=False,
            metadata=metadata,
        )


class ConfigInvalidFault(ConfigFault):
    """Configuration value is invalid."""

    def __init__(self, key: str, reason: str, **kwargs):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Configuration key '{key}' is invalid: {reason}",
            metadata={"key": key, "reason": reason, **kwargs.get("metadata", {})},
        )


class ConfigOverrideFault(ConfigFault):
    """
    A request-scoped override supplied a field the configuration does not
    know, or a value of the wrong shape for a known field.

    Reported back to the overriding caller; never coerced.
    """

    def __init__(self, key: str, reason: str, **kwargs):
        super().__init__(
            code="CONFIG_OVERRIDE_INVALID",
            message=f"Override of '{key}' rejected: {reason}",
            severity=Severity.ERROR,
            metadata={"key": key, "reason": reason, **kwargs.get("metadata", {})},
        )
        self.key = key


# ============================================================================
# ROUTING Faults
# ============================================================================

class RoutingFault(Fault):
    """Base class for route declaration faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.ROUTING,
            severity=Severity.FATAL,
            retryable=False,
            public=False,
            metadata=metadata,
        )


class RouteConventionFault(RoutingFault):
    """A route name outside the convention table lacks an explicit verb or path."""

    def __init__(self, controller: str, route: str, reason: str):
        super().__init__(
            code="ROUTE_CONVENTION",
            message=f"Route '{route}' on {controller}: {reason}",
            metadata={"controller": controller, "route": route},
        )


class InvalidBasePathFault(RoutingFault):
    """Controller base path is empty or carries a trailing slash."""

    def __init__(self, controller: str, base_path: str):
        super().__init__(
            code="INVALID_BASE_PATH",
            message=(
                f"Controller {controller} has invalid base path {base_path!r}: "
                "must be non-empty, start with '/' and have no trailing slash"
            ),
            metadata={"controller": controller, "base_path": base_path},
        )


# ============================================================================
# OPENAPI Assembly Faults
# ============================================================================

class AssemblyFault(Fault):
    """
    Base class for specification assembly faults.

    Always fatal: the document is never served partially.
    """

    def __init__(
        self,
        code: str,
        message: str,
        *,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.OPENAPI,
            severity=Severity.FATAL,
            retryable=False,
            public=False,
            metadata=metadata,
        )


class MissingResponseSchemaFault(AssemblyFault):
    """A route was registered without a response schema."""

    def __init__(self, controller: str, route: str):
        super().__init__(
            code="MISSING_RESPONSE_SCHEMA",
            message=f"Route '{route}' on {controller} declares no response schema",
            metadata={"controller": controller, "route": route},
        )


class DuplicateRouteFault(AssemblyFault):
    """Two routes resolve to the same path and verb."""

    def __init__(self, verb: str, path: str, owners: Sequence[str]):
        super().__init__(
            code="DUPLICATE_ROUTE",
            message=f"Duplicate route {verb} {path} declared by {' and '.join(owners)}",
            metadata={"verb": verb, "path": path, "owners": list(owners)},
        )


class ComponentConflictFault(AssemblyFault):
    """Two different schemas were registered under the same component name."""

    def __init__(self, name: str, origin: str | None = None):
        where = f" (while assembling {origin})" if origin else ""
        super().__init__(
            code="COMPONENT_CONFLICT",
            message=f"Component schema '{name}' registered with conflicting structure{where}",
            metadata={"component": name, "origin": origin},
        )
