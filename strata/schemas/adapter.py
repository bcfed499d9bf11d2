"""
Strata Schema Adapter — one schema, two renditions.

``to_document_node`` renders a schema as an OpenAPI (JSON-Schema) node and
``to_validator`` turns the same schema into a runtime validator. Named
schemas are registered once in a ``ComponentRegistry`` and referenced by
``$ref``; anonymous schemas are inlined at the point of use.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, Optional, Tuple

from ..faults import ComponentConflictFault
from .exceptions import ValidationFault, ValidationIssue
from .facets import as_facet


__all__ = [
    "ComponentRegistry",
    "ValidationResult",
    "to_document_node",
    "to_validator",
    "component_ref",
]

logger = logging.getLogger("strata.schemas")

COMPONENT_PREFIX = "#/components/schemas/"


def component_ref(name: str) -> Dict[str, str]:
    """Reference node for a registered component."""
    return {"$ref": f"{COMPONENT_PREFIX}{name}"}


class ComponentRegistry:
    """
    Named reusable schemas collected during assembly.

    Registering the same name twice is allowed only when both nodes are
    structurally identical.
    """

    def __init__(self):
        self._schemas: Dict[str, Dict[str, Any]] = {}
        self._origin: Optional[str] = None

    @contextmanager
    def origin(self, label: str) -> Iterator[None]:
        """Attribute conflicts raised inside the block to ``label``."""
        previous, self._origin = self._origin, label
        try:
            yield
        finally:
            self._origin = previous

    def register(self, name: str, node: Dict[str, Any]) -> None:
        existing = self._schemas.get(name)
        if existing is None:
            self._schemas[name] = node
            logger.debug("Registered component schema '%s'", name)
        elif existing != node:
            raise ComponentConflictFault(name, self._origin)

    def reference(self, name: str, node: Dict[str, Any]) -> Dict[str, str]:
        self.register(name, node)
        return component_ref(name)

    def __contains__(self, name: str) -> bool:
        return name in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)

    def schemas(self) -> Dict[str, Dict[str, Any]]:
        return dict(self._schemas)


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of running a validator.

    Attributes:
        ok: True when no issues were found
        value: Cast value (None when validation failed)
        issues: Structured issue list
    """
    ok: bool
    value: Any = None
    issues: Tuple[ValidationIssue, ...] = field(default_factory=tuple)

    def __bool__(self) -> bool:
        return self.ok

    def to_fault(self) -> ValidationFault:
        return ValidationFault(self.issues)


def to_document_node(
    schema: Any,
    registry: ComponentRegistry | None = None,
) -> Dict[str, Any]:
    """
    Convert a schema (facet or ``Schema`` class) to a document node.

    Without a registry every node is inlined.
    """
    return as_facet(schema).to_schema(registry)


def to_validator(schema: Any, *, coerce: bool = False) -> Callable[[Any], ValidationResult]:
    """
    Build a validator for a schema.

    Args:
        schema: Facet or ``Schema`` class
        coerce: Accept text forms of numbers and booleans (path/query input)
    """
    facet = as_facet(schema)

    def validate(value: Any) -> ValidationResult:
        try:
            cast = facet.validate(value, coerce=coerce)
        except ValidationFault as exc:
            return ValidationResult(False, None, tuple(exc.issues))
        return ValidationResult(True, cast)

    validate.facet = facet
    return validate
