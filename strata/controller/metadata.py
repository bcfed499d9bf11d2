"""
Controller and Route Descriptors

Immutable descriptors produced during the application assembly pass.
They are the single source the synthesizer and the request validator
read from.

Tri-state values (``hide_from_docs``, ``security``) use ``None`` for
"unset, inherit" and a concrete value for "explicitly set". An explicitly
empty security tuple is therefore distinct from an unset one.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from ..faults import InvalidBasePathFault
from .conventions import RouteResolution, resolve


@dataclass(frozen=True)
class ResponseSpec:
    """
    Explicitly declared response for one status code.

    Attributes:
        description: Response description in the document
        schema: Optional body schema (facet or Schema class)
    """
    description: str
    schema: Any = None


def _as_tuple(value: Optional[Sequence[Any]]) -> Optional[Tuple[Any, ...]]:
    if value is None:
        return None
    if isinstance(value, str):
        return (value,)
    return tuple(value)


@dataclass(frozen=True)
class RouteDescriptor:
    """
    Metadata for a single route.

    Attributes:
        name: Method name (index/show/create/update/patch/destroy or custom)
        response: Success response schema (required at assembly)
        verb: Explicit HTTP verb (custom routes)
        path: Explicit path suffix (custom routes)
        status: Explicit success status
        body: Request body schema
        params: Path parameter schema
        query: Query parameter schema
        responses: Extra responses by status code
        summary: Document summary
        description: Document description
        tags: Route tags, appended after controller tags
        security: Route security schemes (None = unset)
        hide_from_docs: Route hide flag (None = inherit)
        guards: Access guards attached to the route
        deprecated: Mark the operation deprecated
        operation_id: Explicit operationId
        handler: Callable bound to the route (opaque to the core)
        controller: Owning controller (set on registration)
    """
    name: str
    response: Any = None
    verb: Optional[str] = None
    path: Optional[str] = None
    status: Optional[int] = None
    body: Any = None
    params: Any = None
    query: Any = None
    responses: Mapping[int, Any] = field(default_factory=dict)
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: Tuple[str, ...] = ()
    security: Optional[Tuple[str, ...]] = None
    hide_from_docs: Optional[bool] = None
    guards: Tuple[Any, ...] = ()
    deprecated: bool = False
    operation_id: Optional[str] = None
    handler: Optional[Callable[..., Any]] = field(default=None, compare=False, repr=False)
    controller: Optional["ControllerDescriptor"] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "tags", _as_tuple(self.tags) or ())
        object.__setattr__(self, "security", _as_tuple(self.security))
        object.__setattr__(self, "guards", _as_tuple(self.guards) or ())
        object.__setattr__(self, "responses", {int(k): v for k, v in dict(self.responses).items()})

    @property
    def controller_name(self) -> str:
        return self.controller.name if self.controller is not None else "<unregistered>"

    @property
    def qualified_name(self) -> str:
        return f"{self.controller_name}.{self.name}"

    @property
    def has_guards(self) -> bool:
        controller_guards = self.controller.guards if self.controller is not None else ()
        return bool(self.guards or controller_guards)

    def resolve(self) -> RouteResolution:
        """Resolve verb, path and success status against the owning controller."""
        base_path = self.controller.base_path if self.controller is not None else ""
        return resolve(
            base_path,
            self.name,
            verb=self.verb,
            path=self.path,
            status=self.status,
            controller=self.controller_name,
        )


@dataclass(frozen=True)
class ControllerDescriptor:
    """
    Complete metadata for one controller.

    Attributes:
        base_path: URL prefix, non-empty, no trailing slash
        routes: Owned route descriptors (bound to this controller)
        name: Display name used in messages and operation ids
        tags: Controller tags
        security: Controller security schemes (None = unset)
        hide_from_docs: Controller hide flag (None = unset)
        guards: Access guards applied to every route
        description: Tag description for the document
    """
    base_path: str
    routes: Tuple[RouteDescriptor, ...] = ()
    name: str = ""
    tags: Tuple[str, ...] = ()
    security: Optional[Tuple[str, ...]] = None
    hide_from_docs: Optional[bool] = None
    guards: Tuple[Any, ...] = ()
    description: Optional[str] = None

    def __post_init__(self):
        name = self.name or self.base_path or "<controller>"
        object.__setattr__(self, "name", name)

        base = self.base_path
        if not isinstance(base, str) or not base or not base.startswith("/") or base.endswith("/"):
            raise InvalidBasePathFault(name, base)

        object.__setattr__(self, "tags", _as_tuple(self.tags) or ())
        object.__setattr__(self, "security", _as_tuple(self.security))
        object.__setattr__(self, "guards", _as_tuple(self.guards) or ())
        object.__setattr__(
            self,
            "routes",
            tuple(replace(route, controller=self) for route in self.routes),
        )

    def get_route(self, name: str) -> Optional[RouteDescriptor]:
        for route in self.routes:
            if route.name == name:
                return route
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Summary for diagnostics and the CLI."""
        return {
            "name": self.name,
            "base_path": self.base_path,
            "tags": list(self.tags),
            "security": list(self.security) if self.security is not None else None,
            "hide_from_docs": self.hide_from_docs,
            "routes": [route.name for route in self.routes],
        }
