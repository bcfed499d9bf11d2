"""
Convention Routing

Derives HTTP verb, path suffix and default success status from a
controller method's canonical name. Names outside the table must carry an
explicit verb and path.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..faults import RouteConventionFault


HTTP_VERBS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"})

# method name -> (verb, path suffix, success status)
CONVENTIONS: Dict[str, Tuple[str, str, int]] = {
    "index": ("GET", "", 200),
    "show": ("GET", "/:id", 200),
    "create": ("POST", "", 201),
    "update": ("PUT", "/:id", 200),
    "patch": ("PATCH", "/:id", 200),
    "destroy": ("DELETE", "/:id", 200),
}

_PARAM_RE = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")


@dataclass(frozen=True)
class RouteResolution:
    """Resolved routing facts for one route."""
    verb: str
    path_suffix: str
    success_status: int
    full_path: str
    conventional: bool = True

    @property
    def openapi_path(self) -> str:
        return to_openapi_path(self.full_path)


def is_conventional(method_name: str) -> bool:
    return method_name in CONVENTIONS


def resolve(
    base_path: str,
    method_name: str,
    *,
    verb: Optional[str] = None,
    path: Optional[str] = None,
    status: Optional[int] = None,
    controller: str = "<controller>",
) -> RouteResolution:
    """
    Resolve a route from its controller base path and method name.

    Args:
        base_path: Controller base path (e.g. "/api/users")
        method_name: Canonical name (index/show/...) or a custom name
        verb: Explicit verb, required for custom names
        path: Explicit path suffix, required for custom names
        status: Explicit success status (overrides the convention)
        controller: Controller name used in error messages

    Raises:
        RouteConventionFault: custom name without verb or path, or an
            unknown verb
    """
    convention = CONVENTIONS.get(method_name)

    if convention is not None:
        conv_verb, suffix, conv_status = convention
        if verb is None and path is None:
            return RouteResolution(
                verb=conv_verb,
                path_suffix=suffix,
                success_status=status if status is not None else conv_status,
                full_path=base_path + suffix,
            )
        # Partial override of a conventional route keeps the rest of the row
        verb = verb if verb is not None else conv_verb
        path = path if path is not None else suffix

    if verb is None:
        raise RouteConventionFault(controller, method_name, "custom route requires an explicit HTTP verb")
    if path is None:
        raise RouteConventionFault(controller, method_name, "custom route requires an explicit path")

    verb = verb.upper()
    if verb not in HTTP_VERBS:
        raise RouteConventionFault(controller, method_name, f"unsupported HTTP verb '{verb}'")
    if path and not path.startswith("/"):
        raise RouteConventionFault(controller, method_name, f"path {path!r} must start with '/'")

    default_status = convention[2] if convention is not None else 200
    return RouteResolution(
        verb=verb,
        path_suffix=path,
        success_status=status if status is not None else default_status,
        full_path=base_path + path,
        conventional=False,
    )


def to_openapi_path(path: str) -> str:
    """Convert ``/users/:id`` to the OpenAPI template ``/users/{id}``."""
    return _PARAM_RE.sub(r"{\1}", path)


def path_parameters(path: str) -> List[str]:
    """Names of ``:param`` segments, in order."""
    return _PARAM_RE.findall(path)
