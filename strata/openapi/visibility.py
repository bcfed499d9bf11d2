"""
Route visibility.

Two gates, both must pass:

1. Static: the hide flag, route over controller over default ``False``;
   applied once at assembly.
2. Dynamic: a ``route_filter(path_template, path_item)`` predicate from the
   effective configuration, evaluated per served request on the already
   assembled document. It only sees statically visible routes.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional

RouteFilter = Callable[[str, Dict[str, Any]], bool]

logger = logging.getLogger("strata.openapi")


def effective_hidden(route_flag: Optional[bool], controller_flag: Optional[bool]) -> bool:
    """``route_flag ?? controller_flag ?? False``."""
    if route_flag is not None:
        return route_flag
    if controller_flag is not None:
        return controller_flag
    return False


def accept_all(path: str, path_item: Dict[str, Any]) -> bool:
    """Default dynamic filter."""
    return True


def apply_route_filter(
    paths: Mapping[str, Dict[str, Any]],
    route_filter: Optional[RouteFilter],
) -> Dict[str, Dict[str, Any]]:
    """
    Return a new ``paths`` mapping with the paths the filter accepts.

    A predicate that raises drops only the offending path.
    """
    if route_filter is None or route_filter is accept_all:
        return dict(paths)

    visible: Dict[str, Dict[str, Any]] = {}
    for path, item in paths.items():
        try:
            keep = route_filter(path, item)
        except Exception:
            logger.warning("Route filter raised for %s; omitting it from the document", path, exc_info=True)
            continue
        if keep:
            visible[path] = item
    return visible
