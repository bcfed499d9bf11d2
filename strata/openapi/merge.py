"""
Tag and security inheritance between controllers and routes.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence


SESSION_SCHEME = "sessionCookie"


def merge_tags(
    controller_tags: Sequence[str],
    route_tags: Sequence[str],
) -> List[str]:
    """
    Controller tags followed by route tags.

    Order is preserved and duplicates are kept: callers control ordering
    and repetition.
    """
    return list(controller_tags) + list(route_tags)


def merge_security(
    controller_security: Optional[Sequence[str]],
    route_security: Optional[Sequence[str]],
    has_guards: bool = False,
) -> List[str]:
    """
    Effective security scheme names for a route.

    Controller schemes come first; route schemes, when set, are appended
    with duplicates removed (first occurrence wins). An explicitly empty
    route list adds nothing and does not clear the controller's schemes.
    Guarded routes get the session scheme appended if it is missing.

    Args:
        controller_security: Controller schemes (None = unset)
        route_security: Route schemes (None = unset)
        has_guards: Whether the route or its controller carries guards
    """
    merged: List[str] = []
    for name in list(controller_security or ()) + list(route_security or ()):
        if name not in merged:
            merged.append(name)
    if has_guards and SESSION_SCHEME not in merged:
        merged.append(SESSION_SCHEME)
    return merged


def security_requirements(names: Sequence[str]) -> List[Dict[str, List[str]]]:
    """Operation ``security`` array: one requirement object per scheme."""
    return [{name: []} for name in names]
