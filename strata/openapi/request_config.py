"""
Request-scoped configuration.

One ``RequestScopedConfig`` is created per handled request. Overrides
applied to it never reach the base configuration or any other request.
``current_config()`` exposes the instance bound to the running context;
each asyncio task runs in its own copy of the context, so concurrent
requests cannot observe each other's overrides.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Mapping, Optional

from ..faults import ConfigOverrideFault
from .config import OpenAPIConfig, check_field, field_names, owned_value


logger = logging.getLogger("strata.openapi")

_current: ContextVar[Optional["RequestScopedConfig"]] = ContextVar("strata_request_config", default=None)


class RequestScopedConfig:
    """
    Per-request view of an ``OpenAPIConfig``.

    Example:
        >>> scoped = RequestScopedConfig(base)
        >>> scoped.override({"title": "Tenant API"})
        >>> scoped.effective().title
        'Tenant API'
    """

    def __init__(self, base: OpenAPIConfig):
        self._base = base
        self._patch: Dict[str, Any] = {}
        self._effective: Optional[OpenAPIConfig] = None

    @property
    def base(self) -> OpenAPIConfig:
        return self._base

    def override(self, patch: Mapping[str, Any]) -> None:
        """
        Replace every field present in ``patch``; later calls layer on top.

        Fields are replaced wholesale (no deep merge). The whole patch is
        checked before any of it is applied.

        Raises:
            ConfigOverrideFault: unknown field, or a value of the wrong type
        """
        known = field_names()
        for key, value in patch.items():
            if key not in known:
                raise ConfigOverrideFault(key, "unknown configuration field")
            reason = check_field(key, value)
            if reason:
                raise ConfigOverrideFault(key, reason)

        self._patch.update({key: owned_value(key, value) for key, value in patch.items()})
        self._effective = None
        logger.debug("Request config override applied: %s", sorted(patch))

    def effective(self) -> OpenAPIConfig:
        """
        The base with all overrides applied (frozen).

        Always a separate instance from the base, so its containers are
        private to this request.
        """
        if self._effective is None:
            self._effective = self._base.merged(self._patch)
        return self._effective

    @property
    def overridden(self) -> frozenset:
        return frozenset(self._patch)


def current_config() -> Optional[RequestScopedConfig]:
    """Request config bound to the running context, if any."""
    return _current.get()


@contextmanager
def request_scope(base: OpenAPIConfig) -> Iterator[RequestScopedConfig]:
    """Bind a fresh ``RequestScopedConfig`` for the duration of a request."""
    scoped = RequestScopedConfig(base)
    token = _current.set(scoped)
    try:
        yield scoped
    finally:
        _current.reset(token)
