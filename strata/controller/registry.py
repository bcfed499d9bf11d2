"""
Route Registry

Ordered collection of controller descriptors supplied during application
assembly. Registration order is path order in the generated document.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Iterator, List, Optional, Tuple

from .base import extract_controller_descriptor
from .metadata import ControllerDescriptor, RouteDescriptor


logger = logging.getLogger("strata.controller")


class RouteRegistry:
    """
    Central registry of controllers.

    Accepts ``ControllerDescriptor`` values or ``Controller`` subclasses
    (converted by the assembly pass). Change listeners are notified on
    every mutation so dependent caches can invalidate.
    """

    def __init__(self, controllers: Optional[Iterable[Any]] = None):
        self._controllers: List[ControllerDescriptor] = []
        self._listeners: List[Callable[["RouteRegistry"], None]] = []
        self.version = 0
        for controller in controllers or ():
            self.register(controller)

    # ── Mutation ─────────────────────────────────────────────────────

    def register(self, controller: Any) -> ControllerDescriptor:
        """Register a controller (descriptor or decorated class)."""
        descriptor = self._as_descriptor(controller)
        self._controllers.append(descriptor)
        logger.debug(
            "Registered controller %s at %s (%d routes)",
            descriptor.name, descriptor.base_path, len(descriptor.routes),
        )
        self._changed()
        return descriptor

    def replace(self, controllers: Iterable[Any]) -> None:
        """Swap the whole declaration set (development reload)."""
        descriptors = [self._as_descriptor(c) for c in controllers]
        self._controllers = descriptors
        logger.debug("Replaced controller set (%d controllers)", len(descriptors))
        self._changed()

    def on_change(self, listener: Callable[["RouteRegistry"], None]) -> None:
        self._listeners.append(listener)

    # ── Access ───────────────────────────────────────────────────────

    @property
    def controllers(self) -> Tuple[ControllerDescriptor, ...]:
        return tuple(self._controllers)

    def routes(self) -> Iterator[RouteDescriptor]:
        for controller in self._controllers:
            yield from controller.routes

    def __iter__(self) -> Iterator[ControllerDescriptor]:
        return iter(tuple(self._controllers))

    def __len__(self) -> int:
        return len(self._controllers)

    # ── Internals ────────────────────────────────────────────────────

    @staticmethod
    def _as_descriptor(controller: Any) -> ControllerDescriptor:
        if isinstance(controller, ControllerDescriptor):
            return controller
        if isinstance(controller, type):
            return extract_controller_descriptor(controller)
        raise TypeError(f"Cannot register {controller!r} as a controller")

    def _changed(self) -> None:
        self.version += 1
        for listener in list(self._listeners):
            listener(self)
