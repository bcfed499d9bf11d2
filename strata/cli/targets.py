"""
Resolve ``module:attribute`` targets to a document generator.

The attribute may be an ``OpenAPIGenerator``, a ``RouteRegistry``, a
controller (class or descriptor), a sequence of controllers, or a
zero-argument factory returning any of these.
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path
from typing import Any, Optional

from ..controller.base import Controller
from ..controller.metadata import ControllerDescriptor
from ..controller.registry import RouteRegistry
from ..openapi.config import OpenAPIConfig
from ..openapi.generator import OpenAPIGenerator


class TargetError(Exception):
    """Raised when a CLI target cannot be imported or understood."""


def import_target(target: str) -> Any:
    module_name, sep, attribute = target.partition(":")
    if not sep or not module_name or not attribute:
        raise TargetError(f"Target must look like 'package.module:attribute', got {target!r}")

    # Targets are given relative to the working directory
    cwd = str(Path.cwd())
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise TargetError(f"Cannot import module {module_name!r}: {exc}") from exc

    obj: Any = module
    for part in attribute.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            raise TargetError(f"Module {module_name!r} has no attribute {attribute!r}") from exc
    return obj


def _is_controller(obj: Any) -> bool:
    return isinstance(obj, ControllerDescriptor) or (
        isinstance(obj, type) and issubclass(obj, Controller)
    )


def load_generator(target: str, config: Optional[OpenAPIConfig] = None) -> OpenAPIGenerator:
    """
    Import ``target`` and wrap it in a generator.

    ``config`` replaces the configuration of a generator target.
    """
    obj = import_target(target)

    if callable(obj) and not isinstance(obj, (type, OpenAPIGenerator, RouteRegistry)):
        obj = obj()

    if isinstance(obj, OpenAPIGenerator):
        if config is not None:
            obj.config = config
        return obj
    if isinstance(obj, RouteRegistry):
        return OpenAPIGenerator(obj, config)
    if _is_controller(obj):
        return OpenAPIGenerator(RouteRegistry([obj]), config)
    if isinstance(obj, (list, tuple)) and all(_is_controller(item) for item in obj):
        return OpenAPIGenerator(RouteRegistry(obj), config)

    raise TargetError(
        f"{target!r} is {type(obj).__name__}; expected a generator, registry or controllers"
    )
