"""
OpenAPI configuration.

``OpenAPIConfig`` is the base document configuration. It is frozen: the
per-request override service derives new instances instead of mutating
the base.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, fields, replace
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..faults import ConfigInvalidFault
from .merge import SESSION_SCHEME
from .visibility import RouteFilter


BEARER_SCHEME = "bearerAuth"
API_KEY_SCHEME = "apiKey"


@dataclass(frozen=True)
class OpenAPIConfig:
    """
    Configuration for document generation and serving.

    Set via the ``openapi`` section of the workspace configuration or
    passed directly to ``OpenAPIGenerator``.
    """
    # Info
    title: str = "Strata API"
    version: str = "1.0.0"
    description: str = ""
    terms_of_service: str = ""
    contact_name: str = ""
    contact_email: str = ""
    contact_url: str = ""
    license_name: str = ""
    license_url: str = ""

    # Servers
    servers: List[Dict[str, str]] = field(default_factory=list)

    # Paths
    docs_path: str = "/api/docs"
    json_path: str = "/api/openapi.json"

    # Security
    security_schemes: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    api_key_header: str = "X-API-Key"
    session_cookie: str = "session"

    # Visibility
    route_filter: Optional[RouteFilter] = None

    # External docs
    external_docs_url: str = ""
    external_docs_description: str = ""

    # Viewer
    ui_theme: str = "default"

    enabled: bool = True

    def __post_init__(self):
        # Containers are owned per instance; derived configs never share them.
        for name in _CONTAINER_FIELDS:
            object.__setattr__(self, name, copy.deepcopy(getattr(self, name)))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OpenAPIConfig":
        """
        Create config from a mapping (e.g., the workspace ``openapi`` section).

        Private (``_``-prefixed) and unknown keys are ignored; known keys
        with a value of the wrong type raise ``ConfigInvalidFault``.
        """
        known = field_names()
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            if key.startswith("_") or key not in known:
                continue
            reason = check_field(key, value)
            if reason:
                raise ConfigInvalidFault(f"openapi.{key}", reason)
            kwargs[key] = value
        return cls(**kwargs)

    def merged(self, patch: Mapping[str, Any]) -> "OpenAPIConfig":
        """Copy with every field present in ``patch`` replaced."""
        return replace(self, **dict(patch))

    def all_security_schemes(self) -> Dict[str, Dict[str, Any]]:
        """The three built-in schemes followed by configured ones (a fresh copy)."""
        schemes: Dict[str, Dict[str, Any]] = {
            BEARER_SCHEME: {
                "type": "http",
                "scheme": "bearer",
                "bearerFormat": "JWT",
                "description": "JWT Bearer token authentication",
            },
            API_KEY_SCHEME: {
                "type": "apiKey",
                "in": "header",
                "name": self.api_key_header,
                "description": "API key authentication",
            },
            SESSION_SCHEME: {
                "type": "apiKey",
                "in": "cookie",
                "name": self.session_cookie,
                "description": "Session cookie authentication",
            },
        }
        schemes.update(copy.deepcopy(self.security_schemes))
        return schemes

    def info(self) -> Dict[str, Any]:
        """Build the info object."""
        info: Dict[str, Any] = {
            "title": self.title,
            "version": self.version,
        }
        if self.description:
            info["description"] = self.description
        if self.terms_of_service:
            info["termsOfService"] = self.terms_of_service

        contact: Dict[str, str] = {}
        if self.contact_name:
            contact["name"] = self.contact_name
        if self.contact_email:
            contact["email"] = self.contact_email
        if self.contact_url:
            contact["url"] = self.contact_url
        if contact:
            info["contact"] = contact

        license_info: Dict[str, str] = {}
        if self.license_name:
            license_info["name"] = self.license_name
        if self.license_url:
            license_info["url"] = self.license_url
        if license_info:
            info["license"] = license_info

        return info


# ── Field checks ─────────────────────────────────────────────────────────

_LIST_FIELDS = {"servers"}
_DICT_FIELDS = {"security_schemes"}
_BOOL_FIELDS = {"enabled"}
_CALLABLE_FIELDS = {"route_filter"}
_CONTAINER_FIELDS = _LIST_FIELDS | _DICT_FIELDS


def field_names() -> set:
    return {f.name for f in fields(OpenAPIConfig)}


def owned_value(name: str, value: Any) -> Any:
    """A private copy of ``value`` when ``name`` is a container field."""
    return copy.deepcopy(value) if name in _CONTAINER_FIELDS else value


def check_field(name: str, value: Any) -> Optional[str]:
    """
    Return why ``value`` is not acceptable for field ``name``, or None.

    No coercion: ``"false"`` is not a boolean.
    """
    if name in _BOOL_FIELDS:
        if not isinstance(value, bool):
            return f"expected boolean, got {type(value).__name__}"
    elif name in _CALLABLE_FIELDS:
        if value is not None and not callable(value):
            return f"expected callable or None, got {type(value).__name__}"
    elif name in _LIST_FIELDS:
        if not isinstance(value, list) or not all(isinstance(item, dict) for item in value):
            return "expected a list of objects"
    elif name in _DICT_FIELDS:
        if not isinstance(value, dict) or not all(isinstance(item, dict) for item in value.values()):
            return "expected a mapping of scheme name to scheme object"
    elif not isinstance(value, str):
        return f"expected string, got {type(value).__name__}"
    return None
