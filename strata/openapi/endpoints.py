"""
Document endpoints.

Two GET routes serve the rendered document: the raw JSON at
``json_path`` and an interactive reference viewer at ``docs_path``. Both
render with the request's effective configuration, so per-request
overrides (title, servers, route filter) show up in what is served.

``OpenAPIEndpoints`` is also a minimal ASGI application for mounting in
front of, or alongside, the API.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from jinja2 import Environment, PackageLoader, select_autoescape

from .config import OpenAPIConfig
from .generator import OpenAPIGenerator
from .request_config import RequestScopedConfig, request_scope


logger = logging.getLogger("strata.openapi")

JSON_CONTENT_TYPE = "application/json"
HTML_CONTENT_TYPE = "text/html; charset=utf-8"

RequestHook = Callable[[Dict[str, Any], RequestScopedConfig], None]

_env = Environment(
    loader=PackageLoader("strata", "templates"),
    autoescape=select_autoescape(["html"]),
)


@dataclass(frozen=True)
class DocsResponse:
    status: int
    content_type: str
    body: str
    headers: Tuple[Tuple[str, str], ...] = field(default=())


def render_docs_html(config: OpenAPIConfig) -> str:
    """Generate the reference viewer HTML page."""
    template = _env.get_template("scalar.html")
    return template.render(
        title=config.title,
        spec_url=config.json_path,
        configuration={"theme": config.ui_theme},
    )


class OpenAPIEndpoints:
    """
    Serves the document and the viewer.

    Args:
        generator: Document generator (owns the cached assembly)
        on_request: Optional hook run per ASGI request with the scope and
            the request's ``RequestScopedConfig``; use it to apply overrides
    """

    def __init__(
        self,
        generator: OpenAPIGenerator,
        *,
        on_request: Optional[RequestHook] = None,
    ):
        self.generator = generator
        self.on_request = on_request

    @property
    def base_config(self) -> OpenAPIConfig:
        return self.generator.config

    def routes(self, config: Optional[OpenAPIConfig] = None) -> List[Tuple[str, str]]:
        """``(verb, path)`` pairs served for the given configuration."""
        config = config or self.base_config
        if not config.enabled:
            return []
        return [("GET", config.json_path), ("GET", config.docs_path)]

    def serve_json(self, request_config: Optional[RequestScopedConfig] = None) -> DocsResponse:
        config = self._effective(request_config)
        spec = self.generator.render(config)
        return DocsResponse(200, JSON_CONTENT_TYPE, json.dumps(spec, indent=2, default=str))

    def serve_docs(self, request_config: Optional[RequestScopedConfig] = None) -> DocsResponse:
        config = self._effective(request_config)
        return DocsResponse(200, HTML_CONTENT_TYPE, render_docs_html(config))

    def handle(
        self,
        path: str,
        request_config: Optional[RequestScopedConfig] = None,
        method: str = "GET",
    ) -> DocsResponse:
        """Dispatch a request path to the matching endpoint."""
        config = self._effective(request_config)
        if config.enabled and path in (config.json_path, config.docs_path):
            if method.upper() not in ("GET", "HEAD"):
                return _error(405, "METHOD_NOT_ALLOWED", f"Method {method} not allowed", (("allow", "GET, HEAD"),))
            if path == config.json_path:
                return self.serve_json(request_config)
            return self.serve_docs(request_config)
        return _error(404, "NOT_FOUND", f"No documentation route at {path}")

    def _effective(self, request_config: Optional[RequestScopedConfig]) -> OpenAPIConfig:
        if request_config is None:
            return self.base_config
        return request_config.effective()

    # ── ASGI ─────────────────────────────────────────────────────────────

    async def __call__(self, scope: Dict[str, Any], receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            return

        with request_scope(self.base_config) as request_config:
            if self.on_request is not None:
                self.on_request(scope, request_config)
            response = self.handle(scope["path"], request_config, scope.get("method", "GET"))

        logger.debug("%s %s -> %d", scope.get("method", "GET"), scope["path"], response.status)

        body = response.body.encode("utf-8")
        headers = [
            (b"content-type", response.content_type.encode("latin-1")),
            (b"content-length", str(len(body)).encode("latin-1")),
        ]
        headers.extend((k.encode("latin-1"), v.encode("latin-1")) for k, v in response.headers)

        await send({"type": "http.response.start", "status": response.status, "headers": headers})
        await send({
            "type": "http.response.body",
            "body": b"" if scope.get("method") == "HEAD" else body,
        })


def _error(status: int, code: str, message: str, headers: Tuple[Tuple[str, str], ...] = ()) -> DocsResponse:
    payload = {"code": code, "message": message}
    return DocsResponse(status, JSON_CONTENT_TYPE, json.dumps(payload), headers)
