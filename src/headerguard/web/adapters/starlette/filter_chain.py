# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""FilterChainMiddleware — pure ASGI middleware running servlet-style filters."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from starlette.datastructures import MutableHeaders
from starlette.middleware import Middleware
from starlette.requests import HTTPConnection
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from headerguard.container.ordering import sort_by_order
from headerguard.core.config import Config
from headerguard.kernel.exceptions import PipelineStateException, ResponseCommittedException
from headerguard.logging.port import LoggingPort
from headerguard.logging.structlog_adapter import StructlogAdapter
from headerguard.web.header_security import HttpHeaderSecurityFilter
from headerguard.web.ports.filter import Filter, HeaderResponse, SecureRequest


class AsgiRequest:
    """:class:`SecureRequest` over a Starlette connection."""

    def __init__(self, scope: Scope) -> None:
        self.connection = HTTPConnection(scope)

    @property
    def is_secure(self) -> bool:
        return self.connection.url.is_secure

    @property
    def path(self) -> str:
        return self.connection.url.path


class AsgiResponse:
    """:class:`HeaderResponse` over an ASGI ``send`` callable.

    Headers added before the response starts are appended to the
    ``http.response.start`` message; after that message the response is
    committed and refuses further headers.
    """

    def __init__(self, scope: Scope, send: Send) -> None:
        self._scope_type: str = scope["type"]
        self._send = send
        self._pending: list[tuple[str, str]] = []
        self._committed = False

    @property
    def is_committed(self) -> bool:
        return self._committed

    @property
    def supports_headers(self) -> bool:
        return self._scope_type == "http"

    def add_header(self, name: str, value: str) -> None:
        if not self.supports_headers:
            raise PipelineStateException(
                f"Cannot add header '{name}' to a {self._scope_type} response",
                code="RESPONSE_HEADERS_UNSUPPORTED",
            )
        if self._committed:
            raise ResponseCommittedException(
                f"Cannot add header '{name}': response already committed",
                code="RESPONSE_COMMITTED",
            )
        self._pending.append((name, value))

    async def send(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            message.setdefault("headers", [])
            headers = MutableHeaders(scope=message)
            for name, value in self._pending:
                headers.append(name, value)
            self._committed = True
        await self._send(message)


class _ApplicationFilterChain:
    """Per-request chain: runs the remaining filters, then the wrapped app."""

    def __init__(
        self,
        filters: Sequence[Filter],
        app: ASGIApp,
        scope: Scope,
        receive: Receive,
        response: AsgiResponse,
    ) -> None:
        self._filters = filters
        self._app = app
        self._scope = scope
        self._receive = receive
        self._response = response
        self._position = 0

    async def do_filter(self, request: SecureRequest, response: HeaderResponse) -> None:
        while self._position < len(self._filters):
            current = self._filters[self._position]
            self._position += 1
            if current.should_not_filter(request):
                continue
            await current.do_filter(request, response, self)
            return

        await self._app(self._scope, self._receive, self._response.send)


class FilterChainMiddleware:
    """Pure ASGI middleware that executes an ordered chain of :class:`Filter` instances.

    Filters are sorted by ``@order`` and initialised here if the caller has
    not done so, so configuration errors surface when the application is
    built rather than on the first request. ``http`` and ``websocket``
    connections go through the chain; other scopes pass straight through.

    Uses raw ASGI protocol instead of ``BaseHTTPMiddleware`` so headers are
    added to the ``http.response.start`` message without buffering the body.
    """

    def __init__(self, app: ASGIApp, filters: Sequence[Filter] = ()) -> None:
        self.app = app
        self._filters: list[Filter] = sort_by_order(filters)
        for web_filter in self._filters:
            if not web_filter.initialized:
                web_filter.init()

    @property
    def filters(self) -> list[Filter]:
        return list(self._filters)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        request = AsgiRequest(scope)
        response = AsgiResponse(scope, send)
        chain = _ApplicationFilterChain(self._filters, self.app, scope, receive, response)
        await chain.do_filter(request, response)


def header_security_middleware(**init_params: Any) -> Middleware:
    """Build a Starlette ``Middleware`` entry running :class:`HttpHeaderSecurityFilter`.

    Keyword arguments are init parameters of the filter
    (``hsts_max_age_seconds=31536000``, ``anti_click_jacking_option="SAMEORIGIN"``...).
    """
    security_filter = HttpHeaderSecurityFilter()
    security_filter.init(init_params)
    return Middleware(FilterChainMiddleware, filters=[security_filter])


def header_security_middleware_from_config(
    config: Config, logging_port: LoggingPort | None = None
) -> Middleware:
    """Configure logging from *config*, then build the filter from ``headerguard.http-header-security``.

    Either step raises ``ConfigurationException`` on a bad value, so the
    application fails before it serves a request.
    """
    port = logging_port or StructlogAdapter()
    port.configure(config)
    security_filter = HttpHeaderSecurityFilter.from_config(config)
    port.get_logger("headerguard.web").info(
        "http_header_security_configured",
        sources=config.loaded_sources,
        hsts_enabled=security_filter.hsts_enabled,
        hsts=security_filter.hsts_header_value,
        anti_click_jacking_enabled=security_filter.anti_click_jacking_enabled,
        x_frame_options=security_filter.anti_click_jacking_header_value,
    )
    return Middleware(FilterChainMiddleware, filters=[security_filter])
