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
"""Filter ports — framework-agnostic request, response and chain capabilities.

Filters only see these protocols, so vendor-specific types (e.g. Starlette)
remain confined to the adapter layer.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class SecureRequest(Protocol):
    """The slice of an inbound request a filter may inspect."""

    @property
    def is_secure(self) -> bool:
        """``True`` when the request arrived over an encrypted transport."""
        ...

    @property
    def path(self) -> str: ...


@runtime_checkable
class HeaderResponse(Protocol):
    """The slice of an outbound response a filter may touch."""

    @property
    def is_committed(self) -> bool:
        """``True`` once the status line and headers have been sent."""
        ...

    @property
    def supports_headers(self) -> bool:
        """``True`` for HTTP responses; ``False`` for other protocols sharing the pipeline."""
        ...

    def add_header(self, name: str, value: str) -> None:
        """Append a header, keeping any existing values with the same name."""
        ...


@runtime_checkable
class FilterChain(Protocol):
    """The remainder of the pipeline after the current filter."""

    async def do_filter(self, request: SecureRequest, response: HeaderResponse) -> None: ...


@runtime_checkable
class Filter(Protocol):
    """Protocol for servlet-style request filters.

    Filters are initialised once, then invoked per request with the
    request, the response and the rest of the chain. Each filter must
    either raise or ``await chain.do_filter(request, response)``.
    """

    @property
    def initialized(self) -> bool: ...

    def init(self, init_params: Mapping[str, Any] | None = None) -> None: ...

    async def do_filter(
        self, request: SecureRequest, response: HeaderResponse, chain: FilterChain
    ) -> None: ...

    def should_not_filter(self, request: SecureRequest) -> bool:
        """Return ``True`` to skip this filter for the given request."""
        ...
