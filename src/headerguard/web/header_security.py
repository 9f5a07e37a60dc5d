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
"""HTTP header security filter — HSTS and clickjacking protection headers.

Header values are compiled once in ``init()`` and appended to every
response. Configuration problems always abort initialisation: a filter
that exists to guarantee a security header must never run with an
undefined header value.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any
from urllib.parse import urlsplit

import structlog

from headerguard.container.ordering import HIGHEST_PRECEDENCE, order
from headerguard.core.config import Config, config_properties
from headerguard.kernel.exceptions import ConfigurationException, ResponseCommittedException
from headerguard.web.filters import FilterBase, coerce_bool, coerce_int
from headerguard.web.ports.filter import FilterChain, HeaderResponse, SecureRequest

logger = structlog.get_logger("headerguard.web")

HSTS_HEADER_NAME = "Strict-Transport-Security"
ANTI_CLICK_JACKING_HEADER_NAME = "X-Frame-Options"

# RFC 3986 excludes these outright; '%' must start a two-digit escape.
_URI_FORBIDDEN_RE = re.compile(r'[\s\x00-\x1f\x7f<>"{}|\\^`]|%(?![0-9A-Fa-f]{2})')


class XFrameOption(Enum):
    """X-Frame-Options directive, valued by its wire token."""

    DENY = "DENY"
    SAME_ORIGIN = "SAMEORIGIN"
    ALLOW_FROM = "ALLOW-FROM"

    @property
    def header_value(self) -> str:
        return self.value

    @classmethod
    def parse(cls, token: str | XFrameOption) -> XFrameOption:
        """Case-insensitive lookup by wire token (``SAMEORIGIN``) or member name (``SAME_ORIGIN``)."""
        if isinstance(token, cls):
            return token
        text = str(token).lower()
        for option in cls:
            if text in (option.value.lower(), option.name.lower()):
                return option
        raise ConfigurationException(
            f"Unrecognised X-Frame-Options value {token!r}; expected one of "
            + ", ".join(option.value for option in cls),
            code="CONFIG_INVALID_FRAME_OPTION",
            context={"value": token},
        )


def parse_uri(value: Any) -> str:
    """Validate *value* as a URI reference and return its string form."""
    if value is None or not str(value):
        raise ConfigurationException(
            "A URI is required when X-Frame-Options is ALLOW-FROM",
            code="CONFIG_MISSING_URI",
        )
    text = str(value)
    try:
        # Header values go out on the wire as Latin-1.
        text.encode("latin-1")
    except UnicodeEncodeError as exc:
        raise ConfigurationException(
            f"Malformed URI {text!r}: not representable in a header value",
            code="CONFIG_INVALID_URI",
            context={"value": text},
        ) from exc
    if _URI_FORBIDDEN_RE.search(text):
        raise ConfigurationException(
            f"Malformed URI {text!r}",
            code="CONFIG_INVALID_URI",
            context={"value": text},
        )
    try:
        # .port raises ValueError on a non-numeric or out-of-range port.
        urlsplit(text).port  # noqa: B018
    except ValueError as exc:
        raise ConfigurationException(
            f"Malformed URI {text!r}: {exc}",
            code="CONFIG_INVALID_URI",
            context={"value": text},
        ) from exc
    return text


@config_properties(prefix="headerguard.http-header-security")
@dataclass(frozen=True)
class HttpHeaderSecurityProperties:
    """Configuration for :class:`HttpHeaderSecurityFilter` (headerguard.http-header-security.*)."""

    hsts_enabled: bool = True
    hsts_max_age_seconds: int = 0
    hsts_include_sub_domains: bool = False
    anti_click_jacking_enabled: bool = True
    anti_click_jacking_option: str = XFrameOption.DENY.value
    anti_click_jacking_uri: str | None = None


@order(HIGHEST_PRECEDENCE + 300)
class HttpHeaderSecurityFilter(FilterBase):
    """Adds ``Strict-Transport-Security`` and ``X-Frame-Options`` to responses.

    HSTS is only sent for requests received over a secure transport.
    Both headers are appended, never replacing values already present,
    and the chain always continues.
    """

    def __init__(self, properties: HttpHeaderSecurityProperties | None = None) -> None:
        super().__init__()
        self._hsts_enabled = True
        self._hsts_max_age_seconds = 0
        self._hsts_include_sub_domains = False
        self._anti_click_jacking_enabled = True
        self._anti_click_jacking_option = XFrameOption.DENY
        self._anti_click_jacking_uri: str | None = None

        self._hsts_header_value: str | None = None
        self._anti_click_jacking_header_value: str | None = None

        if properties is not None:
            self.apply_parameters(asdict(properties))

    @classmethod
    def from_config(cls, config: Config) -> HttpHeaderSecurityFilter:
        """Bind ``headerguard.http-header-security`` and return an initialised filter."""
        security_filter = cls(config.bind(HttpHeaderSecurityProperties))
        security_filter.init()
        return security_filter

    # -- configuration ------------------------------------------------------

    @property
    def hsts_enabled(self) -> bool:
        return self._hsts_enabled

    @hsts_enabled.setter
    def hsts_enabled(self, value: bool | str) -> None:
        self.require_not_initialized()
        self._hsts_enabled = coerce_bool(value)

    @property
    def hsts_max_age_seconds(self) -> int:
        return self._hsts_max_age_seconds

    @hsts_max_age_seconds.setter
    def hsts_max_age_seconds(self, value: int | str) -> None:
        self.require_not_initialized()
        # Negative values are clamped, not rejected.
        self._hsts_max_age_seconds = max(coerce_int(value), 0)

    @property
    def hsts_include_sub_domains(self) -> bool:
        return self._hsts_include_sub_domains

    @hsts_include_sub_domains.setter
    def hsts_include_sub_domains(self, value: bool | str) -> None:
        self.require_not_initialized()
        self._hsts_include_sub_domains = coerce_bool(value)

    @property
    def anti_click_jacking_enabled(self) -> bool:
        return self._anti_click_jacking_enabled

    @anti_click_jacking_enabled.setter
    def anti_click_jacking_enabled(self, value: bool | str) -> None:
        self.require_not_initialized()
        self._anti_click_jacking_enabled = coerce_bool(value)

    @property
    def anti_click_jacking_option(self) -> XFrameOption:
        return self._anti_click_jacking_option

    @anti_click_jacking_option.setter
    def anti_click_jacking_option(self, value: str | XFrameOption) -> None:
        self.require_not_initialized()
        self._anti_click_jacking_option = XFrameOption.parse(value)

    @property
    def anti_click_jacking_uri(self) -> str | None:
        return self._anti_click_jacking_uri

    @anti_click_jacking_uri.setter
    def anti_click_jacking_uri(self, value: str | None) -> None:
        self.require_not_initialized()
        # Validated in init(), and only when ALLOW-FROM is selected.
        self._anti_click_jacking_uri = None if value is None else str(value)

    # -- derived header values ----------------------------------------------

    @property
    def hsts_header_value(self) -> str | None:
        return self._hsts_header_value

    @property
    def anti_click_jacking_header_value(self) -> str | None:
        return self._anti_click_jacking_header_value

    # -- lifecycle ----------------------------------------------------------

    def is_config_problem_fatal(self) -> bool:
        return True

    def on_init(self) -> None:
        hsts_value = f"max-age={self._hsts_max_age_seconds}"
        if self._hsts_include_sub_domains:
            hsts_value += ";includeSubDomains"

        option = self._anti_click_jacking_option
        frame_value = option.header_value
        if option is XFrameOption.ALLOW_FROM:
            try:
                uri = parse_uri(self._anti_click_jacking_uri)
            except ConfigurationException as exc:
                logger.error(
                    "anti_click_jacking_uri_invalid",
                    option=option.header_value,
                    uri=self._anti_click_jacking_uri,
                    error=str(exc),
                )
                raise
            frame_value += f":{uri}"

        self._hsts_header_value = hsts_value
        self._anti_click_jacking_header_value = frame_value
        logger.debug(
            "http_header_security_initialized",
            hsts_enabled=self._hsts_enabled,
            hsts=hsts_value,
            anti_click_jacking_enabled=self._anti_click_jacking_enabled,
            x_frame_options=frame_value,
        )

    async def do_filter(
        self, request: SecureRequest, response: HeaderResponse, chain: FilterChain
    ) -> None:
        self.require_initialized()

        if response.is_committed:
            logger.error("response_already_committed", filter=type(self).__name__, path=request.path)
            raise ResponseCommittedException(
                "Response was committed before HttpHeaderSecurityFilter could add headers",
                code="RESPONSE_COMMITTED",
                context={"path": request.path},
            )

        if response.supports_headers:
            if self._hsts_enabled and request.is_secure:
                response.add_header(HSTS_HEADER_NAME, self._hsts_header_value)  # type: ignore[arg-type]
            if self._anti_click_jacking_enabled:
                response.add_header(
                    ANTI_CLICK_JACKING_HEADER_NAME,
                    self._anti_click_jacking_header_value,  # type: ignore[arg-type]
                )

        await chain.do_filter(request, response)
