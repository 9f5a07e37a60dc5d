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
"""FilterBase — base class for filters with init-parameter binding.

Framework-agnostic: only the ``SecureRequest`` / ``HeaderResponse`` /
``FilterChain`` ports are used, so no Starlette import is needed.
"""

from __future__ import annotations

import abc
import re
from collections.abc import Mapping
from fnmatch import fnmatch
from typing import Any

import structlog

from headerguard.core.config import coerce_bool, coerce_int
from headerguard.kernel.exceptions import ConfigurationException, PipelineStateException
from headerguard.web.ports.filter import FilterChain, HeaderResponse, SecureRequest

logger = structlog.get_logger("headerguard.web")

_CAMEL_BOUNDARY_RE = re.compile(r"(?<!^)(?=[A-Z])")

__all__ = ["FilterBase", "coerce_bool", "coerce_int", "to_attribute_name"]


def to_attribute_name(param_name: str) -> str:
    """Map ``hstsMaxAgeSeconds`` / ``hsts-max-age-seconds`` to ``hsts_max_age_seconds``."""
    return _CAMEL_BOUNDARY_RE.sub("_", param_name.strip()).replace("-", "_").lower()


class FilterBase(abc.ABC):
    """Abstract base class for :class:`~headerguard.web.ports.filter.Filter` implementations.

    ``init()`` binds servlet-style init parameters to the writable properties
    of the subclass, calls :meth:`on_init`, and marks the filter ready.
    Unknown parameters are logged and skipped unless
    :meth:`is_config_problem_fatal` returns ``True``, in which case they
    abort initialisation.

    Attributes:
        url_patterns: Glob patterns that this filter applies to.
            If empty (default), the filter applies to *all* paths.
        exclude_patterns: Glob patterns to exclude even if ``url_patterns``
            matches.  Checked *after* ``url_patterns``.
    """

    url_patterns: list[str] = []
    exclude_patterns: list[str] = []

    def __init__(self) -> None:
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def init(self, init_params: Mapping[str, Any] | None = None) -> None:
        if self._initialized:
            raise PipelineStateException(
                f"{type(self).__name__} has already been initialised",
                code="FILTER_ALREADY_INITIALIZED",
            )

        self.apply_parameters(init_params or {})
        self.on_init()
        self._initialized = True
        logger.debug("filter_initialized", filter=type(self).__name__)

    def apply_parameters(self, params: Mapping[str, Any]) -> None:
        """Set each parameter through its property; bad values raise ``ConfigurationException``."""
        for name, value in params.items():
            attribute = to_attribute_name(name)
            if not self._is_settable(attribute):
                self._config_problem(
                    f"Unknown parameter '{name}' for filter {type(self).__name__}",
                    code="CONFIG_UNKNOWN_PARAMETER",
                    parameter=name,
                )
                continue
            try:
                setattr(self, attribute, value)
            except (ValueError, TypeError) as exc:
                raise ConfigurationException(
                    f"Invalid value {value!r} for parameter '{name}' of filter {type(self).__name__}",
                    code="CONFIG_INVALID_VALUE",
                    context={"filter": type(self).__name__, "parameter": name, "value": value},
                ) from exc

    def on_init(self) -> None:
        """Hook run after parameters are bound and before the filter is ready."""

    def is_config_problem_fatal(self) -> bool:
        """Return ``True`` if configuration problems must abort initialisation."""
        return False

    def should_not_filter(self, request: SecureRequest) -> bool:
        """Return ``True`` if the request path does not match this filter's patterns."""
        path = request.path

        if self.url_patterns and not any(fnmatch(path, p) for p in self.url_patterns):
            return True

        return bool(
            self.exclude_patterns and any(fnmatch(path, p) for p in self.exclude_patterns)
        )

    def require_initialized(self) -> None:
        if not self._initialized:
            raise PipelineStateException(
                f"{type(self).__name__} used before init()",
                code="FILTER_NOT_INITIALIZED",
            )

    def require_not_initialized(self) -> None:
        if self._initialized:
            raise PipelineStateException(
                f"{type(self).__name__} configuration is frozen after init()",
                code="FILTER_CONFIGURATION_FROZEN",
            )

    @abc.abstractmethod
    async def do_filter(
        self, request: SecureRequest, response: HeaderResponse, chain: FilterChain
    ) -> None:
        """Execute the filter logic.  Must ``await chain.do_filter(request, response)`` to proceed."""
        ...

    def _is_settable(self, attribute: str) -> bool:
        if attribute.startswith("_"):
            return False
        descriptor = getattr(type(self), attribute, None)
        return isinstance(descriptor, property) and descriptor.fset is not None

    def _config_problem(self, message: str, *, code: str, **context: Any) -> None:
        if self.is_config_problem_fatal():
            logger.error("filter_config_problem", filter=type(self).__name__, error=message, **context)
            raise ConfigurationException(message, code=code, context=dict(context))
        logger.warning("filter_config_problem", filter=type(self).__name__, error=message, **context)
