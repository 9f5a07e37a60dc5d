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
"""Exception hierarchy for headerguard.

Two families matter at runtime: configuration problems, raised while a
filter is being initialised and meant to abort startup, and pipeline-state
violations, raised when a filter is driven outside its lifecycle contract.
"""

from __future__ import annotations


class HeaderGuardException(Exception):
    """Base exception for all headerguard errors.

    Carries an optional error code and context dict for structured error data.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "CONFIG_UNKNOWN_PARAMETER").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


class ConfigurationException(HeaderGuardException):
    """Invalid filter configuration detected during initialisation."""


class PipelineStateException(HeaderGuardException):
    """A filter was used outside its init/ready lifecycle."""


class ResponseCommittedException(PipelineStateException):
    """The response was already sent to the client and can no longer take headers."""
