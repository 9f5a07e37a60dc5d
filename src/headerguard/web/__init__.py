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
"""headerguard web layer — framework-agnostic filters and their ports."""

from headerguard.web.filters import FilterBase
from headerguard.web.header_security import (
    ANTI_CLICK_JACKING_HEADER_NAME,
    HSTS_HEADER_NAME,
    HttpHeaderSecurityFilter,
    HttpHeaderSecurityProperties,
    XFrameOption,
)
from headerguard.web.ports.filter import Filter, FilterChain, HeaderResponse, SecureRequest

__all__ = [
    "ANTI_CLICK_JACKING_HEADER_NAME",
    "Filter",
    "FilterBase",
    "FilterChain",
    "HSTS_HEADER_NAME",
    "HeaderResponse",
    "HttpHeaderSecurityFilter",
    "HttpHeaderSecurityProperties",
    "SecureRequest",
    "XFrameOption",
]
