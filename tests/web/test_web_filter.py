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
"""Tests for FilterBase — init-parameter binding and URL-pattern matching."""

from __future__ import annotations

import pytest

from headerguard.kernel.exceptions import ConfigurationException, PipelineStateException
from headerguard.web.filters import FilterBase, coerce_bool, coerce_int, to_attribute_name
from headerguard.web.ports.filter import Filter


class _Req:
    def __init__(self, path: str) -> None:
        self.path = path
        self.is_secure = False


class TimeoutFilter(FilterBase):
    """Lenient filter with one writable and one read-only property."""

    def __init__(self) -> None:
        super().__init__()
        self._timeout = 30
        self.init_hook_calls = 0

    @property
    def timeout(self) -> int:
        return self._timeout

    @timeout.setter
    def timeout(self, value: int | str) -> None:
        self._timeout = coerce_int(value)

    @property
    def name(self) -> str:
        return "timeout"

    def on_init(self) -> None:
        self.init_hook_calls += 1

    async def do_filter(self, request, response, chain):
        await chain.do_filter(request, response)


class StrictTimeoutFilter(TimeoutFilter):
    def is_config_problem_fatal(self) -> bool:
        return True


class TestAttributeNames:
    @pytest.mark.parametrize(
        ("param", "attribute"),
        [
            ("hstsMaxAgeSeconds", "hsts_max_age_seconds"),
            ("antiClickJackingUri", "anti_click_jacking_uri"),
            ("hsts-include-sub-domains", "hsts_include_sub_domains"),
            ("timeout", "timeout"),
        ],
    )
    def test_to_attribute_name(self, param, attribute):
        assert to_attribute_name(param) == attribute


class TestCoercion:
    @pytest.mark.parametrize("value", [True, "true", "TRUE", "1", "yes", "on"])
    def test_truthy(self, value):
        assert coerce_bool(value) is True

    @pytest.mark.parametrize("value", [False, "false", "0", "no", "off"])
    def test_falsy(self, value):
        assert coerce_bool(value) is False

    def test_bad_bool(self):
        with pytest.raises(ValueError):
            coerce_bool("maybe")

    def test_int_from_string(self):
        assert coerce_int(" 42 ") == 42

    def test_bool_is_not_an_int(self):
        with pytest.raises(TypeError):
            coerce_int(True)


class TestInit:
    def test_binds_known_parameter(self):
        f = TimeoutFilter()
        f.init({"timeout": "5"})
        assert f.timeout == 5
        assert f.initialized is True
        assert f.init_hook_calls == 1

    def test_conforms_to_filter_protocol(self):
        assert isinstance(TimeoutFilter(), Filter)

    def test_unknown_parameter_skipped_when_lenient(self):
        f = TimeoutFilter()
        f.init({"retries": 3})
        assert f.initialized is True

    def test_read_only_property_is_not_settable(self):
        f = StrictTimeoutFilter()
        with pytest.raises(ConfigurationException) as exc_info:
            f.init({"name": "other"})
        assert exc_info.value.context == {"parameter": "name"}

    def test_private_attribute_is_not_settable(self):
        with pytest.raises(ConfigurationException):
            StrictTimeoutFilter().init({"_timeout": 1})

    def test_unknown_parameter_fatal_when_strict(self):
        f = StrictTimeoutFilter()
        with pytest.raises(ConfigurationException) as exc_info:
            f.init({"retries": 3})
        assert exc_info.value.code == "CONFIG_UNKNOWN_PARAMETER"
        assert f.initialized is False
        assert f.init_hook_calls == 0

    def test_invalid_value_wrapped(self):
        with pytest.raises(ConfigurationException) as exc_info:
            TimeoutFilter().init({"timeout": "soon"})
        assert exc_info.value.code == "CONFIG_INVALID_VALUE"
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_double_init_rejected(self):
        f = TimeoutFilter()
        f.init()
        with pytest.raises(PipelineStateException):
            f.init()

    def test_require_initialized(self):
        with pytest.raises(PipelineStateException):
            TimeoutFilter().require_initialized()


class TestShouldNotFilter:
    def test_no_patterns_applies_everywhere(self):
        assert TimeoutFilter().should_not_filter(_Req("/anything")) is False

    def test_url_patterns(self):
        f = TimeoutFilter()
        f.url_patterns = ["/api/*"]
        assert f.should_not_filter(_Req("/api/orders")) is False
        assert f.should_not_filter(_Req("/health")) is True

    def test_exclude_patterns(self):
        f = TimeoutFilter()
        f.exclude_patterns = ["/static/*"]
        assert f.should_not_filter(_Req("/static/app.js")) is True
        assert f.should_not_filter(_Req("/index.html")) is False
