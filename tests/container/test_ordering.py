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
"""Tests for @order and sort_by_order."""

from headerguard.container.ordering import (
    HIGHEST_PRECEDENCE,
    LOWEST_PRECEDENCE,
    get_order,
    order,
    sort_by_order,
)


@order(HIGHEST_PRECEDENCE)
class Early:
    pass


@order(LOWEST_PRECEDENCE)
class Late:
    pass


class Plain:
    pass


class AlsoPlain:
    pass


class TestOrder:
    def test_decorator_sets_value(self):
        assert get_order(Early) == HIGHEST_PRECEDENCE
        assert get_order(Late) == LOWEST_PRECEDENCE

    def test_default_is_zero(self):
        assert get_order(Plain) == 0

    def test_decorator_returns_class(self):
        @order(5)
        class Five:
            pass

        assert isinstance(Five(), Five)


class TestSortByOrder:
    def test_sorts_instances_by_class_order(self):
        late, plain, early = Late(), Plain(), Early()
        assert sort_by_order([late, plain, early]) == [early, plain, late]

    def test_sort_is_stable_for_equal_order(self):
        a, b = Plain(), AlsoPlain()
        assert sort_by_order([b, a]) == [b, a]
