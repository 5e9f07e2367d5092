from __future__ import annotations

import pytest

from dbmreader.core.pagination import DEFAULT_RULE, DoublePageRule


def test_default_rule_matches_known_spreads() -> None:
    assert DEFAULT_RULE.second_page_for(8) == 9
    assert DEFAULT_RULE.second_page_for(20) == 21
    assert DEFAULT_RULE.is_second_page(9)
    assert DEFAULT_RULE.is_second_page(21)
    assert not DEFAULT_RULE.is_second_page(8)
    assert DEFAULT_RULE.second_page_for(10) is None


def test_custom_rule_replaces_defaults() -> None:
    rule = DoublePageRule({2: 3})
    assert rule.is_second_page(3)
    assert not rule.is_second_page(9)
    assert rule.second_page_for(8) is None


def test_empty_rule_has_no_spreads() -> None:
    rule = DoublePageRule({})
    assert not rule.is_second_page(9)
    assert rule.second_page_for(8) is None


def test_rule_rejects_chained_spreads() -> None:
    with pytest.raises(ValueError):
        DoublePageRule({8: 9, 9: 10})
