"""Tests for lenient JSON extraction."""

from __future__ import annotations

from arec.utils.json_extract import extract_json_object


def test_extracts_fenced_json() -> None:
    text = 'Here you go:\n```json\n{"reasoning": "r", "action": {"type": "Search"}}\n```'

    assert extract_json_object(text) == {"reasoning": "r", "action": {"type": "Search"}}


def test_extracts_bare_json() -> None:
    assert extract_json_object('  {"a": 1}  ') == {"a": 1}


def test_extracts_nested_object_from_prose() -> None:
    """It should find a balanced object even when braces appear inside strings."""

    text = 'I will search. {"reasoning": "use {braces}", "action": {"type": "Search", "arguments": {"query": "q"}}} Thanks.'

    assert extract_json_object(text) == {
        "reasoning": "use {braces}",
        "action": {"type": "Search", "arguments": {"query": "q"}},
    }


def test_returns_none_for_non_objects() -> None:
    assert extract_json_object("") is None
    assert extract_json_object("no json here") is None
    assert extract_json_object("[1, 2, 3]") is None
    assert extract_json_object("{not valid}") is None


def test_skips_brace_spans_that_are_not_json() -> None:
    """Prose braces before the real object must not hide it."""

    text = 'Let me consider {a, b} first: {"reasoning": "r", "action": {"type": "Finish"}}'

    assert extract_json_object(text) == {"reasoning": "r", "action": {"type": "Finish"}}
