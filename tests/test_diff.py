"""Tests for the structural diff engine."""

from __future__ import annotations

import pytest

from hksave.diff import (
    NULL,
    REMOVED,
    ChangeKind,
    ChangeRecord,
    compare,
    format_plain,
    format_rich,
    render_value,
)


@pytest.mark.parametrize(
    "document",
    [
        {},
        [],
        None,
        "text",
        {"a": 1, "b": [1, {"c": None}], "d": {"e": True}},
        [{"x": 1.5}, [2, 3]],
    ],
)
def test_identical_documents_have_no_changes(document) -> None:
    assert compare(document, document, "") == []


def test_modified_scalar() -> None:
    assert compare({"a": 1}, {"a": 2}, "") == [ChangeRecord(".a", 1, 2, ChangeKind.MODIFIED)]


def test_added_key() -> None:
    changes = compare({"a": 1}, {"a": 1, "b": 2}, "")
    assert changes == [ChangeRecord(".b", NULL, 2, ChangeKind.ADDED)]


def test_removed_key() -> None:
    changes = compare({"a": 1, "b": 2}, {"a": 1}, "")
    assert changes == [ChangeRecord(".b", 2, NULL, ChangeKind.REMOVED)]


def test_array_item_added() -> None:
    changes = compare([1, 2], [1, 2, 3], "")
    assert changes == [ChangeRecord("[2]", NULL, 3, ChangeKind.ADDED)]


def test_array_item_removed_uses_removed_sentinel() -> None:
    changes = compare([1, 2, 3], [1, 2], "")

    assert len(changes) == 1
    record = changes[0]
    assert record.kind is ChangeKind.REMOVED
    assert record.path == "[2]"
    assert record.old == 3
    assert record.new is REMOVED
    assert record.new is not NULL
    assert format_plain(record) == "[2]: 3 -> removed"


def test_mapping_order_removed_then_added_then_common() -> None:
    old = {"keep": 1, "gone": 2, "also_gone": 3}
    new = {"fresh": 4, "keep": 5}

    changes = compare(old, new, "")

    assert [(c.path, c.kind) for c in changes] == [
        (".gone", ChangeKind.REMOVED),
        (".also_gone", ChangeKind.REMOVED),
        (".fresh", ChangeKind.ADDED),
        (".keep", ChangeKind.MODIFIED),
    ]


def test_common_keys_follow_old_side_order() -> None:
    old = {"b": 1, "a": 1}
    new = {"a": 2, "b": 2}

    assert [c.path for c in compare(old, new, "")] == [".b", ".a"]


def test_nested_paths() -> None:
    old = {"playerData": {"charms": [{"id": 1, "equipped": False}]}}
    new = {"playerData": {"charms": [{"id": 1, "equipped": True}]}}

    changes = compare(old, new, "")

    assert changes == [
        ChangeRecord(".playerData.charms[0].equipped", False, True, ChangeKind.MODIFIED)
    ]


def test_path_prefix_is_kept() -> None:
    changes = compare({"a": 1}, {"a": 2}, "root")
    assert changes[0].path == "root.a"


def test_type_change_is_single_modification() -> None:
    changes = compare({"a": [1, 2]}, {"a": {"0": 1}}, "")
    assert changes == [ChangeRecord(".a", [1, 2], {"0": 1}, ChangeKind.MODIFIED)]


@pytest.mark.parametrize("old, new", [(True, 1), (1, 1.0), (0, False), (None, 0)])
def test_no_type_coercion(old, new) -> None:
    changes = compare({"v": old}, {"v": new}, "")
    assert [c.kind for c in changes] == [ChangeKind.MODIFIED]


def test_render_value() -> None:
    assert render_value(NULL) == "null"
    assert render_value(REMOVED) == "removed"
    assert render_value(None) == "null"
    assert render_value("Ghost") == '"Ghost"'
    assert render_value({"a": [1, 2]}) == '{"a":[1,2]}'
    assert render_value("Hornet ✨") == '"Hornet ✨"'


def test_format_plain() -> None:
    record = ChangeRecord(".playerData.geo", 120, 135, ChangeKind.MODIFIED)
    assert format_plain(record) == ".playerData.geo: 120 -> 135"


@pytest.mark.parametrize(
    "record",
    [
        ChangeRecord(".a", 1, 2, ChangeKind.MODIFIED),
        ChangeRecord(".b", NULL, {"x": "[bold]"}, ChangeKind.ADDED),
        ChangeRecord(".c", "gone", NULL, ChangeKind.REMOVED),
        ChangeRecord("[3]", [1], REMOVED, ChangeKind.REMOVED),
    ],
)
def test_rich_and_plain_renderings_never_diverge(record: ChangeRecord) -> None:
    assert format_rich(record).plain == format_plain(record)


def test_rich_styles() -> None:
    text = format_rich(ChangeRecord(".a", 1, 2, ChangeKind.MODIFIED))
    styles = [str(span.style) for span in text.spans]
    assert styles == ["red", "green"]

    removed = format_rich(ChangeRecord("[0]", 1, REMOVED, ChangeKind.REMOVED))
    assert [str(span.style) for span in removed.spans] == ["red", "red"]


def test_removed_key_keeps_old_value_unstyled() -> None:
    record = compare({"a": 1, "gone": "x"}, {"a": 1}, "")[0]
    text = format_rich(record)

    assert [str(span.style) for span in text.spans] == ["red"]
    assert text.plain[text.spans[0].start : text.spans[0].end] == "null"
    assert text.plain == format_plain(record)
