from __future__ import annotations

from core.diag.differ import diff_lines
from core.diag.grouper import group, truncate_snippet
from core.diag.models import ELLIPSIS, DiffChunk, LineInfo, MismatchRecord


def _group(server: str, client: str, **kwargs) -> list[MismatchRecord]:
    return group(diff_lines(server, client), server.splitlines(), **kwargs)


def _numbers(infos: tuple[LineInfo, ...]) -> list[int]:
    return [info.line for info in infos]


def _snippets(infos: tuple[LineInfo, ...]) -> list[str]:
    return [info.snippet for info in infos]


def test_group_replacement_in_middle_has_context_on_both_sides() -> None:
    server = "l1\nl2\nl3\nold\nl5\nl6\nl7"
    client = "l1\nl2\nl3\nnew\nl5\nl6\nl7"

    records = _group(server, client)

    assert len(records) == 1
    record = records[0]
    assert _snippets(record.context_before) == ["l2", "l3"]
    assert _numbers(record.context_before) == [2, 3]
    assert _snippets(record.server_lines) == ["old"]
    assert _numbers(record.server_lines) == [4]
    assert _snippets(record.client_lines) == ["new"]
    assert _numbers(record.client_lines) == [4]
    assert _snippets(record.context_after) == ["l5", "l6"]
    assert _numbers(record.context_after) == [5, 6]


def test_group_context_is_clamped_at_document_start() -> None:
    records = _group("old\nsame", "new\nsame")

    assert records[0].context_before == ()
    assert _numbers(records[0].context_after) == [2]


def test_group_context_is_clamped_near_document_start() -> None:
    records = _group("a\nold\nb\nc\nd", "a\nnew\nb\nc\nd")

    assert _snippets(records[0].context_before) == ["a"]
    assert _numbers(records[0].context_before) == [1]


def test_group_trailing_change_has_empty_context_after() -> None:
    records = _group("a\nb\nold", "a\nb\nnew")

    assert len(records) == 1
    assert records[0].context_after == ()
    assert _numbers(records[0].server_lines) == [3]


def test_group_pure_insertion_numbers_at_insert_position() -> None:
    records = _group("a\nb\nc\n", "a\nb\ninserted\nextra\nc\n")

    record = records[0]
    assert record.server_lines == ()
    assert _snippets(record.client_lines) == ["inserted", "extra"]
    assert _numbers(record.client_lines) == [3, 4]
    assert _snippets(record.context_before) == ["a", "b"]
    assert _snippets(record.context_after) == ["c"]
    assert _numbers(record.context_after) == [3]


def test_group_pure_removal_advances_cursor_for_later_records() -> None:
    server = "a\ngone1\ngone2\nb\nc\nd\nold\ne"
    client = "a\nb\nc\nd\nnew\ne"

    records = _group(server, client)

    assert len(records) == 2
    first, second = records
    assert _numbers(first.server_lines) == [2, 3]
    assert first.client_lines == ()
    assert _snippets(first.context_after) == ["b", "c"]
    assert _numbers(first.context_after) == [4, 5]
    assert _numbers(second.server_lines) == [7]
    assert _numbers(second.client_lines) == [7]
    assert _snippets(second.context_before) == ["c", "d"]
    assert _numbers(second.context_before) == [5, 6]


def test_group_records_are_in_document_order() -> None:
    server = "x1\nkeep\nkeep2\nkeep3\nx2"
    client = "y1\nkeep\nkeep2\nkeep3\ny2"

    records = _group(server, client)

    assert [_snippets(record.server_lines) for record in records] == [["x1"], ["x2"]]


def test_group_no_changes_yields_no_records() -> None:
    assert _group("a\nb", "a\nb") == []


def test_group_entirely_different_documents() -> None:
    records = _group("a\nb", "c\nd\ne")

    assert len(records) == 1
    assert _snippets(records[0].server_lines) == ["a", "b"]
    assert _snippets(records[0].client_lines) == ["c", "d", "e"]
    assert _numbers(records[0].client_lines) == [1, 2, 3]


def test_group_empty_server_document() -> None:
    records = _group("", "<html></html>")

    assert len(records) == 1
    assert records[0].context_before == ()
    assert _numbers(records[0].client_lines) == [1]


def test_group_keeps_blank_lines_inside_chunks() -> None:
    chunks = [
        DiffChunk(kind="unchanged", text="a\n"),
        DiffChunk(kind="removed", text="\nold\n"),
        DiffChunk(kind="unchanged", text="b"),
    ]

    records = group(chunks, ["a", "", "old", "b"])

    assert _snippets(records[0].server_lines) == ["", "old"]
    assert _numbers(records[0].server_lines) == [2, 3]
    assert _numbers(records[0].context_after) == [4]


def test_group_respects_configured_context_bound() -> None:
    server = "\n".join(f"line{i}" for i in range(1, 11))
    client = server.replace("line5", "changed")

    records = _group(server, client, context_lines=1)

    assert _snippets(records[0].context_before) == ["line4"]
    assert _snippets(records[0].context_after) == ["line6"]


def test_group_context_never_exceeds_bound() -> None:
    server = "\n".join(f"s{i}" for i in range(30))
    client = "\n".join(f"s{i}" if i % 4 else f"c{i}" for i in range(30))

    for record in _group(server, client):
        assert len(record.context_before) <= 2
        assert len(record.context_after) <= 2
        assert record.server_lines or record.client_lines


def test_group_truncates_long_lines_but_keeps_length() -> None:
    long_server = "<div>" + "s" * 200 + "</div>"
    long_client = "<div>" + "c" * 200 + "</div>"

    record = _group(f"a\n{long_server}\nb", f"a\n{long_client}\nb")[0]

    server_info = record.server_lines[0]
    assert server_info.length == len(long_server)
    assert server_info.snippet == long_server[:120] + ELLIPSIS
    assert server_info.text is None


def test_group_keep_full_text_records_untruncated_line() -> None:
    long_line = "x" * 130

    record = _group(f"a\n{long_line}", "a\ny", keep_full_text=True)[0]

    assert record.server_lines[0].text == long_line
    assert record.context_before[0].text == "a"


def test_truncate_snippet_boundaries() -> None:
    assert truncate_snippet("a" * 120) == "a" * 120
    assert truncate_snippet("a" * 121) == "a" * 120 + ELLIPSIS
    assert truncate_snippet("abcdef", 3) == "abc" + ELLIPSIS
    assert truncate_snippet("") == ""


def test_group_line_appended_after_unterminated_last_line() -> None:
    records = _group("a\n<root>", "a\n<root>\n<script>")

    assert len(records) == 1
    assert records[0].server_lines == ()
    assert _snippets(records[0].client_lines) == ["<script>"]
    assert _numbers(records[0].client_lines) == [3]
    assert _snippets(records[0].context_before) == ["a", "<root>"]
    assert records[0].context_after == ()


def test_group_line_removed_after_unterminated_client_line() -> None:
    records = _group("a\n<root>\n<script>", "a\n<root>")

    assert len(records) == 1
    assert _snippets(records[0].server_lines) == ["<script>"]
    assert _numbers(records[0].server_lines) == [3]
    assert records[0].client_lines == ()


def test_group_ignores_line_break_style_differences() -> None:
    assert _group("a\r\nb\r\nc", "a\nb\nc") == []
