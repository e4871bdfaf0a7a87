"""Line-granularity diff between normalized server and client markup."""

from __future__ import annotations

from collections.abc import Sequence

from core.diag.models import ChunkKind, DiffChunk


def diff_lines(before: str, after: str) -> list[DiffChunk]:
    """Build an ordered edit script of unchanged/removed/added chunks.

    Rules:
    - lines are compared without their line breaks; the kept lines form a
      longest common subsequence of both inputs (Myers shortest edit script)
    - each changed gap is framed as its removed chunk, then its added chunk
    - joining unchanged+removed texts gives back `before` and unchanged+added
      texts give back `after`
    - when matched lines differ only in their break (e.g. the last line of one
      side has none), the unchanged chunk carries the bare line and each
      side's leftover break opens that side's next changed chunk
    """

    before_lines = before.splitlines(keepends=True)
    after_lines = after.splitlines(keepends=True)
    before_keys = before.splitlines()
    after_keys = after.splitlines()

    chunks: list[DiffChunk] = []
    owed_before = owed_after = ""
    i = j = 0
    sentinel = (len(before_lines), len(after_lines))
    for x, y in [*_common_lines(before_keys, after_keys), sentinel]:
        _append(chunks, "removed", owed_before + "".join(before_lines[i:x]))
        _append(chunks, "added", owed_after + "".join(after_lines[j:y]))
        owed_before = owed_after = ""
        if (x, y) == sentinel:
            break

        server_line, client_line = before_lines[x], after_lines[y]
        if server_line == client_line:
            _append(chunks, "unchanged", server_line)
        else:
            bare = before_keys[x]
            _append(chunks, "unchanged", bare)
            owed_before = server_line[len(bare) :]
            owed_after = client_line[len(bare) :]
        i, j = x + 1, y + 1
    return chunks


def _common_lines(before: Sequence[str], after: Sequence[str]) -> list[tuple[int, int]]:
    """Index pairs of a longest common subsequence, in order."""

    prefix = 0
    limit = min(len(before), len(after))
    while prefix < limit and before[prefix] == after[prefix]:
        prefix += 1
    suffix = 0
    while (
        suffix < limit - prefix
        and before[len(before) - 1 - suffix] == after[len(after) - 1 - suffix]
    ):
        suffix += 1

    middle = _myers(
        before[prefix : len(before) - suffix],
        after[prefix : len(after) - suffix],
    )
    pairs = [(index, index) for index in range(prefix)]
    pairs.extend((x + prefix, y + prefix) for x, y in middle)
    pairs.extend(
        (len(before) - suffix + offset, len(after) - suffix + offset) for offset in range(suffix)
    )
    return pairs


def _myers(before: Sequence[str], after: Sequence[str]) -> list[tuple[int, int]]:
    n, m = len(before), len(after)
    # frontier[k]: furthest x reached on diagonal k = x - y
    frontier: dict[int, int] = {1: 0}
    trace: list[dict[int, int]] = []
    for depth in range(n + m + 1):
        trace.append(dict(frontier))
        for k in range(-depth, depth + 1, 2):
            if k == -depth or (k != depth and frontier[k - 1] < frontier[k + 1]):
                x = frontier[k + 1]
            else:
                x = frontier[k - 1] + 1
            y = x - k
            while x < n and y < m and before[x] == after[y]:
                x += 1
                y += 1
            frontier[k] = x
            if x >= n and y >= m:
                return _backtrack(trace, n, m)
    return []


def _backtrack(trace: list[dict[int, int]], n: int, m: int) -> list[tuple[int, int]]:
    pairs: list[tuple[int, int]] = []
    x, y = n, m
    for depth in range(len(trace) - 1, -1, -1):
        frontier = trace[depth]
        k = x - y
        if k == -depth or (k != depth and frontier[k - 1] < frontier[k + 1]):
            prev_k = k + 1
        else:
            prev_k = k - 1
        prev_x = frontier[prev_k]
        prev_y = prev_x - prev_k
        while x > prev_x and y > prev_y:
            x -= 1
            y -= 1
            pairs.append((x, y))
        x, y = prev_x, prev_y
    pairs.reverse()
    return pairs


def _append(chunks: list[DiffChunk], kind: ChunkKind, text: str) -> None:
    if not text:
        return
    if chunks and chunks[-1].kind == kind:
        chunks[-1] = DiffChunk(kind=kind, text=chunks[-1].text + text)
        return
    chunks.append(DiffChunk(kind=kind, text=text))
