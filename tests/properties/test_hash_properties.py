"""Property-based tests for content hashing.

Verifies:
- Determinism: the same tree always yields the same ArtifactId.
- Creation order independence: write order never affects the digest.
- Sensitivity: changing any single file's content changes the digest.
- Framing: two different trees never produce the same digest.
"""
from __future__ import annotations

import tempfile
from pathlib import Path

from hypothesis import given, settings
from hypothesis import strategies as st

from trustchain.core.artifacts.hasher import hash_path

# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

names = st.text(
    alphabet="abcdefghijklmnopqrstuvwxyz0123456789-_",
    min_size=1,
    max_size=8,
)
trees = st.dictionaries(names, st.binary(max_size=64), min_size=1, max_size=6)


def _write(root: Path, files: dict[str, bytes], order: list[str]) -> Path:
    root.mkdir()
    for name in order:
        (root / name).write_bytes(files[name])
    return root


class TestHashDeterminism:
    """The digest is a function of the tree's names and contents only."""

    @settings(max_examples=40, deadline=None)
    @given(files=trees)
    def test_same_tree_same_digest(self, files: dict[str, bytes]) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            first = _write(Path(tmp) / "a", files, sorted(files))
            second = _write(Path(tmp) / "b", files, sorted(files, reverse=True))
            assert hash_path(first) == hash_path(second)

    @settings(max_examples=40, deadline=None)
    @given(files=trees, data=st.data())
    def test_content_change_changes_digest(self, files: dict[str, bytes], data: st.DataObject) -> None:
        victim = data.draw(st.sampled_from(sorted(files)))
        changed = dict(files)
        changed[victim] = files[victim] + b"\x00"
        with tempfile.TemporaryDirectory() as tmp:
            before = _write(Path(tmp) / "a", files, list(files))
            after = _write(Path(tmp) / "b", changed, list(changed))
            assert hash_path(before) != hash_path(after)


class TestHashFraming:
    """Different trees never share a digest."""

    @settings(max_examples=40, deadline=None)
    @given(files=trees, other=trees)
    def test_distinct_trees_distinct_digests(
        self, files: dict[str, bytes], other: dict[str, bytes]
    ) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            first = _write(Path(tmp) / "a", files, list(files))
            second = _write(Path(tmp) / "b", other, list(other))
            assert (hash_path(first) == hash_path(second)) == (files == other)
