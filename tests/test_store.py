"""Tests for the fragment store reader.

Run with: pytest tests/test_store.py -v
"""

from __future__ import annotations

from pathlib import Path

import pytest

from changelog_collector.errors import StoreUnavailable
from changelog_collector.store import is_fragment_name, list_fragment_files, read_fragments


class TestIsFragmentName:
    @pytest.mark.parametrize("name", ["a.yml", "a.yaml", "fix.router.yml"])
    def test_accepts_yaml_suffixes(self, name: str) -> None:
        assert is_fragment_name(name)

    @pytest.mark.parametrize("name", ["README.md", "a.yml.bak", "a.json", "yml"])
    def test_rejects_other_names(self, name: str) -> None:
        assert not is_fragment_name(name)


class TestListFragmentFiles:
    def test_filters_and_sorts(self, fragment_dir: Path) -> None:
        for name in ["b.yml", "a.yaml", "notes.md", "c.yml"]:
            (fragment_dir / name).write_text("type: feature\n")
        (fragment_dir / "nested.yml").mkdir()

        names = [p.name for p in list_fragment_files(fragment_dir)]
        assert names == ["a.yaml", "b.yml", "c.yml"]

    def test_empty_directory(self, fragment_dir: Path) -> None:
        assert list_fragment_files(fragment_dir) == []

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(StoreUnavailable, match="cannot list"):
            list_fragment_files(tmp_path / "does-not-exist")

    def test_logs_discovery(self, fragment_dir: Path, log_events: list[dict]) -> None:
        (fragment_dir / "a.yml").write_text("type: feature\n")
        list_fragment_files(fragment_dir)
        assert any(
            e["event"] == "fragments_discovered" and e["count"] == 1 for e in log_events
        )


class TestReadFragments:
    def test_yields_name_and_raw_bytes(self, fragment_dir: Path) -> None:
        (fragment_dir / "b.yml").write_text("type: bugfix\n")
        (fragment_dir / "a.yml").write_text("type: feature\n")

        assert list(read_fragments(fragment_dir)) == [
            ("a.yml", b"type: feature\n"),
            ("b.yml", b"type: bugfix\n"),
        ]

    def test_undecodable_file_is_still_read(self, fragment_dir: Path) -> None:
        (fragment_dir / "bin.yml").write_bytes(b"\xff\xfe\x00bad")
        assert list(read_fragments(fragment_dir)) == [("bin.yml", b"\xff\xfe\x00bad")]
