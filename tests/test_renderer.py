"""Tests for the renderer and its template helpers.

Run with: pytest tests/test_renderer.py -v
"""

from __future__ import annotations

from pathlib import Path

import pytest

from changelog_collector.errors import (
    InvalidMappingArity,
    InvalidMappingKey,
    RenderError,
)
from changelog_collector.renderer import make_dict, make_list, render_document
from changelog_collector.schemas import (
    AggregatedDocument,
    EnrichedFragment,
    ResolvedIssue,
    ResolvedTicket,
    ScopeGroup,
)

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def document() -> AggregatedDocument:
    fix = EnrichedFragment(
        message="Fixed a crash in the router.\n",
        type="bugfix",
        scope="Core",
        githubs=[12],
        jiras=["KAG-1"],
        parsed_githubs=[
            ResolvedIssue(name="#12", link="https://github.com/Kong/kong/issues/12")
        ],
        parsed_jiras=[
            ResolvedTicket(id="KAG-1", link="https://konghq.atlassian.net/browse/KAG-1")
        ],
    )
    feature = EnrichedFragment(message="Added a plugin.", type="feature", scope="Plugin")
    custom = EnrichedFragment(message="Tidied up.", type="chore", scope="Default")
    return AggregatedDocument(
        system="Kong",
        types={
            "bugfix": [ScopeGroup(scope_name="Core", entries=[fix])],
            "chore": [ScopeGroup(scope_name="Default", entries=[custom])],
            "feature": [ScopeGroup(scope_name="Plugin", entries=[feature])],
        },
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestMakeList:
    def test_no_values(self) -> None:
        assert make_list() == []

    def test_keeps_order(self) -> None:
        assert make_list(3, "a", None) == [3, "a", None]


class TestMakeDict:
    def test_nested_path_keys(self) -> None:
        assert make_dict(["a", "b"], 1, "c", 2) == {"a": {"b": 1}, "c": 2}

    def test_empty(self) -> None:
        assert make_dict() == {}

    def test_paths_share_parents(self) -> None:
        result = make_dict(["a", "b"], 1, ["a", "c"], 2, ("x", "y", "z"), 3)
        assert result == {"a": {"b": 1, "c": 2}, "x": {"y": {"z": 3}}}

    def test_later_key_overwrites(self) -> None:
        assert make_dict("a", 1, "a", 2) == {"a": 2}

    def test_odd_arity(self) -> None:
        with pytest.raises(InvalidMappingArity):
            make_dict("a", 1, "b")

    @pytest.mark.parametrize("key", [1, None, ["a", 2], [], {"a": 1}])
    def test_invalid_key(self, key) -> None:
        with pytest.raises(InvalidMappingKey):
            make_dict(key, "value")

    def test_path_through_scalar(self) -> None:
        with pytest.raises(InvalidMappingKey):
            make_dict("a", 1, ["a", "b"], 2)

    def test_errors_are_render_errors(self) -> None:
        with pytest.raises(RenderError):
            make_dict("a")


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestRenderDocument:
    def test_default_template(self, document: AggregatedDocument) -> None:
        text = render_document(document)

        assert text.startswith("# Kong\n")
        assert "## Fixes" in text
        assert "## Features" in text
        assert "## chore" in text
        assert "### Core" in text
        assert "- Fixed a crash in the router." in text
        assert "[#12](https://github.com/Kong/kong/issues/12)" in text
        assert "[KAG-1](https://konghq.atlassian.net/browse/KAG-1)" in text

    def test_sections_follow_document_order(self, document: AggregatedDocument) -> None:
        text = render_document(document)
        assert text.index("## Fixes") < text.index("## chore") < text.index("## Features")

    def test_repeatable(self, document: AggregatedDocument) -> None:
        assert render_document(document) == render_document(document)

    def test_custom_template_with_helpers(
        self, document: AggregatedDocument, tmp_path: Path
    ) -> None:
        template = tmp_path / "custom.j2"
        template.write_text(
            '{% set m = dict(arr("t", "n"), system) %}'
            "{{ m.t.n }}:{% for c in types %} {{ c }}{% endfor %}"
        )
        assert render_document(document, template) == "Kong: bugfix chore feature"

    def test_helper_misuse_surfaces(
        self, document: AggregatedDocument, tmp_path: Path
    ) -> None:
        template = tmp_path / "bad.j2"
        template.write_text('{{ dict("a") }}')
        with pytest.raises(InvalidMappingArity):
            render_document(document, template)

    def test_missing_template(self, document: AggregatedDocument, tmp_path: Path) -> None:
        with pytest.raises(RenderError, match="missing.j2"):
            render_document(document, tmp_path / "missing.j2")

    def test_template_syntax_error(
        self, document: AggregatedDocument, tmp_path: Path
    ) -> None:
        template = tmp_path / "syntax.j2"
        template.write_text("{% for %}")
        with pytest.raises(RenderError):
            render_document(document, template)
