"""Renders an AggregatedDocument through a Jinja template.

Templates see two variables:
- `system`: the system display name
- `types`: category name -> list of ScopeGroup (scope_name, entries)

and two helpers:
- `arr(*values)`: build a list
- `dict(*pairs)`: build a mapping from interleaved keys and values. A key
  may be a list of strings, which is treated as a path into nested
  mappings: dict(arr("a", "b"), 1, "c", 2) == {"a": {"b": 1}, "c": 2}
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, TemplateError

from changelog_collector.errors import InvalidMappingArity, InvalidMappingKey, RenderError
from changelog_collector.schemas import AggregatedDocument

DEFAULT_TEMPLATE = Path(__file__).with_name("templates") / "changelog-markdown.md.j2"


def make_list(*values: Any) -> list[Any]:
    return list(values)


def _key_path(key: Any) -> list[str]:
    if isinstance(key, str):
        return [key]
    if (
        isinstance(key, Sequence)
        and key
        and all(isinstance(part, str) for part in key)
    ):
        return list(key)
    raise InvalidMappingKey(
        f"invalid dictionary key {key!r}: expected a string or a list of strings"
    )


def make_dict(*values: Any) -> dict[str, Any]:
    """Build a (possibly nested) mapping from interleaved keys and values.

    Raises:
        InvalidMappingArity: If an odd number of arguments is given
        InvalidMappingKey: If a key is not a string or a non-empty list of
            strings, or if a key path runs through a non-mapping value
    """
    if len(values) % 2 != 0:
        raise InvalidMappingArity(
            f"invalid dictionary call: expected key/value pairs, got {len(values)} arguments"
        )

    root: dict[str, Any] = {}
    for key, value in zip(values[::2], values[1::2]):
        *parents, leaf = _key_path(key)
        node = root
        for part in parents:
            child = node.setdefault(part, {})
            if not isinstance(child, dict):
                raise InvalidMappingKey(
                    f"invalid dictionary key {key!r}: {part!r} is not a mapping"
                )
            node = child
        node[leaf] = value
    return root


TEMPLATE_GLOBALS: dict[str, Any] = {
    "arr": make_list,
    "dict": make_dict,
}


def create_environment(template_dir: Path) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.globals.update(TEMPLATE_GLOBALS)
    return env


def render_document(
    document: AggregatedDocument,
    template_path: str | Path | None = None,
) -> str:
    """Render the changelog text.

    Args:
        document: The aggregated fragments
        template_path: Jinja template file; the packaged Markdown template
                       is used when omitted

    Returns:
        The rendered document

    Raises:
        RenderError: If the template cannot be loaded or rendered
    """
    path = Path(template_path) if template_path else DEFAULT_TEMPLATE
    env = create_environment(path.parent)
    try:
        template = env.get_template(path.name)
        return template.render(system=document.system, types=document.types)
    except TemplateError as exc:
        raise RenderError(f"failed to render template {path}: {exc}") from exc
