"""Fragment parser: YAML text -> Fragment."""

from __future__ import annotations

from typing import Any

import yaml
from pydantic import ValidationError

from changelog_collector.config import DEFAULT_SCOPE
from changelog_collector.errors import MalformedFragment
from changelog_collector.schemas import Fragment


def parse_fragment(
    content: str | bytes,
    source: str,
    default_scope: str = DEFAULT_SCOPE,
) -> Fragment:
    """Decode one fragment file.

    Unknown keys are ignored and missing keys take their defaults. An empty
    scope becomes `default_scope`. The category is kept exactly as written.

    Args:
        content: Fragment file contents, as text or raw UTF-8 bytes
        source: Filename of the fragment, used in error messages
        default_scope: Scope for fragments that declare none

    Returns:
        The decoded Fragment

    Raises:
        MalformedFragment: If the bytes are not UTF-8, or the YAML is invalid
            or has the wrong shape
    """
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedFragment(source, f"not valid UTF-8: {exc}") from exc

    try:
        raw: Any = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise MalformedFragment(source, str(exc)) from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise MalformedFragment(
            source, f"expected a mapping at top level, got {type(raw).__name__}"
        )

    try:
        fragment = Fragment.model_validate(raw)
    except ValidationError as exc:
        raise MalformedFragment(source, str(exc)) from exc

    if not fragment.scope:
        fragment = fragment.model_copy(update={"scope": default_scope})
    return fragment
