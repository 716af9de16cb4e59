"""Front-matter stripping for markdown notes.

Recognised blocks sit at the very top of the file:

* ``---`` ... ``---``: YAML, optionally tagged on the opening line
  (``---yaml``, ``---json``, ``---toml``).
* ``+++`` ... ``+++``: TOML.

The block is parsed only to decide whether it is well formed; its values
are discarded.  Malformed blocks leave the text untouched.
"""

from __future__ import annotations

import json
import logging
import tomllib

import yaml

logger = logging.getLogger(__name__)

_YAML_FENCE = "---"
_TOML_FENCE = "+++"
_TAGGED_LANGUAGES = ("yaml", "json", "toml")


def _opening_language(first_line: str) -> tuple[str, str] | None:
    """Return ``(closing_fence, language)`` for an opening line, or None."""
    line = first_line.rstrip()
    if line == _TOML_FENCE:
        return _TOML_FENCE, "toml"
    if line == _YAML_FENCE:
        return _YAML_FENCE, "yaml"
    if line.startswith(_YAML_FENCE):
        tag = line[len(_YAML_FENCE):].strip().lower()
        if tag in _TAGGED_LANGUAGES:
            return _YAML_FENCE, tag
    return None


def _parse_block(block: str, language: str) -> None:
    """Parse *block*, raising on malformed input."""
    if language == "toml":
        tomllib.loads(block)
    elif language == "json":
        json.loads(block or "{}")
    else:
        yaml.safe_load(block)


def strip_front_matter(raw: str) -> str:
    """Remove a leading front-matter block from *raw*.

    Args:
        raw: Full file text.

    Returns:
        The body with surrounding blank lines trimmed when a well-formed
        block was found; otherwise *raw* unchanged.
    """
    text = raw.lstrip("\ufeff")
    lines = text.split("\n")
    opening = _opening_language(lines[0]) if lines else None
    if opening is None:
        return raw

    fence, language = opening
    closing = None
    for idx in range(1, len(lines)):
        if lines[idx].rstrip() == fence:
            closing = idx
            break
    if closing is None:
        return raw

    block = "\n".join(lines[1:closing])
    try:
        _parse_block(block, language)
    except (yaml.YAMLError, tomllib.TOMLDecodeError, ValueError) as e:
        logger.warning("Failed to parse %s front matter: %s", language, e)
        return raw

    body = lines[closing + 1:]
    while body and not body[0].strip():
        body.pop(0)
    while body and not body[-1].strip():
        body.pop()
    return "\n".join(body)
