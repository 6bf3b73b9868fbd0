"""Loading and validation of language pattern catalogs.

The pattern detector is built from already-parsed definitions. This module
is the collaborator that turns JSON catalog files (bundled with the package
or supplied by the user) into :class:`LanguagePattern` objects.
"""

import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Mapping

from .models import BlockComment, CommentStyle, LanguagePattern

logger = logging.getLogger(__name__)

BUILTIN_PATTERN_PACKAGE = "fence_lang.data.patterns"

_LIST_FIELDS = ("keywords", "patterns", "imports", "builtins", "extensions", "operators")


def _string_tuple(data: Mapping[str, Any], key: str, language: str) -> tuple:
    value = data.get(key, [])
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"Pattern '{language}': '{key}' must be a list of strings")
    return tuple(value)


def parse_pattern(data: Mapping[str, Any]) -> LanguagePattern:
    """
    Build a LanguagePattern from its JSON representation.

    Args:
        data: Parsed JSON object of one language definition

    Returns:
        LanguagePattern instance

    Raises:
        ValueError: If the structure is invalid
    """
    if not isinstance(data, Mapping):
        raise ValueError("Pattern definition must be an object")

    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValueError("Pattern definition requires a non-empty 'name'")
    name = name.strip().lower()

    lists = {key: _string_tuple(data, key, name) for key in _LIST_FIELDS}

    comments = data.get("comments", {})
    if not isinstance(comments, Mapping):
        raise ValueError(f"Pattern '{name}': 'comments' must be an object")
    line_tokens = _string_tuple(comments, "line", name)

    blocks = []
    for block in comments.get("block", []):
        if (
            not isinstance(block, Mapping)
            or not isinstance(block.get("start"), str)
            or not isinstance(block.get("end"), str)
            or not block["start"]
            or not block["end"]
        ):
            raise ValueError(f"Pattern '{name}': block comments need 'start' and 'end' strings")
        blocks.append(BlockComment(start=block["start"], end=block["end"]))

    return LanguagePattern(
        name=name,
        comments=CommentStyle(line=tuple(t for t in line_tokens if t), block=tuple(blocks)),
        **lists,
    )


def _parse_file_content(content: str, source: str) -> List[LanguagePattern]:
    data = json.loads(content)
    entries = data if isinstance(data, list) else [data]
    patterns = []
    for entry in entries:
        try:
            patterns.append(parse_pattern(entry))
        except ValueError as e:
            logger.warning(f"Invalid pattern structure in {source}: {e}")
    return patterns


def load_builtin_patterns() -> Dict[str, LanguagePattern]:
    """
    Load the pattern catalog bundled with the package.

    Returns:
        Mapping of language name to LanguagePattern, alphabetically ordered
    """
    patterns: Dict[str, LanguagePattern] = {}
    package_files = resources.files(BUILTIN_PATTERN_PACKAGE)

    for entry in sorted(package_files.iterdir(), key=lambda item: item.name):
        if not entry.name.endswith(".json"):
            continue
        try:
            for pattern in _parse_file_content(entry.read_text(encoding="utf-8"), entry.name):
                patterns[pattern.name] = pattern
                logger.debug(f"Loaded pattern: {pattern.name}")
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse bundled pattern file {entry.name}: {e}")

    logger.info(f"Loaded {len(patterns)} bundled language patterns")
    return patterns


def load_patterns_from_directory(directory: Path) -> Dict[str, LanguagePattern]:
    """
    Load every ``*.json`` pattern file in a directory.

    A file may contain a single definition object or a list of them.
    Invalid files and entries are logged and skipped.

    Args:
        directory: Directory containing pattern files

    Returns:
        Mapping of language name to LanguagePattern, alphabetically ordered

    Raises:
        FileNotFoundError: If the directory does not exist
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Pattern directory not found: {directory}")

    patterns: Dict[str, LanguagePattern] = {}
    for path in sorted(directory.glob("*.json")):
        try:
            for pattern in _parse_file_content(path.read_text(encoding="utf-8"), str(path)):
                patterns[pattern.name] = pattern
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load pattern file {path}: {e}")

    logger.info(f"Loaded {len(patterns)} language patterns from {directory}")
    return patterns
