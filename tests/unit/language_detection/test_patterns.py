"""Unit tests for the pattern catalog loader."""

import json
import re

import pytest

from fence_lang.language_detection import (
    BlockComment,
    load_builtin_patterns,
    load_patterns_from_directory,
    parse_pattern,
)
from fence_lang.language_detection.pattern_detector import REGEX_FLAGS


class TestParsePattern:
    """Test parsing of a single pattern definition."""

    def test_parse_full_definition(self):
        """Test parsing a definition with every field."""
        pattern = parse_pattern(
            {
                "name": "Alpha",
                "keywords": ["foo", "bar"],
                "patterns": ["foo\\("],
                "imports": ["baz"],
                "builtins": ["qux"],
                "extensions": [".al"],
                "operators": ["=>"],
                "comments": {"line": ["#"], "block": [{"start": "/*", "end": "*/"}]},
            }
        )

        assert pattern.name == "alpha"
        assert pattern.keywords == ("foo", "bar")
        assert pattern.comments.line == ("#",)
        assert pattern.comments.block == (BlockComment("/*", "*/"),)
        assert pattern.extensions == (".al",)

    def test_missing_lists_default_to_empty(self):
        """Test that omitted lists become empty tuples."""
        pattern = parse_pattern({"name": "alpha", "keywords": ["foo"]})

        assert pattern.patterns == ()
        assert pattern.imports == ()
        assert pattern.comments.line == ()
        assert pattern.comments.block == ()

    @pytest.mark.parametrize(
        "data",
        [
            [],
            {},
            {"name": ""},
            {"name": "alpha", "keywords": "foo"},
            {"name": "alpha", "keywords": ["foo", 1]},
            {"name": "alpha", "comments": []},
            {"name": "alpha", "comments": {"block": [{"start": "/*"}]}},
        ],
    )
    def test_invalid_structures(self, data):
        """Test that structurally invalid definitions are rejected."""
        with pytest.raises(ValueError):
            parse_pattern(data)


class TestLoadPatterns:
    """Test loading bundled and user catalogs."""

    def test_builtin_catalog(self):
        """Test that the bundled catalog covers the default languages."""
        patterns = load_builtin_patterns()

        for language in ("bash", "cpp", "java", "javascript", "python", "typescript"):
            assert language in patterns
        assert list(patterns) == sorted(patterns)

    def test_builtin_regexes_compile(self):
        """Test that every bundled regex is valid."""
        for pattern in load_builtin_patterns().values():
            for source in pattern.patterns:
                re.compile(source, REGEX_FLAGS)

    def test_directory_with_single_and_list_files(self, temp_dir):
        """Test loading files holding one object or a list of objects."""
        (temp_dir / "alpha.json").write_text(json.dumps({"name": "alpha", "keywords": ["foo"]}))
        (temp_dir / "more.json").write_text(
            json.dumps([{"name": "beta", "keywords": ["bar"]}, {"name": "gamma"}])
        )
        (temp_dir / "notes.txt").write_text("ignored")

        patterns = load_patterns_from_directory(temp_dir)

        assert sorted(patterns) == ["alpha", "beta", "gamma"]

    def test_invalid_entries_are_skipped(self, temp_dir):
        """Test that bad files and entries are skipped, not fatal."""
        (temp_dir / "broken.json").write_text("{not json")
        (temp_dir / "mixed.json").write_text(
            json.dumps([{"name": "alpha"}, {"keywords": ["no name"]}])
        )

        patterns = load_patterns_from_directory(temp_dir)

        assert list(patterns) == ["alpha"]

    def test_missing_directory(self, temp_dir):
        """Test that a missing directory raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_patterns_from_directory(temp_dir / "missing")
