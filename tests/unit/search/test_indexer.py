"""Unit tests for the content indexer."""

import pytest

from protocols_mcp.errors import INDEX_ERROR, ProtocolError
from protocols_mcp.search.indexer import (
    UNCATEGORIZED,
    ContentIndexer,
    content_key,
    tokenize,
)


class TestTokenize:
    """Tests for tokenize."""

    def test_lowercases_and_strips_punctuation(self):
        """Punctuation splits tokens and everything is lowercased."""
        assert tokenize("Hello, World! Re-run") == ["hello", "world", "run"]

    def test_drops_short_tokens(self):
        """Tokens shorter than three characters are dropped."""
        assert tokenize("a an the fix") == ["the", "fix"]

    def test_underscores_are_word_characters(self):
        """Identifiers with underscores stay whole."""
        assert tokenize("debug_protocol.md") == ["debug_protocol"]

    def test_empty_and_none(self):
        """Empty or missing content gives no tokens."""
        assert tokenize("") == []
        assert tokenize(None) == []


class TestBuildIndex:
    """Tests for ContentIndexer.build_index."""

    def test_indexes_protocols_by_name(self, make_protocol):
        """Each protocol is stored with its content and tokens."""
        debug = make_protocol("debug_protocol", triggers=["DEEPDIVE"])
        content_map = {content_key(debug): "Trace the crash."}

        index = ContentIndexer().build_index([debug], content_map)

        entry = index.protocols["debug_protocol"]
        assert entry.metadata is debug
        assert entry.content == "Trace the crash."
        assert entry.tokens == ("trace", "the", "crash")
        assert len(index) == 1

    def test_missing_content_is_empty(self, make_protocol):
        """Protocols without content are indexed with empty content."""
        index = ContentIndexer().build_index([make_protocol("lonely")], {})

        assert index.protocols["lonely"].content == ""
        assert index.protocols["lonely"].tokens == ()

    def test_trigger_map(self, make_protocol):
        """Every trigger maps to the protocols declaring it."""
        a = make_protocol("a_protocol", triggers=["SHARED", "ONLYA"])
        b = make_protocol("b_protocol", triggers=["SHARED"])

        index = ContentIndexer().build_index([a, b], {})

        assert index.trigger_map["SHARED"] == ("a_protocol", "b_protocol")
        assert index.trigger_map["ONLYA"] == ("a_protocol",)

    def test_category_map(self, make_protocol):
        """Protocols are grouped by category; blank categories are uncategorized."""
        a = make_protocol("a_protocol", category="Testing")
        b = make_protocol("b_protocol", category="Testing")
        c = make_protocol("c_protocol", category="")

        index = ContentIndexer().build_index([a, b, c], {})

        assert index.category_map["Testing"] == ("a_protocol", "b_protocol")
        assert index.category_map[UNCATEGORIZED] == ("c_protocol",)

    def test_index_is_read_only(self, make_protocol):
        """The published maps cannot be modified."""
        index = ContentIndexer().build_index([make_protocol("a")], {})

        with pytest.raises(TypeError):
            index.protocols["b"] = index.protocols["a"]  # type: ignore[index]
        with pytest.raises(TypeError):
            index.category_map["X"] = ()  # type: ignore[index]

    def test_rebuild_creates_new_index(self, make_protocol):
        """Building again replaces the current index without touching the old one."""
        indexer = ContentIndexer()
        first = indexer.build_index([make_protocol("a")], {})

        second = indexer.build_index([make_protocol("a"), make_protocol("b")], {})

        assert first is not second
        assert len(first) == 1
        assert indexer.get_index() is second


class TestRequireIndex:
    """Tests for get_index / require_index."""

    def test_get_index_before_build(self):
        """No index exists before the first build."""
        assert ContentIndexer().get_index() is None

    def test_require_index_before_build_raises(self):
        """require_index() reports INDEX_ERROR before the first build."""
        with pytest.raises(ProtocolError) as exc_info:
            ContentIndexer().require_index()

        assert exc_info.value.code == INDEX_ERROR
        assert exc_info.value.message == "Search index not initialized"
