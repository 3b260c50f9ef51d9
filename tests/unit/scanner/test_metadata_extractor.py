"""Unit tests for protocol metadata extraction.

Tests front matter parsing, the inference fallbacks (triggers, category,
purpose, tags, platform) and how the two are merged.
"""

import logging

from protocols_mcp.models import DEFAULT_CATEGORY, DEFAULT_DIFFICULTY, DEFAULT_VERSION
from protocols_mcp.scanner.metadata_extractor import (
    ALL_STACKS,
    FRONTEND_STACKS,
    FrontmatterStatus,
    extract_metadata,
    extract_purpose,
    extract_triggers,
    infer_category,
    infer_platform_tags,
    infer_stack_specific,
    infer_tags,
    parse_frontmatter,
    strip_extension,
)

VALID_FRONTMATTER_DOC = """---
id: security_audit_protocol
version: 2.1.0
triggers: [secaudit, VULNSCAN]
category: Security
tags: [security, owasp]
difficulty: advanced
timeEstimate: 2-4 hours
prerequisites: [codebase_indexing_protocol]
worksWellWith: [code_review_protocol]
platformTags: [backend]
stackSpecific:
  python: true
  node: false
purpose: Find vulnerabilities before attackers do.
---

# Security Audit Protocol

Scan the codebase for OWASP Top 10 issues.
"""


class TestStripExtension:
    """Tests for strip_extension."""

    def test_strips_md(self):
        """Removes a trailing .md."""
        assert strip_extension("debug_protocol.md") == "debug_protocol"

    def test_strips_only_one_extension(self):
        """Only one trailing .md is removed."""
        assert strip_extension("notes.md.md") == "notes.md"

    def test_other_extensions_unchanged(self):
        """Names without .md are returned as-is."""
        assert strip_extension("notes.txt") == "notes.txt"


class TestParseFrontmatter:
    """Tests for parse_frontmatter."""

    def test_absent_when_no_block(self):
        """Documents without a leading --- block report ABSENT."""
        content = "# Title\n\nBody text\n"

        result = parse_frontmatter(content)

        assert result.status is FrontmatterStatus.ABSENT
        assert result.body == content
        assert result.data == {}

    def test_parsed_splits_body(self):
        """A valid block is parsed and removed from the body."""
        result = parse_frontmatter("---\nid: x\ntriggers: [A]\n---\n# Title\n")

        assert result.status is FrontmatterStatus.PARSED
        assert result.data == {"id": "x", "triggers": ["A"]}
        assert result.body == "# Title\n"

    def test_empty_block_parses_to_empty_mapping(self):
        """An empty block is PARSED with no data."""
        result = parse_frontmatter("---\n---\n# Title\n")

        assert result.status is FrontmatterStatus.PARSED
        assert result.data == {}
        assert result.body == "# Title\n"

    def test_crlf_line_endings(self):
        """Blocks written with CRLF line endings are recognized."""
        content = "---\r\nid: x\r\nversion: 1.0.0\r\n---\r\n# Title\r\n"

        result = parse_frontmatter(content)

        assert result.status is FrontmatterStatus.PARSED
        assert result.data == {"id": "x", "version": "1.0.0"}
        assert result.body.startswith("# Title")

    def test_invalid_yaml_is_malformed(self):
        """Unparseable YAML reports MALFORMED and keeps the whole content as body."""
        content = "---\ntriggers: [UNCLOSED\n---\n# Title\n"

        result = parse_frontmatter(content)

        assert result.status is FrontmatterStatus.MALFORMED
        assert result.body == content
        assert result.error

    def test_non_mapping_is_malformed(self):
        """A block that is not a mapping reports MALFORMED."""
        result = parse_frontmatter("---\n- one\n- two\n---\n# Title\n")

        assert result.status is FrontmatterStatus.MALFORMED
        assert "list" in result.error

    def test_block_must_start_document(self):
        """A --- block later in the document is not front matter."""
        content = "# Title\n\n---\nid: x\n---\n"

        result = parse_frontmatter(content)

        assert result.status is FrontmatterStatus.ABSENT


class TestExtractMetadata:
    """Tests for extract_metadata."""

    def test_frontmatter_fields_win(self):
        """Front matter values are used verbatim where present."""
        meta = extract_metadata("security_audit_protocol.md", VALID_FRONTMATTER_DOC)

        assert meta.id == "security_audit_protocol"
        assert meta.name == "security_audit_protocol"
        assert meta.file_name == "security_audit_protocol.md"
        assert meta.title == "Security Audit Protocol"
        assert meta.triggers == ["SECAUDIT", "VULNSCAN"]
        assert meta.category == "Security"
        assert meta.tags == ["security", "owasp"]
        assert meta.difficulty == "advanced"
        assert meta.time_estimate == "2-4 hours"
        assert meta.version == "2.1.0"
        assert meta.prerequisites == ["codebase_indexing_protocol"]
        assert meta.works_well_with == ["code_review_protocol"]
        assert meta.platform_tags == ["backend"]
        assert meta.stack_specific == {"python": True, "node": False}
        assert meta.purpose == "Find vulnerabilities before attackers do."
        assert meta.has_frontmatter is True

    def test_inference_without_frontmatter(self):
        """Every field is inferred when there is no front matter."""
        content = (
            "# Debug Protocol\n\n"
            "Find bugs with the scientific method.\n"
            "Never guess.\n\n"
            "Trigger: DEEPDIVE\n"
        )

        meta = extract_metadata("debug_protocol.md", content)

        assert meta.id == "debug_protocol"
        assert meta.title == "Debug Protocol"
        assert meta.triggers == ["DEEPDIVE"]
        assert meta.category == "Debugging"
        assert meta.purpose == "Find bugs with the scientific method. Never guess."
        assert meta.difficulty == DEFAULT_DIFFICULTY
        assert meta.version == DEFAULT_VERSION
        assert meta.time_estimate is None
        assert meta.has_frontmatter is False
        assert meta.file_path == "BRAIN/"

    def test_malformed_frontmatter_falls_back(self, caplog):
        """Malformed front matter is logged and inference takes over."""
        content = "---\ntriggers: [UNCLOSED\n---\n\n# Debug Protocol\n\nBody.\n"

        with caplog.at_level(logging.WARNING):
            meta = extract_metadata("debug_protocol.md", content)

        assert meta.has_frontmatter is False
        assert meta.title == "Debug Protocol"
        assert meta.triggers == ["DEEPDIVE"]
        assert meta.category == "Debugging"
        assert "Invalid front matter in debug_protocol.md" in caplog.text

    def test_partial_frontmatter_merges_with_inference(self):
        """Fields missing from the block are inferred; the record is not schema-valid."""
        content = "---\ntriggers: [deepdive]\n---\n# Debug Protocol\n\nBody.\n"

        meta = extract_metadata("debug_protocol.md", content)

        assert meta.triggers == ["DEEPDIVE"]
        assert meta.category == "Debugging"
        assert meta.version == DEFAULT_VERSION
        assert meta.has_frontmatter is False

    def test_invalid_difficulty_uses_default(self):
        """Difficulty outside the allowed set falls back to the default."""
        content = "---\ndifficulty: impossible\n---\n# Title\n"

        meta = extract_metadata("x.md", content)

        assert meta.difficulty == DEFAULT_DIFFICULTY

    def test_title_falls_back_to_name(self):
        """Documents without an H1 use the file name as title."""
        meta = extract_metadata("random_notes.md", "Just text.\n")

        assert meta.title == "random_notes"
        assert meta.category == DEFAULT_CATEGORY
        assert meta.purpose == ""

    def test_purpose_truncated(self):
        """Purpose is capped at 200 characters."""
        content = "# Title\n\n" + "word " * 100 + "\n"

        meta = extract_metadata("x.md", content)

        assert len(meta.purpose) == 200

    def test_frontmatter_purpose_truncated(self):
        """Purpose from front matter is capped as well."""
        content = f"---\npurpose: {'a' * 300}\n---\n# Title\n"

        meta = extract_metadata("x.md", content)

        assert meta.purpose == "a" * 200

    def test_custom_file_path(self):
        """file_path is recorded as given."""
        meta = extract_metadata("x.md", "# X\n", file_path="PROTOCOLS/")

        assert meta.file_path == "PROTOCOLS/"

    def test_never_raises_on_odd_input(self):
        """Empty content still produces a record."""
        meta = extract_metadata(".md", "")

        assert meta.name == ""
        assert meta.triggers == []


class TestExtractTriggers:
    """Tests for extract_triggers."""

    def test_trigger_and_command_labels(self):
        """Trigger: and Command: labels are collected in order."""
        content = "Trigger: FOO\nCommand: 'BAR'\n"

        assert extract_triggers(content) == ["FOO", "BAR"]

    def test_labels_case_insensitive(self):
        """Labels and values are matched case-insensitively and uppercased."""
        assert extract_triggers('trigger: "baz"') == ["BAZ"]

    def test_known_trigger_from_title(self):
        """Titles naming a known protocol add its triggers."""
        assert extract_triggers("", "Debug Protocol") == ["DEEPDIVE"]

    def test_known_trigger_with_multiple_values(self):
        """All triggers of a known protocol are added."""
        assert extract_triggers("", "MDAP Protocol") == ["MDAP", "MILLIONSTEP"]

    def test_deduplicates(self):
        """Triggers found by both label and title appear once."""
        assert extract_triggers("Trigger: DEEPDIVE", "Debug Protocol") == ["DEEPDIVE"]

    def test_no_triggers(self):
        """Documents without labels or known titles have none."""
        assert extract_triggers("plain text", "Something Else") == []

    def test_multi_word_key_needs_joined_title(self):
        """Title words keep their spaces, so multi-word keys do not match them."""
        assert extract_triggers("", "ARIA Accessibility Protocol") == ["A11YCHECK"]
        assert extract_triggers("", "Error Fix Protocol") == []
        assert extract_triggers("", "Code Review Protocol") == []

    def test_title_punctuation_removed(self):
        """Punctuation in the title is dropped before lookup."""
        assert extract_triggers("", "Debug-Protocol!") == ["DEEPDIVE"]


class TestInferCategory:
    """Tests for infer_category."""

    def test_first_rule_wins(self):
        """code_review is checked before any later rule."""
        assert infer_category("code_review_protocol") == "Quality"

    def test_case_insensitive(self):
        """Matching uses the lowercase name."""
        assert infer_category("MASTER_PROTOCOL") == "Core"

    def test_known_categories(self):
        """Common protocol names map to their categories."""
        assert infer_category("security_audit_protocol") == "Security"
        assert infer_category("git_workflow_protocol") == "Version Control"
        assert infer_category("bigpappa_protocol_reviewANDfixes") == "Audit"

    def test_default_category(self):
        """Unmatched names fall back to General."""
        assert infer_category("random_notes") == DEFAULT_CATEGORY


class TestExtractPurpose:
    """Tests for extract_purpose."""

    def test_first_two_prose_lines(self):
        """The first two non-heading lines after the title are joined."""
        content = "# Title\n\nLine one.\n\n## Section\nLine two.\nLine three.\n"

        assert extract_purpose(content) == "Line one. Line two."

    def test_skips_rules(self):
        """Horizontal rules are not prose."""
        content = "# Title\n---\nActual purpose.\n"

        assert extract_purpose(content) == "Actual purpose."

    def test_requires_title(self):
        """Without an H1 there is no purpose."""
        assert extract_purpose("Text without a title.\n") == ""


class TestInferTags:
    """Tests for infer_tags."""

    def test_tags_from_name(self):
        """Name keywords add their tag sets."""
        assert infer_tags("debug_protocol") == ["debugging", "troubleshooting"]

    def test_tags_deduplicated(self):
        """Shared tags appear once, in first-seen order."""
        assert infer_tags("debug_error_protocol") == [
            "debugging",
            "troubleshooting",
            "error-handling",
        ]

    def test_tags_from_title(self):
        """The title is searched as well as the name."""
        assert "best-practices" in infer_tags("guide", "Best Practices Guide")


class TestInferPlatform:
    """Tests for infer_platform_tags and infer_stack_specific."""

    def test_frontend_only(self):
        """Frontend signals alone give a single frontend tag."""
        assert infer_platform_tags("aria_accessibility_protocol") == ["frontend"]

    def test_backend_only(self):
        """Backend signals alone give a single backend tag."""
        assert infer_platform_tags("api_design_protocol") == ["backend"]

    def test_no_signal_is_fullstack(self):
        """Names with no platform signal apply everywhere."""
        assert infer_platform_tags("debug_protocol") == ["fullstack"]

    def test_both_signals_add_fullstack(self):
        """Names with both signals are also fullstack."""
        assert infer_platform_tags("frontend_api_protocol") == [
            "frontend",
            "backend",
            "fullstack",
        ]

    def test_frontend_stacks(self):
        """Frontend-only documents apply to frontend stacks."""
        assert infer_stack_specific("aria_accessibility_protocol") == dict(
            FRONTEND_STACKS
        )

    def test_all_stacks(self):
        """Other documents apply to every stack."""
        assert infer_stack_specific("debug_protocol") == dict(ALL_STACKS)
