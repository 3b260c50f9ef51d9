"""Shared pytest fixtures for ai-protocols tests.

Provides the fixture protocol corpus (tests/fixtures/protocols/BRAIN) and
ready-built scanner, catalog and tool dispatcher instances on top of it.
"""

import shutil
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from protocols_mcp.catalog import ProtocolCatalog
from protocols_mcp.models import ProtocolMetadata
from protocols_mcp.scanner import ProtocolScanner
from protocols_mcp.tools import ProtocolTools

# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def protocols_root(fixtures_dir: Path) -> Path:
    """Return the fixture protocols root (contains BRAIN/)."""
    return fixtures_dir / "protocols"


@pytest.fixture
def fixture_protocol_names() -> list[str]:
    """Protocol names in the fixture corpus, in scan order."""
    return [
        "MASTER_PROTOCOL",
        "broken_frontmatter_protocol",
        "debug_protocol",
        "error_fix_protocol",
        "test_automation_protocol",
    ]


@pytest.fixture
def protocols_copy(tmp_path: Path, protocols_root: Path) -> Path:
    """Writable copy of the fixture protocols root for tests that modify it."""
    target = tmp_path / "protocols"
    shutil.copytree(protocols_root, target)
    return target


# =============================================================================
# Component Fixtures
# =============================================================================


@pytest.fixture
def scanner(protocols_root: Path) -> ProtocolScanner:
    """Scanner over the fixture corpus."""
    return ProtocolScanner(protocols_root)


@pytest.fixture
def catalog(scanner: ProtocolScanner) -> ProtocolCatalog:
    """Catalog built from the fixture corpus."""
    catalog = ProtocolCatalog(scanner)
    catalog.build()
    return catalog


@pytest.fixture
def tools(catalog: ProtocolCatalog) -> ProtocolTools:
    """Tool dispatcher with no project context."""
    return ProtocolTools(catalog)


@pytest.fixture
def make_protocol() -> Callable[..., ProtocolMetadata]:
    """Factory for ProtocolMetadata records with sensible defaults."""

    def _make(name: str, **overrides: Any) -> ProtocolMetadata:
        fields: dict[str, Any] = {
            "id": name,
            "file_name": f"{name}.md",
            "name": name,
            "title": name.replace("_", " ").title(),
        }
        fields.update(overrides)
        return ProtocolMetadata(**fields)

    return _make
