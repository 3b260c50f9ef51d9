"""Protocol Scanner - Document discovery and metadata extraction

Usage:
    from protocols_mcp.scanner import ProtocolScanner

    scanner = ProtocolScanner(protocols_root="/path/to/protocols")
    protocols = scanner.scan()

    debug = scanner.get_by_name("debug_protocol")
    same = scanner.get_by_trigger("deepdive")
"""

from .metadata_extractor import (
    FrontmatterResult,
    FrontmatterStatus,
    extract_metadata,
    parse_frontmatter,
)
from .protocol_scanner import ProtocolScanner

__all__ = [
    "FrontmatterResult",
    "FrontmatterStatus",
    "ProtocolScanner",
    "extract_metadata",
    "parse_frontmatter",
]
