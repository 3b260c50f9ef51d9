"""Protocol Catalog

Owns the process-wide protocol state: scanned records, their content and
the search index built from them.

State transitions:
    build(): scan (from cache if present) -> read content -> index -> swap
    clear(): drop the scanner cache so the next build() re-reads disk

A build assembles everything off to the side and publishes it with a
single reference assignment, so readers see either the previous snapshot
or the new one.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from .errors import INVALID_PATH, ProtocolError
from .models import ProtocolMetadata
from .scanner import ProtocolScanner
from .search.indexer import ContentIndexer, SearchIndex, content_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogSnapshot:
    """Immutable result of one catalog build."""

    protocols: tuple[ProtocolMetadata, ...]
    index: SearchIndex
    read_errors: int


def resolve_within_root(root: Path, relative_path: str) -> Path:
    """
    Resolve a path under root and verify it stays inside root.

    Traversal (../) and absolute paths that escape the root are rejected
    before anything is opened.

    Args:
        root: Protocols root directory
        relative_path: Path relative to root

    Returns:
        Resolved absolute path

    Raises:
        ProtocolError: INVALID_PATH if the resolved path leaves root
    """
    resolved_root = Path(root).resolve()
    resolved_path = (resolved_root / relative_path).resolve()
    if not resolved_path.is_relative_to(resolved_root):
        raise ProtocolError(
            f"Invalid protocol path: {relative_path}",
            INVALID_PATH,
            {"path": relative_path},
        )
    return resolved_path


class ProtocolCatalog:
    """Scanner, indexer and the current snapshot, built once per process."""

    def __init__(self, scanner: ProtocolScanner, indexer: ContentIndexer | None = None):
        self.scanner = scanner
        self.indexer = indexer or ContentIndexer()
        self._snapshot: CatalogSnapshot | None = None

    @property
    def protocols_root(self) -> Path:
        return self.scanner.protocols_root

    @property
    def snapshot(self) -> CatalogSnapshot | None:
        return self._snapshot

    def protocol_path(self, protocol: ProtocolMetadata) -> Path:
        """Path-checked location of a protocol document."""
        return resolve_within_root(
            self.protocols_root, f"{protocol.file_path}/{protocol.file_name}"
        )

    def read_content(self, protocol: ProtocolMetadata) -> str:
        """
        Read a protocol's raw content after verifying its path.

        Raises:
            ProtocolError: INVALID_PATH if the path escapes the protocols root
            OSError: If the file cannot be read
        """
        return self.protocol_path(protocol).read_text(encoding="utf-8")

    def build(self) -> CatalogSnapshot:
        """
        Scan protocols, read their content and build the search index.

        Unreadable documents are logged and skipped; they are indexed with
        empty content and counted in read_errors.

        Returns:
            The newly published snapshot
        """
        protocols = self.scanner.scan()
        content_map: dict[str, str] = {}
        read_errors = self.scanner.read_errors

        for protocol in protocols:
            try:
                content_map[content_key(protocol)] = self.read_content(protocol)
            except ProtocolError as e:
                logger.warning(f"Skipping protocol with invalid path: {protocol.name} ({e})")
                read_errors += 1
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Failed to read protocol {protocol.file_name}: {e}")
                read_errors += 1

        if read_errors:
            logger.warning(f"{read_errors} protocol(s) could not be read")

        index = self.indexer.build_index(protocols, content_map)
        snapshot = CatalogSnapshot(
            protocols=tuple(protocols), index=index, read_errors=read_errors
        )
        self._snapshot = snapshot
        logger.info(f"Catalog built: {len(protocols)} protocols")
        return snapshot

    def clear(self) -> None:
        """Discard cached records; the current snapshot stays until the next build()."""
        self.scanner.clear_cache()
