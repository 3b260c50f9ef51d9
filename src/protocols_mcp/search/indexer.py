"""Content Indexer

Builds the in-memory search index from scanned protocol records and
their raw content. An index is never edited after construction; building
again produces a new SearchIndex object.
"""

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from ..errors import INDEX_ERROR, ProtocolError
from ..models import ProtocolMetadata

logger = logging.getLogger(__name__)

UNCATEGORIZED = "uncategorized"
MIN_TOKEN_LENGTH = 3

_NON_WORD = re.compile(r"[^\w\s]")


@dataclass(frozen=True)
class SearchableProtocol:
    """Protocol record plus the content used for full-text matching."""

    metadata: ProtocolMetadata
    content: str
    tokens: tuple[str, ...]


@dataclass(frozen=True)
class SearchIndex:
    """Read-only protocol index with trigger and category reverse maps."""

    protocols: Mapping[str, SearchableProtocol]
    trigger_map: Mapping[str, tuple[str, ...]]
    category_map: Mapping[str, tuple[str, ...]]

    def __len__(self) -> int:
        return len(self.protocols)


def content_key(protocol: ProtocolMetadata) -> str:
    """Key of a protocol's content in the content map."""
    return f"{protocol.file_path}/{protocol.file_name}"


def tokenize(content: str | None) -> list[str]:
    """
    Tokenize content for searching.

    Lowercases, turns punctuation into spaces, splits on whitespace and
    drops tokens shorter than three characters.
    """
    cleaned = _NON_WORD.sub(" ", (content or "").lower())
    return [token for token in cleaned.split() if len(token) >= MIN_TOKEN_LENGTH]


class ContentIndexer:
    """Builds and holds the current SearchIndex."""

    def __init__(self):
        self._index: SearchIndex | None = None

    def build_index(
        self, protocols: Iterable[ProtocolMetadata], content_map: Mapping[str, str]
    ) -> SearchIndex:
        """
        Build searchable index from protocols.

        Args:
            protocols: Scanned protocol records
            content_map: Raw content keyed by content_key()

        Returns:
            The new SearchIndex (also kept as the current index)
        """
        entries: dict[str, SearchableProtocol] = {}
        trigger_map: dict[str, list[str]] = {}
        category_map: dict[str, list[str]] = {}

        for protocol in protocols:
            content = content_map.get(content_key(protocol)) or ""
            entries[protocol.name] = SearchableProtocol(
                metadata=protocol,
                content=content,
                tokens=tuple(tokenize(content)),
            )

            for trigger in protocol.triggers or ():
                names = trigger_map.setdefault(trigger, [])
                if protocol.name not in names:
                    names.append(protocol.name)

            names = category_map.setdefault(protocol.category or UNCATEGORIZED, [])
            if protocol.name not in names:
                names.append(protocol.name)

        index = SearchIndex(
            protocols=MappingProxyType(entries),
            trigger_map=MappingProxyType(
                {k: tuple(v) for k, v in trigger_map.items()}
            ),
            category_map=MappingProxyType(
                {k: tuple(v) for k, v in category_map.items()}
            ),
        )
        self._index = index
        logger.info(
            f"Indexed {len(entries)} protocols "
            f"({len(trigger_map)} triggers, {len(category_map)} categories)"
        )
        return index

    def get_index(self) -> SearchIndex | None:
        """Return the last built index, or None if never built."""
        return self._index

    def require_index(self) -> SearchIndex:
        """
        Return the current index.

        Raises:
            ProtocolError: INDEX_ERROR if no index has been built
        """
        if self._index is None:
            raise ProtocolError("Search index not initialized", INDEX_ERROR)
        return self._index
