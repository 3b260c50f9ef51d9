"""Protocol Scanner

Enumerates the BRAIN/ directory, extracts metadata for every protocol
document and caches the resulting list for the lifetime of the process.
"""

import logging
import os
from pathlib import Path

from ..errors import DIRECTORY_NOT_ACCESSIBLE, DIRECTORY_NOT_FOUND, ProtocolDirectoryError
from ..models import ProtocolMetadata
from .metadata_extractor import DOCUMENT_EXTENSION, extract_metadata, strip_extension

logger = logging.getLogger(__name__)

DEFAULT_PROTOCOL_DIRECTORY = "BRAIN"


class ProtocolScanner:
    """Scans the protocol directory and answers name/trigger lookups."""

    def __init__(
        self,
        protocols_root: Path,
        directory: str = DEFAULT_PROTOCOL_DIRECTORY,
        extension: str = DOCUMENT_EXTENSION,
    ):
        """
        Initialize scanner and validate the protocol directory.

        Args:
            protocols_root: Root directory containing the protocol directory
            directory: Name of the protocol directory under the root
            extension: File extension of protocol documents

        Raises:
            ProtocolDirectoryError: If the directory is missing or unreadable
        """
        self.protocols_root = Path(protocols_root)
        self.directory = directory
        self.extension = extension
        self.brain_path = self.protocols_root / directory
        self.read_errors = 0
        self._cache: tuple[ProtocolMetadata, ...] | None = None

        self._validate_brain_path()
        logger.info(f"ProtocolScanner initialized with path: {self.brain_path}")

    @property
    def relative_path(self) -> str:
        """Protocol directory relative to the root, as stored on records."""
        return f"{self.directory}/"

    def _validate_brain_path(self) -> None:
        try:
            is_dir = self.brain_path.is_dir()
            exists = is_dir or self.brain_path.exists()
        except OSError as e:
            raise ProtocolDirectoryError(
                f"{self.directory} directory is not accessible: {self.brain_path} ({e})",
                DIRECTORY_NOT_ACCESSIBLE,
                {"path": str(self.brain_path)},
            ) from e

        if not exists:
            raise ProtocolDirectoryError(
                f"{self.directory} directory not found at: {self.brain_path}",
                DIRECTORY_NOT_FOUND,
                {"path": str(self.brain_path)},
            )
        if not is_dir or not os.access(self.brain_path, os.R_OK | os.X_OK):
            raise ProtocolDirectoryError(
                f"{self.directory} directory is not accessible: {self.brain_path}",
                DIRECTORY_NOT_ACCESSIBLE,
                {"path": str(self.brain_path)},
            )

    def scan(self) -> list[ProtocolMetadata]:
        """
        Scan the protocol directory and extract all protocol metadata.

        The first call reads the disk; later calls return the cached
        records until clear_cache() is called. Files are visited in
        file-name order.

        Returns:
            List of ProtocolMetadata records
        """
        if self._cache is not None:
            return list(self._cache)

        protocols = []
        read_errors = 0

        for file_path in sorted(self.brain_path.iterdir(), key=lambda p: p.name):
            if not file_path.name.endswith(self.extension) or not file_path.is_file():
                continue

            try:
                content = file_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Failed to read protocol {file_path.name}: {e}")
                read_errors += 1
                continue

            protocols.append(
                extract_metadata(file_path.name, content, file_path=self.relative_path)
            )
            logger.debug(f"Loaded protocol: {file_path.name}")

        if read_errors:
            logger.warning(f"{read_errors} protocol(s) could not be read")

        self.read_errors = read_errors
        self._cache = tuple(protocols)
        logger.info(f"Scanned {len(protocols)} protocol files")
        return list(self._cache)

    def get_by_name(self, name: str) -> ProtocolMetadata | None:
        """
        Get protocol by exact name.

        Lookup precedence: file name, file name with extension appended,
        record name, raw input.

        Args:
            name: Protocol name or file name

        Returns:
            ProtocolMetadata or None if not found
        """
        protocols = self.scan()
        normalized = strip_extension(name)

        lookups = (
            lambda p: p.file_name == name,
            lambda p: p.file_name == f"{normalized}{self.extension}",
            lambda p: p.name == normalized,
            lambda p: p.name == name,
        )
        for matches in lookups:
            for protocol in protocols:
                if matches(protocol):
                    return protocol
        return None

    def get_by_trigger(self, trigger: str) -> ProtocolMetadata | None:
        """
        Find protocol by trigger command (case-insensitive).

        Args:
            trigger: Trigger command (e.g., "deepdive" or "DEEPDIVE")

        Returns:
            First ProtocolMetadata declaring the trigger, or None
        """
        normalized = trigger.strip().upper()
        for protocol in self.scan():
            if normalized in protocol.triggers:
                return protocol
        return None

    def clear_cache(self) -> None:
        """Discard cached records so the next scan() re-reads disk."""
        self._cache = None
