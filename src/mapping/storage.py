"""
Mapping Storage Module

Persists mapping documents in a local key-value JSON store under a fixed key,
and exports/imports them as standalone JSON files. Both read paths reject
unparseable or wrong-version documents with MappingFormatError.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .document import MappingDocument, MappingFormatError

logger = logging.getLogger(__name__)

# Fixed storage key for the active mapping
MAPPING_STORAGE_KEY = "snl_mapping_v1"

# Default store location (project root)
DEFAULT_STORE_FILE = Path("mapping_store.json")

# Default export filename
EXPORT_FILENAME = "snl-mapping.json"


class MappingStore:
    """
    Key-value store holding the active mapping document.

    The backing file is a JSON object of key -> value; other keys written by
    other tools are preserved on save.
    """

    def __init__(self, path: Union[str, Path] = DEFAULT_STORE_FILE, key: str = MAPPING_STORAGE_KEY):
        """
        Initialize the store.

        Args:
            path: Backing JSON file
            key: Key under which the mapping is stored
        """
        self.path = Path(path)
        self.key = key

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path, 'r', encoding='utf-8') as f:
            try:
                data = json.load(f)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise MappingFormatError(f"Corrupt mapping store {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise MappingFormatError(f"Corrupt mapping store {self.path}: not an object")
        return data

    def _write_all(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)

    def save(self, document: MappingDocument) -> None:
        """
        Store a document under the mapping key, replacing any previous one.

        Args:
            document: Mapping document to persist
        """
        try:
            data = self._read_all()
        except MappingFormatError:
            logger.warning(f"Overwriting corrupt mapping store: {self.path}")
            data = {}
        data[self.key] = document.to_dict()
        self._write_all(data)
        logger.info(f"Mapping saved to {self.path} [{self.key}]")

    def load(self) -> Optional[MappingDocument]:
        """
        Load the stored document.

        Returns:
            MappingDocument, or None if nothing is stored

        Raises:
            MappingFormatError: If the stored value cannot be parsed
                or carries the wrong version
        """
        data = self._read_all()
        if self.key not in data:
            logger.debug(f"No mapping stored under {self.key}")
            return None
        document = MappingDocument.from_dict(data[self.key])
        logger.debug(f"Mapping loaded from {self.path} [{self.key}]")
        return document

    def clear(self) -> None:
        """Remove the stored document, if any."""
        data = self._read_all()
        if data.pop(self.key, None) is not None:
            self._write_all(data)
            logger.info(f"Mapping cleared from {self.path}")


def export_mapping(document: MappingDocument, path: Union[str, Path] = EXPORT_FILENAME) -> Path:
    """
    Write a document to a standalone JSON file.

    Args:
        document: Mapping document to export
        path: Destination file

    Returns:
        Path of the written file
    """
    path = Path(path)
    path.write_text(document.to_json(indent=2), encoding='utf-8')
    logger.info(f"Mapping exported: {path}")
    return path


def import_mapping(path: Union[str, Path]) -> MappingDocument:
    """
    Read a document from a JSON file.

    Args:
        path: Source file

    Returns:
        MappingDocument

    Raises:
        OSError: If the file cannot be read
        MappingFormatError: If the content is not valid JSON
            or not a version-1 mapping
    """
    path = Path(path)
    try:
        text = path.read_text(encoding='utf-8')
    except UnicodeDecodeError as e:
        raise MappingFormatError(f"Mapping file is not UTF-8 text: {path} ({e})") from e
    document = MappingDocument.from_json(text)
    logger.info(f"Mapping imported: {path}")
    return document
