"""
Reading and writing the JSON documents that hold server definitions.

The host document belongs to Claude Code: only its server mapping is ever
replaced, every other field is written back as it was found. The disabled and
journal documents are private to ccmcp and are overwritten wholesale.
"""

import json
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from ccmcp.config import Settings
from ccmcp.core.exceptions import MalformedDocumentError, StoreIOError
from ccmcp.logging.logger import get_logger

logger = get_logger(__name__)

ServerMapping = Dict[str, Dict[str, Any]]

DISABLED_SERVERS_KEY = "disabledMcpServers"
PENDING_MOVES_KEY = "pendingMoves"


@dataclass
class HostDocument:
    """The active server mapping, plus the full document it was read from."""

    servers: ServerMapping = field(default_factory=dict)
    fields: Dict[str, Any] = field(default_factory=dict)


class MalformedContent(ValueError):
    """Document text that is not the expected JSON shape."""


def read_document(path: Path) -> Dict[str, Any] | None:
    """
    Read a JSON object document strictly.

    Returns None when the file does not exist. Raises MalformedContent when it is
    not UTF-8 text holding a JSON object, and StoreIOError when it cannot be read.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except UnicodeDecodeError as e:
        raise MalformedContent(f"not UTF-8 text: {e}") from e
    except OSError as e:
        raise StoreIOError(f"Unable to read {path}", str(e)) from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedContent(str(e)) from e
    if not isinstance(data, dict):
        raise MalformedContent(f"expected a JSON object, found {type(data).__name__}")
    return data


def mapping_field(document: Dict[str, Any], key: str) -> ServerMapping:
    """The object stored under `key`, empty when the key is absent."""
    value = document.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise MalformedContent(f"'{key}' is a {type(value).__name__}, expected an object")
    return value


def dump_document(document: Dict[str, Any]) -> str:
    """Serialize a document the way every store file is written."""
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def write_atomic(path: Path, document: Dict[str, Any]) -> None:
    """
    Write a document through a temporary file so readers never see a partial write.

    A symlinked path is written through to the file it points at; the link stays.
    """
    path = path.resolve()
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", delete=False, dir=str(path.parent), prefix=f".{path.name}.", encoding="utf-8"
        ) as tf:
            tmp_name = tf.name
            tf.write(dump_document(document))
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise StoreIOError(f"Unable to write {path}", str(e)) from e


class EntryStoreCodec:
    """Loads and saves the host, disabled and journal documents."""

    def __init__(
        self,
        host_path: Path,
        disabled_path: Path,
        journal_path: Path,
        servers_key: str = "mcpServers",
    ) -> None:
        self.host_path = host_path
        self.disabled_path = disabled_path
        self.journal_path = journal_path
        self.servers_key = servers_key

    @classmethod
    def from_settings(cls, settings: Settings) -> "EntryStoreCodec":
        return cls(
            host_path=settings.resolved(settings.host_config_path),
            disabled_path=settings.resolved(settings.disabled_config_path),
            journal_path=settings.resolved(settings.journal_path),
            servers_key=settings.servers_key,
        )

    def _read_tolerant(self, path: Path) -> Dict[str, Any]:
        """Read a document, substituting an empty one when absent or unparseable."""
        try:
            return read_document(path) or {}
        except MalformedContent as e:
            logger.warning(
                f"Ignoring malformed document {path}",
                name="MALFORMED_DOCUMENT",
                path=path,
                error=str(e),
            )
            return {}

    def read_host_document(self) -> HostDocument:
        document = self._read_tolerant(self.host_path)
        try:
            servers = mapping_field(document, self.servers_key)
        except MalformedContent as e:
            logger.warning(
                f"Ignoring malformed server mapping in {self.host_path}",
                name="MALFORMED_DOCUMENT",
                path=self.host_path,
                error=str(e),
            )
            servers = {}
        return HostDocument(servers=dict(servers), fields=document)

    def write_host_document(self, doc: HostDocument) -> None:
        """
        Replace the server mapping of the on-disk host document with `doc.servers`.

        The document is re-read immediately before writing so fields changed by
        Claude Code since `doc` was loaded are kept.
        """
        try:
            current = read_document(self.host_path) or {}
        except MalformedContent as e:
            raise MalformedDocumentError(
                f"Refusing to overwrite {self.host_path}: it is not valid JSON",
                f"Fix or remove the file and retry. ({e})",
            ) from e

        # Assigning an existing key keeps its position in the document
        current[self.servers_key] = doc.servers
        write_atomic(self.host_path, current)
        logger.debug(
            "Wrote host document",
            name="HOST_DOCUMENT_WRITTEN",
            path=self.host_path,
            servers=sorted(doc.servers),
        )

    def read_disabled_store(self) -> ServerMapping:
        document = self._read_tolerant(self.disabled_path)
        try:
            return dict(mapping_field(document, DISABLED_SERVERS_KEY))
        except MalformedContent as e:
            logger.warning(
                f"Ignoring malformed disabled store {self.disabled_path}",
                name="MALFORMED_DOCUMENT",
                path=self.disabled_path,
                error=str(e),
            )
            return {}

    def write_disabled_store(self, store: ServerMapping) -> None:
        write_atomic(self.disabled_path, {DISABLED_SERVERS_KEY: store})
        logger.debug(
            "Wrote disabled store",
            name="DISABLED_STORE_WRITTEN",
            path=self.disabled_path,
            servers=sorted(store),
        )

    def read_journal(self) -> List[Dict[str, Any]]:
        document = self._read_tolerant(self.journal_path)
        moves = document.get(PENDING_MOVES_KEY, [])
        if not isinstance(moves, list):
            logger.warning(
                f"Ignoring malformed journal {self.journal_path}",
                name="MALFORMED_DOCUMENT",
                path=self.journal_path,
            )
            return []
        return moves

    def write_journal(self, moves: List[Dict[str, Any]]) -> None:
        """Persist pending moves; an empty journal removes the file."""
        if moves:
            write_atomic(self.journal_path, {PENDING_MOVES_KEY: moves})
            return
        try:
            self.journal_path.unlink(missing_ok=True)
        except OSError as e:
            raise StoreIOError(f"Unable to remove {self.journal_path}", str(e)) from e
