"""
Moves MCP server definitions between the active store (Claude Code's
configuration) and the disabled store, keeping every server in exactly one.
"""

from typing import Any, Dict, List, NamedTuple, Tuple

from pydantic import ValidationError

from ccmcp.config import ServerDefinition, Settings
from ccmcp.core.exceptions import (
    CcmcpError,
    MalformedDocumentError,
    ServerConflictError,
    ServerExistsError,
    ServerNotFoundError,
    StoreIOError,
)
from ccmcp.logging.logger import get_logger
from ccmcp.store.codec import EntryStoreCodec, HostDocument, ServerMapping
from ccmcp.store.journal import MoveJournal, PendingMove, StoreName

logger = get_logger(__name__)


class ServerEntry(NamedTuple):
    """A server as shown to the user."""

    name: str
    definition: ServerDefinition | None
    """None when the stored JSON is not a valid server definition"""
    enabled: bool
    conflict: bool = False
    """True when the name is present in both stores"""
    raw: Any = None
    """The definition exactly as stored"""

    @property
    def valid(self) -> bool:
        return self.definition is not None


class ServerStateManager:
    """
    Owns the rule that each named server lives in exactly one of two stores.

    Moves are written target first, then source, with the move recorded in a
    journal beforehand. An interruption therefore leaves the server in both
    stores (never in neither), and the next operation finishes the move. A move
    whose target write failed is forgotten, so the caller can simply retry.
    """

    def __init__(self, codec: EntryStoreCodec) -> None:
        self.codec = codec
        self.journal = MoveJournal(codec)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ServerStateManager":
        return cls(EntryStoreCodec.from_settings(settings))

    def _load(self) -> Tuple[HostDocument, ServerMapping]:
        self.recover()
        return self.codec.read_host_document(), self.codec.read_disabled_store()

    def load_active(self) -> ServerMapping:
        host, _ = self._load()
        return host.servers

    def load_disabled(self) -> ServerMapping:
        _, disabled = self._load()
        return disabled

    def list_servers(self) -> List[ServerEntry]:
        """Active servers in document order, followed by disabled servers."""
        host, disabled = self._load()
        conflicts = host.servers.keys() & disabled.keys()
        if conflicts:
            logger.warning(
                "Servers present in both the active and disabled stores",
                name="STORE_CONFLICT",
                servers=sorted(conflicts),
            )

        entries = []
        for servers, enabled in ((host.servers, True), (disabled, False)):
            for name, raw in servers.items():
                try:
                    definition = ServerDefinition.model_validate(raw)
                except ValidationError as e:
                    logger.warning(
                        f"Server '{name}' has an invalid definition",
                        name="INVALID_DEFINITION",
                        server=name,
                        error=str(e),
                    )
                    definition = None
                entries.append(ServerEntry(name, definition, enabled, name in conflicts, raw))
        return entries

    def get_server(self, name: str) -> ServerEntry:
        for entry in self.list_servers():
            if entry.name == name:
                return entry
        raise ServerNotFoundError(f"Server '{name}' not found")

    def add_server(self, name: str, definition: ServerDefinition) -> None:
        """Add a server to the active store. Names already used in either store are rejected."""
        host, disabled = self._load()
        if name in host.servers:
            raise ServerExistsError(f"Server '{name}' already exists")
        if name in disabled:
            raise ServerExistsError(
                f"Server '{name}' already exists",
                "It is currently disabled. Enable it instead of adding it again.",
            )

        host.servers[name] = definition.to_document()
        self.codec.write_host_document(host)
        logger.info(f"Added server '{name}'", name="SERVER_ADDED", server=name)

    def toggle(self, name: str) -> bool:
        """Move a server to the other store. Returns True if it is now enabled."""
        host, disabled = self._load()
        self._check_conflict(name, host, disabled)

        if name in host.servers:
            self._move(name, "active", "disabled", host, disabled)
            return False
        if name in disabled:
            self._move(name, "disabled", "active", host, disabled)
            return True
        raise ServerNotFoundError(f"Server '{name}' not found")

    def enable(self, name: str) -> None:
        host, disabled = self._load()
        self._check_conflict(name, host, disabled)

        if name in disabled:
            self._move(name, "disabled", "active", host, disabled)
        elif name not in host.servers:
            raise ServerNotFoundError(f"Server '{name}' not found")

    def disable(self, name: str) -> None:
        host, disabled = self._load()
        self._check_conflict(name, host, disabled)

        if name in host.servers:
            self._move(name, "active", "disabled", host, disabled)
        elif name not in disabled:
            raise ServerNotFoundError(f"Server '{name}' not found")

    def reconcile(self, name: str, keep: StoreName) -> None:
        """Resolve a server present in both stores by dropping the copy not in `keep`."""
        host, disabled = self._load()
        in_active, in_disabled = name in host.servers, name in disabled
        if not in_active and not in_disabled:
            raise ServerNotFoundError(f"Server '{name}' not found")
        if not (in_active and in_disabled):
            return

        if keep == "active":
            del disabled[name]
            self.codec.write_disabled_store(disabled)
        else:
            del host.servers[name]
            self.codec.write_host_document(host)
        logger.info(
            f"Reconciled server '{name}', kept the {keep} copy",
            name="SERVER_RECONCILED",
            server=name,
            keep=keep,
        )

    def recover(self) -> List[str]:
        """
        Finish moves interrupted between writing the two stores.

        A move whose target store was never written is dropped, leaving the
        server where it was. A move that cannot be finished now (a store that
        cannot be written) stays in the journal and is retried next time.
        Returns the names of the moves that were finished.
        """
        recovered = []
        for move in self.journal.pending():
            try:
                finished = self._replay(move)
            except (MalformedDocumentError, StoreIOError) as e:
                logger.warning(
                    f"Could not finish the move of '{move.name}' to the {move.target} store",
                    name="RECOVERY_DEFERRED",
                    server=move.name,
                    target=move.target,
                    error=e.message,
                )
                continue
            if finished:
                recovered.append(move.name)
        return recovered

    def _replay(self, move: PendingMove) -> bool:
        host = self.codec.read_host_document()
        disabled = self.codec.read_disabled_store()
        stores = {"active": host.servers, "disabled": disabled}
        target, source = stores[move.target], stores[move.source]

        if move.name not in target:
            if move.name in source:
                # The target write never happened, so neither did the move
                self.journal.complete(move)
                logger.info(
                    f"Dropped unfinished move of '{move.name}', it stays in the {move.source} store",
                    name="MOVE_ROLLED_BACK",
                    server=move.name,
                    source=move.source,
                )
                return False
            target[move.name] = move.definition
            self._write(move.target, host, disabled)

        if move.name in source:
            if source[move.name] == move.definition:
                del source[move.name]
                self._write(move.source, host, disabled)
            else:
                logger.warning(
                    f"Server '{move.name}' changed since its move began; leaving both copies",
                    name="RECOVERY_CONFLICT",
                    server=move.name,
                )

        self.journal.complete(move)
        logger.info(
            f"Finished interrupted move of '{move.name}' to the {move.target} store",
            name="MOVE_RECOVERED",
            server=move.name,
            target=move.target,
        )
        return True

    def _check_conflict(self, name: str, host: HostDocument, disabled: ServerMapping) -> None:
        if name in host.servers and name in disabled:
            raise ServerConflictError(
                f"Server '{name}' is both enabled and disabled",
                f"Run `ccmcp reconcile {name} --keep active` or `--keep disabled` to choose one.",
            )

    def _write(self, store: StoreName, host: HostDocument, disabled: ServerMapping) -> None:
        if store == "active":
            self.codec.write_host_document(host)
        else:
            self.codec.write_disabled_store(disabled)

    def _move(
        self,
        name: str,
        source: StoreName,
        target: StoreName,
        host: HostDocument,
        disabled: ServerMapping,
    ) -> None:
        stores: Dict[str, Dict[str, Any]] = {"active": host.servers, "disabled": disabled}
        definition = stores[source][name]
        move = PendingMove(name=name, source=source, target=target, definition=definition)

        self.journal.record(move)
        # Target first: a failure between the two writes duplicates rather than loses
        stores[target][name] = definition
        try:
            self._write(target, host, disabled)
        except CcmcpError:
            # Nothing was written, a retry must start from the unchanged stores
            self.journal.complete(move)
            raise
        del stores[source][name]
        self._write(source, host, disabled)
        self.journal.complete(move)

        logger.info(
            f"Moved server '{name}' to the {target} store",
            name="SERVER_MOVED",
            server=name,
            source=source,
            target=target,
        )
