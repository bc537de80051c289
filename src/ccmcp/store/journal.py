"""Journal of moves between the active and disabled stores that have not finished."""

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Literal

from ccmcp.logging.logger import get_logger
from ccmcp.store.codec import EntryStoreCodec

logger = get_logger(__name__)

StoreName = Literal["active", "disabled"]


@dataclass(frozen=True)
class PendingMove:
    name: str
    source: StoreName
    target: StoreName
    definition: Dict[str, Any]

    @classmethod
    def from_document(cls, item: Any) -> "PendingMove | None":
        if not isinstance(item, dict):
            return None
        source, target = item.get("source"), item.get("target")
        if (
            not isinstance(item.get("name"), str)
            or not isinstance(item.get("definition"), dict)
            or {source, target} != {"active", "disabled"}
        ):
            return None
        return cls(name=item["name"], source=source, target=target, definition=item["definition"])


class MoveJournal:
    """
    Records a move before either store is written and forgets it once both are.

    A move left in the journal by an interrupted process is finished by
    replaying it: the target store receives the journalled definition if it is
    missing and the source store drops the name.
    """

    def __init__(self, codec: EntryStoreCodec) -> None:
        self.codec = codec

    def pending(self) -> List[PendingMove]:
        moves = []
        for item in self.codec.read_journal():
            move = PendingMove.from_document(item)
            if move is None:
                logger.warning("Skipping unreadable journal entry", name="JOURNAL_ENTRY_SKIPPED", entry=item)
                continue
            moves.append(move)
        return moves

    def record(self, move: PendingMove) -> None:
        moves = [m for m in self.pending() if m.name != move.name]
        moves.append(move)
        self.codec.write_journal([asdict(m) for m in moves])

    def complete(self, move: PendingMove) -> None:
        moves = [m for m in self.pending() if m.name != move.name]
        self.codec.write_journal([asdict(m) for m in moves])
