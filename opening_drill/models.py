import uuid
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

import chess

STARTING_FEN = chess.STARTING_FEN

WHITE = "white"
BLACK = "black"


def generate_id() -> str:
    """Returns a fresh opaque identifier for nodes and studies."""
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True)
class MoveInfo:
    """
    Describes a move that was applied to a position.

    Attributes:
        from_square: Origin square name (e.g., "g1").
        to_square: Destination square name (e.g., "f3").
        promotion: Promotion piece letter ("q", "r", "b", "n") or None.
        san: Standard Algebraic Notation in the position the move was played from.
        uci: Long-form notation (e.g., "g1f3", "e7e8q"), used for equality checks.
        color: The side that made the move (chess.WHITE or chess.BLACK).
    """
    from_square: str
    to_square: str
    promotion: Optional[str]
    san: str
    uci: str
    color: chess.Color


@dataclass
class MoveNode:
    """A node of the move tree. Links to other nodes are ids into the owning MoveTree."""
    id: str
    move: Optional[MoveInfo]
    san: str
    fen: str
    parent: Optional[str] = None
    children: List[str] = field(default_factory=list)
    is_main_line: bool = True

    @property
    def is_root(self) -> bool:
        return self.move is None

    @property
    def is_leaf(self) -> bool:
        return not self.children


class MoveTree:
    """Arena owning every MoveNode of one parsed PGN, addressed by node id."""

    def __init__(self, fen: str = STARTING_FEN):
        self._nodes: Dict[str, MoveNode] = {}
        root = MoveNode(id=generate_id(), move=None, san="", fen=fen)
        self._nodes[root.id] = root
        self.root_id = root.id

    @property
    def root(self) -> MoveNode:
        return self._nodes[self.root_id]

    def get(self, node_id: str) -> Optional[MoveNode]:
        return self._nodes.get(node_id)

    def parent_of(self, node: MoveNode) -> Optional[MoveNode]:
        if node.parent is None:
            return None
        return self._nodes[node.parent]

    def children_of(self, node: MoveNode) -> List[MoveNode]:
        return [self._nodes[child_id] for child_id in node.children]

    def main_child(self, node: MoveNode) -> Optional[MoveNode]:
        if not node.children:
            return None
        return self._nodes[node.children[0]]

    def add_child(self, parent: MoveNode, move: MoveInfo, fen: str, is_main_line: bool) -> MoveNode:
        """Appends a new node after parent's existing children and returns it."""
        node_id = generate_id()
        while node_id in self._nodes:
            node_id = generate_id()
        node = MoveNode(
            id=node_id,
            move=move,
            san=move.san,
            fen=fen,
            parent=parent.id,
            is_main_line=is_main_line,
        )
        self._nodes[node_id] = node
        parent.children.append(node_id)
        return node

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[MoveNode]:
        return iter(self._nodes.values())


@dataclass
class Study:
    """
    A named opening repertoire persisted by the study store.

    Timestamps are integer milliseconds since the epoch. The serialized form
    uses the keys id, name, pgn, defaultColor, createdAt and updatedAt.
    """
    id: str
    name: str
    pgn: str
    preferred_color: str = WHITE
    created_at: int = 0
    updated_at: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "pgn": self.pgn,
            "defaultColor": self.preferred_color,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Study":
        color = data.get("defaultColor") or WHITE
        if color not in (WHITE, BLACK):
            color = WHITE
        created_at = int(data.get("createdAt", 0) or 0)
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            pgn=str(data.get("pgn", "")),
            preferred_color=color,
            created_at=created_at,
            updated_at=int(data.get("updatedAt", created_at) or created_at),
        )
