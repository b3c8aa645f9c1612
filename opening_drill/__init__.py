"""Chess opening drills built from PGN studies."""

from opening_drill.models import MoveInfo, MoveNode, MoveTree, Study
from opening_drill.parsers.movetext import parse_pgn_to_tree
from opening_drill.lines import (
    find_next_unplayed_line,
    find_node_by_id,
    get_all_lines,
    get_leaf_nodes,
    get_path_to_node,
)
from opening_drill.drill.session import DrillSession, DrillState, Feedback
from opening_drill.utils import setup_logging

__all__ = [
    "MoveInfo",
    "MoveNode",
    "MoveTree",
    "Study",
    "parse_pgn_to_tree",
    "find_next_unplayed_line",
    "find_node_by_id",
    "get_all_lines",
    "get_leaf_nodes",
    "get_path_to_node",
    "DrillSession",
    "DrillState",
    "Feedback",
    "setup_logging",
]
