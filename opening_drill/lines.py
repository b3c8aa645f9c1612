"""Queries over a MoveTree: leaves, lines, paths and next-line selection."""

from typing import AbstractSet, List, Optional

from opening_drill.models import MoveNode, MoveTree
from opening_drill.moves import MoveEvaluator


def get_leaf_nodes(tree: MoveTree, node: Optional[MoveNode] = None) -> List[MoveNode]:
    """All childless nodes below node (default root), depth-first in child order."""
    start = node if node is not None else tree.root
    leaves: List[MoveNode] = []
    stack = [start]
    while stack:
        current = stack.pop()
        if current.is_leaf:
            leaves.append(current)
        else:
            stack.extend(reversed(tree.children_of(current)))
    return leaves


def get_line_to_leaf(tree: MoveTree, leaf: MoveNode) -> List[MoveNode]:
    """Nodes from the first real move down to leaf; the root is excluded."""
    line: List[MoveNode] = []
    current: Optional[MoveNode] = leaf
    while current is not None and not current.is_root:
        line.append(current)
        current = tree.parent_of(current)
    line.reverse()
    return line


def get_all_lines(tree: MoveTree) -> List[List[MoveNode]]:
    """One line per leaf, in leaf enumeration order."""
    return [get_line_to_leaf(tree, leaf) for leaf in get_leaf_nodes(tree)]


def count_lines(tree: MoveTree) -> int:
    """Number of drillable lines; a tree with no moves has none."""
    return sum(1 for line in get_all_lines(tree) if line)


def find_node_by_id(tree: MoveTree, node_id: str,
                    start: Optional[MoveNode] = None) -> Optional[MoveNode]:
    """Depth-first search below start (default root) for the node with node_id."""
    node = start if start is not None else tree.root
    if node.id == node_id:
        return node
    for child in tree.children_of(node):
        found = find_node_by_id(tree, node_id, child)
        if found is not None:
            return found
    return None


def get_path_to_node(tree: MoveTree, node: MoveNode) -> List[MoveNode]:
    """Root-first path from the root down to node, both included."""
    path: List[MoveNode] = []
    current: Optional[MoveNode] = node
    while current is not None:
        path.append(current)
        current = tree.parent_of(current)
    path.reverse()
    return path


def replay_to_node(tree: MoveTree, node: MoveNode) -> MoveEvaluator:
    """Rebuild the game at node by replaying every move on its path from the root."""
    path = get_path_to_node(tree, node)
    evaluator = MoveEvaluator(path[0].fen)
    for step in path[1:]:
        move = step.move
        if evaluator.apply_squares(move.from_square, move.to_square, move.promotion) is None:
            raise ValueError(f"Move {move.uci} on the path to node {node.id} is not playable")
    return evaluator


def find_next_unplayed_line(tree: MoveTree,
                            completed: AbstractSet[str]) -> Optional[List[MoveNode]]:
    """First line whose leaf is not in completed, or None once every line is done."""
    for line in get_all_lines(tree):
        if line and line[-1].id not in completed:
            return line
    return None


def format_line(line: List[MoveNode]) -> str:
    """Render a line as numbered SAN, e.g. "1. e4 e5 2. Nf3"."""
    parts: List[str] = []
    for index, node in enumerate(line):
        fullmove = _fullmove_before(node)
        if node.move.color:
            parts.append(f"{fullmove}. {node.san}")
        elif index == 0:
            parts.append(f"{fullmove}... {node.san}")
        else:
            parts.append(node.san)
    return " ".join(parts)


def _fullmove_before(node: MoveNode) -> int:
    # The FEN after a black move has already advanced the fullmove counter
    fullmove = int(node.fen.split()[5])
    return fullmove if node.move.color else fullmove - 1
