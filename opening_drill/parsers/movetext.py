"""Parse PGN movetext (main line plus nested variations) into a MoveTree."""

import logging
from typing import List

from opening_drill.models import MoveNode, MoveTree
from opening_drill.moves import MoveEvaluator
from opening_drill.parsers.pgn_sanitizer import clean_pgn

logger = logging.getLogger("opening_drill")

OPEN_VARIATION = "("
CLOSE_VARIATION = ")"


def parse_pgn_to_tree(pgn: str) -> MoveTree:
    """Parse PGN text into a fresh move tree rooted at the starting position.

    Args:
        pgn: PGN text; headers, comments, NAGs, move numbers and results are ignored.

    Returns:
        MoveTree whose root carries no move. Text without any playable move
        yields a tree holding only the root.
    """
    tree = MoveTree()
    cleaned = clean_pgn(pgn)
    if not cleaned:
        return tree

    tokens = tokenize(cleaned)
    build_tree(tree, tokens, tree.root, MoveEvaluator(tree.root.fen), True)
    logger.debug(f"Parsed {len(tokens)} tokens into {len(tree) - 1} moves")
    return tree


def tokenize(text: str) -> List[str]:
    """Split cleaned movetext into move tokens and "(" / ")" markers."""
    tokens: List[str] = []
    current = ""
    for char in text:
        if char in (OPEN_VARIATION, CLOSE_VARIATION) or char.isspace():
            if current:
                tokens.append(current)
            if not char.isspace():
                tokens.append(char)
            current = ""
        else:
            current += char
    if current:
        tokens.append(current)
    return tokens


def build_tree(tree: MoveTree, tokens: List[str], parent: MoveNode,
               evaluator: MoveEvaluator, is_main_line: bool) -> int:
    """Attach the moves in tokens below parent, recursing into variations.

    A variation replaces the move most recently attached at this level, so it
    branches from that move's parent and is played on a fresh evaluator set to
    the branch point. Moves the evaluator rejects are dropped and parsing
    carries on with the next token.

    Returns:
        Number of tokens consumed, including a terminating ")" if one was hit.
    """
    i = 0
    current = parent

    while i < len(tokens):
        token = tokens[i]

        if token == OPEN_VARIATION:
            end = _find_closing(tokens, i)
            if end is None:
                variation = tokens[i + 1:]
                i = len(tokens)
            else:
                variation = tokens[i + 1:end]
                i = end + 1

            branch_point = tree.parent_of(current)
            if branch_point is None:
                logger.debug("Skipping variation with no move to branch from")
                continue
            build_tree(tree, variation, branch_point, MoveEvaluator(branch_point.fen), False)

        elif token == CLOSE_VARIATION:
            return i + 1

        else:
            move = evaluator.apply_san(token)
            if move is None:
                logger.debug(f"Discarding unplayable token {token!r} after {current.san or 'start'}")
            else:
                current = tree.add_child(current, move, evaluator.fen(), is_main_line)
            i += 1

    return i


def _find_closing(tokens: List[str], open_index: int):
    """Index of the ")" matching the "(" at open_index, or None when unbalanced."""
    depth = 1
    for j in range(open_index + 1, len(tokens)):
        if tokens[j] == OPEN_VARIATION:
            depth += 1
        elif tokens[j] == CLOSE_VARIATION:
            depth -= 1
            if depth == 0:
                return j
    return None
