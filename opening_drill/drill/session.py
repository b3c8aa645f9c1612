"""Drill session: the state machine that walks a user through every line of a study."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

import chess

from opening_drill.lines import count_lines, find_next_unplayed_line, replay_to_node
from opening_drill.models import BLACK, WHITE, MoveInfo, MoveNode, MoveTree, Study
from opening_drill.moves import MoveEvaluator
from opening_drill.parsers.movetext import parse_pgn_to_tree

logger = logging.getLogger("opening_drill")


class DrillState(Enum):
    EDITING = "editing"
    AWAITING_OPPONENT = "awaiting_opponent"
    AWAITING_USER = "awaiting_user"
    COMPLETE = "complete"


class Feedback(Enum):
    NONE = "none"
    CORRECT = "correct"
    OFF_LINE_VARIATION = "off_line_variation"
    WRONG = "wrong"


def color_name(color: chess.Color) -> str:
    return WHITE if color == chess.WHITE else BLACK


@dataclass
class BoardView:
    """
    Everything a board/UI host needs to redraw after a session call.

    Attributes:
        fen: Current position.
        dests: Legal destination squares per origin square for the side that may move.
        turn: Side to move in the position ("white" or "black").
        movable_color: Side the user may move for, or None while input is locked.
        last_move: (from, to) of the last move on the board, for highlighting.
        last_played: The move processed by the call that produced this view, if any.
        feedback: Result of the latest attempted move while drilling.
        state: Current DrillState.
        line_index: Moves of the target line already played.
        line_length: Length of the target line (0 outside a drill).
        completed_lines: Number of lines finished in this drill.
        total_lines: Number of lines in the tree.
        current_node_id: Tree node matching the board, or None when off the tree.
        notice: Human-readable status message, if any.
    """
    fen: str
    dests: Dict[str, List[str]]
    turn: str
    movable_color: Optional[str]
    last_move: Optional[Tuple[str, str]]
    last_played: Optional[MoveInfo]
    feedback: Feedback
    state: DrillState
    line_index: int
    line_length: int
    completed_lines: int
    total_lines: int
    current_node_id: Optional[str]
    notice: Optional[str] = None


@dataclass
class _LineProgress:
    line: List[MoveNode] = field(default_factory=list)
    index: int = 0

    @property
    def finished(self) -> bool:
        return self.index >= len(self.line)

    @property
    def target(self) -> Optional[MoveNode]:
        return None if self.finished else self.line[self.index]


class DrillSession:
    """
    Drives a single study: free exploration in editing mode, or a drill that
    presents every line of the tree until each leaf has been completed.

    Every public method that changes state returns the resulting BoardView.
    Pacing (delays before opponent moves or the next line) is left to the
    caller, which advances opponent moves by calling step().
    """

    def __init__(self, pgn: str = "", user_color: str = WHITE):
        self.user_color = chess.WHITE if user_color == WHITE else chess.BLACK
        self.tree: MoveTree = MoveTree()
        self.evaluator = MoveEvaluator()
        self.current_node_id: Optional[str] = None
        self.completed: Set[str] = set()
        self.state = DrillState.EDITING
        self.feedback = Feedback.NONE
        self.notice: Optional[str] = None
        self.total_lines = 0
        self._progress = _LineProgress()
        self._anchor_id: Optional[str] = None
        self._last_played: Optional[MoveInfo] = None
        self._load(pgn)

    @classmethod
    def from_study(cls, study: Study) -> "DrillSession":
        return cls(study.pgn, study.preferred_color)

    # ------------------------------------------------------------------
    # Loading and views
    # ------------------------------------------------------------------

    def load_study(self, study: Study) -> BoardView:
        """Replace the tree with a fresh parse of study and return to editing mode."""
        self.user_color = chess.WHITE if study.preferred_color == WHITE else chess.BLACK
        self._load(study.pgn)
        return self.view()

    def _load(self, pgn: str):
        self.tree = parse_pgn_to_tree(pgn)
        self.total_lines = count_lines(self.tree)
        logger.info(f"Loaded move tree with {len(self.tree) - 1} moves in {self.total_lines} lines")
        self._reset_state()

    @property
    def current_node(self) -> Optional[MoveNode]:
        if self.current_node_id is None:
            return None
        return self.tree.get(self.current_node_id)

    @property
    def target_line(self) -> List[MoveNode]:
        return list(self._progress.line)

    @property
    def line_index(self) -> int:
        return self._progress.index

    def view(self) -> BoardView:
        board = self.evaluator.board
        if self.state == DrillState.EDITING:
            movable = color_name(board.turn)
        elif self.state == DrillState.AWAITING_USER:
            movable = color_name(self.user_color)
        else:
            movable = None

        last = self.evaluator.last_move()
        return BoardView(
            fen=self.evaluator.fen(),
            dests=self.evaluator.legal_destinations() if movable else {},
            turn=color_name(board.turn),
            movable_color=movable,
            last_move=(chess.square_name(last.from_square), chess.square_name(last.to_square)) if last else None,
            last_played=self._last_played,
            feedback=self.feedback,
            state=self.state,
            line_index=self._progress.index,
            line_length=len(self._progress.line),
            completed_lines=len(self.completed),
            total_lines=self.total_lines,
            current_node_id=self.current_node_id,
            notice=self.notice,
        )

    # ------------------------------------------------------------------
    # Drill
    # ------------------------------------------------------------------

    def start_drill(self) -> BoardView:
        """Forget completed lines and present the first line of the tree."""
        self.completed = set()
        self.feedback = Feedback.NONE
        self._last_played = None
        self._select_next_line()
        return self.view()

    def step(self) -> BoardView:
        """Play the opponent's next move of the target line. No-op outside AWAITING_OPPONENT."""
        self._last_played = None
        if self.state != DrillState.AWAITING_OPPONENT:
            return self.view()

        node = self._progress.target
        move = self.evaluator.apply_squares(node.move.from_square, node.move.to_square, node.move.promotion)
        if move is None:
            raise ValueError(f"Tree move {node.move.uci} is not playable in {self.evaluator.fen()}")
        self._last_played = move
        self.current_node_id = node.id
        self._progress.index += 1
        self._after_progress()
        return self.view()

    def attempt_move(self, from_square: str, to_square: str,
                     promotion: Optional[str] = None) -> BoardView:
        """Handle a move made on the board by the user."""
        self._last_played = None
        if self.state == DrillState.EDITING:
            return self._explore(from_square, to_square, promotion)
        if self.state != DrillState.AWAITING_USER:
            logger.debug(f"Ignoring move {from_square}{to_square} while {self.state.value}")
            return self.view()

        move = self.evaluator.apply_squares(from_square, to_square, promotion)
        if move is None:
            self.feedback = Feedback.WRONG
            return self.view()
        self._last_played = move

        target = self._progress.target
        if move.uci == target.move.uci:
            self.feedback = Feedback.CORRECT
            self.current_node_id = target.id
            self._progress.index += 1
            self._after_progress()
            return self.view()

        branch = self._matching_child(self.current_node, move)
        if branch is not None:
            logger.info(f"{move.san} leaves the drilled line for a known variation")
            self.feedback = Feedback.OFF_LINE_VARIATION
            self.current_node_id = branch.id
            self._mark_main_continuation(branch)
            self._select_next_line()
            return self.view()

        self.feedback = Feedback.WRONG
        self.evaluator.undo_last()
        return self.view()

    def reset(self) -> BoardView:
        """Abandon any drill and return to editing at the starting position."""
        self._reset_state()
        return self.view()

    def clear_feedback(self) -> BoardView:
        self.feedback = Feedback.NONE
        return self.view()

    def _after_progress(self):
        if self._progress.finished:
            leaf = self._progress.line[-1]
            self.completed.add(leaf.id)
            logger.info(f"Completed line {len(self.completed)} of {self.total_lines}")
            self._select_next_line()
        elif self._progress.target.move.color == self.user_color:
            self.state = DrillState.AWAITING_USER
        else:
            self.state = DrillState.AWAITING_OPPONENT

    def _select_next_line(self):
        line = find_next_unplayed_line(self.tree, self.completed)
        self._progress = _LineProgress()
        if line is None:
            self.state = DrillState.COMPLETE
            if self.total_lines == 0:
                self.notice = "This study has no moves to drill."
            else:
                self.notice = f"All {self.total_lines} lines completed."
            logger.info(self.notice)
            return

        self.evaluator = MoveEvaluator(self.tree.root.fen)
        self.current_node_id = self.tree.root_id
        self._progress = _LineProgress(line=line)
        self.notice = f"Line {len(self.completed) + 1} of {self.total_lines}"
        if line[0].move.color == self.user_color:
            self.state = DrillState.AWAITING_USER
        else:
            self.state = DrillState.AWAITING_OPPONENT

    def _mark_main_continuation(self, node: MoveNode):
        # Following first children from node reaches exactly one leaf
        while not node.is_leaf:
            node = self.tree.main_child(node)
        self.completed.add(node.id)

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def go_to_node(self, node_id: str) -> BoardView:
        """Jump to a tree node, rebuilding the board from the starting position."""
        if self.state != DrillState.EDITING:
            return self.view()
        if node_id not in self.tree:
            logger.warning(f"No node {node_id} in the current tree")
            return self.view()
        node = self.tree.get(node_id)
        self.evaluator = replay_to_node(self.tree, node)
        self.current_node_id = node.id
        self._anchor_id = None
        self._last_played = None
        return self.view()

    def go_to_start(self) -> BoardView:
        return self.go_to_node(self.tree.root_id)

    def go_back(self) -> BoardView:
        """Step to the parent node, or back onto the tree after exploring off it."""
        if self.current_node_id is None:
            return self.go_to_node(self._anchor_id or self.tree.root_id)
        parent = self.tree.parent_of(self.current_node)
        if parent is None:
            return self.view()
        return self.go_to_node(parent.id)

    def go_forward(self) -> BoardView:
        """Follow the main continuation of the current node."""
        node = self.current_node
        child = self.tree.main_child(node) if node is not None else None
        if child is None:
            return self.view()
        return self.go_to_node(child.id)

    def _explore(self, from_square: str, to_square: str, promotion: Optional[str]) -> BoardView:
        move = self.evaluator.apply_squares(from_square, to_square, promotion)
        if move is None:
            return self.view()
        self._last_played = move

        node = self.current_node
        if node is not None:
            child = self._matching_child(node, move)
            if child is not None:
                self.current_node_id = child.id
            else:
                self._anchor_id = node.id
                self.current_node_id = None
        return self.view()

    def _matching_child(self, node: Optional[MoveNode], move: MoveInfo) -> Optional[MoveNode]:
        if node is None:
            return None
        for child in self.tree.children_of(node):
            if child.move.uci == move.uci:
                return child
        return None

    def _reset_state(self):
        self.evaluator = MoveEvaluator(self.tree.root.fen)
        self.current_node_id = self.tree.root_id
        self.completed = set()
        self.state = DrillState.EDITING
        self.feedback = Feedback.NONE
        self.notice = None
        self._progress = _LineProgress()
        self._anchor_id = None
        self._last_played = None
