"""Move generation and validation backed by python-chess."""

from typing import Dict, List, Optional

import chess

from opening_drill.models import STARTING_FEN, MoveInfo


def describe_move(board: chess.Board, move: chess.Move) -> MoveInfo:
    """Builds a MoveInfo for a move that is legal on board (before it is pushed)."""
    return MoveInfo(
        from_square=chess.square_name(move.from_square),
        to_square=chess.square_name(move.to_square),
        promotion=chess.piece_symbol(move.promotion) if move.promotion else None,
        san=board.san(move),
        uci=move.uci(),
        color=board.turn,
    )


class MoveEvaluator:
    """
    Live position that moves are applied to one at a time.

    Every apply method returns the MoveInfo of the applied move, or None when
    the move is unparseable or illegal; failures never raise.
    """

    def __init__(self, fen: Optional[str] = None):
        self.board = chess.Board(fen or STARTING_FEN)

    def fen(self) -> str:
        return self.board.fen()

    def side_to_move(self) -> chess.Color:
        return self.board.turn

    def apply_san(self, text: str) -> Optional[MoveInfo]:
        """Applies a move written in SAN (or UCI as a fallback)."""
        try:
            move = self.board.parse_san(text)
        except ValueError:
            try:
                move = self.board.parse_uci(text)
            except ValueError:
                return None
        if not move:
            # "--" parses to a null move, which is never part of an opening line
            return None
        return self._push(move)

    def apply_squares(self, from_square: str, to_square: str,
                      promotion: Optional[str] = None) -> Optional[MoveInfo]:
        """Applies a move given by origin and destination squares."""
        try:
            origin = chess.parse_square(from_square)
            target = chess.parse_square(to_square)
            piece_type = chess.Piece.from_symbol(promotion).piece_type if promotion else None
        except ValueError:
            return None

        move = chess.Move(origin, target, promotion=piece_type)
        if piece_type is None and self._is_promotion_square(origin, target):
            move = chess.Move(origin, target, promotion=chess.QUEEN)
        if not self.board.is_legal(move):
            return None
        return self._push(move)

    def legal_moves(self) -> List[MoveInfo]:
        return [describe_move(self.board, move) for move in self.board.legal_moves]

    def legal_destinations(self) -> Dict[str, List[str]]:
        """Maps each origin square to the destination squares reachable from it."""
        dests: Dict[str, List[str]] = {}
        for move in self.board.legal_moves:
            origin = chess.square_name(move.from_square)
            target = chess.square_name(move.to_square)
            targets = dests.setdefault(origin, [])
            if target not in targets:
                targets.append(target)
        return dests

    def last_move(self) -> Optional[chess.Move]:
        if not self.board.move_stack:
            return None
        return self.board.peek()

    def undo_last(self) -> Optional[str]:
        """Takes back the most recent move and returns the restored FEN."""
        if not self.board.move_stack:
            return None
        self.board.pop()
        return self.board.fen()

    def _is_promotion_square(self, origin: chess.Square, target: chess.Square) -> bool:
        if self.board.piece_type_at(origin) != chess.PAWN:
            return False
        return chess.square_rank(target) in (0, 7)

    def _push(self, move: chess.Move) -> MoveInfo:
        info = describe_move(self.board, move)
        self.board.push(move)
        return info
