"""
Command line host for managing studies and drilling them in the terminal.

Usage:
    opening-drill list
    opening-drill add --name "Italian" --pgn-file italian.pgn --color white
    opening-drill edit <study-id> --name "Italian Game"
    opening-drill delete <study-id>
    opening-drill lines <study-id>
    opening-drill drill <study-id>
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional, Tuple

import chess

from opening_drill.data.storage import JsonFileStore
from opening_drill.data.studies import (
    create_study,
    delete_study,
    find_study,
    load_studies,
    save_studies,
    update_study,
)
from opening_drill.drill.session import BoardView, DrillSession, DrillState, Feedback
from opening_drill.lines import get_all_lines, format_line
from opening_drill.models import BLACK, WHITE
from opening_drill.parsers.movetext import parse_pgn_to_tree
from opening_drill.parsers.pgn_sanitizer import PGNSanitizer
from opening_drill.utils import get_float_env, get_store_path, setup_logging

logger = logging.getLogger("opening_drill")

FEEDBACK_MESSAGES = {
    Feedback.CORRECT: "Correct!",
    Feedback.OFF_LINE_VARIATION: "That is another line of this study. Marked as seen.",
    Feedback.WRONG: "Wrong move, try again.",
}
QUIT_COMMANDS = ("quit", "exit", "q")


def read_pgn_argument(args) -> Optional[str]:
    if args.pgn_file:
        return Path(args.pgn_file).read_text()
    return args.pgn


def parse_user_move(fen: str, text: str) -> Optional[Tuple[str, str, Optional[str]]]:
    """
    Turns "e2e4", "e7e8q" or SAN such as "Nf3" into (from, to, promotion).

    Square notation is read without checking legality, so the session decides
    whether the move is wrong. SAN can only be resolved when it is legal.
    """
    try:
        move = chess.Move.from_uci(text)
    except ValueError:
        try:
            move = chess.Board(fen).parse_san(text)
        except ValueError:
            return None
    if not move:
        return None
    promotion = chess.piece_symbol(move.promotion) if move.promotion else None
    return chess.square_name(move.from_square), chess.square_name(move.to_square), promotion


def print_view(view: BoardView, user_color: str):
    board = chess.Board(view.fen)
    print()
    print(board.unicode(orientation=chess.WHITE if user_color == WHITE else chess.BLACK))
    if view.last_played:
        print(f"Played: {view.last_played.san}")
    if view.feedback in FEEDBACK_MESSAGES:
        print(FEEDBACK_MESSAGES[view.feedback])
    if view.notice:
        print(view.notice)


def run_drill(session: DrillSession, user_color: str, input_func=input) -> int:
    """Interactive drill loop. Returns the number of lines completed."""
    delay = get_float_env("OPPONENT_DELAY_SECONDS", 0.5)
    view = session.start_drill()
    print_view(view, user_color)

    while view.state != DrillState.COMPLETE:
        if view.state == DrillState.AWAITING_OPPONENT:
            time.sleep(delay)
            view = session.step()
            print_view(view, user_color)
            continue

        try:
            text = input_func("Your move: ").strip()
        except EOFError:
            break
        if text.lower() in QUIT_COMMANDS:
            break
        parsed = parse_user_move(view.fen, text)
        if parsed is None:
            print(f"Could not read move {text!r}.")
            continue
        view = session.attempt_move(*parsed)
        print_view(view, user_color)
        session.clear_feedback()

    return view.completed_lines


def cmd_list(studies, args) -> int:
    if not studies:
        print("No studies yet. Add one with 'opening-drill add'.")
        return 0
    for study in studies:
        print(f"{study.id}  {study.name}  ({study.preferred_color})")
    return 0


def cmd_lines(studies, args) -> int:
    study = find_study(studies, args.study_id)
    if study is None:
        print(f"No study matches {args.study_id!r}.")
        return 1
    lines = [line for line in get_all_lines(parse_pgn_to_tree(study.pgn)) if line]
    for number, line in enumerate(lines, start=1):
        print(f"{number:3d}. {format_line(line)}")
    print(f"{len(lines)} lines in {study.name}")
    return 0


def cmd_drill(studies, args) -> int:
    study = find_study(studies, args.study_id)
    if study is None:
        print(f"No study matches {args.study_id!r}.")
        return 1
    color = args.color or study.preferred_color
    session = DrillSession(study.pgn, color)
    completed = run_drill(session, color)
    print(f"Completed {completed} of {session.total_lines} lines.")
    return 0


def _persist(store, studies) -> int:
    if not save_studies(store, studies):
        print("Warning: studies could not be saved.", file=sys.stderr)
        return 1
    return 0


def cmd_add(store, studies, args) -> int:
    pgn = read_pgn_argument(args)
    if not pgn:
        print("Provide the PGN with --pgn or --pgn-file.")
        return 1
    study = create_study(args.name, PGNSanitizer.sanitize(pgn), args.color or WHITE)
    if _persist(store, studies + [study]):
        return 1
    print(f"Added study {study.id}: {study.name}")
    return 0


def cmd_edit(store, studies, args) -> int:
    study = find_study(studies, args.study_id)
    if study is None:
        print(f"No study matches {args.study_id!r}.")
        return 1
    updates = {}
    if args.name:
        updates["name"] = args.name
    pgn = read_pgn_argument(args)
    if pgn:
        updates["pgn"] = PGNSanitizer.sanitize(pgn)
    if args.color:
        updates["preferred_color"] = args.color
    if not updates:
        print("Nothing to change.")
        return 0
    updated = update_study(study, **updates)
    if _persist(store, [updated if s.id == study.id else s for s in studies]):
        return 1
    print(f"Updated study {updated.id}: {updated.name}")
    return 0


def cmd_delete(store, studies, args) -> int:
    study = find_study(studies, args.study_id)
    if study is None:
        print(f"No study matches {args.study_id!r}.")
        return 1
    if _persist(store, delete_study(studies, study.id)):
        return 1
    print(f"Deleted study {study.id}: {study.name}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="opening-drill",
        description="Drill chess opening lines from PGN studies.",
    )
    parser.add_argument("--store", help="Path of the JSON study store (default: OPENING_DRILL_STORE)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List saved studies")

    add = sub.add_parser("add", help="Add a study")
    add.add_argument("--name", required=True)
    add.add_argument("--pgn", help="PGN text")
    add.add_argument("--pgn-file", help="File containing the PGN")
    add.add_argument("--color", choices=[WHITE, BLACK])

    edit = sub.add_parser("edit", help="Edit a study")
    edit.add_argument("study_id")
    edit.add_argument("--name")
    edit.add_argument("--pgn", help="PGN text")
    edit.add_argument("--pgn-file", help="File containing the PGN")
    edit.add_argument("--color", choices=[WHITE, BLACK])

    delete = sub.add_parser("delete", help="Delete a study")
    delete.add_argument("study_id")

    lines = sub.add_parser("lines", help="Print every line of a study")
    lines.add_argument("study_id")

    drill = sub.add_parser("drill", help="Drill a study in the terminal")
    drill.add_argument("study_id")
    drill.add_argument("--color", choices=[WHITE, BLACK], help="Override the study's preferred color")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()

    store = JsonFileStore(args.store or get_store_path())
    studies = load_studies(store)
    logger.debug(f"Loaded {len(studies)} studies from {store.path}")

    read_only = {"list": cmd_list, "lines": cmd_lines, "drill": cmd_drill}
    if args.command in read_only:
        return read_only[args.command](studies, args)

    writers = {"add": cmd_add, "edit": cmd_edit, "delete": cmd_delete}
    return writers[args.command](store, studies, args)
