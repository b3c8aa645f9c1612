"""PGN parsers package."""

from opening_drill.parsers.movetext import build_tree, parse_pgn_to_tree, tokenize
from opening_drill.parsers.pgn_sanitizer import PGNSanitizer, clean_pgn

__all__ = ["parse_pgn_to_tree", "tokenize", "build_tree", "PGNSanitizer", "clean_pgn"]
