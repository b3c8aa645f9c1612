import re

HEADER_PATTERN = re.compile(r'^\s*\[[^\]\n]*\]\s*$', flags=re.MULTILINE)
COMMENT_PATTERN = re.compile(r'\{[\s\S]*?\}')
LINE_COMMENT_PATTERN = re.compile(r';[^\n]*')
NAG_PATTERN = re.compile(r'\$\d+')
MOVE_NUMBER_PATTERN = re.compile(r'\d+\.+')
RESULT_PATTERN = re.compile(r'1-0|0-1|1/2-1/2|\*')
ANNOTATION_PATTERN = re.compile(r'[!?]+')


class PGNSanitizer:
    @staticmethod
    def sanitize(pgn_text: str) -> str:
        """
        Sanitize PGN text to ensure consistent formatting.
        - Adds space after move numbers (1.e4 -> 1. e4)
        - Adds space after variation black move numbers (1...e5 -> 1... e5)
        - Ensures space before move numbers
        """
        # 1. Add space after single dot move numbers: "1.e4" -> "1. e4"
        # Look for digit + dot + non-space
        pgn_text = re.sub(r'(\d+\.)([^\s\.])', r'\1 \2', pgn_text)

        # 2. Add space after triple dot move numbers: "1...e5" -> "1... e5"
        # Look for digit + ... + non-space
        pgn_text = re.sub(r'(\d+\.\.\.)([^\s])', r'\1 \2', pgn_text)

        return pgn_text

    @staticmethod
    def normalize_castling(pgn_text: str) -> str:
        """Rewrite zero-castling to letter castling (0-0-0 before 0-0 to avoid partial replacement)."""
        return pgn_text.replace("0-0-0", "O-O-O").replace("0-0", "O-O")

    @staticmethod
    def clean(pgn_text: str) -> str:
        """
        Reduce PGN text to bare movetext: moves, parentheses and single spaces.

        Strips tag-pair headers, {brace} and ;line comments, NAGs, move numbers,
        result markers and !/? annotation glyphs.
        """
        text = HEADER_PATTERN.sub(' ', pgn_text)
        text = COMMENT_PATTERN.sub(' ', text)
        text = LINE_COMMENT_PATTERN.sub(' ', text)
        text = NAG_PATTERN.sub(' ', text)
        text = PGNSanitizer.normalize_castling(text)
        text = MOVE_NUMBER_PATTERN.sub(' ', text)
        text = RESULT_PATTERN.sub(' ', text)
        text = ANNOTATION_PATTERN.sub('', text)
        return re.sub(r'\s+', ' ', text).strip()


def clean_pgn(pgn_text: str) -> str:
    return PGNSanitizer.clean(pgn_text)
