from __future__ import annotations

import csv
import random
import re
import string
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, TextIO, Tuple

# (row delta, col delta)
EASY_DIRECTIONS: List[Tuple[int, int]] = [(0, 1), (1, 0)]
ALL_DIRECTIONS: List[Tuple[int, int]] = [
    (0, 1),
    (1, 0),
    (1, 1),
    (-1, 1),
    (0, -1),
    (-1, 0),
    (-1, -1),
    (1, -1),
]

# Rejected by substring, so "SKILL" and "DIET" are caught too.
FOUL_WORDS: Tuple[str, ...] = ("DAMN", "HELL", "CRAP", "STUPID", "HATE", "KILL", "DIE", "DEAD")

MAX_ATTEMPTS = 100
GRID_SIZES = (10, 15, 20)
DIFFICULTIES = ("easy", "hard")


# -----------------------------------------------------------------------------
# Simple logger hook
# -----------------------------------------------------------------------------
# app.py can call set_logger(my_ui_logger). If you do nothing, we print().
_LOGGER = None  # type: Optional[callable]


def set_logger(fn) -> None:
    """Allow the UI to inject a logger callback: fn(text: str)."""
    global _LOGGER
    _LOGGER = fn


def _log(msg: str) -> None:
    """Log to UI if available; otherwise print."""
    if _LOGGER:
        _LOGGER(msg)
        return
    print(msg)


# -----------------------------------------------------------------------------
# Data shapes
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class PlacedWord:
    """One embedded word: origin, unit step and the derived end cell."""
    word: str
    start_row: int
    start_col: int
    direction: Tuple[int, int]

    @property
    def end_row(self) -> int:
        return self.start_row + self.direction[0] * (len(self.word) - 1)

    @property
    def end_col(self) -> int:
        return self.start_col + self.direction[1] * (len(self.word) - 1)

    def cells(self) -> List[Tuple[int, int]]:
        dr, dc = self.direction
        return [(self.start_row + dr * i, self.start_col + dc * i) for i in range(len(self.word))]


@dataclass(frozen=True)
class Puzzle:
    """
    The outcome of the generator.
    'words' is the effective word list shown to the player; it follows
    placed_words and can be shorter than the input.
    """
    grid: Tuple[Tuple[str, ...], ...]
    placed_words: Tuple[PlacedWord, ...]
    words: Tuple[str, ...]

    @property
    def size(self) -> int:
        return len(self.grid)


class WorksheetError(ValueError):
    """Raised when a worksheet is requested without a title or words."""


@dataclass
class Worksheet:
    """A generated puzzle plus the print header the renderer needs."""
    title: str
    puzzle: Puzzle
    grid_size: int = 15
    difficulty: str = "easy"
    student_name: str = ""
    created_on: date = field(default_factory=date.today)
    requested: List[str] = field(default_factory=list)  # sanitized words before placement

    @property
    def dropped(self) -> List[str]:
        """Sanitized words that did not make it into the grid (multiset difference)."""
        remaining = list(self.puzzle.words)
        out: List[str] = []
        for w in self.requested:
            if w in remaining:
                remaining.remove(w)
            else:
                out.append(w)
        return out


# -----------------------------------------------------------------------------
# Word sanitation
# -----------------------------------------------------------------------------
_NON_LETTERS_RE = re.compile(r"[^A-Z]")


def clean_word(text: str) -> str:
    """Uppercase and keep only A-Z."""
    return _NON_LETTERS_RE.sub("", str(text).upper())


def _fold_denylist(denylist: Iterable[str]) -> Tuple[str, ...]:
    """Clean entries the same way as words; entries that clean to '' are dropped."""
    return tuple(f for f in (clean_word(d) for d in denylist) if f)


def is_foul_word(word: str, denylist: Iterable[str] = FOUL_WORDS) -> bool:
    """True if any denylisted term occurs anywhere inside word."""
    up = clean_word(word)
    return any(foul in up for foul in _fold_denylist(denylist))


def sanitize_words(
    words: Sequence[str],
    grid_size: int,
    denylist: Iterable[str] = FOUL_WORDS,
) -> List[str]:
    """
    Clean, length-filter and denylist-filter the raw words.
    Order and duplicates are preserved.
    """
    folds = _fold_denylist(denylist)
    out: List[str] = []
    for w in words:
        cw = clean_word(w)
        if len(cw) <= 2 or len(cw) > grid_size:
            continue
        if any(foul in cw for foul in folds):
            continue
        out.append(cw)
    return out


def directions_for(difficulty: str) -> List[Tuple[int, int]]:
    """'easy' gets right/down only; anything else gets all 8 directions."""
    return list(EASY_DIRECTIONS) if difficulty == "easy" else list(ALL_DIRECTIONS)


# -----------------------------------------------------------------------------
# Grid building
# -----------------------------------------------------------------------------
def _empty_grid(n: int) -> List[List[str]]:
    return [["" for _ in range(n)] for _ in range(n)]


def _can_place_word(grid, word: str, row: int, col: int, direction: Tuple[int, int]) -> bool:
    """Check bounds and compatibility (allow crossing on identical letters)."""
    n = len(grid)
    dr, dc = direction
    end_r = row + dr * (len(word) - 1)
    end_c = col + dc * (len(word) - 1)
    if end_r < 0 or end_r >= n or end_c < 0 or end_c >= n:
        return False

    for i, ch in enumerate(word):
        cell = grid[row + dr * i][col + dc * i]
        if cell != "" and cell != ch:
            return False
    return True


def _place_word(grid, word: str, row: int, col: int, direction: Tuple[int, int]) -> None:
    dr, dc = direction
    for i, ch in enumerate(word):
        grid[row + dr * i][col + dc * i] = ch


def _rand_letter(rng: random.Random) -> str:
    return rng.choice(string.ascii_uppercase)


def fill_empty_cells(grid: List[List[str]], rng: random.Random) -> None:
    """Give every '' cell a random uppercase letter, in place."""
    for row in grid:
        for c, cell in enumerate(row):
            if cell == "":
                row[c] = _rand_letter(rng)


def _check_positive_int(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")


def generate_word_search(
    words: Sequence[str],
    grid_size: int = 15,
    difficulty: str = "easy",
    *,
    denylist: Iterable[str] = FOUL_WORDS,
    max_attempts: int = MAX_ATTEMPTS,
    rng: Optional[random.Random] = None,
    seed: Optional[str] = None,
) -> Puzzle:
    """
    Build a square word search.

    Each sanitized word gets up to max_attempts random (direction, start)
    draws; the first one that fits is committed. Words that never fit are
    left out of the result without error. Remaining cells get random letters.

    Pass rng to keep consuming one sequence across a batch; otherwise a local
    Random is seeded from seed (None means non-deterministic).
    """
    _check_positive_int("grid_size", grid_size)
    _check_positive_int("max_attempts", max_attempts)
    _rng = rng if rng is not None else random.Random(seed if seed else None)

    grid = _empty_grid(grid_size)
    dirs = directions_for(difficulty)
    placed: List[PlacedWord] = []

    for word in sanitize_words(words, grid_size, denylist):
        for _ in range(max_attempts):
            direction = _rng.choice(dirs)
            row = _rng.randrange(grid_size)
            col = _rng.randrange(grid_size)
            if _can_place_word(grid, word, row, col, direction):
                _place_word(grid, word, row, col, direction)
                placed.append(PlacedWord(word=word, start_row=row, start_col=col, direction=direction))
                break

    fill_empty_cells(grid, _rng)
    return Puzzle(
        grid=tuple(tuple(row) for row in grid),
        placed_words=tuple(placed),
        words=tuple(pw.word for pw in placed),
    )


def answer_key_mask(puzzle: Puzzle) -> List[List[bool]]:
    """True where a placed word letter sits."""
    n = puzzle.size
    mask = [[False] * n for _ in range(n)]
    for pw in puzzle.placed_words:
        for r, c in pw.cells():
            mask[r][c] = True
    return mask


def render_preview_ascii(puzzle: Puzzle) -> str:
    """
    Simple ASCII for quick debugging.
    """
    return "\n".join(" ".join(ch if ch else "." for ch in row) for row in puzzle.grid)


# -----------------------------------------------------------------------------
# Word list input (UI calls these)
# -----------------------------------------------------------------------------
def parse_word_lines(text: str) -> List[str]:
    """One word per line; trim and drop blank lines."""
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def read_words_txt(stream: TextIO) -> List[str]:
    """Read a plain text word list, one word per line, from an open text stream."""
    return parse_word_lines(stream.read())


def read_words_csv(stream: TextIO, first_row_header: bool = True) -> List[str]:
    """Read a word list CSV (use the first column). Blank cells are ignored."""
    rows = [[c.strip() for c in r] for r in csv.reader(stream)]
    if first_row_header and rows:
        rows = rows[1:]
    return [r[0] for r in rows if r and r[0]]


def read_words_upload(name: str, stream: TextIO, first_row_header: bool = True) -> List[str]:
    """Pick the CSV or plain text reader from the uploaded file name."""
    if name.lower().endswith(".csv"):
        words = read_words_csv(stream, first_row_header)
    else:
        words = read_words_txt(stream)
    _log(f"words: loaded {len(words)} from {name}")
    return words


def load_words_txt(path: str) -> List[str]:
    """Load a plain text word list from a file path."""
    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            words = read_words_txt(f)
    except OSError as e:
        _log(f"words error: cannot read {path}: {e}")
        raise
    _log(f"words: loaded {len(words)} from {path}")
    return words


def load_words_csv(path: str, first_row_header: bool = True) -> List[str]:
    """Load a word list CSV from a file path."""
    try:
        with open(path, "r", encoding="utf-8-sig", newline="") as f:
            words = read_words_csv(f, first_row_header)
    except OSError as e:
        _log(f"csv error: cannot read {path}: {e}")
        raise
    _log(f"csv: loaded {len(words)} words from {path}")
    return words


# -----------------------------------------------------------------------------
# High-level API
# -----------------------------------------------------------------------------
def build_worksheet(
    title: str,
    raw_words: Sequence[str],
    grid_size: int = 15,
    difficulty: str = "easy",
    student_name: str = "",
    seed: Optional[str] = None,
    rng: Optional[random.Random] = None,
    denylist: Iterable[str] = FOUL_WORDS,
) -> Worksheet:
    """
    Orchestrator used by the screen:
      - require a title and at least one non-blank word
      - generate the puzzle
      - log what could not be placed
    """
    if not (title or "").strip() or not raw_words:
        raise WorksheetError("Please enter a title and words")
    word_list = [w.strip() for w in raw_words if w and w.strip()]
    if not word_list:
        raise WorksheetError("Please enter at least one word")

    denylist = tuple(denylist)
    if seed:
        _log(f"seed: {seed}")
    puzzle = generate_word_search(
        word_list, grid_size, difficulty, denylist=denylist, rng=rng, seed=seed
    )
    ws = Worksheet(
        title=title.strip(),
        puzzle=puzzle,
        grid_size=grid_size,
        difficulty=difficulty,
        student_name=(student_name or "").strip(),
        requested=sanitize_words(word_list, grid_size, denylist),
    )

    filtered = len(word_list) - len(ws.requested)
    if filtered:
        _log(f"filter: {filtered} word(s) too short, too long for {grid_size}x{grid_size} or not allowed")
    for w in ws.dropped:
        _log(f"place: could not place '{w}' in {grid_size}x{grid_size}, skipping it")
    _log(f"placed {len(puzzle.words)} of {len(ws.requested)} words ({difficulty})")
    return ws


_FILENAME_RE = re.compile(r"[^a-z0-9]", re.IGNORECASE)


def worksheet_filename(title: str, answer_key: bool = False, ext: str = "pdf") -> str:
    """'Noah's Ark' -> 'noah_s_ark_wordsearch.pdf' ('..._answers.pdf' with the key)."""
    stem = _FILENAME_RE.sub("_", title or "").lower()
    suffix = "_answers" if answer_key else ""
    return f"{stem}_wordsearch{suffix}.{ext}"


# -----------------------------------------------------------------------------
# Stored record shape (word_searches row)
# -----------------------------------------------------------------------------
def _placed_to_dict(pw: PlacedWord) -> Dict:
    return {
        "word": pw.word,
        "startRow": pw.start_row,
        "startCol": pw.start_col,
        "direction": list(pw.direction),
        "endRow": pw.end_row,
        "endCol": pw.end_col,
    }


def worksheet_to_record(ws: Worksheet, generated_by: Optional[str] = None) -> Dict:
    """Serialize a worksheet the way the word_searches table stores it."""
    return {
        "title": ws.title,
        "words": list(ws.puzzle.words),
        "grid_size": ws.grid_size,
        "difficulty": ws.difficulty,
        "generated_by": generated_by,
        "grid_data": [list(row) for row in ws.puzzle.grid],
        "placed_words": [_placed_to_dict(pw) for pw in ws.puzzle.placed_words],
    }


def puzzle_from_record(record: Dict) -> Puzzle:
    """Rebuild a Puzzle from a stored record. End cells are recomputed, not read."""
    placed = tuple(
        PlacedWord(
            word=d["word"],
            start_row=int(d["startRow"]),
            start_col=int(d["startCol"]),
            direction=(int(d["direction"][0]), int(d["direction"][1])),
        )
        for d in record.get("placed_words") or []
    )
    grid = tuple(tuple(row) for row in record.get("grid_data") or [])
    return Puzzle(grid=grid, placed_words=placed, words=tuple(pw.word for pw in placed))
