"""Tests for wordsearch_engine.py."""

import dataclasses
import io
import random
import string

import pytest

from wordsearch_engine import (
    ALL_DIRECTIONS,
    EASY_DIRECTIONS,
    FOUL_WORDS,
    PlacedWord,
    Puzzle,
    WorksheetError,
    _can_place_word,
    answer_key_mask,
    build_worksheet,
    clean_word,
    directions_for,
    generate_word_search,
    is_foul_word,
    load_words_csv,
    load_words_txt,
    parse_word_lines,
    read_words_csv,
    read_words_upload,
    puzzle_from_record,
    render_preview_ascii,
    sanitize_words,
    worksheet_filename,
    worksheet_to_record,
)


_BIBLE_WORDS = [
    "Genesis", "Exodus", "Moses", "Abraham", "Isaac", "Jacob", "Joseph",
    "Jonah", "Esther", "Ruth", "David", "Goliath", "Samuel", "Manna",
    "Eden", "Noah", "Bethlehem", "Manger", "Shepherd", "Psalms",
]


def _read_path(grid, pw: PlacedWord) -> str:
    return "".join(grid[r][c] for r, c in pw.cells())


def _assert_valid(puzzle: Puzzle, size: int) -> None:
    assert len(puzzle.grid) == size
    for row in puzzle.grid:
        assert len(row) == size
        for cell in row:
            assert len(cell) == 1 and cell in string.ascii_uppercase
    assert puzzle.words == tuple(pw.word for pw in puzzle.placed_words)
    for pw in puzzle.placed_words:
        assert _read_path(puzzle.grid, pw) == pw.word
        for r, c in (pw.start_row, pw.start_col), (pw.end_row, pw.end_col):
            assert 0 <= r < size and 0 <= c < size
        assert pw.cells()[-1] == (pw.end_row, pw.end_col)


class TestSanitize:
    def test_clean_word_strips_non_letters(self):
        assert clean_word("  c-a-t! ") == "CAT"
        assert clean_word("Dog2") == "DOG"
        assert clean_word("Noah's Ark") == "NOAHSARK"
        assert clean_word("éclair") == "CLAIR"

    def test_length_filter(self):
        words = ["ab", "abc", "abcdefghij", "abcdefghijk"]
        assert sanitize_words(words, 10) == ["ABC", "ABCDEFGHIJ"]

    def test_order_and_duplicates_preserved(self):
        assert sanitize_words(["dog", "cat", "CAT", "dog"], 10) == ["DOG", "CAT", "CAT", "DOG"]

    def test_denylist_is_substring_match(self):
        assert is_foul_word("HATE")
        assert is_foul_word("SKILL")  # contains KILL
        assert is_foul_word("DIET")   # contains DIE
        assert not is_foul_word("PRAYER")
        assert sanitize_words(["skill", "shellfish", "grace"], 15) == ["GRACE"]

    def test_denylist_is_swappable(self):
        assert sanitize_words(["cat", "hate"], 10, denylist=("CAT",)) == ["HATE"]
        assert sanitize_words(["hate"], 10, denylist=()) == ["HATE"]

    def test_denylist_entries_are_case_folded(self):
        assert sanitize_words(["cat", "hate"], 10, denylist=("cat",)) == ["HATE"]
        assert sanitize_words(["Goliath", "David"], 10, denylist=("goli ath",)) == ["DAVID"]
        assert is_foul_word("concat", denylist=("Cat",))

    def test_blank_denylist_entries_are_ignored(self):
        assert sanitize_words(["cat", "dog"], 10, denylist=("", "  ", "!")) == ["CAT", "DOG"]
        assert not is_foul_word("CAT", denylist=("",))
        puzzle = generate_word_search(["cat"], 10, denylist=("",))
        assert puzzle.words == ("CAT",)

    def test_default_denylist(self):
        assert set(FOUL_WORDS) == {"DAMN", "HELL", "CRAP", "STUPID", "HATE", "KILL", "DIE", "DEAD"}


class TestDirections:
    def test_easy(self):
        assert directions_for("easy") == [(0, 1), (1, 0)]

    @pytest.mark.parametrize("difficulty", ["hard", "medium", "", "EASY"])
    def test_anything_else_is_all_eight(self, difficulty):
        dirs = directions_for(difficulty)
        assert dirs == ALL_DIRECTIONS
        assert len(set(dirs)) == 8
        assert (0, 0) not in dirs


class TestCanPlace:
    def test_crossing_on_same_letter(self):
        grid = [["" for _ in range(4)] for _ in range(4)]
        grid[0][0] = "A"
        assert _can_place_word(grid, "ABC", 0, 0, (0, 1))
        assert not _can_place_word(grid, "XBC", 0, 0, (0, 1))

    def test_out_of_bounds(self):
        grid = [["" for _ in range(4)] for _ in range(4)]
        assert not _can_place_word(grid, "ABC", 0, 2, (0, 1))
        assert not _can_place_word(grid, "ABC", 1, 0, (-1, 0))
        assert _can_place_word(grid, "ABC", 2, 2, (-1, -1))


class TestGenerate:
    def test_scenario_cat_dog_easy(self, rng):
        puzzle = generate_word_search(["cat", "dog"], 10, "easy", rng=rng)
        _assert_valid(puzzle, 10)
        assert puzzle.words == ("CAT", "DOG")
        for pw in puzzle.placed_words:
            assert pw.direction in EASY_DIRECTIONS

    def test_hard_uses_eight_direction_set(self, rng):
        puzzle = generate_word_search(_BIBLE_WORDS, 20, "hard", rng=rng)
        _assert_valid(puzzle, 20)
        assert puzzle.placed_words
        for pw in puzzle.placed_words:
            assert pw.direction in ALL_DIRECTIONS

    def test_empty_input(self):
        puzzle = generate_word_search([], 15, "easy")
        _assert_valid(puzzle, 15)
        assert puzzle.placed_words == ()
        assert puzzle.words == ()

    def test_defaults(self):
        puzzle = generate_word_search(["moses"])
        _assert_valid(puzzle, 15)
        assert puzzle.placed_words[0].direction in EASY_DIRECTIONS

    def test_word_longer_than_grid_is_filtered(self, rng):
        puzzle = generate_word_search(["international", "church"], 10, "hard", rng=rng)
        _assert_valid(puzzle, 10)
        assert "INTERNATIONAL" not in puzzle.words
        assert puzzle.words == ("CHURCH",)

    @pytest.mark.parametrize("size,difficulty", [(10, "easy"), (15, "hard"), (20, "hard")])
    def test_denylisted_word_never_placed(self, size, difficulty):
        puzzle = generate_word_search(["hate", "love", "kindness"], size, difficulty)
        assert "HATE" not in puzzle.words
        for w in puzzle.words:
            assert not is_foul_word(w)

    def test_grid_too_small_for_any_word(self):
        puzzle = generate_word_search(["cat", "dog"], 2, "hard")
        _assert_valid(puzzle, 2)
        assert puzzle.words == ()

    def test_subset_of_filtered_input(self, rng):
        raw = _BIBLE_WORDS + ["Damned", "ox", "hello"]
        puzzle = generate_word_search(raw, 10, "hard", rng=rng)
        allowed = sanitize_words(raw, 10)
        remaining = list(allowed)
        for w in puzzle.words:
            assert w in remaining
            remaining.remove(w)

    def test_unplaceable_words_are_dropped_silently(self, rng):
        # 4 words with no shared letters need 12 cells; a 3x3 grid has 9
        puzzle = generate_word_search(["ABC", "XYZ", "QRS", "TUV"], 3, "easy", rng=rng)
        _assert_valid(puzzle, 3)
        assert len(puzzle.words) <= 3
        assert puzzle.words[0] == "ABC"  # first word always has an empty grid

    def test_duplicates_are_placed_independently(self, rng):
        puzzle = generate_word_search(["cat", "cat"], 15, "easy", rng=rng)
        assert puzzle.words == ("CAT", "CAT")

    def test_seeded_runs_are_reproducible(self):
        a = generate_word_search(_BIBLE_WORDS, 15, "hard", seed="sunday")
        b = generate_word_search(_BIBLE_WORDS, 15, "hard", seed="sunday")
        assert a == b

    def test_end_cells_are_derived(self):
        pw = PlacedWord(word="JONAH", start_row=4, start_col=0, direction=(-1, 1))
        assert (pw.end_row, pw.end_col) == (0, 4)
        assert pw.cells() == [(4, 0), (3, 1), (2, 2), (1, 3), (0, 4)]

    def test_result_is_frozen(self, rng):
        puzzle = generate_word_search(["cat"], 10, rng=rng)
        with pytest.raises(dataclasses.FrozenInstanceError):
            puzzle.words = []
        with pytest.raises(dataclasses.FrozenInstanceError):
            puzzle.placed_words[0].start_row = 3
        with pytest.raises(TypeError):
            puzzle.grid[0][0] = "Z"
        assert hash(puzzle) == hash(puzzle)

    @pytest.mark.parametrize("size", [0, -5, True, 2.5, "15"])
    def test_invalid_grid_size(self, size):
        with pytest.raises(ValueError, match="grid_size"):
            generate_word_search(["cat"], size)

    def test_invalid_max_attempts(self):
        with pytest.raises(ValueError, match="max_attempts"):
            generate_word_search(["cat"], 10, max_attempts=0)

    def test_raised_attempt_budget(self, rng):
        puzzle = generate_word_search(_BIBLE_WORDS, 12, "hard", max_attempts=1000, rng=rng)
        _assert_valid(puzzle, 12)


class TestAnswerKey:
    def test_mask_matches_placed_cells(self, rng):
        puzzle = generate_word_search(_BIBLE_WORDS, 15, "hard", rng=rng)
        mask = answer_key_mask(puzzle)
        expected = {cell for pw in puzzle.placed_words for cell in pw.cells()}
        marked = {(r, c) for r, row in enumerate(mask) for c, v in enumerate(row) if v}
        assert marked == expected

    def test_ascii_preview(self):
        puzzle = Puzzle(grid=(("A", "B"), ("C", "D")), placed_words=(), words=())
        assert render_preview_ascii(puzzle) == "A B\nC D"


class TestWordInput:
    def test_parse_word_lines(self):
        assert parse_word_lines("cat\n\n  dog \r\n   \n") == ["cat", "dog"]
        assert parse_word_lines("") == []

    def test_load_words_txt(self, tmp_path, log_lines):
        p = tmp_path / "words.txt"
        p.write_text("Moses\n\nAaron\n", encoding="utf-8")
        assert load_words_txt(str(p)) == ["Moses", "Aaron"]
        assert any("loaded 2" in line for line in log_lines)

    def test_load_words_csv(self, tmp_path):
        p = tmp_path / "words.csv"
        p.write_text("Word,Notes\nMoses, leader\n,\n Miriam ,sister\n", encoding="utf-8")
        assert load_words_csv(str(p)) == ["Moses", "Miriam"]
        assert load_words_csv(str(p), first_row_header=False) == ["Word", "Moses", "Miriam"]

    def test_read_csv_quoted_first_field(self):
        stream = io.StringIO('Word,Notes\n"Noah, son of Lamech",x\nMoses,y\n')
        assert read_words_csv(stream) == ["Noah, son of Lamech", "Moses"]

    def test_read_upload_picks_reader_by_name(self, log_lines):
        text = 'Word,Notes\n"Noah, son of Lamech",x\nMoses,y\n'
        assert read_words_upload("week1.CSV", io.StringIO(text)) == ["Noah, son of Lamech", "Moses"]
        assert read_words_upload("week1.txt", io.StringIO("Moses\n\n Aaron \n")) == ["Moses", "Aaron"]
        assert any("loaded 2 from week1.txt" in line for line in log_lines)

    def test_read_upload_from_bytes(self):
        raw = io.BytesIO('\ufeffWord\n"Ruth, the Moabite"\n'.encode("utf-8"))
        stream = io.TextIOWrapper(raw, encoding="utf-8-sig", newline="")
        assert read_words_upload("ruth.csv", stream) == ["Ruth, the Moabite"]

    def test_missing_file_raises(self, tmp_path, log_lines):
        with pytest.raises(OSError):
            load_words_txt(str(tmp_path / "nope.txt"))
        assert any("cannot read" in line for line in log_lines)


class TestWorksheet:
    def test_build(self, worksheet, log_lines):
        assert worksheet.title == "Noah's Ark"
        assert worksheet.student_name == "Ruth"
        assert worksheet.requested == ["NOAH", "ARK", "DOVE", "RAINBOW", "FLOOD", "ANIMALS"]
        _assert_valid(worksheet.puzzle, 10)
        assert any(line.startswith("placed ") for line in log_lines)

    def test_dropped_words(self, rng, log_lines):
        ws = build_worksheet("Tiny", ["ABC", "XYZ", "QRS", "TUV"], grid_size=3, rng=rng)
        assert len(ws.dropped) == 4 - len(ws.puzzle.words)
        for w in ws.dropped:
            assert any(f"could not place '{w}'" in line for line in log_lines)

    @pytest.mark.parametrize("title,words,msg", [
        ("", ["cat"], "title and words"),
        ("   ", ["cat"], "title and words"),
        ("Creation", [], "title and words"),
        ("Creation", ["  ", ""], "at least one word"),
    ])
    def test_caller_validation(self, title, words, msg):
        with pytest.raises(WorksheetError, match=msg):
            build_worksheet(title, words)

    def test_worksheet_error_is_value_error(self):
        assert issubclass(WorksheetError, ValueError)

    def test_filename(self):
        assert worksheet_filename("Noah's Ark") == "noah_s_ark_wordsearch.pdf"
        assert worksheet_filename("Noah's Ark", answer_key=True) == "noah_s_ark_wordsearch_answers.pdf"
        assert worksheet_filename("Week 3", ext="json") == "week_3_wordsearch.json"


class TestRecord:
    def test_record_shape(self, worksheet):
        rec = worksheet_to_record(worksheet, generated_by="teacher-1")
        assert rec["title"] == "Noah's Ark"
        assert rec["grid_size"] == 10
        assert rec["difficulty"] == "hard"
        assert rec["generated_by"] == "teacher-1"
        assert rec["words"] == list(worksheet.puzzle.words)
        assert rec["grid_data"] == [list(row) for row in worksheet.puzzle.grid]
        for d, pw in zip(rec["placed_words"], worksheet.puzzle.placed_words):
            assert d == {
                "word": pw.word,
                "startRow": pw.start_row,
                "startCol": pw.start_col,
                "direction": list(pw.direction),
                "endRow": pw.end_row,
                "endCol": pw.end_col,
            }

    def test_puzzle_from_record(self, worksheet):
        assert puzzle_from_record(worksheet_to_record(worksheet)) == worksheet.puzzle
