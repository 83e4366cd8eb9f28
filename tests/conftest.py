import random

import pytest

import wordsearch_engine
import worksheet_export
import worksheet_renderer


@pytest.fixture
def log_lines():
    """Route every module's logger hook into a list for the test."""
    lines = []
    mods = (wordsearch_engine, worksheet_renderer, worksheet_export)
    for mod in mods:
        mod.set_logger(lines.append)
    yield lines
    for mod in mods:
        mod.set_logger(None)


@pytest.fixture
def rng():
    return random.Random(20240519)


@pytest.fixture
def worksheet(rng, log_lines):
    return wordsearch_engine.build_worksheet(
        "Noah's Ark",
        ["Noah", "ark", "Dove", "rainbow", "flood", "animals"],
        grid_size=10,
        difficulty="hard",
        student_name="Ruth",
        rng=rng,
    )
