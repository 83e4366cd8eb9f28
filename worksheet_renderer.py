from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional

from wordsearch_engine import Worksheet, answer_key_mask


# -----------------------------------------------------------------------------
# Simple logger hook (optional; mirrors wordsearch_engine)
# -----------------------------------------------------------------------------
_LOGGER = None  # type: Optional[callable]


def set_logger(fn) -> None:
    """Allow the UI to inject a logger callback: fn(text: str)."""
    global _LOGGER
    _LOGGER = fn


def _log(msg: str) -> None:
    if _LOGGER:
        _LOGGER(msg)
        return
    print(msg)


@dataclass
class Appearance:
    """
    Visual settings used by the SVG renderer.
    Keep this in sync with your UI fields.
    """
    # Page
    page_bg_color: str = "#FFFFFF"

    # Header
    show_header: bool = True
    title_font_family: str = "Helvetica"
    title_font_size: int = 28
    title_font_color: str = "#000000"
    header_font_size: int = 14          # "Name:" / "Date:" lines
    date_format: str = "%m/%d/%Y"

    # Grid
    cell_bg_color: str = "#FFFFFF"
    cell_line_color: str = "#000000"
    cell_line_thickness: float = 1.0

    # Letters
    grid_font_family: str = "Courier"
    grid_font_size: int = 20
    grid_font_bold: bool = False
    grid_font_color: str = "#000000"

    # Legend ("Find these words:")
    show_legend: bool = True
    legend_heading: str = "Find these words:"
    legend_columns: int = 3
    legend_bullet: str = "•"
    list_font_family: str = "Helvetica"
    list_font_size: int = 14
    list_font_color: str = "#000000"

    # Answer key
    answer_key_heading: str = "Answer Key"
    solution_show_legend: bool = False
    solution_mark_style: str = "highlight"     # "highlight" | "circle"
    solution_mark_color: str = "#FFFF00"
    solution_circle_width: float = 2.0
    solution_circle_band_frac: float = 0.55    # fraction of cell height
    solution_circle_pad_len: float = 2.0       # extra length at each end (px)


# -----------------------------------------------------------------------------
# Tiny helper to build safe SVG text (no external lib, very basic)
# -----------------------------------------------------------------------------
def _esc(s: str) -> str:
    return (
        str(s).replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


@dataclass
class _Layout:
    cell: int
    pad: int
    header_h: int
    grid_x: int
    grid_y: int
    grid_w: int
    legend_line_h: int
    legend_h: int
    total_w: int
    total_h: int


def _layout(ws: Worksheet, app: Appearance, heading: bool, legend_rows: int, student: bool = True) -> _Layout:
    n = ws.puzzle.size
    cell = max(12, int(app.grid_font_size * 1.6))
    pad = int(cell * 0.8)
    grid_w = n * cell

    header_h = 0
    if heading:
        header_h = int(app.title_font_size * 1.6)
        if student and ws.student_name:
            header_h = max(header_h, int(app.header_font_size * 3.2))

    legend_line_h = max(12, int(app.list_font_size * 1.5))
    legend_h = 0
    if legend_rows:
        # heading line + word rows
        legend_h = pad + (legend_rows + 1) * legend_line_h

    total_w = max(grid_w + pad * 2, 360)
    grid_x = (total_w - grid_w) // 2
    grid_y = pad + header_h
    total_h = grid_y + grid_w + legend_h + pad
    return _Layout(cell, pad, header_h, grid_x, grid_y, grid_w, legend_line_h, legend_h, total_w, total_h)


def _svg_open(lay: _Layout, app: Appearance) -> List[str]:
    return [
        f'<svg xmlns="http://www.w3.org/2000/svg" '
        f'width="{lay.total_w}" height="{lay.total_h}" '
        f'viewBox="0 0 {lay.total_w} {lay.total_h}">',
        f'<rect x="0" y="0" width="{lay.total_w}" height="{lay.total_h}" fill="{app.page_bg_color}" stroke="none" />',
    ]


def _header(ws: Worksheet, app: Appearance, lay: _Layout, heading: str, student: bool = True) -> List[str]:
    out = []
    ty = lay.pad + app.title_font_size
    out.append(
        f'<text x="{lay.total_w // 2}" y="{ty}" text-anchor="middle" '
        f'font-family="{_esc(app.title_font_family)}" font-size="{app.title_font_size}" '
        f'font-weight="bold" fill="{app.title_font_color}">{_esc(heading)}</text>'
    )
    # Student name and date (top right), worksheet page only
    if student and ws.student_name:
        x = lay.total_w - lay.pad
        line_h = int(app.header_font_size * 1.4)
        y1 = lay.pad + app.header_font_size
        out.append(
            f'<g font-family="{_esc(app.list_font_family)}" font-size="{app.header_font_size}" '
            f'fill="{app.list_font_color}" text-anchor="end">'
        )
        out.append(f'<text x="{x}" y="{y1}">Name: {_esc(ws.student_name)}</text>')
        out.append(f'<text x="{x}" y="{y1 + line_h}">Date: {_esc(ws.created_on.strftime(app.date_format))}</text>')
        out.append('</g>')
    return out


def _grid_lines(app: Appearance, lay: _Layout, n: int) -> List[str]:
    out = []
    stroke = app.cell_line_color
    sw = app.cell_line_thickness
    x0, y0, size = lay.grid_x, lay.grid_y, lay.grid_w
    for c in range(n + 1):
        x = x0 + c * lay.cell
        out.append(f'<line x1="{x}" y1="{y0}" x2="{x}" y2="{y0 + size}" stroke="{stroke}" stroke-width="{sw}" />')
    for r in range(n + 1):
        y = y0 + r * lay.cell
        out.append(f'<line x1="{x0}" y1="{y}" x2="{x0 + size}" y2="{y}" stroke="{stroke}" stroke-width="{sw}" />')
    return out


def _letters(ws: Worksheet, app: Appearance, lay: _Layout) -> List[str]:
    font_weight = "bold" if app.grid_font_bold else "normal"
    out = [
        f'<g font-family="{_esc(app.grid_font_family)}" font-size="{app.grid_font_size}" '
        f'font-weight="{font_weight}" fill="{app.grid_font_color}">'
    ]
    # Center letters in cells
    txt_dy = int(app.grid_font_size * 0.35)
    for r, row in enumerate(ws.puzzle.grid):
        for c, ch in enumerate(row):
            x = lay.grid_x + c * lay.cell + lay.cell // 2
            y = lay.grid_y + r * lay.cell + lay.cell // 2 + txt_dy
            out.append(f'<text x="{x}" y="{y}" text-anchor="middle">{_esc(ch)}</text>')
    out.append('</g>')
    return out


def _legend_rows(words: List[str], app: Appearance) -> int:
    if not words:
        return 0
    col_count = max(1, int(app.legend_columns))
    return (len(words) + col_count - 1) // col_count


def _legend(words: List[str], app: Appearance, lay: _Layout) -> List[str]:
    col_count = max(1, int(app.legend_columns))
    per_col = _legend_rows(words, app)
    lx = lay.grid_x
    ly = lay.grid_y + lay.grid_w + lay.pad
    col_w = max(lay.grid_w // col_count, 1)

    out = [
        f'<text x="{lx}" y="{ly}" font-family="{_esc(app.list_font_family)}" '
        f'font-size="{app.list_font_size + 2}" font-weight="bold" fill="{app.list_font_color}">'
        f'{_esc(app.legend_heading)}</text>',
        f'<g font-family="{_esc(app.list_font_family)}" font-size="{app.list_font_size}" '
        f'fill="{app.list_font_color}">',
    ]
    # Column-major layout
    for i, word in enumerate(words):
        col_idx = i // per_col
        row_idx = i % per_col
        tx = lx + col_idx * col_w + 4
        ty = ly + (row_idx + 1) * lay.legend_line_h
        out.append(f'<text x="{tx}" y="{ty}" text-anchor="start">{_esc(app.legend_bullet)} {_esc(word)}</text>')
    out.append('</g>')
    return out


# -----------------------------------------------------------------------------
# Core renderers
# -----------------------------------------------------------------------------
def render_puzzle_svg(ws: Worksheet, appearance: Appearance) -> str:
    """
    Worksheet page: title (plus name/date when a student is set), the grid
    and the "Find these words" list under it.
    """
    words = ws.puzzle.words if appearance.show_legend else []
    lay = _layout(ws, appearance, appearance.show_header, _legend_rows(words, appearance))

    out = _svg_open(lay, appearance)
    if appearance.show_header:
        out.extend(_header(ws, appearance, lay, ws.title))
    out.append(
        f'<rect x="{lay.grid_x}" y="{lay.grid_y}" width="{lay.grid_w}" height="{lay.grid_w}" '
        f'fill="{appearance.cell_bg_color}" stroke="none" />'
    )
    out.extend(_grid_lines(appearance, lay, ws.puzzle.size))
    out.extend(_letters(ws, appearance, lay))
    if words:
        out.extend(_legend(words, appearance, lay))
    out.append('</svg>')
    return "\n".join(out)


def _pill(pw, appearance: Appearance, lay: _Layout) -> str:
    """Rotated rounded band from the first to the last letter of a word."""
    cell = lay.cell
    (r0, c0) = (pw.start_row, pw.start_col)
    (r1, c1) = (pw.end_row, pw.end_col)
    x0 = lay.grid_x + c0 * cell + 0.5 * cell
    y0 = lay.grid_y + r0 * cell + 0.5 * cell
    x1 = lay.grid_x + c1 * cell + 0.5 * cell
    y1 = lay.grid_y + r1 * cell + 0.5 * cell

    dx = x1 - x0
    dy = y1 - y0
    dist = math.hypot(dx, dy)
    ux, uy = (dx / dist, dy / dist) if dist > 1e-6 else (1.0, 0.0)

    rect_h = max(1.0, appearance.solution_circle_band_frac * cell)
    rx = rect_h * 0.5
    # cover the far edge of the end cells (0.5*cell axis-aligned, ~0.707*cell on 45 degrees)
    ext_each = 0.5 * cell * (abs(ux) + abs(uy)) + appearance.solution_circle_pad_len
    rect_w = dist + 2.0 * ext_each
    cx = (x0 + x1) * 0.5
    cy = (y0 + y1) * 0.5
    ang = math.degrees(math.atan2(dy, dx)) if dist > 1e-6 else 0.0
    return (
        f'<rect x="{cx - rect_w * 0.5:.2f}" y="{cy - rect_h * 0.5:.2f}" '
        f'width="{rect_w:.2f}" height="{rect_h:.2f}" '
        f'fill="none" stroke="{appearance.solution_mark_color}" '
        f'stroke-width="{appearance.solution_circle_width:.2f}" '
        f'rx="{rx:.2f}" ry="{rx:.2f}" transform="rotate({ang:.2f} {cx:.2f} {cy:.2f})" />'
    )


def render_answer_key_svg(ws: Worksheet, appearance: Appearance) -> str:
    """
    Answer key page:
      - Same grid and letters as the puzzle.
      - Placed words marked with either:
          * "highlight": filled cells behind the letters
          * "circle": one rounded band per word, drawn over the letters
    """
    words = ws.puzzle.words if appearance.solution_show_legend else []
    lay = _layout(ws, appearance, True, _legend_rows(words, appearance), student=False)
    mark_style = (appearance.solution_mark_style or "highlight").lower()

    out = _svg_open(lay, appearance)
    out.extend(_header(ws, appearance, lay, appearance.answer_key_heading, student=False))
    out.append(
        f'<rect x="{lay.grid_x}" y="{lay.grid_y}" width="{lay.grid_w}" height="{lay.grid_w}" '
        f'fill="{appearance.cell_bg_color}" stroke="none" />'
    )

    if mark_style == "highlight":
        mask = answer_key_mask(ws.puzzle)
        for r, row in enumerate(mask):
            for c, used in enumerate(row):
                if used:
                    x = lay.grid_x + c * lay.cell
                    y = lay.grid_y + r * lay.cell
                    out.append(
                        f'<rect x="{x}" y="{y}" width="{lay.cell}" height="{lay.cell}" '
                        f'fill="{appearance.solution_mark_color}" stroke="none" class="answer-cell" />'
                    )

    out.extend(_grid_lines(appearance, lay, ws.puzzle.size))
    out.extend(_letters(ws, appearance, lay))

    if mark_style == "circle":
        for pw in ws.puzzle.placed_words:
            out.append(_pill(pw, appearance, lay))

    if words:
        out.extend(_legend(words, appearance, lay))
    out.append('</svg>')
    _log(f"render: answer key with {len(ws.puzzle.placed_words)} word(s) marked ({mark_style})")
    return "\n".join(out)


def save_svg(svg_text: str, path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(svg_text)
    _log(f"svg: saved {path}")

