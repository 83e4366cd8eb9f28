from __future__ import annotations

import io
import json
import zipfile
from typing import List, Optional, Sequence

from wordsearch_engine import Worksheet, worksheet_filename, worksheet_to_record
from worksheet_renderer import Appearance, render_answer_key_svg, render_puzzle_svg


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


# -----------------------------------------------------------------------------
# Converters (cairosvg / python-pptx are imported on use so the engine and
# renderer work without the Cairo system library)
# -----------------------------------------------------------------------------
def svg_to_png(svg_text: str) -> bytes:
    from cairosvg import svg2png

    return svg2png(bytestring=svg_text.encode("utf-8"))


def svg_to_pdf(svg_text: str) -> bytes:
    from cairosvg import svg2pdf

    return svg2pdf(bytestring=svg_text.encode("utf-8"))


def build_pptx(pngs: Sequence[bytes]) -> bytes:
    """One blank slide per image."""
    from pptx import Presentation
    from pptx.util import Inches

    prs = Presentation()
    blank = prs.slide_layouts[6]
    for png in pngs:
        slide = prs.slides.add_slide(blank)
        slide.shapes.add_picture(io.BytesIO(png), Inches(0.5), Inches(0.5), height=Inches(6.5))
    out = io.BytesIO()
    prs.save(out)
    return out.getvalue()


def worksheet_pages(ws: Worksheet, appearance: Appearance, include_answer_key: bool = False) -> List[tuple]:
    """[(svg filename, svg text), ...]: the puzzle page, then the answer key if requested."""
    pages = [(worksheet_filename(ws.title, ext="svg"), render_puzzle_svg(ws, appearance))]
    if include_answer_key:
        pages.append((worksheet_filename(ws.title, answer_key=True, ext="svg"), render_answer_key_svg(ws, appearance)))
    return pages


def record_json(ws: Worksheet, generated_by: Optional[str] = None) -> str:
    return json.dumps(worksheet_to_record(ws, generated_by), indent=2)


def package_worksheet(
    ws: Worksheet,
    appearance: Appearance,
    *,
    make_png: bool = True,
    make_pdf: bool = True,
    make_pptx: bool = False,
    include_answer_key: bool = False,
    generated_by: Optional[str] = None,
) -> bytes:
    """
    ZIP with the SVG page(s), requested conversions and the JSON record.
    A conversion that fails leaves a <name>.<FMT>_ERROR.txt entry instead.
    """
    pages = worksheet_pages(ws, appearance, include_answer_key)
    pngs_for_pptx: List[bytes] = []

    mem = io.BytesIO()
    with zipfile.ZipFile(mem, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, s in pages:
            zf.writestr(name, s)

            if make_png or make_pptx:
                try:
                    png = svg_to_png(s)
                    if make_png:
                        zf.writestr(name.replace(".svg", ".png"), png)
                    if make_pptx:
                        pngs_for_pptx.append(png)
                except Exception as e:
                    _log(f"export: PNG conversion failed for {name}: {e}")
                    zf.writestr(name.replace(".svg", ".PNG_ERROR.txt"),
                                (f"PNG conversion failed for {name}:\n{e}").encode("utf-8"))

            if make_pdf:
                try:
                    zf.writestr(name.replace(".svg", ".pdf"), svg_to_pdf(s))
                except Exception as e:
                    _log(f"export: PDF conversion failed for {name}: {e}")
                    zf.writestr(name.replace(".svg", ".PDF_ERROR.txt"),
                                (f"PDF conversion failed for {name}:\n{e}").encode("utf-8"))

        if make_pptx and pngs_for_pptx:
            try:
                zf.writestr(worksheet_filename(ws.title, include_answer_key, ext="pptx"), build_pptx(pngs_for_pptx))
            except Exception as e:
                _log(f"export: PPTX build failed: {e}")
                zf.writestr("PPTX_ERROR.txt", (f"PPTX build failed:\n{e}").encode("utf-8"))

        zf.writestr(worksheet_filename(ws.title, ext="json"), record_json(ws, generated_by))

    _log(f"export: packaged {len(pages)} page(s) for '{ws.title}'")
    mem.seek(0)
    return mem.read()
