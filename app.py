import io
import re
from pathlib import Path

import streamlit as st
import streamlit.components.v1 as components

import wordsearch_engine as eng
import worksheet_export as export
import worksheet_renderer as svg


def load_css(path: str | Path) -> None:
    css_path = Path(path)
    css = css_path.read_text(encoding="utf-8")
    st.markdown(f"<style>{css}</style>", unsafe_allow_html=True)


# ---- preview helper: scale an SVG to a target pixel width (keeps aspect) ----

def _scale_svg_for_preview(svg_text: str, target_width_px: int) -> tuple[str, int]:
    """
    Returns (scaled_svg_text, new_height_px).
    Only used for UI preview; original SVGs stay full size for ZIP/PNG/PDF.
    """
    m = re.search(r'viewBox="0\s+0\s+([\d.]+)\s+([\d.]+)"', svg_text)
    if not m:
        return svg_text, 600  # fallback
    vw, vh = float(m.group(1)), float(m.group(2))

    scale = max(0.05, float(target_width_px) / max(1.0, vw))
    new_h = max(50, int(round(vh * scale)))

    # rewrite width/height only on the <svg ...> tag
    s = re.sub(r'(<svg\b[^>]*\bwidth=")[^"]+(")', rf'\g<1>{int(target_width_px)}\g<2>', svg_text, count=1)
    s = re.sub(r'(<svg\b[^>]*\bheight=")[^"]+(")', rf'\g<1>{new_h}\g<2>', s, count=1)
    return s, new_h


def _ui_log(msg: str) -> None:
    st.session_state.setdefault("log", []).append(msg)


st.set_page_config(page_title="Word Search Generator", layout="wide")
load_css(Path(__file__).with_name("styles.css"))
st.title("Word Search Generator")
st.caption("Create custom word search puzzles for your students")

# one log per run; widget changes rerun the whole script
st.session_state["log"] = []
for mod in (eng, svg, export):
    mod.set_logger(_ui_log)


# --- Controls in the sidebar ---
with st.sidebar:
    tab_create, tab_settings = st.tabs(["Create Puzzle", "Settings"])

    with tab_create:
        title = st.text_input("Title", "", placeholder="Enter puzzle title")
        student_name = st.text_input("Student Name (optional)", "", placeholder="Enter student name")

        r1c1, r1c2 = st.columns(2)
        with r1c1:
            grid_size = st.selectbox("Grid Size", eng.GRID_SIZES, index=1, format_func=lambda n: f"{n}x{n}")
        with r1c2:
            difficulty = st.selectbox(
                "Difficulty", eng.DIFFICULTIES,
                format_func=lambda d: "Easy (Forward only)" if d == "easy" else "Hard (All directions)",
            )

        words_text = st.text_area("Words (one per line)", "", height=200, placeholder="Enter words, one per line")
        word_file = st.file_uploader("...or load a word list", type=["txt", "csv"])
        seed = st.text_input("Seed (optional)", "")

        go = st.button("Generate Puzzle", type="primary", use_container_width=True)

    with tab_settings:
        st.caption("Output formats")
        make_png = st.checkbox("Also make PNG", value=False)
        make_pdf = st.checkbox("Also make PDF", value=True)
        make_pptx = st.checkbox("Also make PPTX", value=False)
        include_key = st.checkbox("Include answer key", value=True)

        st.caption("Answer key")
        mark_style = st.radio("Mark words with", ["highlight", "circle"], horizontal=True)
        mark_color = st.color_picker("Mark color", "#FFFF00")

        st.caption("Preview")
        size_label = st.select_slider("Preview size", options=["Small", "Medium", "Large"], value="Medium")
        PREVIEW_W = {"Small": 420, "Medium": 560, "Large": 720}[size_label]


if go:
    raw_words = eng.parse_word_lines(words_text)
    if word_file is not None:
        try:
            raw_words += eng.read_words_upload(
                word_file.name, io.TextIOWrapper(io.BytesIO(word_file.getvalue()), encoding="utf-8-sig", newline=""),
            )
        except Exception as e:
            st.error("Could not read word list")
            st.exception(e)
            st.stop()

    try:
        st.session_state["worksheet"] = eng.build_worksheet(
            title, raw_words, grid_size=grid_size, difficulty=difficulty,
            student_name=student_name, seed=seed or None,
        )
        st.toast("Word search generated successfully!")
    except eng.WorksheetError as e:
        st.error(str(e))
        st.stop()
    except Exception as e:
        st.error("Error generating word search")
        st.exception(e)
        st.stop()


ws = st.session_state.get("worksheet")
if ws is None:
    st.info("Generate a puzzle to see preview")
    st.stop()

look = svg.Appearance(solution_mark_style=mark_style, solution_mark_color=mark_color)

try:
    puz_svg = svg.render_puzzle_svg(ws, look)
    key_svg = svg.render_answer_key_svg(ws, look)
except Exception as e:
    st.error("Puzzle rendering failed")
    st.exception(e)
    st.stop()

left, right = st.columns([3, 1])
with left:
    tab_puz, tab_key = st.tabs(["Preview — Puzzle", "Preview — Answer Key"])
    with tab_puz:
        p, hp = _scale_svg_for_preview(puz_svg, PREVIEW_W)
        components.html(p, height=hp + 6, scrolling=False)
    with tab_key:
        k, hk = _scale_svg_for_preview(key_svg, PREVIEW_W)
        components.html(k, height=hk + 6, scrolling=False)

with right:
    st.subheader(f"Words to find ({len(ws.puzzle.words)}):")
    st.markdown("\n".join(f"- {w}" for w in ws.puzzle.words) or "_none_")
    if ws.dropped:
        st.warning("Could not fit: " + ", ".join(ws.dropped))

# --- ZIP / record downloads ---
try:
    bundle = export.package_worksheet(
        ws, look,
        make_png=make_png, make_pdf=make_pdf, make_pptx=make_pptx,
        include_answer_key=include_key,
    )
    st.download_button(
        "Download ZIP", data=bundle,
        file_name=eng.worksheet_filename(ws.title, include_key, ext="zip"),
        mime="application/zip",
    )
    st.download_button(
        "Save (JSON)", data=export.record_json(ws),
        file_name=eng.worksheet_filename(ws.title, ext="json"),
        mime="application/json",
    )
except Exception as e:
    st.error("Failed to package outputs")
    st.exception(e)
    st.stop()

with st.expander("Log"):
    st.text("\n".join(st.session_state.get("log", [])) or "(empty)")
