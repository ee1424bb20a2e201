import re
from datetime import datetime
from io import BytesIO
from typing import Any, Dict, List

from reportlab.lib.pagesizes import letter
from reportlab.lib.units import inch
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas as _rl_canvas

MARGIN = 0.75 * inch
HEADER_FONT_SIZE = 20
SET_FONT_SIZE = 16
SONG_FONT_SIZE = 12
SONG_SPACING = 18


class NumberedCanvas(_rl_canvas.Canvas):
    # Canvas that draws 'Printed <date>' on the left and 'Page N of M' on the right of every page.
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states = []
        self._footer_left = ""
        self._page_width = letter[0]

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_footer(total)
            super().showPage()
        super().save()

    def _draw_footer(self, total_pages: int):
        self.setFont("Helvetica", 9)
        y = max(MARGIN - 0.45 * inch, 0.3 * inch)
        if self._footer_left:
            self.drawString(MARGIN, y, self._footer_left)
        self.drawRightString(self._page_width - MARGIN, y, f"Page {self.getPageNumber()} of {total_pages}")


def pdf_filename(setlist_name: str) -> str:
    return f"{re.sub(r'[^a-z0-9]', '_', setlist_name, flags=re.IGNORECASE).lower()}_setlist.pdf"


def format_song_line(song: Dict[str, Any]) -> str:
    line = f"{song.get('title', '')} by {song.get('original_artist', '')}"
    if song.get("key_signature"):
        line += f" [{song['key_signature']}]"
    return line


def build_setlist_pdf(setlist: Dict[str, Any]) -> bytes:
    """
    Render a printable setlist.

    ``setlist["sets"]`` is the ordered list of ``{"name": ..., "songs": [...]}`` where each
    song carries ``title``, ``original_artist`` and optionally ``key_signature``.
    Every set starts on a new page; the setlist name heads every page and the
    set heading is repeated when a set overflows onto another page.
    """
    setlist_name = setlist["name"]
    sets: List[Dict[str, Any]] = setlist.get("sets") or []

    buf = BytesIO()
    c = NumberedCanvas(buf, pagesize=letter)
    c._footer_left = "Printed " + datetime.now().strftime("%b %d, %Y")
    c.setTitle(setlist_name)

    width, height = letter
    text_width = width - 2 * MARGIN
    bottom = MARGIN

    def draw_header() -> float:
        c.setFont("Helvetica-Bold", HEADER_FONT_SIZE)
        c.drawString(MARGIN, height - MARGIN, setlist_name)
        return height - MARGIN - 0.5 * inch

    def draw_set_heading(name: str, y: float) -> float:
        c.setFont("Helvetica-Bold", SET_FONT_SIZE)
        c.drawString(MARGIN, y, name)
        c.setFont("Helvetica", SONG_FONT_SIZE)
        return y - SET_FONT_SIZE - 8

    y = draw_header()
    if not sets:
        c.setFont("Helvetica-Oblique", SONG_FONT_SIZE)
        c.drawString(MARGIN, y, "This setlist has no sets yet.")

    for index, set_data in enumerate(sets):
        if index > 0:
            c.showPage()
            y = draw_header()

        y = draw_set_heading(set_data["name"], y)

        for song in set_data.get("songs", []):
            lines = simpleSplit(format_song_line(song), "Helvetica", SONG_FONT_SIZE, text_width)
            if y - SONG_SPACING * len(lines) < bottom:
                c.showPage()
                y = draw_header()
                y = draw_set_heading(set_data["name"], y)
            for line in lines:
                c.drawString(MARGIN, y, line)
                y -= SONG_SPACING

    c.showPage()
    c.save()
    return buf.getvalue()
