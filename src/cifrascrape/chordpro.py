"""ChordPro formatter for scraped chord sheets.

A :class:`~cifrascrape.models.ChordSheet` already carries its chords inline
in bracket notation (``Intro: [G] [D]``), which is ChordPro's own chord
syntax, so rendering only adds the metadata directives:

+-----------------------+--------------------------------+
| ChordSheet field      | Directive                      |
+=======================+================================+
| ``song``              | ``{title: ...}``               |
+-----------------------+--------------------------------+
| ``artist``            | ``{artist: ...}``              |
+-----------------------+--------------------------------+
| ``video_id``          | ``{meta: youtube <id>}``       |
|                       | (only when present)            |
+-----------------------+--------------------------------+

Usage::

    from cifrascrape.chordpro import ChordProFormatter
    text = ChordProFormatter().render(sheet)
    Path("output.cho").write_text(text)
"""

from .models import ChordSheet


class ChordProFormatter:
    """Render a :class:`~cifrascrape.models.ChordSheet` to ChordPro text."""

    def render(self, sheet: ChordSheet) -> str:
        """Return ChordPro text for *sheet*.

        The returned string ends with a single newline and uses Unix line
        endings (``\\n``) throughout.
        """
        parts: list[str] = []

        # --- Metadata block ---
        if sheet.song:
            parts.append(f"{{title: {sheet.song}}}")
        if sheet.artist:
            parts.append(f"{{artist: {sheet.artist}}}")
        if sheet.video_id:
            parts.append(f"{{meta: youtube {sheet.video_id}}}")

        # --- Body ---
        body = _clean_body(sheet.content)
        if parts:
            parts.append("")
        parts.extend(body)

        return "\n".join(parts).rstrip("\n") + "\n"


def _clean_body(content: str) -> list[str]:
    """Split content into lines, drop trailing spaces and surrounding blank lines."""
    lines = [line.rstrip() for line in content.replace("\r\n", "\n").split("\n")]
    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    return lines
