"""
Word (.docx) export of transcripts.

Splits plain text on blank lines and renders a heading, a generation
timestamp and one 12 pt paragraph per block using python-docx.
"""

from __future__ import annotations

import io
import logging
import re
from datetime import datetime
from pathlib import Path

from docx import Document
from docx.shared import Pt

from caseregister.core.config import get_settings
from caseregister.core.exceptions import ExportError

logger = logging.getLogger(__name__)

DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DEFAULT_TITLE = "Transcript"
BODY_FONT_SIZE = Pt(12)

_BLANK_LINE_RE = re.compile(r"\n[ \t]*\n")


def split_paragraphs(text: str) -> list[str]:
    """Split *text* on blank-line boundaries, dropping empty blocks."""
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    return [block.strip() for block in _BLANK_LINE_RE.split(normalized) if block.strip()]


def export_filename(now: datetime | None = None) -> str:
    """Return a timestamped download name, e.g. ``transcript-20260101-093000.docx``."""
    now = now or datetime.now()
    return f"transcript-{now:%Y%m%d-%H%M%S}.docx"


def export_transcript(
    text: str,
    title: str = DEFAULT_TITLE,
    generated_at: datetime | None = None,
) -> bytes:
    """Render *text* as a .docx document.

    Args:
        text: Transcript text; may be empty.
        title: Document heading.
        generated_at: Timestamp printed under the heading (defaults to now).

    Returns:
        The serialized document bytes.

    Raises:
        ExportError: If the document cannot be built or serialized.
    """
    generated_at = generated_at or datetime.now()
    try:
        document = Document()
        document.add_heading(title, level=1)
        meta = document.add_paragraph().add_run(
            f"Generated: {generated_at:%Y-%m-%d %H:%M:%S}"
        )
        meta.italic = True

        for block in split_paragraphs(text):
            run = document.add_paragraph().add_run()
            run.font.size = BODY_FONT_SIZE
            for i, line in enumerate(block.split("\n")):
                if i:
                    run.add_break()
                run.add_text(line)

        buffer = io.BytesIO()
        document.save(buffer)
    except Exception as exc:
        raise ExportError(detail=f"Error exporting document: {exc}") from exc
    return buffer.getvalue()


def save_export(
    text: str,
    output_dir: str | Path | None = None,
    title: str = DEFAULT_TITLE,
    now: datetime | None = None,
) -> Path:
    """Export *text* and write it under *output_dir* (defaults to settings).

    Returns:
        Path of the written .docx file.
    """
    now = now or datetime.now()
    directory = Path(output_dir or get_settings().exports_dir)
    data = export_transcript(text, title=title, generated_at=now)
    path = directory / export_filename(now)
    try:
        directory.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as exc:
        raise ExportError(detail=f"Failed to write file: {exc}") from exc
    logger.info("Exported transcript to %s", path)
    return path
