"""
Export Service

Renders a finished Frame (and the session transcript) as plain text and
as a one-page PDF built with fpdf2.
"""

import base64
import logging
from typing import Optional

from fpdf import FPDF

from framing.models.frame import Frame
from framing.models.messages import TranscriptEntry
from framing.models.schemas import ExportBundle
from framing.models.session_state import FramingState

logger = logging.getLogger("framing.export")

SPEAKER_LABELS = {"student": "Student", "tutor": "Tutor"}

# Core PDF fonts are Latin-1 only
_PDF_REPLACEMENTS = {
    "–": "-", "—": "-", "‘": "'", "’": "'", "“": '"', "”": '"', "…": "...",
}


def _pdf_safe(text: str) -> str:
    for source, target in _PDF_REPLACEMENTS.items():
        text = text.replace(source, target)
    return text.encode("latin-1", "replace").decode("latin-1")


class FramePDF(FPDF):
    def __init__(self, title: str):
        super().__init__()
        self.doc_title = title

    def header(self):
        self.set_font("Helvetica", "B", 10)
        self.set_text_color(100, 100, 100)
        self.cell(0, 8, _pdf_safe(self.doc_title), align="R")
        self.ln(10)

    def footer(self):
        self.set_y(-15)
        self.set_font("Helvetica", "I", 8)
        self.set_text_color(128, 128, 128)
        self.cell(0, 10, f"Page {self.page_no()}/{{nb}}", align="C")

    def section_title(self, title, size=14):
        self.set_font("Helvetica", "B", size)
        self.set_text_color(30, 30, 30)
        self.cell(0, 10, _pdf_safe(title))
        self.ln(11)

    def body_text(self, text, indent=0):
        self.set_font("Helvetica", "", 11)
        self.set_text_color(40, 40, 40)
        if indent:
            self.set_x(self.l_margin + indent)
        self.multi_cell(0, 6, _pdf_safe(text))
        self.ln(2)


class ExportService:
    """Builds the text and PDF renderings offered once the Frame is complete."""

    def __init__(self, title: str = "My Frame"):
        self.title = title

    def frame_text(self, frame: Frame) -> str:
        lines = [
            f"Key Topic: {frame.key_topic}",
            f"Is About: {frame.is_about}",
            "",
            "Main Ideas:",
        ]
        for index, idea in enumerate(frame.main_ideas):
            lines.append(f"{index + 1}. {idea}")
            for detail in frame.details_for(index):
                lines.append(f"   - {detail}")
        lines.extend(["", f"So What? {frame.so_what}"])
        return "\n".join(lines)

    def transcript_text(self, transcript: list[TranscriptEntry]) -> str:
        return "\n".join(f"{SPEAKER_LABELS[entry.speaker]}: {entry.text}" for entry in transcript)

    def render_pdf(self, frame: Frame) -> bytes:
        pdf = FramePDF(self.title)
        pdf.add_page()
        pdf.section_title(f"Key Topic: {frame.key_topic}", size=16)
        pdf.body_text(f"Is About: {frame.is_about}")

        pdf.section_title("Main Ideas")
        for index, idea in enumerate(frame.main_ideas):
            pdf.body_text(f"{index + 1}. {idea}")
            for detail in frame.details_for(index):
                pdf.body_text(f"- {detail}", indent=8)

        pdf.section_title("So What?")
        pdf.body_text(frame.so_what)
        return bytes(pdf.output())

    def build(self, state: FramingState, export_intent: Optional[str] = None) -> ExportBundle:
        """
        Render the state's Frame and transcript.

        Callers only build exports for a complete Frame; an incomplete one
        still renders, with empty sections.
        """
        frame = state.frame
        document = self.render_pdf(frame)
        logger.info(f"Rendered export: {len(frame.main_ideas)} main ideas, {len(document)} PDF bytes")
        return ExportBundle(
            frame_text=self.frame_text(frame),
            transcript_text=self.transcript_text(state.transcript),
            rendered_document=base64.b64encode(document).decode("ascii"),
            export_intent=export_intent or state.export_intent,
        )
