"""
PDF Generation Module (WeasyPrint-backed)

Writes a built QuizDocument to a PDF file using WeasyPrint as the primary
engine and ReportLab when WeasyPrint is missing or fails.
"""

import logging
import os

from .document import QuizDocument
from .pdf_engines.reportlab_engine import ReportLabEngine
from .pdf_engines.weasyprint_engine import WeasyPrintEngine


class PDFGenerator:
    """Generates the question PDF from a QuizDocument."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self.engine = WeasyPrintEngine()
        self.fallback = ReportLabEngine()

    def generate_pdf(self, document: QuizDocument, output_path: str) -> bool:
        """
        Render the whole document and write it to ``output_path`` in one go.

        Args:
            document: Fully built document
            output_path: Target PDF path, overwritten if it exists

        Returns:
            True if a non-empty PDF was written
        """
        try:
            os.makedirs(os.path.dirname(os.path.abspath(output_path)), exist_ok=True)
        except OSError as e:
            self.logger.error(f"Failed to generate PDF {output_path}: {e}")
            return False

        if self.engine.available():
            if self.engine.generate(document, output_path):
                self.logger.info(f"Successfully generated PDF: {output_path}")
                return True
            self.logger.error("WeasyPrint failed; attempting ReportLab fallback")
        else:
            self.logger.info("WeasyPrint not available; using ReportLab")

        if self.fallback.generate(document, output_path):
            self.logger.info(f"Successfully generated PDF: {output_path}")
            return True

        self.logger.error(f"Failed to generate PDF {output_path}")
        return False
