"""
Scraper Orchestrator: runs the end-to-end pipeline.

Login, then walk the question pages, then render everything collected into
one PDF. Each stage starts only after the previous one has finished.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from .assets import ImageFetcher
from .authenticator import Authenticator
from .config import ScrapeConfig
from .document import DocumentBuilder
from .errors import AuthenticationError, ExtractionError, PageFetchError, RenderError
from .logger import ErrorTracker
from .models import QuestionRecord
from .page_walker import PageWalker
from .pdf_generator import PDFGenerator
from .question_extractor import QuestionExtractor
from ..utils.file_manager import FileManager


class ScraperController:
    def __init__(self, config: ScrapeConfig, session=None, logger: Optional[logging.Logger] = None):
        """
        Args:
            config: Validated run configuration
            session: HTTP session to log in with; a new one is created if omitted
            logger: Logger to report through
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.errors = ErrorTracker(self.logger)
        self.authenticator = Authenticator(session=session, timeout=config.request_timeout)
        self.extractor = QuestionExtractor(site_origin=config.site_origin)
        self.pdf = PDFGenerator()
        self.files = FileManager(config.output_dir)

    def run(self, progress: Optional[Callable[[object], None]] = None) -> Dict[str, Any]:
        """Run login, traversal and rendering; return run statistics."""
        stats: Dict[str, Any] = {
            "authenticated": False,
            "scraped": 0,
            "pages": 0,
            "images_failed": 0,
            "pdf_written": False,
            "pdf_path": None,
        }

        # Stage 1: Login
        if progress:
            progress({"type": "stage", "stage": "login"})
        try:
            session = self.authenticator.authenticate(self.config.login_url,
                                                      self.config.email,
                                                      self.config.password)
        except AuthenticationError as e:
            self.errors.log_error(e, context="login", url=self.config.login_url)
            self.logger.error("Login failed, aborting run")
            self.authenticator.close()
            stats["errors"] = self.errors.get_error_summary()
            return stats
        stats["authenticated"] = True

        try:
            # Stage 2: Scrape
            records = self.collect_records(session, progress)
            stats["scraped"] = len(records)

            if not records:
                self.errors.log_warning("No questions were scraped; writing an empty document",
                                        context="scrape", url=self.config.start_url)

            # Stage 3: Render
            if progress:
                progress({"type": "stage", "stage": "render", "questions": len(records)})
            fetcher = ImageFetcher(session, timeout=self.config.request_timeout)
            document = DocumentBuilder(fetcher).build(records, title=self.config.file_name)
            stats["pages"] = len(document.pages)
            stats["images_failed"] = len(fetcher.failed)
            for url, reason in fetcher.failed.items():
                self.errors.log_warning(f"Image replaced by placeholder: {reason}", context="render", url=url)

            self.write_pdf(document, stats)
        finally:
            self.authenticator.close()

        if progress:
            progress({"type": "counters", "stats": dict(stats)})
        stats["errors"] = self.errors.get_error_summary()
        return stats

    def write_pdf(self, document, stats: Dict[str, Any]) -> None:
        """
        Render into a temporary file and move it onto ``<file_name>.pdf``.

        On failure the temporary file is removed and a PDF left by an
        earlier run stays as it was.
        """
        file_name = self.config.file_name
        temp_path = self.files.get_temp_path(file_name)
        if not self.pdf.generate_pdf(document, temp_path):
            self.files.discard(temp_path)
            self.errors.log_warning("PDF could not be written", context="render",
                                    url=self.files.get_pdf_path(file_name))
            return

        try:
            pdf_path = self.files.commit(temp_path, file_name)
        except OSError as e:
            self.files.discard(temp_path)
            self.errors.log_error(RenderError(f"Cannot move rendered PDF into place: {e}"),
                                  context="render", url=self.files.get_pdf_path(file_name))
            return

        stats["pdf_written"] = True
        stats["pdf_path"] = pdf_path
        self.logger.info(f"PDF written: {pdf_path} ({self.files.pdf_size(file_name)} bytes)")

    def collect_records(self, session, progress: Optional[Callable[[object], None]] = None) -> List[QuestionRecord]:
        """
        Walk the question chain and keep every record scraped.

        A fetch or parse failure ends the traversal; the records collected
        until then are returned.
        """
        walker = PageWalker(session, self.extractor, timeout=self.config.request_timeout)
        records: List[QuestionRecord] = []
        try:
            for record in walker.walk(self.config.start_url, self.config.page_count):
                records.append(record)
                if progress:
                    progress({"type": "question", "index": len(records), "number": record.problem_number})
        except (PageFetchError, ExtractionError) as e:
            self.errors.log_error(e, context=f"scrape question {len(records) + 1}")
            self.logger.error(f"Scraping stopped after {len(records)} questions")
        return records
