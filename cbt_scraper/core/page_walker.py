"""
Question Page Traversal Module

This module downloads question pages with the authenticated session and
follows each page's "skip to next" link, one page at a time.
"""

import requests
from typing import Iterator, Optional
import logging

from .errors import PageFetchError
from .models import QuestionRecord
from .question_extractor import QuestionExtractor


class PageWalker:
    """
    Walks the chain of question pages.

    Requests are strictly sequential and use the session returned by the
    Authenticator, so the login cookies go with every page request.
    """

    def __init__(self,
                 session: requests.Session,
                 extractor: QuestionExtractor,
                 timeout: Optional[float] = 30.0):
        """
        Initialize the page walker.

        Args:
            session: Authenticated HTTP session
            extractor: Parser turning page HTML into QuestionRecords
            timeout: Per-request timeout in seconds
        """
        self.session = session
        self.extractor = extractor
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    def fetch_record(self, page_url: str) -> QuestionRecord:
        """
        Download one question page and extract its record.

        Args:
            page_url: URL of the question page

        Returns:
            The extracted QuestionRecord

        Raises:
            PageFetchError: On network errors or a non-2xx response
            ExtractionError: If the HTML cannot be parsed
        """
        self.logger.debug(f"Fetching question page: {page_url}")
        try:
            response = self.session.get(page_url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise PageFetchError(f"Request error: {e}", url=page_url) from e

        if not response.ok:
            raise PageFetchError(f"HTTP error: {response.status_code}", url=page_url,
                                 status_code=response.status_code)

        self.logger.debug(f"Retrieved {len(response.content)} bytes from {page_url}")
        return self.extractor.extract(response.text, page_url)

    def walk(self, start_url: str, max_pages: int) -> Iterator[QuestionRecord]:
        """
        Yield records for at most ``max_pages`` pages starting at ``start_url``.

        Traversal ends early after a page without a next link. A fetch or
        parse error propagates out of the generator and ends it; records
        yielded before that are unaffected.
        """
        current_url = start_url
        for index in range(1, max_pages + 1):
            self.logger.info(f"Scraping question {index}: {current_url}")
            record = self.fetch_record(current_url)
            yield record

            if record.is_last:
                self.logger.info("No next question link found, stopping")
                return
            current_url = record.next_url

        self.logger.info(f"Reached the page limit of {max_pages}")
