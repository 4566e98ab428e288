"""
Exception types raised at the seams of the scrape-and-render pipeline.

The controller is the only place that catches these; components raise them
and let the controller decide whether the run, the traversal, or nothing
at all has to stop.
"""


class ScraperError(Exception):
    """Base exception for all scraper errors."""
    pass


class ConfigurationError(ScraperError):
    """Raised when the run configuration is invalid."""
    pass


class AuthenticationError(ScraperError):
    """Raised when no usable authenticated session could be established."""
    pass


class PageFetchError(ScraperError):
    """Raised when a question page cannot be downloaded."""

    def __init__(self, message: str, url: str = None, status_code: int = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ExtractionError(ScraperError):
    """Raised when a downloaded question page cannot be parsed."""
    pass


class RenderError(ScraperError):
    """Raised when the PDF document cannot be produced."""
    pass
