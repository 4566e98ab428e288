"""
URL Validation Utilities

This module provides URL validation and normalization functions used when
loading the run configuration and when turning scraped image and link
attributes into absolute URLs.
"""

import re
from urllib.parse import urlparse, urljoin
from typing import Iterable, List, Tuple, Optional
import logging


class URLValidator:
    """
    Validates configured URLs and normalizes URLs found in scraped pages.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

        # Patterns for common URL formats
        self.domain_pattern = re.compile(
            r'^[a-zA-Z0-9]([a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?(\.[a-zA-Z0-9]([a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?)*$'
        )

    def validate(self, url: str) -> Tuple[bool, str]:
        """
        Validate an absolute http(s) URL from the configuration.

        Args:
            url: The URL to validate

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not url or not isinstance(url, str) or not url.strip():
            return False, "URL cannot be empty"

        try:
            parsed = urlparse(url.strip())

            if parsed.scheme not in ['http', 'https']:
                return False, "URL must use HTTP or HTTPS protocol"

            if not parsed.netloc:
                return False, "URL must have a valid domain"

            # Remove port if present for domain validation
            domain = parsed.netloc.lower().split(':')[0]

            if not self.domain_pattern.match(domain):
                return False, "Invalid domain format"

            return True, ""

        except Exception as e:
            return False, f"URL validation error: {str(e)}"

    def normalize_image_src(self, src: str, page_url: str) -> str:
        """
        Turn an ``img`` ``src`` attribute into an absolute URL.

        Protocol-relative sources get ``https:``; anything that does not
        already start with ``http`` is resolved against the page URL.

        Args:
            src: Raw attribute value
            page_url: URL of the page the image was found on

        Returns:
            Absolute URL
        """
        if src.startswith('//'):
            return 'https:' + src
        if not src.startswith('http'):
            return urljoin(page_url, src)
        return src

    def resolve_link(self, href: str, site_origin: str) -> str:
        """
        Resolve a "next" link. Site-relative links are prefixed with the
        site origin; an absent link stays empty.
        """
        if not href:
            return ""
        if not href.startswith('http'):
            return site_origin.rstrip('/') + href
        return href

    def extract_origin(self, url: str) -> Optional[str]:
        """
        Extract ``scheme://host`` from a URL.

        Args:
            url: The URL to extract the origin from

        Returns:
            Origin string, or None if extraction fails
        """
        try:
            parsed = urlparse(url)
            if not parsed.scheme or not parsed.netloc:
                return None
            return f"{parsed.scheme}://{parsed.netloc}"
        except Exception:
            return None


def unique_in_order(urls: Iterable[str]) -> List[str]:
    """Drop repeated URLs, keeping the first occurrence of each."""
    return list(dict.fromkeys(urls))


# Global validator instance
_validator_instance: Optional[URLValidator] = None


def get_validator() -> URLValidator:
    """
    Get the global URL validator instance.

    Returns:
        URLValidator instance
    """
    global _validator_instance
    if _validator_instance is None:
        _validator_instance = URLValidator()
    return _validator_instance


def validate_url(url: str) -> Tuple[bool, str]:
    """
    Validate a configured URL.

    Args:
        url: URL to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    return get_validator().validate(url)


def normalize_image_src(src: str, page_url: str) -> str:
    """Convenience wrapper around URLValidator.normalize_image_src."""
    return get_validator().normalize_image_src(src, page_url)


def normalize_image_srcs(srcs: Iterable[str], page_url: str) -> List[str]:
    """Normalize a sequence of ``src`` values and drop duplicates."""
    return unique_in_order(normalize_image_src(s, page_url) for s in srcs if s)
