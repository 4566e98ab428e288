"""
Image download utilities.

Question and explanation images are downloaded with the scraper's session
and embedded in the document as base64 ``data:`` URIs, so the PDF engines
never touch the network.
"""

from __future__ import annotations

import base64
import logging
from typing import Dict, Optional

import requests


DEFAULT_IMAGE_TYPE = 'image/jpeg'


def to_data_uri(content: bytes, mime: str) -> str:
    b64 = base64.b64encode(content).decode('ascii')
    return f"data:{mime};base64,{b64}"


def decode_data_uri(data_uri: str) -> bytes:
    """Return the payload of a base64 ``data:`` URI."""
    header, _, payload = data_uri.partition(',')
    if ';base64' not in header:
        raise ValueError("Only base64 data URIs are supported")
    return base64.b64decode(payload)


class ImageFetcher:
    """
    Downloads images and returns them as data URIs.

    Failures are logged and reported as None; the caller renders a
    placeholder instead of the image.
    """

    def __init__(self, session: requests.Session, timeout: Optional[float] = 30.0):
        self.logger = logging.getLogger(__name__)
        self.session = session
        self.timeout = timeout
        self.failed: Dict[str, str] = {}  # url -> reason

    def fetch_data_uri(self, src: str) -> Optional[str]:
        """
        Download ``src`` and convert it to a data URI.

        Args:
            src: Absolute image URL, or an existing data URI

        Returns:
            The data URI, or None if the image could not be downloaded
        """
        if src.startswith('data:'):
            return src
        try:
            resp = self.session.get(src, timeout=self.timeout)
            if not resp.ok:
                self.logger.warning(f"Failed to download image: {src} (status {resp.status_code})")
                self.failed[src] = f"status {resp.status_code}"
                return None
            mime = resp.headers.get('content-type') or DEFAULT_IMAGE_TYPE
            return to_data_uri(resp.content, mime.split(';')[0].strip())
        except requests.exceptions.RequestException as e:
            self.logger.warning(f"Failed to download image: {src} ({e})")
            self.failed[src] = str(e)
            return None
