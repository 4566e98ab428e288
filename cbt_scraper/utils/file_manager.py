"""
File Management Utilities

Resolves where the generated PDF goes. Renders are written to a temporary
file first and only moved onto the final name once they succeeded.
"""

import os
from pathlib import Path
from typing import Optional
import logging


class FileManager:
    """
    Manages the output location of the question PDF.

    The PDF is named after the configured file name and written into the
    output directory (the current working directory by default).
    """

    def __init__(self, base_output_dir: str = "."):
        """
        Initialize the file manager.

        Args:
            base_output_dir: Directory the PDF is written to
        """
        self.base_output_dir = Path(base_output_dir)
        self.logger = logging.getLogger(__name__)

    def get_pdf_path(self, file_name: str) -> str:
        """
        Get the full path of the PDF for ``file_name``.

        Args:
            file_name: Configured output name, without extension

        Returns:
            Path ending in ``<file_name>.pdf``
        """
        return str(self.base_output_dir / f"{file_name}.pdf")

    def pdf_size(self, file_name: str) -> Optional[int]:
        """Size in bytes of an existing PDF, or None if there is none."""
        path = self.get_pdf_path(file_name)
        if not os.path.exists(path):
            return None
        return os.path.getsize(path)

    def get_temp_path(self, file_name: str) -> str:
        """
        Path a render is written to before it replaces the real PDF.

        It lives in the output directory so the final move stays on one
        filesystem.
        """
        return str(self.base_output_dir / f".{file_name}.pdf.part")

    def commit(self, temp_path: str, file_name: str) -> str:
        """
        Move a finished render onto ``<file_name>.pdf``, replacing any
        earlier PDF of the same name.

        Returns:
            Path of the final PDF
        """
        path = self.get_pdf_path(file_name)
        os.replace(temp_path, path)
        self.logger.debug(f"Moved {temp_path} to {path}")
        return path

    def discard(self, temp_path: str) -> None:
        """
        Delete the temporary file left behind by a failed render.

        The PDF of an earlier run is never touched.
        """
        try:
            if os.path.exists(temp_path):
                os.remove(temp_path)
                self.logger.debug(f"Removed partial output: {temp_path}")
        except OSError as e:
            self.logger.error(f"Failed to remove partial output {temp_path}: {e}")
