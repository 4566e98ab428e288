"""
WeasyPrint PDF Engine

Primary PDF engine: the QuizDocument is written out as HTML/CSS and
rendered with WeasyPrint.

Images are already embedded as data URIs, so resource loading is
restricted to ``data:`` URLs via a custom url_fetcher and the renderer
never goes to the network.
"""

import html
import logging
import os
from typing import List

from ..assets import decode_data_uri
from ..errors import RenderError
from ..document import (
    BulletList, ImageGrid, PAGE_MARGIN, QuizDocument, SingleImage, STYLES, TextBlock,
)

try:
    from weasyprint import HTML
except Exception:  # pragma: no cover - handled at runtime
    HTML = None


FONT_STACK = '"Noto Sans JP", "Noto Sans CJK JP", "IPAexGothic", "Hiragino Sans", sans-serif'


def _style_css(name: str) -> str:
    style = STYLES[name]
    left, top, right, bottom = style.margin
    rules = [
        f"font-size: {style.font_size}pt",
        f"font-weight: {'bold' if style.bold else 'normal'}",
        f"margin: {top}pt {right}pt {bottom}pt {left}pt",
    ]
    if style.color:
        rules.append(f"color: {style.color}")
    return f".{name.replace('_', '-')} {{ {'; '.join(rules)}; }}"


def render_html(document: QuizDocument) -> str:
    """Write the document as a standalone HTML page, one section per page."""
    css = "\n".join(_style_css(name) for name in STYLES)
    sections = []
    for page in document.pages:
        body = "\n".join(_render_block(item) for item in page.items)
        sections.append(f'<section class="page {page.kind}">\n{body}\n</section>')

    return f"""<!DOCTYPE html>
<html lang="ja">
<head>
<meta charset="UTF-8">
<title>{html.escape(document.title)}</title>
<style>
@page {{ size: A4; margin: {PAGE_MARGIN}pt; }}
body {{ font-family: {FONT_STACK}; }}
p {{ white-space: pre-wrap; }}
section.page + section.page {{ break-before: page; }}
table.image-grid {{ border-collapse: collapse; table-layout: fixed; margin: 5pt 0; }}
table.image-grid td {{ padding: 0; vertical-align: top; }}
img {{ margin: 5pt 0; }}
img.centered {{ display: block; margin: 5pt auto; }}
{css}
</style>
</head>
<body>
{chr(10).join(sections)}
</body>
</html>"""


def _render_block(item) -> str:
    if isinstance(item, TextBlock):
        css_class = item.style.replace('_', '-')
        return f'<p class="{css_class}">{html.escape(item.text)}</p>'

    if isinstance(item, BulletList):
        css_class = item.style.replace('_', '-')
        lis = "".join(f"<li>{html.escape(text)}</li>" for text in item.items)
        return f'<ul class="{css_class}">{lis}</ul>'

    if isinstance(item, ImageGrid):
        rows: List[str] = []
        for row in item.rows:
            cells = []
            for cell in row:
                if cell.data_uri:
                    content = f'<img src="{cell.data_uri}" style="width: {cell.width:.2f}pt">'
                elif cell.error:
                    content = f'<p class="error">{html.escape(cell.error)}</p>'
                else:
                    content = ''
                cells.append(f'<td style="width: {cell.width:.2f}pt">{content}</td>')
            rows.append(f"<tr>{''.join(cells)}</tr>")
        return f'<table class="image-grid">{"".join(rows)}</table>'

    if isinstance(item, SingleImage):
        css_class = ' class="centered"' if item.centered else ''
        return f'<img{css_class} src="{item.data_uri}" style="width: {item.width:.2f}pt">'

    raise TypeError(f"Unsupported block: {type(item).__name__}")


class WeasyPrintEngine:
    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def _data_only_fetcher(self):
        """
        Return a url_fetcher for WeasyPrint that only serves ``data:`` URIs.
        """

        def fetch(url):
            if not url.startswith('data:'):
                raise RenderError(f"Non-embedded resource blocked: {url[:80]}")
            header = url[5:].split(',', 1)[0]
            mime_type = header.split(';')[0] or None
            return {
                'string': decode_data_uri(url),
                'mime_type': mime_type,
            }

        return fetch

    def available(self) -> bool:
        """Return True if WeasyPrint is importable."""
        return HTML is not None

    def generate(self, document: QuizDocument, output_path: str) -> bool:
        """
        Generate a PDF using WeasyPrint.

        Args:
            document: The document to render
            output_path: Target PDF path
        """
        if HTML is None:
            self.logger.error("WeasyPrint is not installed. Please install 'weasyprint'.")
            return False

        try:
            html_doc = HTML(string=render_html(document), url_fetcher=self._data_only_fetcher())
            html_doc.write_pdf(output_path)

            return os.path.exists(output_path) and os.path.getsize(output_path) > 0
        except Exception as e:
            self.logger.error(f"WeasyPrint generation failed: {e}")
            return False
