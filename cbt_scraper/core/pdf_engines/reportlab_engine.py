"""
ReportLab PDF Engine

Fallback engine used when WeasyPrint (or the system libraries it needs) is
unavailable. Lays the QuizDocument out with ReportLab platypus flowables
and the built-in Japanese CID fonts.
"""

import logging
import os
from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.cidfonts import UnicodeCIDFont
from reportlab.platypus import (
    Image, ListFlowable, ListItem, PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle,
)

from ..assets import decode_data_uri
from ..document import (
    BulletList, IMAGE_ERROR, ImageGrid, PAGE_HEIGHT, PAGE_MARGIN, QuizDocument, SingleImage, STYLES, TextBlock,
)


# Japanese gothic CID font bundled with ReportLab; needs no font file on disk
FONT_NAME = 'HeiseiKakuGo-W5'

# Keep images inside one frame; taller ones are scaled down
MAX_IMAGE_HEIGHT = PAGE_HEIGHT - 2 * PAGE_MARGIN - 60


class ReportLabEngine:
    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._styles = None

    def _ensure_styles(self):
        if self._styles is not None:
            return self._styles
        if FONT_NAME not in pdfmetrics.getRegisteredFontNames():
            pdfmetrics.registerFont(UnicodeCIDFont(FONT_NAME))

        styles = {}
        for name, style in STYLES.items():
            left, top, right, bottom = style.margin
            styles[name] = ParagraphStyle(
                name,
                fontName=FONT_NAME,
                fontSize=style.font_size,
                leading=style.font_size * 1.4,
                leftIndent=left,
                rightIndent=right,
                spaceBefore=top,
                spaceAfter=bottom,
                textColor=colors.toColor(style.color) if style.color else colors.black,
            )
        self._styles = styles
        return styles

    def generate(self, document: QuizDocument, output_path: str) -> bool:
        """
        Generate a PDF using ReportLab.

        Args:
            document: The document to render
            output_path: Target PDF path
        """
        try:
            styles = self._ensure_styles()
            doc = SimpleDocTemplate(
                output_path,
                pagesize=A4,
                leftMargin=PAGE_MARGIN,
                rightMargin=PAGE_MARGIN,
                topMargin=PAGE_MARGIN,
                bottomMargin=PAGE_MARGIN,
                title=document.title,
            )
            story = []
            for index, page in enumerate(document.pages):
                if index:
                    story.append(PageBreak())
                for item in page.items:
                    story.extend(self._flowables(item, styles))
            if not story:
                # Empty run: one blank page
                story.append(Spacer(1, 1))
            doc.build(story)
            return os.path.exists(output_path) and os.path.getsize(output_path) > 0
        except Exception as e:
            self.logger.error(f"ReportLab generation failed: {e}")
            return False

    def _paragraph(self, text: str, style: ParagraphStyle) -> Paragraph:
        return Paragraph(escape(text).replace('\n', '<br/>'), style)

    def _image(self, data_uri: str, width: float):
        raw = decode_data_uri(data_uri)
        img_w, img_h = ImageReader(BytesIO(raw)).getSize()
        height = width * img_h / img_w if img_w else width
        if height > MAX_IMAGE_HEIGHT:
            width, height = width * MAX_IMAGE_HEIGHT / height, MAX_IMAGE_HEIGHT
        return Image(BytesIO(raw), width=width, height=height)

    def _safe_image(self, data_uri: str, width: float, styles):
        try:
            return self._image(data_uri, width)
        except Exception as e:
            self.logger.warning(f"Unreadable image data skipped: {e}")
            return self._paragraph(IMAGE_ERROR, styles['error'])

    def _flowables(self, item, styles) -> list:
        if isinstance(item, TextBlock):
            return [self._paragraph(item.text, styles[item.style])]

        if isinstance(item, BulletList):
            style = styles[item.style]
            entries = [ListItem(self._paragraph(text, style)) for text in item.items]
            return [ListFlowable(entries, bulletType='bullet', start='•', leftIndent=style.leftIndent + 10)]

        if isinstance(item, ImageGrid):
            data = []
            for row in item.rows:
                cells = []
                for cell in row:
                    if cell.data_uri:
                        cells.append(self._safe_image(cell.data_uri, cell.width, styles))
                    elif cell.error:
                        cells.append(self._paragraph(cell.error, styles['error']))
                    else:
                        cells.append('')
                data.append(cells)
            table = Table(data, colWidths=[cell.width for cell in item.rows[0]], hAlign='LEFT')
            table.setStyle(TableStyle([
                ('VALIGN', (0, 0), (-1, -1), 'TOP'),
                ('LEFTPADDING', (0, 0), (-1, -1), 0),
                ('RIGHTPADDING', (0, 0), (-1, -1), 0),
                ('TOPPADDING', (0, 0), (-1, -1), 5),
                ('BOTTOMPADDING', (0, 0), (-1, -1), 5),
            ]))
            return [table]

        if isinstance(item, SingleImage):
            flowable = self._safe_image(item.data_uri, item.width, styles)
            if isinstance(flowable, Image) and item.centered:
                flowable.hAlign = 'CENTER'
            return [flowable]

        raise TypeError(f"Unsupported block: {type(item).__name__}")
