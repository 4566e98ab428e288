"""
In-memory document model for the question PDF.

The DocumentBuilder turns scraped QuestionRecords into a QuizDocument: a
question page and, when the record has one, an explanation page per
record. Images are downloaded while the document is built, so the PDF
engines only lay out what is already here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

from .assets import ImageFetcher
from .models import QuestionRecord


# A4 portrait with 40pt margins
PAGE_WIDTH = 595.28
PAGE_HEIGHT = 841.89
PAGE_MARGIN = 40
AVAILABLE_WIDTH = PAGE_WIDTH - 2 * PAGE_MARGIN  # 515.28

MAX_COLUMNS = 3
PROBLEM_IMAGE_WIDTH = 200
EXPLANATION_IMAGE_WIDTH = 150
BASIC_SINGLE_IMAGE_WIDTH = 200

HEADER_EXPLANATION = "解説"
HEADER_ANALYSIS = "選択肢考察"
HEADER_ANSWER = "正解"
HEADER_POINTS = "ポイント"
HEADER_BASIC = "基本情報"

IMAGE_ERROR = "画像読み込みエラー"
PROBLEM_IMAGE_ERROR = "問題画像読み込みエラー"
EXPLANATION_IMAGE_ERROR = "解説画像読み込みエラー"
BASIC_IMAGE_ERROR = "基本情報画像読み込みエラー"


@dataclass(frozen=True)
class TextStyle:
    font_size: float
    bold: bool = False
    color: Optional[str] = None
    margin: Tuple[float, float, float, float] = (0, 0, 0, 0)  # left, top, right, bottom


STYLES = {
    'header': TextStyle(12, bold=True, margin=(0, 0, 0, 10)),
    'question': TextStyle(10.5, margin=(0, 5, 0, 5)),
    'choices': TextStyle(10.5, margin=(15, 2, 0, 2)),
    'explanation_header': TextStyle(12, bold=True, margin=(0, 15, 0, 5)),
    'analysis': TextStyle(12, margin=(15, 0, 0, 5)),
    'correct_answer': TextStyle(10.5, bold=True, margin=(0, 5, 0, 5)),
    'points': TextStyle(10.5, margin=(15, 0, 0, 15)),
    'error': TextStyle(10.5, color='red', margin=(0, 5, 0, 5)),
}


@dataclass
class TextBlock:
    text: str
    style: str


@dataclass
class BulletList:
    items: List[str]
    style: str = 'choices'


@dataclass
class GridCell:
    data_uri: Optional[str] = None
    width: float = 0
    error: Optional[str] = None

    @property
    def is_padding(self) -> bool:
        return self.data_uri is None and self.error is None


@dataclass
class ImageGrid:
    rows: List[List[GridCell]]

    @property
    def columns(self) -> int:
        return len(self.rows[0]) if self.rows else 0


@dataclass
class SingleImage:
    data_uri: str
    width: float
    centered: bool = True


Block = Union[TextBlock, BulletList, ImageGrid, SingleImage]


@dataclass
class PageBlock:
    kind: str  # 'question' | 'explanation'
    items: List[Block] = field(default_factory=list)

    def texts(self) -> List[str]:
        """All text shown on the page, in order."""
        out = []
        for item in self.items:
            if isinstance(item, TextBlock):
                out.append(item.text)
            elif isinstance(item, BulletList):
                out.extend(item.items)
            elif isinstance(item, ImageGrid):
                out.extend(c.error for row in item.rows for c in row if c.error)
        return out


@dataclass(frozen=True)
class QuizDocument:
    title: str
    pages: Tuple[PageBlock, ...]


class DocumentBuilder:
    """Builds a QuizDocument from scraped records."""

    def __init__(self, image_fetcher: ImageFetcher, available_width: float = AVAILABLE_WIDTH):
        self.image_fetcher = image_fetcher
        self.available_width = available_width
        self.logger = logging.getLogger(__name__)

    def build(self, records: Sequence[QuestionRecord], title: str = "") -> QuizDocument:
        pages: List[PageBlock] = []
        for record in records:
            pages.append(self.build_question_page(record))
            explanation_page = self.build_explanation_page(record)
            if explanation_page is not None:
                pages.append(explanation_page)
        self.logger.info(f"Built document with {len(pages)} pages from {len(records)} questions")
        return QuizDocument(title=title, pages=tuple(pages))

    def build_question_page(self, record: QuestionRecord) -> PageBlock:
        page = PageBlock('question')
        page.items.append(TextBlock(f"問題番号: {record.problem_number}", 'header'))
        page.items.append(TextBlock(record.question_text, 'question'))

        if record.problem_image_srcs:
            self._append_grid(page, record.problem_image_srcs, PROBLEM_IMAGE_WIDTH, PROBLEM_IMAGE_ERROR)

        if record.choices:
            page.items.append(BulletList(list(record.choices)))
        return page

    def build_explanation_page(self, record: QuestionRecord) -> Optional[PageBlock]:
        explanation = record.explanation
        if explanation is None:
            return None

        page = PageBlock('explanation')
        page.items.append(TextBlock(HEADER_EXPLANATION, 'explanation_header'))
        if explanation.explanation_image_srcs:
            self._append_grid(page, explanation.explanation_image_srcs,
                              EXPLANATION_IMAGE_WIDTH, EXPLANATION_IMAGE_ERROR)

        page.items.append(TextBlock(HEADER_ANALYSIS, 'explanation_header'))
        page.items.append(TextBlock(explanation.analysis_text, 'analysis'))

        if explanation.correct_answer.strip():
            page.items.append(TextBlock(HEADER_ANSWER, 'explanation_header'))
            page.items.append(TextBlock(explanation.correct_answer, 'correct_answer'))

        if explanation.points_text.strip():
            page.items.append(TextBlock(HEADER_POINTS, 'explanation_header'))
            page.items.append(TextBlock(explanation.points_text, 'points'))

        basic = record.basic
        if basic is not None:
            page.items.append(TextBlock(HEADER_BASIC, 'explanation_header'))
            page.items.append(TextBlock(basic.text_content, 'analysis'))
            if len(basic.images) == 1:
                data_uri = self.image_fetcher.fetch_data_uri(basic.images[0])
                if data_uri:
                    page.items.append(SingleImage(data_uri, BASIC_SINGLE_IMAGE_WIDTH))
                else:
                    page.items.append(TextBlock(BASIC_IMAGE_ERROR, 'error'))
            elif basic.images:
                self._append_grid(page, basic.images, EXPLANATION_IMAGE_WIDTH, BASIC_IMAGE_ERROR)
        return page

    def build_image_grid(self, srcs: Sequence[str], default_width: float) -> Optional[ImageGrid]:
        """
        Lay images out at most three per row.

        A lone image keeps ``default_width`` and yields None when it cannot
        be downloaded. With several images every cell is a third of the
        available width, a failed download becomes an error cell, and short
        rows are padded with empty cells.
        """
        if not srcs:
            return None

        if len(srcs) == 1:
            data_uri = self.image_fetcher.fetch_data_uri(srcs[0])
            if not data_uri:
                return None
            return ImageGrid([[GridCell(data_uri=data_uri, width=default_width)]])

        cell_width = self.available_width / MAX_COLUMNS
        rows = []
        for start in range(0, len(srcs), MAX_COLUMNS):
            row = []
            for src in srcs[start:start + MAX_COLUMNS]:
                data_uri = self.image_fetcher.fetch_data_uri(src)
                if data_uri:
                    row.append(GridCell(data_uri=data_uri, width=cell_width))
                else:
                    row.append(GridCell(width=cell_width, error=IMAGE_ERROR))
            while len(row) < MAX_COLUMNS:
                row.append(GridCell(width=cell_width))
            rows.append(row)
        return ImageGrid(rows)

    def _append_grid(self, page: PageBlock, srcs: Sequence[str], default_width: float, error_text: str):
        grid = self.build_image_grid(srcs, default_width)
        if grid is not None:
            page.items.append(grid)
        else:
            page.items.append(TextBlock(error_text, 'error'))
