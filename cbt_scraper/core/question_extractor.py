"""
Question Page Extraction Module

This module turns the HTML of one practice-question page into a
QuestionRecord: problem number, question text, images, choices, the
explanation accordion, the optional "basic facts" box and the link to the
next question.
"""

from bs4 import BeautifulSoup, Comment, NavigableString, Tag
import re
import logging
from typing import List, Optional, Tuple

from .errors import ExtractionError
from .models import BasicFacts, Explanation, QuestionRecord, EXTRACTION_FAILED
from ..utils.validators import get_validator, normalize_image_srcs


# Labels of the bold-underlined markers (<b><u>...</u></b>) that split the
# explanation body into sections
MARKER_ANALYSIS = '選択肢考察'
MARKER_ANSWER = '正解'
MARKER_POINTS = 'ポイント'
MARKERS = (MARKER_ANALYSIS, MARKER_ANSWER, MARKER_POINTS)

PROBLEM_NUMBER_PREFIX = '問題番号 :'

# Answer notation the site uses; anything else leaves the answer empty
CORRECT_ANSWER_PATTERN = re.compile(r'[:：]?\s*([A-E○×]+)')
LEADING_COLON_PATTERN = re.compile(r'^[:：]')


class QuestionExtractor:
    """
    Extracts a QuestionRecord from a question page.

    All lookups are CSS selectors against the site's fixed page layout.
    Missing fields fall back to sentinels instead of raising.
    """

    SELECTORS = {
        'problem_number': '.d-issue__content__num p',
        'question_body': '#question-body',
        'question_text': '#question-body p',
        'choices': '#practice_question_choice li button',
        'explanation_container': '.d-issue__expound .d-issue__expound__accordion_content',
        'explanation_body': '#question-explanation',
        'basic_container': '#accordion_expound_base',
        'basic_box': '.marker_basic .d-issue__expound__box',
        'basic_gallery_images': '.js-lightgallery img',
        'next_link': 'a.o-btn.is-grey.is-triangle_g',
    }

    def __init__(self, site_origin: str):
        """
        Args:
            site_origin: ``scheme://host`` prefixed to site-relative next links
        """
        self.site_origin = site_origin
        self.logger = logging.getLogger(__name__)

    def extract(self, html_content: str, page_url: str) -> QuestionRecord:
        """
        Parse one question page.

        Args:
            html_content: Raw page HTML
            page_url: URL the page was downloaded from (for relative images)

        Returns:
            The extracted QuestionRecord

        Raises:
            ExtractionError: If the page cannot be parsed at all
        """
        try:
            soup = BeautifulSoup(html_content, 'lxml')

            record = QuestionRecord(
                problem_number=self._extract_problem_number(soup),
                question_text=self._extract_question_text(soup),
                problem_image_srcs=self._extract_problem_images(soup, page_url),
                choices=self._extract_choices(soup),
                explanation=self._extract_explanation(soup, page_url),
                basic=self._extract_basic_facts(soup, page_url),
                next_url=self._extract_next_url(soup),
            )
        except Exception as e:
            raise ExtractionError(f"Failed to parse question page {page_url}: {e}") from e

        self.logger.debug(
            f"Extracted problem {record.problem_number}: {len(record.choices)} choices, "
            f"{len(record.problem_image_srcs)} images, "
            f"explanation={'yes' if record.explanation else 'no'}, basic={'yes' if record.basic else 'no'}"
        )
        return record

    def _extract_problem_number(self, soup: BeautifulSoup) -> str:
        text = ''.join(el.get_text() for el in soup.select(self.SELECTORS['problem_number']))
        number = text.replace(PROBLEM_NUMBER_PREFIX, '', 1).strip()
        return number or EXTRACTION_FAILED

    def _extract_question_text(self, soup: BeautifulSoup) -> str:
        text = ''.join(p.get_text() for p in soup.select(self.SELECTORS['question_text'])).strip()
        return text or EXTRACTION_FAILED

    def _extract_problem_images(self, soup: BeautifulSoup, page_url: str) -> List[str]:
        body = soup.select_one(self.SELECTORS['question_body'])
        if body is None or body.parent is None:
            return []
        return normalize_image_srcs((img.get('src') for img in body.parent.find_all('img')), page_url)

    def _extract_choices(self, soup: BeautifulSoup) -> List[str]:
        return [button.get_text().strip() for button in soup.select(self.SELECTORS['choices'])]

    def _extract_explanation(self, soup: BeautifulSoup, page_url: str) -> Optional[Explanation]:
        container = soup.select_one(self.SELECTORS['explanation_container'])
        if container is None:
            return None

        srcs = []
        for img in container.find_all('img'):
            # Basic-facts images belong to their own block
            if img.find_parent(id='accordion_expound_base') or img.find_parent(class_='marker_basic'):
                continue
            srcs.append(img.get('src'))

        body = soup.select_one(self.SELECTORS['explanation_body'])
        analysis, answer, points = parse_explanation_sections(body)

        return Explanation(
            explanation_image_srcs=normalize_image_srcs(srcs, page_url),
            analysis_text=analysis,
            correct_answer=answer,
            points_text=points,
        )

    def _extract_basic_facts(self, soup: BeautifulSoup, page_url: str) -> Optional[BasicFacts]:
        container = soup.select_one(self.SELECTORS['basic_container'])
        if container is None:
            return None
        boxes = container.select(self.SELECTORS['basic_box'])
        if not boxes:
            return None

        title = ''.join(h3.get_text() for box in boxes for h3 in box.find_all('h3')).strip()

        srcs = [img.get('src') for box in boxes for img in box.select(self.SELECTORS['basic_gallery_images'])]

        paragraph = next((p for p in (box.find('p') for box in boxes) if p is not None), None)
        text = text_with_breaks(paragraph).strip() if paragraph is not None else ''

        return BasicFacts(title=title, text_content=text, images=normalize_image_srcs(srcs, page_url))

    def _extract_next_url(self, soup: BeautifulSoup) -> str:
        link = soup.select_one(self.SELECTORS['next_link'])
        href = link.get('href') if link is not None else None
        return get_validator().resolve_link(href, self.site_origin)


def text_with_breaks(element: Tag) -> str:
    """
    Flatten an element to text, turning ``<br>`` into newlines and dropping
    all other tags and comments.
    """
    parts = []
    for node in element.descendants:
        if isinstance(node, Comment):
            continue
        if isinstance(node, NavigableString):
            parts.append(str(node))
        elif node.name == 'br':
            parts.append('\n')
    return ''.join(parts)


def marker_label(tag: Tag) -> Optional[str]:
    """Return the label of a ``<b><u>label</u></b>`` marker, else None."""
    if tag.name != 'b' or tag.find('u') is None:
        return None
    label = tag.get_text().strip()
    return label if label in MARKERS else None


def split_sections(element: Tag) -> List[Tuple[Optional[str], str]]:
    """
    Split an element's text at marker elements.

    Returns a list of ``(label, text)`` pairs in document order; the first
    pair holds the text before any marker and has label None. Source
    newlines are dropped, ``<br>`` becomes a newline.
    """
    sections: List[Tuple[Optional[str], List[str]]] = [(None, [])]

    def visit(node: Tag):
        for child in node.children:
            if isinstance(child, Comment):
                continue
            if isinstance(child, NavigableString):
                sections[-1][1].append(str(child).replace('\n', ''))
            elif child.name == 'br':
                sections[-1][1].append('\n')
            else:
                label = marker_label(child)
                if label:
                    sections.append((label, []))
                else:
                    visit(child)

    visit(element)
    return [(label, ''.join(parts)) for label, parts in sections]


def _section_span(sections: List[Tuple[Optional[str], str]], start: int, stop: int) -> str:
    # The first section contributes only its body; later ones keep their
    # marker label as plain text
    text = sections[start][1]
    for label, body in sections[start + 1:stop]:
        text += (label or '') + body
    return text


def parse_explanation_sections(element: Optional[Tag]) -> Tuple[str, str, str]:
    """
    Read the analysis, correct answer and points from the explanation body.

    Returns:
        ``(analysis_text, correct_answer, points_text)``. The analysis falls
        back to the extraction-failed sentinel when its section is missing
        or not followed by a correct-answer marker; the other two fall back
        to empty strings.
    """
    analysis, answer, points = EXTRACTION_FAILED, '', ''
    if element is None:
        return analysis, answer, points

    sections = split_sections(element)
    labels = [label for label, _ in sections]

    if MARKER_ANALYSIS in labels:
        start = labels.index(MARKER_ANALYSIS)
        stop = next((i for i in range(start + 1, len(labels)) if labels[i] == MARKER_ANSWER), None)
        if stop is not None:
            raw = LEADING_COLON_PATTERN.sub('', _section_span(sections, start, stop), count=1)
            if raw:
                analysis = raw.strip()

    for label, body in sections:
        if label != MARKER_ANSWER:
            continue
        match = CORRECT_ANSWER_PATTERN.match(body)
        if match:
            answer = match.group(1).strip()
            break

    if MARKER_POINTS in labels:
        start = labels.index(MARKER_POINTS)
        raw = LEADING_COLON_PATTERN.sub('', _section_span(sections, start, len(sections)), count=1)
        points = raw.strip()

    return analysis, answer, points
