"""
Records extracted from practice-question pages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


# Shown in place of a field the page did not provide
EXTRACTION_FAILED = "取得失敗"


@dataclass
class Explanation:
    explanation_image_srcs: List[str] = field(default_factory=list)
    analysis_text: str = EXTRACTION_FAILED
    correct_answer: str = ""
    points_text: str = ""


@dataclass
class BasicFacts:
    title: str = ""
    text_content: str = ""
    images: List[str] = field(default_factory=list)


@dataclass
class QuestionRecord:
    problem_number: str = EXTRACTION_FAILED
    question_text: str = EXTRACTION_FAILED
    problem_image_srcs: List[str] = field(default_factory=list)
    choices: List[str] = field(default_factory=list)
    explanation: Optional[Explanation] = None
    basic: Optional[BasicFacts] = None
    next_url: str = ""  # empty = last page of the chain

    @property
    def is_last(self) -> bool:
        return not self.next_url
