#!/usr/bin/env python3
"""
Tests for building the in-memory question document.
"""

from cbt_scraper.core.assets import ImageFetcher
from cbt_scraper.core.document import (
    AVAILABLE_WIDTH, BASIC_IMAGE_ERROR, BASIC_SINGLE_IMAGE_WIDTH, EXPLANATION_IMAGE_ERROR,
    IMAGE_ERROR, PROBLEM_IMAGE_ERROR, PROBLEM_IMAGE_WIDTH,
    BulletList, DocumentBuilder, ImageGrid, SingleImage, TextBlock,
)
from cbt_scraper.core.models import BasicFacts, Explanation, QuestionRecord
from fakes import SITE, FakeSession, image_response


def _img(name):
    return f"{SITE}/img/{name}.png"


def _builder(*available):
    """Builder whose fetcher can download only the named images."""
    routes = {_img(name): image_response() for name in available}
    return DocumentBuilder(ImageFetcher(FakeSession(routes)))


def test_question_page_layout():
    record = QuestionRecord(problem_number="1A-01", question_text="問い",
                            choices=["A あ", "B い"])
    page = _builder().build_question_page(record)
    assert page.kind == 'question'
    assert page.texts() == ["問題番号: 1A-01", "問い", "A あ", "B い"]
    assert isinstance(page.items[-1], BulletList)


def test_single_image_keeps_default_width():
    grid = _builder("a").build_image_grid([_img("a")], PROBLEM_IMAGE_WIDTH)
    assert grid.columns == 1
    assert len(grid.rows) == 1
    assert grid.rows[0][0].width == PROBLEM_IMAGE_WIDTH


def test_four_images_make_two_padded_rows():
    builder = _builder("a", "b", "c", "d")
    grid = builder.build_image_grid([_img(n) for n in "abcd"], PROBLEM_IMAGE_WIDTH)
    assert len(grid.rows) == 2
    assert all(len(row) == 3 for row in grid.rows)

    cell_width = AVAILABLE_WIDTH / 3
    assert all(cell.width == cell_width for row in grid.rows for cell in row)
    assert grid.rows[1][0].data_uri is not None
    assert grid.rows[1][1].is_padding and grid.rows[1][2].is_padding


def test_failed_image_in_grid_becomes_error_cell():
    grid = _builder("a").build_image_grid([_img("a"), _img("gone")], PROBLEM_IMAGE_WIDTH)
    row = grid.rows[0]
    assert row[0].data_uri is not None
    assert row[1].error == IMAGE_ERROR
    assert row[2].is_padding


def test_failed_single_image_becomes_placeholder_text():
    record = QuestionRecord(problem_number="2", question_text="q", problem_image_srcs=[_img("gone")])
    page = _builder().build_question_page(record)
    assert PROBLEM_IMAGE_ERROR in page.texts()
    assert not any(isinstance(item, ImageGrid) for item in page.items)


def test_explanation_page_omits_empty_answer_and_points():
    record = QuestionRecord(explanation=Explanation(analysis_text="考察"))
    page = _builder().build_explanation_page(record)
    assert page.kind == 'explanation'
    assert page.texts() == ["解説", "選択肢考察", "考察"]


def test_explanation_page_sections_in_order():
    # the basic-facts title is extracted but not shown
    record = QuestionRecord(
        explanation=Explanation(explanation_image_srcs=[_img("gone")],
                                analysis_text="考察", correct_answer="C", points_text="要点"),
        basic=BasicFacts(title="細胞膜", text_content="本文", images=[_img("a")]),
    )
    page = _builder("a").build_explanation_page(record)
    assert page.texts() == [
        "解説", EXPLANATION_IMAGE_ERROR, "選択肢考察", "考察", "正解", "C",
        "ポイント", "要点", "基本情報", "本文",
    ]
    image = page.items[-1]
    assert isinstance(image, SingleImage)
    assert image.width == BASIC_SINGLE_IMAGE_WIDTH and image.centered


def test_basic_images_failure_and_grid():
    record = QuestionRecord(explanation=Explanation(),
                            basic=BasicFacts(text_content="本文", images=[_img("gone")]))
    page = _builder().build_explanation_page(record)
    assert page.items[-1] == TextBlock(BASIC_IMAGE_ERROR, 'error')

    record.basic.images = [_img("a"), _img("b")]
    page = _builder("a", "b").build_explanation_page(record)
    assert isinstance(page.items[-1], ImageGrid)


def test_build_pages_per_record():
    records = [
        QuestionRecord(problem_number="1", explanation=Explanation()),
        QuestionRecord(problem_number="2"),
    ]
    document = _builder().build(records, title="細胞生物学")
    assert document.title == "細胞生物学"
    assert [p.kind for p in document.pages] == ['question', 'explanation', 'question']


if __name__ == "__main__":
    test_question_page_layout()
    test_single_image_keeps_default_width()
    test_four_images_make_two_padded_rows()
    test_failed_image_in_grid_becomes_error_cell()
    test_failed_single_image_becomes_placeholder_text()
    test_explanation_page_omits_empty_answer_and_points()
    test_explanation_page_sections_in_order()
    test_basic_images_failure_and_grid()
    test_build_pages_per_record()
    print("✓ document tests passed")
