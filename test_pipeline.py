#!/usr/bin/env python3
"""
End-to-end runs of the scraper against an in-memory site.
"""

import json

import pytest

from cbt_scraper.app import main
from cbt_scraper.core.assets import ImageFetcher
from cbt_scraper.core.config import ScrapeConfig
from cbt_scraper.core.controller import ScraperController
from cbt_scraper.core.document import DocumentBuilder
from cbt_scraper.core.pdf_engines.reportlab_engine import ReportLabEngine
from cbt_scraper.core.pdf_engines.weasyprint_engine import render_html
from cbt_scraper.core.question_extractor import QuestionExtractor
from fakes import SITE, LOGIN_URL, FakeResponse, FakeSession, explanation, image_response, login_routes, question_page


Q1 = f"{SITE}/users/cbt/practice_questions/1"
Q2 = f"{SITE}/users/cbt/practice_questions/2"


def _site(post_status=302):
    get_routes, post_routes = login_routes(post_status)
    get_routes.update({
        Q1: FakeResponse(200, question_page(
            "1A-01", "細胞膜の主成分はどれか。",
            choices=("A リン脂質", "B 核酸"),
            images=("/img/q1.png",),
            next_href="/users/cbt/practice_questions/2",
            explanation_html=explanation("Aは正しい。", "A", "膜は脂質二重層。"),
            explanation_images=("/img/e1.png", "/img/missing.png"),
            basic=("細胞膜", "流動モザイクモデル", ("/img/b1.png",)),
        )),
        Q2: FakeResponse(200, question_page(
            "1A-02", "ミトコンドリアの機能はどれか。",
            choices=("A ATP合成", "B 転写"),
            explanation_html=explanation("Aが正しい。", "A", "呼吸鎖。"),
        )),
        f"{SITE}/img/q1.png": image_response(),
        f"{SITE}/img/e1.png": image_response(),
        f"{SITE}/img/b1.png": image_response(),
    })
    return FakeSession(get_routes, post_routes)


def _config(tmp_path, **changes):
    data = {
        "login_url": LOGIN_URL,
        "email": "user@example.com",
        "password": "secret",
        "start_url": Q1,
        "page_count": 5,
        "file_name": "細胞生物学",
        "output_dir": str(tmp_path),
        "log_dir": str(tmp_path / "logs"),
    }
    data.update(changes)
    return ScrapeConfig.from_dict(data)


def test_two_question_run_writes_pdf(tmp_path):
    session = _site()
    events = []
    stats = ScraperController(_config(tmp_path), session=session).run(progress=events.append)

    assert stats["authenticated"]
    assert stats["scraped"] == 2
    assert stats["pages"] == 4
    assert stats["images_failed"] == 1
    assert stats["pdf_written"]

    pdf_path = tmp_path / "細胞生物学.pdf"
    assert stats["pdf_path"] == str(pdf_path)
    assert pdf_path.read_bytes().startswith(b"%PDF")
    assert session.closed

    assert [e["number"] for e in events if e["type"] == "question"] == ["1A-01", "1A-02"]
    assert stats["errors"]["total_warnings"] == 1


def test_document_contents_match_pages(tmp_path):
    session = _site()
    controller = ScraperController(_config(tmp_path), session=session)
    records = controller.collect_records(session)
    document = DocumentBuilder(ImageFetcher(session)).build(records, title="細胞生物学")

    assert [p.kind for p in document.pages] == ['question', 'explanation', 'question', 'explanation']
    first, first_explanation, second, _ = document.pages
    assert "問題番号: 1A-01" in first.texts()
    assert "細胞膜の主成分はどれか。" in first.texts()
    assert "A リン脂質" in first.texts()
    assert "ミトコンドリアの機能はどれか。" in second.texts()
    assert "膜は脂質二重層。" in first_explanation.texts()
    assert "流動モザイクモデル" in first_explanation.texts()

    html = render_html(document)
    assert html.count('<section class="page') == 4
    for text in ("1A-01", "Aは正しい。", "呼吸鎖。", "画像読み込みエラー"):
        assert text in html
    assert "https://" not in html.split("</style>", 1)[1]


def test_reportlab_engine_writes_pdf(tmp_path):
    session = _site()
    records = ScraperController(_config(tmp_path), session=session).collect_records(session)
    document = DocumentBuilder(ImageFetcher(session)).build(records, title="細胞生物学")

    output = tmp_path / "fallback.pdf"
    assert ReportLabEngine().generate(document, str(output))
    assert output.read_bytes().startswith(b"%PDF")


def test_failed_login_writes_nothing(tmp_path):
    session = _site(post_status=200)
    stats = ScraperController(_config(tmp_path), session=session).run()

    assert not stats["authenticated"]
    assert stats["scraped"] == 0
    assert not stats["pdf_written"]
    assert session.urls('GET') == [LOGIN_URL]
    assert not (tmp_path / "細胞生物学.pdf").exists()
    assert stats["errors"]["error_types"] == {"AuthenticationError": 1}


def test_unreachable_start_page_writes_empty_pdf(tmp_path):
    session = _site()
    stats = ScraperController(_config(tmp_path, start_url=f"{SITE}/nowhere"), session=session).run()

    assert stats["authenticated"]
    assert stats["scraped"] == 0
    assert stats["pages"] == 0
    assert stats["pdf_written"]
    assert (tmp_path / "細胞生物学.pdf").read_bytes().startswith(b"%PDF")
    assert stats["errors"]["error_types"] == {"PageFetchError": 1}
    assert stats["errors"]["recent_errors"][0]["status_code"] == 404


def test_failed_render_keeps_earlier_pdf(tmp_path):
    earlier = tmp_path / "細胞生物学.pdf"
    earlier.write_bytes(b"%PDF-1.4 earlier run")

    controller = ScraperController(_config(tmp_path), session=_site())
    controller.pdf.generate_pdf = lambda document, path: False
    stats = controller.run()

    assert not stats["pdf_written"]
    assert earlier.read_bytes() == b"%PDF-1.4 earlier run"
    assert sorted(p.name for p in tmp_path.iterdir() if p.is_file()) == ["細胞生物学.pdf"]


def test_partial_render_output_is_discarded(tmp_path):
    earlier = tmp_path / "細胞生物学.pdf"
    earlier.write_bytes(b"%PDF-1.4 earlier run")

    def broken_render(document, path):
        with open(path, "wb") as f:
            f.write(b"%PDF-1.4 trunc")
        return False

    controller = ScraperController(_config(tmp_path), session=_site())
    controller.pdf.generate_pdf = broken_render
    controller.run()

    assert earlier.read_bytes() == b"%PDF-1.4 earlier run"
    assert not (tmp_path / ".細胞生物学.pdf.part").exists()


def test_successful_run_replaces_earlier_pdf(tmp_path):
    earlier = tmp_path / "細胞生物学.pdf"
    earlier.write_bytes(b"stale")

    stats = ScraperController(_config(tmp_path), session=_site()).run()

    assert stats["pdf_written"]
    assert earlier.read_bytes().startswith(b"%PDF")
    assert not (tmp_path / ".細胞生物学.pdf.part").exists()


def test_page_budget_limits_scrape(tmp_path):
    session = _site()
    stats = ScraperController(_config(tmp_path, page_count=1), session=session).run()
    assert stats["scraped"] == 1
    assert Q2 not in session.urls('GET')


def test_main_reports_bad_config(tmp_path, capsys):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"login_url": LOGIN_URL}), encoding="utf-8")
    assert main([str(path)]) == 1
    assert "Invalid configuration" in capsys.readouterr().err


def test_site_origin_defaults_to_login_origin(tmp_path):
    controller = ScraperController(_config(tmp_path), session=_site())
    assert isinstance(controller.extractor, QuestionExtractor)
    assert controller.extractor.site_origin == SITE


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
