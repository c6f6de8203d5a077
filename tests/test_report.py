import json

from fluency_assessor.aggregate import correct_text
from fluency_assessor.report import highlight_errors, write_html, write_json
from fluency_assessor.score import analyze_pronunciation


def test_highlight_errors_escapes_and_marks():
    r = correct_text("Im <b>going</b>")
    html = highlight_errors(r.original, r.errors)
    assert html.startswith("<mark class='major' title='I&#x27;m'>Im</mark>")
    assert "&lt;b&gt;going&lt;/b&gt;" in html


def test_highlight_without_errors():
    assert highlight_errors("a & b", []) == "a &amp; b"


def test_write_reports(tmp_path):
    r = correct_text("Im going to the store")
    write_json(r, tmp_path / "c.json")
    write_html(r, tmp_path / "c.html")
    assert json.loads((tmp_path / "c.json").read_text(encoding="utf-8"))["corrected"] == "I'm going to the store"
    assert "Writing Correction Report" in (tmp_path / "c.html").read_text(encoding="utf-8")

    a = analyze_pronunciation("Think about three things", "Tink about tree tings", "focused")
    write_html(a, tmp_path / "p.html")
    page = (tmp_path / "p.html").read_text(encoding="utf-8")
    assert "Pronunciation Report" in page
    assert "th→t x3" in page
