# tests/adapters/test_exporters.py
import json

import pytest

from adapters.json_exporter import export_report_json, report_to_json
from adapters.report_exporter import export_report_html, render_report_html
from core.domain.language import Language
from core.domain.models import BatchReport, RecordOutcome


@pytest.fixture
def report():
    return BatchReport(
        schema_name="bid",
        language=Language.SPANISH,
        outcomes=[
            RecordOutcome(index=0, valid=True, data={"bid_amount": "10.00"}),
            RecordOutcome(
                index=1,
                valid=False,
                errors={"bidder": {"bidder_id": ["Se requiere un número entero válido."]}},
                codes={"bidder": {"bidder_id": ["invalid"]}},
            ),
            RecordOutcome(
                index=2,
                valid=False,
                errors={"bid_amount": ["Bid amount must be greater than zero."]},
                codes={"bid_amount": ["invalid"]},
            ),
        ],
    )


def test_json_payload(report):
    payload = json.loads(report_to_json(report))
    assert payload["schema_name"] == "bid"
    assert payload["language"] == "es"
    assert payload["total"] == 3
    assert payload["valid_count"] == 1
    assert payload["invalid_count"] == 2
    assert payload["outcomes"][1]["errors"] == {"bidder": {"bidder_id": ["Se requiere un número entero válido."]}}
    assert payload["outcomes"][2]["codes"] == {"bid_amount": ["invalid"]}


def test_json_is_stable_and_utf8(report):
    text = report_to_json(report)
    assert text == report_to_json(report)
    assert "número" in text


def test_export_json_creates_directories(report, tmp_path):
    target = export_report_json(report=report, output_path=tmp_path / "out" / "report.json")
    assert target.exists()
    assert json.loads(target.read_text(encoding="utf-8"))["total"] == 3


def test_html_lists_rejections(report):
    html = render_report_html(report=report)
    assert '<html lang="es">' in html
    assert "Validation report: bid" in html
    assert "bidder.bidder_id" in html
    assert "Bid amount must be greater than zero." in html
    assert "Español" in html


def test_html_all_valid(tmp_path):
    report = BatchReport(schema_name="bid", outcomes=[RecordOutcome(index=0, valid=True, data={})])
    target = export_report_html(report=report, output_path=tmp_path / "report.html")
    assert "All records are valid." in target.read_text(encoding="utf-8")
