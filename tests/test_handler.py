import os

import pytest

from conftest import StubScanner, pdf_text
from errors import CompositionFailure, InvalidInput, ScanFailure
from handler import AuditHandler
from models import ScanResult


def make_handler(scanner, composer, store, base="http://localhost:5000"):
    return AuditHandler(scanner, composer, store, public_base_url=base)


@pytest.mark.parametrize("payload", [
    None,
    {},
    {"url": "example.com"},
    {"url": "example.com", "name": ""},
    {"url": "   ", "name": "Example"},
    {"url": "example.com", "name": 42},
])
def test_invalid_input_never_reaches_scanner(payload, stub_scanner, composer, store):
    handler = make_handler(stub_scanner, composer, store)
    body, status = handler.handle(payload)
    assert status == 400
    assert body == {"error": "URL and name are required"}
    assert stub_scanner.calls == []
    assert list(store.root.iterdir()) == []


def test_validate_normalizes_bare_hostname():
    target = AuditHandler.validate({"url": " example.com ", "name": " Example "})
    assert target.url == "https://example.com"
    assert target.display_name == "Example"
    assert AuditHandler.validate({"url": "http://example.com", "name": "x"}).url == "http://example.com"


def test_validate_raises_invalid_input():
    with pytest.raises(InvalidInput):
        AuditHandler.validate({"name": "Example"})


def test_successful_audit_returns_report_reference(stub_scanner, composer, store):
    handler = make_handler(stub_scanner, composer, store)
    body, status = handler.handle({"url": "example.com", "name": "Example"})
    assert status == 200
    assert stub_scanner.calls == ["https://example.com"]
    assert body["reportUrl"] == f"http://localhost:5000/reports/{body['reportId']}"
    assert body["violations"] == 1
    assert body["score"] == pytest.approx(0.95)
    assert body["verdict"] == "Semi-Compliant"
    path = store.path_for(body["reportId"])
    assert os.path.getsize(path) > 0
    with open(path, "rb") as fh:
        assert fh.read(5) == b"%PDF-"


def test_base_url_from_request_when_not_configured(stub_scanner, composer, store):
    handler = AuditHandler(stub_scanner, composer, store)
    body, _ = handler.handle({"url": "example.com", "name": "Example"}, base_url="http://audit.local/")
    assert body["reportUrl"].startswith("http://audit.local/reports/report_")


def test_scan_failure_is_reported_without_artifact(composer, store):
    scanner = StubScanner(error=ScanFailure("net::ERR_NAME_NOT_RESOLVED at https://nope.invalid"))
    body, status = make_handler(scanner, composer, store).handle({"url": "nope.invalid", "name": "x"})
    assert status == 502
    assert "ERR_NAME_NOT_RESOLVED" in body["error"]
    assert list(store.root.iterdir()) == []


def test_composition_failure_is_reported(stub_scanner, composer, store, monkeypatch):
    async def broken(*args, **kwargs):
        raise CompositionFailure("Could not write report: disk full")

    monkeypatch.setattr(composer, "compose_async", broken)
    body, status = make_handler(stub_scanner, composer, store).handle({"url": "example.com", "name": "x"})
    assert status == 500
    assert body == {"error": "Could not write report: disk full"}


def test_unexpected_errors_become_500(composer, store):
    scanner = StubScanner(error=KeyError("violations"))
    body, status = make_handler(scanner, composer, store).handle({"url": "example.com", "name": "x"})
    assert status == 500
    assert "violations" in body["error"]


def test_zero_violation_scan(composer, store, audit_report):
    scanner = StubScanner(ScanResult(violations=(), audit_report=audit_report))
    body, status = make_handler(scanner, composer, store).handle({"url": "example.com", "name": "Example"})
    assert status == 200
    assert body["verdict"] == "Compliant"


def test_example_scenario_report_contents(stub_scanner, composer, store):
    body, status = make_handler(stub_scanner, composer, store).handle({"url": "example.com", "name": "Example"})
    assert status == 200
    text = pdf_text(store.path_for(body["reportId"]).read_bytes())
    assert "Accessibility Audit Report for Example" in text
    assert "Violations (1)" in text
    assert "Affected element 2" in text
    assert "Affected element 3" not in text
    assert 'alt="Company logo"' in text
