import io

import pytest
from pypdf import PdfReader

from models import AffectedNode, AuditCheck, AuditScoreReport, ScanResult, Violation
from report import ReportComposer
from store import ArtifactStore


def pdf_text(data: bytes) -> str:
    reader = PdfReader(io.BytesIO(data))
    return "\n".join(page.extract_text() or "" for page in reader.pages)


@pytest.fixture
def image_alt_violation():
    node = AffectedNode(
        target_selectors=("#hero > img",),
        html_snippet='<img src="hero.jpg">',
        remediation_suggestions=("Element does not have an alt attribute",),
    )
    node2 = AffectedNode(
        target_selectors=(".footer", "img.badge"),
        html_snippet='<img src="badge.png" class="badge">',
        remediation_suggestions=("Element has no title attribute",),
    )
    return Violation(
        rule_id="image-alt",
        description="Ensures <img> elements have alternate text or a role of none or presentation",
        impact="critical",
        help_text="Images must have alternative text",
        affected_nodes=(node, node2),
        help_url="https://dequeuniversity.com/rules/axe/4.9/image-alt",
    )


@pytest.fixture
def audit_report():
    return AuditScoreReport(
        overall_score=0.95,
        per_check_results={
            "image-alt": AuditCheck("image-alt", "Image elements do not have [alt] attributes",
                                    "Informative elements should aim for short, descriptive alternate text.", 0.0),
            "document-title": AuditCheck("document-title", "Document has a <title> element", "", 1.0),
            "accesskeys": AuditCheck("accesskeys", "[accesskey] values are unique", "", None),
        },
    )


class StubScanner:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    async def run_scan(self, url):
        self.calls.append(url)
        if self.error:
            raise self.error
        return self.result


@pytest.fixture
def store(tmp_path):
    return ArtifactStore(str(tmp_path / "reports"))


@pytest.fixture
def composer():
    return ReportComposer()


@pytest.fixture
def stub_scanner(image_alt_violation, audit_report):
    return StubScanner(ScanResult(violations=(image_alt_violation,), audit_report=audit_report))
