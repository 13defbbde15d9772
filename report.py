import asyncio
import datetime as dt
import logging
import re
from typing import BinaryIO, List, Optional, Sequence

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from compliance import ComplianceThresholds, DEFAULT_THRESHOLDS, classify
from errors import CompositionFailure
from models import AuditScoreReport, ComplianceVerdict, ScanTarget, Violation
from snippets import DEFAULT_TABLE, SnippetTable
from store import Artifact, ArtifactStore
from utils import site_hostname

logger = logging.getLogger(__name__)

W, H = A4
LEFT = 40
RIGHT = W - 40
TOP = H - 50
BOTTOM = 50

PRIMARY = colors.HexColor("#0F4C81")
IMPACT_COLORS = {
    "critical": colors.HexColor("#991B1B"),
    "serious": colors.HexColor("#C2410C"),
    "moderate": colors.HexColor("#92400E"),
    "minor": colors.HexColor("#155E75"),
}
VERDICT_COLORS = {
    ComplianceVerdict.COMPLIANT: colors.HexColor("#15803D"),
    ComplianceVerdict.SEMI_COMPLIANT: colors.HexColor("#B45309"),
    ComplianceVerdict.NOT_COMPLIANT: colors.HexColor("#B91C1C"),
}
FOOTER_NOTE = ("Note: automated checks find only part of WCAG issues; "
               "confirm results with manual and assistive-technology testing.")
MD_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")


def _pdf_safe(text) -> str:
    # standard Type1 fonts only cover cp1252
    text = "" if text is None else str(text)
    text = text.replace("\t", "    ").replace("\r", "")
    return text.encode("cp1252", "replace").decode("cp1252")


def wrap_text(text: str, font: str, size: float, max_width: float) -> List[str]:
    lines: List[str] = []
    for para in _pdf_safe(text).split("\n"):
        line = ""
        for word in para.split(" "):
            trial = f"{line} {word}" if line else word
            if stringWidth(trial, font, size) <= max_width:
                line = trial
                continue
            if line:
                lines.append(line)
            # hard-split words wider than the column (long selectors, URLs)
            while stringWidth(word, font, size) > max_width and len(word) > 1:
                cut = len(word)
                while cut > 1 and stringWidth(word[:cut], font, size) > max_width:
                    cut -= 1
                lines.append(word[:cut])
                word = word[cut:]
            line = word
        lines.append(line)
    return lines


class _Pages:
    """Canvas plus a y cursor; starts a new page when content hits the bottom margin."""

    def __init__(self, c: canvas.Canvas, footer: str):
        self.c = c
        self.footer = footer
        self.page = 1
        self.y = TOP

    def _draw_footer(self):
        self.c.setFont("Helvetica-Oblique", 8)
        self.c.setFillColor(colors.gray)
        self.c.drawString(LEFT, 25, self.footer)
        self.c.drawRightString(RIGHT, 25, f"Page {self.page}")

    def new_page(self):
        self._draw_footer()
        self.c.showPage()
        self.page += 1
        self.y = TOP

    def ensure(self, needed: float):
        if self.y - needed < BOTTOM:
            self.new_page()

    def gap(self, h: float = 8):
        self.y -= h

    def text(self, text: str, font: str = "Helvetica", size: float = 11, indent: float = 0,
             color=colors.black, leading: Optional[float] = None):
        leading = leading or size + 3
        for line in wrap_text(text, font, size, RIGHT - LEFT - indent):
            self.ensure(leading)
            self.c.setFont(font, size)
            self.c.setFillColor(color)
            self.c.drawString(LEFT + indent, self.y - size, line)
            self.y -= leading

    def code(self, text: str, indent: float = 0):
        self.text(text, font="Courier", size=9, indent=indent + 8,
                  color=colors.HexColor("#1E293B"), leading=11)

    def finish(self):
        self._draw_footer()
        self.c.save()


class ReportComposer:
    def __init__(self, thresholds: ComplianceThresholds = DEFAULT_THRESHOLDS,
                 snippets: SnippetTable = DEFAULT_TABLE, app_name: str = "Accessibility Auditor"):
        self.thresholds = thresholds
        self.snippets = snippets
        self.app_name = app_name

    def verdict(self, violations: Sequence[Violation], audit_report: Optional[AuditScoreReport]) -> ComplianceVerdict:
        score = audit_report.overall_score if audit_report else 0.0
        return classify(score, len(violations or ()), self.thresholds)

    # -----------------------------
    # Layout
    # -----------------------------
    def compose(self, target: ScanTarget, violations: Sequence[Violation],
                audit_report: Optional[AuditScoreReport], stream: BinaryIO) -> ComplianceVerdict:
        """Write the PDF report to ``stream``. Inputs are only read."""
        violations = violations or ()
        audit_report = audit_report or AuditScoreReport()
        verdict = self.verdict(violations, audit_report)

        c = canvas.Canvas(stream, pagesize=A4)
        c.setTitle(f"Accessibility Audit Report for {_pdf_safe(target.site_name)}")
        c.setAuthor(self.app_name)
        pages = _Pages(c, FOOTER_NOTE)

        self._summary(pages, target, violations, audit_report, verdict)
        self._violations(pages, violations)
        self._audit(pages, audit_report)
        pages.finish()
        return verdict

    def _summary(self, pages: _Pages, target: ScanTarget, violations, audit_report, verdict):
        c = pages.c
        c.setFillColor(PRIMARY)
        c.rect(0, H - 30, W, 30, fill=True, stroke=False)
        c.setFillColor(colors.white)
        c.setFont("Helvetica-Bold", 12)
        c.drawString(LEFT, H - 20, _pdf_safe(self.app_name))

        pages.text(f"Accessibility Audit Report for {target.site_name}", font="Helvetica-Bold", size=18)
        pages.gap(4)
        pages.text(f"Scanned URL: {target.url}")
        pages.text(f"Generated: {dt.datetime.now().strftime('%Y-%m-%d %H:%M')}", size=9, color=colors.gray)
        pages.gap(6)
        pages.text(f"Compliance verdict: {verdict.value}", font="Helvetica-Bold", size=13,
                   color=VERDICT_COLORS[verdict])
        pages.text(f"Overall accessibility score: {audit_report.overall_score * 100:.0f} / 100")
        pages.text(f"Rule violations found: {len(violations)}")
        pages.gap(14)

    def _violations(self, pages: _Pages, violations: Sequence[Violation]):
        pages.ensure(40)
        pages.text(f"Violations ({len(violations)})", font="Helvetica-Bold", size=14, color=PRIMARY)
        pages.gap(4)
        if not violations:
            pages.text("No violations detected by axe.", indent=6)
            pages.gap(10)
            return

        for index, v in enumerate(violations, start=1):
            pages.ensure(60)
            pages.text(f"{index}. {v.description or v.rule_id}", font="Helvetica-Bold", size=12)
            pages.text(f"Rule: {v.rule_id}", indent=12, size=10, color=colors.gray)
            pages.text(f"Impact: {v.impact}", indent=12, font="Helvetica-Bold",
                       color=IMPACT_COLORS.get(v.impact, colors.black))
            if v.help_text:
                pages.text(f"Help: {v.help_text}", indent=12)
            if v.help_url:
                pages.text(f"More info: {v.help_url}", indent=12, size=9, color=PRIMARY)
            pages.gap(4)

            if not v.affected_nodes:
                pages.text("No affected elements were reported for this rule.", indent=12,
                           font="Helvetica-Oblique", size=10)
            for n, node in enumerate(v.affected_nodes, start=1):
                pages.ensure(40)
                pages.text(f"Affected element {n}", indent=12, font="Helvetica-Bold", size=10)
                if node.target_selectors:
                    pages.text(f"Element: {', '.join(node.target_selectors)}", indent=24, size=10)
                if node.html_snippet:
                    pages.text("Snippet:", indent=24, size=10)
                    pages.code(node.html_snippet, indent=24)
                if node.failure_summary:
                    pages.text("Failure summary:", indent=24, font="Helvetica-Oblique", size=10)
                    pages.text(node.failure_summary, indent=32, size=10)
                if node.remediation_suggestions:
                    pages.text("How to solve:", indent=24, font="Helvetica-Oblique", size=10)
                    for hint in node.remediation_suggestions:
                        pages.text(f"- {hint}", indent=32, size=10)
                pages.text("Suggested fix:", indent=24, font="Helvetica-Oblique", size=10)
                pages.code(self.snippets.suggest_fix(v.rule_id), indent=24)
                pages.gap(6)
            pages.gap(10)

    def _audit(self, pages: _Pages, audit_report: AuditScoreReport):
        pages.ensure(60)
        pages.text("Lighthouse Audit", font="Helvetica-Bold", size=14, color=PRIMARY)
        pages.gap(4)
        pages.text(f"Overall accessibility score: {audit_report.overall_score * 100:.0f} / 100")
        pages.gap(4)
        failing = list(audit_report.failing_checks())
        if not failing:
            pages.text("No failing audit checks were reported.", indent=6)
            return
        for check in failing:
            pages.ensure(40)
            pages.text(check.title or check.check_id, font="Helvetica-Bold", size=11, indent=6)
            if check.description:
                pages.text(MD_LINK_RE.sub(r"\1 (\2)", check.description), indent=18, size=10)
            pages.text(f"Score: {check.score * 100:.0f} / 100", indent=18, size=10)
            pages.gap(6)

    # -----------------------------
    # Persistence
    # -----------------------------
    def compose_to_store(self, target: ScanTarget, violations: Sequence[Violation],
                         audit_report: Optional[AuditScoreReport], store: ArtifactStore) -> Artifact:
        identifier = store.new_identifier(site_hostname(target.url))
        try:
            with store.writer(identifier) as fh:
                self.compose(target, violations, audit_report, fh)
        except Exception as e:
            logger.exception("Could not write report %s", identifier)
            raise CompositionFailure(f"Could not write report: {e}") from e
        return store.commit_info(identifier)

    async def compose_async(self, target: ScanTarget, violations: Sequence[Violation],
                            audit_report: Optional[AuditScoreReport], store: ArtifactStore) -> Artifact:
        """Resolves once the report is committed to the store."""
        return await asyncio.to_thread(self.compose_to_store, target, violations, audit_report, store)
