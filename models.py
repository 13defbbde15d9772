"""Plain records passed between the scanners, the composer and the handler."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple
from urllib.parse import urlparse

IMPACT_LEVELS = ("minor", "moderate", "serious", "critical")


class ComplianceVerdict(Enum):
    COMPLIANT = "Compliant"
    SEMI_COMPLIANT = "Semi-Compliant"
    NOT_COMPLIANT = "Not Compliant"


@dataclass(frozen=True)
class ScanTarget:
    url: str
    display_name: str = ""

    @property
    def site_name(self) -> str:
        name = (self.display_name or "").strip()
        if name:
            return name
        return urlparse(self.url).hostname or self.url


def _messages(checks) -> Tuple[str, ...]:
    out = []
    for item in checks or []:
        msg = (item or {}).get("message") or ""
        if msg.strip():
            out.append(msg.strip())
    return tuple(out)


@dataclass(frozen=True)
class AffectedNode:
    target_selectors: Tuple[str, ...] = ()
    html_snippet: str = ""
    remediation_suggestions: Tuple[str, ...] = ()
    failure_summary: str = ""

    @classmethod
    def from_axe(cls, node: Mapping[str, Any]) -> "AffectedNode":
        # axe targets are strings, or lists of strings for selectors inside iframes / shadow DOM
        targets = []
        for t in node.get("target") or []:
            targets.append(" > ".join(t) if isinstance(t, (list, tuple)) else str(t))
        hints = _messages(node.get("any")) + _messages(node.get("all")) + _messages(node.get("none"))
        return cls(
            target_selectors=tuple(targets),
            html_snippet=node.get("html") or "",
            remediation_suggestions=hints,
            failure_summary=node.get("failureSummary") or "",
        )


@dataclass(frozen=True)
class Violation:
    rule_id: str
    description: str = ""
    impact: str = "minor"
    help_text: str = ""
    affected_nodes: Tuple[AffectedNode, ...] = ()
    help_url: str = ""

    @classmethod
    def from_axe(cls, raw: Mapping[str, Any]) -> "Violation":
        impact = (raw.get("impact") or "minor").lower()
        if impact not in IMPACT_LEVELS:
            impact = "minor"
        return cls(
            rule_id=raw.get("id") or "",
            description=raw.get("description") or "",
            impact=impact,
            help_text=raw.get("help") or "",
            affected_nodes=tuple(AffectedNode.from_axe(n) for n in raw.get("nodes") or []),
            help_url=raw.get("helpUrl") or "",
        )


@dataclass(frozen=True)
class AuditCheck:
    check_id: str
    title: str = ""
    description: str = ""
    score: Optional[float] = None

    @property
    def passed(self) -> bool:
        return self.score is None or self.score >= 1


def _clamp(v: Any) -> float:
    try:
        v = float(v)
    except (TypeError, ValueError):
        return 0.0
    return min(1.0, max(0.0, v))


@dataclass(frozen=True)
class AuditScoreReport:
    overall_score: float = 0.0
    per_check_results: Mapping[str, AuditCheck] = field(default_factory=dict)

    def failing_checks(self) -> Iterator[AuditCheck]:
        for check in (self.per_check_results or {}).values():
            if not check.passed:
                yield check

    @classmethod
    def from_lighthouse(cls, lhr: Mapping[str, Any]) -> "AuditScoreReport":
        category = (lhr.get("categories") or {}).get("accessibility") or {}
        audits = lhr.get("audits") or {}
        refs = [r.get("id") for r in category.get("auditRefs") or [] if r.get("id")]
        ids = refs or list(audits)
        checks: Dict[str, AuditCheck] = {}
        for audit_id in ids:
            audit = audits.get(audit_id)
            if not audit:
                continue
            score = audit.get("score")
            checks[audit_id] = AuditCheck(
                check_id=audit_id,
                title=audit.get("title") or audit_id,
                description=audit.get("description") or "",
                score=None if score is None else _clamp(score),
            )
        return cls(overall_score=_clamp(category.get("score")), per_check_results=checks)


@dataclass(frozen=True)
class ScanResult:
    violations: Tuple[Violation, ...]
    audit_report: AuditScoreReport
