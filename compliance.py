from dataclasses import dataclass

from models import ComplianceVerdict


@dataclass(frozen=True)
class ComplianceThresholds:
    compliant_min_score: float = 0.90
    compliant_max_violations: int = 0
    semi_compliant_min_score: float = 0.50


DEFAULT_THRESHOLDS = ComplianceThresholds()


def classify(overall_score: float, violation_count: int,
             thresholds: ComplianceThresholds = DEFAULT_THRESHOLDS) -> ComplianceVerdict:
    """
    Compliant needs a high audit score *and* a clean rule-checker run;
    otherwise the score alone decides between semi and not compliant.
    """
    if (overall_score >= thresholds.compliant_min_score
            and violation_count <= thresholds.compliant_max_violations):
        return ComplianceVerdict.COMPLIANT
    if overall_score >= thresholds.semi_compliant_min_score:
        return ComplianceVerdict.SEMI_COMPLIANT
    return ComplianceVerdict.NOT_COMPLIANT
