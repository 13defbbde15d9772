import pytest

from compliance import ComplianceThresholds, classify
from models import ComplianceVerdict


@pytest.mark.parametrize("score", [0.90, 0.95, 1.0])
def test_high_score_without_violations_is_compliant(score):
    assert classify(score, 0) is ComplianceVerdict.COMPLIANT


@pytest.mark.parametrize("score,count", [(0.5, 0), (0.75, 3), (0.899, 0), (0.95, 1), (1.0, 12)])
def test_mid_score_or_violations_is_semi_compliant(score, count):
    assert classify(score, count) is ComplianceVerdict.SEMI_COMPLIANT


@pytest.mark.parametrize("score,count", [(0.0, 0), (0.49, 0), (0.3, 7)])
def test_low_score_is_not_compliant(score, count):
    assert classify(score, count) is ComplianceVerdict.NOT_COMPLIANT


def test_thresholds_are_injected():
    lenient = ComplianceThresholds(compliant_min_score=0.8, compliant_max_violations=2,
                                   semi_compliant_min_score=0.2)
    assert classify(0.85, 2, lenient) is ComplianceVerdict.COMPLIANT
    assert classify(0.85, 3, lenient) is ComplianceVerdict.SEMI_COMPLIANT
    assert classify(0.25, 0, lenient) is ComplianceVerdict.SEMI_COMPLIANT
    assert classify(0.1, 0, lenient) is ComplianceVerdict.NOT_COMPLIANT
