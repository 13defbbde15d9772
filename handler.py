import asyncio
import logging
from typing import Any, Dict, Mapping, Optional, Tuple

from errors import AuditError, InvalidInput
from models import ScanTarget
from report import ReportComposer
from store import ArtifactStore
from utils import normalize_url

logger = logging.getLogger(__name__)


class AuditHandler:
    """
    The "run audit" operation: validate, scan, compose, and hand back a link.

    ``handle`` is the only place an internal failure becomes a caller-visible
    error payload. A report is advertised only after the store has committed it.
    """

    def __init__(self, scanner, composer: ReportComposer, store: ArtifactStore,
                 public_base_url: Optional[str] = None):
        self.scanner = scanner
        self.composer = composer
        self.store = store
        self.public_base_url = public_base_url

    @staticmethod
    def validate(payload: Optional[Mapping[str, Any]]) -> ScanTarget:
        payload = payload or {}
        url, name = payload.get("url"), payload.get("name")
        if not isinstance(url, str) or not url.strip() or not isinstance(name, str) or not name.strip():
            raise InvalidInput("URL and name are required")
        return ScanTarget(url=normalize_url(url), display_name=name.strip())

    def report_url(self, identifier: str, base_url: Optional[str] = None) -> str:
        base = (self.public_base_url or base_url or "").rstrip("/")
        return f"{base}/reports/{identifier}"

    async def run(self, payload: Optional[Mapping[str, Any]], base_url: Optional[str] = None) -> Dict[str, Any]:
        target = self.validate(payload)
        result = await self.scanner.run_scan(target.url)
        self.store.purge_expired()
        artifact = await self.composer.compose_async(target, result.violations, result.audit_report, self.store)
        verdict = self.composer.verdict(result.violations, result.audit_report)
        return {
            "reportUrl": self.report_url(artifact.identifier, base_url),
            "reportId": artifact.identifier,
            "verdict": verdict.value,
            "score": result.audit_report.overall_score,
            "violations": len(result.violations),
        }

    def handle(self, payload: Optional[Mapping[str, Any]], base_url: Optional[str] = None) -> Tuple[Dict[str, Any], int]:
        try:
            return asyncio.run(self.run(payload, base_url)), 200
        except AuditError as e:
            logger.warning("Audit failed (%s): %s", e.__class__.__name__, e)
            return {"error": str(e)}, e.status_code
        except Exception as e:
            logger.exception("Unexpected audit failure")
            return {"error": str(e) or e.__class__.__name__}, 500
