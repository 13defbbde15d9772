import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from config import Settings
from errors import AuditError, ScanFailure
from models import AuditScoreReport, ScanResult, Violation
from scanner_lighthouse import run_lighthouse
from scanner_web import run_axe_on_url

logger = logging.getLogger(__name__)

AxeRunner = Callable[[str, Settings], Awaitable[List[Violation]]]
LighthouseRunner = Callable[[str, Settings], Awaitable[AuditScoreReport]]


class Scanner:
    """Runs the rule-checker and the page audit against one URL."""

    def __init__(self, settings: Settings, axe_runner: Optional[AxeRunner] = None,
                 lighthouse_runner: Optional[LighthouseRunner] = None):
        self.settings = settings
        self.axe_runner = axe_runner or run_axe_on_url
        self.lighthouse_runner = lighthouse_runner or run_lighthouse

    async def run_scan(self, url: str) -> ScanResult:
        logger.info("Scanning %s", url)
        # independent analyses of the same page; both must finish before composing
        axe_task = asyncio.ensure_future(self.axe_runner(url, self.settings))
        lh_task = asyncio.ensure_future(self.lighthouse_runner(url, self.settings))
        try:
            violations, audit_report = await asyncio.gather(axe_task, lh_task)
        except AuditError:
            raise
        except Exception as e:
            raise ScanFailure(str(e) or e.__class__.__name__) from e
        finally:
            pending = [t for t in (axe_task, lh_task) if not t.done()]
            for task in pending:
                task.cancel()
            if pending:
                # let the cancelled runner stop its browser or subprocess before we return
                await asyncio.gather(*pending, return_exceptions=True)
        logger.info("Scan of %s finished: %d violation(s), audit score %.2f",
                    url, len(violations), audit_report.overall_score)
        return ScanResult(violations=tuple(violations), audit_report=audit_report)
