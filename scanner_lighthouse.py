import asyncio
import json
import logging
import os
import tempfile

from config import Settings
from errors import ScanFailure
from models import AuditScoreReport

logger = logging.getLogger(__name__)


def lighthouse_command(url: str, settings: Settings, output_path: str):
    return [
        settings.npx,
        "lighthouse",
        url,
        "--only-categories=accessibility",
        "--output=json",
        "--quiet",
        "--chrome-flags=--headless --no-sandbox",
        f"--output-path={output_path}",
    ]


async def run_lighthouse(url: str, settings: Settings) -> AuditScoreReport:
    fd, tmp_path = tempfile.mkstemp(suffix=".json")
    os.close(fd)
    try:
        try:
            proc = await asyncio.create_subprocess_exec(
                *lighthouse_command(url, settings, tmp_path),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ScanFailure(f"Could not start Lighthouse: {e}") from e
        try:
            _out, err = await asyncio.wait_for(proc.communicate(), timeout=settings.scan_timeout)
        except asyncio.TimeoutError:
            raise ScanFailure(f"Lighthouse timed out after {settings.scan_timeout:g}s") from None
        finally:
            # timeout or cancellation: never leave lighthouse (and its chrome) running
            if proc.returncode is None:
                try:
                    proc.kill()
                except ProcessLookupError:
                    pass
                await proc.wait()
        if proc.returncode != 0:
            detail = (err or b"").decode("utf-8", "replace").strip().splitlines()
            raise ScanFailure(f"Lighthouse failed: {detail[-1] if detail else f'exit code {proc.returncode}'}")
        return load_lighthouse_report(tmp_path)
    finally:
        try:
            os.remove(tmp_path)
        except OSError:
            pass


def load_lighthouse_report(path: str) -> AuditScoreReport:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            lhr = json.load(fh)
    except (OSError, json.JSONDecodeError) as e:
        raise ScanFailure(f"Could not read Lighthouse results: {e}") from e
    if not isinstance(lhr, dict):
        raise ScanFailure("unexpected Lighthouse result")
    runtime_error = lhr.get("runtimeError") or {}
    if runtime_error.get("code", "NO_ERROR") != "NO_ERROR":
        raise ScanFailure(f"Lighthouse failed: {runtime_error.get('message') or runtime_error['code']}")
    report = AuditScoreReport.from_lighthouse(lhr)
    logger.debug("Lighthouse accessibility score %.2f (%d checks)",
                 report.overall_score, len(report.per_check_results))
    return report
