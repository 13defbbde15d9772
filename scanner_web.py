import asyncio
import json
import logging
from typing import Any, Dict, List, Sequence

from playwright.async_api import async_playwright, Error as PlaywrightError

from config import Settings
from errors import ScanFailure
from models import Violation
from utils import ensure_axe_js

logger = logging.getLogger(__name__)

AXE_RUN_JS = """
async (tags) => {
    if (!window.axe || !axe.run) {
        return {error: 'axe not loaded'}
    }
    const options = {resultTypes: ['violations']};
    if (tags && tags.length) {
        options.runOnly = {type: 'tag', values: tags};
    }
    return await axe.run(document, options);
}
"""


async def run_axe_on_url(url: str, settings: Settings) -> List[Violation]:
    # the CDN download blocks; keep it off the event loop
    axe_path = await asyncio.to_thread(ensure_axe_js, settings.assets_dir, settings.axe_cdn)
    timeout_ms = int(settings.scan_timeout * 1000)
    try:
        async with async_playwright() as p:
            browser = await p.chromium.launch(args=["--no-sandbox"], headless=True)
            try:
                page = await browser.new_page()
                page.set_default_timeout(timeout_ms)
                await page.goto(url)
                # inject axe
                await page.add_script_tag(path=axe_path)
                result = await page.evaluate(AXE_RUN_JS, list(settings.axe_tags))
            finally:
                await browser.close()
    except PlaywrightError as e:
        raise ScanFailure(f"Browser scan of {url} failed: {e}") from e
    return summarize_axe(result)


def summarize_axe(result: Any) -> List[Violation]:
    """Turn a raw ``axe.run`` result into Violation records."""
    if isinstance(result, str):
        try:
            result = json.loads(result)
        except ValueError:
            raise ScanFailure("unexpected axe result") from None
    if not isinstance(result, dict):
        raise ScanFailure("unexpected axe result")
    if result.get("error"):
        raise ScanFailure(f"axe failed: {result['error']}")
    raw: Sequence[Dict[str, Any]] = result.get("violations") or []
    return [Violation.from_axe(v) for v in raw]
