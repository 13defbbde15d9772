import logging
import pathlib
import re
from urllib.parse import urlparse

import requests

from errors import ScanFailure

logger = logging.getLogger(__name__)

URL_RE = re.compile(r"^https?://", re.I)


def ensure_axe_js(assets_dir: str, cdn_url: str) -> str:
    """Ensure axe.min.js exists locally, download from CDN if missing."""
    assets = pathlib.Path(assets_dir)
    assets.mkdir(parents=True, exist_ok=True)
    axe_path = assets / "axe.min.js"
    if axe_path.exists() and axe_path.stat().st_size > 0:
        return str(axe_path)
    logger.info("Downloading axe-core from %s", cdn_url)
    try:
        r = requests.get(cdn_url, timeout=20)
        r.raise_for_status()
    except requests.RequestException as e:
        raise ScanFailure(f"Could not download axe-core: {e}") from e
    axe_path.write_bytes(r.content)
    return str(axe_path)


def normalize_url(u: str) -> str:
    u = (u or "").strip()
    if not u: return u
    if not URL_RE.search(u): u = "https://" + u
    return u


def site_hostname(url: str) -> str:
    return urlparse(normalize_url(url)).hostname or ""


def safe_filename(name: str) -> str:
    from slugify import slugify
    return slugify(name or "report") or "report"
