import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from compliance import ComplianceThresholds
from snippets import SnippetTable, DEFAULT_TABLE

# -----------------------------
# Defaults
# -----------------------------
DEFAULT_PORT = 5000
DEFAULT_SCAN_TIMEOUT = 60.0
DEFAULT_AXE_TAGS = ("wcag2a", "wcag2aa", "wcag21a", "wcag21aa", "wcag22aa")
AXE_CDN = "https://cdnjs.cloudflare.com/ajax/libs/axe-core/4.9.1/axe.min.js"
NPX = "npx.cmd" if os.name == "nt" else "npx"


def resolve_data_dir() -> str:
    env_dir = os.getenv("DATA_DIR")
    if env_dir:
        try:
            Path(env_dir).mkdir(parents=True, exist_ok=True)
            return env_dir
        except PermissionError:
            pass
    tmp_dir = os.path.join(tempfile.gettempdir(), "access-auditor")
    Path(tmp_dir).mkdir(parents=True, exist_ok=True)
    return tmp_dir


@dataclass
class Settings:
    port: int = DEFAULT_PORT
    file_store_root: str = ""
    assets_dir: str = ""
    public_base_url: Optional[str] = None
    retention_seconds: Optional[float] = None
    scan_timeout: float = DEFAULT_SCAN_TIMEOUT
    axe_tags: Tuple[str, ...] = DEFAULT_AXE_TAGS
    axe_cdn: str = AXE_CDN
    npx: str = NPX
    app_name: str = "Accessibility Auditor"
    thresholds: ComplianceThresholds = field(default_factory=ComplianceThresholds)
    snippets: SnippetTable = DEFAULT_TABLE

    def __post_init__(self):
        if not self.file_store_root or not self.assets_dir:
            data_dir = resolve_data_dir()
            self.file_store_root = self.file_store_root or os.path.join(data_dir, "reports")
            self.assets_dir = self.assets_dir or os.path.join(data_dir, "assets")


def _float_env(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def load_settings() -> Settings:
    """Build Settings from the environment."""
    tags = tuple(t.strip() for t in os.getenv("AXE_TAGS", "").split(",") if t.strip())
    thresholds = ComplianceThresholds(
        compliant_min_score=_float_env("COMPLIANT_MIN_SCORE", 0.90),
        compliant_max_violations=_int_env("COMPLIANT_MAX_VIOLATIONS", 0),
        semi_compliant_min_score=_float_env("SEMI_COMPLIANT_MIN_SCORE", 0.50),
    )
    snippets_file = os.getenv("REMEDIATION_SNIPPETS_FILE", "").strip()
    snippets = SnippetTable.from_json(snippets_file) if snippets_file else DEFAULT_TABLE
    return Settings(
        port=_int_env("PORT", DEFAULT_PORT),
        file_store_root=os.getenv("REPORTS_DIR", ""),
        assets_dir=os.getenv("ASSETS_DIR", ""),
        public_base_url=os.getenv("PUBLIC_BASE_URL") or None,
        retention_seconds=_float_env("REPORT_RETENTION_SECONDS", None),
        scan_timeout=_float_env("SCAN_TIMEOUT", DEFAULT_SCAN_TIMEOUT),
        axe_tags=tags or DEFAULT_AXE_TAGS,
        axe_cdn=os.getenv("AXE_CDN", AXE_CDN),
        npx=os.getenv("NPX", NPX),
        app_name=os.getenv("BRAND_NAME", "Accessibility Auditor"),
        thresholds=thresholds,
        snippets=snippets,
    )
