import logging
import os
import re
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator, List, Optional

from utils import safe_filename

logger = logging.getLogger(__name__)

ID_RE = re.compile(r"^report_\d+(?:_[a-z0-9-]+)?(?:-\d+)?\.pdf$")
PARTIAL_SUFFIX = ".part"


@dataclass(frozen=True)
class Artifact:
    identifier: str
    path: str
    size: int


class ArtifactStore:
    """
    Append-only directory of generated reports.

    Identifiers are timestamp based (``report_<ms>_<label>.pdf``). Writes go to a
    ``.part`` file that is renamed into place only once it is flushed and closed,
    so a reader never sees a half-written report. ``max_age`` (seconds) turns on
    retention: ``purge_expired`` removes reports older than that. ``None`` keeps
    everything.
    """

    def __init__(self, root: str, max_age: Optional[float] = None):
        self.root = Path(root)
        self.max_age = max_age
        self.root.mkdir(parents=True, exist_ok=True)

    def new_identifier(self, label: str = "") -> str:
        """Pick a fresh identifier and claim its ``.part`` file so no other writer can take it."""
        stamp = int(time.time() * 1000)
        base = f"report_{stamp}"
        if label:
            base += "_" + safe_filename(label)
        identifier, n = f"{base}.pdf", 1
        while True:
            if not (self.root / identifier).exists():
                try:
                    with open(self.root / (identifier + PARTIAL_SUFFIX), "xb"):
                        return identifier
                except FileExistsError:
                    pass
            identifier = f"{base}-{n}.pdf"
            n += 1

    def path_for(self, identifier: str) -> Optional[Path]:
        """Resolve a caller-supplied identifier; None when malformed or missing."""
        if not ID_RE.match(identifier or ""):
            return None
        path = self.root / identifier
        return path if path.is_file() else None

    @contextmanager
    def writer(self, identifier: str) -> Iterator[BinaryIO]:
        final = self.root / identifier
        partial = self.root / (identifier + PARTIAL_SUFFIX)
        fh = open(partial, "wb")
        try:
            yield fh
            fh.flush()
            os.fsync(fh.fileno())
        except BaseException:
            fh.close()
            try:
                partial.unlink()
            except OSError:
                pass
            raise
        fh.close()
        try:
            os.replace(partial, final)
        except OSError:
            partial.unlink(missing_ok=True)
            raise
        logger.info("Stored report %s", final)

    def commit_info(self, identifier: str) -> Artifact:
        path = self.root / identifier
        return Artifact(identifier=identifier, path=str(path), size=path.stat().st_size)

    def purge_expired(self, now: Optional[float] = None) -> List[str]:
        if self.max_age is None:
            return []
        cutoff = (now if now is not None else time.time()) - self.max_age
        removed = []
        for path in self.root.glob("report_*.pdf"):
            try:
                if path.stat().st_mtime < cutoff:
                    path.unlink()
                    removed.append(path.name)
            except FileNotFoundError:
                continue
        if removed:
            logger.info("Purged %d expired report(s)", len(removed))
        return removed
