"""
Build log persistence — what the executor remembers between builds.

For every output the log records a digest of the command that built it
and a digest of the contents of the edge's order-only inputs.  Stored
as JSON in <out_dir>/.build_log.json.  Writes are atomic (write to a
temp file, then rename) so an interrupted build never leaves a torn log.
"""

from __future__ import annotations

import hashlib
import json
import logging
import tempfile
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

BUILD_LOG_FILE = ".build_log.json"
BUILD_LOG_VERSION = 1


class BuildLogEntry(BaseModel):
    """How one output was last built."""

    command_hash: str
    order_only_hash: str = ""


class BuildLog(BaseModel):
    """All entries, keyed by output path."""

    version: int = BUILD_LOG_VERSION
    entries: dict[str, BuildLogEntry] = Field(default_factory=dict)

    def get(self, output: Path) -> BuildLogEntry | None:
        return self.entries.get(str(output))

    def record(self, outputs: Iterable[Path], entry: BuildLogEntry) -> None:
        for output in outputs:
            self.entries[str(output)] = entry


def hash_command(command: str) -> str:
    return hashlib.sha256(command.encode("utf-8")).hexdigest()


def hash_contents(root: Path, paths: Iterable[Path]) -> str:
    """Digest of the named files' contents.  Missing files hash as absent."""
    digest = hashlib.sha256()
    for path in paths:
        digest.update(str(path).encode("utf-8") + b"\0")
        target = root / path
        if target.is_file():
            digest.update(hashlib.sha256(target.read_bytes()).digest())
        else:
            digest.update(b"<missing>")
    return digest.hexdigest()


def default_build_log_path(source_root: Path, out_dir: Path) -> Path:
    return source_root / out_dir / BUILD_LOG_FILE


def load_build_log(path: Path) -> BuildLog:
    """Load the build log.  A missing or unreadable log starts fresh."""
    if not path.is_file():
        logger.info("No build log at %s — starting fresh", path)
        return BuildLog()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        log = BuildLog.model_validate(data)
    except json.JSONDecodeError as e:
        logger.warning("Corrupt build log %s: %s — starting fresh", path, e)
        return BuildLog()
    except Exception as e:
        logger.warning("Cannot load build log from %s: %s — starting fresh", path, e)
        return BuildLog()

    if log.version != BUILD_LOG_VERSION:
        logger.info("Build log %s has version %d — starting fresh", path, log.version)
        return BuildLog()
    return log


def save_build_log(log: BuildLog, path: Path) -> None:
    """Save the build log (atomic write)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    content = json.dumps(log.model_dump(mode="json"), indent=2, sort_keys=True) + "\n"

    _fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".build_log_", suffix=".tmp")
    tmp = Path(tmp_path)
    try:
        with open(_fd, "w", encoding="utf-8") as fh:
            fh.write(content)
        tmp.replace(path)
        logger.debug("Build log saved to %s", path)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise
