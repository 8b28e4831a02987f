"""
Shell adapter — runs an edge's expanded command with /bin/sh.

The command runs in the source root.  A zero exit status is not enough:
every output the edge declares must exist afterwards, or the edge is
reported failed so a later build retries it.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from suite_harness.adapters.base import Adapter, ExecutionContext
from suite_harness.core.models.action import Receipt

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 300


class ShellCommandAdapter(Adapter):
    """Params: ``command``, ``outputs``, optional ``timeout`` (s) and ``cwd``."""

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        return shutil.which("sh") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        if not context.action.command:
            return False, "Missing required param: 'command'"
        if not Path(context.working_dir).is_dir():
            return False, f"Working directory does not exist: {context.working_dir}"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        action = context.action
        timeout = action.params.get("timeout", DEFAULT_TIMEOUT)
        logger.debug("sh -c %r (cwd=%s)", action.command, context.working_dir)

        try:
            proc = subprocess.run(
                action.command,
                shell=True,
                cwd=context.working_dir,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                adapter=self.name, action_id=action.id, error=f"Command timed out after {timeout}s"
            )
        except OSError as e:
            return Receipt.failure(
                adapter=self.name, action_id=action.id, error=f"Cannot run command: {e}"
            )

        stdout, stderr = proc.stdout.strip(), proc.stderr.strip()
        metadata = {"command": action.command, "return_code": proc.returncode}
        if proc.returncode != 0:
            return Receipt.failure(
                adapter=self.name,
                action_id=action.id,
                error=stderr or f"Command exited with code {proc.returncode}",
                output=stdout,
                metadata=metadata,
            )

        missing = [o for o in action.outputs if not (Path(context.working_dir) / o).exists()]
        if missing:
            return Receipt.failure(
                adapter=self.name,
                action_id=action.id,
                error=f"command did not produce {', '.join(repr(m) for m in missing)}",
                output=stdout,
                metadata=metadata,
            )
        return Receipt.success(adapter=self.name, action_id=action.id, output=stdout, metadata=metadata)
