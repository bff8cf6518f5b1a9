import os
import subprocess
from typing import Optional

from minusagent.logging_config import setup_logger
from minusagent.schema import CommandResult

TIMEOUT_EXIT_CODE = 124


class ShellInterface:
    def __init__(self, timeout_seconds: Optional[int] = None, max_capture: Optional[int] = None, cwd: Optional[str] = None):
        self.logger = setup_logger(__name__)
        try:
            self.timeout_seconds = int(timeout_seconds if timeout_seconds is not None else os.getenv("MINUSAGENT_SHELL_TIMEOUT", "300"))
        except ValueError:
            self.timeout_seconds = 300
        try:
            self.max_capture = int(max_capture if max_capture is not None else os.getenv("MINUSAGENT_SHELL_MAX_CAPTURE", "50000"))
        except ValueError:
            self.max_capture = 50000
        self.cwd = cwd if cwd and os.path.isdir(cwd) else None

    def _truncate(self, s: Optional[str]) -> str:
        if s is None:
            return ''
        if len(s) <= self.max_capture:
            return s
        extra = len(s) - self.max_capture
        return s[: self.max_capture] + f"\n[...truncated {extra} chars]"

    def run(self, command: str) -> CommandResult:
        try:
            result = subprocess.run(
                command,
                shell=True,
                text=True,
                capture_output=True,
                stdin=subprocess.DEVNULL,
                timeout=self.timeout_seconds,
                cwd=self.cwd,
            )
        except subprocess.TimeoutExpired as e:
            self.logger.warning(f"Command timed out after {self.timeout_seconds}s: {command}")
            partial = e.stdout.decode(errors="replace") if isinstance(e.stdout, bytes) else (e.stdout or "")
            return CommandResult(
                stdout=self._truncate(partial),
                stderr=f"Command timed out after {self.timeout_seconds}s",
                exit_code=TIMEOUT_EXIT_CODE,
                timed_out=True,
            )
        except OSError as e:
            self.logger.error(f"Shell error for command '{command}': {e}")
            return CommandResult(stderr=f"Shell error: {e}", exit_code=127)
        stdout = self._truncate(result.stdout)
        stderr = self._truncate(result.stderr)
        self.logger.info(f"Executed command: {command}\nCWD: {self.cwd or '[process default]'}\nEXIT: {result.returncode}\nSTDOUT: {stdout[:200]}\nSTDERR: {stderr[:200]}")
        return CommandResult(stdout=stdout, stderr=stderr, exit_code=result.returncode)


def format_observation(result: CommandResult) -> str:
    """Observation text for the model: stdout, then bracketed stderr and exit-code annotations."""
    text = result.stdout
    if result.stderr:
        text += f"[stderr] {result.stderr}"
    if result.exit_code != 0:
        text += f"[exit code: {result.exit_code}]"
    return text
