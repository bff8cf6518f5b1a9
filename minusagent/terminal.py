"""
Terminal output for the CLI: answers, trajectory steps, streamed chunks and the shell
confirmation prompt.
"""
import sys
from typing import Callable, Optional

from minusagent.cli.style import Styler, styler as default_styler
from minusagent.logging_config import setup_logger
from minusagent.schema import ActionKind, Step
from minusagent.utils.text import strip_ansi, truncate_middle

PREVIEW_CHARS = 400


class TerminalInterface:
    def __init__(
        self,
        username: str = "you",
        styler: Optional[Styler] = None,
        read_line: Callable[[str], str] = input,
    ) -> None:
        self.username = username
        self.styler = styler or default_styler
        self.read_line = read_line
        self.logger = setup_logger(__name__)

    def print_welcome_message(self, mode: str) -> None:
        print(self.styler.header(f"minusagent ({mode})"))
        print(self.styler.color("dim", "Type 'exit' or 'quit' to leave. Press any key to interrupt a streamed reply."))

    def read_query(self) -> str:
        return self.read_line(self.styler.color("user", f"{self.username}") + ": ")

    def print_agent_message(self, message: Optional[str]) -> None:
        print(self.styler.color("warn", "agent: ") + (message or ""))
        self.logger.info(f"agent: {message}")

    def print_chunk(self, chunk: str) -> None:
        sys.stdout.write(chunk)
        sys.stdout.flush()

    def print_error_message(self, message: str) -> None:
        print(self.styler.color("error", "Error: ") + message)
        self.logger.error(message)

    def print_system_message(self, message: str) -> None:
        print(self.styler.color("accent", "System: ") + message)
        self.logger.warning(f"System: {message}")

    def print_thinking(self, thought: str) -> None:
        print(self.styler.color("dim", f"  thought: {thought}"))

    def print_step(self, step: Step) -> None:
        """One trajectory step, compacted; long observations are cut in the middle."""
        if step.thought.content:
            self.print_thinking(truncate_middle(step.thought.content, PREVIEW_CHARS))
        if step.action.kind != ActionKind.STOP:
            print(self.styler.tag(str(step.action), "info"))
        if step.observation:
            for line in truncate_middle(strip_ansi(step.observation), PREVIEW_CHARS).splitlines():
                print(self.styler.color("dim", "  " + line))

    def confirm_command(self, command: str) -> bool:
        print()
        print(self.styler.tag("shell", "warn"), command)
        answer = self.read_line("Run this command? [y/N] ").strip().lower()
        approved = answer in ("y", "yes")
        self.logger.info(f"Shell confirmation for '{command}': {'approved' if approved else 'denied'}")
        return approved
