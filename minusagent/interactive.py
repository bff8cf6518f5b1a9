"""
Interactive REPL.

Chat mode streams each reply (any keypress interrupts it) and keeps the full conversation.
CoT mode runs the chain-of-thought loop per query and keeps only question/answer pairs in
history, so plans and intermediate thinking do not leak into later turns.
"""
from typing import Optional

from minusagent.cli.ui import thinking
from minusagent.context import Context
from minusagent.cot import ChainOfThought, LoopState
from minusagent.errors import MinusAgentError
from minusagent.flag import Signal
from minusagent.llm import LLMClient
from minusagent.logging_config import setup_logger
from minusagent.schema import Message
from minusagent.terminal import TerminalInterface
from minusagent.utils.keyboard import listening

EXIT_COMMANDS = ("exit", "quit")


class InteractiveSession:
    def __init__(
        self,
        client: LLMClient,
        terminal: Optional[TerminalInterface] = None,
        cot: bool = False,
        max_turns: int = 10,
        system_prompt: Optional[str] = None,
        spinner: Optional[bool] = None,
    ):
        self.logger = setup_logger(__name__)
        self.client = client
        self.terminal = terminal or TerminalInterface()
        self.cot = cot
        self.max_turns = max_turns
        self.context = Context(system_prompt)
        self.pause = Signal()
        self.spinner = spinner

    @property
    def mode(self) -> str:
        return "cot" if self.cot else "chat"

    def _chat(self, query: str) -> None:
        self.context.push_history(Message.user(query))
        with listening():
            result = self.client.stream(self.context.to_messages(), on_chunk=self.terminal.print_chunk)
        print()
        self.context.push_history(Message.assistant(result.content))
        if result.interrupted:
            self.terminal.print_system_message("reply interrupted")

    def _chain_of_thought(self, query: str) -> None:
        # The loop works on a scratch context seeded with the clean history.
        scratch = Context(self.context.system_prompt)
        scratch.history = list(self.context.history)
        scratch.set_user_message(query)
        with thinking(self.pause, enabled=self.spinner):
            result = ChainOfThought(self.client, max_turns=self.max_turns).run(scratch)
        self.context.push_history(Message.user(query))
        self.context.push_history(Message.assistant(result.answer or ""))
        self.terminal.print_agent_message(result.answer)
        if result.state == LoopState.ABORTED:
            self.terminal.print_system_message(f"stopped after {result.turns} turns without a final answer")

    def handle(self, query: str) -> bool:
        """Process one line of input; returns False when the session should end."""
        query = query.strip()
        if not query:
            return True
        if query.lower() in EXIT_COMMANDS:
            return False
        try:
            if self.cot:
                self._chain_of_thought(query)
            else:
                self._chat(query)
        except MinusAgentError as e:
            self.logger.error(f"Query failed in {self.mode} mode: {e}")
            self.terminal.print_error_message(str(e))
        return True

    def run(self) -> None:
        self.terminal.print_welcome_message(self.mode)
        while True:
            try:
                line = self.terminal.read_query()
            except (EOFError, KeyboardInterrupt):
                print()
                break
            if not self.handle(line):
                break
        self.logger.info("Interactive session ended")
