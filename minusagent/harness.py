'''
The harness runs the shell command staged by an Execute action and records its output as
the observation of the step that requested it.
'''
import time
from typing import Callable, Optional

from minusagent.errors import MissingInputError
from minusagent.flag import Signal
from minusagent.node import Node
from minusagent.schema import Action, ActionKind
from minusagent.shell import ShellInterface, format_observation

DENIED_OBSERVATION = "[denied] user rejected the command"
# Gives the spinner one frame to clear its line before the confirmation prompt is printed.
PAUSE_SETTLE_SECONDS = 0.1


class HarnessNode(Node):
    def __init__(
        self,
        shell: Optional[ShellInterface] = None,
        confirm: Optional[Callable[[str], bool]] = None,
        pause: Optional[Signal] = None,
    ):
        # Shell commands are not idempotent, so the harness never retries.
        super().__init__(retry=None)
        self.shell = shell or ShellInterface()
        self.confirm = confirm
        self.pause = pause

    def prepare(self, context) -> str:
        action = context.action
        if action.kind != ActionKind.EXECUTE:
            step = context.last_step()
            action = step.action if step else action
        if action.kind != ActionKind.EXECUTE or not action.command:
            raise MissingInputError("no command to execute")
        return action.command

    def execute(self, prepared: str) -> str:
        if self.confirm is not None:
            if self.pause is not None:
                self.pause.on()
                time.sleep(PAUSE_SETTLE_SECONDS)
            try:
                approved = self.confirm(prepared)
            finally:
                if self.pause is not None:
                    self.pause.off()
            if not approved:
                self.logger.info(f"User denied command: {prepared}")
                return DENIED_OBSERVATION
        return format_observation(self.shell.run(prepared))

    def postprocess(self, prepared, raw, context) -> Action:
        context.backfill_observation(raw if raw else "[no output]")
        context.action = Action.cont()
        return context.action
