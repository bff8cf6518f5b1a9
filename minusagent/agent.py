"""
Agent loop: alternate model turns with shell execution and skill lookups until the model
stops, asks for a tool this runtime cannot dispatch, or the iteration budget runs out.
"""
from __future__ import annotations

from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel

from minusagent.harness import HarnessNode
from minusagent.llm import LLMNode
from minusagent.logging_config import setup_logger
from minusagent.schema import Action, ActionKind, Step
from minusagent.skill import SkillRegistry

NO_SHELL_OBSERVATION = "[shell execution unavailable]"


class AgentState(str, Enum):
    COMPLETED = "completed"
    ABORTED = "aborted"
    TOOL_REQUESTED = "tool_requested"


class AgentResult(BaseModel):
    state: AgentState
    answer: Optional[str] = None
    iterations: int = 0
    tool: Optional[str] = None


class Agent:
    def __init__(
        self,
        node: LLMNode,
        harness: Optional[HarnessNode] = None,
        skills: Optional[SkillRegistry] = None,
        max_iterations: int = 10,
        on_step: Optional[Callable[[Step], None]] = None,
    ):
        self.logger = setup_logger(__name__)
        self.node = node
        self.harness = harness
        self.skills = skills if skills is not None else SkillRegistry()
        self.max_iterations = max(1, int(max_iterations))
        self.on_step = on_step

    def _emit(self, context) -> None:
        step = context.last_step()
        if self.on_step is not None and step is not None:
            self.on_step(step)

    def _execute(self, context) -> None:
        if self.harness is None:
            context.backfill_observation(NO_SHELL_OBSERVATION)
            context.action = Action.cont()
            return
        self.harness.run(context)

    def _use_skills(self, context, names) -> None:
        if not names:
            context.backfill_observation("[no skills requested]")
        else:
            context.backfill_observation(self.skills.resolve(names))
        context.action = Action.cont()

    def run(self, context) -> AgentResult:
        iterations = 0
        while iterations < self.max_iterations:
            iterations += 1
            action = self.node.run(context)
            self.logger.info(f"Agent iteration {iterations}/{self.max_iterations}: {action}")

            if action.kind == ActionKind.STOP:
                self._emit(context)
                return AgentResult(state=AgentState.COMPLETED, answer=context.final_answer(), iterations=iterations)

            if action.kind == ActionKind.CALL_TOOL:
                context.backfill_observation(f"[tool not dispatched: {action.tool}]")
                self._emit(context)
                self.logger.warning(f"Model requested unknown tool {action.tool!r}")
                return AgentResult(
                    state=AgentState.TOOL_REQUESTED,
                    answer=context.partial_answer(),
                    iterations=iterations,
                    tool=action.tool,
                )

            if action.kind == ActionKind.EXECUTE:
                if action.command:
                    self._execute(context)
                else:
                    context.backfill_observation("[execute requested without a command]")
                    context.action = Action.cont()
            elif action.kind == ActionKind.USE_SKILL:
                self._use_skills(context, action.skills)
            self._emit(context)

        self.logger.warning(f"Agent stopped after reaching {self.max_iterations} iterations")
        return AgentResult(state=AgentState.ABORTED, answer=context.partial_answer(), iterations=iterations)
