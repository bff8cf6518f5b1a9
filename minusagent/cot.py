"""
Chain-of-thought loop: one planning call, then thinking calls that work through the todo list
until the model stops or the turn budget runs out.
"""
from __future__ import annotations

import json
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from minusagent.llm import LLMClient, LLMNode
from minusagent.logging_config import setup_logger
from minusagent.node import RetryPolicy
from minusagent.prompt import fill, render_messages
from minusagent.schema import Action, ActionKind, Message
from minusagent.skill import load_bundled


class LoopState(str, Enum):
    PLANNING = "planning"
    THINKING = "thinking"
    COMPLETED = "completed"
    ABORTED = "aborted"


class CoTResult(BaseModel):
    state: LoopState
    action: Action
    answer: Optional[str] = None
    invocations: int = 0
    turns: int = 0


class ThoughtNode(LLMNode):
    """LLM turn over the plain message list (system, history, current user message)."""

    def __init__(self, client: LLMClient, retry: Optional[RetryPolicy] = None):
        super().__init__(client, retry=retry, render=render_messages)


def _format_todos(todos: List[Any]) -> str:
    if not todos:
        return "(none)"
    return "\n".join(f"- {t}" for t in todos)


class ChainOfThought:
    def __init__(
        self,
        client: LLMClient,
        max_turns: int = 10,
        plan_prompt: Optional[str] = None,
        thinking_prompt: Optional[str] = None,
        retry: Optional[RetryPolicy] = None,
    ):
        self.logger = setup_logger(__name__)
        self.node = ThoughtNode(client, retry=retry)
        self.max_turns = max(0, int(max_turns))
        self.plan_prompt = plan_prompt if plan_prompt is not None else load_bundled("plan").script
        self.thinking_prompt = thinking_prompt if thinking_prompt is not None else load_bundled("thinking").script
        self.state = LoopState.PLANNING

    def _latest_output(self, context, previous: Optional[Message]) -> Dict[str, Any]:
        """Fields of the most recent output; tag-dialect and free-text replies become its thinking."""
        step = context.last_step()
        latest = dict(step.parameters) if step is not None and step.parameters else {}
        if not latest.get("thinking"):
            if step is not None and step.thought.content:
                latest["thinking"] = step.thought.content
            elif not latest and previous is not None:
                latest["thinking"] = previous.text()
        return latest

    def _thinking_message(self, question: str, latest: Dict[str, Any]) -> str:
        todos = latest.get("todos")
        if isinstance(todos, str):
            todos = [todos]
        if not isinstance(todos, list):
            todos = []
        task = todos[0] if todos else latest.get("task", "")
        thinking = latest.get("thinking", "")
        if not isinstance(thinking, str):
            thinking = json.dumps(thinking, ensure_ascii=False, default=str)
        return fill(
            self.thinking_prompt,
            question=question,
            task=task or "(none)",
            todos=_format_todos(todos),
            thinking=thinking or "(none)",
        )

    def run(self, context) -> CoTResult:
        question = context.user_message or ""
        invocations = 0
        turns = 0

        self.state = LoopState.PLANNING
        context.set_user_message(fill(self.plan_prompt, question=question, max_turns=self.max_turns))
        try:
            self.node.run(context)
            invocations += 1

            self.state = LoopState.THINKING
            while context.action.kind == ActionKind.CONTINUE and turns < self.max_turns:
                # Only the most recent output feeds the next turn.
                previous = context.history.pop() if context.history else None
                latest = self._latest_output(context, previous)
                context.set_user_message(self._thinking_message(question, latest))
                self.node.run(context)
                invocations += 1
                turns += 1
                self.logger.info(f"CoT turn {turns}/{self.max_turns}: {context.action}")
        finally:
            context.set_user_message(question)

        action = context.action
        if action.kind == ActionKind.CONTINUE:
            self.state = LoopState.ABORTED
            answer = context.partial_answer()
            self.logger.warning(f"CoT turn budget of {self.max_turns} exhausted")
        elif action.is_terminal:
            self.state = LoopState.COMPLETED
            answer = context.final_answer()
        else:
            self.state = LoopState.COMPLETED
            answer = context.partial_answer()
        return CoTResult(state=self.state, action=action, answer=answer, invocations=invocations, turns=turns)
