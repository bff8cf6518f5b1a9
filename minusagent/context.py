'''
The context is the state threaded through every node: the system prompt, the pending user
message, the conversation history and the trajectory of thought/action/observation steps.
History and trajectory only grow by append; the one exception is the observation of the
most recent step, which a side-effecting node may back-fill once it completes.
'''

from typing import Any, Dict, List, Optional

from minusagent.errors import ContextError
from minusagent.prompt import render_messages
from minusagent.schema import Action, Message, Role, Step, Thought


class Context:
    def __init__(self, system_prompt: Optional[str] = None):
        self.system_prompt = system_prompt
        self.user_message: Optional[str] = None
        self.history: List[Message] = []
        self.trajectory: List[Step] = []
        self.action: Action = Action.pending()
        self._turn_start = 0

    def __repr__(self):
        return (
            f"Context(action={self.action}, history={len(self.history)} messages, "
            f"trajectory={len(self.trajectory)} steps)"
        )

    def set_system_prompt(self, prompt: str) -> None:
        self.system_prompt = prompt

    def set_user_message(self, message: str) -> None:
        self.user_message = message

    def clear_user_message(self) -> None:
        self.user_message = None

    def push_history(self, message: Message) -> None:
        self.history.append(message)

    def init_step(self, query: str) -> Step:
        step = Step(thought=Thought(), action=Action.pending(), observation=f"User Query: {query}")
        self._turn_start = len(self.trajectory)
        self.trajectory.append(step)
        self.action = Action.pending()
        return step

    def log_step(
        self,
        thought: Thought,
        action: Action,
        parameters: Optional[Dict[str, Any]] = None,
        observation: Optional[str] = None,
        answer: Optional[str] = None,
    ) -> Step:
        step = Step(
            thought=thought,
            action=action,
            parameters=parameters,
            observation=observation,
            answer=answer,
        )
        self.trajectory.append(step)
        self.action = action
        return step

    def backfill_observation(self, text: str) -> Step:
        if not self.trajectory:
            raise ContextError("Cannot back-fill an observation: the trajectory is empty")
        step = self.trajectory[-1]
        if step.observation:
            step.observation = f"{step.observation}\n{text}"
        else:
            step.observation = text
        return step

    def last_step(self) -> Optional[Step]:
        return self.trajectory[-1] if self.trajectory else None

    def last_content(self):
        return self.history[-1].content if self.history else None

    def last_assistant_text(self) -> Optional[str]:
        for message in reversed(self.history):
            if message.role == Role.ASSISTANT:
                return message.text()
        return None

    def final_answer(self) -> Optional[str]:
        """Answer of the terminal step, else the last assistant text."""
        step = self.last_step()
        if step is not None and step.answer:
            return step.answer
        return self.last_assistant_text()

    def partial_answer(self) -> Optional[str]:
        """Best available result of the current query when a loop ends without an explicit answer."""
        for step in reversed(self.trajectory[self._turn_start:]):
            if step.answer:
                return step.answer
            if step.thought.content:
                return step.thought.content
            if step.observation:
                return step.observation
        return self.last_assistant_text()

    def to_messages(self) -> List[Dict[str, str]]:
        return render_messages(self)
