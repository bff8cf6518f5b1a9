from typing import Callable, Optional

from minusagent.agent import Agent, AgentResult
from minusagent.config import Config, load_config, skills_dir
from minusagent.context import Context
from minusagent.flag import Signal
from minusagent.harness import HarnessNode
from minusagent.llm import LLMClient, LLMNode
from minusagent.logging_config import setup_logger
from minusagent.node import RetryPolicy
from minusagent.prompt import BASE_SYSTEM_PROMPT, build_system_prompt, render_agent_messages
from minusagent.schema import Step
from minusagent.shell import ShellInterface
from minusagent.skill import SkillRegistry


class Session:
    """
    One agent conversation: a model client, the user's skills, a shell harness and a
    context that carries the trajectory from one query to the next.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        model: Optional[str] = None,
        client: Optional[LLMClient] = None,
        skills: Optional[SkillRegistry] = None,
        shell: Optional[ShellInterface] = None,
        confirm: Optional[Callable[[str], bool]] = None,
        pause: Optional[Signal] = None,
        on_step: Optional[Callable[[Step], None]] = None,
        max_iterations: Optional[int] = None,
    ):
        self.logger = setup_logger(__name__)
        if client is None or max_iterations is None:
            config = config or load_config()
        self.client = client or LLMClient.from_config(config.get_llm(model))
        self.skills = skills if skills is not None else SkillRegistry.load_dir(skills_dir())
        self.pause = pause or Signal()
        self.context = Context(build_system_prompt(BASE_SYSTEM_PROMPT, self.skills.model_invocable()))
        self.agent = Agent(
            node=LLMNode(self.client, retry=RetryPolicy(), render=render_agent_messages),
            harness=HarnessNode(shell=shell, confirm=confirm, pause=self.pause),
            skills=self.skills,
            max_iterations=max_iterations if max_iterations is not None else config.agent.max_iterations,
            on_step=on_step,
        )
        self.logger.info(f"Session ready: model={self.client.model}, skills={len(self.skills)}")

    def run(self, query: str) -> AgentResult:
        self.context.init_step(query)
        result = self.agent.run(self.context)
        self.logger.info(f"Session query finished: {result.state.value} after {result.iterations} iterations")
        return result
