# Shared vocabulary of the agent: messages, actions, trajectory steps and parsed model replies.

import json
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class Message(BaseModel):
    role: Role
    content: Union[str, Dict[str, Any], List[Any]]

    @classmethod
    def system(cls, content) -> "Message":
        return cls(role=Role.SYSTEM, content=content)

    @classmethod
    def user(cls, content) -> "Message":
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(cls, content) -> "Message":
        return cls(role=Role.ASSISTANT, content=content)

    @classmethod
    def tool(cls, content) -> "Message":
        return cls(role=Role.TOOL, content=content)

    def text(self) -> str:
        if isinstance(self.content, str):
            return self.content
        return json.dumps(self.content, ensure_ascii=False, default=str)

    def to_wire(self) -> Dict[str, str]:
        return {"role": self.role.value, "content": self.text()}


class ThoughtKind(str, Enum):
    NONE = "none"
    PLANNING = "planning"
    SOLVING = "solving"
    GOAL_SETTING = "goal_setting"


class Thought(BaseModel):
    kind: ThoughtKind = ThoughtKind.NONE
    content: Optional[str] = None


class ActionKind(str, Enum):
    PENDING = "pending"
    CONTINUE = "continue"
    STOP = "stop"
    EXECUTE = "execute"
    CALL_TOOL = "call_tool"
    USE_SKILL = "use_skill"


class Action(BaseModel):
    """Discrete control signal produced by a node; exactly one is active per context."""

    model_config = ConfigDict(frozen=True)

    kind: ActionKind = ActionKind.PENDING
    command: Optional[str] = None
    tool: Optional[str] = None
    skills: Tuple[str, ...] = ()

    @classmethod
    def pending(cls) -> "Action":
        return cls(kind=ActionKind.PENDING)

    @classmethod
    def cont(cls) -> "Action":
        return cls(kind=ActionKind.CONTINUE)

    @classmethod
    def stop(cls) -> "Action":
        return cls(kind=ActionKind.STOP)

    @classmethod
    def execute(cls, command: Optional[str] = None) -> "Action":
        return cls(kind=ActionKind.EXECUTE, command=command)

    @classmethod
    def call_tool(cls, name: str) -> "Action":
        return cls(kind=ActionKind.CALL_TOOL, tool=name)

    @classmethod
    def use_skill(cls, names) -> "Action":
        return cls(kind=ActionKind.USE_SKILL, skills=tuple(names))

    @property
    def is_terminal(self) -> bool:
        return self.kind == ActionKind.STOP

    @property
    def is_continue(self) -> bool:
        return self.kind in (ActionKind.CONTINUE, ActionKind.EXECUTE, ActionKind.USE_SKILL)

    def __str__(self) -> str:
        if self.kind == ActionKind.EXECUTE:
            return f"Execute({self.command or ''})"
        if self.kind == ActionKind.CALL_TOOL:
            return f"CallTool({self.tool})"
        if self.kind == ActionKind.USE_SKILL:
            return f"UseSkill({', '.join(self.skills)})"
        return self.kind.value.capitalize()


class Step(BaseModel):
    thought: Thought = Field(default_factory=Thought)
    action: Action = Field(default_factory=Action.pending)
    parameters: Optional[Dict[str, Any]] = None
    observation: Optional[str] = None
    answer: Optional[str] = None


class StructuredObject(BaseModel):
    kind: Literal["structured"] = "structured"
    data: Dict[str, Any]


class PlainText(BaseModel):
    kind: Literal["text"] = "text"
    text: str


ParsedResponse = Annotated[Union[StructuredObject, PlainText], Field(discriminator="kind")]


class ParsedReply(BaseModel):
    action: Action
    payload: ParsedResponse
    display: str

    def content(self):
        """What the assistant contributed, in the shape stored in history."""
        if isinstance(self.payload, StructuredObject):
            return self.payload.data
        return self.payload.text


class StreamResult(BaseModel):
    content: str = ""
    interrupted: bool = False


class CommandResult(BaseModel):
    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0
    timed_out: bool = False
