"""
Prompt rendering: turns a context into the message list (or flattened text) sent to the model.

Ordering is fixed: system instructions first, then history in its original order, then the
current user message. Nothing here reorders or deduplicates history.
"""
from __future__ import annotations

import json
from importlib import resources
from typing import Dict, Iterable, List


def _read_instruction(name: str) -> str:
    return resources.files("minusagent").joinpath("instructions", name).read_text(encoding="utf-8")


BASE_SYSTEM_PROMPT = _read_instruction("system_prompt.md")


def section(title: str) -> str:
    return f"## {title}\n"


def subsection(title: str) -> str:
    return f"### {title}\n"


def bullet_point(content: str) -> str:
    return f"- {content}\n"


def fill(template: str, **values) -> str:
    """Substitute `{key}` placeholders for the given keys only, leaving other braces untouched."""
    out = template
    for key, value in values.items():
        out = out.replace("{" + key + "}", str(value))
    return out


def render_messages(context) -> List[Dict[str, str]]:
    messages: List[Dict[str, str]] = []
    if context.system_prompt:
        messages.append({"role": "system", "content": context.system_prompt})
    messages.extend(message.to_wire() for message in context.history)
    if context.user_message:
        messages.append({"role": "user", "content": context.user_message})
    return messages


def render_trajectory(context) -> str:
    prompt = ""
    if not context.trajectory:
        return prompt
    prompt += section("Trajectory")
    for i, step in enumerate(context.trajectory, start=1):
        prompt += subsection(f"Step {i}")
        if step.thought.content:
            prompt += bullet_point(f"Thought ({step.thought.kind.value}): {step.thought.content}")
        prompt += bullet_point(f"Action: {step.action}")
        if step.parameters:
            prompt += bullet_point(f"Parameters: {json.dumps(step.parameters, ensure_ascii=False, default=str)}")
        if step.observation:
            prompt += bullet_point(f"Observation: {step.observation}")
        if step.answer:
            prompt += bullet_point(f"Answer: {step.answer}")
        prompt += "\n"
    return prompt


def _render_body(context) -> str:
    body = ""
    if context.history:
        body += section("History")
        for message in context.history:
            body += f"[{message.role.value}] {message.text()}\n"
        body += "\n"
    body += render_trajectory(context)
    if context.user_message:
        body += section("User") + context.user_message + "\n"
    return body


def render_text(context) -> str:
    """Flatten the context into one prompt, labelling every history entry with its role."""
    prompt = ""
    if context.system_prompt:
        prompt += section("System") + context.system_prompt.rstrip() + "\n\n"
    return prompt + _render_body(context)


def render_agent_messages(context) -> List[Dict[str, str]]:
    """System prompt as its own message; history, trajectory and query flattened into the user turn."""
    messages: List[Dict[str, str]] = []
    if context.system_prompt:
        messages.append({"role": "system", "content": context.system_prompt})
    messages.append({"role": "user", "content": _render_body(context)})
    return messages


def build_system_prompt(base: str, skills: Iterable = ()) -> str:
    hints = [
        f"- {skill.name}: {skill.description}"
        for skill in skills
        if not skill.disable_model_invocation
    ]
    if not hints:
        return base
    return base.rstrip() + "\n\n" + section("Available Skills") + "\n".join(hints) + "\n"
