"""
Response parsing for untrusted model output.

`parse_response` is total: whatever the model returns, it yields an Action, a payload and
display text. Output that cannot be understood as structured data becomes the final answer.
"""
from __future__ import annotations

import json
import re
from typing import Any, Dict, Optional, Tuple

import yaml

from minusagent.logging_config import setup_logger
from minusagent.schema import Action, ParsedReply, PlainText, StructuredObject, Thought, ThoughtKind

logger = setup_logger(__name__)

_TAG_RE = re.compile(r"^<(continue|stop)>(.*)</\1>$", re.IGNORECASE | re.DOTALL)
_FENCE_RE = re.compile(r"```[ \t]*(json|yaml|yml)\b[^\n]*\n?", re.IGNORECASE)
_ANY_FENCE_RE = re.compile(r"```([^\n`]*)")

_THOUGHT_KINDS = {
    "planning": ThoughtKind.PLANNING,
    "solving": ThoughtKind.SOLVING,
    "goalsetting": ThoughtKind.GOAL_SETTING,
    "goal_setting": ThoughtKind.GOAL_SETTING,
}


def extract_fenced_block(text: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Return (language, body) of the first json/yaml fenced block, else of the first untagged
    block with an empty language, else (None, None).
    """
    match = _FENCE_RE.search(text)
    if match:
        start = match.end()
        end = text.find("```", start)
        body = text[start:] if end == -1 else text[start:end]
        return match.group(1).lower(), body

    # Fences pair up, so only every other one opens a block.
    fences = list(_ANY_FENCE_RE.finditer(text))
    for i in range(0, len(fences), 2):
        if fences[i].group(1).strip():
            continue
        start = fences[i].end()
        if text.startswith("\n", start):
            start += 1
        end = fences[i + 1].start() if i + 1 < len(fences) else len(text)
        return "", text[start:end]
    return None, None


def _load(candidate: str, lang: Optional[str]) -> Any:
    if lang == "":
        data = _load(candidate, "json")
        return data if isinstance(data, dict) else _load(candidate, "yaml")
    try:
        if lang in ("yaml", "yml"):
            return yaml.safe_load(candidate)
        return json.loads(candidate)
    except (ValueError, RecursionError, yaml.YAMLError) as e:
        logger.debug(f"Structured parse failed ({lang or 'json'}): {e}")
        return None


def _plain_data(value: Any) -> Any:
    """Reduce YAML scalars (dates, sets, binary) to JSON-safe values."""
    if isinstance(value, dict):
        return {str(k): _plain_data(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_plain_data(v) for v in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def map_action(value: Any, data: Dict[str, Any]) -> Action:
    if value is None:
        return Action.stop()
    literal = str(value).strip()
    key = literal.lower().replace("-", "_").replace(" ", "_")
    if key in ("", "stop", "completed"):
        return Action.stop()
    if key in ("continue", "running"):
        return Action.cont()
    if key == "pending":
        return Action.pending()
    if key == "execute":
        command = data.get("command")
        return Action.execute(command if isinstance(command, str) and command.strip() else None)
    if key in ("use_skill", "useskill"):
        skills = data.get("skills")
        if isinstance(skills, str):
            skills = [skills]
        if not isinstance(skills, list):
            skills = []
        return Action.use_skill(str(s) for s in skills)
    return Action.call_tool(literal)


def parse_thought(data: Dict[str, Any]) -> Thought:
    raw = data.get("thought")
    if isinstance(raw, dict):
        kind_key = str(raw.get("thought_type") or raw.get("kind") or "").strip().lower()
        content = raw.get("content")
        return Thought(
            kind=_THOUGHT_KINDS.get(kind_key, ThoughtKind.NONE),
            content=str(content) if content is not None else None,
        )
    if isinstance(raw, str) and raw.strip():
        return Thought(kind=ThoughtKind.SOLVING, content=raw)
    thinking = data.get("thinking")
    if isinstance(thinking, str) and thinking.strip():
        return Thought(kind=ThoughtKind.SOLVING, content=thinking)
    return Thought()


def _display(payload: Dict[str, Any]) -> str:
    answer = payload.get("answer")
    if answer is not None:
        return answer if isinstance(answer, str) else json.dumps(answer, ensure_ascii=False, default=str)
    thought = parse_thought(payload)
    if thought.content:
        return thought.content
    return json.dumps(payload, ensure_ascii=False, default=str)


def _plain(action: Action, text: str) -> ParsedReply:
    return ParsedReply(action=action, payload=PlainText(text=text), display=text)


def parse_response(text) -> ParsedReply:
    if text is None:
        text = ""
    elif not isinstance(text, str):
        text = str(text)
    stripped = text.strip()

    tagged = _TAG_RE.match(stripped)
    if tagged:
        inner = tagged.group(2).strip()
        action = Action.cont() if tagged.group(1).lower() == "continue" else Action.stop()
        return _plain(action, inner)

    lang, block = extract_fenced_block(text)
    candidate = block if block is not None else stripped
    data = _load(candidate.strip(), lang)
    if not isinstance(data, dict):
        return _plain(Action.stop(), stripped)

    try:
        data = _plain_data(data)
    except RecursionError:
        return _plain(Action.stop(), stripped)
    action = map_action(data.get("action"), data)
    payload = {k: v for k, v in data.items() if k != "action"}
    return ParsedReply(action=action, payload=StructuredObject(data=payload), display=_display(payload))
