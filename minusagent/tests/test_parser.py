import json

import pytest

from minusagent.parser import extract_fenced_block, map_action, parse_response, parse_thought
from minusagent.schema import ActionKind, PlainText, StructuredObject, ThoughtKind


def test_fenced_json_continue_keeps_remaining_fields():
    text = 'Sure.\n```json\n{"action": "continue", "task": "add", "todos": ["add"]}\n```\n'
    reply = parse_response(text)
    assert reply.action.kind == ActionKind.CONTINUE
    assert isinstance(reply.payload, StructuredObject)
    assert reply.payload.data == {"task": "add", "todos": ["add"]}


def test_plain_text_becomes_stop_with_trimmed_text():
    reply = parse_response("   The answer is 42.  \n")
    assert reply.action.kind == ActionKind.STOP
    assert isinstance(reply.payload, PlainText)
    assert reply.payload.text == "The answer is 42."
    assert reply.display == "The answer is 42."


def test_bare_json_object_is_structured():
    reply = parse_response('{"action": "stop", "answer": "42"}')
    assert reply.action.kind == ActionKind.STOP
    assert reply.payload.data == {"answer": "42"}
    assert reply.display == "42"


def test_missing_action_means_stop():
    reply = parse_response('{"answer": "done"}')
    assert reply.action.kind == ActionKind.STOP


def test_unknown_action_is_tool_request():
    reply = parse_response('{"action": "search_web", "query": "x"}')
    assert reply.action.kind == ActionKind.CALL_TOOL
    assert reply.action.tool == "search_web"


def test_yaml_fence():
    reply = parse_response("```yaml\naction: continue\nthinking: step one\n```")
    assert reply.action.kind == ActionKind.CONTINUE
    assert reply.payload.data["thinking"] == "step one"
    assert reply.display == "step one"


@pytest.mark.parametrize(
    "text,kind,inner",
    [
        ("<continue>keep going</continue>", ActionKind.CONTINUE, "keep going"),
        ("<stop> final </stop>", ActionKind.STOP, "final"),
        ("<STOP>x</STOP>", ActionKind.STOP, "x"),
    ],
)
def test_tag_dialect(text, kind, inner):
    reply = parse_response(text)
    assert reply.action.kind == kind
    assert reply.payload.text == inner


@pytest.mark.parametrize(
    "text",
    [
        "",
        None,
        "```json\n{broken",
        "```json\n[1, 2, 3]\n```",
        "```yaml\n- a\n- b\n```",
        "{" * 5000,
        "\x00\xff garbage",
        42,
    ],
)
def test_parse_is_total(text):
    reply = parse_response(text)
    assert reply.action.kind == ActionKind.STOP
    assert isinstance(reply.payload, PlainText)


def test_unterminated_fence_runs_to_end():
    lang, body = extract_fenced_block('```json\n{"action": "stop"}')
    assert lang == "json"
    assert body == '{"action": "stop"}'
    assert parse_response('```json\n{"action": "stop", "answer": "ok"}').display == "ok"


def test_map_action_execute_and_skills():
    action = map_action("execute", {"command": "ls -la"})
    assert action.kind == ActionKind.EXECUTE
    assert action.command == "ls -la"

    action = map_action("use_skill", {"skills": "deploy"})
    assert action.kind == ActionKind.USE_SKILL
    assert action.skills == ("deploy",)

    assert map_action("Running", {}).kind == ActionKind.CONTINUE
    assert map_action("completed", {}).kind == ActionKind.STOP
    assert map_action("pending", {}).kind == ActionKind.PENDING


def test_parse_thought_variants():
    thought = parse_thought({"thought": {"thought_type": "Planning", "content": "make a plan"}})
    assert thought.kind == ThoughtKind.PLANNING
    assert thought.content == "make a plan"

    thought = parse_thought({"thinking": "hmm"})
    assert thought.kind == ThoughtKind.SOLVING
    assert thought.content == "hmm"

    assert parse_thought({}).content is None


def test_yaml_scalars_become_json_safe():
    reply = parse_response("```yaml\naction: continue\ndue: 2024-01-01\ntags: !!set {a: null}\n```")
    assert reply.action.kind == ActionKind.CONTINUE
    assert reply.payload.data == {"due": "2024-01-01", "tags": ["a"]}
    assert json.loads(json.dumps(reply.content())) == reply.payload.data


@pytest.mark.parametrize(
    "text,kind,field",
    [
        ('```\n{"action": "continue", "thinking": "x"}\n```', ActionKind.CONTINUE, "thinking"),
        ("Here you go:\n```\naction: stop\nanswer: done\n```", ActionKind.STOP, "answer"),
    ],
)
def test_untagged_fence_tries_json_then_yaml(text, kind, field):
    reply = parse_response(text)
    assert reply.action.kind == kind
    assert isinstance(reply.payload, StructuredObject)
    assert field in reply.payload.data


def test_untagged_fence_skips_other_languages():
    text = "```python\nprint('hi')\n```\nthen\n```\n{\"action\": \"stop\"}\n```"
    assert extract_fenced_block(text) == ("", '{"action": "stop"}\n')
    assert extract_fenced_block("no fences here") == (None, None)
