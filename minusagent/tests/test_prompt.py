from minusagent.context import Context
from minusagent.prompt import (
    BASE_SYSTEM_PROMPT,
    build_system_prompt,
    fill,
    render_agent_messages,
    render_messages,
    render_text,
)
from minusagent.schema import Action, Message, Thought, ThoughtKind
from minusagent.skill import Skill


def _ctx():
    ctx = Context("S")
    ctx.push_history(Message.user("h1"))
    ctx.push_history(Message.assistant("h2"))
    ctx.set_user_message("U")
    return ctx


def test_render_messages_order():
    messages = render_messages(_ctx())
    assert [m["content"] for m in messages] == ["S", "h1", "h2", "U"]
    assert [m["role"] for m in messages] == ["system", "user", "assistant", "user"]


def test_render_messages_without_system_or_user():
    ctx = Context()
    ctx.push_history(Message.user("only"))
    assert render_messages(ctx) == [{"role": "user", "content": "only"}]


def test_render_text_labels_roles_in_order():
    text = render_text(_ctx())
    assert text.index("## System") < text.index("[user] h1") < text.index("[assistant] h2") < text.index("## User")


def test_agent_messages_flatten_trajectory():
    ctx = Context("S")
    ctx.init_step("count files")
    ctx.log_step(Thought(kind=ThoughtKind.SOLVING, content="use ls"), Action.execute("ls"), parameters={"command": "ls"})
    ctx.backfill_observation("a.txt")
    messages = render_agent_messages(ctx)
    assert messages[0] == {"role": "system", "content": "S"}
    body = messages[1]["content"]
    assert "### Step 1" in body and "User Query: count files" in body
    assert "- Action: Execute(ls)" in body
    assert "- Observation: a.txt" in body


def test_fill_only_touches_named_keys():
    assert fill('{"a": {x}}', x=1) == '{"a": 1}'
    assert fill("{missing}", x=1) == "{missing}"


def test_system_prompt_lists_model_invocable_skills():
    skills = [
        Skill(name="deploy", description="Deploy the app"),
        Skill(name="secret", description="Hidden", disable_model_invocation=True),
    ]
    prompt = build_system_prompt(BASE_SYSTEM_PROMPT, skills)
    assert "## Available Skills" in prompt
    assert "- deploy: Deploy the app" in prompt
    assert "secret" not in prompt
    assert build_system_prompt("base", []) == "base"
