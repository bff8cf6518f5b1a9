from conftest import FakeClient, FakeShell, fenced

from minusagent.agent import NO_SHELL_OBSERVATION, Agent, AgentState
from minusagent.context import Context
from minusagent.harness import HarnessNode
from minusagent.llm import LLMNode
from minusagent.prompt import render_agent_messages
from minusagent.schema import CommandResult
from minusagent.session import Session
from minusagent.skill import Skill, SkillRegistry


def _agent(replies, shell=None, skills=None, max_iterations=10, on_step=None, harness=True):
    client = FakeClient(replies)
    node = LLMNode(client, render=render_agent_messages)
    harness_node = HarnessNode(shell=shell or FakeShell(CommandResult(stdout="a.txt\nb.txt\n"))) if harness else None
    agent = Agent(node, harness=harness_node, skills=skills, max_iterations=max_iterations, on_step=on_step)
    return agent, client


def _context(query):
    ctx = Context("system")
    ctx.init_step(query)
    return ctx


def test_execute_then_stop():
    shell = FakeShell(CommandResult(stdout="a.txt\nb.txt\n"))
    seen = []
    agent, client = _agent(
        [
            fenced({"thought": {"thought_type": "Solving", "content": "list them"}, "action": "execute", "command": "ls"}),
            fenced({"action": "stop", "answer": "There are 2 files."}),
        ],
        shell=shell,
        on_step=seen.append,
    )
    ctx = _context("How many files?")
    result = agent.run(ctx)

    assert result.state == AgentState.COMPLETED
    assert result.answer == "There are 2 files."
    assert result.iterations == 2
    assert shell.commands == ["ls"]
    assert ctx.trajectory[1].observation == "a.txt\nb.txt\n"
    assert "Observation: a.txt" in client.calls[1][1]["content"]
    assert len(seen) == 2


def test_use_skill_backfills_bodies_and_markers():
    skills = SkillRegistry([Skill(name="deploy", description="Deploy", script="Run make deploy.")])
    agent, _ = _agent(
        [
            fenced({"action": "use_skill", "skills": ["deploy", "ghost"]}),
            fenced({"action": "stop", "answer": "ok"}),
        ],
        skills=skills,
    )
    ctx = _context("deploy it")
    result = agent.run(ctx)
    observation = ctx.trajectory[1].observation
    assert "Run make deploy." in observation
    assert "[skill not found: ghost]" in observation
    assert result.state == AgentState.COMPLETED


def test_unknown_tool_is_reported():
    agent, _ = _agent([fenced({"action": "browse", "url": "http://example.com"})])
    ctx = _context("look it up")
    result = agent.run(ctx)
    assert result.state == AgentState.TOOL_REQUESTED
    assert result.tool == "browse"
    assert "[tool not dispatched: browse]" in ctx.last_step().observation


def test_execute_without_harness():
    agent, _ = _agent(
        [fenced({"action": "execute", "command": "ls"}), fenced({"action": "stop", "answer": "no"})],
        harness=False,
    )
    ctx = _context("q")
    agent.run(ctx)
    assert ctx.trajectory[1].observation == NO_SHELL_OBSERVATION


def test_iteration_limit_aborts():
    replies = [fenced({"action": "continue", "thinking": f"still going {i}"}) for i in range(5)]
    agent, client = _agent(replies, max_iterations=3)
    result = agent.run(_context("q"))
    assert result.state == AgentState.ABORTED
    assert result.iterations == 3
    assert len(client.calls) == 3
    assert result.answer == "still going 2"


def test_session_runs_query_end_to_end():
    client = FakeClient(
        [
            fenced({"action": "execute", "command": "ls"}),
            fenced({"action": "stop", "answer": "two"}),
        ]
    )
    shell = FakeShell(CommandResult(stdout="x\ny\n"))
    session = Session(client=client, skills=SkillRegistry(), shell=shell, max_iterations=5)
    result = session.run("count files")
    assert result.answer == "two"
    assert session.context.trajectory[0].observation == "User Query: count files"
    assert client.calls[0][0]["role"] == "system"
    assert shell.commands == ["ls"]


def test_session_answers_are_scoped_to_each_query():
    client = FakeClient(
        [
            fenced({"action": "stop", "answer": "first answer"}),
            fenced({"action": "stop", "thought": {"thought_type": "Solving", "content": "second done"}}),
            fenced({"action": "continue", "thinking": "third, still working"}),
        ]
    )
    session = Session(client=client, skills=SkillRegistry(), shell=FakeShell(CommandResult()), max_iterations=1)
    assert session.run("first").answer == "first answer"

    second = session.run("second")
    assert second.answer != "first answer"
    assert "second done" in second.answer

    third = session.run("third")
    assert third.state == AgentState.ABORTED
    assert third.answer == "third, still working"
    # The trajectory itself still spans every query
    assert "first answer" in client.calls[2][1]["content"]
