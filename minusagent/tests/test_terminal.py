import pytest

from minusagent.cli.style import Styler
from minusagent.schema import Action, Step, Thought, ThoughtKind
from minusagent.terminal import TerminalInterface
from minusagent.utils.text import strip_ansi, truncate_middle


def _terminal(answer="n"):
    return TerminalInterface(styler=Styler(enabled=False), read_line=lambda prompt: answer)


@pytest.mark.parametrize("answer,expected", [("y", True), ("YES", True), ("", False), ("no", False)])
def test_confirm_command(answer, expected, capsys):
    assert _terminal(answer).confirm_command("rm -rf build") is expected
    assert "[shell] rm -rf build" in capsys.readouterr().out


def test_print_step_shows_action_and_observation(capsys):
    step = Step(
        thought=Thought(kind=ThoughtKind.SOLVING, content="list files"),
        action=Action.execute("ls"),
        observation="\x1b[32ma.txt\x1b[0m\nb.txt",
    )
    _terminal().print_step(step)
    out = capsys.readouterr().out
    assert "thought: list files" in out
    assert "[Execute(ls)]" in out
    assert "  a.txt\n  b.txt" in out


def test_text_helpers():
    assert strip_ansi("\x1b[1mbold\x1b[0m") == "bold"
    assert truncate_middle("abcdefghij", 7, marker="..") == "abc..ij"
    assert truncate_middle("short", 10) == "short"
    assert truncate_middle("anything", 0) == ""


def test_no_color_keeps_tags_plain(monkeypatch):
    monkeypatch.setenv("NO_COLOR", "1")
    plain = Styler()
    assert not plain.enabled
    assert plain.tag("Execute(ls)", "warn") == "[Execute(ls)]"
    assert plain.color("error", "Error: ") == "Error: "
    assert "\x1b[" in Styler(enabled=True).tag("shell", "warn")
