"""
Command-line entry point.

    minusagent prompt "What is 15 + 27?"
    minusagent cot "What is 15 + 27?" --max-turns 3
    minusagent agent "How many Python files are here?" --yes
    minusagent interactive --cot
    minusagent --health

Heavy imports happen after LOG_LEVEL is set so module loggers pick up the chosen level.
"""
from __future__ import annotations

import argparse
import os
import sys
import time
from typing import List, Optional

from minusagent.logging_config import get_log_level_from_env


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="minusagent", description="Minimal LLM agent runtime.")
    parser.add_argument("-env", type=str, default=None, help="Set environment mode: prod or debug (sets logger level)")
    parser.add_argument("--model", type=str, default=None, help="Model to use (a configured entry, or overrides LLM_MODEL)")
    parser.add_argument("--health", action="store_true", help="Run environment health checks and exit")
    sub = parser.add_subparsers(dest="command")

    p = sub.add_parser("prompt", help="One-shot completion")
    p.add_argument("text")

    p = sub.add_parser("cot", help="Answer with the chain-of-thought loop")
    p.add_argument("text")
    p.add_argument("--max-turns", type=int, default=10)

    p = sub.add_parser("agent", help="Run the agent loop with shell access")
    p.add_argument("text")
    p.add_argument("--max-turns", type=int, default=None)
    p.add_argument("--yes", action="store_true", help="Run shell commands without asking")

    p = sub.add_parser("interactive", help="Start a REPL")
    p.add_argument("--cot", action="store_true", help="Use the chain-of-thought loop for each query")
    p.add_argument("--max-turns", type=int, default=10)
    return parser


def _health() -> int:
    from dotenv import load_dotenv
    from minusagent.utils.health import healthcheck_env

    load_dotenv()
    ok, messages = healthcheck_env()
    print("HEALTHCHECK")
    for m in messages:
        print(f"- {m}")
    print("RESULT:", "OK" if ok else "FAIL")
    return 0 if ok else 1


def _client(args):
    from minusagent.config import load_config
    from minusagent.llm import LLMClient

    return LLMClient.from_config(load_config(args.model).get_llm(args.model))


def _prompt(args) -> int:
    from minusagent.llm import LLMClient

    client = _client(args)
    reply = client.complete([{"role": "user", "content": args.text}])
    print(LLMClient.content_of(reply))
    return 0


def _cot(args) -> int:
    from minusagent.cli.ui import thinking
    from minusagent.context import Context
    from minusagent.cot import ChainOfThought, LoopState

    client = _client(args)
    context = Context()
    context.set_user_message(args.text)
    with thinking():
        result = ChainOfThought(client, max_turns=args.max_turns).run(context)
    if result.state == LoopState.ABORTED:
        print(f"[aborted after {result.turns} turns] {result.answer or ''}")
    else:
        print(result.answer or "")
    return 0


def _agent(args) -> int:
    from minusagent.agent import AgentState
    from minusagent.cli.ui import thinking
    from minusagent.config import load_config
    from minusagent.flag import Signal
    from minusagent.harness import PAUSE_SETTLE_SECONDS
    from minusagent.session import Session
    from minusagent.terminal import TerminalInterface

    terminal = TerminalInterface()
    pause = Signal()

    def show(step):
        pause.on()
        time.sleep(PAUSE_SETTLE_SECONDS)
        try:
            terminal.print_step(step)
        finally:
            pause.off()

    session = Session(
        config=load_config(args.model),
        model=args.model,
        confirm=None if args.yes else terminal.confirm_command,
        pause=pause,
        on_step=show,
        max_iterations=args.max_turns,
    )
    with thinking(pause):
        result = session.run(args.text)
    if result.state == AgentState.TOOL_REQUESTED:
        terminal.print_system_message(f"model asked for unsupported tool {result.tool!r}")
    elif result.state == AgentState.ABORTED:
        terminal.print_system_message(f"stopped after {result.iterations} iterations")
    terminal.print_agent_message(result.answer)
    return 0


def _interactive(args) -> int:
    from minusagent.interactive import InteractiveSession

    InteractiveSession(_client(args), cot=args.cot, max_turns=args.max_turns).run()
    return 0


COMMANDS = {
    "prompt": _prompt,
    "cot": _cot,
    "agent": _agent,
    "interactive": _interactive,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    os.environ["LOG_LEVEL"] = get_log_level_from_env(args.env)

    if args.health:
        return _health()
    if args.command is None:
        parser.print_help()
        return 2

    from minusagent.errors import MinusAgentError

    try:
        return COMMANDS[args.command](args)
    except MinusAgentError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
