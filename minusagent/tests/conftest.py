import json
import os
import tempfile
from pathlib import Path

# Keep test runs from writing minusagent.log into the working tree
os.environ.setdefault("LOG_FILE", str(Path(tempfile.gettempdir()) / "minusagent-tests.log"))

import pytest

from minusagent.schema import StreamResult


def completion(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def fenced(payload: dict) -> str:
    return "```json\n" + json.dumps(payload) + "\n```"


class FakeClient:
    """Stands in for LLMClient: replays scripted replies and records every request."""

    model = "fake-model"

    def __init__(self, replies=None, chunks=None):
        self.replies = list(replies or [])
        self.chunks = list(chunks or [])
        self.calls = []

    def complete(self, messages):
        self.calls.append(messages)
        if not self.replies:
            raise AssertionError("FakeClient ran out of scripted replies")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return completion(reply)

    def stream(self, messages, on_chunk=None, interrupt=None):
        self.calls.append(messages)
        for chunk in self.chunks:
            if on_chunk:
                on_chunk(chunk)
        return StreamResult(content="".join(self.chunks), interrupted=False)


class FakeShell:
    def __init__(self, result):
        self.result = result
        self.commands = []

    def run(self, command):
        self.commands.append(command)
        return self.result


@pytest.fixture
def fake_client():
    return FakeClient
