from typing import Any, Callable, Dict, List, Optional
import json

import requests

from minusagent.errors import CompletionError
from minusagent.logging_config import setup_logger
from minusagent.node import Node, RetryPolicy
from minusagent.parser import parse_response, parse_thought
from minusagent.prompt import render_messages
from minusagent.schema import Action, Message, StreamResult, StructuredObject, Thought, ThoughtKind
from minusagent.utils.keyboard import key_pressed


class LLMClient:
    """Chat-completions client for any OpenAI-compatible endpoint."""

    def __init__(
        self,
        base_url: str,
        model: str,
        api_key: str,
        max_tokens: Optional[int] = None,
        timeout: float = 120,
        session: Optional[requests.Session] = None,
    ):
        self.logger = setup_logger(__name__)
        self.base_url = base_url
        self.model = model
        self.api_key = api_key
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config) -> "LLMClient":
        return cls(
            base_url=config.base_url,
            model=config.model,
            api_key=config.api_key,
            max_tokens=config.max_tokens,
        )

    def _headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    def _payload(self, messages: List[Dict[str, str]], stream: bool = False) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"model": self.model, "messages": messages}
        if self.max_tokens:
            payload["max_tokens"] = self.max_tokens
        if stream:
            payload["stream"] = True
        return payload

    def _post(self, messages: List[Dict[str, str]], stream: bool = False) -> requests.Response:
        try:
            r = self.session.post(
                self.base_url,
                headers=self._headers(),
                data=json.dumps(self._payload(messages, stream=stream)),
                timeout=self.timeout,
                stream=stream,
            )
        except requests.RequestException as e:
            self.logger.error(f"LLM request to {self.base_url} failed: {e}")
            raise CompletionError(f"LLM request failed: {e}") from e
        if not r.ok:
            body = r.text
            self.logger.error(f"LLM API error ({r.status_code}): {body[:500]}")
            raise CompletionError(f"LLM API error ({r.status_code}): {body}", status=r.status_code, body=body)
        return r

    def complete(self, messages: List[Dict[str, str]]) -> Dict[str, Any]:
        r = self._post(messages)
        try:
            data = r.json()
        except ValueError as e:
            raise CompletionError(f"LLM returned a non-JSON body: {r.text[:200]}", status=r.status_code, body=r.text) from e
        self.logger.info(f"LLM responded successfully ({self.model})")
        return data

    @staticmethod
    def content_of(response: Optional[Dict[str, Any]]) -> str:
        try:
            content = response["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            return ""
        return content if isinstance(content, str) else ""

    @staticmethod
    def _delta(frame: Any) -> str:
        try:
            content = frame["choices"][0]["delta"]["content"]
        except (KeyError, IndexError, TypeError):
            return ""
        return content if isinstance(content, str) else ""

    def stream(
        self,
        messages: List[Dict[str, str]],
        on_chunk: Optional[Callable[[str], None]] = None,
        interrupt: Optional[Callable[[], bool]] = None,
    ) -> StreamResult:
        """
        Stream a completion over server-sent events.
        A hit on `interrupt` (a keypress by default) stops reading and returns the partial
        text with `interrupted=True`; that is a valid result, not an error.
        """
        interrupt = interrupt or key_pressed
        parts: List[str] = []
        interrupted = False
        r = self._post(messages, stream=True)
        try:
            for line in r.iter_lines():
                if interrupt():
                    interrupted = True
                    break
                if isinstance(line, bytes):
                    line = line.decode("utf-8", errors="replace")
                line = line.strip()
                if not line.startswith("data:"):
                    continue
                data = line[len("data:"):].strip()
                if data == "[DONE]":
                    break
                try:
                    frame = json.loads(data)
                except ValueError:
                    self.logger.debug(f"Skipping malformed SSE frame: {data[:200]}")
                    continue
                piece = self._delta(frame)
                if piece:
                    if on_chunk:
                        on_chunk(piece)
                    parts.append(piece)
        except requests.RequestException as e:
            raise CompletionError(f"LLM stream broke off: {e}") from e
        finally:
            r.close()
        if interrupted:
            self.logger.info("LLM stream interrupted by user")
        return StreamResult(content="".join(parts), interrupted=interrupted)


class LLMNode(Node):
    """Model turn: render the context, call the endpoint, parse the reply into the next Action."""

    def __init__(self, client: LLMClient, retry: Optional[RetryPolicy] = None, render=render_messages):
        super().__init__(retry=retry)
        self.client = client
        self.render = render

    def prepare(self, context):
        return self.render(context)

    def execute(self, prepared):
        return self.client.complete(prepared)

    def postprocess(self, prepared, raw, context) -> Action:
        reply = parse_response(LLMClient.content_of(raw) if raw else "")
        context.push_history(Message.assistant(reply.content()))

        if isinstance(reply.payload, StructuredObject):
            data = reply.payload.data
            answer = data.get("answer")
            if answer is not None and not isinstance(answer, str):
                answer = json.dumps(answer, ensure_ascii=False, default=str)
            context.log_step(
                thought=parse_thought(data),
                action=reply.action,
                parameters=data,
                answer=answer,
            )
        elif reply.action.is_terminal:
            context.log_step(thought=Thought(), action=reply.action, answer=reply.payload.text)
        else:
            context.log_step(
                thought=Thought(kind=ThoughtKind.SOLVING, content=reply.payload.text),
                action=reply.action,
            )
        return context.action
