'''
A node is one unit of work against the shared context, run in three phases:

   prepare      read-only projection of the context (rendered prompt, staged command, ...)
   execute      the only phase allowed to do I/O; never touches the context
   postprocess  the only phase allowed to mutate the context; returns the next Action

Retrying `execute` is opt-in per node, since only some operations are safe to repeat.
'''
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from tenacity import Retrying, stop_after_attempt, wait_fixed

from minusagent.logging_config import setup_logger
from minusagent.schema import Action


@dataclass
class RetryPolicy:
    """Bounded retry with a fixed delay. `max_retries` counts attempts after the first."""

    max_retries: int = 1
    wait_seconds: float = 1.0


class Node:
    retry: Optional[RetryPolicy] = None

    def __init__(self, retry: Optional[RetryPolicy] = None):
        self.logger = setup_logger(__name__)
        if retry is not None:
            self.retry = retry

    @property
    def name(self) -> str:
        return self.__class__.__name__

    def prepare(self, context) -> Any:
        return None

    def execute(self, prepared: Any) -> Any:
        return None

    def postprocess(self, prepared: Any, raw: Any, context) -> Action:
        raise NotImplementedError

    def _log_retry(self, retry_state) -> None:
        self.logger.warning(
            f"{self.name}.execute failed (attempt {retry_state.attempt_number}): "
            f"{retry_state.outcome.exception()}"
        )

    def _execute(self, prepared: Any) -> Any:
        if self.retry is None or self.retry.max_retries <= 0:
            return self.execute(prepared)
        retryer = Retrying(
            stop=stop_after_attempt(self.retry.max_retries + 1),
            wait=wait_fixed(self.retry.wait_seconds),
            after=self._log_retry,
            reraise=True,
        )
        return retryer(self.execute, prepared)

    def run(self, context) -> Action:
        prepared = self.prepare(context)
        raw = self._execute(prepared)
        action = self.postprocess(prepared, raw, context)
        self.logger.info(f"{self.name} finished with action {action}")
        return action
