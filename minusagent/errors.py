class MinusAgentError(Exception):
    pass


class CompletionError(MinusAgentError):
    """Raised when the model endpoint cannot be reached or answers with a non-2xx status."""

    def __init__(self, message: str, status: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status = status
        self.body = body


class NodeError(MinusAgentError):
    pass


class MissingInputError(NodeError):
    """A node was run without the context it requires (e.g. no staged command)."""


class ContextError(MinusAgentError):
    pass


class SkillError(MinusAgentError):
    pass


class ConfigError(MinusAgentError):
    pass
