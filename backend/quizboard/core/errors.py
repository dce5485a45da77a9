# backend/quizboard/core/errors.py

from typing import Any, Dict, List


class QuizboardError(Exception):
    """Base class for every error raised by the gateway."""


# ------------------------------------------------------------
# Startup
# ------------------------------------------------------------
class StartupError(QuizboardError):
    """Fatal: the process must not start serving."""


class PromptLoadError(StartupError):
    pass


class ConfigError(StartupError):
    pass


# ------------------------------------------------------------
# Inbound payloads
# ------------------------------------------------------------
class PayloadValidationError(QuizboardError):
    def __init__(self, kind: str, fields: List[str], expected: Dict[str, Any]):
        self.kind = kind
        self.fields = fields
        self.expected = expected
        super().__init__(f"Invalid {kind} payload: {', '.join(fields) or 'body'}")


# ------------------------------------------------------------
# Upstream provider
# ------------------------------------------------------------
class UpstreamError(QuizboardError):
    pass


class UpstreamTransportError(UpstreamError):
    """Network failure or non-2xx status. `status` is None when no response arrived."""

    def __init__(self, status: int | None, body: str):
        self.status = status
        self.body = body
        if status is None:
            super().__init__(f"Upstream request failed: {body}")
        else:
            super().__init__(f"Upstream HTTP error {status}: {body}")


class UpstreamFormatError(UpstreamError):
    pass


class UpstreamShapeError(UpstreamError):
    pass


class UpstreamContentError(UpstreamError):
    def __init__(self, message: str, content: str):
        self.content = content
        super().__init__(message)
