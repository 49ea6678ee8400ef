"""Exceptions raised when a status query cannot be answered."""


class SwarmStatusError(Exception):
    """Base class for infrastructure failures surfaced as HTTP 5xx."""


class GatewayError(SwarmStatusError):
    """The Docker daemon was unreachable or rejected the request."""


class UnknownStateError(SwarmStatusError, ValueError):
    """The orchestrator reported a task or update state we do not model."""

    def __init__(self, kind: str, value: str):
        self.kind = kind
        self.value = value
        super().__init__(f"Unknown {kind} state reported by the orchestrator: {value!r}")
