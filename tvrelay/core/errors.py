from __future__ import annotations


class RelayError(Exception):
    """Base for every failure raised while handling an alert."""

    status_code: int = 500
    public_message: str | None = None

    def response_text(self) -> str:
        if self.public_message is not None:
            return self.public_message
        return f"Error: {self}"


# ---------------- REQUEST VALIDATION ----------------


class MalformedRequest(RelayError):
    """Body is not valid JSON."""


class InvalidSymbol(RelayError):
    status_code = 400
    public_message = "Invalid symbol"


class UnsupportedMessageKind(RelayError):
    status_code = 400
    public_message = "Invalid message type"


class NoActiveTrade(RelayError):
    status_code = 400
    public_message = "No active trade for symbol"


class PositionNotFound(RelayError):
    status_code = 404
    public_message = "No position found"


# ---------------- EXECUTION ----------------


class MissingEntryPrice(RelayError):
    def __init__(self, message: str = "No entry price found for position"):
        super().__init__(message)


class AdapterFailure(RelayError):
    """Exchange / network error, message kept as the exchange reported it."""
