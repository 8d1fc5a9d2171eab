#!/usr/bin/env python3
"""iComfort - exceptions within the command/protocol/transport layer."""

from __future__ import annotations

from typing import Any


class _IComfortBaseException(Exception):
    """Base class for all icomfort_tx exceptions."""

    pass


class IComfortException(_IComfortBaseException):
    """Base class for all icomfort_tx exceptions."""

    HINT: None | str = None

    def __init__(self, *args: object):
        super().__init__(*args)
        self.message: str | None = args[0] if args else None  # type: ignore[assignment]

    def __str__(self) -> str:
        if self.message and self.HINT:
            return f"{self.message} (hint: {self.HINT})"
        if self.message:
            return self.message
        if self.HINT:
            return f"Hint: {self.HINT}"
        return ""


class _IComfortLowerError(IComfortException):
    """A failure in the lower layer (parser, command, protocol, transport)."""


########################################################################################
# Errors at/below the protocol/transport layer, incl. command dispatch


class ProtocolError(_IComfortLowerError):
    """An error occurred when publishing a command, or handling its response."""


class CommandRejected(ProtocolError):
    """The device accepted delivery of the command, but rejected its semantics."""

    def __init__(
        self, *args: object, code: int | None = None, retry_after: Any = None
    ) -> None:
        super().__init__(*args)
        self.code = code
        self.retry_after = retry_after


class UpdateInProgress(ProtocolError):
    """The zone is busy with another update, so this one has been abandoned."""

    HINT = "wait for the in-flight update to complete"


class TransportError(ProtocolError):
    """A (transient) error when publishing or fetching, e.g. network or 5xx."""

    def __init__(self, *args: object, status: int | None = None) -> None:
        super().__init__(*args)
        self.status = status


class TransportClientError(TransportError):
    """The server rejected the request itself (4xx), so it is not to be retried."""

    HINT = "check the credentials/configuration"


########################################################################################
# Errors at/below the protocol/transport layer, incl. telemetry & command processing


class ParserBaseError(_IComfortLowerError):
    """The telemetry or command is corrupt/not internally consistent."""


class TelemetryInvalid(ParserBaseError):
    """The telemetry is corrupt/not internally consistent, or cannot be decoded."""


class CommandInvalid(ParserBaseError):
    """The command (or its arguments) is corrupt/not internally consistent."""
