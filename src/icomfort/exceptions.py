#!/usr/bin/env python3
"""iComfort - exceptions above the command/protocol/transport layer."""

from __future__ import annotations

from icomfort_tx.exceptions import (
    CommandInvalid as CommandInvalid,
    CommandRejected as CommandRejected,
    IComfortException as IComfortException,
    ProtocolError as ProtocolError,
    TelemetryInvalid as TelemetryInvalid,
    TransportClientError as TransportClientError,
    TransportError as TransportError,
    UpdateInProgress as UpdateInProgress,
)


class _IComfortUpperError(IComfortException):
    """A failure in the upper layer (zone state, gateway)."""


########################################################################################
# Errors above the protocol/transport layer, incl. zone state


class ZoneNotFound(_IComfortUpperError):
    """The zone has no status (yet), e.g. no telemetry has been resolved for it."""

    HINT = "update the gateway before changing the zone's setpoints"
