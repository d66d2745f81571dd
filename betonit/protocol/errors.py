from __future__ import annotations


class ChannelError(RuntimeError):
    pass


class EncodeError(ChannelError):
    """A command could not be serialized to wire text."""


class SendError(ChannelError):
    """A send could not be handed to the transport at all."""
