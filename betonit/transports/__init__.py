"""Transports that carry channel text between this endpoint and the receiver.

Each one implements `betonit.protocol.send_tracker.Transport` for outbound
messages and feeds inbound `(namespace, text)` pairs to
`ChannelProtocol.receive`.
"""
