"""Channel protocol primitives (commands, events, codec, dispatch, send tracking).

Kept free of transport concerns so it can be driven by Redis streams, a
WebSocket peer, or an in-memory fake in tests.
"""
