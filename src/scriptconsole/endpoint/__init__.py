"""Reference execution endpoint for scriptconsole.

A websocket server that runs scripts from a local directory and streams
their output back, honouring the session protocol. It performs no
sandboxing and is meant for local development and testing.
"""
