"""scriptconsole -- Interactive remote script execution over one connection.

A client asks an execution endpoint to run a named script, streams its
output back incrementally, forwards interactive input lines, and can
terminate the run. All of this happens over a single full-duplex
websocket connection per session.
"""

__version__ = "0.1.0"
