"""Client-side session state machine.

Public API:
    ScriptSession -- Owns one transport and the runs made over it
    open_session -- Connect a websocket session to an endpoint URL
"""

from scriptconsole.session.controller import ScriptSession
from scriptconsole.session.factory import open_session

__all__ = ["ScriptSession", "open_session"]
