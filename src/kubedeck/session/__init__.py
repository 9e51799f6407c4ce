"""Session engine: event fan-in, watch sessions, log streams and actions.

The engine is renderer-agnostic. A renderer posts input events into an
:class:`~kubedeck.session.multiplexer.EventMultiplexer` and draws the
:class:`~kubedeck.session.snapshot.RenderSnapshot` values that
:class:`~kubedeck.session.controller.SessionController` hands back.
"""
