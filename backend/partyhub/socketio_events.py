from flask import request
from flask_socketio import emit

from partyhub import socketio
from partyhub.realtime.events import EventKind
from partyhub.realtime.router import EventRouter


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect(auth=None):
    emit('connected', {'sid': _get_sid()})


def _make_handler(router: EventRouter, kind: EventKind):
    def handler(data=None):
        # The return value becomes the acknowledgement when the client asks for one
        return router.dispatch(kind, _get_sid(), data)
    handler.__name__ = f"handle_{kind.value}"
    return handler


def _make_disconnect_handler(router: EventRouter):
    def handle_disconnect(reason=None):
        router.dispatch(EventKind.DISCONNECT, _get_sid())
    return handle_disconnect


def register_socketio_handlers(router: EventRouter, namespace: str = '/ws') -> None:
    """Bind every client event name to the router on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', _make_disconnect_handler(router), namespace=namespace)
    for kind in EventKind:
        if kind is EventKind.DISCONNECT:
            continue
        socketio.on_event(kind.value, _make_handler(router, kind), namespace=namespace)
