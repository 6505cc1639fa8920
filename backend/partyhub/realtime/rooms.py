import threading
from typing import Any, Dict, NamedTuple, Optional, Set


class RoomRegistry:
    """Which game room each connection is subscribed to.

    A connection belongs to at most one room; subscribing to another room
    replaces the previous subscription.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._room_of: Dict[str, str] = {}
        self._members: Dict[str, Set[str]] = {}

    def subscribe(self, sid: str, game_id: str) -> Optional[str]:
        """Subscribe ``sid`` to ``game_id``; returns the room it left, if any."""
        with self._lock:
            previous = self._room_of.get(sid)
            if previous == game_id:
                return None
            if previous is not None:
                self._drop(sid, previous)
            self._room_of[sid] = game_id
            self._members.setdefault(game_id, set()).add(sid)
            return previous

    def unsubscribe(self, sid: str) -> Optional[str]:
        with self._lock:
            room = self._room_of.pop(sid, None)
            if room is not None:
                self._drop(sid, room, pop_sid=False)
            return room

    def room_of(self, sid: str) -> Optional[str]:
        return self._room_of.get(sid)

    def members(self, game_id: str) -> Set[str]:
        with self._lock:
            return set(self._members.get(game_id, ()))

    def dissolve(self, game_id: str) -> Set[str]:
        with self._lock:
            members = self._members.pop(game_id, set())
            for sid in members:
                self._room_of.pop(sid, None)
            return members

    def _drop(self, sid: str, room: str, pop_sid: bool = True) -> None:
        if pop_sid:
            self._room_of.pop(sid, None)
        members = self._members.get(room)
        if members is not None:
            members.discard(sid)
            if not members:
                self._members.pop(room, None)


class RoomBroadcaster:
    """Pushes events to game rooms over the Socket.IO server.

    Owns the ``RoomRegistry`` and mirrors every subscription into the
    Socket.IO room of the same name, so a broadcast reaches every member,
    including the connection whose event caused it.
    """

    STATE_EVENT = 'gameStateUpdate'

    def __init__(self, socketio, namespace: str = '/ws', registry: Optional[RoomRegistry] = None):
        self.socketio = socketio
        self.namespace = namespace
        self.registry = registry or RoomRegistry()

    def subscribe(self, sid: str, game_id: str) -> None:
        previous = self.registry.subscribe(sid, game_id)
        if previous is not None:
            self.socketio.server.leave_room(sid, previous, namespace=self.namespace)
        self.socketio.server.enter_room(sid, game_id, namespace=self.namespace)

    def unsubscribe(self, sid: str) -> None:
        # Socket.IO drops a disconnected sid from its rooms by itself
        self.registry.unsubscribe(sid)

    def dissolve(self, game_id: str) -> None:
        self.registry.dissolve(game_id)
        self.socketio.close_room(game_id, namespace=self.namespace)

    def broadcast(self, game_id: str, event: str, payload: Any) -> None:
        self.socketio.emit(event, payload, to=game_id, namespace=self.namespace)

    def broadcast_state(self, game_id: str, state: Dict[str, Any]) -> None:
        self.broadcast(game_id, self.STATE_EVENT, state)

    def send(self, sid: str, event: str, payload: Any) -> None:
        self.socketio.emit(event, payload, to=sid, namespace=self.namespace)


class PlayerSession(NamedTuple):
    game_id: str
    player_id: int


class SessionTracker:
    """In-memory map of player connections to the player they represent.

    Admin and dashboard connections are never bound. Nothing here is
    persisted; the map is rebuilt as players (re)join.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._sessions: Dict[str, PlayerSession] = {}

    def bind(self, sid: str, game_id: str, player_id: int) -> None:
        with self._lock:
            self._sessions[sid] = PlayerSession(game_id, player_id)

    def lookup(self, sid: str) -> Optional[PlayerSession]:
        return self._sessions.get(sid)

    def release(self, sid: str) -> Optional[PlayerSession]:
        with self._lock:
            return self._sessions.pop(sid, None)

    def is_connected_elsewhere(self, player_id: int, sid: str) -> bool:
        """True when a connection other than ``sid`` still holds the player."""
        with self._lock:
            return any(s.player_id == player_id for other, s in self._sessions.items() if other != sid)

    def forget_player(self, player_id: int) -> None:
        with self._lock:
            for sid in [k for k, s in self._sessions.items() if s.player_id == player_id]:
                del self._sessions[sid]

    def forget_game(self, game_id: str) -> None:
        with self._lock:
            for sid in [k for k, s in self._sessions.items() if s.game_id == game_id]:
                del self._sessions[sid]

    def __len__(self):
        return len(self._sessions)
