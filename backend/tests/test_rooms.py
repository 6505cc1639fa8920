from partyhub.realtime.rooms import RoomRegistry, SessionTracker


def test_registry_keeps_one_room_per_connection():
    registry = RoomRegistry()
    assert registry.subscribe('sid-1', 'GAME01') is None
    assert registry.subscribe('sid-2', 'GAME01') is None
    assert registry.members('GAME01') == {'sid-1', 'sid-2'}

    assert registry.subscribe('sid-1', 'GAME02') == 'GAME01'
    assert registry.room_of('sid-1') == 'GAME02'
    assert registry.members('GAME01') == {'sid-2'}
    assert registry.members('GAME02') == {'sid-1'}

    # Re-subscribing to the same room is not a move
    assert registry.subscribe('sid-1', 'GAME02') is None


def test_registry_unsubscribe_and_dissolve():
    registry = RoomRegistry()
    registry.subscribe('sid-1', 'GAME01')
    registry.subscribe('sid-2', 'GAME01')
    assert registry.unsubscribe('sid-1') == 'GAME01'
    assert registry.unsubscribe('sid-1') is None
    assert registry.dissolve('GAME01') == {'sid-2'}
    assert registry.room_of('sid-2') is None
    assert registry.members('GAME01') == set()


def test_session_tracker_reconnection_matching():
    sessions = SessionTracker()
    sessions.bind('old', 'GAME01', 7)
    sessions.bind('new', 'GAME01', 7)
    sessions.bind('other', 'GAME01', 8)

    assert sessions.is_connected_elsewhere(7, 'old') is True
    assert sessions.release('new').player_id == 7
    assert sessions.is_connected_elsewhere(7, 'old') is False
    assert sessions.lookup('other').game_id == 'GAME01'


def test_session_tracker_forgets_players_and_games():
    sessions = SessionTracker()
    sessions.bind('a', 'GAME01', 1)
    sessions.bind('b', 'GAME01', 2)
    sessions.bind('c', 'GAME02', 3)
    sessions.forget_player(1)
    assert sessions.lookup('a') is None
    sessions.forget_game('GAME01')
    assert len(sessions) == 1
    assert sessions.lookup('c').player_id == 3
