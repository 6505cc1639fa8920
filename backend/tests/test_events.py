import pytest

from partyhub.errors import ValidationError
from partyhub.realtime import events
from partyhub.realtime.events import EventKind


def test_every_event_kind_has_a_payload_type():
    assert set(events.PAYLOAD_TYPES) == set(EventKind)


def test_router_handles_every_event_kind(router):
    assert set(router._handlers) == set(EventKind)


def test_join_payload_trims_name_and_uppercases_code():
    payload = events.parse(EventKind.JOIN_GAME, {'gameId': ' abc123 ', 'playerName': '  Ana  '})
    assert payload == events.JoinGame(game_id='ABC123', player_name='Ana', avatar=None)


@pytest.mark.parametrize('kind,data', [
    (EventKind.JOIN_GAME, {'gameId': 'ABC123', 'playerName': '   '}),
    (EventKind.JOIN_GAME, {'playerName': 'Ana'}),
    (EventKind.CREATE_GAME, {'name': 'Party', 'mode': 'bingo'}),
    (EventKind.SUBMIT_VOTE, {'gameId': 'ABC123', 'playerId': 1, 'questionId': 2}),
    (EventKind.SUBMIT_VOTE, {'gameId': 'ABC123', 'playerId': 'x', 'questionId': 2, 'optionIndex': 0}),
    (EventKind.SUBMIT_VOTE, {'gameId': 'ABC123', 'playerId': 1, 'questionId': 2, 'optionIndex': 2.9}),
    (EventKind.SUBMIT_VOTE, {'gameId': 'ABC123', 'playerId': 1, 'questionId': '2.0', 'optionIndex': 0}),
    (EventKind.ADD_QUESTION, {'gameId': 'ABC123'}),
    (EventKind.ADD_QUESTION, {'gameId': 'ABC123', 'question': {'text': 'Q', 'options': ['a'], 'correctAnswer': 3}}),
    (EventKind.REMOVE_QUESTION, {'gameId': 'ABC123', 'questionId': True}),
    (EventKind.START_GAME, ['not', 'a', 'dict']),
])
def test_malformed_payloads_are_rejected(kind, data):
    with pytest.raises(ValidationError):
        events.parse(kind, data)


def test_add_question_with_player_options_drops_static_options():
    payload = events.parse(EventKind.ADD_QUESTION, {
        'gameId': 'abc123',
        'question': {'text': 'Who?', 'usePlayersAsOptions': True, 'timeLimit': '45'},
    })
    assert payload.use_players_as_options is True
    assert payload.options == []
    assert payload.time_limit == 45
