from conftest import emit


def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_state_for_unknown_game_is_404(client):
    res = client.get('/api/games/NOPE42/state')
    assert res.status_code == 404
    assert res.get_json() == {'error': 'Game not found'}


def test_state_matches_socket_snapshot(client, sio_client):
    code = emit(sio_client, 'createGame', {'name': 'Quiz A', 'mode': 'quiz'})['gameId']
    emit(sio_client, 'addQuestion', {'gameId': code, 'question': {'text': 'Q1', 'options': ['a', 'b']}})
    emit(sio_client, 'joinGame', {'gameId': code, 'playerName': 'Alice'})

    res = client.get(f'/api/games/{code.lower()}/state')
    assert res.status_code == 200
    state = res.get_json()
    assert state['game']['id'] == code
    assert state['game']['joinUrl'] == f'http://party.test/play/{code}'
    assert [q['text'] for q in state['game']['questions']] == ['Q1']
    assert any(p['name'] == 'Alice' for p in state['players'])
    assert state['game']['questions'][0]['timeLimit'] == 30
