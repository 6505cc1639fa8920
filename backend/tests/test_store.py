from partyhub import db, store
from partyhub.models import Admin, Game, Player, Question, Vote


def _game(code, admin_id=None):
    game = Game(id=code, name=code, mode='quiz', admin_id=admin_id)
    db.session.add(game)
    db.session.commit()
    return game


def test_startup_sweep_disconnects_players_and_purges_anonymous_games(flask_app):
    admin = Admin(email='host@example.com')
    admin.set_password('secret123')
    db.session.add(admin)
    db.session.commit()
    owned = _game('OWNED1', admin_id=admin.id)
    anon = _game('ANON01')
    for game in (owned, anon):
        db.session.add(Player(game_id=game.id, name='Ana', connected=True))
        db.session.add(Question(game_id=game.id, text='Q', options='["a"]'))
    db.session.commit()
    db.session.add(Vote(game_id=anon.id, player_id=1, question_id=1, option_index=0))
    db.session.commit()

    result = store.startup_sweep()

    assert result['games_purged'] == ['ANON01']
    assert result['players_disconnected'] == 2
    assert db.session.get(Game, 'ANON01') is None
    for model in (Player, Question, Vote):
        assert model.query.filter_by(game_id='ANON01').count() == 0
    survivor = Player.query.filter_by(game_id='OWNED1').one()
    assert survivor.connected is False
    assert Question.query.filter_by(game_id='OWNED1').count() == 1


def test_upsert_player_reuses_row_for_same_name(flask_app):
    game = _game('JOIN01')
    first = store.upsert_player(game.id, 'Ana', '🎉')
    first.connected = False
    db.session.commit()

    again = store.upsert_player(game.id, 'Ana', '🚀')
    assert again.id == first.id
    assert again.connected is True
    assert again.avatar == '🎉'
    assert Player.query.filter_by(game_id=game.id).count() == 1


def test_upsert_player_adopts_row_that_won_the_insert_race(flask_app, monkeypatch):
    game = _game('RACE01')
    winner = Player(game_id=game.id, name='Ana', avatar='🎉', connected=False)
    db.session.add(winner)
    db.session.commit()
    winner_id = winner.id

    real_find = store.find_player
    calls = []

    def racing_find(game_id, name):
        calls.append(name)
        # The first lookup runs before the concurrent insert lands
        if len(calls) == 1:
            return None
        return real_find(game_id, name)

    monkeypatch.setattr(store, 'find_player', racing_find)

    player = store.upsert_player(game.id, 'Ana', '🚀')
    assert player.id == winner_id
    assert player.connected is True
    assert len(calls) == 2
    assert Player.query.filter_by(game_id=game.id, name='Ana').count() == 1


def test_purge_game_rows_can_keep_game_and_questions(flask_app):
    game = _game('KEEP01')
    db.session.add(Player(game_id=game.id, name='Ana'))
    db.session.add(Question(game_id=game.id, text='Q', options='[]'))
    db.session.add(Vote(game_id=game.id, player_id=1, question_id=1, option_index=0))
    db.session.commit()

    store.purge_game_rows(game.id, keep_game=True)
    db.session.commit()
    assert db.session.get(Game, 'KEEP01') is not None
    assert Question.query.filter_by(game_id='KEEP01').count() == 1
    assert Player.query.filter_by(game_id='KEEP01').count() == 0
    assert Vote.query.filter_by(game_id='KEEP01').count() == 0


def test_get_game_normalizes_code(flask_app):
    _game('ABC123')
    assert store.get_game(' abc123 ').id == 'ABC123'
    assert store.get_game('') is None
