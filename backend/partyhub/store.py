"""Fact store helpers.

Thin CRUD helpers over the models shared by the event router, the HTTP
routes and the CLI. Compound deletes are issued as separate bulk statements
and committed together; they are not guarded by a cross-event lock.
"""

from typing import List, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from partyhub import db
from partyhub.errors import NotFoundError
from partyhub.models import Game, Player, Question, Vote


def get_game(game_id: Optional[str]) -> Optional[Game]:
    if not game_id:
        return None
    return Game.query.filter_by(id=game_id.strip().upper()).first()


def require_game(game_id: Optional[str]) -> Game:
    game = get_game(game_id)
    if not game:
        raise NotFoundError('Game not found')
    return game


def questions_for(game_id: str) -> List[Question]:
    return Question.query.filter_by(game_id=game_id).order_by(Question.created_at, Question.id).all()


def players_for(game_id: str) -> List[Player]:
    return Player.query.filter_by(game_id=game_id).order_by(Player.created_at, Player.id).all()


def votes_for(game_id: str) -> List[Vote]:
    return Vote.query.filter_by(game_id=game_id).order_by(Vote.id).all()


def find_player(game_id: str, name: str) -> Optional[Player]:
    return Player.query.filter_by(game_id=game_id, name=name).first()


def find_vote(player_id: int, question_id: int) -> Optional[Vote]:
    return Vote.query.filter_by(player_id=player_id, question_id=question_id).first()


def upsert_player(game_id: str, name: str, avatar: Optional[str]) -> Player:
    """Return the player named ``name`` in the game, creating it if needed.

    A concurrent join with the same name may win the insert; the loser rolls
    back, re-reads and adopts the winner's row. Either way the returned row
    is marked connected.
    """
    player = find_player(game_id, name)
    if player is None:
        player = Player(game_id=game_id, name=name, avatar=avatar, score=0, connected=True)
        db.session.add(player)
        try:
            db.session.commit()
            return player
        except IntegrityError:
            db.session.rollback()
            current_app.logger.info(f"[join-race] game={game_id} name={name!r} adopting existing row")
            player = find_player(game_id, name)
            if player is None:
                raise
    player.connected = True
    db.session.add(player)
    db.session.commit()
    return player


def purge_game_rows(game_id: str, keep_game: bool = False) -> None:
    """Delete the votes and players of a game; also questions and the game unless ``keep_game``."""
    Vote.query.filter_by(game_id=game_id).delete()
    Player.query.filter_by(game_id=game_id).delete()
    if not keep_game:
        Question.query.filter_by(game_id=game_id).delete()
        Game.query.filter_by(id=game_id).delete()


def startup_sweep() -> dict:
    """Cold-start consistency sweep.

    Marks every player disconnected (no connection survives a restart) and
    purges games without an owning admin together with their rows.
    """
    disconnected = Player.query.update({Player.connected: False})
    anonymous_ids = [g.id for g in Game.query.filter(Game.admin_id.is_(None)).all()]
    for game_id in anonymous_ids:
        purge_game_rows(game_id)
    db.session.commit()
    current_app.logger.info(
        f"[sweep] reset {disconnected} player connection(s), purged {len(anonymous_ids)} anonymous game(s)"
    )
    return {'players_disconnected': disconnected, 'games_purged': anonymous_ids}
