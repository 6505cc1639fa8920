from typing import Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from partyhub import db
from partyhub import store
from partyhub.errors import ConflictError
from partyhub.models import Game, Player, Question, Vote


def resolve_target(question: Question, game_id: str, option_index: Optional[int], target_player_id: Optional[int]) -> Optional[int]:
    """Work out which player a voting-mode vote is aimed at.

    An explicit target wins; otherwise a player-option question maps the
    option index onto the roster in join order.
    """
    if target_player_id is not None:
        target = Player.query.filter_by(id=target_player_id, game_id=game_id).first()
        return target.id if target else None
    if question.use_players_as_options and option_index is not None and option_index >= 0:
        roster = Player.query.filter_by(game_id=game_id).order_by(Player.created_at, Player.id).all()
        if option_index < len(roster):
            return roster[option_index].id
    return None


def record_vote(game: Game, question: Question, voter: Player,
                option_index: Optional[int], target_player_id: Optional[int]) -> Vote:
    """Insert a vote and apply its score effect in one commit.

    Quiz mode: the voter earns QUIZ_CORRECT_POINTS when the option matches the
    correct answer. Voting mode: the target earns VOTE_TARGET_POINTS. Quiz
    scores are a running counter; voting scores are later re-derived from the
    votes by the projector.

    Raises ConflictError if the voter already voted on this question; the
    unique constraint makes a racing duplicate roll back with its increment.
    """
    if store.find_vote(voter.id, question.id):
        raise ConflictError('Already voted on this question')

    if game.mode == 'voting':
        target_player_id = resolve_target(question, game.id, option_index, target_player_id)

    vote = Vote(
        game_id=game.id,
        player_id=voter.id,
        question_id=question.id,
        option_index=option_index,
        target_player_id=target_player_id,
    )
    try:
        db.session.add(vote)
        _apply_vote_score(game, question, voter, option_index, target_player_id)
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise ConflictError('Already voted on this question') from exc
    return vote


def _apply_vote_score(game, question, voter, option_index, target_player_id):
    cfg = current_app.config
    if game.mode == 'quiz' and question.correct_answer is not None and option_index == question.correct_answer:
        points = int(cfg.get('QUIZ_CORRECT_POINTS', 100))
        Player.query.filter_by(id=voter.id).update({Player.score: Player.score + points})
        current_app.logger.info(f"[score] game={game.id} player={voter.id} +{points} (correct)")
    elif game.mode == 'voting' and target_player_id is not None:
        points = int(cfg.get('VOTE_TARGET_POINTS', 1))
        Player.query.filter_by(id=target_player_id).update({Player.score: Player.score + points})
        current_app.logger.info(f"[score] game={game.id} target={target_player_id} +{points} (vote)")

