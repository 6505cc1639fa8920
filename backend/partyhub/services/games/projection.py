from typing import Any, Dict, Iterable, List, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from partyhub import db
from partyhub.models import Game, Player, Question, Vote
from partyhub import store


def tally_voting_scores(player_ids: Iterable[int], votes: Iterable[Vote]) -> Dict[int, int]:
    """Count, for each player, the votes that target them.

    Votes aimed at players no longer in the game are ignored.
    """
    scores = {pid: 0 for pid in player_ids}
    for v in votes:
        if v.target_player_id is not None and v.target_player_id in scores:
            scores[v.target_player_id] += 1
    return scores


def tally_options(question_id: int, option_count: int, votes: Iterable[Vote],
                  option_player_ids: Optional[List[int]] = None) -> List[int]:
    """Votes per option of one question.

    For player-option questions a vote counts toward its target player's
    position; otherwise toward its option index. Out-of-range votes are ignored.
    """
    counts = [0] * option_count
    position = {pid: i for i, pid in enumerate(option_player_ids or [])}
    for v in votes:
        if v.question_id != question_id:
            continue
        if option_player_ids is not None and v.target_player_id is not None:
            idx = position.get(v.target_player_id)
        else:
            idx = v.option_index
        if idx is not None and 0 <= idx < option_count:
            counts[idx] += 1
    return counts


def _serialize_question(q: Question, players: List[Player], votes: List[Vote], default_time_limit: int) -> Dict[str, Any]:
    data = {
        'id': q.id,
        'text': q.text,
        'correctAnswer': q.correct_answer,
        'timeLimit': q.time_limit or default_time_limit,
        'usePlayersAsOptions': bool(q.use_players_as_options),
    }
    if q.use_players_as_options:
        data['options'] = [p.name for p in players]
        data['optionPlayerIds'] = [p.id for p in players]
    else:
        data['options'] = q.option_list
    data['tally'] = tally_options(q.id, len(data['options']), votes, data.get('optionPlayerIds'))
    return data


def build_game_state(
    game: Game,
    questions: List[Question],
    players: List[Player],
    votes: List[Vote],
    join_url_template: str = '{code}',
    default_time_limit: int = 30,
) -> Dict[str, Any]:
    """Project persisted rows into the canonical snapshot broadcast to clients.

    Pure: reads the given rows and never writes. In voting mode each player's
    score is re-derived from the vote facts; in quiz mode the stored running
    counter is reported as-is.
    """
    players_serialized = [p.to_dict() for p in players]
    if game.mode == 'voting':
        derived = tally_voting_scores([p.id for p in players], votes)
        for pd in players_serialized:
            pd['score'] = derived.get(pd['id'], 0)

    # Highest score first; ties keep join order (sort is stable)
    ranking = [pd['id'] for pd in sorted(players_serialized, key=lambda pd: -pd['score'])]

    return {
        'game': {
            'id': game.id,
            'name': game.name,
            'mode': game.mode,
            'status': game.status,
            'currentQuestionIndex': game.current_question_index or 0,
            'adminId': game.admin_id,
            'joinUrl': join_url_template.format(code=game.id),
            'questions': [_serialize_question(q, players, votes, default_time_limit) for q in questions],
        },
        'players': players_serialized,
        'votes': [v.to_dict() for v in votes],
        'ranking': ranking,
        'showResults': bool(game.show_results),
    }


def project_game_state(game_id: Optional[str]) -> Optional[Dict[str, Any]]:
    """Load a game's rows and project them. Returns None when the game does not exist."""
    game = store.get_game(game_id)
    if not game:
        current_app.logger.info(f"[project] game={game_id!r} not found")
        return None
    cfg = current_app.config
    return build_game_state(
        game,
        store.questions_for(game.id),
        store.players_for(game.id),
        store.votes_for(game.id),
        join_url_template=cfg.get('JOIN_URL_TEMPLATE', '{code}'),
        default_time_limit=int(cfg.get('DEFAULT_TIME_LIMIT', 30)),
    )


def reconcile_scores(state: Optional[Dict[str, Any]]) -> int:
    """Write projected voting-mode scores back to stored rows that disagree.

    Best-effort: a failed write is logged and rolled back and never blocks
    the caller from using ``state``. Returns the number of rows corrected.
    """
    if not state or state['game']['mode'] != 'voting':
        return 0
    projected = {pd['id']: pd['score'] for pd in state['players']}
    if not projected:
        return 0
    corrected = 0
    try:
        for player in Player.query.filter(Player.id.in_(list(projected))).all():
            if player.score != projected[player.id]:
                player.score = projected[player.id]
                db.session.add(player)
                corrected += 1
        if corrected:
            db.session.commit()
            current_app.logger.info(f"[reconcile] game={state['game']['id']} corrected {corrected} score(s)")
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception(f"[reconcile] game={state['game']['id']} score write-back failed")
        return 0
    return corrected
