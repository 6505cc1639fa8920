import json
from typing import List, Optional

from flask import current_app

from partyhub import db
from partyhub.errors import NotFoundError, ValidationError
from partyhub.models import GAME_MODES, Game, Question
from partyhub import store


def create_game(name: str, mode: str, admin_id: Optional[int] = None) -> Game:
    if mode not in GAME_MODES:
        raise ValidationError(f"Unknown game mode: {mode}")
    code_length = int(current_app.config.get('GAME_CODE_LENGTH', 6))
    game = Game(code_length=code_length, name=name, mode=mode, status='waiting',
                current_question_index=0, show_results=False, admin_id=admin_id)
    db.session.add(game)
    db.session.commit()
    current_app.logger.info(f"[create] game={game.id} mode={mode} admin={admin_id}")
    return game


def add_question(game: Game, text: str, options: List[str], correct_answer: Optional[int],
                 time_limit: Optional[int], use_players_as_options: bool) -> Question:
    question = Question(
        game_id=game.id,
        text=text,
        options=json.dumps([] if use_players_as_options else options),
        correct_answer=correct_answer if game.mode == 'quiz' else None,
        use_players_as_options=use_players_as_options,
        time_limit=time_limit or int(current_app.config.get('DEFAULT_TIME_LIMIT', 30)),
    )
    db.session.add(question)
    db.session.commit()
    return question


def remove_question(game: Game, question_id: int) -> None:
    ordered = store.questions_for(game.id)
    position = next((i for i, q in enumerate(ordered) if q.id == question_id), None)
    if position is None:
        raise NotFoundError('Question not found')
    db.session.delete(ordered[position])
    index = game.current_question_index or 0
    # Removing an earlier question shifts the current one down a slot
    if position < index:
        index -= 1
    remaining = len(ordered) - 1
    index = min(index, max(0, remaining - 1))
    if index != game.current_question_index:
        game.current_question_index = index
        db.session.add(game)
    db.session.commit()


def start_game(game: Game) -> None:
    if game.status == 'playing':
        # Idempotent start: already started
        return
    game.status = 'playing'
    game.current_question_index = 0
    game.show_results = False
    db.session.add(game)
    db.session.commit()
    current_app.logger.info(f"[start] game={game.id}")


def open_lobby(game: Game) -> None:
    game.status = 'lobby'
    db.session.add(game)
    db.session.commit()


def show_question_results(game: Game) -> None:
    game.show_results = True
    db.session.add(game)
    db.session.commit()


def next_question_or_finish(game: Game) -> None:
    """Advance to the next question, or finish after the last one.

    Finishing leaves the index on the last question.
    """
    prev_index = int(game.current_question_index or 0)
    total = Question.query.filter_by(game_id=game.id).count()
    if prev_index + 1 >= total:
        game.status = 'finished'
        current_app.logger.info(f"[finish] game={game.id} finished at index={prev_index}")
    else:
        game.current_question_index = prev_index + 1
        current_app.logger.info(f"[next] game={game.id} advance {prev_index} -> {game.current_question_index}")
    game.show_results = False
    db.session.add(game)
    db.session.commit()


def reset_game(game: Game) -> None:
    """Drop the players and votes and return the game to the waiting room."""
    store.purge_game_rows(game.id, keep_game=True)
    game.status = 'waiting'
    game.current_question_index = 0
    game.show_results = False
    db.session.add(game)
    db.session.commit()
    current_app.logger.info(f"[reset] game={game.id}")


def delete_game(game: Game) -> None:
    game_id = game.id
    store.purge_game_rows(game_id)
    db.session.commit()
    current_app.logger.info(f"[delete] game={game_id}")
