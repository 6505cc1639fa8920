"""Event router: the server-authoritative game state machine.

Every inbound event runs the same sequence: parse and validate the payload,
authorize, mutate the fact store, re-project the game and broadcast the full
snapshot to the game room. Handlers for different events are not mutually
excluded, so every broadcast is a complete snapshot rather than a delta.

Each handler returns a ``{'success': ..., 'error'?: ...}`` envelope which is
also sent back as the Socket.IO acknowledgement when the client asks for one.
"""

import random
from typing import Any, Callable, Dict, Optional

from flask import current_app

from partyhub import db
from partyhub import store
from partyhub.errors import AuthorizationError, ConflictError, GameError, NotFoundError, ValidationError
from partyhub.models import AVATARS, Game, Player, Question
from partyhub.realtime import events
from partyhub.realtime.events import EventKind
from partyhub.realtime.rooms import RoomBroadcaster, SessionTracker
from partyhub.services import auth
from partyhub.services.games import lifecycle, scoring
from partyhub.services.games.projection import project_game_state, reconcile_scores

SERVER_ERROR = 'Server error'

# Request/response events: failures travel only in the acknowledgement
ACK_ONLY_EVENTS = frozenset({
    EventKind.ADMIN_REGISTER,
    EventKind.ADMIN_LOGIN,
    EventKind.GET_ADMIN_GAMES,
    EventKind.RESET_GAME,
    EventKind.DELETE_GAME,
    EventKind.DISCONNECT,
})


def ok(**extra) -> Dict[str, Any]:
    return dict(success=True, **extra)


def fail(message: str) -> Dict[str, Any]:
    return {'success': False, 'error': message}


class EventRouter:
    def __init__(self, broadcaster: RoomBroadcaster, sessions: SessionTracker):
        self.broadcaster = broadcaster
        self.sessions = sessions
        self._handlers: Dict[EventKind, Callable[[str, Any], Dict[str, Any]]] = {
            EventKind.CREATE_GAME: self._create_game,
            EventKind.ADD_QUESTION: self._add_question,
            EventKind.REMOVE_QUESTION: self._remove_question,
            EventKind.JOIN_GAME: self._join_game,
            EventKind.LEAVE_GAME: self._leave_game,
            EventKind.START_GAME: self._start_game,
            EventKind.OPEN_LOBBY: self._open_lobby,
            EventKind.SUBMIT_VOTE: self._submit_vote,
            EventKind.SHOW_QUESTION_RESULTS: self._show_question_results,
            EventKind.NEXT_QUESTION: self._next_question,
            EventKind.RESET_GAME: self._reset_game,
            EventKind.DELETE_GAME: self._delete_game,
            EventKind.REQUEST_STATE: self._request_state,
            EventKind.ADMIN_REGISTER: self._admin_register,
            EventKind.ADMIN_LOGIN: self._admin_login,
            EventKind.GET_ADMIN_GAMES: self._get_admin_games,
            EventKind.DISCONNECT: self._disconnect,
        }
        missing = set(EventKind) - set(self._handlers)
        if missing:
            raise RuntimeError(f"No handler for events: {sorted(k.value for k in missing)}")

    # ---- dispatch boundary ----

    def dispatch(self, kind: EventKind, sid: str, data: Any = None) -> Dict[str, Any]:
        """Run one event. Never raises: failures become envelopes and log lines."""
        try:
            payload = events.parse(kind, data)
            return self._handlers[kind](sid, payload)
        except ConflictError as exc:
            db.session.rollback()
            current_app.logger.info(f"[{kind.value}] sid={sid} no-op: {exc.message}")
            return ok(duplicate=True)
        except GameError as exc:
            db.session.rollback()
            current_app.logger.info(f"[{kind.value}] sid={sid} rejected: {exc.message}")
            if kind not in ACK_ONLY_EVENTS:
                self.broadcaster.send(sid, 'error', exc.message)
            return fail(exc.message)
        except Exception:
            db.session.rollback()
            current_app.logger.exception(f"[{kind.value}] sid={sid} handler failed")
            return fail(SERVER_ERROR)

    def publish(self, game_id: str) -> Optional[Dict[str, Any]]:
        """Re-project a game and push the snapshot to its room."""
        state = project_game_state(game_id)
        if state is None:
            return None
        reconcile_scores(state)
        self.broadcaster.broadcast_state(game_id, state)
        return state

    # ---- game setup ----

    def _create_game(self, sid, payload: events.CreateGame):
        admin_id = None
        if payload.token:
            try:
                admin_id = auth.verify_token(payload.token)['id']
            except AuthorizationError as exc:
                current_app.logger.warning(f"[createGame] sid={sid} ignoring token: {exc.message}")
        game = lifecycle.create_game(payload.name, payload.mode, admin_id=admin_id)
        self.broadcaster.subscribe(sid, game.id)
        created = {'gameId': game.id, 'name': game.name, 'mode': game.mode}
        self.broadcaster.send(sid, 'gameCreated', created)
        return ok(**created)

    def _add_question(self, sid, payload: events.AddQuestion):
        game = store.require_game(payload.game_id)
        question = lifecycle.add_question(
            game,
            payload.text,
            payload.options,
            payload.correct_answer,
            payload.time_limit,
            payload.use_players_as_options,
        )
        self.publish(game.id)
        return ok(questionId=question.id)

    def _remove_question(self, sid, payload: events.RemoveQuestion):
        game = store.require_game(payload.game_id)
        lifecycle.remove_question(game, payload.question_id)
        self.publish(game.id)
        return ok()

    # ---- players ----

    def _join_game(self, sid, payload: events.JoinGame):
        game = store.require_game(payload.game_id)
        if game.status == 'finished':
            raise ValidationError('This game has already finished')
        avatar = payload.avatar or random.choice(AVATARS)
        player = store.upsert_player(game.id, payload.player_name, avatar)
        self.sessions.bind(sid, game.id, player.id)
        self.broadcaster.subscribe(sid, game.id)
        current_app.logger.info(f"[join] game={game.id} player={player.id} name={player.name!r} sid={sid}")
        player_data = player.to_dict()
        self.broadcaster.send(sid, 'playerJoined', player_data)
        self.publish(game.id)
        return ok(player=player_data)

    def _leave_game(self, sid, payload: events.LeaveGame):
        player = Player.query.filter_by(id=payload.player_id, game_id=payload.game_id).first()
        if not player:
            raise NotFoundError('Player not found')
        db.session.delete(player)
        db.session.commit()
        self.sessions.forget_player(payload.player_id)
        current_app.logger.info(f"[leave] game={payload.game_id} player={payload.player_id}")
        self.publish(payload.game_id)
        return ok()

    def _disconnect(self, sid, payload: events.NoPayload):
        self.broadcaster.unsubscribe(sid)
        session = self.sessions.release(sid)
        if session is None:
            return ok()
        if self.sessions.is_connected_elsewhere(session.player_id, sid):
            # The player already reconnected on another socket
            return ok()
        updated = Player.query.filter_by(id=session.player_id).update({Player.connected: False})
        db.session.commit()
        current_app.logger.info(f"[disconnect] game={session.game_id} player={session.player_id} sid={sid}")
        if updated:
            self.publish(session.game_id)
        return ok()

    # ---- game flow ----

    def _start_game(self, sid, payload: events.GameRef):
        game = store.require_game(payload.game_id)
        lifecycle.start_game(game)
        self.publish(game.id)
        return ok()

    def _open_lobby(self, sid, payload: events.GameRef):
        game = store.require_game(payload.game_id)
        lifecycle.open_lobby(game)
        self.publish(game.id)
        return ok()

    def _submit_vote(self, sid, payload: events.SubmitVote):
        game = store.require_game(payload.game_id)
        question = Question.query.filter_by(id=payload.question_id, game_id=game.id).first()
        if not question:
            raise NotFoundError('Question not found')
        voter = Player.query.filter_by(id=payload.player_id, game_id=game.id).first()
        if not voter:
            raise NotFoundError('Player not found')
        scoring.record_vote(game, question, voter, payload.option_index, payload.target_player_id)
        self.publish(game.id)
        self.broadcaster.broadcast(game.id, 'voteCast', {
            'playerId': voter.id,
            'name': voter.name,
            'avatar': voter.avatar,
        })
        return ok()

    def _show_question_results(self, sid, payload: events.GameRef):
        game = store.require_game(payload.game_id)
        lifecycle.show_question_results(game)
        self.publish(game.id)
        return ok()

    def _next_question(self, sid, payload: events.GameRef):
        game = store.require_game(payload.game_id)
        lifecycle.next_question_or_finish(game)
        self.publish(game.id)
        return ok()

    def _request_state(self, sid, payload: events.GameRef):
        state = project_game_state(payload.game_id)
        if state is None:
            raise NotFoundError('Game not found')
        reconcile_scores(state)
        self.broadcaster.subscribe(sid, state['game']['id'])
        self.broadcaster.send(sid, RoomBroadcaster.STATE_EVENT, state)
        return ok()

    # ---- admin ----

    def _reset_game(self, sid, payload: events.AdminGameAction):
        game = store.get_game(payload.game_id)
        auth.require_owner(payload.token, game)
        lifecycle.reset_game(game)
        self.sessions.forget_game(game.id)
        self.publish(game.id)
        return ok()

    def _delete_game(self, sid, payload: events.AdminGameAction):
        game = store.get_game(payload.game_id)
        auth.require_owner(payload.token, game)
        game_id = game.id
        lifecycle.delete_game(game)
        self.sessions.forget_game(game_id)
        self.broadcaster.dissolve(game_id)
        return ok()

    def _admin_register(self, sid, payload: events.Credentials):
        admin = auth.register_admin(payload.email, payload.password)
        return ok(token=auth.issue_token(admin), admin=admin.to_dict())

    def _admin_login(self, sid, payload: events.Credentials):
        admin = auth.authenticate_admin(payload.email, payload.password)
        return ok(token=auth.issue_token(admin), admin=admin.to_dict())

    def _get_admin_games(self, sid, payload: events.TokenOnly):
        claims = auth.verify_token(payload.token)
        games = Game.query.filter_by(admin_id=claims['id']).order_by(Game.created_at.desc()).all()
        return ok(games=[g.to_summary() for g in games])
