"""Closed set of client events and their typed payloads.

Each ``EventKind`` value is the wire name of a Socket.IO event. ``parse``
turns the raw JSON payload into the matching dataclass, raising
``ValidationError`` for malformed input before any handler runs.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Type

from partyhub.errors import ValidationError

INT_RE = re.compile(r'^-?\d+$')
from partyhub.models import GAME_MODES


class EventKind(str, Enum):
    CREATE_GAME = 'createGame'
    ADD_QUESTION = 'addQuestion'
    REMOVE_QUESTION = 'removeQuestion'
    JOIN_GAME = 'joinGame'
    LEAVE_GAME = 'leaveGame'
    START_GAME = 'startGame'
    OPEN_LOBBY = 'openLobby'
    SUBMIT_VOTE = 'submitVote'
    SHOW_QUESTION_RESULTS = 'showQuestionResults'
    NEXT_QUESTION = 'nextQuestion'
    RESET_GAME = 'resetGame'
    DELETE_GAME = 'deleteGame'
    REQUEST_STATE = 'requestState'
    ADMIN_REGISTER = 'adminRegister'
    ADMIN_LOGIN = 'adminLogin'
    GET_ADMIN_GAMES = 'getAdminGames'
    DISCONNECT = 'disconnect'


def _text(data: Dict[str, Any], key: str, required: bool = True) -> Optional[str]:
    value = data.get(key)
    if value is None:
        if required:
            raise ValidationError(f'{key} is required')
        return None
    if not isinstance(value, str):
        raise ValidationError(f'{key} must be a string')
    value = value.strip()
    if required and not value:
        raise ValidationError(f'{key} is required')
    return value


def _int(data: Dict[str, Any], key: str, required: bool = True) -> Optional[int]:
    value = data.get(key)
    if value is None or value == '':
        if required:
            raise ValidationError(f'{key} is required')
        return None
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool):
        raise ValidationError(f'{key} must be an integer')
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and INT_RE.match(value.strip()):
        return int(value.strip())
    raise ValidationError(f'{key} must be an integer')


def _game_id(data: Dict[str, Any]) -> str:
    return _text(data, 'gameId').upper()


@dataclass
class CreateGame:
    name: str
    mode: str
    token: Optional[str] = None

    @classmethod
    def from_payload(cls, data):
        mode = _text(data, 'mode')
        if mode not in GAME_MODES:
            raise ValidationError(f'mode must be one of: {", ".join(GAME_MODES)}')
        return cls(name=_text(data, 'name'), mode=mode, token=_text(data, 'token', required=False))


@dataclass
class AddQuestion:
    game_id: str
    text: str
    options: List[str] = field(default_factory=list)
    correct_answer: Optional[int] = None
    time_limit: Optional[int] = None
    use_players_as_options: bool = False

    @classmethod
    def from_payload(cls, data):
        question = data.get('question')
        if not isinstance(question, dict):
            raise ValidationError('question is required')
        use_players = bool(question.get('usePlayersAsOptions'))
        options = question.get('options') or []
        if not isinstance(options, list):
            raise ValidationError('options must be a list')
        options = [str(o) for o in options]
        correct = _int(question, 'correctAnswer', required=False)
        if correct is not None and not use_players and not 0 <= correct < len(options):
            raise ValidationError('correctAnswer must index an option')
        time_limit = _int(question, 'timeLimit', required=False)
        if time_limit is not None and time_limit <= 0:
            raise ValidationError('timeLimit must be positive')
        return cls(
            game_id=_game_id(data),
            text=_text(question, 'text'),
            options=options,
            correct_answer=correct,
            time_limit=time_limit,
            use_players_as_options=use_players,
        )


@dataclass
class RemoveQuestion:
    game_id: str
    question_id: int

    @classmethod
    def from_payload(cls, data):
        return cls(game_id=_game_id(data), question_id=_int(data, 'questionId'))


@dataclass
class JoinGame:
    game_id: str
    player_name: str
    avatar: Optional[str] = None

    @classmethod
    def from_payload(cls, data):
        return cls(
            game_id=_game_id(data),
            player_name=_text(data, 'playerName'),
            avatar=_text(data, 'avatar', required=False) or None,
        )


@dataclass
class LeaveGame:
    game_id: str
    player_id: int

    @classmethod
    def from_payload(cls, data):
        return cls(game_id=_game_id(data), player_id=_int(data, 'playerId'))


@dataclass
class GameRef:
    """Payload of the events that only name a game."""

    game_id: str

    @classmethod
    def from_payload(cls, data):
        return cls(game_id=_game_id(data))


@dataclass
class SubmitVote:
    game_id: str
    player_id: int
    question_id: int
    option_index: Optional[int] = None
    target_player_id: Optional[int] = None

    @classmethod
    def from_payload(cls, data):
        vote = cls(
            game_id=_game_id(data),
            player_id=_int(data, 'playerId'),
            question_id=_int(data, 'questionId'),
            option_index=_int(data, 'optionIndex', required=False),
            target_player_id=_int(data, 'targetPlayerId', required=False),
        )
        if vote.option_index is None and vote.target_player_id is None:
            raise ValidationError('optionIndex or targetPlayerId is required')
        return vote


@dataclass
class AdminGameAction:
    game_id: str
    token: Optional[str]

    @classmethod
    def from_payload(cls, data):
        return cls(game_id=_game_id(data), token=_text(data, 'token', required=False))


@dataclass
class Credentials:
    email: Any
    password: Any

    @classmethod
    def from_payload(cls, data):
        # Format checks live with the auth service
        return cls(email=data.get('email'), password=data.get('password'))


@dataclass
class TokenOnly:
    token: Optional[str]

    @classmethod
    def from_payload(cls, data):
        return cls(token=_text(data, 'token', required=False))


@dataclass
class NoPayload:
    @classmethod
    def from_payload(cls, data):
        return cls()


PAYLOAD_TYPES: Dict[EventKind, Type] = {
    EventKind.CREATE_GAME: CreateGame,
    EventKind.ADD_QUESTION: AddQuestion,
    EventKind.REMOVE_QUESTION: RemoveQuestion,
    EventKind.JOIN_GAME: JoinGame,
    EventKind.LEAVE_GAME: LeaveGame,
    EventKind.START_GAME: GameRef,
    EventKind.OPEN_LOBBY: GameRef,
    EventKind.SUBMIT_VOTE: SubmitVote,
    EventKind.SHOW_QUESTION_RESULTS: GameRef,
    EventKind.NEXT_QUESTION: GameRef,
    EventKind.RESET_GAME: AdminGameAction,
    EventKind.DELETE_GAME: AdminGameAction,
    EventKind.REQUEST_STATE: GameRef,
    EventKind.ADMIN_REGISTER: Credentials,
    EventKind.ADMIN_LOGIN: Credentials,
    EventKind.GET_ADMIN_GAMES: TokenOnly,
    EventKind.DISCONNECT: NoPayload,
}


def parse(kind: EventKind, data: Any):
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError('Payload must be an object')
    return PAYLOAD_TYPES[kind].from_payload(data)
