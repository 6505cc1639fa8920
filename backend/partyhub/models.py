from partyhub import db, bcrypt
import datetime
import json
import string
import random

GAME_MODES = ('quiz', 'voting')
GAME_STATUSES = ('waiting', 'lobby', 'playing', 'finished')

AVATARS = ['🎉', '🎊', '🎈', '🎁', '🌟', '⭐', '🔥', '💫', '🚀', '🎯', '🎪', '🎭']


def _utcnow():
    return datetime.datetime.now(datetime.timezone.utc)


def _isoformat(value):
    return value.isoformat() if value else None


class Admin(db.Model):
    __tablename__ = 'admins'
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    games = db.relationship('Game', back_populates='admin')

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
        }


def generate_game_code(length=6):
    """Generate a unique, short join code."""
    alphabet = string.ascii_uppercase + string.digits
    while True:
        code = ''.join(random.choices(alphabet, k=length))
        if not Game.query.filter_by(id=code).first():
            return code


class Game(db.Model):
    __tablename__ = 'games'
    # The join code doubles as the primary key
    id = db.Column(db.String(16), primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    mode = db.Column(db.String(50), nullable=False)
    status = db.Column(db.String(50), default='waiting', nullable=False)  # waiting, lobby, playing, finished
    current_question_index = db.Column(db.Integer, default=0, nullable=False)
    show_results = db.Column(db.Boolean, default=False, nullable=False)
    admin_id = db.Column(db.Integer, db.ForeignKey('admins.id'), nullable=True, index=True)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    admin = db.relationship('Admin', back_populates='games')

    def __init__(self, code_length=6, **kwargs):
        super(Game, self).__init__(**kwargs)
        if not self.id:
            self.id = generate_game_code(code_length)

    def to_summary(self):
        return {
            'id': self.id,
            'name': self.name,
            'mode': self.mode,
            'status': self.status,
            'currentQuestionIndex': self.current_question_index,
            'showResults': bool(self.show_results),
            'createdAt': _isoformat(self.created_at),
        }


class Question(db.Model):
    __tablename__ = 'questions'
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.String(16), db.ForeignKey('games.id'), nullable=False, index=True)
    text = db.Column(db.Text, nullable=False)
    options = db.Column(db.Text, nullable=True)  # JSON-encoded list of option labels
    correct_answer = db.Column(db.Integer, nullable=True)
    use_players_as_options = db.Column(db.Boolean, default=False, nullable=False)
    time_limit = db.Column(db.Integer, default=30, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    @property
    def option_list(self):
        try:
            options = json.loads(self.options) if self.options else []
        except ValueError:
            options = []
        return options if isinstance(options, list) else []


class Player(db.Model):
    __tablename__ = 'players'
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.String(16), db.ForeignKey('games.id'), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    avatar = db.Column(db.String(255), nullable=True)
    score = db.Column(db.Integer, default=0, nullable=False)
    connected = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    __table_args__ = (
        db.UniqueConstraint('game_id', 'name', name='uq_player_game_name'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'avatar': self.avatar,
            'score': self.score or 0,
            'connected': bool(self.connected),
        }


class Vote(db.Model):
    __tablename__ = 'votes'
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.String(16), db.ForeignKey('games.id'), nullable=False, index=True)
    # Plain ids: votes outlive a player leaving or a question being removed
    player_id = db.Column(db.Integer, nullable=False, index=True)
    question_id = db.Column(db.Integer, nullable=False, index=True)
    option_index = db.Column(db.Integer, nullable=True)
    target_player_id = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    __table_args__ = (
        db.UniqueConstraint('player_id', 'question_id', name='uq_vote_player_question'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'gameId': self.game_id,
            'playerId': self.player_id,
            'questionId': self.question_id,
            'optionIndex': self.option_index,
            'targetPlayerId': self.target_player_id,
            'createdAt': _isoformat(self.created_at),
        }
