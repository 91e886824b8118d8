from app.db.models.base import Base
from app.db.models.battle_answers import BattleAnswer
from app.db.models.battle_events import BattleEvent
from app.db.models.battles import Battle
from app.db.models.challenges import Challenge
from app.db.models.outbox_events import OutboxEvent
from app.db.models.quiz_questions import QuizQuestion
from app.db.models.test_attempts import TestAttempt
from app.db.models.users import User

__all__ = [
    "Base",
    "Battle",
    "BattleAnswer",
    "BattleEvent",
    "Challenge",
    "OutboxEvent",
    "QuizQuestion",
    "TestAttempt",
    "User",
]
