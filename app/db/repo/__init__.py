from app.db.repo.battle_answers_repo import BattleAnswersRepo
from app.db.repo.battle_events_repo import BattleEventsRepo
from app.db.repo.battles_repo import BattlesRepo
from app.db.repo.challenges_repo import ChallengesRepo
from app.db.repo.outbox_events_repo import OutboxEventsRepo
from app.db.repo.quiz_questions_repo import QuizQuestionsRepo
from app.db.repo.test_attempts_repo import TestAttemptsRepo
from app.db.repo.users_repo import UsersRepo

__all__ = [
    "BattleAnswersRepo",
    "BattleEventsRepo",
    "BattlesRepo",
    "ChallengesRepo",
    "OutboxEventsRepo",
    "QuizQuestionsRepo",
    "TestAttemptsRepo",
    "UsersRepo",
]
