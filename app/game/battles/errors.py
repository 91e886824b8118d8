from __future__ import annotations


class BattleError(Exception):
    pass


class BattleNotFoundError(BattleError):
    pass


class NotParticipantError(BattleError):
    pass


class AlreadyAnsweredError(BattleError):
    pass


class InvalidQuestionOrderError(BattleError):
    def __init__(self, *, question_order: int, total_questions: int) -> None:
        self.question_order = question_order
        self.total_questions = total_questions
        super().__init__(
            f"Question {question_order} is not part of this battle (1-{total_questions})"
        )


class BattleStateError(BattleError):
    def __init__(self, *, status: str, transition: str) -> None:
        self.status = status
        self.transition = transition
        super().__init__(f"Cannot {transition} a battle that is {status.lower()}")


class BattleNotWaitingError(BattleStateError):
    pass


class SessionNotInProgressError(BattleStateError):
    pass


class BattleNotForfeitableError(BattleStateError):
    pass
