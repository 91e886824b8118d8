from __future__ import annotations


class ChallengeError(Exception):
    pass


class InvalidPartyError(ChallengeError):
    pass


class GradeMismatchError(ChallengeError):
    pass


class DifficultyLockedError(ChallengeError):
    def __init__(self, *, difficulty: str, required: int, balance: int) -> None:
        self.difficulty = difficulty
        self.required = required
        self.balance = balance
        self.missing = max(0, required - balance)
        super().__init__(
            f"{difficulty.capitalize()} battles unlock at {required} raindrops. "
            f"You have {balance}, need {self.missing} more"
        )


class InsufficientRaindropsError(ChallengeError):
    def __init__(self, *, balance: int, required: int) -> None:
        self.balance = balance
        self.required = required
        self.missing = max(0, required - balance)
        super().__init__(f"Insufficient raindrops. You have {balance}, need {required}")


class DuplicateChallengeError(ChallengeError):
    pass


class InsufficientQuestionPoolError(ChallengeError):
    def __init__(self, *, available: int, required: int) -> None:
        self.available = available
        self.required = required
        super().__init__(
            f"Not enough questions for this battle. Found {available}, need {required}"
        )


class ChallengeNotFoundError(ChallengeError):
    pass


class ChallengeAccessError(ChallengeError):
    pass


class NotChallengedPartyError(ChallengeError):
    pass


class NotChallengerPartyError(ChallengeError):
    pass


class ChallengeExpiredError(ChallengeError):
    pass


class ChallengeStateError(ChallengeError):
    def __init__(self, *, status: str, transition: str) -> None:
        self.status = status
        self.transition = transition
        super().__init__(f"Cannot {transition} a challenge that is {status.lower()}")


class ChallengeNotPendingError(ChallengeStateError):
    pass
