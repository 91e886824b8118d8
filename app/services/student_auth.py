from __future__ import annotations

import hashlib
import hmac
import secrets

STUDENT_TOKEN_HEADER = "X-Student-Token"


def sign_user_id(*, user_id: int, secret: str) -> str:
    return hmac.new(
        secret.encode("utf-8"),
        str(int(user_id)).encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def build_student_token(*, user_id: int, secret: str) -> str:
    return f"{int(user_id)}.{sign_user_id(user_id=user_id, secret=secret)}"


def parse_student_token(*, token: str | None, secret: str) -> int | None:
    if not secret or not token:
        return None
    raw_user_id, separator, signature = token.strip().partition(".")
    if not separator or not raw_user_id.isdigit():
        return None
    user_id = int(raw_user_id)
    if user_id <= 0:
        return None
    expected = sign_user_id(user_id=user_id, secret=secret)
    if not secrets.compare_digest(expected, signature):
        return None
    return user_id
