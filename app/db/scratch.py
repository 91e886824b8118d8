from __future__ import annotations

import re
from dataclasses import dataclass

from sqlalchemy.engine import URL, make_url

from app.core.config import get_settings

PRODUCTION_ENVS = frozenset({"prod", "production"})
LOCAL_DB_HOSTS = frozenset({"localhost", "127.0.0.1", "::1", "postgres", "raindrop_postgres"})

# Lowercase identifier ending in "_test", optionally followed by a worker suffix.
SCRATCH_DB_NAME_RE = re.compile(r"[a-z][a-z0-9_]*_test(?:_[a-z0-9]+)?")


class UnsafeDatabaseTargetError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class ScratchDatabase:
    """A database that test tooling may create, fill and truncate at will."""

    url: URL
    app_env: str

    @classmethod
    def from_url(cls, database_url: str | URL, *, app_env: str | None = None) -> ScratchDatabase:
        return cls(
            url=make_url(database_url),
            app_env=get_settings().app_env if app_env is None else app_env,
        )

    @property
    def name(self) -> str:
        return (self.url.database or "").strip()

    @property
    def host(self) -> str:
        return (self.url.host or "localhost").strip().lower()

    @property
    def port(self) -> int:
        return int(self.url.port or 5432)

    def problems(self) -> list[str]:
        found: list[str] = []
        if self.app_env.strip().lower() in PRODUCTION_ENVS:
            found.append(f"APP_ENV is {self.app_env.strip()!r}")
        if self.url.get_backend_name() != "postgresql":
            found.append(f"backend {self.url.get_backend_name()!r} is not postgresql")
        if SCRATCH_DB_NAME_RE.fullmatch(self.name) is None:
            found.append(f"database name {self.name!r} is not a lowercase *_test name")
        if self.host not in LOCAL_DB_HOSTS:
            found.append(f"host {self.host!r} is not a local database host")
        return found

    def ensure_disposable(self, *, action: str) -> None:
        problems = self.problems()
        if problems:
            raise UnsafeDatabaseTargetError(
                f"Refusing to {action} {self.name or '<unnamed>'}@{self.host}: " + "; ".join(problems)
            )
