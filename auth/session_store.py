from __future__ import annotations

import asyncio
import contextlib
import secrets
import time

from auth.models import Session
from onboard.constants import LOGGER, SESSION_TTL_SECONDS, SWEEP_INTERVAL_SECONDS


class SessionStore:
    """Pending authorization attempts keyed by their state token.

    Every mutation is a single dict operation with no await in between, so on
    one event loop a state can be consumed at most once.
    """

    def __init__(self, *, ttl_seconds: float = SESSION_TTL_SECONDS, clock=time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self) -> str:
        state = secrets.token_urlsafe(32)
        while state in self._sessions:
            state = secrets.token_urlsafe(32)
        self._sessions[state] = Session(state=state, created_at=self._clock())
        return state

    def has(self, state: str) -> bool:
        session = self._sessions.get(state)
        return session is not None and not self._expired(session)

    def consume(self, state: str) -> bool:
        session = self._sessions.pop(state, None)
        if session is None:
            return False
        return not self._expired(session)

    def sweep(self) -> int:
        cutoff = self._clock() - self.ttl_seconds
        expired_states = [
            state for state, session in self._sessions.items() if session.created_at < cutoff
        ]
        for state in expired_states:
            self._sessions.pop(state, None)
        return len(expired_states)

    def _expired(self, session: Session) -> bool:
        return self._clock() - session.created_at > self.ttl_seconds


class ExpirySweeper:
    def __init__(
        self,
        store: SessionStore,
        *,
        interval_seconds: float = SWEEP_INTERVAL_SECONDS,
        sleep=asyncio.sleep,
    ) -> None:
        self._store = store
        self._interval_seconds = interval_seconds
        self._sleep = sleep
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def _run(self) -> None:
        while True:
            await self._sleep(self._interval_seconds)
            removed = self._store.sweep()
            if removed:
                LOGGER.info("Expired %s OAuth session(s)", removed)
