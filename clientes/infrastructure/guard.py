"""
Availability guard around the store connection.

The guard owns the only store session of the process. Every request goes
through with_connection, which holds a lock for the duration of the
operation, so store access is serialized even though requests are handled
concurrently.
"""
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, TypeVar, Union
from fastapi import Request
from sqlalchemy.orm import Session

T = TypeVar("T")

@dataclass(frozen=True)
class Connected:
    session: Session

@dataclass(frozen=True)
class Disconnected:
    reason: str = "no database configured"

StoreState = Union[Connected, Disconnected]

class Availability(Enum):
    UNAVAILABLE = "unavailable"

UNAVAILABLE = Availability.UNAVAILABLE

class ConnectionGuard:
    def __init__(self, state: StoreState):
        self._state = state
        self._lock = threading.Lock()

    @property
    def available(self) -> bool:
        return isinstance(self._state, Connected)

    @property
    def reason(self) -> str:
        if isinstance(self._state, Disconnected):
            return self._state.reason
        return ""

    def with_connection(self, operation: Callable[[Session], T]) -> Union[T, Availability]:
        """Run operation with the session, or return UNAVAILABLE without calling it."""
        with self._lock:
            if isinstance(self._state, Connected):
                return operation(self._state.session)
            return UNAVAILABLE

    def close(self):
        with self._lock:
            if isinstance(self._state, Connected):
                session = self._state.session
                bind = session.get_bind()
                session.close()
                bind.dispose()

def get_guard(request: Request) -> ConnectionGuard:
    guard = getattr(request.app.state, "guard", None)
    if guard is None:
        return ConnectionGuard(Disconnected("store not initialized"))
    return guard
