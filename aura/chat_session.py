"""
Chat data model: identity, server-issued session handle, turns, and the
append-only transcript.

Nothing here touches the network or Qt.  The transcript lives only for the
lifetime of the controller that owns it; it is never written to disk.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Tuple

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"
ROLES = (ROLE_USER, ROLE_ASSISTANT)


class SessionCreationFailed(Exception):
    """The session endpoint was unreachable or rejected the request."""


class MessageDeliveryFailed(Exception):
    """The message endpoint was unreachable, rejected the request, or timed out."""


@dataclass(frozen=True)
class Identity:
    """Authenticated user as issued by the login endpoint.

    Passed explicitly to anything that needs to act on the user's behalf.
    """
    user_id: str
    access_token: str
    name: str = ""
    email: str = ""

    def __repr__(self) -> str:
        # Keep the token out of logs.
        return f"Identity(user_id={self.user_id!r}, email={self.email!r})"

    @classmethod
    def from_login_response(cls, d: Dict[str, Any]) -> "Identity":
        user = d.get("user")
        if not isinstance(user, dict):
            user = {}
        return cls(
            user_id=str(user.get("_id") or ""),
            access_token=str(d.get("token") or ""),
            name=str(user.get("name") or ""),
            email=str(user.get("email") or ""),
        )


@dataclass(frozen=True)
class ChatSession:
    """Server-assigned handle correlating one conversation's messages."""
    session_id: str


@dataclass(frozen=True)
class Turn:
    """One message in the transcript."""
    role: str
    content: str

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"Unknown turn role: {self.role!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {"role": self.role, "content": self.content}

    @classmethod
    def user(cls, content: str) -> "Turn":
        return cls(ROLE_USER, content)

    @classmethod
    def assistant(cls, content: str) -> "Turn":
        return cls(ROLE_ASSISTANT, content)


class Transcript:
    """Ordered, append-only sequence of turns.

    Insertion order is the only ordering.  Subscribers are called after each
    append with the new turn and its index.
    """

    def __init__(self):
        self._turns: List[Turn] = []
        self._subscribers: List[Callable[[Turn, int], None]] = []

    def append(self, turn: Turn) -> None:
        self._turns.append(turn)
        index = len(self._turns) - 1
        for callback in list(self._subscribers):
            callback(turn, index)

    def turns(self) -> Tuple[Turn, ...]:
        """Snapshot of the full ordered sequence for rendering."""
        return tuple(self._turns)

    def subscribe(self, callback: Callable[[Turn, int], None]) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[Turn, int], None]) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def to_list(self) -> List[Dict[str, Any]]:
        return [t.to_dict() for t in self._turns]

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(tuple(self._turns))

    def __getitem__(self, index: int) -> Turn:
        return self._turns[index]
