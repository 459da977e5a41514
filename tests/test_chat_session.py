"""
Tests for aura.chat_session: identity parsing, turns, and the transcript.
"""
import pytest

from aura.chat_session import (
    ChatSession, Identity, ROLE_ASSISTANT, ROLE_USER, Transcript, Turn,
)


class TestIdentity:
    def test_from_login_response(self):
        identity = Identity.from_login_response({
            "user": {"_id": "abc123", "name": "Uma", "email": "uma@example.com"},
            "token": "jwt-token",
        })
        assert identity.user_id == "abc123"
        assert identity.access_token == "jwt-token"
        assert identity.name == "Uma"
        assert identity.email == "uma@example.com"

    def test_missing_fields_become_empty(self):
        identity = Identity.from_login_response({"user": {"name": None}})
        assert identity.user_id == ""
        assert identity.access_token == ""
        assert identity.name == ""

    @pytest.mark.parametrize("user", ["u1", ["u1"], None])
    def test_non_object_user_is_ignored(self, user):
        identity = Identity.from_login_response({"user": user, "token": "tok"})
        assert identity.user_id == ""
        assert identity.access_token == "tok"

    def test_repr_hides_token(self):
        identity = Identity("u1", "super-secret")
        assert "super-secret" not in repr(identity)
        assert "u1" in repr(identity)

    def test_is_immutable(self):
        identity = Identity("u1", "tok")
        with pytest.raises(AttributeError):
            identity.user_id = "u2"


class TestTurn:
    def test_factories_set_role(self):
        assert Turn.user("hi").role == ROLE_USER
        assert Turn.assistant("hello").role == ROLE_ASSISTANT

    def test_unknown_role_rejected(self):
        with pytest.raises(ValueError, match="Unknown turn role"):
            Turn("system", "nope")

    def test_to_dict(self):
        assert Turn.user("hi").to_dict() == {"role": "user", "content": "hi"}


class TestTranscript:
    def test_append_preserves_order(self):
        transcript = Transcript()
        transcript.append(Turn.assistant("greeting"))
        transcript.append(Turn.user("hello"))
        transcript.append(Turn.assistant("reply"))
        assert [t.content for t in transcript] == ["greeting", "hello", "reply"]
        assert len(transcript) == 3
        assert transcript[1] == Turn.user("hello")

    def test_turns_returns_snapshot(self):
        transcript = Transcript()
        transcript.append(Turn.user("one"))
        snapshot = transcript.turns()
        transcript.append(Turn.user("two"))
        assert snapshot == (Turn.user("one"),)
        assert len(transcript.turns()) == 2

    def test_subscribers_receive_turn_and_index(self):
        transcript = Transcript()
        seen = []
        transcript.subscribe(lambda turn, index: seen.append((turn.content, index)))
        transcript.append(Turn.user("a"))
        transcript.append(Turn.assistant("b"))
        assert seen == [("a", 0), ("b", 1)]

    def test_unsubscribe(self):
        transcript = Transcript()
        seen = []

        def callback(turn, index):
            seen.append(index)

        transcript.subscribe(callback)
        transcript.append(Turn.user("a"))
        transcript.unsubscribe(callback)
        transcript.unsubscribe(callback)
        transcript.append(Turn.user("b"))
        assert seen == [0]

    def test_to_list(self):
        transcript = Transcript()
        transcript.append(Turn.user("hi"))
        assert transcript.to_list() == [{"role": "user", "content": "hi"}]


def test_chat_session_equality():
    assert ChatSession("s1") == ChatSession("s1")
    assert ChatSession("s1") != ChatSession("s2")
