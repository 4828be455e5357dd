"""Unit tests for HandoffDecisionEngine."""
from __future__ import annotations

import pytest

from satosa_ms_post_login_flow.decision import HandoffAction, HandoffDecisionEngine
from satosa_ms_post_login_flow.definitions import SIGNAL_CONTINUE
from satosa_ms_post_login_flow.exceptions import ProtocolViolation
from satosa_ms_post_login_flow.request import HandoffRequest
from satosa_ms_post_login_flow.signal_store import InMemorySignalStore


class _Resolver:
    def __init__(self, login_context):
        self.login_context = login_context
        self.calls = 0

    def resolve_login_context(self, request):
        self.calls += 1
        return self.login_context


@pytest.fixture()
def store() -> InMemorySignalStore:
    return InMemorySignalStore()


def _request(session_id: str = "abc") -> HandoffRequest:
    return HandoffRequest(session_id, "https://idp.example.org/sso")


class TestSignalPresent:
    def test_continue_resumes_and_clears(self, store, alice) -> None:
        resolver = _Resolver(alice)
        store.signal_continue("abc")
        decision = HandoffDecisionEngine(store, resolver).decide(_request())
        assert decision.action is HandoffAction.RESUME
        assert decision.login_context is None
        assert store.get_and_clear("abc") is None
        assert resolver.calls == 0

    def test_other_signal_raises_and_clears(self, store, alice) -> None:
        resolver = _Resolver(alice)
        store.set("abc", "DENIED")
        with pytest.raises(ProtocolViolation) as excinfo:
            HandoffDecisionEngine(store, resolver).decide(_request())
        assert excinfo.value.signal == "DENIED"
        assert excinfo.value.session_id == "abc"
        assert store.get_and_clear("abc") is None
        assert resolver.calls == 0

    def test_violation_is_observed_once(self, store, alice) -> None:
        engine = HandoffDecisionEngine(store, _Resolver(alice))
        store.set("abc", "DENIED")
        with pytest.raises(ProtocolViolation):
            engine.decide(_request())
        assert engine.decide(_request()).action is HandoffAction.HANDOFF

    def test_signal_for_other_session_ignored(self, store, alice) -> None:
        store.signal_continue("xyz")
        decision = HandoffDecisionEngine(store, _Resolver(alice)).decide(_request("abc"))
        assert decision.action is HandoffAction.HANDOFF
        assert store.get_and_clear("xyz") == SIGNAL_CONTINUE


class TestNoSignal:
    def test_authenticated_hands_off(self, store, alice) -> None:
        decision = HandoffDecisionEngine(store, _Resolver(alice)).decide(_request())
        assert decision.action is HandoffAction.HANDOFF
        assert decision.login_context is alice

    def test_handoff_writes_no_marker(self, store, alice) -> None:
        HandoffDecisionEngine(store, _Resolver(alice)).decide(_request())
        assert len(store) == 0

    def test_unauthenticated_bypasses(self, store, login_context_factory) -> None:
        resolver = _Resolver(login_context_factory(authenticated=False))
        decision = HandoffDecisionEngine(store, resolver).decide(_request())
        assert decision.action is HandoffAction.BYPASS
        assert resolver.calls == 1

    def test_no_login_context_bypasses(self, store) -> None:
        decision = HandoffDecisionEngine(store, _Resolver(None)).decide(_request())
        assert decision.action is HandoffAction.BYPASS
