from __future__ import annotations

import os
import uuid

import fakeredis
import pytest
import redis

from satosa_ms_post_login_flow.collaborators import (
    LoginContext,
    LoginContextResolver,
    ProfileHandler,
    ProfileHandlerManager,
)
from satosa_ms_post_login_flow.dispatcher import CrossContextDispatcher, InProcessTransport
from satosa_ms_post_login_flow.post_login_flow import PostLoginFlowFilter
from satosa_ms_post_login_flow.request import HandoffRequest
from satosa_ms_post_login_flow.signal_store import InMemorySignalStore


class StubLoginContext(LoginContext):
    def __init__(self, authenticated=True, relying_party="sp1", principal="alice"):
        self.authenticated = authenticated
        self.relying_party = relying_party
        self.principal = principal

    def is_principal_authenticated(self):
        return self.authenticated

    def relying_party_id(self):
        return self.relying_party

    def principal_name(self):
        return self.principal


class StubResolver(LoginContextResolver):
    def __init__(self, login_context=None):
        self.login_context = login_context
        self.calls = 0

    def resolve_login_context(self, request):
        self.calls += 1
        return self.login_context


class RecordingHandler(ProfileHandler):
    def __init__(self, attributes=None, error=None):
        self.attributes = attributes if attributes is not None else {}
        self.error = error
        self.resolve_calls = 0

    def build_request_context(self, login_context, request):
        return {"principal": login_context.principal_name()}

    def resolve_attributes(self, request_context):
        self.resolve_calls += 1
        if self.error is not None:
            raise self.error
        return self.attributes


class RecordingManager(ProfileHandlerManager):
    def __init__(self, handler):
        self.handler = handler
        self.lookups = 0

    def get_profile_handler(self, request):
        self.lookups += 1
        return self.handler


class Harness:
    """Filter wired to in-process collaborators, recording what happened."""

    def __init__(self, login_context=None, attributes=None, error=None):
        self.store = InMemorySignalStore()
        self.resolver = StubResolver(login_context)
        self.handler = RecordingHandler(attributes, error)
        self.manager = RecordingManager(self.handler)
        self.forwarded = []
        self.chained = []
        self.transport = InProcessTransport()
        self.transport.register("/plf", "/postlogin", self._post_login)
        self.filter = PostLoginFlowFilter(
            self.store,
            self.resolver,
            self.manager,
            CrossContextDispatcher(self.transport, "/plf", "/postlogin"),
        )

    def _post_login(self, request, response):
        self.forwarded.append(dict(request.attributes))
        return "post-login"

    def chain(self, request, response):
        self.chained.append(dict(request.attributes))
        return "pipeline"

    def run(self, session_id="abc", url="https://idp.example.org/idp/profile/SAML2/Redirect/SSO"):
        return self.filter.do_filter(HandoffRequest(session_id, url), None, self.chain)


@pytest.fixture()
def alice() -> StubLoginContext:
    return StubLoginContext()


@pytest.fixture()
def harness(alice: StubLoginContext) -> Harness:
    return Harness(alice, {"mail": ["alice@example.org"]})


@pytest.fixture()
def make_harness():
    return Harness


@pytest.fixture()
def login_context_factory():
    return StubLoginContext


def _real_redis_factory():
    host = os.environ.get("REDIS_HOST", "localhost")
    ping_client = redis.Redis(host=host, socket_connect_timeout=0.5, decode_responses=True)
    try:
        ping_client.ping()
    except redis.exceptions.RedisError:
        pytest.skip(f"no redis server at {host}")
    return lambda: redis.Redis(host=host, decode_responses=True)


@pytest.fixture(params=["in_process", "server"])
def redis_client_factory(request):
    """Returns a callable creating clients that all talk to the same redis (one per simulated worker)."""
    if request.param == "in_process":
        server = fakeredis.FakeServer()
        return lambda: fakeredis.FakeRedis(server=server, decode_responses=True)
    return _real_redis_factory()


@pytest.fixture()
def key_prefix() -> str:
    return f"test:{uuid.uuid4().hex}:"
