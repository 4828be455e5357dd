"""
Post login flow support: hand an authenticated response over to an external application
(additional authorization, attribute release consent, ...) and continue only when it signals so.
* Suspend the authenticated response and forward relying party, user and attributes to the post login flow
* Continue the micro-service chain after the post login flow signalled CONTINUE for the session

Signal state: the post login flow writes its outcome keyed by the proxy session id into a store both sides can reach.
The proxy reads and deletes it in one step, so a signal is honoured exactly once. Any value other than CONTINUE
aborts the request; a replayed return from the post login flow therefore fails instead of resuming twice.

The in-memory store is only usable when the post login flow runs inside the proxy process,
otherwise use the redis store (gunicorn workers do not share memory).
"""

from .post_login_flow_response import PostLoginFlowResponse
from .post_login_flow import PostLoginFlowFilter
from .signal_store import InMemorySignalStore, RedisSignalStore, SignalStore
from .payload_store import InMemoryPayloadStore, RedisPayloadStore
from .exceptions import (AttributeResolutionFailure, DispatchFailure, ProtocolViolation, UnconfiguredDependency,
                         UnknownPayloadReference)
