import enum
import logging
from collections import namedtuple

from .definitions import SIGNAL_CONTINUE
from .exceptions import ProtocolViolation

logger = logging.getLogger(__name__)


class HandoffAction(enum.Enum):
    RESUME = 'resume'
    HANDOFF = 'handoff'
    BYPASS = 'bypass'


Decision = namedtuple('Decision', ['action', 'login_context'])


class HandoffDecisionEngine(object):
    """
    Decide what to do with a request of session S:
    * a CONTINUE signal for S was waiting: resume the pipeline
    * any other signal for S was waiting: ProtocolViolation
    * no signal and the principal is authenticated: start a handoff
    * otherwise: bypass
    The signal is always removed before the decision is returned. No marker is written for a started handoff,
    the post login flow alone writes the signal for S.
    """
    def __init__(self, signal_store, login_context_resolver):
        self.signal_store = signal_store
        self.login_context_resolver = login_context_resolver

    def decide(self, request) -> Decision:
        session_id = request.session_id
        signal = self.signal_store.get_and_clear(session_id)
        if signal is not None:
            if signal == SIGNAL_CONTINUE:
                logger.info(f"Post login flow signalled continue for session {session_id}")
                return Decision(HandoffAction.RESUME, None)
            logger.warning(f"Post login flow signalled {signal!r} for session {session_id}")
            raise ProtocolViolation(session_id, signal)

        login_context = self.login_context_resolver.resolve_login_context(request)
        if login_context is not None and login_context.is_principal_authenticated():
            return Decision(HandoffAction.HANDOFF, login_context)
        logger.debug(f"No authenticated principal for session {session_id}: bypassing post login flow")
        return Decision(HandoffAction.BYPASS, None)
