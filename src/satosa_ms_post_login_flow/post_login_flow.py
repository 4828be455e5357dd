import logging

from .decision import HandoffAction, HandoffDecisionEngine
from .definitions import CALLING_CONTEXT_NAME, DEFAULT_TARGET_CONTEXT, DEFAULT_TARGET_PATH
from .dispatcher import CrossContextDispatcher
from .marshaller import ContextMarshaller

logger = logging.getLogger(__name__)


class PostLoginFlowFilter(object):
    """
    Integration point between the proxy's processing pipeline and an external post login flow
    (additional authorization, attribute release consent, ...).

    An authenticated request is packaged and handed over to the post login flow. The pipeline stays interrupted
    until the post login flow signals CONTINUE for the session in the signal store; the next request of that
    session then passes on down the pipeline. Any other signal aborts the request.
    """
    def __init__(self, signal_store, login_context_resolver, profile_handler_manager, dispatcher,
                 calling_context_name=CALLING_CONTEXT_NAME):
        self.engine = HandoffDecisionEngine(signal_store, login_context_resolver)
        self.marshaller = ContextMarshaller(profile_handler_manager, calling_context_name)
        self.dispatcher = dispatcher

    @classmethod
    def from_config(cls, config: dict, signal_store, transport, handler_managers, login_context_resolver):
        # fails at startup, not per request, when the handler manager is missing
        profile_handler_manager = handler_managers.resolve(config.get('handler_manager_id'))
        dispatcher = CrossContextDispatcher(transport,
                                            config.get('target_context', DEFAULT_TARGET_CONTEXT),
                                            config.get('target_path', DEFAULT_TARGET_PATH))
        return cls(signal_store, login_context_resolver, profile_handler_manager, dispatcher,
                   config.get('calling_context_name', CALLING_CONTEXT_NAME))

    def do_filter(self, request, response, chain):
        decision = self.engine.decide(request)
        if decision.action is HandoffAction.RESUME:
            return self.resume(request, response, chain)
        if decision.action is HandoffAction.HANDOFF:
            payload = self.marshaller.marshal(request, decision.login_context)
            return self.dispatcher.dispatch(request, response, payload)
        return chain(request, response)

    def resume(self, request, response, chain):
        logger.info(f"Resuming pipeline for session {request.session_id}")
        return chain(request, response)
