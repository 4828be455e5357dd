import logging
from satosa.micro_services.base import ResponseMicroService
from .collaborators import InternalDataLoginContextResolver, default_handler_managers
from .definitions import RESUME_ENDPOINT
from .dispatcher import FormPostTransport, transport_from_config
from .exceptions import ProtocolViolation, UnconfiguredDependency
from .post_login_flow import PostLoginFlowFilter
from .request import SatosaRequest
from .signal_store import InMemorySignalStore, signal_store_from_config
from .suspended_response import SuspendedResponse

logger = logging.getLogger(__name__)


class PostLoginFlowResponse(ResponseMicroService):
    """
    Handle following events:
    * Processing an authenticated response:
        Suspend the response in SATOSA_STATE
        Hand the user over to the post login flow
    * Processing a PostLoginFlowResponse (user returns from the post login flow):
        Retrieve the suspended response
        Continue with the next micro-service if the post login flow signalled CONTINUE
    """
    def __init__(self, config: dict, *args, signal_store=None, transport=None, handler_managers=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.endpoint = RESUME_ENDPOINT
        self.signal_store = signal_store if signal_store is not None else signal_store_from_config(config)
        if transport is None:
            transport = transport_from_config(config)
        if isinstance(self.signal_store, InMemorySignalStore) and isinstance(transport, FormPostTransport):
            # the post login flow runs elsewhere and could never write the signal
            raise UnconfiguredDependency('form_post transport requires a shared signal store (type: redis)')
        if handler_managers is None:
            handler_managers = default_handler_managers()
        self.filter = PostLoginFlowFilter.from_config(config, self.signal_store, transport, handler_managers,
                                                      InternalDataLoginContextResolver())
        logger.info('PostLoginFlowResponse microservice active')

    def _return_url(self):
        return f"{self.base_url}/{self.endpoint}"

    def _continue(self, context, internal_response):
        SuspendedResponse.discard_from(context)
        return super().process(context, internal_response)

    def _run_filter(self, context, internal_response):
        request = SatosaRequest(context, internal_response, self._return_url())
        try:
            return self.filter.do_filter(request, None,
                                         lambda req, resp: self._continue(context, internal_response))
        except ProtocolViolation:
            SuspendedResponse.discard_from(context)
            raise

    def _handle_post_login_flow_response(self, context):
        internal_response = SuspendedResponse.load_from(context)
        logger.debug(f"Returned from post login flow for session {context.state.session_id}")
        return self._run_filter(context, internal_response)

    def process(self, context, internal_response):
        # needed again when the user comes back from the post login flow
        SuspendedResponse(internal_response).save_to(context)
        return self._run_filter(context, internal_response)

    def register_endpoints(self):
        return [("^{}$".format(self.endpoint), self._handle_post_login_flow_response), ]
