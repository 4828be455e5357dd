"""
Hand the request over to the post login flow.

The dispatcher only knows the name of the target context and the endpoint path. How the request gets there
is up to the transport:
* InProcessTransport calls a handler registered in this process and blocks until it returns
* FormPostTransport keeps the payload in a shared one-time store and sends the browser to the target with an
  auto-submitting form carrying only a random reference to it
"""

import html
import logging
from abc import ABC, abstractmethod

from satosa.response import Response

from .definitions import ATTR_IDP, ATTR_RELYING_PARTY, ATTR_USER, DEFAULT_TARGET_CONTEXT, DEFAULT_TARGET_PATH
from .exceptions import DispatchFailure, UnconfiguredDependency
from .payload_store import payload_store_from_config

logger = logging.getLogger(__name__)


class Transport(ABC):
    @abstractmethod
    def dispatch(self, context_name, path, request, response):
        """ Transfer request (with its handoff attributes) to path of context_name """


class InProcessTransport(Transport):
    def __init__(self, targets=None):
        self.targets = dict(targets or {})

    def register(self, context_name, path, handler):
        self.targets[(context_name, path)] = handler

    def dispatch(self, context_name, path, request, response):
        try:
            handler = self.targets[(context_name, path)]
        except KeyError:
            raise DispatchFailure(f"No handler for {path} in context {context_name}") from None
        return handler(request, response)


FORM_POST_TEMPLATE = """<!DOCTYPE html>
<html>
<head><title>Post login flow</title></head>
<body onload="document.forms[0].submit()">
<form method="post" action="{action}">
<input type="hidden" name="payload_ref" value="{reference}"/>
<noscript><input type="submit" value="Continue"/></noscript>
</form>
</body>
</html>
"""


class FormPostTransport(Transport):
    """ context_urls maps a context name to the base URL it is deployed at """
    def __init__(self, context_urls: dict, payload_store):
        self.context_urls = context_urls
        self.payload_store = payload_store

    def _payload_attributes(self, request):
        return {name: request.get_attribute(name) for name in (ATTR_RELYING_PARTY, ATTR_USER, ATTR_IDP)}

    def dispatch(self, context_name, path, request, response):
        try:
            action = self.context_urls[context_name].rstrip('/') + path
        except KeyError:
            raise DispatchFailure(f"No URL configured for context {context_name}") from None
        reference = self.payload_store.put(self._payload_attributes(request))
        body = FORM_POST_TEMPLATE.format(action=html.escape(action, quote=True),
                                         reference=html.escape(reference, quote=True))
        logger.info(f"posting handoff payload reference to {action}")
        return Response(body, content='text/html')


def transport_from_config(config: dict, payload_store=None) -> Transport:
    transport_type = config.get('transport', 'form_post')
    if transport_type == 'form_post':
        if 'context_urls' not in config:
            raise UnconfiguredDependency('form_post transport requires context_urls')
        if payload_store is None:
            payload_store = payload_store_from_config(config)
        return FormPostTransport(config['context_urls'], payload_store)
    raise UnconfiguredDependency(f"Unknown transport: {transport_type}")


class CrossContextDispatcher(object):
    def __init__(self, transport, context_name=DEFAULT_TARGET_CONTEXT, path=DEFAULT_TARGET_PATH):
        self.transport = transport
        self.context_name = context_name
        self.path = path

    def dispatch(self, request, response, payload):
        for name, value in payload.as_request_attributes().items():
            request.set_attribute(name, value)
        logger.info(f"Handing session {request.session_id} over to {self.context_name}{self.path}")
        return self.transport.dispatch(self.context_name, self.path, request, response)
