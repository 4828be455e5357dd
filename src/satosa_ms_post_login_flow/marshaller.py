import logging
from collections.abc import Mapping

from .definitions import ATTR_IDP, ATTR_RELYING_PARTY, ATTR_USER, CALLING_CONTEXT_NAME
from .exceptions import AttributeResolutionFailure

logger = logging.getLogger(__name__)


class HandoffPayload(object):
    """ Data handed to the post login flow; built per request and never stored """
    def __init__(self, relying_party: dict, user: dict, idp: dict):
        self.relying_party = relying_party
        self.user = user
        self.idp = idp

    def as_request_attributes(self) -> dict:
        return {
            ATTR_RELYING_PARTY: self.relying_party,
            ATTR_USER: self.user,
            ATTR_IDP: self.idp,
        }

    def __eq__(self, other):
        if not isinstance(other, HandoffPayload):
            return NotImplemented
        return self.as_request_attributes() == other.as_request_attributes()

    def __repr__(self):
        return f"HandoffPayload({self.as_request_attributes()!r})"


def attribute_values(native):
    """ Ordered list of string values from a resolver's attribute representation """
    if isinstance(native, Mapping):
        raise TypeError(f"mapping is not an attribute value: {native!r}")
    values = getattr(native, 'values', native)
    if callable(values):
        values = values()
    if values is None:
        return []
    if isinstance(values, (str, bytes)):
        values = [values]
    return [v.decode('utf-8') if isinstance(v, bytes) else str(v) for v in values]


class ContextMarshaller(object):
    def __init__(self, profile_handler_manager, calling_context_name=CALLING_CONTEXT_NAME):
        self.profile_handler_manager = profile_handler_manager
        self.calling_context_name = calling_context_name

    def _resolve_attributes(self, request, login_context):
        try:
            handler = self.profile_handler_manager.get_profile_handler(request)
            request_context = handler.build_request_context(login_context, request)
            resolved = handler.resolve_attributes(request_context)
            if resolved is None:
                raise ValueError('resolver returned no attributes')
            return {name: attribute_values(native) for name, native in resolved.items()}
        except Exception as e:
            raise AttributeResolutionFailure(
                f"Attribute resolution failed for {login_context.principal_name()}: {e}") from e

    def marshal(self, request, login_context) -> HandoffPayload:
        attributes = self._resolve_attributes(request, login_context)
        payload = HandoffPayload(
            relying_party={'id': login_context.relying_party_id()},
            user={'name': login_context.principal_name(), 'attributes': attributes},
            idp={
                'returnUrl': request.url,
                'callingContextName': self.calling_context_name,
                'callingSessionId': request.session_id,
            },
        )
        logger.debug(f"Handoff payload for session {request.session_id}: {payload}")
        return payload
