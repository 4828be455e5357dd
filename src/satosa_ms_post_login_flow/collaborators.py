"""
Narrow interfaces to the authentication and attribute subsystems, plus their SATOSA implementations.

In SATOSA the authenticated state of a request is the InternalData handed to response micro-services,
so the SATOSA implementations read everything from request.internal_response.
"""

from abc import ABC, abstractmethod

from .definitions import DEFAULT_HANDLER_MANAGER_ID
from .exceptions import UnconfiguredDependency


class LoginContext(ABC):
    @abstractmethod
    def is_principal_authenticated(self) -> bool:
        pass

    @abstractmethod
    def relying_party_id(self) -> str:
        pass

    @abstractmethod
    def principal_name(self) -> str:
        pass


class LoginContextResolver(ABC):
    @abstractmethod
    def resolve_login_context(self, request):
        """ Return the LoginContext of the request, or None if there is none """


class ProfileHandler(ABC):
    @abstractmethod
    def build_request_context(self, login_context, request):
        pass

    @abstractmethod
    def resolve_attributes(self, request_context):
        """ Return a mapping of attribute name to its values for the principal """


class ProfileHandlerManager(ABC):
    @abstractmethod
    def get_profile_handler(self, request) -> ProfileHandler:
        pass


class HandlerManagerRegistry(object):
    """ Named profile handler managers, looked up once when the filter is configured """
    def __init__(self, managers=None):
        self._managers = dict(managers or {})

    def register(self, manager_id, manager):
        self._managers[manager_id] = manager

    def resolve(self, manager_id=None):
        manager_id = manager_id or DEFAULT_HANDLER_MANAGER_ID
        try:
            return self._managers[manager_id]
        except KeyError:
            raise UnconfiguredDependency(f"No profile handler manager registered as {manager_id}") from None


class InternalDataLoginContext(LoginContext):
    def __init__(self, internal_response):
        self.internal_response = internal_response

    def is_principal_authenticated(self):
        auth_info = self.internal_response.auth_info
        return bool(self.internal_response.subject_id or (auth_info and auth_info.issuer))

    def relying_party_id(self):
        return self.internal_response.requester

    def principal_name(self):
        return self.internal_response.subject_id


class InternalDataLoginContextResolver(LoginContextResolver):
    def resolve_login_context(self, request):
        internal_response = getattr(request, 'internal_response', None)
        if internal_response is None:
            return None
        return InternalDataLoginContext(internal_response)


class InternalDataProfileHandler(ProfileHandler):
    """ Attributes released by the backend and the earlier micro-services """
    def build_request_context(self, login_context, request):
        return request.internal_response

    def resolve_attributes(self, request_context):
        return request_context.attributes


class StaticProfileHandlerManager(ProfileHandlerManager):
    def __init__(self, handler=None):
        self.handler = handler or InternalDataProfileHandler()

    def get_profile_handler(self, request):
        return self.handler


def default_handler_managers():
    return HandlerManagerRegistry({DEFAULT_HANDLER_MANAGER_ID: StaticProfileHandlerManager()})
