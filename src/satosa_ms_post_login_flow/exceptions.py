from satosa.exception import SATOSAConfigurationError, SATOSAError


class ProtocolViolation(SATOSAError):
    """ The post login flow reported a failure, or the resumption was replayed/forged """
    def __init__(self, session_id, signal):
        super().__init__(f"The post login flow is broken either on purpose or accidentally "
                         f"(session {session_id}, signal {signal!r}). Start over!")
        self.session_id = session_id
        self.signal = signal


class AttributeResolutionFailure(SATOSAError):
    pass


class DispatchFailure(SATOSAError):
    pass


class UnconfiguredDependency(SATOSAConfigurationError):
    pass


class UnknownPayloadReference(SATOSAError):
    pass
