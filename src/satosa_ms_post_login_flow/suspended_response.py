from satosa.exception import SATOSAStateError
from satosa.internal import InternalData

from .definitions import STATE_KEY


class SuspendedResponse(object):
    """ Keeps the InternalData of a handed over response in SATOSA_STATE until the post login flow is done """
    def __init__(self, internal_response):
        self.serializable = internal_response.to_dict()

    def save_to(self, context):
        context.state[STATE_KEY] = self.serializable

    @staticmethod
    def discard_from(context):
        context.state.pop(STATE_KEY, None)

    @staticmethod
    def load_from(context):
        try:
            data = context.state[STATE_KEY]
        except KeyError:
            raise SATOSAStateError('No suspended response in state: post login flow returned without a handoff') from None
        return InternalData.from_dict(data)
