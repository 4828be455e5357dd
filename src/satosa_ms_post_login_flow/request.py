class HandoffRequest(object):
    """ Request seen by the handoff filter: session id, URL and request-scoped attributes """
    def __init__(self, session_id, url, attributes=None):
        self.session_id = session_id
        self.url = url
        self.attributes = dict(attributes or {})

    def set_attribute(self, name, value):
        self.attributes[name] = value

    def get_attribute(self, name):
        return self.attributes.get(name)


class SatosaRequest(HandoffRequest):
    """ Attributes are stored as decorations of the SATOSA context """
    def __init__(self, context, internal_response, url):
        super().__init__(context.state.session_id, url)
        self.context = context
        self.internal_response = internal_response

    def set_attribute(self, name, value):
        self.context.decorate(name, value)

    def get_attribute(self, name):
        return self.context.get_decoration(name)
