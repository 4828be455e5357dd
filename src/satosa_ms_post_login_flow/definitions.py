STATE_KEY = 'POST_LOGIN_FLOW_SUSPENDED_RESPONSE'

SIGNAL_CONTINUE = 'POST_LOGIN_FLOW_CONTINUE'

DEFAULT_HANDLER_MANAGER_ID = 'satosa.HandlerManager'

DEFAULT_TARGET_CONTEXT = '/plf'
DEFAULT_TARGET_PATH = '/postlogin'
CALLING_CONTEXT_NAME = '/idp'

RESUME_ENDPOINT = 'post_login_flow_response'

# request attributes carrying the handoff payload
ATTR_RELYING_PARTY = 'relyingParty'
ATTR_USER = 'user'
ATTR_IDP = 'idp'
