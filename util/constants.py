class InternalURIs:
    API = "/api"
    SEARCH = API + "/search"
    HEALTHZ = "/healthz"


# Retrieval defaults; deployments may override them through settings.
TOP_K = 6
MIN_SIMILARITY = 0.25
MIN_EXCERPT_CHARS = 11
