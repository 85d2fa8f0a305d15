"""Internal constants shared across the library."""

USER_AGENT = "pytraintracker"
DEFAULT_POLL_INTERVAL: float = 5.0
FLEET_LIST_KEY = "trains"
SEARCH_LIST_KEY = "results"
SEARCH_QUERY_PARAM = "query"
