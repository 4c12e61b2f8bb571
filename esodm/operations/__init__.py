from ._backend import Backend, ElasticsearchBackend, RestBackend
from ._search_hits import SearchHit, SearchHitMapping, SearchHits
from ._template import DEFAULT_SCROLL_TIME, ElasticsearchTemplate

__all__ = [
    "Backend",
    "DEFAULT_SCROLL_TIME",
    "ElasticsearchBackend",
    "ElasticsearchTemplate",
    "RestBackend",
    "SearchHit",
    "SearchHitMapping",
    "SearchHits",
]
