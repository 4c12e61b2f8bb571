from ._exception_translator import ExceptionTranslator
from ._filter_processor import CriteriaFilterProcessor
from ._host_provider import (
    CHECK_TIMEOUT,
    ClusterInformation,
    ElasticsearchHost,
    ErrorListener,
    HostProvider,
    HostState,
    MultiNodeHostProvider,
    SingleNodeHostProvider,
    Verification,
)
from ._query_processor import CriteriaQueryProcessor
from ._request_factory import (
    INDEX_MAX_RESULT_WINDOW,
    EngineRequest,
    RequestFactory,
)
from ._response_converter import ByQueryResponse, ResponseConverter
from ._rest_client import RestClient

__all__ = [
    "ByQueryResponse",
    "ClusterInformation",
    "CriteriaFilterProcessor",
    "CriteriaQueryProcessor",
    "ElasticsearchHost",
    "EngineRequest",
    "ErrorListener",
    "ExceptionTranslator",
    "HostProvider",
    "HostState",
    "INDEX_MAX_RESULT_WINDOW",
    "MultiNodeHostProvider",
    "CHECK_TIMEOUT",
    "RequestFactory",
    "ResponseConverter",
    "RestClient",
    "SingleNodeHostProvider",
    "Verification",
]
