from ._async_helper import run_sync
from ._log_helper import debug, logger, warn
from ._response import Response
from .data_model import DataModel, FrozenDataModel

__all__ = [
    "DataModel",
    "FrozenDataModel",
    "Response",
    "debug",
    "logger",
    "run_sync",
    "warn",
]
