from .http_connection import HTTPConnection as HTTPConnection
from .models import (
    RequestConfig as RequestConfig,
    RequestTimings as RequestTimings,
    ResponseRecord as ResponseRecord,
    TimingRecord as TimingRecord,
)
from .request_timer import RequestTimer as RequestTimer
