from .request_config import RequestConfig as RequestConfig
from .request_timings import RequestTimings as RequestTimings
from .response_record import ResponseRecord as ResponseRecord
from .timing_record import TimingRecord as TimingRecord
