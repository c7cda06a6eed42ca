from .brotli import BrotliCompression
from .recovery import Recovery
from .request_log import RequestLogging
from .timeout import RequestTimeout

__all__ = [
    "BrotliCompression",
    "Recovery",
    "RequestLogging",
    "RequestTimeout",
]
