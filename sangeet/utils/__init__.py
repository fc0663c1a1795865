from sangeet.utils.upload_guard import (
    PendingCovers,
    UploadInProgress,
    UploadQuotaExceeded,
    UploadRejected,
    UploadThrottle,
    upload_throttle,
)
from sangeet.utils.logging import setup_logging

__all__ = [
    "PendingCovers",
    "UploadInProgress",
    "UploadQuotaExceeded",
    "UploadRejected",
    "UploadThrottle",
    "upload_throttle",
    "setup_logging",
]
