"""
Error taxonomy shared by the backend and the coordinators.
"""


class SangeetError(Exception):
    pass


class ValidationError(SangeetError):
    """Required input missing; raised before any backend call."""


class UploadError(SangeetError):
    pass


class WriteError(SangeetError):
    pass


class ReadError(SangeetError):
    pass
