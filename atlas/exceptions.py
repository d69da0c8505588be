"""Exceptions raised at the dataset boundary."""


class AtlasError(Exception):
    """Base class for causal map errors."""


class DatasetError(AtlasError):
    """Raised when the static graph dataset is missing or malformed."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path
