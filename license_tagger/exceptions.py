"""
Custom exception hierarchy for the license tagger.

Configuration and patch errors are raised before the metadata engine is
touched. Read and write errors come from the engine wrapper.
"""


class LicenseTaggerError(Exception):
    """Base exception for all license tagger errors."""
    pass


class ConfigurationError(LicenseTaggerError):
    """Raised for bad, missing or conflicting command line input."""
    pass


class PatchError(LicenseTaggerError):
    """Raised when a tag patch cannot be parsed."""
    pass


class EngineError(LicenseTaggerError):
    """Raised when the metadata engine cannot be started or queried."""
    pass


class TagReadError(LicenseTaggerError):
    """Raised when tags cannot be read from a file."""

    def __init__(self, path, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message


class TagWriteError(LicenseTaggerError):
    """Raised when a tag cannot be written to a file."""

    def __init__(self, path, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message


class ReportError(LicenseTaggerError):
    """Raised when the JSON log cannot be written."""
    pass


class OperationDeclined(LicenseTaggerError):
    """Raised when the user answers 'no' at the confirmation prompt."""
    pass
