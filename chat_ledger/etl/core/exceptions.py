"""Custom exceptions for export processing."""


class TransformFailedException(Exception):
    def __init__(self, message: str | None = None):
        self.message = f"Transform failed: {message}" if message else "Transform failed"
        super().__init__(self.message)


class ExportFormatError(Exception):
    """Raised when a whole input document cannot be used at all.

    Covers unparseable JSON and a top-level value of the wrong shape
    (e.g. an object where the conversations array is required).
    """

    def __init__(self, source: str, message: str):
        self.source = source
        self.message = f"Invalid export document {source}: {message}"
        super().__init__(self.message)


class ExportNotFoundError(FileNotFoundError):
    """Raised when the export path does not resolve to a conversations file."""

    pass


class ProjectMapFormatError(ValueError):
    """Raised when a project membership map is not ``{name: [ids...]}``."""

    pass


class LedgerProcessingError(Exception):
    """Top-level error for a failed :meth:`ChatLedger.process_export` run."""

    pass
