from __future__ import annotations


class ReportError(Exception):
    """Base class for every failure raised by the report engine."""


# Fatal: the export is aborted and nothing is delivered.


class FontEmbeddingError(ReportError):
    pass


class DocumentStateError(ReportError):
    pass


class LayoutError(ReportError):
    pass


# Recoverable: the attachment is skipped and rendering continues.


class AttachmentError(ReportError):
    def __init__(self, message: str, *, reference: str | None = None):
        super().__init__(message)
        self.reference = reference


class AttachmentFetchError(AttachmentError):
    pass


class AttachmentParseError(AttachmentError):
    pass


# Caller-reported: surfaced to whoever invoked the export.


class SerializationError(ReportError):
    pass


class DeliveryError(ReportError):
    pass
