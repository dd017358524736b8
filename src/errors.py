"""Error taxonomy for record handling"""


class TallerError(Exception):
    """Base class for application errors"""
    pass


class RecordValidationError(TallerError):
    """A required field is missing; the record must not be written"""

    def __init__(self, missing_fields):
        self.missing_fields = list(missing_fields)
        super().__init__(
            f"Missing required fields: {', '.join(self.missing_fields)}"
        )


class RemoteError(TallerError):
    """Store or upload failure; carries the raw message from the backend"""
    pass


class ImageCompressionError(TallerError):
    """Photo could not be compressed; aborts the save"""
    pass


class ParseError(TallerError):
    """Malformed stored line items (normalized by the codec, never surfaced)"""
    pass


class ShareError(TallerError):
    """Share channel failure (logged, non-fatal)"""
    pass


class ItemIndexError(TallerError, IndexError):
    """Line item index outside the set"""
    pass


class NoRecordLoadedError(TallerError):
    """A document was requested without a record"""
    pass


class RecordNotFoundError(RemoteError):
    """The store has no record with the requested id"""
    pass
