from __future__ import annotations


class ShareMyRunError(Exception):
    """Base class for everything this package raises on purpose."""


class UnsupportedFormat(ShareMyRunError):
    """Bytes are neither a FIT file nor a JSON document."""


class CorruptInput(ShareMyRunError):
    """FIT signature matched but the stream failed to decode (header, CRC, truncation)."""


class NotFound(ShareMyRunError):
    """No artifact for the id, or nothing renderable could be read out of it."""


class UploadRejected(ShareMyRunError):
    """An upload failed validation. The message is safe to show to the user."""
