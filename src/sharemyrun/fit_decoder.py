from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field

from fitparse import FitFile, FitParseError

from sharemyrun.errors import CorruptInput

logger = logging.getLogger(__name__)

FIT_SIGNATURE = b".FIT"
_HEADER_SIZES = (12, 14)


@dataclass(frozen=True)
class DecodedFit:
    """Decoded FIT messages grouped by message name, in file order."""
    messages: dict[str, list[dict]]
    errors: list[str] = field(default_factory=list)

    def group(self, name: str) -> list[dict]:
        return self.messages.get(name, [])


def is_fit(data: bytes) -> bool:
    """
    True when `data` starts with a FIT file header:
      byte 0      header size (12 or 14)
      bytes 8..11 ASCII ".FIT".
    """
    if len(data) < 12:
        return False
    return data[0] in _HEADER_SIZES and data[8:12] == FIT_SIGNATURE


def _fields_of(msg) -> dict:
    """
    Flatten one fitparse DataMessage into {field_name: value}.

    fitparse swaps dynamic fields for their resolved sub-field
    (duration_value -> duration_time in scaled seconds, target_value -> target_hr_zone, ...).
    The parent name is kept too, holding the raw unscaled value, so callers can read
    duration_value / target_value in the profile's native units.
    """
    fields: dict = {}
    for f in msg:
        fields[f.name] = f.value
        if f.parent_field is not None:
            fields[f.parent_field.name] = f.raw_value
    return fields


def decode(data: bytes) -> DecodedFit:
    """
    Decode every data message in a FIT byte stream.

    Raises CorruptInput when fitparse rejects the header, the CRC or hits EOF early.
    """
    try:
        ff = FitFile(io.BytesIO(data), check_crc=True)
        messages: dict[str, list[dict]] = {}
        errors: list[str] = []
        for msg in ff.get_messages():
            if msg.name.startswith("unknown_"):
                errors.append(f"unrecognised message type {msg.name}")
                continue
            messages.setdefault(msg.name, []).append(_fields_of(msg))
    except FitParseError as e:
        raise CorruptInput(str(e)) from e

    if errors:
        logger.debug("FIT decode skipped %d message(s): %s", len(errors), errors)
    return DecodedFit(messages=messages, errors=errors)
