"""Record extractor — pulls the 8-character record id out of a delivered line.

The producer writes payloads as ``<8-char id>_<13-char timestamp>_<random>``,
e.g. ``10029999_1639151827578_RandomString``. Object-store deliveries wrap that
payload in a JSON envelope (``{"log": "..."}``); log-stream events carry it bare.
"""

import json
from dataclasses import dataclass

from src.errors import MalformedRecordError
from src.universe import RECORD_ID_LENGTH

ENVELOPE_FIELD = "log"


@dataclass(frozen=True)
class ExtractedRecord:
    record_id: str
    rest: str


def parse_envelope(raw: str) -> str:
    """Return the payload held in a JSON envelope line.

    The field name is matched case-insensitively, so both ``log`` and ``Log``
    are accepted.
    """
    try:
        envelope = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedRecordError(f"Json decode error: {e} in line {raw[:80]!r}") from e
    if not isinstance(envelope, dict):
        raise MalformedRecordError(f"Expected a JSON object, got {type(envelope).__name__}")

    payload = envelope.get(ENVELOPE_FIELD)
    if payload is None:
        for key, value in envelope.items():
            if key.lower() == ENVELOPE_FIELD:
                payload = value
                break
    if not isinstance(payload, str):
        raise MalformedRecordError(f"Missing string '{ENVELOPE_FIELD}' field in line {raw[:80]!r}")
    return payload


def decode_record(payload: str) -> ExtractedRecord:
    """Split a payload into its record id prefix and the rest."""
    if len(payload) < RECORD_ID_LENGTH:
        raise MalformedRecordError(
            f"Payload shorter than {RECORD_ID_LENGTH} characters: {payload!r}"
        )
    return ExtractedRecord(
        record_id=payload[:RECORD_ID_LENGTH],
        rest=payload[RECORD_ID_LENGTH:],
    )


def extract(raw: str, enveloped: bool = True) -> ExtractedRecord:
    """Parse one raw destination line into an ExtractedRecord."""
    payload = parse_envelope(raw) if enveloped else raw
    return decode_record(payload)
