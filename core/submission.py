# core/submission.py
"""
Transient values built per request: the parsed submission and the
outgoing mail messages
"""

import json
import re
from dataclasses import dataclass
from typing import Mapping, Union
from urllib.parse import parse_qsl

from core.exceptions import InvalidJSONError, FormParseError, MissingFieldsError

SUBMISSION_FIELDS = ('name', 'email', 'subject', 'message')
REQUIRED_FIELDS = ('name', 'email', 'message')

# A '%' not followed by two hex digits
_BAD_PERCENT_ESCAPE = re.compile(r'%(?![0-9A-Fa-f]{2})')


@dataclass(frozen=True)
class SubmissionRequest:
    """One contact form payload"""
    name: str = ''
    email: str = ''
    subject: str = ''
    message: str = ''

    @classmethod
    def from_json(cls, raw: Union[bytes, str]) -> 'SubmissionRequest':
        """
        Decode a JSON object body.

        Keys match field names case-insensitively and a later key overrides
        an earlier one. Missing keys leave the field empty, null values are
        skipped and unknown keys are ignored. A non-object document or a
        non-string value for a known field is rejected.
        """
        try:
            payload = json.loads(raw)
        except (ValueError, UnicodeDecodeError) as e:
            raise InvalidJSONError(str(e)) from e

        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            raise InvalidJSONError(f"expected an object, got {type(payload).__name__}")

        values = {}
        for key, value in payload.items():
            field = key.lower()
            if field not in SUBMISSION_FIELDS or value is None:
                continue
            if not isinstance(value, str):
                raise InvalidJSONError(f"field '{key}' must be a string")
            values[field] = value
        return cls(**values)

    @classmethod
    def from_fields(cls, fields: Mapping[str, str]) -> 'SubmissionRequest':
        """Pick the submission fields out of already-parsed form values"""
        return cls(**{field: fields.get(field) or '' for field in SUBMISSION_FIELDS})

    def validate(self) -> None:
        # Empty-string check only; whitespace counts as a value
        if any(getattr(self, field) == '' for field in REQUIRED_FIELDS):
            raise MissingFieldsError()


def parse_urlencoded(raw: bytes) -> dict:
    """
    Parse an application/x-www-form-urlencoded body.

    The first occurrence of a key wins. Invalid UTF-8 and malformed percent
    escapes raise FormParseError.
    """
    try:
        text = raw.decode('utf-8')
    except UnicodeDecodeError as e:
        raise FormParseError(str(e)) from e

    if _BAD_PERCENT_ESCAPE.search(text):
        raise FormParseError('malformed percent escape')

    fields = {}
    try:
        pairs = parse_qsl(text, keep_blank_values=True, errors='strict')
    except (ValueError, UnicodeDecodeError) as e:
        raise FormParseError(str(e)) from e
    for key, value in pairs:
        fields.setdefault(key, value)
    return fields


@dataclass(frozen=True)
class MailMessage:
    """An outgoing HTML email"""
    to: str
    subject: str
    html_body: str
