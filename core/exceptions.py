# core/exceptions.py
"""
Exception hierarchy for the contact form relay
"""

from typing import Optional


class ContactFormError(Exception):
    """Base exception for contact form operations"""
    pass


class ConfigurationError(ContactFormError):
    """Missing or invalid process configuration"""
    pass


class SubmissionError(ContactFormError):
    """Rejected submission; carries the status and message shown to the client"""
    status_code = 400
    public_message = 'Bad request'

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.public_message)
        self.detail = detail


class InvalidJSONError(SubmissionError):
    public_message = 'Invalid JSON format'


class FormParseError(SubmissionError):
    public_message = 'Failed to parse form'


class MissingFieldsError(SubmissionError):
    public_message = 'Name, email, and message are required'


class MailDispatchError(ContactFormError):
    """
    A single SMTP delivery attempt failed.

    ``stage`` names the step that failed (compose, connect, handshake,
    starttls, authenticate, send, quit). ``smtp_code`` and ``category`` are
    set when the server answered with a reply code.
    """

    def __init__(self, stage: str, recipient: str, reason: str,
                 smtp_code: Optional[str] = None, category: Optional[str] = None):
        self.stage = stage
        self.recipient = recipient
        self.reason = reason
        self.smtp_code = smtp_code
        self.category = category
        message = f"{stage} failed for {recipient}: {reason}"
        if smtp_code:
            message += f" (smtp {smtp_code}, {category})"
        super().__init__(message)
