# services/contact_relay.py
"""
Two-step email workflow for one submission

The owner notification is the deliverable: its failure propagates. The
confirmation back to the submitter is best effort: its failure is logged
and reported in the result, never raised.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from config.settings import ContactConfig
from core.exceptions import MailDispatchError
from core.mail_templates import ContactTemplateEngine
from core.submission import SubmissionRequest

logger = logging.getLogger(__name__)


@dataclass
class RelayResult:
    """Outcome of relaying one submission"""
    notification_sent: bool
    confirmation_sent: bool
    confirmation_error: Optional[str] = None


class ContactRelay:

    def __init__(self, dispatcher, config: ContactConfig,
                 templates: Optional[ContactTemplateEngine] = None):
        self.dispatcher = dispatcher
        self.config = config
        self.templates = templates or ContactTemplateEngine()

    def relay(self, submission: SubmissionRequest) -> RelayResult:
        """
        Send the notification, then the confirmation.

        Raises:
            MailDispatchError: if the notification could not be sent; the
                confirmation is not attempted in that case
        """
        notification = self.templates.notification(submission, self.config.recipient_email)
        try:
            self.dispatcher.send(notification)
        except MailDispatchError as e:
            logger.error(f"Failed to send email to recipient: {e}")
            raise

        confirmation = self.templates.confirmation(submission)
        try:
            self.dispatcher.send(confirmation)
        except MailDispatchError as e:
            logger.warning(f"Failed to send confirmation email to customer: {e}")
            return RelayResult(notification_sent=True, confirmation_sent=False,
                               confirmation_error=str(e))

        return RelayResult(notification_sent=True, confirmation_sent=True)
