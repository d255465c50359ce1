# core/mail_templates.py
"""
HTML bodies for the notification and confirmation emails

User-supplied text is never trusted: every value goes through Jinja2
autoescaping, and the ``email_safe`` filter escapes and turns newlines
into ``<br>`` before it is marked safe.
"""

import html

from jinja2 import Environment, DictLoader, StrictUndefined
from markupsafe import Markup

from core.submission import SubmissionRequest, MailMessage

NOTIFICATION_SUBJECT_PREFIX = 'New Contact Form Submission: '
CONFIRMATION_SUBJECT = 'Thank you for contacting us'

NOTIFICATION_TEMPLATE = """\
<html>
<body>
    <h2>New Contact Form Submission</h2>
    <p><strong>Name:</strong> {{ name }}</p>
    <p><strong>Email:</strong> {{ email }}</p>
    <p><strong>Subject:</strong> {{ subject }}</p>
    <p><strong>Message:</strong></p>
    <p>{{ message|email_safe }}</p>
</body>
</html>
"""

CONFIRMATION_TEMPLATE = """\
<html>
<body>
    <h2>Thank you for your message, {{ name }}!</h2>
    <p>We have received your contact form submission and will get back to you as soon as possible.</p>
    <hr>
    <p><strong>Your message:</strong></p>
    <p>{{ message|email_safe }}</p>
    <hr>
    <p>Best regards</p>
</body>
</html>
"""


class ContactTemplateEngine:
    """Renders the two contact emails from a submission"""

    def __init__(self):
        self.env = Environment(
            loader=DictLoader({
                'notification.html': NOTIFICATION_TEMPLATE,
                'confirmation.html': CONFIRMATION_TEMPLATE,
            }),
            autoescape=True,
            undefined=StrictUndefined,  # Fail on undefined variables
            keep_trailing_newline=True,
        )
        self.env.filters['email_safe'] = self._email_safe_filter

    def render(self, template_name: str, submission: SubmissionRequest) -> str:
        template = self.env.get_template(template_name)
        return template.render(
            name=submission.name,
            email=submission.email,
            subject=submission.subject,
            message=submission.message,
        )

    def notification(self, submission: SubmissionRequest, recipient: str) -> MailMessage:
        """Owner-facing email, addressed to the fixed recipient"""
        return MailMessage(
            to=recipient,
            subject=NOTIFICATION_SUBJECT_PREFIX + submission.subject,
            html_body=self.render('notification.html', submission),
        )

    def confirmation(self, submission: SubmissionRequest) -> MailMessage:
        """Courtesy email back to the submitter"""
        return MailMessage(
            to=submission.email,
            subject=CONFIRMATION_SUBJECT,
            html_body=self.render('confirmation.html', submission),
        )

    @staticmethod
    def _email_safe_filter(value) -> Markup:
        """
        Custom Jinja2 filter for multi-line user text
        """
        if not isinstance(value, str):
            value = str(value)

        value = html.escape(value)
        value = value.replace('\r\n', '\n').replace('\n', '<br>')

        return Markup(value)
