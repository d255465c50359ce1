"""
Rendering of the notification and confirmation emails.
"""
from core.mail_templates import ContactTemplateEngine
from core.submission import SubmissionRequest
from tests.conftest import OWNER, SUBMITTER

SUBMISSION = SubmissionRequest(name='Ada', email=SUBMITTER, subject='Hi', message='Hello\nWorld')


class TestNotification:

    def test_addressed_to_owner(self):
        mail = ContactTemplateEngine().notification(SUBMISSION, OWNER)

        assert mail.to == OWNER
        assert mail.subject == 'New Contact Form Submission: Hi'

    def test_body_lists_every_field(self):
        body = ContactTemplateEngine().notification(SUBMISSION, OWNER).html_body

        assert '<p><strong>Name:</strong> Ada</p>' in body
        assert f'<p><strong>Email:</strong> {SUBMITTER}</p>' in body
        assert '<p><strong>Subject:</strong> Hi</p>' in body
        assert '<p>Hello<br>World</p>' in body

    def test_user_text_is_escaped(self):
        submission = SubmissionRequest(
            name='<script>alert(1)</script>',
            email=SUBMITTER,
            subject='<b>bold</b>',
            message='<img src=x onerror=alert(1)>\nbye',
        )

        body = ContactTemplateEngine().notification(submission, OWNER).html_body

        assert '<script>' not in body
        assert '&lt;script&gt;alert(1)&lt;/script&gt;' in body
        assert '&lt;b&gt;bold&lt;/b&gt;' in body
        assert '&lt;img src=x onerror=alert(1)&gt;<br>bye' in body

    def test_subject_is_not_html_escaped(self):
        submission = SubmissionRequest(name='Ada', email=SUBMITTER, subject='Q&A', message='x')

        mail = ContactTemplateEngine().notification(submission, OWNER)

        assert mail.subject == 'New Contact Form Submission: Q&A'


class TestConfirmation:

    def test_addressed_to_submitter(self):
        mail = ContactTemplateEngine().confirmation(SUBMISSION)

        assert mail.to == SUBMITTER
        assert mail.subject == 'Thank you for contacting us'

    def test_greets_and_echoes_message(self):
        body = ContactTemplateEngine().confirmation(SUBMISSION).html_body

        assert '<h2>Thank you for your message, Ada!</h2>' in body
        assert '<p>Hello<br>World</p>' in body

    def test_windows_line_endings(self):
        submission = SubmissionRequest(name='Ada', email=SUBMITTER, message='one\r\ntwo')

        body = ContactTemplateEngine().confirmation(submission).html_body

        assert '<p>one<br>two</p>' in body
