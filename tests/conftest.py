"""
Shared pytest fixtures for the contact relay tests.
"""
import pytest

from app import create_app
from config.settings import ContactConfig
from core.exceptions import MailDispatchError

OWNER = 'owner@example.com'
SUBMITTER = 'ada@example.com'


class RecordingDispatcher:
    """Dispatcher double: records every attempt, fails for chosen addresses."""

    def __init__(self):
        self.sent = []
        self.failures = {}

    def fail_for(self, address, error=None):
        self.failures[address] = error or MailDispatchError('send', address, 'mailbox unavailable',
                                                            smtp_code='550', category='perm_fail')

    def send(self, mail):
        self.sent.append(mail)
        if mail.to in self.failures:
            raise self.failures[mail.to]


class FakeSMTP:
    """Stand-in for aiosmtplib.SMTP that records the conversation."""

    advertise_starttls = True
    fail_on = None
    failure = None
    instances = []

    def __init__(self, **options):
        self.options = options
        self.calls = []
        self.sent = []
        self.credentials = None
        self.is_connected = False
        type(self).instances.append(self)

    def _record(self, name):
        self.calls.append(name)
        if name == self.fail_on:
            raise self.failure

    async def connect(self):
        self._record('connect')
        self.is_connected = True

    async def ehlo(self):
        self._record('ehlo')

    def supports_extension(self, extension):
        return self.advertise_starttls and extension.lower() == 'starttls'

    async def starttls(self):
        self._record('starttls')

    async def login(self, username, password):
        self._record('login')
        self.credentials = (username, password)

    async def sendmail(self, sender, recipients, message):
        self._record('sendmail')
        self.sent.append((sender, recipients, message))
        return {}, 'OK'

    async def quit(self):
        self._record('quit')
        self.is_connected = False

    def close(self):
        self.calls.append('close')
        self.is_connected = False


@pytest.fixture
def config():
    return ContactConfig(
        smtp_host='smtp.example.com',
        smtp_port=587,
        smtp_user='mailer@example.com',
        smtp_password='app-password',
        from_email='noreply@example.com',
        from_name='Example Site',
        recipient_email=OWNER,
        cors_origin='https://www.example.org',
    )


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def app(config, dispatcher):
    return create_app(config, mail_dispatcher=dispatcher, testing=True)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def fake_smtp(monkeypatch):
    """Patch aiosmtplib.SMTP with a fresh FakeSMTP subclass per test."""
    class SMTP(FakeSMTP):
        instances = []

    monkeypatch.setattr('aiosmtplib.SMTP', SMTP)
    return SMTP
