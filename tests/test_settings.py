"""
Environment configuration and startup validation.
"""
import pytest

from app import create_app
from config.settings import ContactConfig
from core.exceptions import ConfigurationError

REQUIRED_ENV = {
    'SMTP_USER': 'mailer@example.com',
    'SMTP_PASSWORD': 'app-password',
    'RECIPIENT_EMAIL': 'owner@example.com',
}


class TestFromEnv:

    def test_defaults(self):
        config = ContactConfig.from_env(REQUIRED_ENV)

        assert config.smtp_host == 'smtp.gmail.com'
        assert config.smtp_port == 587
        assert config.server_port == 8080
        assert config.cors_origin == '*'
        assert config.smtp_timeout == 10.0
        assert config.smtp_validate_certs is True
        assert config.log_file is None

    def test_empty_values_fall_back_to_defaults(self):
        config = ContactConfig.from_env(dict(REQUIRED_ENV, SMTP_HOST='', SMTP_PORT='', CORS_ORIGIN=''))

        assert config.smtp_host == 'smtp.gmail.com'
        assert config.smtp_port == 587
        assert config.cors_origin == '*'

    def test_overrides(self):
        config = ContactConfig.from_env(dict(
            REQUIRED_ENV,
            SMTP_HOST='mail.example.com',
            SMTP_PORT='465',
            SERVER_PORT='9000',
            CORS_ORIGIN='https://www.example.org',
            FROM_EMAIL='noreply@example.com',
            SMTP_TIMEOUT='2.5',
            SMTP_VALIDATE_CERTS='false',
            LOG_FILE='/tmp/form2mail.log',
        ))

        assert config.smtp_host == 'mail.example.com'
        assert config.smtp_port == 465
        assert config.server_port == 9000
        assert config.cors_origin == 'https://www.example.org'
        assert config.sender_address == 'noreply@example.com'
        assert config.smtp_timeout == 2.5
        assert config.smtp_validate_certs is False
        assert config.log_file == '/tmp/form2mail.log'

    @pytest.mark.parametrize('key, value', [
        ('SMTP_PORT', 'submission'),
        ('SERVER_PORT', '80a'),
        ('SMTP_TIMEOUT', 'soon'),
        ('SMTP_VALIDATE_CERTS', 'maybe'),
    ])
    def test_malformed_values(self, key, value):
        with pytest.raises(ConfigurationError, match=key):
            ContactConfig.from_env(dict(REQUIRED_ENV, **{key: value}))

    def test_reads_process_environment(self, monkeypatch):
        for key, value in REQUIRED_ENV.items():
            monkeypatch.setenv(key, value)
        monkeypatch.setenv('SMTP_HOST', 'relay.example.com')

        assert ContactConfig.from_env().smtp_host == 'relay.example.com'


class TestValidate:

    def test_valid(self):
        ContactConfig.from_env(REQUIRED_ENV).validate()

    @pytest.mark.parametrize('missing', ['SMTP_USER', 'SMTP_PASSWORD', 'RECIPIENT_EMAIL'])
    def test_required_values(self, missing):
        env = dict(REQUIRED_ENV)
        del env[missing]

        with pytest.raises(ConfigurationError,
                           match='SMTP_USER, SMTP_PASSWORD, and RECIPIENT_EMAIL must be set'):
            ContactConfig.from_env(env).validate()

    def test_invalid_recipient(self):
        with pytest.raises(ConfigurationError, match='RECIPIENT_EMAIL'):
            ContactConfig.from_env(dict(REQUIRED_ENV, RECIPIENT_EMAIL='not-an-address')).validate()

    def test_username_login_needs_from_email(self):
        config = ContactConfig.from_env(dict(REQUIRED_ENV, SMTP_USER='apikey'))

        with pytest.raises(ConfigurationError, match='FROM_EMAIL unset'):
            config.validate()

        ContactConfig.from_env(dict(REQUIRED_ENV, SMTP_USER='apikey',
                                    FROM_EMAIL='noreply@example.com')).validate()

    def test_port_range(self):
        with pytest.raises(ConfigurationError, match='SMTP_PORT'):
            ContactConfig.from_env(dict(REQUIRED_ENV, SMTP_PORT='70000')).validate()


class TestStartup:

    def test_create_app_fails_fast(self, monkeypatch):
        for key in REQUIRED_ENV:
            monkeypatch.delenv(key, raising=False)

        with pytest.raises(ConfigurationError):
            create_app()

    def test_create_app_from_environment(self, monkeypatch):
        for key, value in REQUIRED_ENV.items():
            monkeypatch.setenv(key, value)
        monkeypatch.setenv('CORS_ORIGIN', 'https://www.example.org')

        app = create_app(testing=True)

        assert app.contact_config.cors_origin == 'https://www.example.org'
        response = app.test_client().options('/contact')
        assert response.headers['Access-Control-Allow-Origin'] == 'https://www.example.org'
