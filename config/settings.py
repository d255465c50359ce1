# config/settings.py
"""
Process configuration loaded once from the environment
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from email_validator import validate_email, EmailNotValidError

from core.exceptions import ConfigurationError

_TRUTHY = {'1', 'true', 'yes', 'on'}
_FALSY = {'0', 'false', 'no', 'off'}


def _get_env(environ: Mapping[str, str], key: str, default: str) -> str:
    """Unset and empty variables both fall back to the default"""
    value = environ.get(key, '')
    return value if value else default


def _get_int(environ: Mapping[str, str], key: str, default: int) -> int:
    raw = _get_env(environ, key, str(default))
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}")


def _get_float(environ: Mapping[str, str], key: str, default: float) -> float:
    raw = _get_env(environ, key, str(default))
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}")


def _get_bool(environ: Mapping[str, str], key: str, default: bool) -> bool:
    raw = _get_env(environ, key, '').strip().lower()
    if not raw:
        return default
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    raise ConfigurationError(f"{key} must be a boolean, got {raw!r}")


@dataclass(frozen=True)
class ContactConfig:
    """Immutable settings shared by every request"""

    # SMTP transport
    smtp_host: str = 'smtp.gmail.com'
    smtp_port: int = 587
    smtp_user: str = ''
    smtp_password: str = ''
    smtp_timeout: float = 10.0
    smtp_validate_certs: bool = True

    # Addresses
    from_email: str = ''
    from_name: str = ''
    recipient_email: str = ''

    # HTTP
    server_port: int = 8080
    cors_origin: str = '*'
    max_content_length: int = 1024 * 1024  # 1MB

    # Logging
    log_level: str = 'INFO'
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'ContactConfig':
        environ = os.environ if environ is None else environ
        return cls(
            smtp_host=_get_env(environ, 'SMTP_HOST', cls.smtp_host),
            smtp_port=_get_int(environ, 'SMTP_PORT', cls.smtp_port),
            smtp_user=_get_env(environ, 'SMTP_USER', ''),
            smtp_password=_get_env(environ, 'SMTP_PASSWORD', ''),
            smtp_timeout=_get_float(environ, 'SMTP_TIMEOUT', cls.smtp_timeout),
            smtp_validate_certs=_get_bool(environ, 'SMTP_VALIDATE_CERTS', cls.smtp_validate_certs),
            from_email=_get_env(environ, 'FROM_EMAIL', ''),
            from_name=_get_env(environ, 'FROM_NAME', ''),
            recipient_email=_get_env(environ, 'RECIPIENT_EMAIL', ''),
            server_port=_get_int(environ, 'SERVER_PORT', cls.server_port),
            cors_origin=_get_env(environ, 'CORS_ORIGIN', cls.cors_origin),
            max_content_length=_get_int(environ, 'MAX_CONTENT_LENGTH', cls.max_content_length),
            log_level=_get_env(environ, 'LOG_LEVEL', cls.log_level),
            log_file=_get_env(environ, 'LOG_FILE', '') or None,
        )

    @property
    def sender_address(self) -> str:
        """Envelope and header sender; falls back to the SMTP login"""
        return self.from_email or self.smtp_user

    def validate(self) -> None:
        """
        Refuse to start with an unusable mail configuration.

        Raises:
            ConfigurationError: on the first problem found
        """
        if not self.smtp_user or not self.smtp_password or not self.recipient_email:
            raise ConfigurationError("SMTP_USER, SMTP_PASSWORD, and RECIPIENT_EMAIL must be set")

        for label, port in (('SMTP_PORT', self.smtp_port), ('SERVER_PORT', self.server_port)):
            if not 0 < port < 65536:
                raise ConfigurationError(f"{label} out of range: {port}")

        if self.smtp_timeout <= 0:
            raise ConfigurationError("SMTP_TIMEOUT must be positive")

        if self.max_content_length <= 0:
            raise ConfigurationError("MAX_CONTENT_LENGTH must be positive")

        try:
            validate_email(self.recipient_email, check_deliverability=False)
        except EmailNotValidError as e:
            raise ConfigurationError(f"RECIPIENT_EMAIL is not a valid address: {e}")

        try:
            validate_email(self.sender_address, check_deliverability=False)
        except EmailNotValidError as e:
            source = 'FROM_EMAIL' if self.from_email else 'SMTP_USER (FROM_EMAIL unset)'
            raise ConfigurationError(f"{source} is not a valid sender address: {e}")
