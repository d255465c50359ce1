# core/mail_dispatcher.py
"""
Synchronous single-attempt SMTP delivery

Each call opens a fresh connection, upgrades with STARTTLS when the server
advertises it, authenticates, sends one message to one recipient and quits.
Any failure surfaces as MailDispatchError with the failing stage attached.
"""

import asyncio
import logging
import re
import uuid
from email.header import Header
from email.mime.text import MIMEText
from email.utils import formataddr, formatdate

import aiosmtplib

from config.settings import ContactConfig
from core.exceptions import MailDispatchError
from core.smtp_rfc_handler import SMTPResponseAnalyzer
from core.submission import MailMessage

logger = logging.getLogger(__name__)

_LINE_BREAKS = re.compile(r'[\r\n]+')

IMPLICIT_TLS_PORT = 465


def header_safe(value: str) -> str:
    """Collapse CR/LF runs so a value cannot start a new header"""
    return _LINE_BREAKS.sub(' ', value).strip()


class MailDispatcher:
    """Delivers MailMessage values through the configured SMTP server"""

    def __init__(self, config: ContactConfig):
        self.config = config
        self.analyzer = SMTPResponseAnalyzer()

    def build_message(self, mail: MailMessage) -> MIMEText:
        """
        Create the MIME message with proper headers

        Raises:
            MailDispatchError: if the recipient address could inject headers
        """
        if not mail.to or _LINE_BREAKS.search(mail.to):
            raise MailDispatchError('compose', repr(mail.to), 'recipient address is empty or contains line breaks')

        sender = self.config.sender_address
        domain = sender.rpartition('@')[2] or 'localhost'

        msg = MIMEText(mail.html_body, 'html', 'utf-8')
        msg['From'] = formataddr((header_safe(self.config.from_name), sender))
        msg['To'] = mail.to
        msg['Subject'] = Header(header_safe(mail.subject), 'utf-8')
        msg['Date'] = formatdate(localtime=True)
        msg['Message-ID'] = f"<{uuid.uuid4()}@{domain}>"
        return msg

    def send(self, mail: MailMessage) -> None:
        """
        Send one email; blocks until the SMTP exchange completes or fails.

        Raises:
            MailDispatchError: on any failure, chained to the underlying cause
        """
        msg = self.build_message(mail)

        logger.debug(f"Sending email to {mail.to} via {self.config.smtp_host}:{self.config.smtp_port}")
        asyncio.run(self._send_smtp(msg, mail.to))
        logger.info(f"Email to {mail.to} accepted by {self.config.smtp_host}")

    async def _send_smtp(self, msg: MIMEText, recipient: str) -> None:
        implicit_tls = self.config.smtp_port == IMPLICIT_TLS_PORT
        smtp = aiosmtplib.SMTP(
            hostname=self.config.smtp_host,
            port=self.config.smtp_port,
            timeout=self.config.smtp_timeout,
            use_tls=implicit_tls,
            start_tls=False,  # upgraded below, only when advertised
            validate_certs=self.config.smtp_validate_certs,
        )

        stage = 'connect'
        try:
            await smtp.connect()

            stage = 'handshake'
            await smtp.ehlo()

            if not implicit_tls and smtp.supports_extension('starttls'):
                stage = 'starttls'
                await smtp.starttls()

            stage = 'authenticate'
            await smtp.login(self.config.smtp_user, self.config.smtp_password)

            stage = 'send'
            await smtp.sendmail(self.config.sender_address, [recipient], msg.as_string())

            stage = 'quit'
            await smtp.quit()
        except Exception as exc:
            raise self._dispatch_error(stage, recipient, exc) from exc
        finally:
            if smtp.is_connected:
                smtp.close()

    def _dispatch_error(self, stage: str, recipient: str, exc: Exception) -> MailDispatchError:
        reason = str(exc) or exc.__class__.__name__
        code_info = self.analyzer.classify_exception(exc)
        if code_info is None:
            return MailDispatchError(stage, recipient, reason)
        return MailDispatchError(stage, recipient, reason,
                                 smtp_code=code_info.code,
                                 category=code_info.category.value)
