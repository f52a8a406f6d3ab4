"""
Email notification of the run summary.
"""

import logging
import smtplib
import ssl
from email.message import EmailMessage

from .config import Settings
from .credentials import Credential, CredentialStore
from .error_handling import MailSendFailed
from .schemas import EmailConfig

logger = logging.getLogger(__name__)

IMPLICIT_TLS_PORT = 465


class EmailNotifier:
    """Sends the summary report through an SMTP server."""

    def __init__(self, email_config: EmailConfig, credential_store: CredentialStore,
                 timeout: int = 60, smtp_class=smtplib.SMTP, smtp_ssl_class=smtplib.SMTP_SSL):
        self.email_config = email_config
        self.credential_store = credential_store
        self.timeout = timeout
        self.smtp_class = smtp_class
        self.smtp_ssl_class = smtp_ssl_class

    @classmethod
    def from_settings(cls, email_config: EmailConfig, settings: Settings) -> "EmailNotifier":
        return cls(
            email_config,
            CredentialStore(settings.credential_key),
            timeout=settings.smtp_timeout,
        )

    @property
    def implicit_tls(self) -> bool:
        return self.email_config.use_ssl and self.email_config.smtp_port == IMPLICIT_TLS_PORT

    def build_message(self, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = str(self.email_config.from_address)
        message["To"] = str(self.email_config.to)
        message["Subject"] = subject
        message.set_content(body)
        return message

    def _connect(self) -> smtplib.SMTP:
        server = self.email_config.smtp_server
        port = self.email_config.smtp_port
        if self.implicit_tls:
            return self.smtp_ssl_class(server, port, timeout=self.timeout,
                                       context=ssl.create_default_context())
        return self.smtp_class(server, port, timeout=self.timeout)

    def _deliver(self, message: EmailMessage, credential: Credential) -> None:
        with self._connect() as smtp:
            if self.email_config.use_ssl and not self.implicit_tls:
                smtp.starttls(context=ssl.create_default_context())
            smtp.login(credential.username, credential.password)
            smtp.send_message(message)

    def send(self, subject: str, body: str) -> None:
        """Send the report. Raises CredentialNotFound or MailSendFailed."""
        credential = self.credential_store.load_credential(self.email_config.credential_file)
        message = self.build_message(subject, body)

        server = f"{self.email_config.smtp_server}:{self.email_config.smtp_port}"
        try:
            self._deliver(message, credential)
        except (smtplib.SMTPException, OSError) as e:
            raise MailSendFailed(f"Failed to send email via {server}: {e}") from e

        logger.info(f"Sent backup report to {self.email_config.to} via {server}")
