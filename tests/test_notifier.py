"""Tests for email notification."""
from __future__ import annotations

import smtplib
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from notes_backup.credentials import Credential
from notes_backup.error_handling import CredentialNotFound, MailSendFailed
from notes_backup.notifier import EmailNotifier
from notes_backup.schemas import EmailConfig

from helpers import email_section


def _email_config(tmp_path: Path, **overrides) -> EmailConfig:
    data = email_section(tmp_path / "smtp.cred")
    data.update(overrides)
    return EmailConfig.model_validate(data)


def _smtp_mock():
    smtp = MagicMock()
    smtp.__enter__.return_value = smtp
    smtp_class = MagicMock(return_value=smtp)
    return smtp_class, smtp


def _store(credential=None, error=None):
    store = MagicMock()
    if error is not None:
        store.load_credential.side_effect = error
    else:
        store.load_credential.return_value = credential or Credential("backups@example.com", "pw")
    return store


def test_send_uses_starttls_and_login(tmp_path: Path):
    smtp_class, smtp = _smtp_mock()
    ssl_class = MagicMock()
    store = _store()
    notifier = EmailNotifier(_email_config(tmp_path), store, timeout=5,
                             smtp_class=smtp_class, smtp_ssl_class=ssl_class)

    notifier.send("Backups SUCCESSFUL (2024-03-07) - 1 jobs", "body text")

    store.load_credential.assert_called_once_with(tmp_path / "smtp.cred")
    smtp_class.assert_called_once_with("smtp.example.com", 587, timeout=5)
    ssl_class.assert_not_called()
    smtp.starttls.assert_called_once()
    smtp.login.assert_called_once_with("backups@example.com", "pw")
    message = smtp.send_message.call_args.args[0]
    assert message["Subject"] == "Backups SUCCESSFUL (2024-03-07) - 1 jobs"
    assert message["From"] == "backups@example.com"
    assert message["To"] == "admin@example.com"
    assert message.get_content().strip() == "body text"


def test_port_465_uses_implicit_tls(tmp_path: Path):
    smtp_class = MagicMock()
    ssl_class, smtp = _smtp_mock()
    notifier = EmailNotifier(_email_config(tmp_path, smtpPort=465), _store(),
                             smtp_class=smtp_class, smtp_ssl_class=ssl_class)

    notifier.send("subject", "body")

    smtp_class.assert_not_called()
    assert ssl_class.call_args.args == ("smtp.example.com", 465)
    smtp.starttls.assert_not_called()
    smtp.send_message.assert_called_once()


def test_plain_smtp_when_ssl_disabled(tmp_path: Path):
    smtp_class, smtp = _smtp_mock()
    notifier = EmailNotifier(_email_config(tmp_path, useSsl=False, smtpPort=25), _store(),
                             smtp_class=smtp_class)

    notifier.send("subject", "body")

    smtp.starttls.assert_not_called()
    smtp.send_message.assert_called_once()


def test_smtp_error_is_mail_send_failed(tmp_path: Path):
    smtp_class, smtp = _smtp_mock()
    smtp.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad credentials")
    notifier = EmailNotifier(_email_config(tmp_path), _store(), smtp_class=smtp_class)

    with pytest.raises(MailSendFailed, match="smtp.example.com:587"):
        notifier.send("subject", "body")


def test_connection_error_is_mail_send_failed(tmp_path: Path):
    smtp_class = MagicMock(side_effect=ConnectionRefusedError("refused"))
    notifier = EmailNotifier(_email_config(tmp_path), _store(), smtp_class=smtp_class)

    with pytest.raises(MailSendFailed):
        notifier.send("subject", "body")


def test_missing_credential_stops_before_connecting(tmp_path: Path):
    smtp_class = MagicMock()
    store = _store(error=CredentialNotFound("Credential file not found: x"))
    notifier = EmailNotifier(_email_config(tmp_path), store, smtp_class=smtp_class)

    with pytest.raises(CredentialNotFound):
        notifier.send("subject", "body")
    smtp_class.assert_not_called()
