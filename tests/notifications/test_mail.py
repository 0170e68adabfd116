"""
Tests for report delivery.
"""

import io
import subprocess
from unittest.mock import patch

import pytest

from core.exceptions import ReportDeliveryError
from notifications import ConsoleTransport, EmailConfig, SendmailTransport, build_message


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def email_config():
    return EmailConfig(
        sender="noc-report@example.net",
        reply_to="noc@example.net",
        recipients=["duty@example.net", "chief@example.net"],
        debug_recipient="admin@example.net",
    )


# ============================================================
# MESSAGE
# ============================================================

class TestBuildMessage:

    def test_headers(self, email_config):
        message = build_message(email_config, "Звіт", "<p>ok</p>")

        assert message["From"] == "noc-report@example.net"
        assert message["Reply-To"] == "noc@example.net"
        assert message["To"] == "duty@example.net, chief@example.net"
        assert message["Subject"] == "Звіт"
        assert message["X-PoweredBy"] == "noc-report 1.0.0"

    def test_html_utf8_body(self, email_config):
        message = build_message(email_config, "s", "<p>Інцидентів не зареєстровано</p>")

        assert message.get_content_type() == "text/html"
        assert message.get_content_charset() == "utf-8"
        assert "Інцидентів не зареєстровано" in message.get_content()

    def test_debug_goes_to_debug_recipient(self, email_config):
        message = build_message(email_config, "s", "b", debug=True)
        assert message["To"] == "admin@example.net"

    def test_config_validity(self, email_config):
        assert email_config.is_valid()
        assert not EmailConfig(sender="a@b").is_valid()


# ============================================================
# TRANSPORTS
# ============================================================

class TestSendmailTransport:

    def test_send_pipes_message(self, email_config):
        completed = subprocess.CompletedProcess(args=[], returncode=0, stdout=b"", stderr=b"")

        with patch("subprocess.run", return_value=completed) as run:
            SendmailTransport(email_config).send("s", "<p>b</p>")

        args, kwargs = run.call_args
        assert args[0] == ["/usr/sbin/sendmail", "-t"]
        assert b"To: duty@example.net" in kwargs["input"]

    def test_non_zero_exit_raises(self, email_config):
        completed = subprocess.CompletedProcess(args=[], returncode=75, stdout=b"", stderr=b"queue full")

        with patch("subprocess.run", return_value=completed):
            with pytest.raises(ReportDeliveryError) as exc_info:
                SendmailTransport(email_config).send("s", "b")

        assert "75" in exc_info.value.message

    def test_missing_binary_raises(self, email_config):
        with patch("subprocess.run", side_effect=FileNotFoundError("sendmail")):
            with pytest.raises(ReportDeliveryError):
                SendmailTransport(email_config).send("s", "b")

    def test_debug_without_recipient_raises(self, email_config):
        email_config.debug_recipient = None
        with pytest.raises(ReportDeliveryError):
            SendmailTransport(email_config, debug=True).send("s", "b")


class TestConsoleTransport:

    def test_writes_subject_and_body(self):
        stream = io.StringIO()
        ConsoleTransport(stream).send("Subject line", "<p>b</p>")
        assert stream.getvalue() == "Subject: Subject line\n\n<p>b</p>\n"
