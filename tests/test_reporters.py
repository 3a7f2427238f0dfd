import logging
import smtplib
import unittest
from unittest import mock

from backup_sync.reporters.email_reporter import EmailReporter
from backup_sync.reporters.log_collector import LogCollector


class TestLogCollector(unittest.TestCase):
    def setUp(self):
        self.logger = logging.getLogger("tests.collector")
        self.logger.setLevel(logging.DEBUG)
        self.collector = LogCollector()
        self.logger.addHandler(self.collector)

    def tearDown(self):
        self.logger.removeHandler(self.collector)

    def test_collects_info_and_above(self):
        self.logger.debug("hidden")
        self.logger.info("New files found: 2")
        self.logger.error("boom")

        self.assertEqual(len(self.collector.lines), 2)
        self.assertRegex(self.collector.lines[0], r"^\[\d\d:\d\d:\d\d\] INFO : New files found: 2$")

    def test_summary(self):
        self.logger.info("Backup complete!")
        summary = self.collector.summary()

        self.assertTrue(summary.startswith("backup-sync Log Summary - "))
        self.assertIn("Backup complete!", summary)
        self.assertTrue(summary.endswith("=" * 67))


class TestEmailReporter(unittest.TestCase):
    def setUp(self):
        self.reporter = EmailReporter.from_config({
            "smtp_server": "smtp.example.com",
            "smtp_port": 2525,
            "smtp_user": "user",
            "smtp_pass": "secret",
            "to_addresses": ["admin@example.com"],
        })

    def test_sender_defaults_to_recipient(self):
        self.assertEqual(self.reporter.from_address, "admin@example.com")

    @mock.patch("backup_sync.reporters.email_reporter.smtplib.SMTP")
    def test_send_summary(self, smtp):
        server = smtp.return_value.__enter__.return_value

        self.assertTrue(self.reporter.send_summary("summary text"))

        smtp.assert_called_once_with("smtp.example.com", 2525)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("user", "secret")
        message = server.send_message.call_args[0][0]
        self.assertTrue(message["Subject"].startswith("backup-sync Log Summary ["))
        self.assertEqual(message["To"], "admin@example.com")

    @mock.patch("backup_sync.reporters.email_reporter.smtplib.SMTP")
    def test_send_failure_returns_false(self, smtp):
        smtp.side_effect = smtplib.SMTPConnectError(421, "unavailable")
        self.assertFalse(self.reporter.send_summary("summary text"))

    def test_no_content(self):
        self.assertFalse(self.reporter.send_report("subject", ""))

    def test_validate_configuration(self):
        self.assertEqual(self.reporter.validate_configuration(), [])

        broken = EmailReporter(smtp_server=None, to_addresses=["not-an-address"])
        errors = broken.validate_configuration()
        self.assertIn("SMTP server not configured", errors)
        self.assertTrue(any("Invalid recipient address" in e for e in errors))


if __name__ == "__main__":
    unittest.main()
