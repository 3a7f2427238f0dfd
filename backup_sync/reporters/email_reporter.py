"""Email reporter for sending backup run summaries."""

import logging
import re
import smtplib
import time
from datetime import datetime
from email.mime.text import MIMEText
from typing import List, Optional


EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


class EmailReporter:
    """Handles sending backup summaries via email."""

    def __init__(self, smtp_server: str = None, smtp_port: int = 587, smtp_user: str = None,
                 smtp_pass: str = None, from_address: str = None,
                 to_addresses: List[str] = None, use_tls: bool = True):
        """Initialize email reporter.

        Args:
            smtp_server: SMTP server hostname.
            smtp_port: SMTP server port.
            smtp_user: SMTP username.
            smtp_pass: SMTP password.
            from_address: From email address. Defaults to the first recipient.
            to_addresses: List of recipient email addresses.
            use_tls: Whether to use TLS encryption.
        """
        self.smtp_server = smtp_server
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_pass = smtp_pass
        self.to_addresses = to_addresses or []
        self.from_address = from_address or (self.to_addresses[0] if self.to_addresses else None)
        self.use_tls = use_tls
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, email_config: dict) -> 'EmailReporter':
        """Build a reporter from the ``email`` configuration section."""
        return cls(
            smtp_server=email_config.get('smtp_server'),
            smtp_port=email_config.get('smtp_port', 587),
            smtp_user=email_config.get('smtp_user'),
            smtp_pass=email_config.get('smtp_pass'),
            from_address=email_config.get('from_address'),
            to_addresses=email_config.get('to_addresses', []),
            use_tls=email_config.get('use_tls', True),
        )

    def send_report(self, subject: str, text_content: Optional[str]) -> bool:
        """Send a plain text report via email.

        Args:
            subject: Email subject line.
            text_content: Plain text email content.

        Returns:
            True if email sent successfully.
        """
        if not self.to_addresses:
            self.logger.error("No recipient addresses configured")
            return False

        if not text_content:
            self.logger.error("No content provided for email")
            return False

        try:
            msg = self._create_message(subject, text_content)
            self._send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            self.logger.error(f"Failed to send email report: {e}")
            return False

        self.logger.info(f"Mail summary sent to {', '.join(self.to_addresses)}")
        return True

    def send_summary(self, summary: str) -> bool:
        """Send the log summary of a backup run."""
        subject = f"backup-sync Log Summary [{int(time.time())}]"
        return self.send_report(subject, summary)

    def _create_message(self, subject: str, text_content: str) -> MIMEText:
        msg = MIMEText(text_content, 'plain', 'utf-8')
        msg['Subject'] = subject
        msg['From'] = self.from_address
        msg['To'] = ', '.join(self.to_addresses)
        return msg

    def _send_message(self, msg: MIMEText) -> None:
        """Send email message via SMTP."""
        self.logger.debug(f"Connecting to SMTP server {self.smtp_server}:{self.smtp_port}")

        with smtplib.SMTP(self.smtp_server, self.smtp_port) as server:
            if self.use_tls:
                server.starttls()
                self.logger.debug("Started TLS encryption")

            if self.smtp_user and self.smtp_pass:
                server.login(self.smtp_user, self.smtp_pass)
                self.logger.debug(f"Authenticated as {self.smtp_user}")

            server.send_message(msg)

    def send_test_email(self, subject: str = "backup-sync Test Email") -> bool:
        """Send a test email to verify configuration."""
        test_content = f"""
This is a test email from backup-sync.

Configuration:
- SMTP Server: {self.smtp_server}:{self.smtp_port}
- From: {self.from_address}
- Recipients: {', '.join(self.to_addresses)}
- TLS Enabled: {self.use_tls}

If you receive this email, run summaries will be delivered.

Generated at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}
        """.strip()

        return self.send_report(subject, test_content)

    def validate_configuration(self) -> List[str]:
        """Validate email configuration.

        Returns:
            List of validation errors (empty if valid).
        """
        errors = []

        if not self.smtp_server:
            errors.append("SMTP server not configured")

        if not self.to_addresses:
            errors.append("No recipient addresses configured")

        if self.from_address and not EMAIL_PATTERN.match(self.from_address):
            errors.append(f"Invalid from address: {self.from_address}")

        for addr in self.to_addresses:
            if not EMAIL_PATTERN.match(addr):
                errors.append(f"Invalid recipient address: {addr}")

        return errors
