"""
Email service for sending organization invitations.

Simple SMTP-based email sending. Used from FastAPI background tasks, so a
delivery failure never affects the invitation that triggered it.
"""

import logging
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from html import escape
from typing import Optional
import os

logger = logging.getLogger(__name__)


class EmailService:
    """
    Simple email service using SMTP.

    Configuration via environment variables:
    - SMTP_HOST: SMTP server (default: localhost)
    - SMTP_PORT: SMTP port (default: 587)
    - SMTP_USERNAME: SMTP username
    - SMTP_PASSWORD: SMTP password
    - SMTP_USE_TLS: Use TLS (default: true)
    - SMTP_FROM_EMAIL: From email address (default: invitations@tasklane.app)
    - SMTP_FROM_NAME: From name (default: Tasklane)
    - APP_BASE_URL: Frontend base URL for links (default: http://localhost:3000)
    """

    def __init__(self):
        """Initialize email service with SMTP configuration from env."""
        self.smtp_host = os.getenv("SMTP_HOST", "localhost")
        self.smtp_port = int(os.getenv("SMTP_PORT", "587"))
        self.smtp_username = os.getenv("SMTP_USERNAME")
        self.smtp_password = os.getenv("SMTP_PASSWORD")
        self.smtp_use_tls = os.getenv("SMTP_USE_TLS", "true").lower() == "true"
        self.from_email = os.getenv("SMTP_FROM_EMAIL", "invitations@tasklane.app")
        self.from_name = os.getenv("SMTP_FROM_NAME", "Tasklane")
        self.app_base_url = os.getenv("APP_BASE_URL", "http://localhost:3000").rstrip("/")
        self.invitation_ttl_days = int(os.getenv("INVITATION_TTL_DAYS", "7"))

    def invitation_link(self, invitation_token: str) -> str:
        return f"{self.app_base_url}/invitations/{invitation_token}"

    def send_invitation_email(
        self,
        to_email: str,
        inviter_name: str,
        organization_name: str,
        invitation_token: str,
        personal_message: Optional[str] = None
    ) -> bool:
        """
        Send the invitation link to the invitee.

        Returns:
            True if sent successfully
        """
        subject = f"{inviter_name} invited you to join {organization_name} on Tasklane"

        message_block = ""
        if personal_message:
            message_block = f"<blockquote>{escape(personal_message)}</blockquote>"

        body = f"""
        <h2>You're invited to {escape(organization_name)}</h2>

        <p><strong>{escape(inviter_name)}</strong> invited you to collaborate on Tasklane.</p>
        {message_block}

        <p><a href="{self.invitation_link(invitation_token)}">Accept invitation →</a></p>

        <p>This invitation expires in {self.invitation_ttl_days} days.</p>
        """

        return self._send_email(to=to_email, subject=subject, html_body=body)

    def _send_email(self, to: str, subject: str, html_body: str) -> bool:
        """
        Send an email via SMTP.

        Args:
            to: Recipient email address
            subject: Email subject
            html_body: HTML body content

        Returns:
            True if sent successfully
        """
        try:
            msg = MIMEMultipart('alternative')
            msg['Subject'] = subject
            msg['From'] = f"{self.from_name} <{self.from_email}>"
            msg['To'] = to

            msg.attach(MIMEText(html_body, 'html'))

            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                if self.smtp_use_tls:
                    server.starttls()

                if self.smtp_username and self.smtp_password:
                    server.login(self.smtp_username, self.smtp_password)

                server.send_message(msg)

            logger.info(f"Sent email to {to}: {subject}")
            return True

        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {to}: {e}", exc_info=True)
            return False
