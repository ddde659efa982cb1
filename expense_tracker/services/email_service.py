"""Service for sending account emails."""

import html
import logging
import smtplib
from datetime import timedelta
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from ..domain.errors import EmailDeliveryError

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending emails via SMTP."""

    def __init__(
        self,
        smtp_host: Optional[str] = None,
        smtp_port: int = 587,
        smtp_username: Optional[str] = None,
        smtp_password: Optional[str] = None,
        from_email: Optional[str] = None,
        from_name: str = "ExpenseTracker Pro",
        frontend_url: str = "http://localhost:3000",
        timeout_seconds: float = 10.0,
        verification_expires: timedelta = timedelta(hours=24),
        reset_expires: timedelta = timedelta(minutes=10),
    ):
        self.smtp_host = smtp_host or ""
        self.smtp_port = smtp_port
        self.smtp_username = smtp_username or ""
        self.smtp_password = smtp_password or ""
        self.from_email = from_email or ""
        self.from_name = from_name
        self.frontend_url = frontend_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.verification_expires = verification_expires
        self.reset_expires = reset_expires
        self.enabled = bool(self.smtp_host and self.smtp_username and self.from_email)

    def send_verification_email(self, to_email: str, name: str, verification_token: str) -> None:
        """
        Send the email address verification link.

        Args:
            to_email: Recipient email
            name: Recipient display name
            verification_token: Plaintext verification token (only ever sent, never stored)

        Raises:
            EmailDeliveryError: If the SMTP server rejects or times out
        """
        verification_url = f"{self.frontend_url}/verify-email?token={verification_token}"
        if not self.enabled:
            logger.info("SMTP not configured; verification URL for %s: %s", to_email, verification_url)
            return

        subject = "Verify your ExpenseTracker Pro account"
        expires = _describe_duration(self.verification_expires)
        html_body = f"""
        <html>
            <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
                <div style="background-color: #6366f1; padding: 30px; border-radius: 10px; text-align: center;">
                    <h1 style="color: #ffffff; margin: 0;">Welcome to ExpenseTracker Pro!</h1>
                </div>

                <div style="padding: 30px 0;">
                    <h2 style="color: #1e293b; margin-bottom: 20px;">Hello {html.escape(name)}!</h2>

                    <p style="color: #475569; line-height: 1.6; margin-bottom: 20px;">
                        Thank you for signing up. To complete your registration and start tracking
                        your expenses, please verify your email address:
                    </p>

                    <div style="text-align: center; margin: 30px 0;">
                        <a href="{verification_url}"
                           style="background-color: #6366f1; color: white; padding: 12px 30px;
                                  text-decoration: none; border-radius: 5px; display: inline-block;">
                            Verify Email Address
                        </a>
                    </div>

                    <p style="color: #64748b; font-size: 14px;">This link expires in {expires}.</p>
                    <p style="color: #64748b; font-size: 14px;">
                        If you didn't create an account with ExpenseTracker Pro, please ignore this email.
                    </p>
                </div>
            </body>
        </html>
        """

        text_body = f"""
        Welcome to ExpenseTracker Pro!

        Hello {name},

        Please verify your email address by opening the link below:
        {verification_url}

        This link expires in {expires}.

        If you didn't create an account with ExpenseTracker Pro, please ignore this email.
        """

        self._send_email(to_email, subject, html_body, text_body)

    def send_password_reset_email(self, to_email: str, name: str, reset_token: str) -> None:
        """Send the password reset link. Raises EmailDeliveryError on failure."""
        reset_url = f"{self.frontend_url}/reset-password?token={reset_token}"
        if not self.enabled:
            logger.info("SMTP not configured; password reset URL for %s: %s", to_email, reset_url)
            return

        subject = "Reset your ExpenseTracker Pro password"
        expires = _describe_duration(self.reset_expires)
        html_body = f"""
        <html>
            <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
                <h2 style="color: #1e293b;">Hello {html.escape(name)},</h2>
                <p style="color: #475569; line-height: 1.6;">
                    We received a request to reset your password. Click the button below to choose a new one:
                </p>
                <div style="text-align: center; margin: 30px 0;">
                    <a href="{reset_url}"
                       style="background-color: #ef4444; color: white; padding: 12px 30px;
                              text-decoration: none; border-radius: 5px; display: inline-block;">
                        Reset Password
                    </a>
                </div>
                <p style="color: #64748b; font-size: 14px;">This link expires in {expires}.</p>
                <p style="color: #64748b; font-size: 14px;">
                    If you didn't request a password reset, you can safely ignore this email.
                </p>
            </body>
        </html>
        """

        text_body = f"""
        Hello {name},

        Reset your ExpenseTracker Pro password using the link below:
        {reset_url}

        This link expires in {expires}. If you didn't request a password reset, ignore this email.
        """

        self._send_email(to_email, subject, html_body, text_body)

    def _send_email(self, to_email: str, subject: str, html_body: str, text_body: str) -> None:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = to_email

        msg.attach(MIMEText(text_body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout_seconds) as server:
                server.starttls()
                server.login(self.smtp_username, self.smtp_password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send email to %s: %s", to_email, exc)
            raise EmailDeliveryError() from exc

        logger.info("Sent '%s' email to %s", subject, to_email)


def _describe_duration(delta: timedelta) -> str:
    minutes = int(delta.total_seconds() // 60)
    if minutes and minutes % (24 * 60) == 0:
        value, unit = minutes // (24 * 60), "day"
    elif minutes and minutes % 60 == 0:
        value, unit = minutes // 60, "hour"
    else:
        value, unit = minutes, "minute"
    return f"{value} {unit}" + ("" if value == 1 else "s")
