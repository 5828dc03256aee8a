"""Email service for sending transactional emails.

Providers:
- console: logs emails (development and tests)
- smtp: standard SMTP delivery

Delivery failures are reported as ``False``; callers decide whether a failed
send matters to the request.
"""

import html
import re
import smtplib
from abc import ABC, abstractmethod
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from loguru import logger

from models.config import settings


class EmailProvider(ABC):
    """Abstract base class for email providers."""

    @abstractmethod
    def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> bool:
        """Send an email."""
        pass


class SMTPProvider(EmailProvider):
    """SMTP email provider."""

    def __init__(self) -> None:
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.user = settings.SMTP_USER
        self.password = settings.SMTP_PASSWORD
        self.from_email = settings.SMTP_FROM_EMAIL
        self.from_name = settings.SMTP_FROM_NAME
        self.use_tls = settings.SMTP_USE_TLS
        self.use_ssl = settings.SMTP_USE_SSL

    def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> bool:
        """Send email via SMTP (implicit SSL on 465 or STARTTLS on 587)."""
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = to_email
        msg.attach(MIMEText(text_body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))

        try:
            if self.use_ssl:
                server = smtplib.SMTP_SSL(self.host, self.port)
            else:
                server = smtplib.SMTP(self.host, self.port)
                if self.use_tls:
                    server.starttls()

            with server:
                if self.user and self.password:
                    server.login(self.user, self.password)
                server.sendmail(self.from_email, to_email, msg.as_string())

            logger.info(f"Email sent successfully to {to_email}")
            return True
        except smtplib.SMTPRecipientsRefused as e:
            logger.error(f"SMTP: Recipients refused - {e.recipients}")
            return False
        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"SMTP: Authentication failed - {e.smtp_code}: {e.smtp_error}")
            return False
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {to_email}: {e}")
            return False


class ConsoleProvider(EmailProvider):
    """Console email provider for development/testing."""

    def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> bool:
        logger.info(
            f"\n{'=' * 60}\n"
            f"EMAIL (console provider)\n"
            f"To: {to_email}\n"
            f"Subject: {subject}\n"
            f"{'-' * 60}\n"
            f"{text_body}\n"
            f"{'=' * 60}"
        )
        return True


def get_email_provider() -> EmailProvider:
    """Get the configured email provider."""
    provider_name = settings.EMAIL_PROVIDER.lower()

    if provider_name == "smtp":
        return SMTPProvider()
    if provider_name == "console":
        return ConsoleProvider()
    logger.warning(f"Unknown email provider '{provider_name}', using console")
    return ConsoleProvider()


_HTML_WRAPPER = """<!DOCTYPE html>
<html><head><meta charset="UTF-8"></head>
<body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
{content}
<hr style="margin: 30px 0; border: none; border-top: 1px solid #eee;">
<p style="color: #666; font-size: 14px;">Best regards,<br>{app_name} Team</p>
</body></html>"""


class EmailService:
    """High-level email service for account emails."""

    @staticmethod
    def _escape(value: str) -> str:
        return html.escape(value or "", quote=True)

    @staticmethod
    def _button(url: str, label: str) -> str:
        return (
            '<div style="text-align: center; margin: 30px 0;">'
            f'<a href="{url}" style="background-color: #2563eb; color: white; '
            'padding: 12px 24px; text-decoration: none; border-radius: 5px; '
            f'display: inline-block;">{label}</a></div>'
            "<p>Or copy and paste this link in your browser:</p>"
            f'<p style="word-break: break-all; background-color: #f3f4f6; '
            f'padding: 10px;">{url}</p>'
        )

    @classmethod
    def _send(cls, to_email: str, subject: str, content: str, text_body: str) -> bool:
        html_body = _HTML_WRAPPER.format(
            content=content, app_name=cls._escape(settings.SMTP_FROM_NAME)
        )
        provider = get_email_provider()
        return provider.send(to_email, subject, html_body, text_body)

    @staticmethod
    def verification_url(token: str) -> str:
        return f"{settings.API_URL.rstrip('/')}/api/auth/verify/{token}"

    @staticmethod
    def password_reset_url(token: str) -> str:
        return f"{settings.APP_URL.rstrip('/')}/reset-password?token={token}"

    @classmethod
    def send_verification_email(
        cls, to_email: str, username: str, token: str, resent: bool = False
    ) -> bool:
        """Send the email-address verification link."""
        url = cls.verification_url(token)
        hours = settings.VERIFICATION_TOKEN_EXPIRE_HOURS
        subject = (
            "Verify Your Q&A Forum Account - Resent"
            if resent
            else "Verify Your Q&A Forum Account - Action Required"
        )
        name = cls._escape(username)
        content = (
            '<h2 style="color: #2563eb;">Welcome to the Q&amp;A Forum!</h2>'
            f"<p>Hi <strong>{name}</strong>,</p>"
            "<p>Please verify your email address to start asking and answering "
            "questions.</p>"
            f"{cls._button(url, 'Verify My Email Address')}"
            f"<p><strong>Note:</strong> This link will expire in {hours} hours.</p>"
            '<p style="color: #6b7280; font-size: 14px;">If you didn\'t create an '
            "account, please ignore this email.</p>"
        )
        text = (
            f"Hi {username},\n\n"
            f"Verify your email address by opening this link:\n{url}\n\n"
            f"This link will expire in {hours} hours."
        )
        return cls._send(to_email, subject, content, text)

    @classmethod
    def send_password_reset_email(cls, to_email: str, token: str) -> bool:
        """Send the password reset link carrying the raw (unhashed) token."""
        url = cls.password_reset_url(token)
        minutes = settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES
        content = (
            '<h2 style="color: #333;">Password Reset Request</h2>'
            "<p>Hello,</p>"
            "<p>You requested to reset your password. Click the button below to "
            "reset it:</p>"
            f"{cls._button(url, 'Reset Password')}"
            f"<p><strong>Note:</strong> This link will expire in {minutes} minutes.</p>"
            "<p>If you didn't request this, please ignore this email and your "
            "password will remain unchanged.</p>"
        )
        text = (
            "Hello,\n\n"
            f"Reset your password by opening this link:\n{url}\n\n"
            f"This link will expire in {minutes} minutes."
        )
        return cls._send(to_email, "Password Reset Request", content, text)

    @classmethod
    def send_password_changed_notification(cls, to_email: str) -> bool:
        """Tell the user their password was just replaced."""
        content = (
            '<h2 style="color: #333;">Password Reset Successful</h2>'
            "<p>Hello,</p>"
            "<p>Your password has been successfully reset.</p>"
            "<p>If you did not perform this action, please contact our support "
            "team immediately.</p>"
        )
        text = re.sub(r"<[^>]+>", "\n", content).strip()
        return cls._send(to_email, "Password Reset Successful", content, text)
