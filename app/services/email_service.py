# app/services/email_service.py
"""
Outbound mail collaborator.
Sends HTML email over SMTP. When SMTP_HOST is not configured the sender runs in
mock mode: the message is logged and reported as sent, so local setups work
without a mail server.
"""

import smtplib
import time
from email.message import EmailMessage
from email.utils import make_msgid
from html import escape

from app.config import settings
from app.utils.logger import get_logger

logger = get_logger(__name__)

HTML_TEMPLATE = """\
<div style="font-family: sans-serif; line-height: 1.6;">
  <h2>{subject}</h2>
  <p>{message}</p>
  <p>Thank you for using Recon Tracker!</p>
</div>
"""


class EmailSender:
    def __init__(self, host=None, port=587, user=None, password=None, use_tls=True,
                 sender="noreply@recontracker.com", timeout=10):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.use_tls = use_tls
        self.sender = sender
        self.timeout = timeout

    @classmethod
    def from_settings(cls):
        return cls(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            user=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
            use_tls=settings.SMTP_USE_TLS,
            sender=settings.EMAIL_FROM,
        )

    @property
    def is_mock(self) -> bool:
        return not self.host

    @staticmethod
    def render_html(subject: str, message: str) -> str:
        return HTML_TEMPLATE.format(subject=escape(subject), message=escape(message))

    def build_message(self, to: str, subject: str, message: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg["Message-ID"] = make_msgid(domain=self.sender.split("@")[-1])
        msg.set_content(message)
        msg.add_alternative(self.render_html(subject, message), subtype="html")
        return msg

    def send(self, to: str, subject: str, message: str) -> str:
        """
        Blocking send. Returns the Message-ID.
        Raises smtplib.SMTPException / OSError on delivery failure.
        """
        if self.is_mock:
            message_id = f"mock-{int(time.time() * 1000)}"
            logger.info(f"[MAIL][MOCK] to={to} subject={subject!r} id={message_id}")
            return message_id

        msg = self.build_message(to, subject, message)
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.user:
                smtp.login(self.user, self.password or "")
            smtp.send_message(msg)
        logger.info(f"[MAIL] Sent to={to} subject={subject!r} id={msg['Message-ID']}")
        return msg["Message-ID"]
