import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Protocol

from classroom_api.core import config

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    def send(self, to_address: str, subject: str, html_body: str) -> None: ...


class SmtpMailer:
    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        use_tls: bool = True,
        from_address: str = config.MAIL_FROM_ADDRESS,
        from_name: str = config.MAIL_FROM_NAME,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.from_address = from_address
        self.from_name = from_name

    def build_message(self, to_address: str, subject: str, html_body: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["From"] = formataddr((self.from_name, self.from_address))
        msg["To"] = to_address
        msg["Subject"] = subject
        msg.attach(MIMEText(html_body, "html"))
        return msg

    def send(self, to_address: str, subject: str, html_body: str) -> None:
        msg = self.build_message(to_address, subject, html_body)
        with smtplib.SMTP(self.host, self.port, timeout=30) as server:
            if self.use_tls:
                server.starttls(context=ssl.create_default_context())
            if self.username:
                server.login(self.username, self.password)
            server.sendmail(self.from_address, [to_address], msg.as_string())
        logger.info("Email sent successfully to %s", to_address)


class ConsoleMailer:
    """Used when no SMTP host is configured; the message only goes to the log."""

    def send(self, to_address: str, subject: str, html_body: str) -> None:
        logger.info("mail to=%s subject=%r\n%s", to_address, subject, html_body)


def send_safely(mailer: Mailer, to_address: str, subject: str, html_body: str) -> bool:
    """Send and report success; a failure is logged and never raised."""
    try:
        mailer.send(to_address, subject, html_body)
    except Exception:
        logger.exception("Failed to send %r email to %s", subject, to_address)
        return False
    return True


def get_mailer() -> Mailer:
    if not config.SMTP_HOST:
        return ConsoleMailer()
    return SmtpMailer(
        config.SMTP_HOST,
        config.SMTP_PORT,
        config.SMTP_USERNAME,
        config.SMTP_PASSWORD,
        use_tls=config.SMTP_USE_TLS,
    )
