"""
Email transport over SMTP (Gmail by default)
One session can send several messages; attachments are PDFs
"""

import smtplib
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from email import encoders
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path
from typing import Iterator, Optional, Sequence

from config import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SMTPConfig:
    server: str
    port: int
    user: Optional[str]
    password: Optional[str]
    use_tls: bool = True


def create_pdf_attachment(pdf_path: Path) -> MIMEBase:
    """Wrap a PDF file as a base64 MIME attachment"""
    with open(pdf_path, "rb") as f:
        attachment = MIMEBase("application", "pdf")
        attachment.set_payload(f.read())

    encoders.encode_base64(attachment)
    attachment.add_header("Content-Disposition", "attachment", filename=pdf_path.name)
    return attachment


def build_message(
    sender: str,
    to: str,
    subject: str,
    body: str,
    attachments: Sequence[str] = ()
) -> MIMEMultipart:
    msg = MIMEMultipart()
    msg["From"] = sender
    msg["To"] = to
    msg["Subject"] = subject
    msg.attach(MIMEText(body, "plain", "utf-8"))

    for path in attachments:
        msg.attach(create_pdf_attachment(Path(path)))

    return msg


class MailTransport:
    """SMTP transport configured once per process"""

    def __init__(self, config: SMTPConfig):
        self.config = config

    @property
    def sender(self) -> Optional[str]:
        return self.config.user

    def connect(self) -> smtplib.SMTP:
        """Establish and return an authenticated SMTP connection"""
        if self.config.use_tls:
            server = smtplib.SMTP(self.config.server, self.config.port, timeout=30)
            server.ehlo()
            server.starttls()
            server.ehlo()
        else:
            server = smtplib.SMTP_SSL(self.config.server, self.config.port, timeout=30)

        if self.config.user:
            server.login(self.config.user, self.config.password or "")

        return server

    @contextmanager
    def session(self) -> Iterator["MailSession"]:
        if not self.config.user:
            raise ConfigurationError("Mail sender (GMAIL_EMAIL) is not configured")

        server = self.connect()
        try:
            yield MailSession(server, self.config.user)
        finally:
            try:
                server.quit()
            except (smtplib.SMTPException, OSError):
                logger.warning("Failed to close SMTP connection cleanly")


class MailSession:
    """An open SMTP connection bound to a sender address"""

    def __init__(self, server: smtplib.SMTP, sender: str):
        self.server = server
        self.sender = sender

    def send(self, to: str, subject: str, body: str, attachments: Sequence[str] = ()) -> None:
        msg = build_message(self.sender, to, subject, body, attachments)
        self.server.send_message(msg)
        logger.info(f"Email sent to {to} ({len(attachments)} attachment(s))")


def smtp_config_from_env(
    server: str,
    port: int,
    user: Optional[str],
    password: Optional[str]
) -> SMTPConfig:
    """Port 465 means implicit TLS; anything else negotiates STARTTLS"""
    return SMTPConfig(
        server=server,
        port=port,
        user=user,
        password=password,
        use_tls=port != 465
    )


