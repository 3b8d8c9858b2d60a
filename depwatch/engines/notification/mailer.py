"""SMTP delivery for report emails."""

from __future__ import annotations

import asyncio
import os
import smtplib
from email.message import EmailMessage

_TEXT_FALLBACK = "This report is HTML only. Open it in a mail client that renders HTML."


class Mailer:
    """Sends one multipart (text + HTML) message per recipient from a worker thread.

    Unset arguments come from ``DEPWATCH_SMTP_HOST``, ``DEPWATCH_SMTP_PORT``,
    ``DEPWATCH_SMTP_USER``, ``DEPWATCH_SMTP_PASSWORD``, ``DEPWATCH_SMTP_FROM``
    and ``DEPWATCH_SMTP_TLS``. Login is skipped when no user is configured.
    """

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        user: str | None = None,
        password: str | None = None,
        from_addr: str | None = None,
        use_tls: bool | None = None,
    ) -> None:
        env = os.environ
        self.host = host or env.get("DEPWATCH_SMTP_HOST", "localhost")
        self.port = port or int(env.get("DEPWATCH_SMTP_PORT", "587"))
        self.user = env.get("DEPWATCH_SMTP_USER", "") if user is None else user
        self.password = env.get("DEPWATCH_SMTP_PASSWORD", "") if password is None else password
        self.from_addr = (
            from_addr or env.get("DEPWATCH_SMTP_FROM") or self.user or "depwatch@localhost"
        )
        self.use_tls = env.get("DEPWATCH_SMTP_TLS", "1") == "1" if use_tls is None else use_tls

    def build_message(self, to: str, subject: str, html_body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.from_addr
        msg["To"] = to
        msg.set_content(_TEXT_FALLBACK)
        msg.add_alternative(html_body, subtype="html")
        return msg

    async def send(self, to: str, subject: str, html_body: str) -> None:
        """Deliver *html_body* to the single address *to*."""
        msg = self.build_message(to, subject, html_body)
        await asyncio.to_thread(self._deliver, msg)

    def _deliver(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port) as server:
            if self.use_tls:
                server.starttls()
            if self.user:
                server.login(self.user, self.password)
            server.send_message(msg)
