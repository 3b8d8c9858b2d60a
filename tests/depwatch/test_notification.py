"""Tests for report emails: template rendering, the runner and the mailer."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from depwatch.engines.dependency_resolver.errors import ManifestNotFound
from depwatch.engines.dependency_resolver.models import (
    Host,
    OutdatedDependency,
    PackageManagerKind,
    RepositoryReference,
    ResolutionReport,
)
from depwatch.engines.notification.mailer import Mailer
from depwatch.engines.notification.runner import NotificationRunner
from depwatch.engines.notification.template import render_report
from depwatch.models.subscription import Subscription

NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def _subscription(**overrides) -> Subscription:
    defaults = {
        "id": uuid.uuid4(),
        "repository_url": "https://github.com/acme/webapp",
        "emails": ["dev@acme.com", "ops@acme.com"],
        "last_notified_at": None,
        "created_at": NOW,
        "updated_at": NOW,
    }
    defaults.update(overrides)
    return Subscription(**defaults)


def _report(outdated: list[OutdatedDependency], **overrides) -> ResolutionReport:
    values = {
        "repository": RepositoryReference(host=Host.GITHUB, owner="acme", name="webapp"),
        "kind": PackageManagerKind.NPM_OR_YARN,
        "outdated": outdated,
        "checked": 5,
    }
    values.update(overrides)
    return ResolutionReport(**values)


OUTDATED = [
    OutdatedDependency(name="express", version="^4.17.1", latest_version="5.0.1"),
    OutdatedDependency(name="<script>", version="1.0.0", latest_version="2.0.0"),
]


# ── Template ─────────────────────────────────────────────────────────────


class TestRenderReport:
    def test_subject(self):
        subject, _ = render_report(_subscription(), _report(OUTDATED))
        assert subject == "[depwatch] 2 outdated dependencies in acme/webapp"

    def test_subject_singular(self):
        subject, _ = render_report(_subscription(), _report(OUTDATED[:1]))
        assert subject == "[depwatch] 1 outdated dependency in acme/webapp"

    def test_body_lists_dependencies(self):
        _, body = render_report(_subscription(), _report(OUTDATED))
        assert "express" in body
        assert "^4.17.1" in body
        assert "5.0.1" in body
        assert "npm / yarn" in body
        assert "https://github.com/acme/webapp" in body

    def test_body_is_escaped(self):
        _, body = render_report(_subscription(), _report(OUTDATED))
        assert "<script>" not in body
        assert "&lt;script&gt;" in body

    def test_failed_packages_mentioned(self):
        _, body = render_report(_subscription(), _report(OUTDATED, failed=["lodash"]))
        assert "Could not check 1 package(s)" in body
        assert "lodash" in body


# ── Runner ───────────────────────────────────────────────────────────────


def _make_runner(report=None, error=None) -> tuple[NotificationRunner, AsyncMock, AsyncMock, AsyncMock]:
    service = AsyncMock()
    resolver = AsyncMock()
    if error is not None:
        resolver.resolve_report = AsyncMock(side_effect=error)
    else:
        resolver.resolve_report = AsyncMock(return_value=report)
    mailer = AsyncMock()
    return NotificationRunner(service, resolver, mailer), service, resolver, mailer


class TestNotifyOne:
    async def test_sends_and_marks(self):
        sub = _subscription()
        runner, service, resolver, mailer = _make_runner(report=_report(OUTDATED))

        session = AsyncMock()
        assert await runner.notify_one(session, sub) is True

        resolver.resolve_report.assert_awaited_once_with(sub.repository_url)
        assert [c.args[0] for c in mailer.send.await_args_list] == ["dev@acme.com", "ops@acme.com"]
        _, subject, _ = mailer.send.await_args.args
        assert subject.startswith("[depwatch]")
        service.mark_notified.assert_awaited_once()
        assert service.mark_notified.await_args.args[:2] == (session, sub.id)

    async def test_each_address_gets_its_own_message(self):
        sub = _subscription(emails=["alice@example.com", "bob@example.com"])
        runner, _, _, mailer = _make_runner(report=_report(OUTDATED))

        await runner.notify_one(AsyncMock(), sub)

        assert mailer.send.await_count == 2
        recipients = [c.args[0] for c in mailer.send.await_args_list]
        assert recipients == ["alice@example.com", "bob@example.com"]

    async def test_nothing_outdated_not_mailed(self):
        runner, service, _, mailer = _make_runner(report=_report([]))

        assert await runner.notify_one(AsyncMock(), _subscription()) is False

        mailer.send.assert_not_awaited()
        service.mark_notified.assert_awaited_once()

    async def test_resolution_failure_still_marks(self):
        runner, service, _, mailer = _make_runner(error=ManifestNotFound("package.json missing"))

        assert await runner.notify_one(AsyncMock(), _subscription()) is False

        mailer.send.assert_not_awaited()
        service.mark_notified.assert_awaited_once()

    async def test_mail_failure_propagates(self):
        runner, service, _, mailer = _make_runner(report=_report(OUTDATED))
        mailer.send = AsyncMock(side_effect=OSError("smtp down"))

        with pytest.raises(OSError):
            await runner.notify_one(AsyncMock(), _subscription())
        service.mark_notified.assert_not_awaited()


def _session_factory(session: AsyncMock) -> MagicMock:
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=False)
    return MagicMock(return_value=session)


class TestRunBatch:
    async def test_counts_sent_emails(self):
        runner, service, _, _ = _make_runner(report=_report(OUTDATED))
        service.list_due_for_notification = AsyncMock(
            return_value=[_subscription(), _subscription()]
        )
        session = AsyncMock()

        assert await runner.run_batch(_session_factory(session), limit=5) == 2

        service.list_due_for_notification.assert_awaited_once_with(session, 5)
        assert session.commit.await_count == 2

    async def test_nothing_due(self):
        runner, service, resolver, _ = _make_runner()
        service.list_due_for_notification = AsyncMock(return_value=[])

        assert await runner.run_batch(_session_factory(AsyncMock())) == 0
        resolver.resolve_report.assert_not_awaited()

    async def test_one_failure_does_not_stop_batch(self):
        runner, service, _, mailer = _make_runner(report=_report(OUTDATED))
        service.list_due_for_notification = AsyncMock(
            return_value=[_subscription(), _subscription()]
        )
        mailer.send = AsyncMock(side_effect=[OSError("smtp down"), None, None])

        assert await runner.run_batch(_session_factory(AsyncMock())) == 1
        assert mailer.send.await_count == 3


# ── Mailer ───────────────────────────────────────────────────────────────


class TestMailer:
    def test_env_defaults(self, monkeypatch):
        monkeypatch.setenv("DEPWATCH_SMTP_HOST", "smtp.acme.com")
        monkeypatch.setenv("DEPWATCH_SMTP_PORT", "2525")
        monkeypatch.setenv("DEPWATCH_SMTP_USER", "bot@acme.com")
        monkeypatch.delenv("DEPWATCH_SMTP_FROM", raising=False)
        monkeypatch.setenv("DEPWATCH_SMTP_TLS", "0")

        mailer = Mailer()
        assert mailer.host == "smtp.acme.com"
        assert mailer.port == 2525
        assert mailer.from_addr == "bot@acme.com"
        assert mailer.use_tls is False

    async def test_send(self):
        mailer = Mailer(
            host="localhost", port=587, user="u", password="p", from_addr="from@test.com"
        )
        with patch("depwatch.engines.notification.mailer.smtplib.SMTP") as smtp_cls:
            server = smtp_cls.return_value.__enter__.return_value
            await mailer.send("a@test.com", "subject", "<p>hi</p>")

        smtp_cls.assert_called_once_with("localhost", 587)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("u", "p")
        (msg,) = server.send_message.call_args.args
        assert msg["From"] == "from@test.com"
        assert msg["To"] == "a@test.com"
        assert msg["Subject"] == "subject"

    async def test_send_without_login_or_tls(self):
        mailer = Mailer(host="localhost", port=25, user="", password="", use_tls=False)
        with patch("depwatch.engines.notification.mailer.smtplib.SMTP") as smtp_cls:
            server = smtp_cls.return_value.__enter__.return_value
            await mailer.send("a@test.com", "subject", "<p>hi</p>")

        server.starttls.assert_not_called()
        server.login.assert_not_called()
        server.send_message.assert_called_once()

    def test_message_has_html_alternative(self):
        mailer = Mailer(host="localhost", port=25, user="", password="", from_addr="f@test.com")
        msg = mailer.build_message("a@test.com", "subject", "<p>hi</p>")
        assert msg.get_body(preferencelist=("html",)).get_content().strip() == "<p>hi</p>"
        assert "HTML" in msg.get_body(preferencelist=("plain",)).get_content()
