"""Tests for the shooter introduction email and outbound mail."""

import logging
import smtplib
from datetime import date, datetime, timedelta

import pytest
from sqlmodel import Session

from studio_ops.core import scheduler as scheduler_module
from studio_ops.core.clock import tomorrow_window
from studio_ops.core.constants import EventTypeId, StateId, UserRoleId
from studio_ops.notifications import mailer
from studio_ops.notifications.mailer import EmailMessage, build_mime_message, dispatch_email, send_email
from studio_ops.notifications.shooter_introduction import ShooterIntroductionEmail

MONDAY = date(2026, 10, 19)
FRIDAY = date(2026, 10, 23)


class Outbox:
    """Collects dispatched messages; optionally fails for one subject."""

    def __init__(self, fail_subject: str | None = None):
        self.messages: list[EmailMessage] = []
        self.fail_subject = fail_subject

    def __call__(self, message: EmailMessage) -> None:
        if message.subject == self.fail_subject:
            raise RuntimeError("SMTP relay refused the message")
        self.messages.append(message)


class TestNotificationWindow:
    """Tests for which days a run announces."""

    def test_weekday_covers_tomorrow_only(self):
        """Test a midweek run covers the next day."""
        start, end = tomorrow_window(MONDAY)
        assert start == datetime(2026, 10, 20, 0, 0)
        assert end == datetime(2026, 10, 20, 23, 59, 59, 999999)

    def test_friday_covers_saturday_to_monday(self):
        """Test a Friday run covers Saturday to Monday."""
        start, end = tomorrow_window(FRIDAY)
        assert start == datetime(2026, 10, 24, 0, 0)
        assert end == datetime(2026, 10, 26, 23, 59, 59, 999999)

    def test_thursday_covers_friday_only(self):
        """Test a Thursday run covers Friday only."""
        start, end = tomorrow_window(date(2026, 10, 22))
        assert start.date() == end.date() == date(2026, 10, 23)


class TestShooterIntroductionEmail:
    """Tests for the per-order introduction emails."""

    def test_one_email_per_order(self, session: Session, shoot_job):
        """Test one email goes to the client contacts per order."""
        outbox = Outbox()
        stats = ShooterIntroductionEmail(session, dispatch=outbox, today=MONDAY).handle()

        assert stats == {"orders": 1, "sent": 1, "failed": 0}
        assert len(outbox.messages) == 1
        message = outbox.messages[0]
        assert message.subject == "FILMING REMINDER: Harbour View Apartments"
        assert message.to == ["client@example.com"]
        assert message.reply_to == {"name": "Alex Manager", "email": "alex.manager@studio.test"}

    def test_cc_list(self, session: Session, factory, shoot_job):
        """Test the crew, managers and state production staff are copied."""
        factory.user("Paige", "Production", role_id=UserRoleId.PRODUCTION, state_id=StateId.NSW)
        factory.user("Vic", "Production", role_id=UserRoleId.PRODUCTION, state_id=StateId.VIC)
        factory.user("Inactive", "Production", role_id=UserRoleId.PRODUCTION, is_active=False)

        outbox = Outbox()
        ShooterIntroductionEmail(session, dispatch=outbox, today=MONDAY).handle()

        assert outbox.messages[0].cc == [
            "sam.shooter@studio.test",
            "alex.manager@studio.test",
            "terry.leader@studio.test",
            "paige.production@studio.test",
        ]

    def test_body_introduces_crew(self, session: Session, shoot_job):
        """Test the body introduces the booked crew."""
        outbox = Outbox()
        ShooterIntroductionEmail(session, dispatch=outbox, today=MONDAY).handle()

        body = outbox.messages[0].body
        assert "Pat Producer will be looking after you" in body
        assert body.count("<li>Pat Producer</li>") == 1
        assert "<li>Sam Shooter</li>" in body
        assert "Dee Pilot" not in body

    def test_no_events_sends_nothing(self, session: Session, shoot_job):
        """Test a day without shoots sends no email."""
        outbox = Outbox()
        stats = ShooterIntroductionEmail(session, dispatch=outbox, today=FRIDAY).handle()
        assert stats == {"orders": 0, "sent": 0, "failed": 0}
        assert outbox.messages == []

    def test_friday_run_includes_monday_shoots(self, session: Session, factory):
        """Test a Friday run picks up Monday's shoots."""
        order = factory.order("Monday Order")
        job = factory.job(order, contact_email="monday@example.com")
        factory.event("Monday shoot", EventTypeId.SHOOT, start_time=datetime(2026, 10, 26, 7, 0),
                      element=factory.element(job))

        outbox = Outbox()
        ShooterIntroductionEmail(session, dispatch=outbox, today=FRIDAY).handle()
        assert [m.subject for m in outbox.messages] == ["FILMING REMINDER: Monday Order"]

    def test_events_without_order_are_skipped(self, session: Session, factory):
        """Test shoots outside an order are ignored."""
        job = factory.job(None)
        factory.event("Studio test shoot", EventTypeId.SHOOT, start_time=datetime(2026, 10, 20, 10, 0),
                      element=factory.element(job))

        outbox = Outbox()
        stats = ShooterIntroductionEmail(session, dispatch=outbox, today=MONDAY).handle()
        assert stats["orders"] == 0
        assert outbox.messages == []

    def test_failure_is_isolated_per_order(self, session: Session, factory, shoot_job):
        """Test one order's failure does not stop the others."""
        other_order = factory.order("Beach House")
        job = factory.job(other_order, contact_email="beach@example.com")
        factory.event("Beach shoot", EventTypeId.SHOOT, start_time=datetime(2026, 10, 20, 14, 0),
                      element=factory.element(job))

        outbox = Outbox(fail_subject="FILMING REMINDER: Harbour View Apartments")
        stats = ShooterIntroductionEmail(session, dispatch=outbox, today=MONDAY).handle()

        assert stats == {"orders": 2, "sent": 1, "failed": 1}
        subjects = [m.subject for m in outbox.messages]
        assert subjects == [
            f"Error occur when send shooter introduction email. order id #{shoot_job['order'].id}",
            "FILMING REMINDER: Beach House",
        ]
        assert outbox.messages[0].body == "SMTP relay refused the message"
        assert outbox.messages[0].to == ["errors@example.com"]

    def test_primary_crew_falls_back_to_shooter(self, session: Session, shoot_job):
        """Test the shooter is primary when no producer is booked."""
        notifier = ShooterIntroductionEmail(session, dispatch=Outbox(), today=MONDAY)
        shooter = shoot_job["shooter"]
        crews = {EventTypeId.PRODUCER: [], EventTypeId.SHOOT: [shooter], EventTypeId.ADDITIONAL_SHOOTER: []}
        assert notifier.get_primary_crew(crews) is shooter
        assert notifier.get_primary_crew({}) is None

    def test_primary_crew_is_latest_producer_booking(self, session: Session, factory, shoot_job):
        """Test the most recently booked producer fronts the email."""
        late_producer = factory.user("Jo", "Producer", role_id=UserRoleId.PRODUCER)
        factory.event("Harbour second producer", EventTypeId.PRODUCER,
                      start_time=shoot_job["shoot"].start_time + timedelta(hours=2),
                      element=shoot_job["element"], user_id=late_producer.id)
        notifier = ShooterIntroductionEmail(session, dispatch=Outbox(), today=MONDAY)

        crews = notifier.order_job_repository.load_job_crews_categorised_by_event_types(
            shoot_job["job"], [EventTypeId.PRODUCER, EventTypeId.SHOOT]
        )

        assert [user.id for user in crews[EventTypeId.PRODUCER]] == [shoot_job["producer"].id, late_producer.id]
        assert notifier.get_primary_crew(crews).id == late_producer.id


class FakeSMTP:
    sent: list = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.tls = False

    def starttls(self, context=None):
        self.tls = True

    def login(self, username, password):
        pass

    def send_message(self, message, to_addrs=None):
        FakeSMTP.sent.append((self, message, to_addrs))

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False


class FailingSMTP(FakeSMTP):
    def send_message(self, message, to_addrs=None):
        raise smtplib.SMTPRecipientsRefused({})


@pytest.fixture(name="message")
def message_fixture() -> EmailMessage:
    return EmailMessage(
        subject="FILMING REMINDER: Harbour View Apartments",
        body="<p>Hello</p>",
        to=["client@example.com"],
        cc=["crew@studio.test", "client@example.com"],
        reply_to={"name": "Alex Manager", "email": "alex@studio.test"},
    )


class TestMailer:
    """Tests for SMTP delivery and the send queue."""

    def test_mime_headers(self, message: EmailMessage):
        """Test the MIME message carries the envelope headers."""
        mime = build_mime_message(message)
        assert mime["Subject"] == message.subject
        assert mime["To"] == "client@example.com"
        assert mime["Cc"] == "crew@studio.test, client@example.com"
        assert mime["Reply-To"] == "Alex Manager <alex@studio.test>"

    def test_send_email_deduplicates_recipients(self, message: EmailMessage, monkeypatch):
        """Test each recipient is sent the message once."""
        FakeSMTP.sent = []
        monkeypatch.setattr(mailer.smtplib, "SMTP", FakeSMTP)

        send_email(message)

        server, _, to_addrs = FakeSMTP.sent[0]
        assert server.tls is True
        assert to_addrs == ["client@example.com", "crew@studio.test"]

    def test_send_email_without_recipients(self, monkeypatch):
        """Test a message without recipients is not sent."""
        FakeSMTP.sent = []
        monkeypatch.setattr(mailer.smtplib, "SMTP", FakeSMTP)
        send_email(EmailMessage(subject="Nobody", body="", to=[]))
        assert FakeSMTP.sent == []

    def test_send_failure_is_logged_and_raised(self, message: EmailMessage, monkeypatch, caplog):
        """Test SMTP failures are logged and re-raised."""
        monkeypatch.setattr(mailer.smtplib, "SMTP", FailingSMTP)
        with caplog.at_level(logging.ERROR), pytest.raises(smtplib.SMTPException):
            send_email(message)
        assert "Failed to send email" in caplog.text

    def test_dispatch_sends_inline_without_scheduler(self, message: EmailMessage, monkeypatch):
        """Test dispatch sends directly when no scheduler runs."""
        sent = []
        monkeypatch.setattr(mailer, "send_email", sent.append)
        dispatch_email(message)
        assert sent == [message]

    def test_dispatch_queues_on_running_scheduler(self, message: EmailMessage, monkeypatch):
        """Test dispatch queues a job on the running scheduler."""
        class RunningScheduler:
            running = True

            def __init__(self):
                self.jobs = []

            def add_job(self, func, args=None, name=None):
                self.jobs.append((func, args, name))

        fake = RunningScheduler()
        monkeypatch.setattr(scheduler_module, "scheduler", fake)

        dispatch_email(message)

        func, args, _ = fake.jobs[0]
        assert func is mailer.send_email
        assert args == [message]


class TestSchedulerJob:
    """Tests for the scheduled job wrapper."""

    def test_job_logs_failures(self, engine, monkeypatch, caplog):
        """Test the scheduled job logs errors instead of raising."""
        def explode(self):
            raise RuntimeError("boom")

        monkeypatch.setattr(scheduler_module, "engine", engine)
        monkeypatch.setattr(ShooterIntroductionEmail, "handle", explode)

        with caplog.at_level(logging.ERROR):
            scheduler_module.shooter_introduction_job()
        assert "Shooter introduction job failed: boom" in caplog.text
