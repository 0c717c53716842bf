"""
Tests for email rendering, delivery backends and dispatch.
"""

from datetime import datetime
from unittest.mock import MagicMock, patch
from zoneinfo import ZoneInfo

import httpx
import pytest

from apps.notifications.email import (
    RESEND_API_URL,
    EmailMessage,
    EmailSendError,
    EmailTemplate,
    LocalEmailBackend,
    ResendEmailBackend,
    dispatch_email,
    get_email_backend,
    render_email,
    send_email,
)

END = datetime(2025, 7, 10, 8, 30, tzinfo=ZoneInfo("UTC"))


class TestRenderEmail:
    @pytest.mark.parametrize("template", list(EmailTemplate))
    def test_every_template_renders(self, template) -> None:
        subject, body = render_email(template, {"name": "Nimal", "package_name": "Premium"})

        assert subject
        assert body.startswith("Hi Nimal,")

    def test_reminder_pluralisation(self) -> None:
        one, _ = render_email(EmailTemplate.EXPIRY_REMINDER, {"days_until_expiry": 1})
        seven, _ = render_email(EmailTemplate.EXPIRY_REMINDER, {"days_until_expiry": 7})

        assert one == "Your membership expires in 1 day"
        assert seven == "Your membership expires in 7 days"

    def test_receipt_contains_order_and_amount(self) -> None:
        subject, body = render_email(
            EmailTemplate.PAYMENT_RECEIPT,
            {
                "name": "Nimal",
                "package_name": "Premium",
                "order_id": "ORDER_1_1",
                "amount": "8010.00",
                "currency": "LKR",
                "paid_at": END,
            },
        )

        assert subject == "Payment receipt ORDER_1_1"
        assert "LKR 8010.00" in body
        assert "10 Jul 2025" in body
        assert "Gateway reference: -" in body

    def test_defaults_when_name_missing(self) -> None:
        _, body = render_email(EmailTemplate.MEMBERSHIP_EXPIRED, {"end_date": END})

        assert body.startswith("Hi there,")
        assert "10 Jul 2025" in body


class TestBackends:
    def test_local_backend_returns_none(self) -> None:
        message = EmailMessage(to="a@example.com", subject="s", text="t")

        assert LocalEmailBackend().send(message) is None

    def test_resend_posts_message(self) -> None:
        backend = ResendEmailBackend(api_key="re_test", sender="Gym <noreply@gym.test>")
        response = MagicMock(status_code=200)
        response.json.return_value = {"id": "email_123"}

        with patch("apps.notifications.email.httpx.post", return_value=response) as mock_post:
            message_id = backend.send(
                EmailMessage(to="a@example.com", subject="Hi", text="Body", template="payment_receipt")
            )

        assert message_id == "email_123"
        args, kwargs = mock_post.call_args
        assert args[0] == RESEND_API_URL
        assert kwargs["headers"]["Authorization"] == "Bearer re_test"
        assert kwargs["json"]["to"] == ["a@example.com"]
        assert kwargs["json"]["from"] == "Gym <noreply@gym.test>"

    def test_resend_error_status(self) -> None:
        backend = ResendEmailBackend(api_key="re_test", sender="noreply@gym.test")
        response = MagicMock(status_code=422, text="invalid to")

        with patch("apps.notifications.email.httpx.post", return_value=response):
            with pytest.raises(EmailSendError, match="422"):
                backend.send(EmailMessage(to="x", subject="s", text="t"))

    def test_resend_transport_error(self) -> None:
        backend = ResendEmailBackend(api_key="re_test", sender="noreply@gym.test")

        with patch(
            "apps.notifications.email.httpx.post",
            side_effect=httpx.ConnectTimeout("timed out"),
        ):
            with pytest.raises(EmailSendError, match="unreachable"):
                backend.send(EmailMessage(to="a@example.com", subject="s", text="t"))

    def test_get_backend_local_by_default(self, settings) -> None:
        settings.EMAIL_DELIVERY_BACKEND = "local"

        assert isinstance(get_email_backend(), LocalEmailBackend)

    def test_get_backend_resend(self, settings) -> None:
        settings.EMAIL_DELIVERY_BACKEND = "resend"
        settings.RESEND_API_KEY = "re_test"

        assert isinstance(get_email_backend(), ResendEmailBackend)

    def test_get_backend_resend_requires_key(self, settings) -> None:
        settings.EMAIL_DELIVERY_BACKEND = "resend"
        settings.RESEND_API_KEY = ""

        with pytest.raises(ValueError, match="RESEND_API_KEY"):
            get_email_backend()


class TestSendEmail:
    def test_renders_and_sends(self) -> None:
        backend = MagicMock()

        with patch("apps.notifications.email.get_email_backend", return_value=backend):
            send_email(EmailTemplate.MEMBERSHIP_SUSPENDED, "a@example.com", {"name": "Nimal"})

        message = backend.send.call_args.args[0]
        assert message.to == "a@example.com"
        assert message.subject == "Your membership has been suspended"
        assert message.template == "membership_suspended"


@pytest.mark.django_db
class TestDispatchEmail:
    def test_waits_for_commit(self, django_capture_on_commit_callbacks) -> None:
        with patch("apps.notifications.email.send_email") as mock_send:
            with django_capture_on_commit_callbacks(execute=False) as callbacks:
                dispatch_email(EmailTemplate.PAYMENT_RECEIPT, "a@example.com", {})

            assert len(callbacks) == 1
            mock_send.assert_not_called()

            callbacks[0]()

        mock_send.assert_called_once_with(EmailTemplate.PAYMENT_RECEIPT, "a@example.com", {})

    def test_failure_is_logged_not_raised(self, django_capture_on_commit_callbacks) -> None:
        with patch(
            "apps.notifications.email.send_email", side_effect=EmailSendError("boom")
        ) as mock_send:
            with django_capture_on_commit_callbacks(execute=True):
                dispatch_email(EmailTemplate.PAYMENT_RECEIPT, "a@example.com", {})

        mock_send.assert_called_once()

    def test_no_recipient_skips(self, django_capture_on_commit_callbacks) -> None:
        with patch("apps.notifications.email.send_email") as mock_send:
            with django_capture_on_commit_callbacks(execute=True) as callbacks:
                dispatch_email(EmailTemplate.PAYMENT_RECEIPT, "", {})

        assert callbacks == []
        mock_send.assert_not_called()

    def test_thread_mode_submits_to_executor(self, settings, django_capture_on_commit_callbacks) -> None:
        settings.EMAIL_DISPATCH_MODE = "thread"

        with patch("apps.notifications.email._executor") as mock_executor:
            with django_capture_on_commit_callbacks(execute=True):
                dispatch_email(EmailTemplate.PAYMENT_RECEIPT, "a@example.com", {"x": 1})

        mock_executor.submit.assert_called_once()
        assert mock_executor.submit.call_args.args[1:] == (
            EmailTemplate.PAYMENT_RECEIPT,
            "a@example.com",
            {"x": 1},
        )
