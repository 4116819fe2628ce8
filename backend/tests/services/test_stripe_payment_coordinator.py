"""
Tests for StripePaymentCoordinator with the Stripe SDK patched out.
"""

from unittest.mock import MagicMock, patch

from pydantic import SecretStr
import pytest
import stripe

from tutorhub.core.config import settings
from tutorhub.core.exceptions import ExternalServiceException
from tutorhub.services.payment_coordinator import (
    PaymentCoordinator,
    StripePaymentCoordinator,
)


@pytest.fixture
def mock_coordinator(monkeypatch) -> StripePaymentCoordinator:
    monkeypatch.setattr(settings, "stripe_secret_key", None)
    return StripePaymentCoordinator()


@pytest.fixture
def coordinator(monkeypatch) -> StripePaymentCoordinator:
    monkeypatch.setattr(settings, "stripe_secret_key", SecretStr("sk_test_dummy"))
    monkeypatch.setattr(stripe, "api_key", None)
    monkeypatch.setattr(stripe, "default_http_client", None, raising=False)
    monkeypatch.setattr(stripe, "max_network_retries", 0, raising=False)
    return StripePaymentCoordinator(currency="USD")


def test_satisfies_the_protocol(mock_coordinator) -> None:
    assert isinstance(mock_coordinator, PaymentCoordinator)


class TestMockMode:
    def test_authorize_returns_deterministic_id(self, mock_coordinator) -> None:
        with patch("stripe.PaymentIntent.create") as mock_create:
            authorization = mock_coordinator.authorize(5000, "B1", "p@example.com", "Lesson")

        mock_create.assert_not_called()
        assert authorization.authorization_id == "mock_pi_B1"
        assert authorization.client_secret is None

    def test_release_and_confirm_are_no_network(self, mock_coordinator) -> None:
        with patch("stripe.PaymentIntent.cancel") as mock_cancel, patch(
            "stripe.Refund.create"
        ) as mock_refund:
            mock_coordinator.cancel_authorization("mock_pi_B1")
            assert mock_coordinator.refund("mock_pi_B1") == "mock_re_mock_pi_B1"
            assert mock_coordinator.confirm_payment("mock_pi_B1") is True

        mock_cancel.assert_not_called()
        mock_refund.assert_not_called()


class TestStripeMode:
    def test_configures_sdk(self, coordinator) -> None:
        assert coordinator.stripe_configured is True
        assert coordinator.currency == "usd"
        assert stripe.api_key == "sk_test_dummy"

    def test_applies_network_timeout_and_retries(self, coordinator) -> None:
        assert isinstance(stripe.default_http_client, stripe.RequestsClient)
        assert stripe.default_http_client._timeout == settings.payment_timeout_seconds
        assert stripe.max_network_retries == settings.payment_max_network_retries

    @patch("stripe.PaymentIntent.create")
    def test_authorize_creates_payment_intent(self, mock_create, coordinator) -> None:
        mock_create.return_value = MagicMock(
            id="pi_123", client_secret="pi_123_secret", status="requires_payment_method"
        )

        authorization = coordinator.authorize(
            7500, "B1", "parent@example.com", "Lesson with Tess", metadata={"parent_id": "P1"}
        )

        assert authorization.authorization_id == "pi_123"
        assert authorization.client_secret == "pi_123_secret"
        kwargs = mock_create.call_args.kwargs
        assert kwargs["amount"] == 7500
        assert kwargs["currency"] == "usd"
        assert kwargs["receipt_email"] == "parent@example.com"
        assert kwargs["metadata"] == {"parent_id": "P1", "booking_id": "B1"}

    @patch("stripe.PaymentIntent.create")
    def test_authorize_failure_is_external_service_error(self, mock_create, coordinator) -> None:
        mock_create.side_effect = stripe.StripeError("API Error")

        with pytest.raises(ExternalServiceException) as exc_info:
            coordinator.authorize(7500, "B1", "parent@example.com", "Lesson")

        assert exc_info.value.code == "PAYMENT_PROCESSOR_ERROR"
        assert exc_info.value.details["booking_id"] == "B1"

    @patch("stripe.PaymentIntent.cancel")
    def test_cancel_authorization(self, mock_cancel, coordinator) -> None:
        coordinator.cancel_authorization("pi_123")

        mock_cancel.assert_called_once_with("pi_123", idempotency_key="cancel:pi_123")

    @patch("stripe.PaymentIntent.cancel")
    def test_cancel_failure(self, mock_cancel, coordinator) -> None:
        mock_cancel.side_effect = stripe.StripeError("Network timeout")

        with pytest.raises(ExternalServiceException):
            coordinator.cancel_authorization("pi_123")

    @patch("stripe.Refund.create")
    def test_full_refund(self, mock_refund, coordinator) -> None:
        mock_refund.return_value = MagicMock(id="re_1")

        assert coordinator.refund("pi_123") == "re_1"
        kwargs = mock_refund.call_args.kwargs
        assert kwargs["payment_intent"] == "pi_123"
        assert "amount" not in kwargs
        assert kwargs["idempotency_key"] == "refund:pi_123:full"

    @patch("stripe.Refund.create")
    def test_refund_failure(self, mock_refund, coordinator) -> None:
        mock_refund.side_effect = stripe.StripeError("Card declined")

        with pytest.raises(ExternalServiceException):
            coordinator.refund("pi_123")

    @pytest.mark.parametrize("status,expected", [("succeeded", True), ("processing", False)])
    @patch("stripe.PaymentIntent.retrieve")
    def test_confirm_payment(self, mock_retrieve, coordinator, status, expected) -> None:
        mock_retrieve.return_value = MagicMock(status=status)

        assert coordinator.confirm_payment("pi_123") is expected

    @patch("stripe.PaymentIntent.cancel")
    def test_mock_ids_stay_offline_when_configured(self, mock_cancel, coordinator) -> None:
        coordinator.cancel_authorization("mock_pi_B1")

        mock_cancel.assert_not_called()
