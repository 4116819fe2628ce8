# backend/tutorhub/services/payment_coordinator.py
"""
Payment Coordinator for TutorHub bookings.

The booking core only needs four things from a payment processor: authorize
an amount for a booking, cancel an outstanding authorization, refund a
captured payment, and report whether a payment went through. The
``PaymentCoordinator`` protocol names exactly that surface so the booking
service can be exercised with an in-memory fake.

``StripePaymentCoordinator`` implements it with the Stripe SDK. Every call
uses a bounded network timeout and retry count from settings. Any Stripe or
transport error is raised as ``ExternalServiceException``. Without a Stripe
key the coordinator runs in mock mode and returns deterministic
``mock_pi_<booking_id>`` ids so development and CI never touch the network.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Dict, Optional, Protocol, runtime_checkable

import stripe

from ..core.config import settings
from ..core.exceptions import ExternalServiceException
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

MOCK_INTENT_PREFIX = "mock_pi_"
MOCK_REFUND_PREFIX = "mock_re_"
SUCCEEDED_STATUSES = frozenset({"succeeded"})


@dataclass(frozen=True)
class PaymentAuthorization:
    authorization_id: str
    client_secret: Optional[str]
    status: str


@runtime_checkable
class PaymentCoordinator(Protocol):
    """What the booking core needs from a payment processor."""

    def authorize(
        self,
        amount: int,
        booking_id: str,
        payer_contact: str,
        description: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> PaymentAuthorization:
        """Authorize ``amount`` cents for a booking."""
        ...

    def cancel_authorization(self, authorization_id: str) -> None:
        """Release an authorization that was never captured."""
        ...

    def refund(self, authorization_id: str, amount: Optional[int] = None) -> str:
        """Refund a captured payment (in full when ``amount`` is None). Returns the refund id."""
        ...

    def confirm_payment(self, authorization_id: str) -> bool:
        """Return True when the processor reports the payment succeeded."""
        ...


class StripePaymentCoordinator:
    """
    Stripe-backed payment coordinator.

    Uses automatic payment methods so the client completes payment with the
    returned client secret; the booking stores the PaymentIntent id as its
    authorization id.
    """

    def __init__(self, currency: Optional[str] = None) -> None:
        self.logger = logging.getLogger(self.__class__.__name__)
        self.currency = (currency or settings.currency).lower()
        self.stripe_configured = False

        if settings.stripe_configured and settings.stripe_secret_key is not None:
            stripe.api_key = settings.stripe_secret_key.get_secret_value()
            stripe.max_network_retries = settings.payment_max_network_retries
            stripe.default_http_client = stripe.RequestsClient(
                timeout=settings.payment_timeout_seconds
            )
            self.stripe_configured = True
            self.logger.info("Stripe payment coordinator configured")
        else:
            self.logger.warning(
                "Stripe secret key not configured - payment coordinator will operate in mock mode"
            )

    def _is_mock(self, authorization_id: Optional[str] = None) -> bool:
        if not self.stripe_configured:
            return True
        return bool(authorization_id and authorization_id.startswith(MOCK_INTENT_PREFIX))

    def _fail(self, operation: str, exc: Exception, **details: Any) -> ExternalServiceException:
        prometheus_metrics.record_payment_operation(operation, "error")
        self.logger.error(
            f"Stripe error during {operation}: {str(exc)}",
            extra={"operation": operation, **details},
        )
        return ExternalServiceException(
            f"Payment processor failed to {operation.replace('_', ' ')}",
            code="PAYMENT_PROCESSOR_ERROR",
            details={"operation": operation, **details},
        )

    def authorize(
        self,
        amount: int,
        booking_id: str,
        payer_contact: str,
        description: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> PaymentAuthorization:
        if self._is_mock():
            self.logger.info(f"[MOCK] Authorizing {amount} cents for booking {booking_id}")
            prometheus_metrics.record_payment_operation("authorize", "mock")
            return PaymentAuthorization(
                authorization_id=f"{MOCK_INTENT_PREFIX}{booking_id}",
                client_secret=None,
                status="requires_payment_method",
            )

        params: Dict[str, Any] = {
            "amount": amount,
            "currency": self.currency,
            "description": description,
            "metadata": {**(metadata or {}), "booking_id": booking_id},
            "receipt_email": payer_contact,
            "automatic_payment_methods": {"enabled": True},
        }
        try:
            pi = stripe.PaymentIntent.create(**params)
        except stripe.StripeError as e:
            raise self._fail("authorize", e, booking_id=booking_id) from e

        prometheus_metrics.record_payment_operation("authorize", "success")
        return PaymentAuthorization(
            authorization_id=pi.id,
            client_secret=getattr(pi, "client_secret", None),
            status=getattr(pi, "status", "unknown"),
        )

    def cancel_authorization(self, authorization_id: str) -> None:
        if self._is_mock(authorization_id):
            self.logger.info(f"[MOCK] Cancelling authorization {authorization_id}")
            prometheus_metrics.record_payment_operation("cancel", "mock")
            return

        try:
            stripe.PaymentIntent.cancel(
                authorization_id, idempotency_key=f"cancel:{authorization_id}"
            )
        except stripe.StripeError as e:
            raise self._fail("cancel_authorization", e, authorization_id=authorization_id) from e
        prometheus_metrics.record_payment_operation("cancel", "success")

    def refund(self, authorization_id: str, amount: Optional[int] = None) -> str:
        if self._is_mock(authorization_id):
            self.logger.info(f"[MOCK] Refunding {authorization_id}")
            prometheus_metrics.record_payment_operation("refund", "mock")
            return f"{MOCK_REFUND_PREFIX}{authorization_id}"

        params: Dict[str, Any] = {
            "payment_intent": authorization_id,
            "reason": "requested_by_customer",
        }
        if amount is not None:
            params["amount"] = amount
        try:
            refund = stripe.Refund.create(
                **params, idempotency_key=f"refund:{authorization_id}:{amount or 'full'}"
            )
        except stripe.StripeError as e:
            raise self._fail("refund", e, authorization_id=authorization_id) from e

        prometheus_metrics.record_payment_operation("refund", "success")
        return str(refund.id)

    def confirm_payment(self, authorization_id: str) -> bool:
        if self._is_mock(authorization_id):
            prometheus_metrics.record_payment_operation("retrieve", "mock")
            return True

        try:
            pi = stripe.PaymentIntent.retrieve(authorization_id)
        except stripe.StripeError as e:
            raise self._fail("confirm_payment", e, authorization_id=authorization_id) from e

        prometheus_metrics.record_payment_operation("retrieve", "success")
        return getattr(pi, "status", None) in SUCCEEDED_STATUSES
