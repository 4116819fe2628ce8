# backend/tutorhub/services/actions.py
"""
Adapter between the booking core and the notification/UI layer.

Services raise DomainException subclasses. The HTTP routes turn those into
error responses themselves; code that embeds the services outside HTTP,
such as a notification or UI layer, uses ``run_action`` instead and gets an
``ActionResult`` shaped ``{success?, error?, code?, ...payload}``. It is the
single place that conversion happens. Unexpected exceptions are not domain
failures and propagate.
"""

import logging
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel

from ..core.exceptions import DomainException
from ..schemas.base_responses import ActionResult

logger = logging.getLogger(__name__)


def _as_payload(value: Any) -> Dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, dict):
        return value
    if hasattr(value, "to_dict"):
        return dict(value.to_dict())
    return {"result": value}


def run_action(
    fn: Callable[[], Any],
    success_message: str,
    payload: Optional[Callable[[Any], Dict[str, Any]]] = None,
) -> ActionResult:
    """
    Execute ``fn`` and describe the outcome.

    Args:
        fn: Zero-argument callable wrapping the service call
        success_message: Message for the success case
        payload: Optional projection of the return value into the payload

    Returns:
        ActionResult with ``success`` or ``error`` and ``code``
    """
    try:
        value = fn()
    except DomainException as exc:
        logger.info(f"Action failed: {exc.code}: {exc.message}")
        return ActionResult(error=exc.message, code=exc.code, payload=dict(exc.details))

    data = payload(value) if payload is not None else _as_payload(value)
    return ActionResult(success=success_message, payload=data)
