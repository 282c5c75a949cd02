"""
Premium grants.

The payment processor and the code-entry dialog are outside the core; all
either of them does here is report "premium granted" for a user id.
Signature verification of checkout webhooks happens before
``handle_checkout_event`` is called.
"""

from typing import Any, Dict, Iterable, Optional

from .errors import InvalidCodeError
from .guard import PersistenceGuard

CHECKOUT_COMPLETED = "checkout.session.completed"


def checkout_user_id(event: Dict[str, Any]) -> Optional[str]:
    """User id attached to a checkout session: metadata first, then client_reference_id."""
    session = (event.get("data") or {}).get("object") or {}
    metadata = session.get("metadata") or {}
    return metadata.get("userId") or session.get("client_reference_id") or None


def handle_checkout_event(guard: PersistenceGuard, event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Grant premium for a completed checkout; acknowledge anything else.

    Returns:
        {"received": True, "granted": bool, "user_id": str | None}

    Raises:
        TransportError / DocumentNotFoundError: If the grant could not be
            stored, so the caller can answer the webhook with an error and
            have it redelivered
    """
    if event.get("type") != CHECKOUT_COMPLETED:
        return {"received": True, "granted": False, "user_id": None}

    user_id = checkout_user_id(event)
    if not user_id:
        guard.logger.warning("Checkout completed without a user id", event_id=event.get("id"))
        return {"received": True, "granted": False, "user_id": None}

    guard.update_premium_status(user_id, True)
    return {"received": True, "granted": True, "user_id": user_id}


def redeem_code(guard: PersistenceGuard, user_id: str, code: str, valid_codes: Iterable[str]) -> None:
    """Grant premium when ``code`` is one of the configured dev codes."""
    codes = {c.strip() for c in valid_codes if c and c.strip()}
    if code.strip() not in codes:
        raise InvalidCodeError("Invalid code. Please try again.")
    guard.update_premium_status(user_id, True)
