"""External collaborators: AI assistant and payment gateway."""

from esign.services.ai_assist import AssistError, suggest_fields
from esign.services.payments import (
    PaymentError,
    RazorpayGateway,
    build_gateway,
    verify_payment_signature,
)

__all__ = [
    "AssistError",
    "PaymentError",
    "RazorpayGateway",
    "build_gateway",
    "suggest_fields",
    "verify_payment_signature",
]
