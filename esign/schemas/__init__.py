"""Contract payload schemas."""

from esign.schemas.domain import (
    AssistSuggestion,
    ContractPayload,
    Milestone,
    PaymentInstallment,
    StyleSettings,
)

__all__ = [
    "AssistSuggestion",
    "ContractPayload",
    "Milestone",
    "PaymentInstallment",
    "StyleSettings",
]
