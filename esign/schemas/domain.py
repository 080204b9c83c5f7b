"""Contract payload models filled in by the builder form.

The lifecycle core stores the payload as opaque JSON tagged with
`CONTENT_SCHEMA`; these models are only used at the API edge.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PaymentInstallment(BaseModel):
    """One line of the payment schedule."""

    description: str
    amount: float = Field(ge=0)
    percentage: Optional[float] = Field(default=None, ge=0, le=100)
    due_date: Optional[date] = None


class Milestone(BaseModel):
    """A dated deliverable, optionally tied to a payment."""

    title: str
    description: str = ""
    due_date: Optional[date] = None
    amount: float = Field(default=0, ge=0)


class StyleSettings(BaseModel):
    """Document styling chosen in the design step."""

    font_family: Optional[str] = None
    line_spacing: Optional[float] = Field(default=None, gt=0)
    primary_color: Optional[str] = None
    header_font_size: Optional[str] = None
    sub_header_font_size: Optional[str] = None
    section_header_font_size: Optional[str] = None
    body_font_size: Optional[str] = None
    left_logo: Optional[str] = None
    right_logo: Optional[str] = None
    logo_style: Optional[str] = None


class ContractPayload(BaseModel):
    """Complete contract body: parties, scope, payment, timeline, legal clauses and styling."""

    model_config = ConfigDict(extra="allow")

    template_name: Optional[str] = None
    contract_title: Optional[str] = None
    contract_subtitle: Optional[str] = None

    # Parties
    freelancer_name: Optional[str] = None
    freelancer_email: Optional[str] = None
    freelancer_phone: Optional[str] = None
    freelancer_address: Optional[str] = None
    client_address: Optional[str] = None

    # Introduction and scope
    effective_date: Optional[date] = None
    introduction: Optional[str] = None
    introduction_clauses: list[str] = Field(default_factory=list)
    scope_of_work: Optional[str] = None
    services: Optional[str] = None
    deliverables: Optional[str] = None

    # Payment
    payment_type: Optional[str] = None
    payment_terms: Optional[str] = None
    rate: Optional[float] = Field(default=None, ge=0)
    total_amount: Optional[float] = Field(default=None, ge=0)
    payment_schedule: list[PaymentInstallment] = Field(default_factory=list)
    is_retainer: bool = False
    retainer_amount: Optional[float] = Field(default=None, ge=0)

    # Timeline
    timeline_start_date: Optional[date] = None
    timeline_end_date: Optional[date] = None
    milestones: list[Milestone] = Field(default_factory=list)

    # Legal
    confidentiality: bool = False
    include_nda: bool = False
    confidentiality_scope: Optional[str] = None
    confidentiality_duration: Optional[str] = None
    breach_penalty: Optional[str] = None
    intellectual_property: Optional[str] = None
    sla_terms: Optional[str] = None
    termination_clause: Optional[str] = None
    governing_law: Optional[str] = None
    dispute_resolution: Optional[str] = None

    style: StyleSettings = Field(default_factory=StyleSettings)


class AssistSuggestion(BaseModel):
    """Field values proposed by the AI assistant. Never applied automatically."""

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    freelancer_name: Optional[str] = None
    freelancer_email: Optional[str] = None
    freelancer_phone: Optional[str] = None
    freelancer_address: Optional[str] = None
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    client_address: Optional[str] = None
    scope_of_work: Optional[str] = None
    payment_terms: Optional[str] = None
    contract_amount: Optional[float] = None
    project_timeline: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    ip_terms: Optional[str] = None
    confidentiality_terms: Optional[str] = None
    sla_terms: Optional[str] = None
    termination_terms: Optional[str] = None
    agreement_intro: Optional[str] = None
    explanation: Optional[str] = None
