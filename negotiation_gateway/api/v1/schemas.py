"""Pydantic schemas for API request/response validation"""

from dataclasses import asdict
from datetime import date
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

from negotiation_gateway.domain.installments import generate_installment_schedule
from negotiation_gateway.domain.models import ChatResponse, PaymentPlan
from negotiation_gateway.domain.tools import coerce_float, coerce_int


class CreateSessionRequest(BaseModel):
    """Request body for POST /v1/sessions"""

    debt_amount: Optional[float] = Field(None, gt=0, description="Outstanding debt; configured default when omitted")


class SessionResponse(BaseModel):
    session_id: str
    debt_amount: float
    stage: int


class PlanFields(BaseModel):
    """
    Plan fields shared by evaluate, suggest and finalize.

    Values are coerced the same way tool-call arguments are: "abc" becomes 0
    and 2.5 terms become 2, so malformed input gets a corrective plan from
    the engine instead of a 422.
    """

    frequency: str = ""
    amount: float = 0
    term_length: int = 0

    @field_validator("frequency", mode="before")
    @classmethod
    def coerce_frequency(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, value: Any) -> float:
        return coerce_float(value)

    @field_validator("term_length", mode="before")
    @classmethod
    def coerce_term_length(cls, value: Any) -> int:
        return coerce_int(value)


class ProposalRequest(PlanFields):
    """Plan proposal for evaluate/suggest"""

    situation_text: str = Field("", description="What the user shared about their finances")


class SuggestRequest(ProposalRequest):
    message: str = Field("", description="Assistant message to show if the plan stands")


class FinalizeRequest(PlanFields):
    total_amount: Optional[float] = None
    user_details: Optional[Dict[str, Any]] = None
    message: str = ""

    @field_validator("total_amount", mode="before")
    @classmethod
    def coerce_total_amount(cls, value: Any) -> Optional[float]:
        return None if value is None else coerce_float(value)


class InterceptRequest(BaseModel):
    text: str = Field(..., description="Assistant-authored text about to be shown to the user")


class ToolCallRequest(BaseModel):
    name: str = Field(..., min_length=1)
    arguments: Optional[str] = Field(None, description="Raw JSON argument string from the text-completion service")


class PlanOptionsRequest(BaseModel):
    debt_amount: float = Field(..., gt=0)
    user_income: float = Field(0, ge=0)
    immediate_payment_amount: float = Field(0, ge=0)


class PaymentPlanSchema(BaseModel):
    frequency: str
    amount: float
    term_length: int
    total_amount: float


class InstallmentSchema(BaseModel):
    due_date: date
    amount: float


class FinalPaymentPlanSchema(PaymentPlanSchema):
    payment_link: Optional[str] = None
    installments: List[InstallmentSchema] = []


class ChatResponseSchema(BaseModel):
    id: str
    message: str
    display_kind: str
    plans: Optional[List[PaymentPlanSchema]] = None
    final_plan: Optional[FinalPaymentPlanSchema] = None

    @classmethod
    def from_domain(cls, response: ChatResponse) -> "ChatResponseSchema":
        data = asdict(response)
        if response.final_plan is not None:
            data["final_plan"]["installments"] = [
                asdict(installment) for installment in generate_installment_schedule(response.final_plan)
            ]
        return cls(**data)


class DecisionResponse(BaseModel):
    """Response for evaluate, suggest, finalize and tool-call endpoints"""

    session_id: str
    stage: int
    outcome: str
    fallback_reason: Optional[str] = None
    response: ChatResponseSchema


class InterceptResponse(BaseModel):
    session_id: str
    stage: int
    replaced: bool
    response: ChatResponseSchema


class PlanOptionsResponse(BaseModel):
    plans: List[PaymentPlanSchema]

    @classmethod
    def from_domain(cls, plans: List[PaymentPlan]) -> "PlanOptionsResponse":
        return cls(plans=[PaymentPlanSchema(**asdict(plan)) for plan in plans])
