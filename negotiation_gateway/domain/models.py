"""Domain models - pure Python dataclasses representing negotiation entities"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import date
from typing import List, Literal, Optional, Union

Frequency = Literal["weekly", "biweekly", "monthly"]
DisplayKind = Literal["text", "paymentPlans", "finalPlan"]
Outcome = Literal["accepted", "countered", "fallback", "refused", "finalized", "options"]

FREQUENCIES = ("weekly", "biweekly", "monthly")


@dataclass(frozen=True)
class PaymentPlan:
    """Installment schedule: frequency, per-term amount, number of terms, total"""

    frequency: Frequency
    amount: float
    term_length: int
    total_amount: float


@dataclass(frozen=True)
class FinalPaymentPlan:
    """Agreed plan returned by a successful finalization"""

    frequency: Frequency
    amount: float
    term_length: int
    total_amount: float
    payment_link: Optional[str] = None


@dataclass
class PlanProposal:
    """Unvalidated plan as received from a caller; any field may be garbage"""

    frequency: str = ""
    amount: float = 0
    term_length: int = 0
    total_amount: Optional[float] = None


@dataclass(frozen=True)
class ValidProposal:
    plan: PaymentPlan


@dataclass(frozen=True)
class FallbackApplied:
    reason: str


ProposalCheck = Union[ValidProposal, FallbackApplied]


@dataclass(frozen=True)
class NegotiationState:
    """
    Per-conversation negotiation record.

    debt_amount is fixed for the life of the conversation. stage counts
    accepted proposals and counter-offers since the last finalization.
    """

    debt_amount: float
    stage: int = 0

    def advance(self) -> "NegotiationState":
        return replace(self, stage=self.stage + 1)

    def reset(self) -> "NegotiationState":
        return replace(self, stage=0)


@dataclass
class ChatResponse:
    """Response handed back to the orchestrator for display"""

    message: str
    display_kind: DisplayKind = "text"
    plans: Optional[List[PaymentPlan]] = None
    final_plan: Optional[FinalPaymentPlan] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


@dataclass
class Decision:
    """Result of one engine call: what to show and the state to keep"""

    response: ChatResponse
    state: NegotiationState
    outcome: Outcome
    fallback_reason: Optional[str] = None


@dataclass
class Installment:
    """Single payment in a repayment schedule"""

    due_date: date
    amount: float
