"""POST /v1/sessions/{session_id}/... - negotiation engine endpoints"""

import time
import logging
from typing import Callable
from fastapi import APIRouter, Depends, HTTPException, Request

from negotiation_gateway.api.v1.schemas import (
    ChatResponseSchema,
    DecisionResponse,
    FinalizeRequest,
    InterceptRequest,
    InterceptResponse,
    PlanOptionsRequest,
    PlanOptionsResponse,
    ProposalRequest,
    SuggestRequest,
    ToolCallRequest,
)
from negotiation_gateway.api.dependencies import get_engine, get_request_id, get_session_store
from negotiation_gateway.domain.exceptions import SessionNotFoundError, UnknownToolError
from negotiation_gateway.domain.interceptor import PassThrough, intercept_implicit_payment_offers
from negotiation_gateway.domain.models import ChatResponse, Decision, NegotiationState, PlanProposal
from negotiation_gateway.domain.negotiation import NegotiationEngine
from negotiation_gateway.domain.plan_options import suggest_plan_options
from negotiation_gateway.domain.tools import dispatch_tool_call
from negotiation_gateway.infrastructure.observability.logging import log_negotiation
from negotiation_gateway.infrastructure.observability.metrics import intercepted_offer_counter, record_decision
from negotiation_gateway.infrastructure.sessions import SessionStore

router = APIRouter()


def _run_decision(
    operation: str,
    session_id: str,
    request: Request,
    store: SessionStore,
    decide: Callable[[NegotiationState], Decision],
) -> DecisionResponse:
    """
    Run one engine call against a session and persist the resulting state.

    Flow:
    1. Lock the session and load its state
    2. Run the decision
    3. Render the response
    4. Store the new state (only if both succeeded)
    5. Record metrics and logs
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        with store.transaction(session_id) as session:
            decision = session.apply(decide(session.state))
            # Rendered before the transaction commits the new state
            payload = ChatResponseSchema.from_domain(decision.response)

    except SessionNotFoundError as e:
        logging.warning(f"Session not found: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=404, detail="Session not found")

    except UnknownToolError as e:
        logging.warning(f"Unknown tool: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=404, detail=str(e))

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id, "session_id": session_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_decision(operation, decision)
    log_negotiation(
        request_id,
        session_id,
        operation,
        decision.outcome,
        decision.state.stage,
        duration_ms,
        fallback_reason=decision.fallback_reason,
    )

    return DecisionResponse(
        session_id=session_id,
        stage=decision.state.stage,
        outcome=decision.outcome,
        fallback_reason=decision.fallback_reason,
        response=payload,
    )


@router.post("/sessions/{session_id}/evaluate", response_model=DecisionResponse)
def evaluate_proposal(
    session_id: str,
    request_body: ProposalRequest,
    request: Request,
    store: SessionStore = Depends(get_session_store),
    engine: NegotiationEngine = Depends(get_engine),
):
    """Judge a plan the user proposed; accept it or counter"""
    proposal = PlanProposal(
        frequency=request_body.frequency,
        amount=request_body.amount,
        term_length=request_body.term_length,
    )
    return _run_decision(
        "evaluate",
        session_id,
        request,
        store,
        lambda state: engine.evaluate_and_negotiate(
            state, proposal, situation_text=request_body.situation_text
        ),
    )


@router.post("/sessions/{session_id}/suggest", response_model=DecisionResponse)
def suggest_plan(
    session_id: str,
    request_body: SuggestRequest,
    request: Request,
    store: SessionStore = Depends(get_session_store),
    engine: NegotiationEngine = Depends(get_engine),
):
    """Validate a plan the assistant wants to offer"""
    proposal = PlanProposal(
        frequency=request_body.frequency,
        amount=request_body.amount,
        term_length=request_body.term_length,
    )
    return _run_decision(
        "suggest",
        session_id,
        request,
        store,
        lambda state: engine.suggest_plan(
            state,
            proposal,
            situation_text=request_body.situation_text,
            message=request_body.message,
        ),
    )


@router.post("/sessions/{session_id}/finalize", response_model=DecisionResponse)
def finalize_plan(
    session_id: str,
    request_body: FinalizeRequest,
    request: Request,
    store: SessionStore = Depends(get_session_store),
    engine: NegotiationEngine = Depends(get_engine),
):
    """
    Confirm an agreed plan and issue its payment link.

    Returns display_kind "finalPlan" on success, or "paymentPlans" with a
    corrected plan when the amount is under the minimum payment.
    """
    plan = PlanProposal(
        frequency=request_body.frequency,
        amount=request_body.amount,
        term_length=request_body.term_length,
        total_amount=request_body.total_amount,
    )
    return _run_decision(
        "finalize",
        session_id,
        request,
        store,
        lambda state: engine.finalize_plan(
            state,
            plan,
            user_details=request_body.user_details,
            message=request_body.message,
        ),
    )


@router.post("/sessions/{session_id}/tool-calls", response_model=DecisionResponse)
def run_tool_call(
    session_id: str,
    request_body: ToolCallRequest,
    request: Request,
    store: SessionStore = Depends(get_session_store),
    engine: NegotiationEngine = Depends(get_engine),
):
    """Execute a tool call forwarded verbatim from the text-completion service"""
    return _run_decision(
        f"tool:{request_body.name}",
        session_id,
        request,
        store,
        lambda state: dispatch_tool_call(engine, state, request_body.name, request_body.arguments),
    )


@router.post("/sessions/{session_id}/intercept", response_model=InterceptResponse)
def intercept_message(
    session_id: str,
    request_body: InterceptRequest,
    request: Request,
    store: SessionStore = Depends(get_session_store),
    engine: NegotiationEngine = Depends(get_engine),
):
    """
    Check assistant text for an embedded payment plan before it is shown.

    Text without a plan comes back unchanged as a "text" response.
    """
    request_id = get_request_id(request)

    try:
        with store.transaction(session_id) as session:
            result = intercept_implicit_payment_offers(engine, session.state, request_body.text)
            if isinstance(result, PassThrough):
                payload = ChatResponseSchema.from_domain(ChatResponse(message=result.text))
            else:
                session.apply(result.decision)
                payload = ChatResponseSchema.from_domain(result.decision.response)
            stage = session.state.stage
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")

    if isinstance(result, PassThrough):
        return InterceptResponse(
            session_id=session_id,
            stage=stage,
            replaced=False,
            response=payload,
        )

    intercepted_offer_counter.inc()
    record_decision("intercept", result.decision)
    logging.info(
        "Implicit payment offer re-validated",
        extra={"request_id": request_id, "session_id": session_id, "outcome": result.decision.outcome},
    )

    return InterceptResponse(
        session_id=session_id,
        stage=stage,
        replaced=True,
        response=payload,
    )


@router.post("/plan-options", response_model=PlanOptionsResponse)
def plan_options(request_body: PlanOptionsRequest, engine: NegotiationEngine = Depends(get_engine)):
    """Starter menu of plans for a debt; does not touch any session"""
    plans = suggest_plan_options(
        request_body.debt_amount,
        user_income=request_body.user_income,
        immediate_payment=request_body.immediate_payment_amount,
        rates=engine.policy.rates,
    )
    return PlanOptionsResponse.from_domain(plans)
