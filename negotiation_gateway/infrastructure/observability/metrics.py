"""Prometheus metrics for negotiation outcomes, fallbacks and agreements"""

from prometheus_client import Counter, Histogram

from negotiation_gateway.domain.models import Decision

# Decision metrics
decision_counter = Counter(
    "negotiation_decision_total",
    "Engine decisions made",
    ["operation", "outcome"],  # outcome: accepted | countered | fallback | refused | finalized | options
)

fallback_counter = Counter(
    "negotiation_fallback_total",
    "Proposals replaced by the default plan",
    ["reason"],
)

intercepted_offer_counter = Counter(
    "negotiation_intercepted_offers_total",
    "Assistant messages whose embedded plan was re-validated",
)

finalized_plan_counter = Counter(
    "negotiation_finalized_plans_total",
    "Payment plans agreed and issued a payment link",
    ["frequency"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_decision(operation: str, decision: Decision) -> None:
    """Record outcome metrics for one engine call"""
    decision_counter.labels(operation=operation, outcome=decision.outcome).inc()

    if decision.fallback_reason:
        # Collapse "unknown frequency 'xyz'" variants into one label value
        reason = decision.fallback_reason.split(" '")[0]
        fallback_counter.labels(reason=reason).inc()

    if decision.outcome == "finalized" and decision.response.final_plan is not None:
        finalized_plan_counter.labels(frequency=decision.response.final_plan.frequency).inc()
