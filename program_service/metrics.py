from prometheus_client import Counter, Histogram

PLAN_STAGE_ATTEMPTS_TOTAL = Counter(
    "plan_stage_attempts_total",
    "Completion attempts per generation stage, by outcome",
    ["stage", "outcome"],
)

PLANS_GENERATED_TOTAL = Counter(
    "plans_generated_total",
    "Number of plan documents generated via program-service",
    ["variant"],
)

PLAN_GENERATION_FAILURES_TOTAL = Counter(
    "plan_generation_failures_total",
    "Pipeline runs that ended in an error, by error class",
    ["variant", "error"],
)

PLAN_GENERATION_SECONDS = Histogram(
    "plan_generation_seconds",
    "Wall-clock duration of a full 90-day plan generation",
    buckets=(5, 10, 20, 30, 40, 50, 55, 60, 90),
)

COACH_REPLIES_TOTAL = Counter(
    "coach_replies_total",
    "Short coaching replies, by kind and whether the canned fallback was used",
    ["kind", "outcome"],
)
