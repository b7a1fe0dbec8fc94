from prometheus_client import Counter, Histogram
from prometheus_fastapi_instrumentator import Instrumentator

PROBLEMS_GENERATED = Counter(
    "yomiage_problems_generated_total",
    "Generated drill problems",
    ["operand_count"],
)

SYNTHESIS_REQUESTS = Counter(
    "yomiage_synthesis_requests_total",
    "VOICEVOX synthesis requests",
    ["status"],
)

SYNTHESIS_STAGE_DURATION = Histogram(
    "yomiage_synthesis_stage_duration_seconds",
    "VOICEVOX call duration",
    ["stage"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0],
)

TUNING_TIER = Counter(
    "yomiage_tuning_tier_total",
    "Readouts by tuning risk tier (0 = default path)",
    ["tier"],
)

READOUTS = Counter(
    "yomiage_readouts_total",
    "Readout outcomes",
    ["outcome"],
)


def setup_metrics(app):
    Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        excluded_handlers=["/metrics", "/docs", "/openapi.json"],
    ).instrument(app).expose(app, endpoint="/metrics")
