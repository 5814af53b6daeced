from prometheus_client import Counter, Histogram

# --- Inference Metrics ---

# Counter for tracking the number of attempts made against each inference endpoint.
# Labels:
# - endpoint_kind: "direct" or "relay".
INFERENCE_ATTEMPTS_TOTAL = Counter(
    "inference_attempts_total",
    "Total number of attempts against each inference endpoint.",
    ["endpoint_kind"],
)

# Counter for tracking failed attempts, split by error type so that warm-up
# (503) responses can be told apart from timeouts and transport failures.
# Labels:
# - endpoint_kind: "direct" or "relay".
# - error_type: The exception class name (e.g., "ModelWarming", "InferenceTimeout").
INFERENCE_FAILURES_TOTAL = Counter(
    "inference_failures_total",
    "Total number of failed attempts against each inference endpoint.",
    ["endpoint_kind", "error_type"],
)

# Histogram for tracking the latency of single inference attempts.
# Labels:
# - endpoint_kind: "direct" or "relay".
INFERENCE_LATENCY_SECONDS = Histogram(
    "inference_latency_seconds",
    "Latency of a single inference attempt.",
    ["endpoint_kind"],
    buckets=[0.1, 0.5, 1, 2.5, 5, 10, 15, 30],
)

# Counter for analyses that had to be answered by the offline lexical scorer.
LEXICAL_FALLBACK_TOTAL = Counter(
    "lexical_fallback_total",
    "Total number of analyses answered by the lexical scorer.",
    ["reason"],
)

# --- Cache Metrics ---

# Counter for tracking cache hits and misses.
# Labels:
# - cache_name: A name for the cache (e.g., "sentiment_result_cache").
# - result: "hit" or "miss".
CACHE_ACCESS_TOTAL = Counter(
    "cache_access_total",
    "Total number of cache hits and misses.",
    ["cache_name", "result"],
)

# --- Decision Metrics ---

# Counter for tracking business actions taken.
# Labels:
# - action_code: OFFER_COUPON, REQUEST_FEEDBACK or ASK_REFERRAL.
DECISIONS_TOTAL = Counter(
    "decisions_total",
    "Total number of business actions decided.",
    ["action_code"],
)

# Counter for rows that the logging sink failed to accept.
SHEET_LOG_FAILURES_TOTAL = Counter(
    "sheet_log_failures_total",
    "Total number of analysis log rows that could not be delivered.",
)
