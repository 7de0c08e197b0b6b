"""Prometheus metrics exposed on /metrics."""
from prometheus_client import Counter

SEARCHES_SERVED = Counter(
    "search_gateway_searches_total",
    "Searches answered, by the index that satisfied them.",
    ["source"],
)

LOCAL_FALLBACKS = Counter(
    "search_gateway_local_fallbacks_total",
    "Tenant index searches that fell through to the global index.",
    ["reason"],
)
