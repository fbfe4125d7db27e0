from prometheus_client import Counter, Histogram

RPC_REQUESTS = Counter(
    "cats_gateway_rpc_requests_total",
    "JSON-RPC requests handled",
    ["transport", "method", "outcome"],
)

UPSTREAM_LATENCY = Histogram(
    "cats_gateway_upstream_request_duration_seconds",
    "Upstream cats API latency in seconds",
    ["endpoint"],
)
