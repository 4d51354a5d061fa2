from prometheus_client import Counter, Histogram

# Request lifecycle
REQUEST_TRANSITIONS = Counter(
    "carpool_request_transitions_total",
    "Trip request transition attempts",
    ["transition", "result"],
)

# Trip registry
TRIPS_CREATED = Counter("carpool_trips_created_total", "Trips published by drivers")

# Matcher
MATCH_LATENCY = Histogram("carpool_match_latency_seconds", "Latency for trip matching queries")
MATCH_RESULTS = Histogram(
    "carpool_match_results",
    "Number of trips returned per matching query",
    buckets=(0, 1, 2, 3, 4, 5, 10, 20),
)
