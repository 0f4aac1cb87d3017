from prometheus_client import Counter, Histogram

ORDER_PLACEMENTS = Counter(
    "order_placements_total",
    "Order placement attempts by outcome",
    ["outcome"],  # placed | empty_cart | failed
)

PLACEMENT_DURATION = Histogram(
    "order_placement_duration_seconds",
    "Time spent in the order placement transaction, including lock wait",
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)
