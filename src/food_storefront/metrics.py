from prometheus_client import Counter, Histogram

storefront_checkout_total = Counter(
    "storefront_checkout_total",
    "Checkouts processed",
    ["outcome"],  # placed, replayed, partial, failed или kind ошибки проверки
)

storefront_checkout_duration_seconds = Histogram(
    "storefront_checkout_duration_seconds",
    "Checkout duration in seconds",
)

storefront_order_transition_total = Counter(
    "storefront_order_transition_total",
    "Order status transitions applied",
    ["from_status", "to_status"],
)
