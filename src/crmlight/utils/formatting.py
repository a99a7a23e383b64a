"""Display formatting for metrics and amounts."""

PERCENT_METRICS = {"conversion_rate", "new_customer_revenue_rate"}
MONEY_METRICS = {"total_revenue", "portfolio_value", "avg_opportunity_value"}


def format_amount(value: float) -> str:
    return f"{value:,.2f} €"


def format_metric(name: str, value: float | int) -> str:
    """Render a dashboard metric value for display."""
    if name in PERCENT_METRICS:
        return f"{value:.1%}"
    if name in MONEY_METRICS:
        return format_amount(value)
    if isinstance(value, float):
        return f"{value:.2f}"
    return str(value)


def metric_title(name: str) -> str:
    """Turn a metric field name into a label, e.g. total_users -> Total users."""
    return name.replace("_", " ").capitalize()
