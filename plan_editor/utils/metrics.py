"""Prometheus metrics for action extraction and change lifecycle."""

from prometheus_client import Counter

payload_decodes_total = Counter(
    "plan_editor_payload_decodes_total",
    "Action payload decode attempts by the stage that settled them",
    ["stage"],
)

actions_extracted_total = Counter(
    "plan_editor_actions_extracted_total",
    "Actions extracted from generated text",
    ["kind"],
)

actions_dropped_total = Counter(
    "plan_editor_actions_dropped_total",
    "Candidate actions dropped before staging or application",
    ["reason"],
)

changes_total = Counter(
    "plan_editor_changes_total",
    "Change batch lifecycle transitions",
    ["outcome"],
)


class PrometheusChangeMetrics:
    """Prometheus-based change metrics implementation."""

    def record_decode(self, stage: str) -> None:
        """Record which decode stage produced (or failed) a payload."""
        payload_decodes_total.labels(stage=stage).inc()

    def inc_extracted(self, kind: str) -> None:
        """Increment extracted-action counter."""
        actions_extracted_total.labels(kind=kind).inc()

    def inc_dropped(self, reason: str, count: int = 1) -> None:
        """Increment dropped-action counter."""
        if count > 0:
            actions_dropped_total.labels(reason=reason).inc(count)

    def inc_change(self, outcome: str) -> None:
        """Increment change lifecycle counter."""
        changes_total.labels(outcome=outcome).inc()


metrics = PrometheusChangeMetrics()
