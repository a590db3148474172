from prometheus_client import Counter, Histogram

# Workflow metrics
domain_operations = Counter(
    "domains_operations_total",
    "Total number of domain operations processed",
    ["operation", "status"]
)

domain_operation_duration = Histogram(
    "domains_operation_duration_seconds",
    "Time taken to process a domain operation",
    ["operation"]
)

zone_rollbacks = Counter(
    "domains_rollbacks_total",
    "Total number of compensating zone deletes",
    ["outcome"]
)
