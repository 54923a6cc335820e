"""
Prometheus metrics definitions for the API.
All metrics are registered here and can be imported by other modules.
"""
from prometheus_client import Counter, Histogram

# HTTP request metrics
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'path', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'path'],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0]
)

# Error metrics
errors_total = Counter(
    'errors_total',
    'Total errors',
    ['error_type']
)

# Quota routing metrics
quota_decisions_total = Counter(
    'quota_decisions_total',
    'Routing decisions by resolved provider and outcome',
    ['provider', 'outcome']  # outcome: direct, switched, paid, exhausted
)

quota_usage_increments_total = Counter(
    'quota_usage_increments_total',
    'Units of usage recorded against a provider',
    ['provider']
)

quota_resets_total = Counter(
    'quota_resets_total',
    'Quota rows reset at a day boundary',
    ['provider']
)

# Wallet metrics
wallet_debits_total = Counter(
    'wallet_debits_total',
    'Wallet debit attempts for paid usage',
    ['status']  # status: success, insufficient
)

# AI provider metrics
ai_provider_requests_total = Counter(
    'ai_provider_requests_total',
    'Total AI provider requests',
    ['provider', 'operation']
)

ai_provider_failures_total = Counter(
    'ai_provider_failures_total',
    'Total AI provider failures',
    ['provider', 'operation']
)

ai_provider_latency_seconds = Histogram(
    'ai_provider_latency_seconds',
    'AI provider request latency in seconds',
    ['provider', 'operation'],
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0]
)

ai_provider_tokens_total = Counter(
    'ai_provider_tokens_total',
    'Total AI provider tokens used',
    ['provider', 'operation']
)
