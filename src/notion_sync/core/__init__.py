"""
Core Module Package

Resilience helpers used by the Notion client:
- retry: exponential backoff on rate-limit / conflict responses
- circuit_breaker: circuit breaker and bulkhead

Usage:
    from notion_sync.core import CircuitBreaker, Bulkhead, retry_on_status
"""

from notion_sync.core.circuit_breaker import Bulkhead, CircuitBreaker, CircuitOpenError
from notion_sync.core.retry import backoff_delay, call_with_retry, retry_on_status

__all__ = [
    'Bulkhead', 'CircuitBreaker', 'CircuitOpenError',
    'backoff_delay', 'call_with_retry', 'retry_on_status',
]
