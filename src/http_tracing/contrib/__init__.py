"""
Contrib modules for http-client-tracing.

Available contrib modules:
- opentelemetry: span-per-request tracing interceptors
"""
