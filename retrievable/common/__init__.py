"""
Common - Shared utilities.

- logging/  - Structured logging, correlation context
"""
