"""Shared middleware for cross-cutting concerns.

This module contains the per-request tenant context and the errors raised
while resolving or enforcing it. The resolution middleware itself lives in
the IAM bounded context.
"""
