"""Shared Kernel module.

Components every bounded context agrees to depend on:

- ``middleware.tenant_context``: the per-request (or per-job) TenantContext
  and the errors raised while resolving or enforcing it
- ``auth``: signing and validating the bearer tokens that carry the
  tenant claim
- ``observability_context``: request metadata bound to domain probes

Nothing here imports a bounded context.
"""
