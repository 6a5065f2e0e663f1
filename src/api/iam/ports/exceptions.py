"""Domain exceptions for IAM bounded context.

These exceptions represent domain-level errors that can occur during
repository operations. They should be caught and handled by the
application layer. Each carries a stable ``code`` surfaced to clients.
"""


class DuplicateTenantSlugError(Exception):
    """Raised when attempting to create a tenant with a slug that already exists.

    Tenant slugs are globally unique because they are used to resolve
    tenants from the X-Tenant-Id header.
    """

    code = "DUPLICATE_TENANT_SLUG"


class GlobalEmailConflictError(Exception):
    """Raised when registering an email that is already used by any tenant.

    Email addresses are unique across the entire system so that login can
    locate the user (and therefore the tenant) from the email alone.
    """

    code = "GLOBAL_EMAIL_CONFLICT"


class InvalidCredentialsError(Exception):
    """Raised when login fails.

    Covers unknown email, wrong password and users whose tenant has been
    deactivated. The cause is deliberately not distinguished to callers.
    """

    code = "INVALID_CREDENTIALS"


class RegistrationTenantError(Exception):
    """Raised when registration names a tenant that is unknown or inactive."""

    code = "INVALID_REGISTRATION_TENANT"
