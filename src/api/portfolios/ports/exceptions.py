"""Domain exceptions for the portfolios bounded context."""


class DuplicateSlugInTenantError(Exception):
    """Raised when a tenant already has a portfolio with the requested slug.

    Slugs are unique per tenant; two tenants may use the same slug.
    """

    code = "DUPLICATE_SLUG_IN_TENANT"


class PortfolioNotFoundError(Exception):
    """Raised when a portfolio does not exist in the resolved tenant.

    Portfolios of other tenants are reported exactly like missing ones.
    """

    code = "PORTFOLIO_NOT_FOUND"


class ReplacePersistenceError(Exception):
    """Raised when a section replace could not be committed.

    The previous sections are left untouched. Retrying is safe.
    """

    code = "REPLACE_PERSISTENCE_FAILED"
    retryable = True
