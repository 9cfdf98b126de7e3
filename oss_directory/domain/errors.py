"""Errors raised while querying the catalog."""


class QueryError(Exception):
    """Raised when a catalog query fails for the current request."""
    pass


class StoreUnavailable(QueryError):
    """Raised when the database cannot be reached or a statement fails."""
    pass


class MalformedRow(QueryError):
    """Raised when a returned row cannot be decoded into a CatalogEntry."""
    pass
