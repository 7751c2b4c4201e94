"""Role-based access control core: identity, role catalog, assignment ledger, resolver."""

__version__ = "0.1.0"
