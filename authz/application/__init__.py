"""Application layer: DTOs, ports, and services (resolver, ledger, catalog)."""
