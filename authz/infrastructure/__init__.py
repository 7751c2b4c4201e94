"""Infrastructure: SQL persistence and permission caches."""
