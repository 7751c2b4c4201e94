"""SQL persistence (SQLAlchemy async + Alembic)."""
