"""HTTP surface for the Gremios engine (FastAPI + SQLAlchemy)."""
