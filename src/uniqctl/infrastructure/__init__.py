"""Infrastructure layer — database engine and the SQL record store.

This layer depends on stdlib and third-party libs (SQLAlchemy).
It must never import from domain, services, commands, or output.
The service layer bridges between domain models and infrastructure.
"""
