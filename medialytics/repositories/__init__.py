"""
Repository package for data access layers.

Each repository documents its interface with a `*RepositoryProtocol` class
and ships a SQLAlchemy implementation bound to a request-scoped
`AsyncSession`. Repositories flush; services own the transaction (commit).
"""
