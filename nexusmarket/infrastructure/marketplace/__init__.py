"""
Infrastructure adapters for the marketplace bounded context.

Each adapter implements a domain port (ABC): SQLAlchemy repositories
and unit of work, in-process keyed locks, bcrypt credential hashing
and image URL resolution.
"""
