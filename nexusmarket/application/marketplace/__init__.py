"""
Application layer for the marketplace bounded context.

Use cases coordinate domain entities, the settlement engine and
ports to fulfill business operations. Each state-changing use case
runs inside one unit of work and commits exactly once.
No framework or infrastructure imports allowed.
"""
