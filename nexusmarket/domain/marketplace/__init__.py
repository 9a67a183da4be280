"""
Marketplace bounded context: domain layer.

This module contains all domain logic for the marketplace context:
- Identities and balances
- The item catalog and its listing rules
- Trade requests and their settlement
- The append-only transaction log
"""
