"""
Agent runtime logic module.

Rate limiting, audit ledger and domain exceptions.
"""
