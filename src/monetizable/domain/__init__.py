"""Money value objects independent from persistence.

Currencies, ``Money`` and the normalized setter inputs live here so that they
can be used and tested without a database.
"""

__all__ = [
    "currency",
    "money",
    "write_input",
]
