"""
User directory service.

Identity operations over a relational user store fronted by a Redis user
cache, with Redis-backed login sessions.
"""

__version__ = "0.1.0"
