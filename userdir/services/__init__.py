"""
Service layer for the user directory.
"""

from userdir.services.passwords import BcryptPasswordHasher, PasswordHasher
from userdir.services.session_service import SessionService
from userdir.services.user_service import UserService

__all__ = [
    "BcryptPasswordHasher",
    "PasswordHasher",
    "SessionService",
    "UserService",
]
