"""
Tests for bcrypt password hashing.
"""

import pytest

from userdir.core.errors import InvalidArgumentError
from userdir.services.passwords import MAX_PASSWORD_BYTES, BcryptPasswordHasher


class TestBcryptPasswordHasher:
    """Tests for BcryptPasswordHasher."""

    @pytest.mark.asyncio
    async def test_hash_and_verify(self, hasher: BcryptPasswordHasher) -> None:
        """Test a hash verifies against its password only."""
        hashed = await hasher.hash("correct horse")

        assert hashed != "correct horse"
        assert await hasher.verify("correct horse", hashed) is True
        assert await hasher.verify("wrong horse", hashed) is False

    @pytest.mark.asyncio
    async def test_hashes_are_salted(self, hasher: BcryptPasswordHasher) -> None:
        """Test the same password hashes differently each time."""
        assert await hasher.hash("secret1") != await hasher.hash("secret1")

    @pytest.mark.asyncio
    async def test_verify_malformed_hash(self, hasher: BcryptPasswordHasher) -> None:
        """Test malformed or empty hashes never verify."""
        assert await hasher.verify("secret1", "") is False
        assert await hasher.verify("secret1", "not-a-bcrypt-hash") is False

    @pytest.mark.asyncio
    async def test_length_limit(self, hasher: BcryptPasswordHasher) -> None:
        """Test passwords over the bcrypt byte limit are rejected."""
        await hasher.hash("x" * MAX_PASSWORD_BYTES)
        with pytest.raises(InvalidArgumentError):
            await hasher.hash("x" * (MAX_PASSWORD_BYTES + 1))
