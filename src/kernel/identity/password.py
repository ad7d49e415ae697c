"""
Password hashing utilities using bcrypt.
"""

import bcrypt

from src.kernel.errors import InvalidInput

# Number of rounds for bcrypt hashing (12 is secure default)
BCRYPT_ROUNDS = 12


class PasswordHasher:
    """Password hashing service."""

    @staticmethod
    def _truncate_password(password: str) -> bytes:
        """
        Truncate password to 72 bytes (bcrypt limit) and encode.

        bcrypt only uses the first 72 bytes of a password.
        """
        return password.encode('utf-8')[:72]

    @staticmethod
    def hash(password: str) -> str:
        """
        Hash a password using bcrypt with a fresh random salt.

        Args:
            password: Plain text password

        Returns:
            Hashed password string

        Raises:
            InvalidInput: If the password is empty or not a string
        """
        if not password or not isinstance(password, str):
            raise InvalidInput("Invalid password", "Cannot hash an empty password")

        pwd_bytes = PasswordHasher._truncate_password(password)
        salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
        hashed = bcrypt.hashpw(pwd_bytes, salt)
        return hashed.decode('utf-8')

    @staticmethod
    def verify(plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Args:
            plain_password: Plain text password to verify
            hashed_password: Stored hashed password

        Returns:
            True if password matches, False otherwise

        Raises:
            InvalidInput: If the stored hash is not a bcrypt hash
        """
        if not hashed_password or not isinstance(hashed_password, str):
            raise InvalidInput("Invalid password", "Stored password hash is empty")
        if not plain_password or not isinstance(plain_password, str):
            return False

        pwd_bytes = PasswordHasher._truncate_password(plain_password)
        try:
            return bcrypt.checkpw(pwd_bytes, hashed_password.encode('utf-8'))
        except ValueError as e:
            raise InvalidInput("Invalid password", f"Malformed password hash: {e}") from e


# Convenience functions
def hash_password(password: str) -> str:
    """Hash a password."""
    return PasswordHasher.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password."""
    return PasswordHasher.verify(plain_password, hashed_password)
