from passlib.context import CryptContext

# pbkdf2_sha256 is pure-Python inside passlib and needs no native bcrypt build
pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
)


def hash_password(password: str) -> str:
    """
    Hash a plain-text password using PBKDF2-SHA256.
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed: str) -> bool:
    """
    Verify a candidate password against a stored hash.

    Malformed or unknown hash strings count as a mismatch.
    """
    try:
        return pwd_context.verify(plain_password, hashed)
    except (ValueError, TypeError):
        return False
