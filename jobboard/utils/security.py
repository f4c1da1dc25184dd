from passlib.context import CryptContext

# Argon2 only; hashes from older schemes would be flagged for rehash
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash stored in users.password, and in password_resets for one-time codes."""
    return pwd_context.hash(password)
