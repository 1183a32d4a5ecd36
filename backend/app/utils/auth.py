from passlib.context import CryptContext
import os

# Configure bcrypt rounds explicitly for predictable performance.
# Defaults to 11 rounds unless overridden via BCRYPT_ROUNDS env var.
_BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "11") or 11)
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=_BCRYPT_ROUNDS,
)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def normalize_phone(phone: str) -> str:
    """Return the phone number used as the login identifier.

    Whitespace, dashes and brackets are dropped so "98765 43210" and
    "(987) 654-3210" style inputs match the stored value.
    """
    phone = (phone or "").strip()
    keep_plus = phone.startswith("+")
    digits = "".join(ch for ch in phone if ch.isdigit())
    return f"+{digits}" if keep_plus else digits
