from passlib.context import CryptContext

# pbkdf2_sha256 is pure Python, no bcrypt backend needed
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class PasswordHashError(Exception):
    pass


def hash_password(password: str) -> str:
    try:
        return pwd_context.hash(password)
    except (TypeError, ValueError) as exc:
        raise PasswordHashError(str(exc)) from exc

