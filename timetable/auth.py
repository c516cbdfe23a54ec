from passlib.context import CryptContext

from timetable.config import Settings, get_settings

# pbkdf2_sha256: no native deps
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class AuthConfigurationError(RuntimeError):
    pass


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def validate_credentials(username: str, password: str, settings: Settings | None = None) -> bool:
    """Check against the single account configured via AUTH_USERNAME / AUTH_PASSWORD_HASH."""
    settings = settings or get_settings()
    if not settings.AUTH_USERNAME or not settings.AUTH_PASSWORD_HASH:
        raise AuthConfigurationError("AUTH_USERNAME and AUTH_PASSWORD_HASH must be set in environment variables")
    if username != settings.AUTH_USERNAME:
        return False
    return verify_password(password, settings.AUTH_PASSWORD_HASH)
