import base64
import hashlib
import json

from cryptography.fernet import Fernet, InvalidToken
from django.conf import settings


def _fernet() -> Fernet:
    """Create a Fernet instance derived from Django SECRET_KEY.
    Uses SHA256 to derive a 32-byte key and urlsafe base64 encodes it.
    """
    secret = settings.SECRET_KEY.encode('utf-8')
    digest = hashlib.sha256(secret).digest()
    key = base64.urlsafe_b64encode(digest)
    return Fernet(key)


def encrypt_secret(value: str) -> str:
    """Encrypt a short secret (e.g. a temporary password) to a base64 token."""
    return _fernet().encrypt(value.encode('utf-8')).decode('utf-8')


def decrypt_secret(token: str) -> str:
    """Decrypt a token produced by encrypt_secret.

    Raises ValueError if the token was tampered with or the SECRET_KEY rotated.
    """
    try:
        return _fernet().decrypt(token.encode('utf-8')).decode('utf-8')
    except InvalidToken as exc:
        raise ValueError('Secret could not be decrypted') from exc


def encrypt_json(data) -> str:
    """Seal a JSON-serializable payload, e.g. credentials crossing the task broker."""
    return encrypt_secret(json.dumps(data))


def decrypt_json(token: str):
    return json.loads(decrypt_secret(token))
