"""
Login credential generation.

Pure helpers for employee IDs, usernames and temporary passwords. Randomness
and the clock are injectable so callers (and tests) can make output
deterministic; by default the OS CSPRNG and Django's clock are used.

None of these values is guaranteed unique: the identity store's unique
indexes remain the authoritative collision check.
"""
import secrets
import string

from django.utils import timezone

UPPERCASE = string.ascii_uppercase
LOWERCASE = string.ascii_lowercase
DIGITS = string.digits
SYMBOLS = '!@#$%^&*'
PASSWORD_ALPHABET = UPPERCASE + LOWERCASE + DIGITS + SYMBOLS

BASE36_ALPHABET = string.digits + string.ascii_uppercase

_system_random = secrets.SystemRandom()


def to_base36(number):
    if number < 0:
        raise ValueError('number must be non-negative')
    if number == 0:
        return '0'
    chars = []
    while number:
        number, remainder = divmod(number, 36)
        chars.append(BASE36_ALPHABET[remainder])
    return ''.join(reversed(chars))


def generate_employee_id(prefix='EMP', *, now=None, rng=None):
    """Return ``PREFIX-<base36 epoch millis>-<4 digits>``"""
    rng = rng or _system_random
    moment = now() if callable(now) else (now or timezone.now())
    millis = int(moment.timestamp() * 1000)
    suffix = rng.randint(1000, 9999)
    return f"{prefix}-{to_base36(millis)}-{suffix}"


def generate_temporary_password(length=12, *, rng=None):
    """Return a password with at least one upper, lower, digit and symbol.

    The four mandatory characters are placed first, the rest drawn from the
    mixed alphabet, and the whole sequence shuffled, so no validation pass
    is needed afterwards.
    """
    if length < 4:
        raise ValueError('Temporary passwords need at least 4 characters')
    rng = rng or _system_random

    chars = [
        rng.choice(UPPERCASE),
        rng.choice(LOWERCASE),
        rng.choice(DIGITS),
        rng.choice(SYMBOLS),
    ]
    chars.extend(rng.choice(PASSWORD_ALPHABET) for _ in range(length - len(chars)))
    rng.shuffle(chars)
    return ''.join(chars)


def generate_username(first_name, last_name, *, rng=None):
    """``first.last`` plus a 3-digit suffix; collisions are possible"""
    rng = rng or _system_random
    base = f"{first_name.strip().lower()}.{last_name.strip().lower()}"
    return f"{base}{rng.randint(100, 999)}"
