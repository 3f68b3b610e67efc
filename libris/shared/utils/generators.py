"""ID and secret generators (CUID primary keys, temporary passwords)."""

import secrets
import string

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()

# Special characters accepted by the password policy (see credential_policy).
PASSWORD_SPECIAL_CHARACTERS = "!@#$%^&*()_+{}:<>?~[];,./|-="

TEMP_PASSWORD_MIN_LENGTH = 8
TEMP_PASSWORD_MAX_LENGTH = 12


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def generate_temp_password(
    min_length: int = TEMP_PASSWORD_MIN_LENGTH,
    max_length: int = TEMP_PASSWORD_MAX_LENGTH,
) -> str:
    """Return a random password with at least one upper, lower, digit and special character.

    Length is drawn uniformly from [min_length, max_length] (clamped to 8..12).
    Uses the secrets module for every choice, including the final shuffle.
    """
    min_length = min(max(min_length, TEMP_PASSWORD_MIN_LENGTH), TEMP_PASSWORD_MAX_LENGTH)
    max_length = max(min(max_length, TEMP_PASSWORD_MAX_LENGTH), min_length)
    length = min_length + secrets.randbelow(max_length - min_length + 1)

    classes = (
        string.ascii_uppercase,
        string.ascii_lowercase,
        string.digits,
        PASSWORD_SPECIAL_CHARACTERS,
    )
    chars = [secrets.choice(c) for c in classes]
    alphabet = "".join(classes)
    chars.extend(secrets.choice(alphabet) for _ in range(length - len(chars)))

    rng = secrets.SystemRandom()
    rng.shuffle(chars)
    return "".join(chars)
