import random
import re
import string

# Base62 alphabet (case-sensitive codes)
ALPHABET = string.ascii_letters + string.digits
SHORT_CODE_LENGTH = 6
FALLBACK_CODE_LENGTH = 7

CODE_PATTERN = re.compile(r"^[A-Za-z0-9]{6,8}$")


def generate_short_code(length: int = SHORT_CODE_LENGTH) -> str:
    """Generate a random alphanumeric code. Not cryptographically secure;
    callers resolve collisions by retrying."""
    return ''.join(random.choices(ALPHABET, k=length))


def is_valid_code(code: str) -> bool:
    """True when code is 6-8 characters of [A-Za-z0-9]."""
    return bool(CODE_PATTERN.fullmatch(code or ""))
