"""
Password suggestions and strength labels.

Scores run from 0 to 100 and are derived from the estimated entropy of a
password (length times the bits per character of the alphabet it uses).
"""

import math
import secrets
import string
from dataclasses import dataclass

SIMILAR_CHARACTERS = "iIlLoO01|`'\""
SYMBOLS = "!#$%&()*+,-./:;=?@[]^_{}~"

# Bits of entropy that map to a score of 100
FULL_SCORE_BITS = 128

STRENGTH_BANDS = [
    (20.0, "Very dangerous"),
    (40.0, "Dangerous"),
    (60.0, "Very weak"),
    (80.0, "Weak"),
    (90.0, "Good"),
    (95.0, "Strong"),
    (99.0, "Very strong"),
]

USE_OWN = "use own"


@dataclass(frozen=True)
class GeneratorParams:
    """Shape of a generated password."""

    length: int
    symbols: bool
    numbers: bool


# Suggested password shapes, strongest first
GENERATOR_PARAMS = [
    GeneratorParams(25, True, True),
    GeneratorParams(25, False, True),
    GeneratorParams(20, True, True),
    GeneratorParams(16, True, True),
    GeneratorParams(16, False, True),
    GeneratorParams(10, True, True),
    GeneratorParams(8, False, True),
    GeneratorParams(8, False, False),
]


@dataclass
class PasswordSuggestion:
    """A candidate password with its strength."""

    password: str
    strength: str
    score: float

    def __str__(self) -> str:
        return f"{self.password:<25} ({self.strength})"


def password_strength(score: float) -> str:
    """
    Label for a strength score.

    Args:
        score: Score from password_score (values above 100 are allowed)

    Returns:
        Human-readable strength band
    """
    for limit, label in STRENGTH_BANDS:
        if score < limit:
            return label
    return "Heat death"


def password_score(password: str) -> float:
    """Estimate password strength on a 0-100 scale."""
    if not password:
        return 0.0

    pool = 0
    if any(c in string.ascii_lowercase for c in password):
        pool += len(string.ascii_lowercase)
    if any(c in string.ascii_uppercase for c in password):
        pool += len(string.ascii_uppercase)
    if any(c in string.digits for c in password):
        pool += len(string.digits)
    if any(not c.isalnum() for c in password):
        pool += len(string.punctuation) + 1

    # A single repeated character carries no more information than one
    distinct = len(set(password))
    effective_length = min(len(password), distinct * 2)

    bits = effective_length * math.log2(max(pool, 2))
    return min(100.0, bits * 100 / FULL_SCORE_BITS)


def _alphabets(params: GeneratorParams) -> list[str]:
    groups = [string.ascii_lowercase, string.ascii_uppercase]
    if params.numbers:
        groups.append(string.digits)
    if params.symbols:
        groups.append(SYMBOLS)
    return ["".join(c for c in group if c not in SIMILAR_CHARACTERS) for group in groups]


def generate_password(params: GeneratorParams) -> str:
    """
    Generate a random password.

    Every enabled character group appears at least once and visually similar
    characters are never used.
    """
    groups = _alphabets(params)
    alphabet = "".join(groups)

    while True:
        password = "".join(secrets.choice(alphabet) for _ in range(params.length))
        if all(any(c in group for c in password) for group in groups):
            return password


def generate_passwords(count: int) -> list[PasswordSuggestion]:
    """
    Build the password suggestion list.

    Args:
        count: Passwords generated per shape

    Returns:
        "use own" entry followed by suggestions, strongest first
    """
    suggestions = []
    for params in GENERATOR_PARAMS:
        for _ in range(count):
            password = generate_password(params)
            score = password_score(password)
            suggestions.append(PasswordSuggestion(password, password_strength(score), score))

    suggestions.sort(key=lambda suggestion: suggestion.score, reverse=True)
    return [PasswordSuggestion("", USE_OWN, 0.0), *suggestions]
