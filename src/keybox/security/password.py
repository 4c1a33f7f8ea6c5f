"""Random password generation."""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass

from ..core.exceptions import InvalidConfigurationError

LETTERS = string.ascii_letters
DIGITS = string.digits
SPECIAL = "!#$%&()*+,-./:;<=>?@[]^_{|}~"


def random_string(
    length: int,
    use_letters: bool = True,
    use_digits: bool = True,
    use_special: bool = False,
) -> str:
    """Return ``length`` characters drawn uniformly from the enabled classes.

    Characters are picked independently with :func:`secrets.choice`, which
    samples without modulo bias. A short string is not guaranteed to contain
    every enabled class.

    Raises:
        InvalidConfigurationError: if no class is enabled or ``length`` is not
            a positive integer.
    """
    if isinstance(length, bool) or not isinstance(length, int) or length <= 0:
        raise InvalidConfigurationError(f"password length must be a positive integer, got {length!r}")

    alphabet = ""
    if use_letters:
        alphabet += LETTERS
    if use_digits:
        alphabet += DIGITS
    if use_special:
        alphabet += SPECIAL
    if not alphabet:
        raise InvalidConfigurationError("at least one character class must be enabled")

    return "".join(secrets.choice(alphabet) for _ in range(length))


@dataclass
class PasswordPolicy:
    """Password generation settings, usually read from the configuration."""

    length: int = 16
    letters: bool = True
    digits: bool = True
    special: bool = False

    @classmethod
    def from_config(cls, config) -> "PasswordPolicy":
        return cls(
            length=config.password_length,
            letters=config.password_letter,
            digits=config.password_digit,
            special=config.password_special,
        )

    def generate(self) -> str:
        return random_string(self.length, self.letters, self.digits, self.special)
