from __future__ import annotations

import secrets
from typing import Callable

from ..core.constants import PIN_LENGTH


class PinGenerator:
    """Produces 6-digit join codes ("000000"-"999999", zero-padded).

    No uniqueness is guaranteed here; SessionService checks codes against the
    sessions currently active in the department.
    """

    def __init__(self, randbelow: Callable[[int], int] = secrets.randbelow, *, length: int = PIN_LENGTH):
        self._randbelow = randbelow
        self._length = int(length)

    @property
    def length(self) -> int:
        return self._length

    def generate(self) -> str:
        return str(self._randbelow(10**self._length)).zfill(self._length)

    def is_well_formed(self, pin: str) -> bool:
        return isinstance(pin, str) and len(pin) == self._length and pin.isdigit()
