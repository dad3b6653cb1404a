"""Register file of a simulated AArch64 thread."""

from __future__ import annotations

import functools

from iblessing.registers import (
    ARM64Register,
    ARM64RegisterD,
    ARM64RegisterSP,
    ARM64RegisterX,
)

DEFAULT_SP_UPPER_BOUND = 0x00007FFFFFFFFF

_X_ALIASES = {"fp": 29, "lr": 30}


class ThreadState:
    """The x0..x30, sp and d0..d31 registers of one thread."""

    def __init__(self, sp_value: int = DEFAULT_SP_UPPER_BOUND) -> None:
        self.x: list[ARM64RegisterX] = [ARM64RegisterX(i) for i in range(31)]
        self.sp = ARM64RegisterSP(sp_value)
        self.d: list[ARM64RegisterD] = [ARM64RegisterD(i) for i in range(32)]

    def register(self, name: str) -> ARM64Register | None:
        """Register for an operand name such as ``x3``, ``w3``, ``sp`` or ``d1``.

        ``x`` names select the 64-bit view and ``w`` names the 32-bit view of
        the same register. Names of other registers give None.
        """
        name = name.strip().lower()
        if name in _X_ALIASES:
            return self.x[_X_ALIASES[name]].set_x()
        if name == "sp":
            return self.sp
        prefix, digits = name[:1], name[1:]
        if not digits.isdigit():
            return None
        index = int(digits)
        if prefix == "x" and index <= 30:
            return self.x[index].set_x()
        if prefix == "w" and index <= 30:
            return self.x[index].set_w()
        if prefix == "d" and index <= 31:
            return self.d[index]
        return None


@functools.lru_cache(maxsize=None)
def main_thread_state() -> ThreadState:
    """The shared state of the main thread."""
    return ThreadState(DEFAULT_SP_UPPER_BOUND)