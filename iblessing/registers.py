"""AArch64 register models holding raw little-endian values."""

from __future__ import annotations

import enum

_U64_MASK = (1 << 64) - 1


class RegisterType(enum.Enum):
    """Kind of a register."""

    SP = "sp"
    X = "x"
    D = "d"


def _fit(data: bytes, size: int) -> bytes:
    """Cut ``data`` to ``size`` bytes, or pad it with zeros up to ``size``."""
    if len(data) >= size:
        return bytes(data[:size])
    return bytes(data) + bytes(size - len(data))


class ARM64Register:
    """A register: whether its value is known, its width and its bytes."""

    def __init__(self, available: bool, size: int, type: RegisterType, comment: str = "") -> None:
        self.available = available
        self.long_register = False
        self.type = type
        self.comment = comment
        self.size = size
        self.data: bytes | None = None

    @property
    def desc(self) -> str:
        """Register name."""
        return "r?"

    @property
    def value_desc(self) -> str:
        """Register value as text."""
        return "?"

    def _raw(self) -> bytes:
        if self.data is None:
            raise ValueError(f"register {self.desc} holds no value")
        return _fit(self.data, self.size)

    @property
    def value(self) -> int:
        """Unsigned value of the register at its current width."""
        return int.from_bytes(self._raw(), "little")

    def set_value(self, data: bytes | int) -> None:
        """Store ``data``, cut or zero-padded to the register width.

        An integer is taken as a 64-bit little-endian value.
        """
        if isinstance(data, int):
            data = (data & _U64_MASK).to_bytes(8, "little")
        self.data = _fit(bytes(data), self.size)
        self.available = True

    def mov_from(self, other: ARM64Register) -> bool:
        """Copy the value of ``other``; False when ``other`` holds nothing."""
        if not other.available:
            self.available = False
            return False
        if other is self:
            return True
        self.set_value(_fit(other.data or b"", other.size))
        return True

    def invalidate(self) -> None:
        """Forget the register's value."""
        self.available = False

    def __repr__(self) -> str:
        shown = self.value_desc if self.available and self.data is not None else "?"
        return f"{type(self).__name__}({self.desc}={shown})"


class ARM64RegisterX(ARM64Register):
    """General register ``x<num>``, also usable as its 32-bit ``w`` view."""

    def __init__(self, num: int = 0) -> None:
        super().__init__(False, 8, RegisterType.X)
        self.num = num

    @property
    def desc(self) -> str:
        return f"x{self.num}"

    @property
    def value_desc(self) -> str:
        return f"0x{self.value:x}"

    @property
    def value(self) -> int:
        if self.long_register:
            raise ValueError(f"{self.desc} is a long register")
        return super().value

    def set_w(self) -> ARM64RegisterX:
        """Switch to the 32-bit view and return self."""
        self.size = 4
        return self

    def set_x(self) -> ARM64RegisterX:
        """Switch to the 64-bit view and return self."""
        self.size = 8
        return self


class ARM64RegisterSP(ARM64Register):
    """The stack pointer."""

    def __init__(self, value: int) -> None:
        super().__init__(True, 8, RegisterType.SP)
        self.set_value(value)

    @property
    def desc(self) -> str:
        return "sp"

    @property
    def value_desc(self) -> str:
        return f"0x{self.value:x}"


class ARM64RegisterD(ARM64Register):
    """Floating point / SIMD register ``d<num>``."""

    def __init__(self, num: int = 0) -> None:
        super().__init__(False, 8, RegisterType.D)
        self.num = num

    @property
    def desc(self) -> str:
        return f"d{self.num}"

    @property
    def value_desc(self) -> str:
        return f"0x{self.value:x}"

    @property
    def value(self) -> int:
        if self.long_register:
            raise ValueError(f"{self.desc} is a long register")
        return super().value