"""Sparse model of a process address space around a mapped Mach-O image."""

from __future__ import annotations

import enum
import functools
import logging
from dataclasses import dataclass
from typing import Any

from iblessing.registers import ARM64Register

log = logging.getLogger(__name__)

VIRTUAL_HEAP_LOWER_BOUND = 0x300000000
REAL_HEAP_COPY_LOWER_BOUND = 0x600000000
SP_UPPER_BOUND = 0x00007FFFFFFFFF
STACK_SIZE = 2 * 1024 * 1024
MIN_VALID_ADDRESS = 0x100000000
_MAX_BSS_STRING = 16384


class MemoryError_(Exception):
    """Raised on an access that does not match what is stored in memory."""


class MemoryType(enum.Enum):
    """What a memory unit holds."""

    COMMON = 0
    OBJC_CLASS = 1
    OBJC_INSTANCE = 2
    OBJC_IVAR = 3
    OBJC_IVAR_TINY = 4
    ANY = 5


@dataclass
class MemoryUnit:
    """A chunk of data stored at one address."""

    available: bool
    data: Any
    size: int
    type: MemoryType = MemoryType.COMMON
    comment: str = ""


def _round_up(address: int, size: int) -> int:
    if size == 0 or address % size == 0:
        return address
    return (address // size + 1) * size


class VirtualMemory:
    """Memory units over a mapped file, a virtual heap and a real-heap copy.

    Addresses below ``vmaddr_base + mapped_size`` read through to the mapped
    file unless a unit has been stored there. Objects stored with
    ``store_object`` are placed on the virtual heap. An object stored as
    ``MemoryType.OBJC_INSTANCE`` lays out its ivars as well; it is expected
    to expose an ``ivars`` sequence whose items carry ``name`` and ``size``.
    """

    def __init__(
        self,
        mapped_file: bytes = b"",
        vmaddr_base: int = 0,
        vmaddr_bss_start: int = 0,
        vmaddr_bss_end: int = 0,
        linkedit_base: int = 0,
    ) -> None:
        self.mapped_file = bytes(mapped_file)
        self.vmaddr_base = vmaddr_base
        self.vmaddr_bss_start = vmaddr_bss_start
        self.vmaddr_bss_end = vmaddr_bss_end
        self.linkedit_base = linkedit_base
        self.segment_headers: list[Any] = []
        self.dyldinfo: Any = None
        self.text_seg: Any = None
        self.text_sect: Any = None
        self._memory: dict[int, MemoryUnit] = {}
        self.sp_upper_bound = SP_UPPER_BOUND
        self.sp_lower_bound = SP_UPPER_BOUND - STACK_SIZE
        self.heap_cursor = VIRTUAL_HEAP_LOWER_BOUND
        self.heap_copy_cursor = REAL_HEAP_COPY_LOWER_BOUND
        self.reset()

    @property
    def mapped_size(self) -> int:
        return len(self.mapped_file)

    def _in_bss(self, address: int) -> bool:
        return self.vmaddr_bss_start <= address <= self.vmaddr_bss_end

    def store_register(self, reg: ARM64Register, address: int) -> None:
        """Store a copy of the register's bytes at ``address``.

        Units that start inside the stored range are dropped.
        """
        data = None
        if reg.available and reg.data is not None:
            data = bytes(reg.data[: reg.size]).ljust(reg.size, b"\0")
        self._memory[address] = MemoryUnit(reg.available, data, reg.size)
        for addr in range(address + 1, address + reg.size):
            self._memory.pop(addr, None)

    def store_object(self, data: Any, size: int, type: MemoryType) -> int:
        """Place ``data`` on the virtual heap, aligned to ``size``; return its address."""
        address = _round_up(self.heap_cursor, size)
        self._memory[address] = MemoryUnit(True, data, size, type)
        self.heap_cursor = address + size

        if type is MemoryType.OBJC_INSTANCE:
            log.info("store ivars to memory")
            for ivar in getattr(data, "ivars", ()):
                self._store_ivar(ivar)
        return address

    def _store_ivar(self, ivar: Any) -> int:
        ivar_size = ivar.size
        if ivar_size == 8:
            unit_addr = self.heap_copy_cursor
            self._memory[unit_addr] = MemoryUnit(True, ivar, 8, MemoryType.OBJC_IVAR)
            self.heap_copy_cursor += 8
            ivar_addr = self.store_object(unit_addr, 8, MemoryType.OBJC_IVAR)
            log.info("store ivar pointer (0x%x) %s at 0x%x", unit_addr, ivar.name, ivar_addr)
            return ivar_addr
        if ivar_size <= 0:
            raise MemoryError_(f"ivar {ivar.name!r} has size {ivar_size}")
        ivar_addr = _round_up(self.heap_cursor, ivar_size)
        self._memory[ivar_addr] = MemoryUnit(
            True, bytearray(ivar_size), ivar_size, MemoryType.OBJC_IVAR_TINY
        )
        self.heap_cursor = ivar_addr + ivar_size
        log.info("store ivar %s at 0x%x", ivar.name, ivar_addr)
        return ivar_addr

    def write_by_size(self, data: Any, address: int, size: int, type: MemoryType) -> None:
        """Store ``data`` of ``size`` bytes at ``address``, replacing what was there."""
        self._memory[address] = MemoryUnit(True, data, size, type)

    def _checked(self, unit: MemoryUnit, size: int, fatal: bool) -> Any:
        if unit.size != size:
            if fatal:
                raise MemoryError_(f"unit of size {unit.size} read with size {size}")
            return None
        return unit.data

    def read_by_size(self, address: int, size: int, fatal: bool = True) -> Any:
        """Data of ``size`` bytes at ``address``, or None when nothing is there.

        A read whose size differs from the stored unit raises MemoryError_
        when ``fatal`` and gives None otherwise.
        """
        real_heap_lower_bound = self.mapped_size + self.vmaddr_base
        if address < real_heap_lower_bound:
            unit = self._memory.get(address)
            if self._in_bss(address):
                return None if unit is None else self._checked(unit, size, fatal)
            if unit is not None:
                return self._checked(unit, size, fatal)
            offset = address - self.vmaddr_base
            if offset < 0:
                return None
            return self.mapped_file[offset:offset + size]

        if address <= VIRTUAL_HEAP_LOWER_BOUND:
            unit = self._memory.get(address)
            if unit is None:
                unit = MemoryUnit(True, bytearray(size), size, MemoryType.ANY)
                self._memory[address] = unit
                return unit.data
            return self._checked(unit, size, fatal)

        unit = self._memory.get(address)
        if unit is None:
            return None
        return self._checked(unit, size, fatal)

    def read_object(self, address: int, type: MemoryType) -> Any:
        """Object stored at ``address``; MemoryError_ if it is of another type."""
        unit = self._memory.get(address)
        if unit is None:
            return None
        if unit.type is not type:
            raise MemoryError_(f"unit at 0x{address:x} is {unit.type.name}, not {type.name}")
        return unit.data

    def read_as_string(self, address: int, limit: int = 0) -> bytes | None:
        """NUL-terminated bytes at ``address``, cut to ``limit`` when positive.

        In the bss range the string is gathered from consecutive units.
        """
        if self._in_bss(address):
            if address not in self._memory:
                return None
            chunks = bytearray()
            cursor = address
            while cursor in self._memory:
                unit = self._memory[cursor]
                if len(chunks) + unit.size > _MAX_BSS_STRING:
                    raise MemoryError_("string in bss is too long")
                chunks += bytes(unit.data or b"")[: unit.size].ljust(unit.size, b"\0")
                cursor += unit.size
            raw = bytes(chunks)
        elif address < self.mapped_size + self.vmaddr_base:
            offset = address - self.vmaddr_base
            if offset < 0:
                return None
            raw = self.mapped_file[offset:]
        else:
            return None

        end = raw.find(b"\0")
        if end >= 0:
            raw = raw[:end]
        if limit > 0:
            raw = raw[:limit]
        return raw

    def get_memory_unit(self, address: int) -> MemoryUnit | None:
        return self._memory.get(address)

    def reset(self) -> None:
        """Drop every unit and rewind the stack and heap cursors."""
        self.sp_upper_bound = SP_UPPER_BOUND
        self.sp_lower_bound = SP_UPPER_BOUND - STACK_SIZE
        self.heap_cursor = VIRTUAL_HEAP_LOWER_BOUND
        self.heap_copy_cursor = REAL_HEAP_COPY_LOWER_BOUND
        self._memory.clear()

    def is_mapped_file_heap(self, address: int) -> bool:
        return address < VIRTUAL_HEAP_LOWER_BOUND

    def is_virtual_heap(self, address: int) -> bool:
        return VIRTUAL_HEAP_LOWER_BOUND <= address < REAL_HEAP_COPY_LOWER_BOUND

    def is_real_heap_copy(self, address: int) -> bool:
        return address >= REAL_HEAP_COPY_LOWER_BOUND

    def is_valid_address(self, address: int) -> bool:
        return address >= MIN_VALID_ADDRESS


@functools.lru_cache(maxsize=None)
def default_memory() -> VirtualMemory:
    """The memory shared by the whole process."""
    return VirtualMemory()