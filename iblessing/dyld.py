"""Decoding of the dyld bind opcode stream of a Mach-O image."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence

BIND_OPCODE_MASK = 0xF0
BIND_IMMEDIATE_MASK = 0x0F

BIND_OPCODE_DONE = 0x00
BIND_OPCODE_SET_DYLIB_ORDINAL_IMM = 0x10
BIND_OPCODE_SET_DYLIB_ORDINAL_ULEB = 0x20
BIND_OPCODE_SET_DYLIB_SPECIAL_IMM = 0x30
BIND_OPCODE_SET_SYMBOL_TRAILING_FLAGS_IMM = 0x40
BIND_OPCODE_SET_TYPE_IMM = 0x50
BIND_OPCODE_SET_ADDEND_SLEB = 0x60
BIND_OPCODE_SET_SEGMENT_AND_OFFSET_ULEB = 0x70
BIND_OPCODE_ADD_ADDR_ULEB = 0x80
BIND_OPCODE_DO_BIND = 0x90
BIND_OPCODE_DO_BIND_ADD_ADDR_ULEB = 0xA0
BIND_OPCODE_DO_BIND_ADD_ADDR_IMM_SCALED = 0xB0
BIND_OPCODE_DO_BIND_ULEB_TIMES_SKIPPING_ULEB = 0xC0

POINTER_SIZE = 8
_U64_MASK = (1 << 64) - 1


class BindError(ValueError):
    """Raised on a malformed bind stream."""


@dataclass(frozen=True)
class Segment:
    """Virtual address and size of a segment."""

    vmaddr: int
    vmsize: int


@dataclass(frozen=True)
class BindRecord:
    """One symbol bound at one address.

    ``library_ordinal`` is negative for the special ordinals.
    """

    address: int
    type: int
    symbol_name: str
    symbol_flags: int
    addend: int
    library_ordinal: int


def read_uleb128(data: bytes, pos: int) -> tuple[int, int]:
    """Decode an unsigned LEB128 at ``pos``; returns ``(value, next_pos)``."""
    result = 0
    bit = 0
    while True:
        if pos >= len(data):
            raise BindError("malformed uleb128")
        byte = data[pos]
        pos += 1
        if bit <= 63:
            result |= ((byte & 0x7F) << bit) & _U64_MASK
            bit += 7
        if not byte & 0x80:
            return result, pos


def read_sleb128(data: bytes, pos: int) -> tuple[int, int]:
    """Decode a signed LEB128 at ``pos``; returns ``(value, next_pos)``."""
    result = 0
    bit = 0
    while True:
        if pos >= len(data):
            raise BindError("malformed sleb128")
        byte = data[pos]
        pos += 1
        result |= (byte & 0x7F) << bit
        bit += 7
        if not byte & 0x80:
            break
    if byte & 0x40:
        result |= -1 << bit
    return result, pos


def iter_binds(
    data: bytes,
    segments: Sequence[Segment],
    bind_off: int,
    bind_size: int,
) -> Iterator[BindRecord]:
    """Yield every bind described by the bind opcodes at ``bind_off``.

    Raises BindError when the stream is malformed or a bind falls past the
    end of its segment.
    """
    stream = bytes(data[bind_off:bind_off + bind_size])
    pos = 0
    library_ordinal = 0
    symbol_name = ""
    symbol_flags = 0
    bind_type = 0
    addend = 0
    address = 0
    segment_end = 0

    def record() -> BindRecord:
        if address >= segment_end:
            raise BindError(f"bind address 0x{address:x} exceeds segment range")
        return BindRecord(address, bind_type, symbol_name, symbol_flags, addend, library_ordinal)

    while pos < len(stream):
        immediate = stream[pos] & BIND_IMMEDIATE_MASK
        opcode = stream[pos] & BIND_OPCODE_MASK
        pos += 1

        if opcode == BIND_OPCODE_DONE:
            return
        if opcode == BIND_OPCODE_SET_DYLIB_ORDINAL_IMM:
            library_ordinal = immediate
        elif opcode == BIND_OPCODE_SET_DYLIB_ORDINAL_ULEB:
            library_ordinal, pos = read_uleb128(stream, pos)
        elif opcode == BIND_OPCODE_SET_DYLIB_SPECIAL_IMM:
            library_ordinal = 0 if immediate == 0 else (BIND_OPCODE_MASK | immediate) - 0x100
        elif opcode == BIND_OPCODE_SET_SYMBOL_TRAILING_FLAGS_IMM:
            end = stream.find(b"\0", pos)
            if end < 0:
                raise BindError("unterminated symbol name")
            symbol_name = stream[pos:end].decode("utf-8", errors="replace")
            symbol_flags = immediate
            pos = end + 1
        elif opcode == BIND_OPCODE_SET_TYPE_IMM:
            bind_type = immediate
        elif opcode == BIND_OPCODE_SET_ADDEND_SLEB:
            addend, pos = read_sleb128(stream, pos)
        elif opcode == BIND_OPCODE_SET_SEGMENT_AND_OFFSET_ULEB:
            if immediate >= len(segments):
                raise BindError(
                    f"segment {immediate} out of range (0..{len(segments) - 1})"
                )
            offset, pos = read_uleb128(stream, pos)
            segment = segments[immediate]
            address = (segment.vmaddr + offset) & _U64_MASK
            segment_end = address + segment.vmsize
        elif opcode == BIND_OPCODE_ADD_ADDR_ULEB:
            offset, pos = read_uleb128(stream, pos)
            address = (address + offset) & _U64_MASK
        elif opcode == BIND_OPCODE_DO_BIND:
            yield record()
            address = (address + POINTER_SIZE) & _U64_MASK
        elif opcode == BIND_OPCODE_DO_BIND_ADD_ADDR_ULEB:
            yield record()
            offset, pos = read_uleb128(stream, pos)
            address = (address + offset + POINTER_SIZE) & _U64_MASK
        elif opcode == BIND_OPCODE_DO_BIND_ADD_ADDR_IMM_SCALED:
            yield record()
            address = (address + immediate * POINTER_SIZE + POINTER_SIZE) & _U64_MASK
        elif opcode == BIND_OPCODE_DO_BIND_ULEB_TIMES_SKIPPING_ULEB:
            count, pos = read_uleb128(stream, pos)
            skip, pos = read_uleb128(stream, pos)
            for _ in range(count):
                yield record()
                address = (address + skip + POINTER_SIZE) & _U64_MASK