"""Decoding of Objective-C type-encoding signatures."""

from __future__ import annotations

_PRIMARY_CHARS = frozenset("cislqCISLQfdBv")
_POINTER_CHARS = frozenset("*#:")
_BRACKETS = {"[": "}", "{": "}", "(": ")"}
_MAX_STALLS = 100

_PRIMARY_TYPES = {
    "c": "char",
    "i": "int",
    "s": "short",
    "l": "long",
    "q": "long long",
    "C": "unsigned char",
    "I": "unsigned int",
    "S": "unsigned short",
    "L": "unsigned long",
    "Q": "unsigned long long",
    "f": "float",
    "d": "double",
    "B": "bool",
    "v": "void",
    "*": "char *",
}


class SignatureError(ValueError):
    """Raised when a signature cannot be decoded."""


def arguments_from_signature(signature: str) -> list[str]:
    """Split a method or block signature into its type encodings.

    Offsets and sizes are dropped; object types carry their class name
    (``@NSString``), blocks become ``@?`` and bare objects ``id``.
    """
    args: list[str] = []
    length = len(signature)
    i = 0
    stalls = 0
    while i < length:
        last_index = i
        c = signature[i]

        if c in _PRIMARY_CHARS:
            args.append(c)
            i += 1

        if c in _POINTER_CHARS:
            args.append(c)
            i += 1
        elif c == "^":
            start = i
            while i < length and not signature[i].isdigit():
                i += 1
            args.append(signature[start:i])
        elif c in _BRACKETS:
            begin, end = c, _BRACKETS[c]
            depth = 1
            start = i
            i += 1
            while depth and i < length:
                ch = signature[i]
                if ch == begin:
                    depth += 1
                elif ch == end:
                    depth -= 1
                i += 1
            args.append(signature[start:i])

        if c == "@":
            nxt = signature[i + 1] if i < length - 1 else ""
            if nxt == '"':
                i += 2
                start = i
                while i < length and signature[i] != '"':
                    i += 1
                args.append("@" + signature[start:i])
                i += 1
            elif nxt == "?":
                args.append("@?")
                i += 2
            else:
                args.append("id")
                i += 1

        while i < length and not signature[i].isdigit():
            i += 1
        while i < length and signature[i].isdigit():
            i += 1

        if i == last_index:
            stalls += 1
            if stalls > _MAX_STALLS:
                raise SignatureError(f"cannot make progress decoding signature {signature!r}")
        else:
            stalls = 0

    return args


def resolve_type_encoding(type_encoding: str) -> str:
    """C type name for a primary type encoding, or ``""`` when unknown."""
    return _PRIMARY_TYPES.get(type_encoding, "")