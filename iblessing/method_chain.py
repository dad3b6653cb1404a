"""Objective-C method calls and the call chains that link methods together."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, ClassVar

_ANONYMOUS_CLASS = "0xcafecafecafecafe"


@dataclass
class MethodCallArg:
    """One argument recorded for an Objective-C message send."""

    type_encoding: str
    type_name: str
    value: str
    is_primary_type: bool = False
    resolved: bool = False

    def _order_key(self) -> tuple[str, str]:
        return (self.type_name, self.value)

    def __lt__(self, other: MethodCallArg) -> bool:
        return self._order_key() < other._order_key()


@dataclass
class MethodCall:
    """A message send to a method together with its arguments."""

    method: Any
    args: list[MethodCallArg] = field(default_factory=list)

    def __lt__(self, other: MethodCall) -> bool:
        mine = [arg._order_key() for arg in self.args]
        theirs = [arg._order_key() for arg in other.args]
        return mine < theirs


class MethodChain:
    """A method with the sets of methods that call it and that it calls.

    ``prev_methods`` and ``next_methods`` hold ``(chain, caller_address)``
    pairs. Every chain receives a unique, increasing ``chain_id``.
    """

    _id_counter: ClassVar[itertools.count] = itertools.count(1)

    def __init__(
        self,
        imp_addr: int = 0,
        prefix: str = "",
        class_name: str = "",
        method_name: str = "",
    ) -> None:
        self.chain_id: int = next(MethodChain._id_counter)
        self.imp_addr = imp_addr
        self.prefix = prefix
        self.class_name = class_name
        self.method_name = method_name
        self.prev_methods: set[tuple[MethodChain, int]] = set()
        self.next_methods: set[tuple[MethodChain, int]] = set()

    def common_desc(self) -> str:
        """Human readable form, e.g. ``-[Class sel] (0x1000)``."""
        return f"{self.prefix}[{self.class_name} {self.method_name}] (0x{self.imp_addr:x})"

    def compare_key(self) -> str:
        """Key used to match the same method across two analyses."""
        class_name = _ANONYMOUS_CLASS if self.class_name.rfind("0x") == 0 else self.class_name
        return f"{self.prefix}[{class_name} {self.method_name}]"

    def __lt__(self, other: MethodChain) -> bool:
        return self.common_desc() < other.common_desc()

    def __repr__(self) -> str:
        return f"MethodChain(id={self.chain_id}, {self.common_desc()})"