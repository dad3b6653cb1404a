"""Tracking of wrapper functions that forward calls with shuffled registers."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Callable

GENERAL_REGISTER_COUNT = 31

_ALIASES = {"fp": 29, "lr": 30}


@dataclass
class FunctionPrototype:
    """Return and argument types of a function."""

    n_args: int = 0
    variadic: bool = False
    return_type: str = ""
    arg_types: list[str] = field(default_factory=list)


@dataclass
class AntiWrapperArgs:
    """Values of x0..x30 passed into a wrapper, and how many are arguments."""

    x: list[int] = field(default_factory=lambda: [0] * GENERAL_REGISTER_COUNT)
    n_args: int = 0

    def __post_init__(self) -> None:
        if len(self.x) != GENERAL_REGISTER_COUNT:
            raise ValueError(f"expected {GENERAL_REGISTER_COUNT} register values, got {len(self.x)}")

    def copy(self) -> AntiWrapperArgs:
        return AntiWrapperArgs(list(self.x), self.n_args)


def _register_index(reg: str) -> int | None:
    """Index 0..30 of a 64-bit general register name, or None."""
    name = reg.strip().lower()
    if name in _ALIASES:
        return _ALIASES[name]
    if name.startswith("x") and name[1:].isdigit():
        index = int(name[1:])
        if 0 <= index < GENERAL_REGISTER_COUNT:
            return index
    return None


@dataclass(eq=False)
class RegLink:
    """A register and the register its value was moved from."""

    active: bool = False
    current: int | None = None
    source: RegLink | None = None

    def root_source(self) -> RegLink:
        """Follow the ``source`` links back to where the value started."""
        cur = self
        while cur.source is not None and cur.source is not self:
            cur = cur.source
        return copy.copy(cur)

    def ida_expr(self) -> str:
        """Register name as IDA writes it, e.g. ``x3``."""
        if self.current is None or not 0 <= self.current < GENERAL_REGISTER_COUNT:
            raise ValueError(f"not a general register: {self.current!r}")
        return f"x{self.current}"


class RegLinkGraph:
    """Links between the general registers x0..x30."""

    def __init__(self) -> None:
        self.x: list[RegLink] = [RegLink(current=i) for i in range(GENERAL_REGISTER_COUNT)]

    def link_for(self, reg: str) -> RegLink | None:
        """The link of a general register, or None for other registers."""
        index = _register_index(reg)
        if index is None:
            return None
        link = self.x[index]
        link.current = index
        return link

    def create_link(self, src: str, dst: str) -> bool:
        """Record that ``src`` takes its value from ``dst``."""
        src_link = self.link_for(src)
        dst_link = self.link_for(dst)
        if src_link is None or dst_link is None:
            return False
        src_link.active = True
        dst_link.active = True
        src_link.source = dst_link
        return True


Transformer = Callable[["AntiWrapperBlock", AntiWrapperArgs], AntiWrapperArgs]


@dataclass
class AntiWrapperBlock:
    """A wrapper function and how it rewrites the arguments it forwards."""

    start_addr: int
    end_addr: int = 0
    symbol_name: str = ""
    transformer: Transformer | None = None
    reg_link_graph: RegLinkGraph = field(default_factory=RegLinkGraph)


class AntiWrapper:
    """Registry of known wrapper functions keyed by start address."""

    def __init__(self) -> None:
        self.simple_wrapper_map: dict[int, AntiWrapperBlock] = {}

    def set_simple_wrapper(self, block: AntiWrapperBlock) -> None:
        self.simple_wrapper_map[block.start_addr] = block

    def is_wrapped_call(self, addr: int) -> bool:
        return addr in self.simple_wrapper_map

    def perform_wrapper_transform(self, addr: int, args: AntiWrapperArgs) -> AntiWrapperArgs:
        """Apply the wrapper at ``addr`` to a copy of ``args``."""
        block = self.simple_wrapper_map.get(addr)
        if block is None:
            raise KeyError(f"no wrapper at 0x{addr:x}")
        if block.transformer is None:
            raise ValueError(f"wrapper at 0x{addr:x} has no transformer")
        return block.transformer(block, args.copy())