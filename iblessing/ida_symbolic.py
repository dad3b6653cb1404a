"""Generator of IDA scripts that name functions from a symbol table listing."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping

from iblessing.generator import Generator, GeneratorError

log = logging.getLogger(__name__)

SCRIPT_SUFFIX = "_ida_symbolic.py"

_MODES = {"jtool2": ("|", 0, 1)}

_HEADER = (
    "# -*- coding: utf-8 -*-\n"
    "# Generated by iblessing\n\n"
    "import idc\n\n"
    "def ib_setname(addr, name):\n"
    "  orig_name = ida_name.get_name(addr)\n"
    "  if len(orig_name) == 0 or orig_name.startswith('sub_'):\n"
    "    idc.create_insn(addr)\n"
    "    ida_funcs.add_func(addr)\n"
    "    idc.set_name(addr, name, idc.SN_NOWARN)\n"
    "\n\n"
    "def ib_symbolic():\n"
)

_FOOTER = '\nif __name__ == "__main__":\n  ib_symbolic()\n\n'


@dataclass(frozen=True)
class SymbolLayout:
    """How a symbol table line splits into an address and a name."""

    delimiter: str
    addr_idx: int
    name_idx: int


def _atoi(text: str) -> int:
    """Leading integer of ``text``, or 0 when it has none."""
    text = text.lstrip()
    sign = 1
    if text[:1] in ("+", "-"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    digits = ""
    for ch in text:
        if not ch.isdigit():
            break
        digits += ch
    return sign * int(digits) if digits else 0


def resolve_layout(options: Mapping[str, str]) -> SymbolLayout:
    """Layout from a ``mode`` option, or from ``delimiter``, ``addrIdx`` and ``nameIdx``.

    A named mode takes precedence over the other options.
    """
    delimiter = ""
    addr_idx = name_idx = -1
    if "mode" in options:
        mode = options["mode"]
        if mode:
            if mode not in _MODES:
                raise GeneratorError(
                    f"invalid mode: {mode}, valid modes are: {', '.join(_MODES)}"
                )
            delimiter, addr_idx, name_idx = _MODES[mode]
            log.info(
                "setup %s mode, delimiter=%s, addrIdx=%d, nameIdx=%d",
                mode, delimiter, addr_idx, name_idx,
            )
    else:
        if "addrIdx" in options:
            addr_idx = _atoi(options["addrIdx"])
        if "nameIdx" in options:
            name_idx = _atoi(options["nameIdx"])
        if "delimiter" in options:
            delimiter = options["delimiter"][:1]

    if not delimiter or addr_idx < 0 or name_idx < 0:
        raise GeneratorError(
            f"invalid input, check delimiter {delimiter!r}, addrIdx {addr_idx}, nameIdx {name_idx}"
        )
    return SymbolLayout(delimiter, addr_idx, name_idx)


def render_symbolic_script(lines: Iterable[str], layout: SymbolLayout) -> str:
    """IDA script naming every address listed in ``lines``.

    Lines with too few fields are skipped.
    """
    max_idx = max(layout.addr_idx, layout.name_idx)
    parts = [_HEADER]
    for line in lines:
        line = line.rstrip("\n")
        fields = line.split(layout.delimiter)
        if max_idx >= len(fields):
            log.warning("bad line %s", line)
            continue
        name = fields[layout.name_idx]
        addr = fields[layout.addr_idx]
        parts.append(f'  ib_setname({addr},"{name}")\n')
    parts.append(_FOOTER)
    return "".join(parts)


class IDASymbolicScriptGenerator(Generator):
    """Writes an IDA script naming functions from a symbol table file."""

    def start(self) -> Path:
        """Read the symbol table, write the script and return its path."""
        log.info("start IDASymbolicScriptGenerator")
        layout = resolve_layout(self.options)
        log.info(
            "using delimiter=%s, addrIdx=%d, nameIdx=%d",
            layout.delimiter, layout.addr_idx, layout.name_idx,
        )
        try:
            with open(self.input_path, encoding="utf-8", errors="replace", newline="") as file:
                script = render_symbolic_script(file, layout)
        except OSError as exc:
            raise GeneratorError(f"cannot open input file {self.input_path}") from exc
        return self._write(self._output_file(SCRIPT_SUFFIX), script)