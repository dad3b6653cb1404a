"""Generator of IDA scripts that name and type detected symbol wrappers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Sequence

from iblessing.generator import Generator, GeneratorError

log = logging.getLogger(__name__)

SCRIPT_SUFFIX = "_ida_symbol_wrapper_naming.iblessing.py"


@dataclass
class SymbolWrapperInfo:
    """A wrapper function: its new name, C prototype and address."""

    name: str
    prototype: str
    address: int


WrapperLoader = Callable[[str], Sequence[SymbolWrapperInfo]]


def render_naming_script(infos: Iterable[SymbolWrapperInfo]) -> str:
    """IDA script renaming each wrapper and applying its prototype."""
    parts = ["def namingWrappers():"]
    for info in infos:
        parts.append(f"\n    idc.set_name(0x{info.address:x}, '{info.name}', ida_name.SN_FORCE)")
        parts.append(
            f"\n    idc.apply_type(0x{info.address:x}, "
            f"idc.parse_decl('{info.prototype}', idc.PT_SILENT))"
        )
    parts.append("\n\nif __name__ == '__main__':\n")
    parts.append("    namingWrappers()\n")
    return "".join(parts)


class IDASymbolWrapperNamingScriptGenerator(Generator):
    """Writes an IDA naming script from a symbol wrapper report."""

    def __init__(self, identifier: str, desc: str, wrapper_loader: WrapperLoader) -> None:
        super().__init__(identifier, desc)
        self.wrapper_loader = wrapper_loader

    def start(self) -> Path:
        """Load the wrappers, write the script and return its path."""
        log.info("start IDASymbolWrapperNamingScriptGenerator")
        infos = list(self.wrapper_loader(self.input_path))
        if not infos:
            raise GeneratorError(f"failed to parse {self.input_path}")
        log.info("generating naming scripts")
        return self._write(self._output_file(SCRIPT_SUFFIX), render_naming_script(infos))