"""Generator of IDA scripts that add cross references for message sends."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Mapping

from iblessing.generator import Generator, GeneratorError
from iblessing.method_chain import MethodChain

log = logging.getLogger(__name__)

IMPORT_SYMBOL_CLASS = "iblessing_ImportSymbol"
SCRIPT_SUFFIX = "_ida_objc_msg_xrefs.iblessing.py"

ChainLoader = Callable[[str], Mapping[str, MethodChain]]


def render_xref_script(chains: Mapping[str, MethodChain]) -> str:
    """IDA script adding a code xref from every caller to every callee.

    Imported symbols and methods without an implementation are left out,
    since IDA builds those references itself. A caller address of 0 stands
    for the caller's own implementation address.
    """
    parts = ["def add_objc_xrefs():"]
    for _, current in sorted(chains.items(), key=lambda item: item[0]):
        if current.imp_addr == 0 or current.class_name == IMPORT_SYMBOL_CLASS:
            continue
        refs = sorted(current.prev_methods, key=lambda ref: (ref[0].chain_id, ref[1]))
        for prev, caller_addr in refs:
            if prev.class_name == IMPORT_SYMBOL_CLASS:
                continue
            caller = caller_addr or prev.imp_addr
            parts.append(
                f"\n    ida_xref.add_cref(0x{caller:x}, 0x{current.imp_addr:x}, XREF_USER)"
            )
    parts.append("\n\nif __name__ == '__main__':\n")
    parts.append("    add_objc_xrefs()\n")
    return "".join(parts)


class IDAObjcMsgXREFGenerator(Generator):
    """Writes an IDA script of message-send xrefs from a method chain report."""

    def __init__(self, identifier: str, desc: str, chain_loader: ChainLoader) -> None:
        super().__init__(identifier, desc)
        self.chain_loader = chain_loader
        self.sel2chain: dict[str, MethodChain] = {}

    def start(self) -> Path:
        """Load the chains, write the script and return its path."""
        log.info("start IDAObjcMsgXREFGenerator")
        self.sel2chain = dict(self.chain_loader(self.input_path))
        if not self.sel2chain:
            raise GeneratorError(f"failed to parse {self.input_path}")
        log.info("load storage from disk succeeded")
        log.info("generating xref scripts")
        return self._write(self._output_file(SCRIPT_SUFFIX), render_xref_script(self.sel2chain))