"""Generator of a JSON report of Objective-C message-send cross references."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

from iblessing.generator import Generator, GeneratorError
from iblessing.ida_xref import ChainLoader
from iblessing.method_chain import MethodChain

log = logging.getLogger(__name__)

REPORT_SUFFIX = "_objc_msg_xrefs.iblessing.json"
REPORT_VERSION = "0.2"
UNPRINTABLE_SELECTOR = "<<unprintable>>"
_PRINTABLE_SCAN_LIMIT = 1000


def _count_unprintable(text: str, limit: int = _PRINTABLE_SCAN_LIMIT) -> int:
    """Number of characters outside printable ASCII among the first ``limit``."""
    return sum(1 for ch in text[:limit] if not " " <= ch <= "~")


def _leading_int(text: str) -> int:
    """Leading integer of ``text``, or 0 when it has none."""
    text = text.lstrip()
    sign = -1 if text[:1] == "-" else 1
    if text[:1] in ("+", "-"):
        text = text[1:]
    digits = ""
    for ch in text:
        if not ch.isdigit():
            break
        digits += ch
    return sign * int(digits) if digits else 0


def _method_refs(refs: Iterable[tuple[MethodChain, int]]) -> list[dict[str, Any]]:
    ordered = sorted(
        (ref for ref in refs if ref[0] is not None),
        key=lambda ref: (ref[0].chain_id, ref[1]),
    )
    return [{"id": chain.chain_id, "addr": f"0x{addr:x}"} for chain, addr in ordered]


def build_report(
    chains: Mapping[str, MethodChain], filter_unprintable: bool = True
) -> tuple[dict[str, Any], int]:
    """Report document for ``chains`` and the number of selectors filtered.

    Methods appear in order of chain id. With ``filter_unprintable`` a
    selector holding non-printable characters is replaced by a placeholder.
    """
    filtered = 0
    methods: list[dict[str, Any]] = []
    for sel, chain in sorted(chains.items(), key=lambda item: item[1].chain_id):
        if filter_unprintable and _count_unprintable(sel) > 0:
            sel = UNPRINTABLE_SELECTOR
            filtered += 1
        methods.append(
            {
                "id": chain.chain_id,
                "sel": sel,
                "imp": f"0x{chain.imp_addr:x}",
                "preMethods": _method_refs(chain.prev_methods),
                "postMethods": _method_refs(chain.next_methods),
            }
        )
    return {"version": REPORT_VERSION, "methods": methods}, filtered


class ObjcMsgXREFReportGenerator(Generator):
    """Writes the message-send xrefs of a method chain report as JSON.

    The ``unprintable`` option set to a number below 1 keeps unprintable
    selectors as they are.
    """

    def __init__(self, identifier: str, desc: str, chain_loader: ChainLoader) -> None:
        super().__init__(identifier, desc)
        self.chain_loader = chain_loader
        self.sel2chain: dict[str, MethodChain] = {}

    def start(self) -> Path:
        """Load the chains, write the JSON report and return its path."""
        log.info("start ObjcMsgXREFReportGenerator")
        filter_unprintable = True
        if "unprintable" in self.options:
            filter_unprintable = _leading_int(self.options["unprintable"]) >= 1

        self.sel2chain = dict(self.chain_loader(self.input_path))
        if not self.sel2chain:
            raise GeneratorError(f"failed to parse {self.input_path}")
        log.info("load storage from disk succeeded")

        report, filtered = build_report(self.sel2chain, filter_unprintable)
        text = json.dumps(report, separators=(",", ":"), ensure_ascii=False)
        path = self._write(self._output_file(REPORT_SUFFIX), text)
        if filtered:
            log.info("filter %d unprintable method expr(s)", filtered)
        return path