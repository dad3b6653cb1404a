"""Statistics over one method chain report, or the difference of two."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping

from iblessing.generator import Generator, GeneratorError
from iblessing.ida_xref import ChainLoader
from iblessing.method_chain import MethodChain

log = logging.getLogger(__name__)


@dataclass
class ChainDiff:
    """Difference between a current and an older set of method chains.

    ``changes`` holds ``(chain, delta_pre, delta_post)`` for each method
    whose reference counts differ, deltas being current minus older.
    """

    changes: list[tuple[MethodChain, int, int]] = field(default_factory=list)
    new_methods: dict[str, MethodChain] = field(default_factory=dict)
    missing_methods: dict[str, MethodChain] = field(default_factory=dict)
    current_refs: tuple[int, int] = (0, 0)
    other_refs: tuple[int, int] = (0, 0)


def build_common_chains(chains: Mapping[str, MethodChain]) -> dict[str, MethodChain]:
    """Re-key ``chains`` by their compare keys; a later key wins on a clash."""
    return {chain.compare_key(): chain for _, chain in sorted(chains.items(), key=lambda i: i[0])}


def count_refs(chains: Mapping[str, MethodChain]) -> tuple[int, int]:
    """Total numbers of pre-references and post-references."""
    pre = sum(len(chain.prev_methods) for chain in chains.values())
    post = sum(len(chain.next_methods) for chain in chains.values())
    return pre, post


def diff_chains(
    current: Mapping[str, MethodChain], other: Mapping[str, MethodChain]
) -> ChainDiff:
    """Compare two sets of chains matched by compare key."""
    current = build_common_chains(current)
    other = build_common_chains(other)
    diff = ChainDiff(current_refs=count_refs(current), other_refs=count_refs(other))
    for key in sorted(current):
        chain = current[key]
        differ = other.get(key)
        if differ is None:
            diff.new_methods[key] = chain
            continue
        delta_pre = len(chain.prev_methods) - len(differ.prev_methods)
        delta_post = len(chain.next_methods) - len(differ.next_methods)
        if delta_pre or delta_post:
            diff.changes.append((chain, delta_pre, delta_post))
    for key in sorted(other):
        if key not in current:
            diff.missing_methods[key] = other[key]
    return diff


def _arrow(delta: int, pad: str) -> str:
    if delta > 0:
        return pad + "↑"
    if delta < 0:
        return pad + "↓"
    return ""


def _render_diff(diff: ChainDiff) -> str:
    lines = [
        f"  [*] find {diff.current_refs[0]} pre-refs and {diff.current_refs[1]} "
        "post-refs in current chains",
        f"  [*] find {diff.other_refs[0]} pre-refs and {diff.other_refs[1]} "
        "post-refs in diff chains",
    ]
    if not diff.changes:
        lines.append("  [*] no pre-post xref count changes")
    else:
        lines.append("  [*] pre-post xref count changes:")
        lines.append("      SEL        Pre       Post")
        for chain, pre, post in diff.changes:
            lines.append(
                f"      {chain.common_desc()}{_arrow(pre, '        ')}{pre}    "
                f"{_arrow(post, '  ')}{post}"
            )
    lines.append("")
    if diff.new_methods:
        lines.append(f"  [*] find {len(diff.new_methods)} new methods")
    else:
        lines.append("  [*] no new methods")
    if diff.missing_methods:
        lines.append(f"  [*] find {len(diff.missing_methods)} missing methods")
    else:
        lines.append("  [*] no missing methods")
    return "\n".join(lines)


class ObjcMsgXREFStatisticsGenerator(Generator):
    """Prints reference counts of a report, or its difference to the ``diff`` report."""

    def __init__(self, identifier: str, desc: str, chain_loader: ChainLoader) -> None:
        super().__init__(identifier, desc)
        self.chain_loader = chain_loader
        self.totals: tuple[int, int] = (0, 0)
        self.diff: ChainDiff | None = None

    def start(self) -> None:
        """Compute the statistics and print them."""
        log.info("start ObjcMsgXREFStatisticsGenerator")
        other: dict[str, MethodChain] | None = None
        if "diff" in self.options:
            diff_path = self.options["diff"]
            log.info("diff with file at %s", diff_path)
            other = dict(self.chain_loader(diff_path))
            if not other:
                raise GeneratorError(f"failed to parse file {diff_path} to diff chains")

        current = dict(self.chain_loader(self.input_path))
        if not current:
            raise GeneratorError(f"failed to parse file {self.input_path} to current chains")

        if other is None:
            self.totals = count_refs(current)
            print(f"  [*] find {self.totals[0]} pre-refs and {self.totals[1]} post-refs")
            return None

        self.diff = diff_chains(current, other)
        self.totals = self.diff.current_refs
        print(_render_diff(self.diff))
        return None