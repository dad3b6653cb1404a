"""Registry of generators, looked up and started by identifier."""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, Mapping

from iblessing.generator import Generator, GeneratorError
from iblessing.ida_symbol_wrapper import IDASymbolWrapperNamingScriptGenerator, WrapperLoader
from iblessing.ida_symbolic import IDASymbolicScriptGenerator
from iblessing.ida_xref import ChainLoader, IDAObjcMsgXREFGenerator
from iblessing.xref_report import ObjcMsgXREFReportGenerator
from iblessing.xref_statistics import ObjcMsgXREFStatisticsGenerator

log = logging.getLogger(__name__)

GeneratorProvider = Callable[[], Generator]


def _missing_loader(kind: str) -> Callable[[str], Any]:
    def load(path: str) -> Any:
        raise GeneratorError(f"no {kind} loader configured to read {path}")

    return load


class GeneratorDispatcher:
    """Creates generators by identifier, binds their inputs and runs them."""

    def __init__(
        self,
        chain_loader: ChainLoader | None = None,
        wrapper_loader: WrapperLoader | None = None,
    ) -> None:
        chains = chain_loader or _missing_loader("method chain")
        wrappers = wrapper_loader or _missing_loader("symbol wrapper")
        self._generators: dict[str, GeneratorProvider] = {}

        self.register_generator(
            "ida-objc-msg-xref",
            lambda: IDAObjcMsgXREFGenerator(
                "ida-objc-msg-xref",
                "generator ida scripts to add objc_msgSend xrefs from objc-msg-xref scanner's report",
                chains,
            ),
        )
        self.register_generator(
            "objc-msg-xref-json",
            lambda: ObjcMsgXREFReportGenerator(
                "objc-msg-xref-json", "generate objc msg xref report in json format", chains
            ),
        )
        self.register_generator(
            "objc-msg-xref-statistic",
            lambda: ObjcMsgXREFStatisticsGenerator(
                "objc-msg-xref-statistic", "statistics among objc-msg-send reports", chains
            ),
        )
        self.register_generator(
            "ida-symbol-wrapper-naming",
            lambda: IDASymbolWrapperNamingScriptGenerator(
                "ida-symbol-wrapper-naming",
                "generate ida symbol naming and prototype changing script from symbol-wrapper's report",
                wrappers,
            ),
        )
        self.register_generator(
            "ida-symbolic",
            lambda: IDASymbolicScriptGenerator(
                "ida-symbolic", "generate ida symbolic script from symbol table file"
            ),
        )

    def register_generator(self, generator_id: str, provider: GeneratorProvider) -> None:
        """Register ``provider`` under ``generator_id``, replacing any earlier one."""
        self._generators[generator_id] = provider

    def all_generators(self) -> list[Generator]:
        """A fresh instance of every generator, ordered by identifier."""
        return [self._generators[key]() for key in sorted(self._generators)]

    def prepare(
        self,
        generator_id: str,
        options: Mapping[str, str],
        input_path: str,
        output_path: str,
    ) -> Generator:
        """Create the generator ``generator_id`` bound to the given inputs."""
        if not os.path.exists(input_path):
            log.error("input file %s not exist", input_path)
        provider = self._generators.get(generator_id)
        if provider is None:
            raise GeneratorError(f"cannot find generator {generator_id}")
        generator = provider()
        generator.input_path = input_path
        generator.file_name = input_path.split("/")[-1]
        generator.output_path = output_path
        generator.options = dict(options)
        return generator

    def start(
        self,
        generator_id: str,
        options: Mapping[str, str],
        input_path: str,
        output_path: str,
    ) -> Any:
        """Prepare and run a generator, returning what it produced."""
        return self.prepare(generator_id, options, input_path, output_path).start()