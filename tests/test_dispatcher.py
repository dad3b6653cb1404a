import pytest

from iblessing.dispatcher import GeneratorDispatcher
from iblessing.generator import Generator, GeneratorError
from iblessing.ida_symbolic import IDASymbolicScriptGenerator
from iblessing.method_chain import MethodChain


def test_all_generators_sorted_by_identifier():
    ids = [g.identifier for g in GeneratorDispatcher().all_generators()]
    assert ids == sorted(ids)
    assert set(ids) == {
        "ida-objc-msg-xref",
        "objc-msg-xref-json",
        "objc-msg-xref-statistic",
        "ida-symbol-wrapper-naming",
        "ida-symbolic",
    }


def test_prepare_binds_inputs(tmp_path):
    dispatcher = GeneratorDispatcher()
    gen = dispatcher.prepare("ida-symbolic", {"mode": "jtool2"}, "dir/sub/table.txt", str(tmp_path))
    assert isinstance(gen, IDASymbolicScriptGenerator)
    assert gen.file_name == "table.txt"
    assert gen.input_path == "dir/sub/table.txt"
    assert gen.output_path == str(tmp_path)
    assert gen.options == {"mode": "jtool2"}


def test_unknown_generator_raises(tmp_path):
    with pytest.raises(GeneratorError):
        GeneratorDispatcher().start("nope", {}, str(tmp_path / "x"), str(tmp_path))


def test_start_runs_symbolic_generator(tmp_path):
    table = tmp_path / "symbols.txt"
    table.write_text("0x1000|_main\n", encoding="utf-8")
    path = GeneratorDispatcher().start("ida-symbolic", {"mode": "jtool2"}, str(table), str(tmp_path))
    assert path.name == "symbols.txt_ida_symbolic.py"
    assert 'ib_setname(0x1000,"_main")' in path.read_text(encoding="utf-8")


def test_chain_loader_is_passed_through(tmp_path):
    chain = MethodChain(0x10, "-", "A", "a")
    seen = []

    def loader(path):
        seen.append(path)
        return {"a": chain}

    dispatcher = GeneratorDispatcher(chain_loader=loader)
    source = str(tmp_path / "report.chain")
    path = dispatcher.start("objc-msg-xref-json", {}, source, str(tmp_path))
    assert seen == [source]
    assert path.name.startswith("report.chain")


def test_missing_loader_raises(tmp_path):
    with pytest.raises(GeneratorError):
        GeneratorDispatcher().start("ida-objc-msg-xref", {}, str(tmp_path / "x"), str(tmp_path))


def test_register_generator_replaces_provider():
    dispatcher = GeneratorDispatcher()
    dispatcher.register_generator("ida-symbolic", lambda: Generator("custom", "d"))
    gen = dispatcher.prepare("ida-symbolic", {}, "a/b", "out")
    assert gen.identifier == "custom"
    assert gen.start() is None