import pytest

from iblessing.generator import GeneratorError
from iblessing.ida_xref import IDAObjcMsgXREFGenerator, render_xref_script
from iblessing.method_chain import MethodChain

EMPTY_SCRIPT = "def add_objc_xrefs():\n\nif __name__ == '__main__':\n    add_objc_xrefs()\n"


def _linked(caller_addr):
    callee = MethodChain(0x2000, "-", "Callee", "run")
    caller = MethodChain(0x1000, "-", "Caller", "go")
    callee.prev_methods.add((caller, caller_addr))
    caller.next_methods.add((callee, caller_addr))
    return {"-[Callee run]": callee, "-[Caller go]": caller}


def test_xref_uses_caller_address():
    script = render_xref_script(_linked(0x1500))
    assert "\n    ida_xref.add_cref(0x1500, 0x2000, XREF_USER)" in script


def test_zero_caller_address_falls_back_to_imp():
    script = render_xref_script(_linked(0))
    assert "ida_xref.add_cref(0x1000, 0x2000, XREF_USER)" in script


def test_script_frame():
    script = render_xref_script(_linked(0x1500))
    assert script.startswith("def add_objc_xrefs():")
    assert script.endswith("\n\nif __name__ == '__main__':\n    add_objc_xrefs()\n")
    assert script.count("add_cref") == 1


def test_import_symbols_and_missing_imp_are_skipped():
    imported = MethodChain(0x3000, "+", "iblessing_ImportSymbol", "objc_msgSend")
    no_imp = MethodChain(0, "-", "A", "b")
    caller = MethodChain(0x1000, "-", "Caller", "go")
    imported.prev_methods.add((caller, 0x1100))
    no_imp.prev_methods.add((caller, 0x1200))
    target = MethodChain(0x4000, "-", "T", "t")
    target.prev_methods.add((imported, 0x1300))
    chains = {"a": imported, "b": no_imp, "c": caller, "d": target}
    assert render_xref_script(chains) == EMPTY_SCRIPT


def test_start_writes_script(tmp_path):
    chains = _linked(0x1500)
    seen = []

    def loader(path):
        seen.append(path)
        return chains

    g = IDAObjcMsgXREFGenerator("ida-objc-msg-xref", "desc", loader)
    g.input_path = "/data/report.txt"
    g.output_path = str(tmp_path)
    g.file_name = "App"
    path = g.start()
    assert seen == ["/data/report.txt"]
    assert path == tmp_path / "App_ida_objc_msg_xrefs.iblessing.py"
    assert path.read_text(encoding="utf-8") == render_xref_script(chains)


def test_start_fails_on_empty_report(tmp_path):
    g = IDAObjcMsgXREFGenerator("ida-objc-msg-xref", "desc", lambda path: {})
    g.output_path = str(tmp_path)
    g.file_name = "App"
    with pytest.raises(GeneratorError):
        g.start()
    assert list(tmp_path.iterdir()) == []