import pytest

from iblessing.generator import GeneratorError
from iblessing.ida_symbolic import (
    IDASymbolicScriptGenerator,
    SymbolLayout,
    render_symbolic_script,
    resolve_layout,
)

JTOOL2 = SymbolLayout("|", 0, 1)


def test_jtool2_mode():
    assert resolve_layout({"mode": "jtool2"}) == JTOOL2


def test_mode_overrides_other_options():
    options = {"mode": "jtool2", "delimiter": ",", "addrIdx": "3", "nameIdx": "4"}
    assert resolve_layout(options) == JTOOL2


def test_custom_layout():
    layout = resolve_layout({"delimiter": ",;", "addrIdx": "2", "nameIdx": "0"})
    assert layout == SymbolLayout(",", 2, 0)


def test_non_numeric_index_reads_as_zero():
    layout = resolve_layout({"delimiter": " ", "addrIdx": "abc", "nameIdx": "1"})
    assert layout.addr_idx == 0


@pytest.mark.parametrize(
    "options",
    [
        {"mode": "nm"},
        {"mode": ""},
        {},
        {"delimiter": "|", "addrIdx": "0"},
        {"delimiter": "", "addrIdx": "0", "nameIdx": "1"},
        {"delimiter": "|", "addrIdx": "-1", "nameIdx": "1"},
    ],
)
def test_invalid_options(options):
    with pytest.raises(GeneratorError):
        resolve_layout(options)


def test_render_lines():
    script = render_symbolic_script(["0x100004000|_main\n", "0x100004100|_helper"], JTOOL2)
    assert '  ib_setname(0x100004000,"_main")\n' in script
    assert '  ib_setname(0x100004100,"_helper")\n' in script
    assert script.index("_main") < script.index("_helper")


def test_render_frame():
    script = render_symbolic_script([], JTOOL2)
    assert script.startswith("# -*- coding: utf-8 -*-\n")
    assert "import idc\n\n" in script
    assert "def ib_symbolic():\n" in script
    assert script.endswith('\nif __name__ == "__main__":\n  ib_symbolic()\n\n')


def test_bad_lines_are_skipped():
    script = render_symbolic_script(["no-delimiter-here", "", "0x10|_ok"], JTOOL2)
    assert script.count("  ib_setname(") == 1
    assert "no-delimiter-here" not in script


def _generator(tmp_path, input_path, options):
    g = IDASymbolicScriptGenerator("ida-symbolic", "desc")
    g.input_path = str(input_path)
    g.output_path = str(tmp_path)
    g.file_name = "symbols.txt"
    g.options = options
    return g


def test_start_writes_script(tmp_path):
    table = tmp_path / "symbols.txt"
    table.write_text("0x100004000|_main\n0x100004100|_helper\n", encoding="utf-8")
    path = _generator(tmp_path, table, {"mode": "jtool2"}).start()
    assert path == tmp_path / "symbols.txt_ida_symbolic.py"
    expected = render_symbolic_script(["0x100004000|_main", "0x100004100|_helper"], JTOOL2)
    assert path.read_text(encoding="utf-8") == expected


def test_start_fails_on_missing_input(tmp_path):
    g = _generator(tmp_path, tmp_path / "absent.txt", {"mode": "jtool2"})
    with pytest.raises(GeneratorError):
        g.start()
    assert list(tmp_path.iterdir()) == []


def test_start_fails_on_bad_options(tmp_path):
    table = tmp_path / "symbols.txt"
    table.write_text("0x1|_a\n", encoding="utf-8")
    with pytest.raises(GeneratorError):
        _generator(tmp_path, table, {"mode": "bogus"}).start()