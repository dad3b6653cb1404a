import pytest

from iblessing.generator import GeneratorError
from iblessing.ida_symbol_wrapper import (
    IDASymbolWrapperNamingScriptGenerator,
    SymbolWrapperInfo,
    render_naming_script,
)

INFO = SymbolWrapperInfo("objc_msgSend_wrapper", "id f(id, SEL)", 0x100004000)


def test_naming_lines():
    script = render_naming_script([INFO])
    assert "\n    idc.set_name(0x100004000, 'objc_msgSend_wrapper', ida_name.SN_FORCE)" in script
    assert (
        "\n    idc.apply_type(0x100004000, idc.parse_decl('id f(id, SEL)', idc.PT_SILENT))"
        in script
    )


def test_script_frame_and_order():
    second = SymbolWrapperInfo("other", "void g(void)", 0x100005000)
    script = render_naming_script([INFO, second])
    assert script.startswith("def namingWrappers():")
    assert script.endswith("\n\nif __name__ == '__main__':\n    namingWrappers()\n")
    assert script.index("objc_msgSend_wrapper") < script.index("'other'")
    assert script.count("idc.set_name") == 2


def _generator(tmp_path, loader):
    g = IDASymbolWrapperNamingScriptGenerator("ida-symbol-wrapper-naming", "desc", loader)
    g.input_path = "/data/wrappers.json"
    g.output_path = str(tmp_path)
    g.file_name = "App"
    return g


def test_start_writes_script(tmp_path):
    g = _generator(tmp_path, lambda path: [INFO])
    path = g.start()
    assert path == tmp_path / "App_ida_symbol_wrapper_naming.iblessing.py"
    assert path.read_text(encoding="utf-8") == render_naming_script([INFO])


def test_start_fails_without_wrappers(tmp_path):
    g = _generator(tmp_path, lambda path: [])
    with pytest.raises(GeneratorError):
        g.start()


def test_start_fails_on_missing_output_dir(tmp_path):
    g = _generator(tmp_path / "missing", lambda path: [INFO])
    with pytest.raises(GeneratorError):
        g.start()