from iblessing.generator import Generator


def test_identity_is_kept():
    g = Generator("ida-symbolic", "generate ida symbolic script from symbol table file")
    assert g.identifier == "ida-symbolic"
    assert g.desc == "generate ida symbolic script from symbol table file"


def test_defaults_are_empty():
    g = Generator("a", "b")
    assert g.options == {}
    assert (g.input_path, g.output_path, g.file_name) == ("", "", "")


def test_options_are_per_instance():
    first = Generator("a", "b")
    second = Generator("c", "d")
    first.options["mode"] = "jtool2"
    assert second.options == {}


def test_base_start_writes_nothing(tmp_path):
    g = Generator("a", "b")
    g.output_path = str(tmp_path)
    g.file_name = "App"
    assert g.start() is None
    assert list(tmp_path.iterdir()) == []