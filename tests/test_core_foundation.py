import pytest

from iblessing.core_foundation import arguments_from_signature, resolve_type_encoding


def test_block_signature_with_class_argument():
    assert arguments_from_signature('v16@?0@"BlockSubA"8') == ["v", "@?", "@BlockSubA"]


def test_signature_with_id_pointer_and_unsigned():
    assert arguments_from_signature("v32@?0@8Q16^B24") == ["v", "@?", "id", "Q", "^B"]


def test_complex_signature():
    sig = '@"NSString"56@?0i8@"BlockSubB"12B20^B24^i32#40@"BlockSubA"48'
    assert arguments_from_signature(sig) == [
        "@NSString", "@?", "i", "@BlockSubB", "B", "^B", "^i", "#", "@BlockSubA",
    ]


def test_signature_with_protocol_and_block_type():
    sig = 'v24@?0@"<RxApplicationService>"8@?<v@?>16'
    assert arguments_from_signature(sig) == ["v", "@?", "@<RxApplicationService>", "@?"]


def test_struct_argument_kept_whole():
    result = arguments_from_signature("v24@0:8{CGPoint=dd}16")
    assert result[:2] == ["v", "id"]
    assert result[2] == ":"
    assert result[3] == "{CGPoint=dd}"


def test_empty_signature():
    assert arguments_from_signature("") == []


@pytest.mark.parametrize("enc", list("cislqCISLQfdBv"))
def test_primary_types_are_single_arguments(enc):
    assert arguments_from_signature(f"{enc}8") == [enc]
    assert resolve_type_encoding(enc) != ""


def test_resolve_known_types():
    assert resolve_type_encoding("Q") == "unsigned long long"
    assert resolve_type_encoding("*") == "char *"
    assert resolve_type_encoding("B") == "bool"


def test_resolve_unknown_type():
    assert resolve_type_encoding("@NSString") == ""
    assert resolve_type_encoding("") == ""