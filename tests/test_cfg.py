import pytest

from harbol.cfg import CfgType, Color, Config, Vec4D


def _phone_config() -> Config:
    entry = Config()
    entry.insert("type", CfgType.STRING, "home")
    entry.insert("number", CfgType.STRING, "212 555 0000")
    phones = Config()
    phones.insert("1", CfgType.MAP, entry)
    root = Config()
    root.insert("phoneNumbers.", CfgType.MAP, phones)
    root.insert("age", CfgType.INT, 24)
    root.insert("money", CfgType.FLOAT, 354200.0)
    root.insert("spouse", CfgType.NULL)
    top = Config()
    top.insert("root", CfgType.MAP, root)
    top.insert("lonely", CfgType.NULL)
    return top


def test_to_str_nested_null_section():
    inner = Config()
    inner.insert("lel", CfgType.NULL)
    cfg = Config()
    cfg.insert("section", CfgType.MAP, inner)
    assert cfg.to_str() == '"section": {\n\t"lel": null\n}\n'


def test_escaped_dot_path_lookup():
    cfg = _phone_config()
    assert cfg.get_str("root.phoneNumbers\\..1.type") == "home"
    section = cfg.get_section("root.phoneNumbers\\..1")
    assert section is not None
    assert section.get_str("number") == "212 555 0000"


def test_get_type_through_paths():
    cfg = _phone_config()
    assert cfg.get_type("root.phoneNumbers\\.") == CfgType.MAP
    assert cfg.get_type("root.money") == CfgType.FLOAT
    assert cfg.get_type("root.spouse") == CfgType.NULL
    assert cfg.get_type("lonely") == CfgType.INVALID
    assert cfg.get_type("missing") == CfgType.INVALID


def test_getters_return_none_on_wrong_type():
    cfg = _phone_config()
    assert cfg.get_int("root.age") == 24
    assert cfg.get_str("root.age") is None
    assert cfg.get_float("root.money") == 354200.0
    assert cfg.get_bool("root.money") is None


def test_set_override_convert_null_to_string():
    cfg = _phone_config()
    cfg.set_str("root.spouse", "Jane Smith", True)
    assert cfg.get_type("root.spouse") == CfgType.STRING
    assert cfg.get_str("root.spouse") == "Jane Smith"
    assert '\t"spouse": "Jane Smith"\n' in cfg.to_str()


def test_set_without_override_raises_type_error():
    cfg = _phone_config()
    with pytest.raises(TypeError):
        cfg.set_str("root.age", "old", False)
    assert cfg.get_int("root.age") == 24


def test_set_missing_key_raises_key_error():
    cfg = _phone_config()
    with pytest.raises(KeyError):
        cfg.set_int("nowhere", 1)
    with pytest.raises(KeyError):
        cfg.set_null("nowhere")


def test_set_same_type_and_back_to_null():
    cfg = _phone_config()
    cfg.set_int("root.age", 30)
    assert cfg.get_int("root.age") == 30
    cfg.set_null("root.age")
    assert cfg.get_type("root.age") == CfgType.NULL
    assert cfg.get_int("root.age") is None


def test_number_formatting():
    cfg = Config()
    cfg.insert("age", CfgType.INT, 24)
    cfg.insert("alive", CfgType.BOOL, True)
    cfg.insert("dead", CfgType.BOOL, False)
    cfg.insert("half", CfgType.FLOAT, 0.5)
    text = cfg.to_str()
    assert text == '"age": 24\n"alive": true\n"dead": false\n"half": 0.500000\n'


def test_color_and_vector_formatting():
    cfg = Config()
    cfg.insert("colors", CfgType.COLOR, Color(0xFF, 0xFF, 0xFF, 0xAA))
    cfg.insert("origin", CfgType.VEC4D, Vec4D(10.0, 0.5, 25.0, 44.0))
    assert cfg.to_str() == (
        '"colors": c[ 255, 255, 255, 170 ]\n'
        '"origin": v[ 10.000000, 0.500000, 25.000000, 44.000000 ]\n'
    )
    assert cfg.get_color("colors") == Color(255, 255, 255, 0xAA)


def test_color_channels_truncate_to_byte():
    assert Color(0x1FF, 0x100, 0x80, 0) == Color(0xFF, 0, 0x80, 0)


def test_vec4d_is_single_precision():
    vec = Vec4D(0.1, 0.0, 0.0, 0.0)
    assert vec.x == pytest.approx(0.1, rel=1e-6)
    assert vec.x != 0.1


def test_insert_errors():
    cfg = Config()
    cfg.insert("a", CfgType.INT, 1)
    with pytest.raises(KeyError):
        cfg.insert("a", CfgType.INT, 2)
    with pytest.raises(TypeError):
        cfg.insert("b", CfgType.STRING, 3)
    with pytest.raises(TypeError):
        cfg.insert("c", CfgType.MAP, {})
    with pytest.raises(ValueError):
        cfg.insert("d", CfgType.INVALID, None)
    assert list(cfg) == ["a"]


def test_order_len_and_contains():
    cfg = Config()
    for key in ["z", "a", "m"]:
        cfg.insert(key, CfgType.NULL)
    assert list(cfg) == ["z", "a", "m"]
    assert len(cfg) == 3
    assert "a" in cfg
    assert "q" not in cfg


def test_section_is_shared_object():
    cfg = _phone_config()
    section = cfg.get_section("root")
    section.set_int("age", 99)
    assert cfg.get_int("root.age") == 99


def test_build_file_overwrite_and_append(tmp_path):
    cfg = _phone_config()
    path = tmp_path / "out.ini"
    cfg.build_file(path, True)
    text = cfg.to_str()
    assert path.read_text(encoding="utf-8") == text
    cfg.build_file(path, False)
    assert path.read_text(encoding="utf-8") == text + text
    cfg.build_file(path, True)
    assert path.read_text(encoding="utf-8") == text