import pytest

from cborjson.metawriters import (
    AssociationInfo,
    DictWriter,
    ListWriter,
    SequenceInfo,
    SetWriter,
    association_info,
    can_write_association,
    can_write_sequence,
    get_associative_writer,
    get_sequential_writer,
    parse_association_info,
    parse_sequence_info,
    register_associative_writer,
    register_sequential_writer,
    sequence_info,
)


def test_builtin_list_writer_appends():
    data = []
    writer = get_sequential_writer("list", data)
    writer.reserve(3)
    writer.add(1)
    writer.add("a")
    writer.add(None)
    assert data == [1, "a", None]
    assert writer.info() == SequenceInfo(None, False)


def test_builtin_dict_writer_converts_keys_to_str():
    data = {}
    writer = get_associative_writer("dict", data)
    writer.add(1, [2])
    writer.add("k", 3)
    assert data == {"1": [2], "k": 3}
    assert writer.info() == AssociationInfo("str", None)


def test_builtins_are_registered():
    assert can_write_sequence("list") is True
    assert can_write_association("dict") is True
    assert sequence_info("list") == SequenceInfo(None, False)
    assert association_info("dict") == AssociationInfo("str", None)


def test_unknown_type_has_no_writer():
    assert can_write_sequence("tests.unknown_seq[int]") is False
    assert get_sequential_writer("tests.unknown_seq[int]", []) is None
    assert can_write_association("tests.unknown_map[int, int]") is False
    assert get_associative_writer("tests.unknown_map[int, int]", {}) is None


def test_list_writer_converts_basic_types():
    data = []
    writer = ListWriter(data, "int")
    writer.add("5")
    writer.add(7)
    assert data == [5, 7]
    assert writer.info() == SequenceInfo("int", False)


def test_set_writer_inserts_and_reports_set():
    data = set()
    writer = SetWriter(data, "str")
    writer.reserve(2)
    writer.add("x")
    writer.add("x")
    writer.add(3)
    assert data == {"x", "3"}
    assert writer.info() == SequenceInfo("str", True)


def test_dict_writer_with_unknown_types_passes_through():
    data = {}
    writer = DictWriter(data, None, None)
    key = (1, 2)
    writer.add(key, [3])
    assert data == {key: [3]}
    assert writer.info() == AssociationInfo(None, None)


def test_registered_sequential_factory_used():
    name = "tests.Queue<float>"
    register_sequential_writer(name, lambda d: ListWriter(d, "float"))
    assert can_write_sequence(name)
    data = []
    get_sequential_writer(name, data).add("1.5")
    assert data == [1.5]
    assert sequence_info(name) == SequenceInfo("float", False)


def test_sequence_info_cache_replaced_on_register():
    name = "tests.Bag<int>"
    assert sequence_info(name) == SequenceInfo("int", False)
    register_sequential_writer(name, lambda d: SetWriter(d, "bytes"))
    assert sequence_info(name) == SequenceInfo("bytes", True)


def test_association_info_cache_replaced_on_register():
    name = "tests.Table<int, str>"
    assert association_info(name) == AssociationInfo("int", "str")
    register_associative_writer(name, lambda d: DictWriter(d, "float", "bool"))
    assert association_info(name) == AssociationInfo("float", "bool")
    data = {}
    get_associative_writer(name, data).add(2, 1)
    assert data == {2.0: True}


def test_register_requires_callable():
    with pytest.raises(TypeError):
        register_sequential_writer("tests.bad_seq", None)
    with pytest.raises(TypeError):
        register_associative_writer("tests.bad_map", 42)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("list[int]", SequenceInfo("int", False)),
        ("QList< int >", SequenceInfo("int", False)),
        ("set<str>", SequenceInfo("str", True)),
        ("QSet<QString>", SequenceInfo("QString", True)),
        ("frozenset[bytes]", SequenceInfo("bytes", True)),
        ("std::vector<QList<int>>", SequenceInfo("QList<int>", False)),
        ("int", SequenceInfo()),
        ("1abc<int>", SequenceInfo()),
        ("_abc<int>", SequenceInfo()),
        ("list[]", SequenceInfo()),
    ],
)
def test_parse_sequence_info(name, expected):
    assert parse_sequence_info(name) == expected


@pytest.mark.parametrize(
    "name, expected",
    [
        ("dict[str, int]", AssociationInfo("str", "int")),
        ("QMap<QString, QList<int>>", AssociationInfo("QString", "QList<int>")),
        ("QHash<QPair<int,int>, bool>", AssociationInfo("QPair<int,int>", "bool")),
        ("dict[tuple[int, int], list[str]]", AssociationInfo("tuple[int, int]", "list[str]")),
        ("QList<int>", AssociationInfo()),
        ("dict", AssociationInfo("str", None)),
        ("plain", AssociationInfo()),
    ],
)
def test_parse_association_info(name, expected):
    assert parse_association_info(name) == expected