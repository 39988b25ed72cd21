import pytest

from promcommon.model.labels import (
    LABEL_NAME_RE,
    LabelName,
    LabelPair,
    LabelValue,
    format_label_names,
)


@pytest.mark.parametrize(
    "given, expected",
    [(["ZZZ", "zzz"], ["ZZZ", "zzz"]), (["aaa", "AAA"], ["AAA", "aaa"])],
)
def test_label_names_sort(given, expected):
    assert sorted(LabelName(n) for n in given) == expected


@pytest.mark.parametrize(
    "given, expected",
    [(["ZZZ", "zzz"], ["ZZZ", "zzz"]), (["aaa", "AAA"], ["AAA", "aaa"])],
)
def test_label_values_sort(given, expected):
    assert sorted(LabelValue(v) for v in given) == expected


@pytest.mark.parametrize(
    "name, valid",
    [
        ("Avalid_23name", True),
        ("_Avalid_23name", True),
        ("1valid_23name", False),
        ("avalid_23name", True),
        ("Ava:lid_23name", False),
        ("a lid_23name", False),
        (":leading_colon", False),
        ("colon:in:the:middle", False),
        ("", False),
    ],
)
def test_label_name_is_valid(name, valid):
    assert LabelName(name).is_valid() is valid
    assert (LABEL_NAME_RE.match(name) is not None) is valid


def test_label_name_regex_rejects_trailing_newline():
    assert LABEL_NAME_RE.match("abc\n") is None
    assert LabelName("abc\n").is_valid() is False


def test_sort_label_pairs():
    pairs = [
        LabelPair(LabelName("FooName"), LabelValue("FooValue")),
        LabelPair(LabelName("FooName"), LabelValue("BarValue")),
        LabelPair(LabelName("BarName"), LabelValue("FooValue")),
        LabelPair(LabelName("BazName"), LabelValue("BazValue")),
        LabelPair(LabelName("BarName"), LabelValue("FooValue")),
        LabelPair(LabelName("BazName"), LabelValue("FazValue")),
    ]
    result = [(p.name, p.value) for p in sorted(pairs)]
    assert result == [
        ("BarName", "FooValue"),
        ("BarName", "FooValue"),
        ("BazName", "BazValue"),
        ("BazName", "FazValue"),
        ("FooName", "BarValue"),
        ("FooName", "FooValue"),
    ]


def test_label_value_is_valid():
    assert LabelValue("label").is_valid() is True
    assert LabelValue("台北").is_valid() is True
    bad = b"\xfflabel".decode("utf-8", "surrogateescape")
    assert LabelValue(bad).is_valid() is False


def test_label_name_from_json_valid():
    assert LabelName.from_json('"foo_bar"') == "foo_bar"


def test_label_name_from_json_invalid():
    with pytest.raises(ValueError) as exc:
        LabelName.from_json('"1nvalid_23name"')
    assert str(exc.value) == '"1nvalid_23name" is not a valid label name'


def test_label_name_from_json_not_string():
    with pytest.raises(ValueError):
        LabelName.from_json("42")


def test_format_label_names():
    assert format_label_names([LabelName("a"), LabelName("b")]) == "a, b"
    assert format_label_names([]) == ""