import json

import pytest

from promcommon.model.labelset import LabelSet


def test_from_json_valid():
    doc = json.loads('{"labelSet": {"monitor": "codelab", "foo": "bar"}}')
    ls = LabelSet.from_json(json.dumps(doc["labelSet"]))
    assert str(ls) == '{foo="bar", monitor="codelab"}'


def test_from_json_invalid_name():
    doc = json.loads('{"labelSet": {"1nvalid_23name": "codelab", "foo": "bar"}}')
    with pytest.raises(ValueError) as exc:
        LabelSet.from_json(json.dumps(doc["labelSet"]))
    assert str(exc.value) == '"1nvalid_23name" is not a valid label name'


def test_from_json_non_string_value():
    with pytest.raises(ValueError):
        LabelSet.from_json('{"foo": 1}')


def test_clone():
    ls = LabelSet({"monitor": "codelab", "foo": "bar", "bar": "baz"})
    clone = ls.clone()
    assert len(clone) == len(ls)
    assert dict(clone) == dict(ls)
    clone["extra"] = "x"
    assert "extra" not in ls


def test_merge():
    ls1 = LabelSet({"monitor": "codelab", "foo": "bar", "bar": "baz"})
    ls2 = LabelSet({"monitor": "codelab", "dolor": "mi", "lorem": "ipsum"})
    expected = {
        "monitor": "codelab",
        "foo": "bar",
        "bar": "baz",
        "dolor": "mi",
        "lorem": "ipsum",
    }
    merged = ls1.merge(ls2)
    assert dict(merged) == expected
    assert len(ls1) == 3


def test_merge_overrides():
    merged = LabelSet({"a": "1"}).merge({"a": "2"})
    assert merged["a"] == "2"


def test_equal():
    assert LabelSet({"a": "b"}).equal(LabelSet({"a": "b"}))
    assert not LabelSet({"a": "b"}).equal(LabelSet({"a": "c"}))
    assert not LabelSet({"a": "b"}).equal(LabelSet({"a": "b", "c": "d"}))
    assert not LabelSet({"a": "b"}).equal(LabelSet({"c": "b"}))


def test_before():
    assert LabelSet({"a": "1"}).before(LabelSet({"a": "1", "b": "2"}))
    assert not LabelSet({"a": "1", "b": "2"}).before(LabelSet({"a": "1"}))
    assert LabelSet({"a": "1"}).before(LabelSet({"a": "2"}))
    assert not LabelSet({"a": "2"}).before(LabelSet({"a": "1"}))
    assert not LabelSet({"a": "x"}).before(LabelSet({"b": "x"}))
    assert LabelSet({"b": "x"}).before(LabelSet({"a": "x"}))
    assert not LabelSet({"a": "1"}).before(LabelSet({"a": "1"}))


def test_validate():
    LabelSet({"a": "b"}).validate()
    with pytest.raises(ValueError, match="invalid name"):
        LabelSet({"!bad": "x"}).validate()
    with pytest.raises(ValueError, match="invalid value"):
        LabelSet({"bad": "\udcfflabel"}).validate()


def test_str_quotes_values():
    assert str(LabelSet({"a": 'x"y'})) == '{a="x\\"y"}'
    assert str(LabelSet()) == "{}"


def test_fingerprints():
    ls = LabelSet({"name": "garland, briggs", "fear": "love is not enough"})
    assert ls.fingerprint() == 5799056148416392346
    assert ls.fast_fingerprint() == 12952432476264840823
    assert LabelSet().fingerprint() == 14695981039346656037