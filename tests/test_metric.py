import pytest

from promcommon.model.metric import METRIC_NAME_RE, Metric, is_valid_metric_name


@pytest.mark.parametrize(
    "labels, fingerprint, fast_fingerprint",
    [
        ({}, 14695981039346656037, 14695981039346656037),
        (
            {
                "first_name": "electro",
                "occupation": "robot",
                "manufacturer": "westinghouse",
            },
            5911716720268894962,
            11310079640881077873,
        ),
        ({"x": "y"}, 8241431561484471700, 13948396922932177635),
        ({"a": "bb", "b": "c"}, 3016285359649981711, 3198632812309449502),
        ({"a": "b", "bb": "c"}, 7122421792099404749, 5774953389407657638),
    ],
)
def test_metric_fingerprints(labels, fingerprint, fast_fingerprint):
    metric = Metric(labels)
    assert metric.fingerprint() == fingerprint
    assert metric.fast_fingerprint() == fast_fingerprint


@pytest.mark.parametrize(
    "name, valid",
    [
        ("Avalid_23name", True),
        ("_Avalid_23name", True),
        ("1valid_23name", False),
        ("avalid_23name", True),
        ("Ava:lid_23name", True),
        ("a lid_23name", False),
        (":leading_colon", True),
        ("colon:in:the:middle", True),
        ("", False),
    ],
)
def test_metric_name_is_valid(name, valid):
    assert is_valid_metric_name(name) is valid
    assert (METRIC_NAME_RE.match(name) is not None) is valid


def test_metric_clone():
    m = Metric(
        {"first_name": "electro", "occupation": "robot", "manufacturer": "westinghouse"}
    )
    m2 = m.clone()
    assert isinstance(m2, Metric)
    assert dict(m2) == dict(m)
    m2["x"] = "y"
    assert "x" not in m


@pytest.mark.parametrize(
    "labels, expected",
    [
        (
            {"first_name": "electro", "occupation": "robot", "manufacturer": "westinghouse"},
            '{first_name="electro", manufacturer="westinghouse", occupation="robot"}',
        ),
        (
            {"__name__": "electro", "occupation": "robot", "manufacturer": "westinghouse"},
            'electro{manufacturer="westinghouse", occupation="robot"}',
        ),
        ({"__name__": "fooname"}, "fooname"),
        ({}, "{}"),
    ],
)
def test_metric_to_string(labels, expected):
    assert str(Metric(labels)) == expected


def test_metric_equal_and_before():
    assert Metric({"a": "b"}).equal(Metric({"a": "b"}))
    assert Metric({"__name__": "A"}).before(Metric({"__name__": "B"}))
    assert not Metric({"__name__": "B"}).before(Metric({"__name__": "A"}))