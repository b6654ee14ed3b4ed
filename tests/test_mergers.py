import pytest

from djaysync.core.mergers import GroupingTagMerger, TempoFieldMerger, strip_key_label


@pytest.fixture
def grouping():
    return GroupingTagMerger()


@pytest.fixture
def tempo():
    return TempoFieldMerger()


def test_grouping_example_overwrite(grouping):
    assert grouping.merge("8A-Am Chill", "10B-D", True) == "10B-D Chill"


def test_grouping_example_keep_existing(grouping):
    assert grouping.merge("8A-Am Chill", "10B-D", False) is None


@pytest.mark.parametrize(
    "current,label,overwrite,expected",
    [
        ("", "10B-D", False, "10B-D"),
        ("Chill", "10B-D", False, "10B-D Chill"),
        ("  Chill  ", "10B-D", False, "10B-D Chill"),
        ("Warm up 8A-Am  peak", "5A-Cm", True, "5A-Cm Warm up peak"),
        ("Chill 8A-Am", "5A-Cm", True, "5A-Cm Chill"),
        ("8A-Am", "5A-Cm", True, "5A-Cm"),
        (None, "5A-Cm", False, "5A-Cm"),
    ],
)
def test_grouping_merge(grouping, current, label, overwrite, expected):
    assert grouping.merge(current, label, overwrite) == expected


@pytest.mark.parametrize("overwrite", [True, False])
def test_empty_label_never_writes(grouping, overwrite):
    assert grouping.merge("8A-Am Chill", "", overwrite) is None
    assert grouping.merge("", "", overwrite) is None


def test_grouping_idempotent_without_overwrite(grouping):
    first = grouping.merge("Chill", "10B-D", False)
    assert first == "10B-D Chill"
    assert grouping.merge(first, "10B-D", False) is None


def test_strip_and_readd_same_label(grouping):
    result = grouping.merge("Deep 10B-D  house", "10B-D", True)
    assert result == "10B-D Deep house"
    assert result.count("10B-D") == 1


def test_only_first_label_in_codex_order_removed(grouping):
    # 8B-C precedes 9A-Em in the codex; the 9A-Em marker stays
    assert grouping.merge("9A-Em Old 8B-C", "1A-G#m", True) == "1A-G#m 9A-Em Old"


def test_strip_key_label():
    assert strip_key_label("8A-Am Chill") == ("Chill", "8A-Am")
    assert strip_key_label("Chill") == ("Chill", None)
    assert strip_key_label("") == ("", None)


@pytest.mark.parametrize(
    "current,new,overwrite,expected",
    [
        (0, 128, False, 128),
        (120, 128, False, None),
        (120, 128, True, 128),
        (120, 0, True, None),
        (0, 0, True, None),
        (0, None, True, None),
        (120, None, True, None),
        (None, 128, False, 128),
    ],
)
def test_tempo_merge(tempo, current, new, overwrite, expected):
    assert tempo.merge(current, new, overwrite) == expected
