"""
Tests for version tokens: strict/lenient parsing, padded component-wise
ordering, and the stable record sort.
"""
from __future__ import annotations

import itertools

import pytest

from api_version_manager.core.errors import InvalidFormat, UnparseableTag, VersionFormatError
from api_version_manager.providers.base import DeployedVersion
from api_version_manager.versioning import (
    CANDIDATE_PATTERN,
    Ordering,
    VersionToken,
    compare,
    is_greater,
    parse_tag,
    parse_version,
    sort_versions,
)


class TestParseVersion:
    def test_basic(self):
        assert parse_version("v1-0-0").components == (1, 0, 0)
        assert parse_version("v12-3-45").components == (12, 3, 45)

    def test_fewer_components_allowed(self):
        assert parse_version("v2").components == (2,)
        assert parse_version("v2-1").components == (2, 1)

    @pytest.mark.parametrize("raw", ["1-2-0", "v1.2.0", "v1-2-x", "v-1-2", "", "V1-2-0", " v1-2-0", "v1-2-0\n", "v\u0661-2-0", None, 120])
    def test_rejects_other_shapes(self, raw):
        with pytest.raises(InvalidFormat):
            parse_version(raw)

    def test_invalid_format_is_value_error(self):
        with pytest.raises(ValueError):
            parse_version("nope")


class TestParseTag:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("v1-2-3", (1, 2, 3)),
            ("1-2-3", (1, 2, 3)),
            ("v1.2.3", (1, 2, 3)),
            ("1.2-3", (1, 2, 3)),
            ("v7", (7,)),
        ],
    )
    def test_lenient_shapes(self, raw, expected):
        assert parse_tag(raw).components == expected

    @pytest.mark.parametrize("raw", ["latest", "v1-beta", "v1--2", "", "v", None])
    def test_unparseable(self, raw):
        with pytest.raises(UnparseableTag):
            parse_tag(raw)

    def test_unparseable_is_not_invalid_format(self):
        with pytest.raises(VersionFormatError) as exc_info:
            parse_tag("garbage")
        assert not isinstance(exc_info.value, InvalidFormat)

    def test_custom_separators(self):
        assert parse_tag("v1_2_3", separators="_").components == (1, 2, 3)
        with pytest.raises(UnparseableTag):
            parse_tag("v1-2-3", separators="_")


class TestCompare:
    def test_component_wise_not_lexicographic(self):
        assert compare(parse_version("v2-10-0"), parse_version("v2-9-9")) is Ordering.GREATER
        assert "v2-10-0" < "v2-9-9"  # string order would get this wrong

    def test_missing_components_are_zero(self):
        assert compare(VersionToken((1, 0)), VersionToken((1, 0, 0))) is Ordering.EQUAL
        assert compare(VersionToken((1,)), VersionToken((1, 0, 1))) is Ordering.LESS
        assert VersionToken((1, 0)) == VersionToken((1, 0, 0))
        assert hash(VersionToken((1, 0))) == hash(VersionToken((1, 0, 0)))

    def test_accepts_raw_strings(self):
        assert compare("v1-2-0", "v1-1-9") is Ordering.GREATER
        assert compare("v1.1.9", "v1-1-9") is Ordering.EQUAL

    def test_is_greater_matches_compare(self):
        tokens = [VersionToken(c) for c in [(0,), (1, 0, 0), (1, 0, 1), (1, 1), (2,), (2, 0, 0), (10, 0, 0)]]
        for a, b in itertools.product(tokens, repeat=2):
            assert is_greater(a, b) == (compare(a, b) is Ordering.GREATER)

    def test_total_order(self):
        tokens = [VersionToken(c) for c in [(0, 0, 1), (1,), (1, 0, 0), (1, 2), (3, 0, 0), (0, 9, 9)]]
        for a, b in itertools.product(tokens, repeat=2):
            ab, ba = compare(a, b), compare(b, a)
            assert ab.value == -ba.value  # antisymmetric
        for a, b, c in itertools.product(tokens, repeat=3):
            if compare(a, b) is not Ordering.GREATER and compare(b, c) is not Ordering.GREATER:
                assert compare(a, c) is not Ordering.GREATER  # transitive

    def test_rich_comparisons(self):
        a, b = parse_version("v1-0-0"), parse_version("v1-0-1")
        assert a < b <= b
        assert b > a >= a
        assert sorted([b, a]) == [a, b]

    def test_negative_components_rejected(self):
        with pytest.raises(ValueError):
            VersionToken((1, -1))


class TestTokenHelpers:
    def test_render_and_bump(self):
        token = parse_tag("3.2.9")
        assert token.render() == "v3-2-9"
        assert str(token.bump_patch()) == "v3-2-10"
        assert VersionToken((4,)).bump_patch().render() == "v4-0-1"

    def test_candidate_pattern(self):
        assert CANDIDATE_PATTERN.fullmatch("v3-2-0")
        assert not CANDIDATE_PATTERN.fullmatch("v3-2")
        assert not CANDIDATE_PATTERN.fullmatch("3-2-0")
        assert not CANDIDATE_PATTERN.fullmatch("v3-2-0\n")
        assert not CANDIDATE_PATTERN.fullmatch("v3-2-0-1")
        assert not CANDIDATE_PATTERN.fullmatch("v\u0663-2-0")


class TestSortVersions:
    def test_sorts_ascending(self):
        records = [DeployedVersion.from_stage(r, r) for r in ["v2-0-0", "v1-10-0", "v1-9-0"]]
        assert [r.raw for r in sort_versions(records)] == ["v1-9-0", "v1-10-0", "v2-0-0"]

    def test_stable_for_equal_tokens(self):
        records = [
            DeployedVersion.from_stage("first", "v1-0"),
            DeployedVersion.from_stage("newer", "v2-0-0"),
            DeployedVersion.from_stage("second", "v1-0-0"),
        ]
        assert [r.identifier for r in sort_versions(records)] == ["first", "second", "newer"]

    def test_unreadable_records_sort_first(self):
        records = [
            DeployedVersion.from_stage("v2", "v2-0-0"),
            DeployedVersion.from_stage("vx", None),
            DeployedVersion.from_stage("v1", "v1-0-0"),
            DeployedVersion.from_stage("vy", "garbage"),
        ]
        assert [r.identifier for r in sort_versions(records)] == ["vx", "vy", "v1", "v2"]

    def test_empty(self):
        assert sort_versions([]) == []
