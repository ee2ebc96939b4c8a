"""
Tests for the torrent list query builder (qbit_remote/params.py).
"""

import dataclasses

import pytest

from qbit_remote.params import GetTorrentListParams, TorrentListFilter


class TestTorrentListFilter:
    """Tests for TorrentListFilter wire names."""

    @pytest.mark.parametrize("member", list(TorrentListFilter))
    def test_round_trip(self, member):
        assert TorrentListFilter(member.value) is member

    def test_underscored_names(self):
        assert TorrentListFilter.STALLED_UPLOADING.value == "stalled_uploading"
        assert TorrentListFilter.STALLED_DOWNLOADING.value == "stalled_downloading"

    def test_unknown_name_raises(self):
        with pytest.raises(ValueError):
            TorrentListFilter("sleeping")


class TestToQuery:
    """Tests for GetTorrentListParams.to_query."""

    def test_pairs_in_fixed_order(self):
        params = (
            GetTorrentListParams.builder()
            .hash("a")
            .hash("b")
            .reverse(False)
            .filter(TorrentListFilter.SEEDING)
            .build()
        )
        assert params.to_query() == [
            ("filter", "seeding"),
            ("reverse", "false"),
            ("hashes", "a|b"),
        ]

    def test_values_are_left_for_the_transport_to_escape(self):
        params = GetTorrentListParams.builder().category("Movies & TV").tag("#1").build()
        assert params.to_query() == [("category", "Movies & TV"), ("tag", "#1")]

    def test_empty(self):
        assert GetTorrentListParams().to_query() == []


class TestToParams:
    """Tests for GetTorrentListParams.to_params."""

    def test_empty(self):
        assert GetTorrentListParams().to_params() == ""

    def test_single_field(self):
        params = GetTorrentListParams.builder().category("tv").build()
        assert params.to_params() == "&category=tv"

    def test_all_fields_in_fixed_order(self):
        params = (
            GetTorrentListParams.builder()
            .hashes(["a", "b"])
            .offset(20)
            .limit(10)
            .reverse()
            .tag("hd")
            .category("tv")
            .filter(TorrentListFilter.STALLED_UPLOADING)
            .build()
        )
        assert params.to_params() == (
            "&filter=stalled_uploading&category=tv&tag=hd&reverse=true"
            "&limit=10&offset=20&hashes=a|b"
        )

    def test_offset_renders_offset_value(self):
        params = GetTorrentListParams.builder().limit(5).offset(15).build()
        assert params.to_params() == "&limit=5&offset=15"

    def test_reverse_false_is_still_a_set_field(self):
        params = GetTorrentListParams.builder().reverse(False).build()
        assert params.to_params() == "&reverse=false"

    def test_zero_limit_is_emitted(self):
        params = GetTorrentListParams.builder().limit(0).build()
        assert params.to_params() == "&limit=0"

    def test_unset_fields_never_emit_empty_key(self):
        params = GetTorrentListParams.builder().tag("x").build()
        encoded = params.to_params()
        for key in ("filter", "category", "reverse", "limit", "offset", "hashes"):
            assert f"&{key}=" not in encoded

    def test_one_segment_per_set_field(self):
        params = (
            GetTorrentListParams.builder()
            .filter(TorrentListFilter.ACTIVE)
            .limit(3)
            .hash("abc")
            .build()
        )
        encoded = params.to_params()
        assert encoded.count("&") == 3
        assert encoded == "&filter=active&limit=3&hashes=abc"


class TestBuilder:
    """Tests for GetTorrentListParamsBuilder."""

    def test_setters_return_same_builder(self):
        builder = GetTorrentListParams.builder()
        assert builder.category("a") is builder
        assert builder.hash("h") is builder

    def test_repeated_hash_calls_accumulate(self):
        params = (
            GetTorrentListParams.builder()
            .hash("a")
            .hash("b")
            .hash("c")
            .build()
        )
        assert params.hashes == ("a", "b", "c")
        assert params.to_params() == "&hashes=a|b|c"

    def test_hashes_replaces(self):
        params = GetTorrentListParams.builder().hash("a").hashes(["x", "y"]).build()
        assert params.hashes == ("x", "y")

    def test_build_snapshots(self):
        builder = GetTorrentListParams.builder().hash("a")
        first = builder.build()
        builder.hash("b").category("tv")

        assert first.hashes == ("a",)
        assert first.category is None

    def test_built_params_are_frozen(self):
        params = GetTorrentListParams.builder().build()
        with pytest.raises(dataclasses.FrozenInstanceError):
            params.limit = 1

    def test_filter_accepts_wire_string(self):
        params = GetTorrentListParams.builder().filter("errored").build()
        assert params.filter is TorrentListFilter.ERRORED
