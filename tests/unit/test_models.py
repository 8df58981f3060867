"""
Unit tests for the value types and the listing sort.

These are pure functions and dataclasses: no store, no network.
"""

from datetime import datetime, timedelta, timezone

import pytest

from spaces_client.core.listing import sort_files_by_date
from spaces_client.core.models import (
    CannedACL,
    CustomACL,
    FileListing,
    SortOrder,
    SpacesConfig,
    UploadOptions,
    resolve_acl,
)


# ---------------------------------------------------------------------------
# ACL mapping
# ---------------------------------------------------------------------------

class TestResolveACL:

    def test_public_shorthand_maps_to_public_read(self):
        assert resolve_acl("public") == "public-read"

    def test_private_string_passes_through(self):
        assert resolve_acl("private") == "private"

    def test_unknown_string_passes_through(self):
        """Existing gateway ACL names keep working as plain strings."""
        assert resolve_acl("authenticated-read") == "authenticated-read"

    def test_canned_acl_uses_its_value(self):
        assert resolve_acl(CannedACL.PUBLIC_READ) == "public-read"
        assert resolve_acl(CannedACL.BUCKET_OWNER_FULL_CONTROL) == "bucket-owner-full-control"

    def test_custom_acl_is_opaque(self):
        assert resolve_acl(CustomACL("public")) == "public"

    def test_custom_acl_rejects_empty(self):
        with pytest.raises(ValueError, match="cannot be empty"):
            CustomACL("")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class TestSpacesConfig:

    def test_endpoint_url_adds_https(self):
        config = SpacesConfig(endpoint="fra1.digitaloceanspaces.com", bucket="b")
        assert config.endpoint_url == "https://fra1.digitaloceanspaces.com"

    def test_endpoint_url_keeps_explicit_scheme(self):
        config = SpacesConfig(endpoint="http://localhost:9000", bucket="b")
        assert config.endpoint_url == "http://localhost:9000"

    def test_region_derived_from_endpoint(self):
        config = SpacesConfig(endpoint="sgp1.digitaloceanspaces.com", bucket="b")
        assert config.region_name == "sgp1"

    def test_explicit_region_wins(self):
        config = SpacesConfig(endpoint="sgp1.digitaloceanspaces.com", bucket="b", region="us-east-1")
        assert config.region_name == "us-east-1"

    def test_requires_bucket(self):
        with pytest.raises(ValueError, match="bucket"):
            SpacesConfig(endpoint="nyc3.digitaloceanspaces.com", bucket="")

    def test_requires_endpoint(self):
        with pytest.raises(ValueError, match="endpoint"):
            SpacesConfig(endpoint="", bucket="b")


class TestUploadOptions:

    def test_defaults(self):
        options = UploadOptions()
        assert options.exponential_backoff is False
        assert options.purge_cache is False
        assert options.extra_args == {}

    def test_extra_args_not_shared(self):
        first = UploadOptions()
        first.extra_args["Metadata"] = {}
        assert UploadOptions().extra_args == {}


# ---------------------------------------------------------------------------
# Sorting
# ---------------------------------------------------------------------------

BASE = datetime(2024, 5, 1, tzinfo=timezone.utc)


def listing(name: str, minutes: int) -> FileListing:
    return FileListing(locator=name, last_modified=BASE + timedelta(minutes=minutes))


class TestSortFilesByDate:

    @pytest.fixture
    def files(self):
        return [listing("b", 5), listing("a", 1), listing("d", 9), listing("c", 3)]

    def test_ascending_is_non_decreasing(self, files):
        result = sort_files_by_date(files, SortOrder.ASC)
        times = [f.last_modified for f in result]
        assert times == sorted(times)

    def test_descending_is_non_increasing(self, files):
        result = sort_files_by_date(files, SortOrder.DESC)
        assert [f.locator for f in result] == ["d", "b", "c", "a"]

    def test_default_is_ascending(self, files):
        assert [f.locator for f in sort_files_by_date(files)] == ["a", "c", "b", "d"]

    @pytest.mark.parametrize("value", ["asc", "desc", "newest", None, ""])
    def test_unrecognized_values_sort_ascending(self, files, value):
        assert sort_files_by_date(files, value) == sort_files_by_date(files, SortOrder.ASC)

    def test_ties_keep_input_order_ascending(self):
        files = [listing("first", 2), listing("second", 2), listing("early", 0)]
        result = sort_files_by_date(files, SortOrder.ASC)
        assert [f.locator for f in result] == ["early", "first", "second"]

    def test_ties_keep_input_order_descending(self):
        files = [listing("first", 2), listing("second", 2), listing("late", 7)]
        result = sort_files_by_date(files, SortOrder.DESC)
        assert [f.locator for f in result] == ["late", "first", "second"]

    def test_does_not_mutate_input(self, files):
        original = list(files)
        sort_files_by_date(files, SortOrder.DESC)
        assert files == original
