"""Tests for RepositoryRef parsing and formatting."""

import pytest

from loc_viewer.domain.exceptions import InvalidRepositoryUrlError, InvalidRepositoryUrlReason
from loc_viewer.domain.value_objects import RepositoryRef


def test_parse_repo_url():
    repo = RepositoryRef.parse("https://github.com/hayas1/loc-viewer")
    assert repo == RepositoryRef.new("hayas1", "loc-viewer")
    assert repo.to_url() == "https://github.com/hayas1/loc-viewer"


def test_trailing_slash_does_not_change_result():
    repo = RepositoryRef.parse("https://github.com/hayas1/loc-viewer/")
    assert repo == RepositoryRef.new("hayas1", "loc-viewer")
    assert repo.to_url() == "https://github.com/hayas1/loc-viewer"


def test_extra_segments_are_ignored():
    repo = RepositoryRef.parse("https://github.com/psf/requests/tree/main/src")
    assert repo == RepositoryRef.new("psf", "requests")


@pytest.mark.parametrize(
    ("owner", "name"),
    [
        ("hayas1", "loc-viewer"),
        ("psf", "requests"),
        ("some.org", "repo_name.js"),
        ("user", "with space"),
        ("ユーザー", "リポジトリ"),
    ],
)
def test_round_trip(owner, name):
    ref = RepositoryRef.new(owner, name)
    assert RepositoryRef.parse(ref.to_url()) == ref
    assert RepositoryRef.parse(ref.to_url() + "/") == ref


def test_percent_encoded_segments_are_decoded():
    repo = RepositoryRef.parse("https://github.com/user/with%20space")
    assert repo.name == "with space"


def test_custom_host():
    repo = RepositoryRef.parse("https://git.example.com/team/app", host="git.example.com")
    assert repo == RepositoryRef.new("team", "app", host="git.example.com")
    assert repo.to_url() == "https://git.example.com/team/app"


@pytest.mark.parametrize(
    ("url", "reason"),
    [
        ("https://gitlab.com/owner/repo", InvalidRepositoryUrlReason.CANNOT_BE_BASE),
        ("http://github.com/owner/repo", InvalidRepositoryUrlReason.CANNOT_BE_BASE),
        ("https://github.com:8443/owner/repo", InvalidRepositoryUrlReason.CANNOT_BE_BASE),
        ("https://github.com:abc/owner/repo", InvalidRepositoryUrlReason.CANNOT_BE_BASE),
        ("mailto:someone@github.com", InvalidRepositoryUrlReason.CANNOT_BE_BASE),
        ("github.com/owner/repo", InvalidRepositoryUrlReason.CANNOT_BE_BASE),
        ("https://github.com", InvalidRepositoryUrlReason.CANNOT_FIND_OWNER),
        ("https://github.com/", InvalidRepositoryUrlReason.CANNOT_FIND_OWNER),
        ("https://github.com//repo", InvalidRepositoryUrlReason.CANNOT_FIND_OWNER),
        ("https://github.com/owner", InvalidRepositoryUrlReason.CANNOT_FIND_REPO),
        ("https://github.com/owner/", InvalidRepositoryUrlReason.CANNOT_FIND_REPO),
    ],
)
def test_invalid_urls(url, reason):
    with pytest.raises(InvalidRepositoryUrlError) as excinfo:
        RepositoryRef.parse(url)
    assert excinfo.value.reason is reason


def test_full_name():
    assert RepositoryRef.new("psf", "requests").full_name == "psf/requests"
