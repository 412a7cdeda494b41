"""End-to-end tests of the statistics pipeline against in-memory fakes."""

import pytest
from conftest import FakeRepoFetcher, StubClassifier, blob, tree

from loc_viewer.domain.entities import (
    ContentStrategy,
    FailurePolicy,
    StatisticsOptions,
    TreeListing,
)
from loc_viewer.domain.exceptions import (
    ConfigurationError,
    FetchError,
    PipelineTimeoutError,
    UnreachableError,
)
from loc_viewer.infrastructure.line_classifier import ExtensionLanguageClassifier
from loc_viewer.services.get_statistics import GetStatisticsUseCase


def _use_case(fetcher, classifier=None, **kwargs) -> GetStatisticsUseCase:
    return GetStatisticsUseCase(
        repo_fetcher=fetcher,
        classifier=classifier or StubClassifier(),
        **kwargs,
    )


async def test_unrecognised_files_are_excluded(repo):
    fetcher = FakeRepoFetcher(files={"a.rs": 'println!("Hello World")', "a.md": "# Title"})

    result = await _use_case(fetcher).execute(repo)

    assert list(result.languages) == ["rs"]
    rs = result.languages["rs"]
    assert (rs.file_count, rs.code, rs.comments, rs.blanks) == (1, 1, 0, 0)
    assert [r.path for r in rs.files] == ["a.rs"]
    # never fetched at all
    assert fetcher.content_calls == ["a.rs"]
    assert result.ref == "main"


async def test_default_classifier_scenario(repo):
    fetcher = FakeRepoFetcher(files={"a.rs": 'println!("Hello World")', "a.md": "# Title"})

    result = await _use_case(fetcher, ExtensionLanguageClassifier()).execute(repo)

    assert list(result.languages) == ["Rust"]
    assert result.languages["Rust"].code == 1
    assert result.total_files == 1


async def test_empty_repository_yields_empty_result(repo):
    fetcher = FakeRepoFetcher(trees={("main", True): TreeListing(entries=(tree("docs"),))})

    result = await _use_case(fetcher).execute(repo)

    assert dict(result.languages) == {}
    assert result.skipped == ()


async def test_fail_fast_returns_error_and_no_result(repo):
    files = {f"{name}.rs": "fn x() {}" for name in "abcdefgh"}
    fetcher = FakeRepoFetcher(files=files, failing={"a.rs"}, delay=0.05)

    with pytest.raises(FetchError) as excinfo:
        await _use_case(fetcher, max_concurrency=2).execute(repo)

    assert excinfo.value.path == "a.rs"
    # outstanding fetches were cancelled, the rest never started
    assert fetcher.in_flight == 0
    assert len(fetcher.content_calls) < len(files)


async def test_skip_policy_records_skipped_paths(repo):
    files = {"a.rs": "fn a() {}", "b.rs": "fn b() {}", "c.rs": "fn c() {}"}
    fetcher = FakeRepoFetcher(files=files, failing={"b.rs"})

    result = await _use_case(fetcher, failure_policy=FailurePolicy.SKIP).execute(repo)

    assert result.skipped == ("b.rs",)
    assert sorted(r.path for r in result.languages["rs"].files) == ["a.rs", "c.rs"]
    assert result.languages["rs"].code == 2


async def test_skip_policy_still_raises_internal_errors(repo):
    class Buggy(FakeRepoFetcher):
        async def fetch_raw_content(self, repo, ref, path):
            raise AttributeError(path)

    fetcher = Buggy(files={"a.rs": ""})
    with pytest.raises(UnreachableError):
        await _use_case(fetcher, failure_policy=FailurePolicy.SKIP).execute(repo)


async def test_explicit_ref_and_path_filters(repo):
    listing = TreeListing(
        entries=(
            blob("src/main.rs"),
            blob("src/generated/out.rs"),
            blob("tests/it.rs"),
            blob("build.py"),
        )
    )
    fetcher = FakeRepoFetcher(
        files={e.path: "x\n" for e in listing.entries},
        trees={("v2", True): listing},
        default_branch=None,
    )
    options = StatisticsOptions(ref="v2", include=("src", "*.py"), exclude=("src/generated",))

    result = await _use_case(fetcher).execute(repo, options)

    assert result.ref == "v2"
    assert sorted(fetcher.content_calls) == ["build.py", "src/main.rs"]
    assert {lang: agg.file_count for lang, agg in result.languages.items()} == {"py": 1, "rs": 1}


async def test_falls_back_to_master_without_metadata(repo):
    listing = TreeListing(entries=(blob("lib.rs"),))
    fetcher = FakeRepoFetcher(
        files={"lib.rs": "// doc\n\nfn f() {}\n"},
        trees={("master", True): listing},
        default_branch=None,
    )

    result = await _use_case(fetcher).execute(repo)

    assert result.ref == "master"
    rs = result.languages["rs"]
    assert (rs.code, rs.comments, rs.blanks) == (1, 1, 1)


async def test_blob_strategy(repo):
    fetcher = FakeRepoFetcher(files={"a.py": "import os\n\nprint(os.sep)\n"})

    result = await _use_case(fetcher, content_strategy=ContentStrategy.BLOB).execute(repo)

    py = result.languages["py"]
    assert (py.code, py.blanks) == (2, 1)


async def test_timeout_raises_pipeline_timeout(repo):
    fetcher = FakeRepoFetcher(files={"a.rs": "fn a() {}"}, delay=1.0)

    with pytest.raises(PipelineTimeoutError):
        await _use_case(fetcher, timeout_seconds=0.05).execute(repo)
    assert fetcher.in_flight == 0


@pytest.mark.parametrize(
    "kwargs",
    [{"max_concurrency": 0}, {"timeout_seconds": 0}, {"timeout_seconds": -1.0}],
)
def test_invalid_configuration_is_rejected_before_any_request(kwargs):
    fetcher = FakeRepoFetcher()
    with pytest.raises(ConfigurationError):
        _use_case(fetcher, **kwargs)
    assert fetcher.tree_calls == []
