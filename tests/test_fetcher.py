"""
Tests for CommitPageFetcher pagination and branch resolution.
"""

from datetime import datetime, timezone

import pytest

from conftest import ScriptedQueryClient, branch_data, history_page, repo_page
from commitworker.harvester.errors import (
    BranchNotFoundError,
    NotFoundError,
    ProtocolError,
    TransportError,
)
from commitworker.harvester.fetcher import CommitPageFetcher

ALL_REPOS = ["alpha", "beta", "gamma", "delta", "epsilon"]


def split_pages(names, sizes):
    """Build repository pages from ``names`` with the given page sizes."""
    pages = []
    start = 0
    for i, size in enumerate(sizes):
        chunk = names[start : start + size]
        start += size
        last = i == len(sizes) - 1
        pages.append(repo_page(chunk, has_next=not last, cursor=None if last else f"cur-{i}"))
    return pages


class TestFetchRepositories:
    """Test repository listing across pages."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("sizes", [[5], [1, 4], [2, 2, 1], [1, 1, 1, 1, 1], [0, 5]])
    async def test_result_is_independent_of_page_split(self, sizes):
        client = ScriptedQueryClient(split_pages(ALL_REPOS, sizes))
        fetcher = CommitPageFetcher(client)

        repos = await fetcher.fetch_repositories("octocat")

        assert [r.name for r in repos] == ALL_REPOS
        assert len(client.calls) == len(sizes)

    @pytest.mark.asyncio
    async def test_cursor_absent_first_then_forwarded_unmodified(self):
        client = ScriptedQueryClient(
            [
                repo_page(["a"], has_next=True, cursor="Y3Vyc29yOnYyOpHOAAE="),
                repo_page(["b"], has_next=True, cursor="opaque/+=="),
                repo_page(["c"]),
            ]
        )
        fetcher = CommitPageFetcher(client)

        await fetcher.fetch_repositories("octocat")

        assert "cursor" not in client.calls[0]["variables"]
        assert client.calls[1]["variables"]["cursor"] == "Y3Vyc29yOnYyOpHOAAE="
        assert client.calls[2]["variables"]["cursor"] == "opaque/+=="

    @pytest.mark.asyncio
    async def test_requests_configured_page_size(self):
        client = ScriptedQueryClient([repo_page(["a"])])
        fetcher = CommitPageFetcher(client, page_size=25)

        await fetcher.fetch_repositories("octocat")

        assert client.calls[0]["variables"]["pageSize"] == 25
        assert client.calls[0]["variables"]["user"] == "octocat"

    @pytest.mark.asyncio
    async def test_default_page_size_is_100(self):
        client = ScriptedQueryClient([repo_page([])])
        await CommitPageFetcher(client).fetch_repositories("octocat")
        assert client.calls[0]["variables"]["pageSize"] == 100

    @pytest.mark.asyncio
    async def test_next_page_without_cursor_is_protocol_error(self):
        client = ScriptedQueryClient([repo_page(["a"], has_next=True, cursor=None)])

        with pytest.raises(ProtocolError):
            await CommitPageFetcher(client).fetch_repositories("octocat")

    @pytest.mark.asyncio
    async def test_repeated_cursor_is_protocol_error(self):
        client = ScriptedQueryClient(
            [
                repo_page(["a"], has_next=True, cursor="same"),
                repo_page(["b"], has_next=True, cursor="same"),
            ]
        )

        with pytest.raises(ProtocolError):
            await CommitPageFetcher(client).fetch_repositories("octocat")

    @pytest.mark.asyncio
    async def test_unknown_user_is_not_found(self):
        client = ScriptedQueryClient([{"user": None}])

        with pytest.raises(NotFoundError):
            await CommitPageFetcher(client).fetch_repositories("ghost")

    @pytest.mark.asyncio
    async def test_missing_connection_is_protocol_error(self):
        client = ScriptedQueryClient([{"user": {}}])

        with pytest.raises(ProtocolError):
            await CommitPageFetcher(client).fetch_repositories("octocat")

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self):
        client = ScriptedQueryClient([TransportError("boom")])

        with pytest.raises(TransportError):
            await CommitPageFetcher(client).fetch_repositories("octocat")

    def test_rejects_non_positive_page_size(self):
        with pytest.raises(ValueError):
            CommitPageFetcher(ScriptedQueryClient([]), page_size=0)


class TestFetchCommitHistory:
    """Test default branch resolution and history paging."""

    @pytest.mark.asyncio
    async def test_resolves_default_branch_before_paging(self):
        client = ScriptedQueryClient(
            [
                branch_data("develop"),
                history_page(["c1", "c2"], has_next=True, cursor="h1"),
                history_page(["c3"]),
            ]
        )
        fetcher = CommitPageFetcher(client)

        commits = await fetcher.fetch_commit_history("octocat", "hello")

        assert [c.commit_id for c in commits] == ["c1", "c2", "c3"]
        assert client.calls[0]["variables"] == {"user": "octocat", "repo": "hello"}
        assert client.calls[1]["variables"]["branch"] == "refs/heads/develop"
        assert "cursor" not in client.calls[1]["variables"]
        assert client.calls[2]["variables"]["cursor"] == "h1"

    @pytest.mark.asyncio
    async def test_maps_node_fields(self):
        client = ScriptedQueryClient([branch_data("main"), history_page(["abc123"])])

        [commit] = await CommitPageFetcher(client).fetch_commit_history("octocat", "hello")

        assert commit.commit_id == "abc123"
        assert commit.message == "commit abc123"
        assert commit.committed_by == "Octo Cat"
        assert commit.committed_at == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        assert commit.lines_added == 3
        assert commit.lines_deleted == 1
        assert commit.repo_name == "hello"
        assert (commit.files_added, commit.files_deleted, commit.files_updated) == (0, 0, 0)

    @pytest.mark.asyncio
    async def test_zero_commits_is_empty_list(self):
        client = ScriptedQueryClient([branch_data("main"), history_page([])])

        commits = await CommitPageFetcher(client).fetch_commit_history("octocat", "hello")

        assert commits == []

    @pytest.mark.asyncio
    async def test_empty_repository_is_empty_list(self):
        client = ScriptedQueryClient([branch_data(None, is_empty=True)])

        commits = await CommitPageFetcher(client).fetch_commit_history("octocat", "fresh")

        assert commits == []
        assert len(client.calls) == 1

    @pytest.mark.asyncio
    async def test_missing_default_branch_raises(self):
        client = ScriptedQueryClient([branch_data(None, is_empty=False)])

        with pytest.raises(BranchNotFoundError):
            await CommitPageFetcher(client).fetch_commit_history("octocat", "odd")

    @pytest.mark.asyncio
    async def test_ref_vanishing_raises_branch_not_found(self):
        client = ScriptedQueryClient([branch_data("main"), {"repository": {"ref": None}}])

        with pytest.raises(BranchNotFoundError):
            await CommitPageFetcher(client).fetch_commit_history("octocat", "hello")

    @pytest.mark.asyncio
    async def test_unknown_repository_raises_not_found(self):
        client = ScriptedQueryClient([{"repository": None}])

        with pytest.raises(NotFoundError):
            await CommitPageFetcher(client).fetch_commit_history("octocat", "gone")

    @pytest.mark.asyncio
    async def test_target_without_history_is_protocol_error(self):
        client = ScriptedQueryClient(
            [branch_data("main"), {"repository": {"ref": {"target": {}}}}]
        )

        with pytest.raises(ProtocolError):
            await CommitPageFetcher(client).fetch_commit_history("octocat", "hello")

    @pytest.mark.asyncio
    async def test_malformed_commit_node_is_protocol_error(self):
        page = history_page(["c1"])
        del page["repository"]["ref"]["target"]["history"]["nodes"][0]["oid"]
        client = ScriptedQueryClient([branch_data("main"), page])

        with pytest.raises(ProtocolError):
            await CommitPageFetcher(client).fetch_commit_history("octocat", "hello")

    @pytest.mark.asyncio
    async def test_null_author_date_falls_back_to_committed_date(self):
        page = history_page(["c1"])
        node = page["repository"]["ref"]["target"]["history"]["nodes"][0]
        node["author"]["date"] = None
        node["committedDate"] = "2024-06-02T08:30:00Z"
        client = ScriptedQueryClient([branch_data("main"), page])

        [commit] = await CommitPageFetcher(client).fetch_commit_history("octocat", "hello")

        assert commit.committed_at == datetime(2024, 6, 2, 8, 30, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "responses",
        [
            [{"repository": {"isEmpty": False, "defaultBranchRef": "main"}}],
            [branch_data("main"), {"repository": {"ref": ["not", "an", "object"]}}],
            [branch_data("main"), {"repository": "hello"}],
        ],
    )
    async def test_wrong_shapes_are_protocol_errors(self, responses):
        client = ScriptedQueryClient(responses)

        with pytest.raises(ProtocolError):
            await CommitPageFetcher(client).fetch_commit_history("octocat", "hello")
