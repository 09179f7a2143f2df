"""Tests for the remote content fetcher."""

from unittest.mock import MagicMock

from adolens_core.ado.client import AdoClient
from adolens_core.ado.fetcher import MAX_FILE_SIZE, MAX_FILES, fetch_change_records
from adolens_core.exceptions import FetchFailed
from adolens_core.models import RepositoryContext

CTX = RepositoryContext("contoso", "Web", "portal", 42)

ITERATION = {
    "id": 3,
    "sourceRefCommit": {"commitId": "src-sha"},
    "commonRefCommit": {"commitId": "base-sha"},
    "targetRefCommit": {"commitId": "target-sha"},
}


def _change(path, change_type="edit", is_folder=False):
    return {"changeType": change_type, "item": {"path": path, "isFolder": is_folder}}


def _client(changes, contents=None, iterations=None):
    client = MagicMock()
    client.list_iterations.return_value = [{"id": 1}, ITERATION] if iterations is None else iterations
    client.list_changes.return_value = changes
    contents = contents or {}
    client.get_item_content.side_effect = lambda ctx, path, commit: contents.get((path, commit), "")
    return client


def test_builds_full_file_records():
    client = _client(
        [_change("/src/a.ts")],
        {("/src/a.ts", "src-sha"): "new code", ("/src/a.ts", "base-sha"): "old code"},
    )
    records = fetch_change_records(client, CTX)

    assert len(records) == 1
    record = records[0]
    assert record.filename == "/src/a.ts"
    assert record.new_content == "new code"
    assert record.original_content == "old code"
    assert record.change_type == "edit"
    assert record.has_new_code is True
    assert record.source == "remote"
    client.list_changes.assert_called_once_with(CTX, 3)


def test_added_file_has_empty_original_without_fetch():
    client = _client([_change("/src/new.ts", "add")], {("/src/new.ts", "src-sha"): "fresh"})
    records = fetch_change_records(client, CTX)

    assert records[0].original_content == ""
    fetched_commits = [c.args[2] for c in client.get_item_content.call_args_list]
    assert fetched_commits == ["src-sha"]


def test_skips_folders_deletes_and_binaries():
    client = _client(
        [
            _change("/src", is_folder=True),
            _change("/src/old.ts", "delete"),
            _change("/img/logo.png"),
            _change("/src/a.ts"),
        ],
        {("/src/a.ts", "src-sha"): "x"},
    )
    records = fetch_change_records(client, CTX)
    assert [r.filename for r in records] == ["/src/a.ts"]


def test_skips_large_files():
    client = _client(
        [_change("/big.json"), _change("/small.ts")],
        {("/big.json", "src-sha"): "x" * (MAX_FILE_SIZE + 1), ("/small.ts", "src-sha"): "y"},
    )
    records = fetch_change_records(client, CTX)
    assert [r.filename for r in records] == ["/small.ts"]


def test_skips_files_without_new_content():
    client = _client([_change("/empty.ts")])
    assert fetch_change_records(client, CTX) == []


def test_caps_file_count():
    changes = [_change(f"/src/f{i}.ts") for i in range(MAX_FILES + 5)]
    contents = {(f"/src/f{i}.ts", "src-sha"): "code" for i in range(MAX_FILES + 5)}
    records = fetch_change_records(_client(changes, contents), CTX)
    assert len(records) == MAX_FILES


def test_target_commit_used_when_no_common_ref():
    iteration = {"id": 1, "sourceRefCommit": {"commitId": "src-sha"}, "targetRefCommit": {"commitId": "target-sha"}}
    client = _client(
        [_change("/a.ts")],
        {("/a.ts", "src-sha"): "new", ("/a.ts", "target-sha"): "old"},
        iterations=[iteration],
    )
    assert fetch_change_records(client, CTX)[0].original_content == "old"


def test_no_iterations():
    assert fetch_change_records(_client([], iterations=[]), CTX) == []


def test_iteration_fetch_failure_returns_empty():
    client = MagicMock()
    client.list_iterations.side_effect = FetchFailed("boom", status_code=500)
    assert fetch_change_records(client, CTX) == []


def test_change_list_failure_returns_empty():
    client = _client([])
    client.list_changes.side_effect = FetchFailed("boom", status_code=404)
    assert fetch_change_records(client, CTX) == []


def test_keeps_file_at_exact_size_limit():
    client = _client([_change("/edge.ts")], {("/edge.ts", "src-sha"): "x" * MAX_FILE_SIZE})
    records = fetch_change_records(client, CTX)
    assert [r.filename for r in records] == ["/edge.ts"]


def test_malformed_iteration_returns_empty():
    client = _client([_change("/a.ts")], {("/a.ts", "src-sha"): "new"}, iterations=[{"id": 1}, "bogus"])
    assert fetch_change_records(client, CTX) == []
    client.list_changes.assert_not_called()


def test_malformed_entries_skipped():
    iteration = {"id": 1, "sourceRefCommit": {"commitId": "src-sha"}, "commonRefCommit": "base-sha"}
    client = _client(
        [None, {"item": "oops"}, {"item": {"path": 5}}, _change("/a.ts")],
        {("/a.ts", "src-sha"): "new"},
        iterations=[iteration],
    )
    records = fetch_change_records(client, CTX)
    assert [r.filename for r in records] == ["/a.ts"]
    assert records[0].original_content == ""


def test_sign_in_page_falls_through_to_empty():
    session = MagicMock()
    session.headers = {}
    response = MagicMock(ok=True, status_code=203, text="<html>Sign in</html>")
    session.get.return_value = response
    assert fetch_change_records(AdoClient(session=session), CTX) == []
