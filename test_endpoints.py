"""Tests for the endpoint mappings: routes, request bodies and projections."""

import pytest

from dbxwrap.endpoints import files, get_command, list_commands, paper, sharing, team, team_log, users
from dbxwrap.endpoints.base import ByEmail, ByExternalId, ById, selector_from_args
from dbxwrap.credentials import Scope


def test_selectors_serialize_to_tagged_form():
    assert ByEmail("a@b.com").to_json() == {".tag": "email", "email": "a@b.com"}
    assert ById("dbmid:1").to_json() == {".tag": "team_member_id", "team_member_id": "dbmid:1"}
    assert ByExternalId("e-9").to_json() == {".tag": "external_id", "external_id": "e-9"}


def test_selector_from_args_requires_exactly_one():
    assert selector_from_args(email="a@b.com") == ByEmail("a@b.com")
    assert selector_from_args(member_id="dbmid:1") == ById("dbmid:1")
    with pytest.raises(ValueError):
        selector_from_args()
    with pytest.raises(ValueError):
        selector_from_args(email="a@b.com", member_id="dbmid:1")


@pytest.mark.parametrize(
    "given,expected",
    [("", ""), ("/", ""), ("/Docs/", "/Docs"), ("Docs/a.txt", "/Docs/a.txt"), ("id:abc", "id:abc")],
)
def test_dropbox_path(given, expected):
    assert files.dropbox_path(given) == expected


def test_get_current_account_sends_null(mock_dropbox, client, personal):
    mock_dropbox.queue({"account_id": "dbid:1"})

    assert users.get_current_account(client, personal) == {"account_id": "dbid:1"}
    assert mock_dropbox.requests[0].path == "/2/users/get_current_account"
    assert mock_dropbox.requests[0].body == b"null"


def test_list_folder_follows_cursor(mock_dropbox, client, personal):
    mock_dropbox.queue({"entries": [{"name": "a.txt"}], "has_more": True, "cursor": "c1"})
    mock_dropbox.queue({"entries": [{"name": "b.txt"}], "has_more": False, "cursor": "c2"})

    entries = list(files.list_folder(client, personal, "/", recursive=True))

    assert [e["name"] for e in entries] == ["a.txt", "b.txt"]
    assert mock_dropbox.requests[0].json() == {
        "path": "",
        "recursive": True,
        "include_deleted": False,
    }
    assert mock_dropbox.requests[1].path == "/2/files/list_folder/continue"
    assert mock_dropbox.requests[1].json() == {"cursor": "c1"}


def test_create_folder_projects_metadata(mock_dropbox, client, personal):
    mock_dropbox.queue({"metadata": {"name": "New", "path_display": "/New"}})

    meta = files.create_folder(client, personal, "New")

    assert meta == {"name": "New", "path_display": "/New"}
    assert mock_dropbox.requests[0].path == "/2/files/create_folder_v2"
    assert mock_dropbox.requests[0].json() == {"path": "/New", "autorename": False}


def test_move_body(mock_dropbox, client, personal):
    mock_dropbox.queue({"metadata": {"name": "b"}})

    files.move(client, personal, "/a", "/b", autorename=True)

    assert mock_dropbox.requests[0].json() == {
        "from_path": "/a",
        "to_path": "/b",
        "autorename": True,
    }


def test_search_uses_v2_routes(mock_dropbox, client, personal):
    mock_dropbox.queue({"matches": [{"match_type": {".tag": "filename"}}], "has_more": True, "cursor": "s1"})
    mock_dropbox.queue({"matches": [], "has_more": False})

    matches = list(files.search(client, personal, "report", path="/Docs", max_results=5))

    assert len(matches) == 1
    assert mock_dropbox.paths == ["/2/files/search_v2", "/2/files/search/continue_v2"]
    assert mock_dropbox.requests[0].json() == {
        "query": "report",
        "options": {"path": "/Docs", "max_results": 5},
    }


def test_upload_header_and_body(mock_dropbox, client, personal):
    mock_dropbox.queue({"name": "a.txt"})

    result = files.upload(client, personal, "/a.txt", b"hello", mode="overwrite")

    req = mock_dropbox.requests[0]
    assert result == {"name": "a.txt"}
    assert req.path == "/content/2/files/upload"
    assert req.headers["Dropbox-API-Arg"] == (
        '{"path":"/a.txt","mode":{".tag":"overwrite"},"autorename":false,"mute":false}'
    )
    assert req.body == b"hello"


def test_download_uses_content_host(mock_dropbox, client, personal):
    mock_dropbox.queue(raw=b"data", headers={"Dropbox-API-Result": '{"name": "a.txt"}'})

    resp = files.download(client, personal, "/a.txt", on_behalf_of="dbmid:7")

    req = mock_dropbox.requests[0]
    assert req.path == "/content/2/files/download"
    assert req.headers["Dropbox-API-Arg"] == '{"path":"/a.txt"}'
    assert req.headers["Dropbox-API-Select-User"] == "dbmid:7"
    assert resp.content == b"data"


def test_sharing_list_folders_stops_without_cursor(mock_dropbox, client, personal):
    mock_dropbox.queue({"entries": [{"name": "A"}], "cursor": "x1"})
    mock_dropbox.queue({"entries": [{"name": "B"}]})

    names = [f["name"] for f in sharing.list_folders(client, personal)]

    assert names == ["A", "B"]
    assert mock_dropbox.paths == ["/2/sharing/list_folders", "/2/sharing/list_folders/continue"]


def test_list_shared_links_continues_on_same_route(mock_dropbox, client, personal):
    mock_dropbox.queue({"links": [{"url": "u1"}], "has_more": True, "cursor": "l1"})
    mock_dropbox.queue({"links": [{"url": "u2"}], "has_more": False})

    urls = [link["url"] for link in sharing.list_shared_links(client, personal, "/Docs")]

    assert urls == ["u1", "u2"]
    assert mock_dropbox.paths == ["/2/sharing/list_shared_links"] * 2
    assert mock_dropbox.requests[0].json() == {"path": "/Docs"}
    assert mock_dropbox.requests[1].json() == {"cursor": "l1"}


def test_add_folder_member_body(mock_dropbox, client, personal):
    mock_dropbox.queue(None)

    sharing.add_folder_member(client, personal, "84528192421", ["a@b.com"], access_level="viewer")

    assert mock_dropbox.requests[0].json() == {
        "shared_folder_id": "84528192421",
        "members": [
            {"member": {".tag": "email", "email": "a@b.com"}, "access_level": {".tag": "viewer"}}
        ],
        "quiet": False,
    }


def test_create_shared_link_settings(mock_dropbox, client, personal):
    mock_dropbox.queue({"url": "https://www.dropbox.com/s/x"})

    sharing.create_shared_link(client, personal, "/a.txt", requested_visibility="team_only")

    assert mock_dropbox.requests[0].json() == {
        "path": "/a.txt",
        "settings": {"requested_visibility": {".tag": "team_only"}},
    }


def test_get_member_returns_first_info(mock_dropbox, client, team_info):
    info = {".tag": "member_info", "profile": {"team_member_id": "dbmid:1"}}
    mock_dropbox.queue({"members_info": [info]})

    assert team.get_member(client, team_info, ByExternalId("e-1")) == info
    assert mock_dropbox.requests[0].json() == {
        "members": [{".tag": "external_id", "external_id": "e-1"}]
    }


def test_add_member_body(mock_dropbox, client, team_info):
    mock_dropbox.queue({".tag": "complete", "complete": []})

    team.add_member(client, team_info, "new@b.com", given_name="New", role="member_only")

    assert mock_dropbox.requests[0].path == "/2/team/members/add"
    assert mock_dropbox.requests[0].json() == {
        "new_members": [
            {
                "member_email": "new@b.com",
                "member_given_name": "New",
                "send_welcome_email": True,
                "role": {".tag": "member_only"},
            }
        ],
        "force_async": False,
    }


def test_remove_member_keep_account_disables_wipe(mock_dropbox, client, team_info):
    mock_dropbox.queue({".tag": "complete"})

    team.remove_member(
        client, team_info, ByEmail("gone@b.com"), keep_account=True, transfer_dest=ById("dbmid:2")
    )

    assert mock_dropbox.requests[0].json() == {
        "user": {".tag": "email", "email": "gone@b.com"},
        "wipe_data": False,
        "keep_account": True,
        "transfer_dest_id": {".tag": "team_member_id", "team_member_id": "dbmid:2"},
    }


def test_set_member_profile_needs_a_change(client, team_info):
    with pytest.raises(ValueError):
        team.set_member_profile(client, team_info, ByEmail("a@b.com"))


def test_delete_group_body(mock_dropbox, client, team_info):
    mock_dropbox.queue({".tag": "complete"})

    team.delete_group(client, team_info, "g:1234")

    assert mock_dropbox.requests[0].json() == {".tag": "group_id", "group_id": "g:1234"}


def test_get_events_body(mock_dropbox, client, team_info):
    mock_dropbox.queue({"events": [{"timestamp": "t1"}], "has_more": False, "cursor": "e1"})

    events = list(
        team_log.get_events(client, team_info, limit=50, category="logins", start_time="2026-01-01T00:00:00Z")
    )

    assert events == [{"timestamp": "t1"}]
    assert mock_dropbox.requests[0].json() == {
        "limit": 50,
        "category": {".tag": "logins"},
        "time": {"start_time": "2026-01-01T00:00:00Z"},
    }


def test_paper_list_docs_object_cursor(mock_dropbox, client, personal):
    mock_dropbox.queue(
        {"doc_ids": ["d1"], "cursor": {"value": "pc1", "expiration": "2026-10-20T00:00:00Z"}, "has_more": True}
    )
    mock_dropbox.queue({"doc_ids": ["d2"], "cursor": {"value": "pc2"}, "has_more": False})

    assert list(paper.list_docs(client, personal)) == ["d1", "d2"]
    assert mock_dropbox.requests[1].path == "/2/paper/docs/list/continue"
    assert mock_dropbox.requests[1].json() == {"cursor": "pc1"}


def test_paper_download_doc_header(mock_dropbox, client, personal):
    mock_dropbox.queue(raw=b"# Title\n", headers={"Dropbox-API-Result": '{"title": "Title"}'})

    resp = paper.download_doc(client, personal, "d1")

    assert mock_dropbox.requests[0].headers["Dropbox-API-Arg"] == (
        '{"doc_id":"d1","export_format":"markdown"}'
    )
    assert resp.result == {"title": "Title"}
    assert resp.content == b"# Title\n"


def test_paper_create_doc(mock_dropbox, client, personal):
    mock_dropbox.queue({"doc_id": "d9", "revision": 1, "title": "Notes"})

    result = paper.create_doc(client, personal, b"# Notes\n")

    assert result["doc_id"] == "d9"
    assert mock_dropbox.requests[0].headers["Dropbox-API-Arg"] == '{"import_format":"markdown"}'
    assert mock_dropbox.requests[0].body == b"# Notes\n"


def test_registry():
    ls = get_command("ls")
    assert ls is not None and ls.scope is Scope.PERSONAL and ls.delegable
    assert get_command("add-member").scope is Scope.TEAM_MEMBER_MANAGEMENT
    assert get_command("events").scope is Scope.TEAM_AUDITING
    assert get_command("nope") is None
    assert get_command(None) is None
    names = [c.name for c in list_commands()]
    assert len(names) == len(set(names))
