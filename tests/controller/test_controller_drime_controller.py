import json
import unittest
from typing import Callable
from unittest.mock import Mock

import httpx

from drimefs.controller import DrimeController
from drimefs.errors import (
    AlreadyExistsError,
    AuthError,
    InvalidArgumentError,
    InvalidResponseError,
    IsDirectoryError,
    NetworkError,
    NotFoundError,
    ServerError,
)
from drimefs.models import FILE, FOLDER, Entry, RangeOption
from drimefs.pacer import Pacer

API = "https://app.drime.cloud/api/v1"


def _entry_json(entry_id: int, name: str, kind: str = "text", parent_id=None) -> dict:
    return {
        "id": entry_id,
        "name": name,
        "type": kind,
        "file_size": 10,
        "parent_id": parent_id,
        "updated_at": "2025-01-01T00:00:00.000000Z",
        "url": f"api/v1/file-entries/{entry_id}" if kind != "folder" else None,
    }


class TestDrimeController(unittest.TestCase):
    def setUp(self) -> None:
        self.requests: list[httpx.Request] = []
        self.handler: Callable[[httpx.Request], httpx.Response] = lambda r: httpx.Response(200)

        def transport(request: httpx.Request) -> httpx.Response:
            request.read()
            self.requests.append(request)
            return self.handler(request)

        self.client = httpx.Client(base_url=API, transport=httpx.MockTransport(transport))
        self.addCleanup(self.client.close)
        self.pacer = Pacer(retries=3, sleep=Mock(), clock=lambda: 0.0)
        self.ctrl = DrimeController.from_client(self.client, self.pacer, token="tok")

    def _body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)

    # ----------------------------
    # Listing
    # ----------------------------
    def test_list_children_walks_all_pages(self) -> None:
        sizes = {1: 50, 2: 50, 3: 7}

        def handler(request: httpx.Request) -> httpx.Response:
            page = int(request.url.params["page"])
            start = sum(sizes[p] for p in range(1, page)) + 1
            data = [_entry_json(start + i, f"f{start + i}", parent_id=9) for i in range(sizes[page])]
            return httpx.Response(
                200, json={"data": data, "current_page": page, "last_page": 3}
            )

        self.handler = handler
        entries = self.ctrl.list_children(9)

        self.assertEqual(len(entries), 107)
        self.assertEqual(len({e.id for e in entries}), 107)
        self.assertEqual(len(self.requests), 3)
        for request in self.requests:
            self.assertEqual(request.url.path, "/api/v1/drive/file-entries")
            self.assertEqual(request.url.params["parentId"], "9")
            self.assertEqual(request.headers["Authorization"], "Bearer tok")

    def test_list_root_omits_parent_id(self) -> None:
        self.handler = lambda r: httpx.Response(
            200,
            json={
                "data": [_entry_json(1, "docs", "folder"), _entry_json(2, "a.txt")],
                "current_page": 1,
                "last_page": 1,
            },
        )
        entries = self.ctrl.list_children(None)

        self.assertNotIn("parentId", self.requests[0].url.params)
        self.assertEqual([e.kind for e in entries], [FOLDER, FILE])
        self.assertIsNone(entries[0].parent_id)

    def test_list_pages_by_local_counter(self) -> None:
        self.handler = lambda r: httpx.Response(
            200,
            json={
                "data": [_entry_json(int(r.url.params["page"]), "f", parent_id=9)],
                "current_page": 1,
                "last_page": 3,
            },
        )
        entries = self.ctrl.list_children(9)

        self.assertEqual([r.url.params["page"] for r in self.requests], ["1", "2", "3"])
        self.assertEqual([e.id for e in entries], [1, 2, 3])

    def test_list_stops_when_last_page_missing(self) -> None:
        self.handler = lambda r: httpx.Response(200, json={"data": []})
        self.assertEqual(self.ctrl.list_children(None), [])
        self.assertEqual(len(self.requests), 1)

    def test_list_rejects_non_object(self) -> None:
        self.handler = lambda r: httpx.Response(200, json=[1, 2])
        with self.assertRaises(InvalidResponseError):
            self.ctrl.list_children(None)

    # ----------------------------
    # Errors and retries
    # ----------------------------
    def test_server_error_is_retried(self) -> None:
        responses = [
            httpx.Response(503, json={"message": "busy"}),
            httpx.Response(200, json={"fileEntry": _entry_json(4, "a.txt")}),
        ]
        self.handler = lambda r: responses.pop(0)

        entry = self.ctrl.get_entry(4)
        self.assertEqual(entry.id, 4)
        self.assertEqual(len(self.requests), 2)

    def test_not_found_is_not_retried(self) -> None:
        self.handler = lambda r: httpx.Response(404, json={"message": "nope"})
        with self.assertRaises(NotFoundError) as cm:
            self.ctrl.get_entry(4)
        self.assertEqual(len(self.requests), 1)
        self.assertEqual(cm.exception.details["status_code"], 404)
        self.assertEqual(str(cm.exception), "nope")

    def test_server_error_gives_up_after_retries(self) -> None:
        self.handler = lambda r: httpx.Response(500)
        with self.assertRaises(ServerError):
            self.ctrl.get_entry(4)
        self.assertEqual(len(self.requests), 3)

    def test_transport_failure_becomes_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        self.handler = handler
        with self.assertRaises(NetworkError):
            self.ctrl.get_entry(4)
        self.assertEqual(len(self.requests), 3)

    def test_invalid_json(self) -> None:
        self.handler = lambda r: httpx.Response(200, content=b"<html>")
        with self.assertRaises(InvalidResponseError):
            self.ctrl.get_entry(4)

    # ----------------------------
    # Mutations
    # ----------------------------
    def test_create_folder_body(self) -> None:
        self.handler = lambda r: httpx.Response(
            200, json={"folder": _entry_json(11, "new", "folder", parent_id=9)}
        )
        entry = self.ctrl.create_folder("new", 9)

        request = self.requests[0]
        self.assertEqual(request.method, "POST")
        self.assertEqual(request.url.path, "/api/v1/folders")
        self.assertEqual(self._body(), {"name": "new", "parent_id": 9})
        self.assertEqual(entry.id, 11)
        self.assertTrue(entry.is_folder)

    def test_create_folder_in_root_sends_zero(self) -> None:
        self.handler = lambda r: httpx.Response(
            200, json={"folder": _entry_json(11, "new", "folder")}
        )
        self.ctrl.create_folder("new", None)
        self.assertEqual(self._body(), {"name": "new", "parent_id": 0})

    def test_create_folder_422_is_already_exists(self) -> None:
        self.handler = lambda r: httpx.Response(
            422, json={"message": "The name has already been taken."}
        )
        with self.assertRaises(AlreadyExistsError) as cm:
            self.ctrl.create_folder("dup", 9)
        self.assertEqual(len(self.requests), 1)
        self.assertEqual(cm.exception.details["status_code"], 422)
        self.assertEqual(cm.exception.details["name"], "dup")

    def test_create_folder_rejects_bad_name(self) -> None:
        for name in ("", "a/b"):
            with self.assertRaises(InvalidArgumentError):
                self.ctrl.create_folder(name, None)
        self.assertEqual(self.requests, [])

    def test_delete_entries_body(self) -> None:
        self.ctrl.delete_entries([5, 6], permanent=True)
        self.assertEqual(self.requests[0].url.path, "/api/v1/file-entries/delete")
        self.assertEqual(self._body(), {"entryIds": [5, 6], "deleteForever": True})

        with self.assertRaises(InvalidArgumentError):
            self.ctrl.delete_entries([], permanent=False)

    def test_move_entries_body(self) -> None:
        self.ctrl.move_entries([5], 9)
        self.assertEqual(self.requests[0].url.path, "/api/v1/file-entries/move")
        self.assertEqual(self._body(), {"entryIds": [5], "destinationId": 9})

        self.ctrl.move_entries([5], None)
        self.assertEqual(self._body(), {"entryIds": [5], "destinationId": 0})

    def test_rename_entry(self) -> None:
        self.handler = lambda r: httpx.Response(
            200, json={"fileEntry": _entry_json(5, "b.txt", parent_id=9)}
        )
        entry = self.ctrl.rename_entry(5, "b.txt")

        request = self.requests[0]
        self.assertEqual(request.method, "PUT")
        self.assertEqual(request.url.path, "/api/v1/file-entries/5")
        self.assertEqual(self._body(), {"name": "b.txt"})
        self.assertEqual(entry.name, "b.txt")

    # ----------------------------
    # Content
    # ----------------------------
    def test_upload_content_multipart(self) -> None:
        self.handler = lambda r: httpx.Response(
            200, json={"fileEntry": _entry_json(30, "a.txt", parent_id=9)}
        )
        entry = self.ctrl.upload_content(b"hello world", "a.txt", 9)

        request = self.requests[0]
        self.assertEqual(request.url.path, "/api/v1/uploads")
        self.assertIn("multipart/form-data", request.headers["Content-Type"])
        self.assertIn(b'name="parentId"', request.content)
        self.assertIn(b'filename="a.txt"', request.content)
        self.assertIn(b"hello world", request.content)
        self.assertEqual(entry.id, 30)

    def test_upload_to_root_omits_parent(self) -> None:
        self.handler = lambda r: httpx.Response(
            200, json={"fileEntry": _entry_json(30, "a.txt")}
        )
        self.ctrl.upload_content([b"ab", b"cd"], "a.txt", None)
        self.assertNotIn(b'name="parentId"', self.requests[0].content)
        self.assertIn(b"abcd", self.requests[0].content)

    def test_upload_retry_resends_body(self) -> None:
        responses = [
            httpx.Response(502),
            httpx.Response(200, json={"fileEntry": _entry_json(30, "a.txt")}),
        ]
        self.handler = lambda r: responses.pop(0)
        self.ctrl.upload_content(b"payload", "a.txt", None)

        self.assertEqual(len(self.requests), 2)
        self.assertIn(b"payload", self.requests[1].content)

    def test_download_content(self) -> None:
        self.handler = lambda r: httpx.Response(200, content=b"0123456789")
        entry = Entry(id=42, name="a.txt", kind=FILE, download_url="api/v1/file-entries/42")

        stream = self.ctrl.download_content(entry, [RangeOption(2, 5)])
        self.assertEqual(stream.read(), b"0123456789")

        request = self.requests[0]
        self.assertEqual(str(request.url), "https://app.drime.cloud/api/v1/file-entries/42")
        self.assertEqual(request.headers["Range"], "bytes=2-5")

    def test_download_folder_rejected(self) -> None:
        with self.assertRaises(IsDirectoryError):
            self.ctrl.download_content(Entry(id=1, name="d", kind=FOLDER))
        self.assertEqual(self.requests, [])

    # ----------------------------
    # Authentication
    # ----------------------------
    def test_login_sets_token(self) -> None:
        self.handler = lambda r: httpx.Response(200, json={"user": {"access_token": "fresh"}})
        token = self.ctrl.login("me@example.com", "pw")

        self.assertEqual(token, "fresh")
        self.assertEqual(self.requests[0].url.path, "/api/v1/auth/login")
        self.assertEqual(self._body(), {"email": "me@example.com", "password": "pw"})

        self.handler = lambda r: httpx.Response(200)
        self.ctrl.delete_entries([1], permanent=False)
        self.assertEqual(self.requests[-1].headers["Authorization"], "Bearer fresh")

    def test_login_without_token(self) -> None:
        self.handler = lambda r: httpx.Response(200, json={"user": {}})
        with self.assertRaises(AuthError):
            self.ctrl.login("me@example.com", "pw")

    def test_unauthorized(self) -> None:
        self.handler = lambda r: httpx.Response(401, json={"message": "Unauthenticated."})
        with self.assertRaises(AuthError):
            self.ctrl.get_entry(1)
        self.assertEqual(len(self.requests), 1)


if __name__ == "__main__":
    unittest.main()
