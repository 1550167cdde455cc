"""
Noteful Backend — Notes API Tests
===================================

What:  /api/notes end to end: reference validation on write, partial
       updates, filtered listing, ownership scoping.

What we test:
    ✅ Create with folder and tags; Location header; camelCase body
    ✅ Another user's folder or tag is rejected like a missing one
    ✅ Missing title, malformed references, tags not an array
    ✅ Partial update semantics for folderId and tags
    ✅ searchTerm / folderId / tagId filters, newest-updated first
    ✅ Delete, and 404 for unknown or foreign notes
"""

import pytest
import pytest_asyncio

from noteful.ids import new_id


async def _create(client, headers, path, payload):
    response = await client.post(path, json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest_asyncio.fixture
async def workspace(test_client, alice):
    """Alice's folder and two tags."""
    return {
        "folder": await _create(test_client, alice, "/api/folders", {"name": "Pets"}),
        "red": await _create(test_client, alice, "/api/tags", {"name": "red"}),
        "blue": await _create(test_client, alice, "/api/tags", {"name": "blue"}),
    }


class TestCreateNote:

    @pytest.mark.asyncio
    async def test_create_with_references(self, test_client, alice, workspace):
        tag_ids = sorted([workspace["red"]["id"], workspace["blue"]["id"]])
        response = await test_client.post(
            "/api/notes",
            json={
                "title": "Cats",
                "content": "All about cats",
                "folderId": workspace["folder"]["id"],
                "tags": tag_ids,
            },
            headers=alice,
        )
        assert response.status_code == 201
        note = response.json()
        assert response.headers["Location"] == f"/api/notes/{note['id']}"
        assert note["title"] == "Cats"
        assert note["content"] == "All about cats"
        assert note["folderId"] == workspace["folder"]["id"]
        assert note["tags"] == tag_ids
        assert {"userId", "createdAt", "updatedAt"} <= set(note)

    @pytest.mark.asyncio
    async def test_duplicate_tag_ids_collapse(self, test_client, alice, workspace):
        red = workspace["red"]["id"]
        note = await _create(
            test_client, alice, "/api/notes", {"title": "T", "tags": [red, red]}
        )
        assert note["tags"] == [red]

    @pytest.mark.asyncio
    async def test_foreign_folder_rejected(self, test_client, alice, bob):
        bobs_folder = await _create(test_client, bob, "/api/folders", {"name": "Bob"})
        response = await test_client.post(
            "/api/notes", json={"title": "T", "folderId": bobs_folder["id"]}, headers=alice
        )
        assert response.status_code == 400
        assert response.json()["error"] == "reference_not_found"
        assert response.json()["message"] == "The folder does not exist"

        # Nothing was written
        assert (await test_client.get("/api/notes", headers=alice)).json() == []

    @pytest.mark.asyncio
    async def test_foreign_tag_rejected(self, test_client, alice, bob, workspace):
        bobs_tag = await _create(test_client, bob, "/api/tags", {"name": "bob"})
        response = await test_client.post(
            "/api/notes",
            json={"title": "T", "tags": [workspace["red"]["id"], bobs_tag["id"]]},
            headers=alice,
        )
        assert response.status_code == 400
        assert response.json()["error"] == "reference_not_found"
        assert response.json()["message"] == "One or more tags are invalid"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{"content": "no title"}, {"title": ""}])
    async def test_missing_title(self, test_client, alice, payload):
        response = await test_client.post("/api/notes", json=payload, headers=alice)
        assert response.status_code == 400
        assert response.json()["error"] == "missing_required_field"
        assert "title" in response.json()["message"]

    @pytest.mark.asyncio
    async def test_malformed_folder_id(self, test_client, alice):
        response = await test_client.post(
            "/api/notes", json={"title": "T", "folderId": "nope"}, headers=alice
        )
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_reference"

    @pytest.mark.asyncio
    async def test_tags_not_an_array(self, test_client, alice, workspace):
        response = await test_client.post(
            "/api/notes", json={"title": "T", "tags": workspace["red"]["id"]}, headers=alice
        )
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_shape"

    @pytest.mark.asyncio
    async def test_body_must_be_object(self, test_client, alice):
        response = await test_client.post("/api/notes", json=["title"], headers=alice)
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_shape"


class TestUpdateNote:

    @pytest_asyncio.fixture
    async def note(self, test_client, alice, workspace):
        return await _create(
            test_client,
            alice,
            "/api/notes",
            {
                "title": "Original",
                "content": "Body",
                "folderId": workspace["folder"]["id"],
                "tags": [workspace["red"]["id"]],
            },
        )

    @pytest.mark.asyncio
    async def test_title_only_keeps_everything_else(self, test_client, alice, note):
        response = await test_client.put(
            f"/api/notes/{note['id']}", json={"title": "Renamed"}, headers=alice
        )
        assert response.status_code == 200
        updated = response.json()
        assert updated["title"] == "Renamed"
        assert updated["content"] == note["content"]
        assert updated["folderId"] == note["folderId"]
        assert updated["tags"] == note["tags"]
        assert updated["createdAt"] == note["createdAt"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("folder_id", [None, ""])
    async def test_clearing_the_folder(self, test_client, alice, note, folder_id):
        response = await test_client.put(
            f"/api/notes/{note['id']}", json={"folderId": folder_id}, headers=alice
        )
        assert response.json()["folderId"] is None

    @pytest.mark.asyncio
    async def test_replacing_and_clearing_tags(self, test_client, alice, note, workspace):
        path = f"/api/notes/{note['id']}"
        blue = workspace["blue"]["id"]

        response = await test_client.put(path, json={"tags": [blue]}, headers=alice)
        assert response.json()["tags"] == [blue]

        response = await test_client.put(path, json={"tags": None}, headers=alice)
        assert response.json()["tags"] == [blue]

        response = await test_client.put(path, json={"tags": []}, headers=alice)
        assert response.json()["tags"] == []

    @pytest.mark.asyncio
    async def test_foreign_folder_rejected_on_update(self, test_client, alice, bob, note):
        bobs_folder = await _create(test_client, bob, "/api/folders", {"name": "Bob"})
        response = await test_client.put(
            f"/api/notes/{note['id']}", json={"folderId": bobs_folder["id"]}, headers=alice
        )
        assert response.status_code == 400
        assert response.json()["error"] == "reference_not_found"

        current = (await test_client.get(f"/api/notes/{note['id']}", headers=alice)).json()
        assert current["folderId"] == note["folderId"]

    @pytest.mark.asyncio
    async def test_empty_title_rejected(self, test_client, alice, note):
        response = await test_client.put(
            f"/api/notes/{note['id']}", json={"title": ""}, headers=alice
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_foreign_note_is_404(self, test_client, bob, note):
        response = await test_client.put(
            f"/api/notes/{note['id']}", json={"title": "Hijack"}, headers=bob
        )
        assert response.status_code == 404


class TestListNotes:

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive_and_scoped(self, test_client, alice, bob):
        matches = [
            await _create(test_client, alice, "/api/notes", {"title": "Lessons from CATS"}),
            await _create(
                test_client, alice, "/api/notes",
                {"title": "Dogs", "content": "Dogs are not cats"},
            ),
        ]
        await _create(test_client, alice, "/api/notes", {"title": "Groceries", "content": "milk"})
        await _create(test_client, bob, "/api/notes", {"title": "Bob likes cats"})

        response = await test_client.get("/api/notes", params={"searchTerm": "cats"}, headers=alice)
        assert response.status_code == 200
        assert sorted(n["id"] for n in response.json()) == sorted(n["id"] for n in matches)

    @pytest.mark.asyncio
    async def test_search_term_is_literal(self, test_client, alice):
        await _create(test_client, alice, "/api/notes", {"title": "100% done"})
        await _create(test_client, alice, "/api/notes", {"title": "1000 things"})

        response = await test_client.get("/api/notes", params={"searchTerm": "0%"}, headers=alice)
        assert [n["title"] for n in response.json()] == ["100% done"]

    @pytest.mark.asyncio
    async def test_filters_combine(self, test_client, alice, workspace):
        folder_id, red = workspace["folder"]["id"], workspace["red"]["id"]
        both = await _create(
            test_client, alice, "/api/notes", {"title": "both", "folderId": folder_id, "tags": [red]}
        )
        await _create(test_client, alice, "/api/notes", {"title": "folder", "folderId": folder_id})
        await _create(test_client, alice, "/api/notes", {"title": "tag", "tags": [red]})

        response = await test_client.get(
            "/api/notes", params={"folderId": folder_id, "tagId": red}, headers=alice
        )
        assert [n["id"] for n in response.json()] == [both["id"]]

        response = await test_client.get("/api/notes", params={"folderId": folder_id}, headers=alice)
        assert {n["title"] for n in response.json()} == {"both", "folder"}

    @pytest.mark.asyncio
    async def test_most_recently_updated_first(self, test_client, alice):
        first = await _create(test_client, alice, "/api/notes", {"title": "first"})
        await _create(test_client, alice, "/api/notes", {"title": "second"})

        response = await test_client.get("/api/notes", headers=alice)
        assert [n["title"] for n in response.json()] == ["second", "first"]

        await test_client.put(f"/api/notes/{first['id']}", json={"content": "x"}, headers=alice)
        response = await test_client.get("/api/notes", headers=alice)
        assert [n["title"] for n in response.json()] == ["first", "second"]

    @pytest.mark.asyncio
    async def test_malformed_filter_id(self, test_client, alice):
        response = await test_client.get("/api/notes", params={"tagId": "bad"}, headers=alice)
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_reference"


class TestGetAndDeleteNote:

    @pytest.mark.asyncio
    async def test_get_unknown_and_foreign(self, test_client, alice, bob):
        note = await _create(test_client, bob, "/api/notes", {"title": "Bob's"})
        assert (await test_client.get(f"/api/notes/{note['id']}", headers=alice)).status_code == 404
        assert (await test_client.get(f"/api/notes/{new_id()}", headers=alice)).status_code == 404

    @pytest.mark.asyncio
    async def test_malformed_id(self, test_client, alice):
        response = await test_client.get("/api/notes/123", headers=alice)
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_reference"

    @pytest.mark.asyncio
    async def test_delete(self, test_client, alice, bob):
        note = await _create(test_client, alice, "/api/notes", {"title": "Bye"})
        path = f"/api/notes/{note['id']}"

        assert (await test_client.delete(path, headers=bob)).status_code == 404
        assert (await test_client.delete(path, headers=alice)).status_code == 204
        assert (await test_client.get(path, headers=alice)).status_code == 404
        assert (await test_client.delete(path, headers=alice)).status_code == 404
