"""
Noteful Backend — Ownership Validator Tests
=============================================

What:  Folder and tag references must name entities owned by the caller.
How:   Real repositories against the per-test SQLite database.
"""

import asyncio

import pytest
import pytest_asyncio

from noteful.database import session_scope
from noteful.exceptions import (
    InvalidReferenceError,
    InvalidShapeError,
    ReferenceNotFoundError,
)
from noteful.ids import new_id
from noteful.repositories import folder_repository, tag_repository, user_repository
from noteful.services.ownership import OwnershipValidator


@pytest_asyncio.fixture
async def owners(sessions):
    """Two users, each with one folder and two tags."""
    data = {}
    async with session_scope(sessions) as session:
        for username in ("u1", "u2"):
            user = await user_repository.create(session, username, "hash")
            folder = await folder_repository.create(session, user.id, "Inbox")
            tags = [
                await tag_repository.create(session, user.id, name)
                for name in ("red", "blue")
            ]
            data[username] = {
                "id": user.id,
                "folder": folder.id,
                "tags": [tag.id for tag in tags],
            }
    return data


class TestFolderOwnership:

    def setup_method(self):
        self.validator = OwnershipValidator()

    @pytest.mark.asyncio
    async def test_own_folder_passes(self, sessions, owners):
        await self.validator.validate_folder_ownership(
            sessions, owners["u1"]["folder"], owners["u1"]["id"]
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("folder_id", [None, ""])
    async def test_no_folder_passes(self, sessions, owners, folder_id):
        await self.validator.validate_folder_ownership(sessions, folder_id, owners["u1"]["id"])

    @pytest.mark.asyncio
    async def test_foreign_folder_rejected(self, sessions, owners):
        """Another user's folder reads exactly like a missing one."""
        with pytest.raises(ReferenceNotFoundError) as foreign:
            await self.validator.validate_folder_ownership(
                sessions, owners["u2"]["folder"], owners["u1"]["id"]
            )
        with pytest.raises(ReferenceNotFoundError) as missing:
            await self.validator.validate_folder_ownership(
                sessions, new_id(), owners["u1"]["id"]
            )
        assert foreign.value.message == missing.value.message == "The folder does not exist"

    @pytest.mark.asyncio
    async def test_malformed_folder_id(self, sessions, owners):
        with pytest.raises(InvalidReferenceError):
            await self.validator.validate_folder_ownership(sessions, "xyz", owners["u1"]["id"])


class TestTagOwnership:

    def setup_method(self):
        self.validator = OwnershipValidator()

    @pytest.mark.asyncio
    async def test_own_tags_pass(self, sessions, owners):
        await self.validator.validate_tag_ownership(
            sessions, owners["u1"]["tags"], owners["u1"]["id"]
        )

    @pytest.mark.asyncio
    async def test_duplicate_ids_count_once(self, sessions, owners):
        tag_id = owners["u1"]["tags"][0]
        await self.validator.validate_tag_ownership(
            sessions, [tag_id, tag_id], owners["u1"]["id"]
        )

    @pytest.mark.asyncio
    async def test_one_foreign_tag_rejects_all(self, sessions, owners):
        tag_ids = [owners["u1"]["tags"][0], owners["u2"]["tags"][0]]
        with pytest.raises(ReferenceNotFoundError) as exc_info:
            await self.validator.validate_tag_ownership(sessions, tag_ids, owners["u1"]["id"])
        assert exc_info.value.message == "One or more tags are invalid"

    @pytest.mark.asyncio
    async def test_not_a_list(self, sessions, owners):
        with pytest.raises(InvalidShapeError):
            await self.validator.validate_tag_ownership(
                sessions, owners["u1"]["tags"][0], owners["u1"]["id"]
            )

    @pytest.mark.asyncio
    async def test_malformed_element(self, sessions, owners):
        with pytest.raises(InvalidReferenceError):
            await self.validator.validate_tag_ownership(sessions, ["bad"], owners["u1"]["id"])

    @pytest.mark.asyncio
    @pytest.mark.parametrize("tag_ids", [None, []])
    async def test_no_tags_pass(self, sessions, owners, tag_ids):
        await self.validator.validate_tag_ownership(sessions, tag_ids, owners["u1"]["id"])


class TestValidateReferences:

    def setup_method(self):
        self.validator = OwnershipValidator()

    @pytest.mark.asyncio
    async def test_both_valid(self, sessions, owners):
        u1 = owners["u1"]
        await self.validator.validate_references(sessions, u1["folder"], u1["tags"], u1["id"])

    @pytest.mark.asyncio
    async def test_folder_failure_surfaces(self, sessions, owners):
        u1 = owners["u1"]
        with pytest.raises(ReferenceNotFoundError) as exc_info:
            await self.validator.validate_references(
                sessions, owners["u2"]["folder"], u1["tags"], u1["id"]
            )
        assert exc_info.value.field == "folderId"

    @pytest.mark.asyncio
    async def test_failure_cancels_the_pending_check(self, sessions, owners, monkeypatch):
        """A fast rejection does not wait for the slower sibling check."""
        cancelled = asyncio.Event()

        async def slow_tag_check(*args):
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        monkeypatch.setattr(self.validator, "validate_tag_ownership", slow_tag_check)
        with pytest.raises(InvalidReferenceError):
            await asyncio.wait_for(
                self.validator.validate_references(
                    sessions, "malformed", owners["u1"]["tags"], owners["u1"]["id"]
                ),
                timeout=5,
            )
        assert cancelled.is_set()
