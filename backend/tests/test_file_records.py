import asyncio
import uuid

import pytest

from cloudshare.services.errors import NotFound, ShareTokenConflict

from tests.conftest import OTHER_USER, OWNER


async def _create(services, owner=OWNER, name="notes.txt", size=12):
    return await services.records.create(
        owner_id=owner,
        display_name=name,
        storage_key=f"key-{uuid.uuid4().hex}",
        storage_url=f"memory://{name}",
        size_bytes=size,
        media_type="text/plain",
    )


class TestFileRecordStore:
    """Persistence contract over the files table."""

    async def test_create_returns_private_record(self, services):
        record = await _create(services)

        assert record.share_token is None
        assert record.is_public is False
        assert record.download_count == 0
        assert record.created_at == record.updated_at

    async def test_get_by_id_returns_snapshot(self, services):
        created = await _create(services)

        fetched = await services.records.get_by_id(created.id)

        assert fetched.id == created.id
        assert fetched.display_name == "notes.txt"
        assert fetched.created_at.tzinfo is not None

    async def test_get_by_id_missing_raises_not_found(self, services):
        with pytest.raises(NotFound):
            await services.records.get_by_id(uuid.uuid4())

    async def test_snapshots_do_not_observe_later_writes(self, services):
        created = await _create(services)

        await services.records.increment_download_count(created.id)

        assert created.download_count == 0
        assert (await services.records.get_by_id(created.id)).download_count == 1

    async def test_list_by_owner_is_newest_first_and_scoped(self, services):
        first = await _create(services, name="a.txt")
        second = await _create(services, name="b.txt")
        await _create(services, owner=OTHER_USER, name="c.txt")

        records = await services.records.list_by_owner(OWNER)

        assert [r.id for r in records] == [second.id, first.id]

    async def test_update_share_fields_sets_token_and_public(self, services):
        created = await _create(services)

        updated = await services.records.update_share_fields(created.id, "t" * 32)

        assert updated.share_token == "t" * 32
        assert updated.is_public is True
        assert updated.updated_at >= created.updated_at

    async def test_update_share_fields_keeps_first_token(self, services):
        created = await _create(services)
        await services.records.update_share_fields(created.id, "first" + "x" * 27)

        again = await services.records.update_share_fields(created.id, "second" + "y" * 26)

        assert again.share_token == "first" + "x" * 27

    async def test_update_share_fields_duplicate_token_conflicts(self, services):
        one = await _create(services, name="one.txt")
        two = await _create(services, name="two.txt")
        await services.records.update_share_fields(one.id, "same" * 8)

        with pytest.raises(ShareTokenConflict):
            await services.records.update_share_fields(two.id, "same" * 8)

        assert (await services.records.get_by_id(two.id)).share_token is None

    async def test_get_by_share_token(self, services):
        created = await _create(services)
        await services.records.update_share_fields(created.id, "k" * 32)

        found = await services.records.get_by_share_token("k" * 32)

        assert found.id == created.id
        with pytest.raises(NotFound):
            await services.records.get_by_share_token("k" * 31)

    async def test_increment_download_count_missing_raises_not_found(self, services):
        with pytest.raises(NotFound):
            await services.records.increment_download_count(uuid.uuid4())

    async def test_concurrent_increments_are_not_lost(self, services):
        created = await _create(services)

        counts = await asyncio.gather(
            *(services.records.increment_download_count(created.id) for _ in range(100))
        )

        assert sorted(counts) == list(range(1, 101))
        assert (await services.records.get_by_id(created.id)).download_count == 100

    async def test_delete_removes_record(self, services):
        created = await _create(services)

        await services.records.delete(created.id)

        with pytest.raises(NotFound):
            await services.records.get_by_id(created.id)
        with pytest.raises(NotFound):
            await services.records.delete(created.id)

    async def test_owner_totals(self, services):
        a = await _create(services, size=100)
        await _create(services, size=50)
        await _create(services, owner=OTHER_USER, size=999)
        await services.records.update_share_fields(a.id, "z" * 32)
        await services.records.increment_download_count(a.id)
        await services.records.increment_download_count(a.id)

        totals = await services.records.owner_totals(OWNER)

        assert totals.file_count == 2
        assert totals.total_bytes == 150
        assert totals.total_downloads == 2
        assert totals.shared_count == 1

    async def test_owner_totals_for_owner_without_files(self, services):
        totals = await services.records.owner_totals("nobody")

        assert totals.file_count == 0
        assert totals.total_bytes == 0
