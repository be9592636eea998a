"""
Tests for the async generic repository and the per-entity repositories.
Covers: CRUD round trip, create_date handling, tracking, includes,
argument validation, typed repositories.
"""

from datetime import UTC, datetime, timedelta
import uuid

import pytest
from sqlalchemy.orm.exc import StaleDataError

from sozluk.domain.exceptions import InvalidArgumentError
from sozluk.domain.models import EmailConfirmation, Entry, EntryComment, User
from sozluk.domain.repository import (
    EmailConfirmationRepository,
    EntryCommentRepository,
    EntryRepository,
    GenericRepository,
    IEntryRepository,
    IGenericRepository,
    IUserRepository,
    UserRepository,
)


class TestGenericRepository:
    """Test async repository operations"""

    @pytest.mark.asyncio
    async def test_round_trip(self, async_session_factory, make_user):
        """Test add then read back in a fresh context"""
        user = make_user(first_name="Round")
        async with async_session_factory() as session:
            assert await UserRepository(session).add(user) == 1

        async with async_session_factory() as session:
            loaded = await UserRepository(session).get_by_id(user.id)

        assert loaded is not None
        assert loaded is not user
        assert loaded.first_name == "Round"
        assert loaded.create_date == user.create_date
        assert loaded.create_date.tzinfo is not None

    @pytest.mark.asyncio
    async def test_add_keeps_preset_create_date(self, async_session_factory, make_user):
        """Test a preset create_date is stored unchanged"""
        preset = datetime(2019, 3, 4, 5, 6, 7, tzinfo=UTC)
        user = make_user(create_date=preset)
        async with async_session_factory() as session:
            await UserRepository(session).add(user)

        async with async_session_factory() as session:
            loaded = await UserRepository(session).get_by_id(user.id)

        assert loaded.create_date == preset

    @pytest.mark.asyncio
    async def test_update_keeps_create_date(self, async_session_factory, make_user):
        """Test update never rewrites create_date"""
        user = make_user()
        async with async_session_factory() as session:
            await UserRepository(session).add(user)
        original = user.create_date

        user.user_name = "renamed"
        user.create_date = original + timedelta(days=1)
        async with async_session_factory() as session:
            assert await UserRepository(session).update(user) == 1

        async with async_session_factory() as session:
            loaded = await UserRepository(session).get_by_id(user.id)

        assert loaded.user_name == "renamed"
        assert loaded.create_date == original

    @pytest.mark.asyncio
    async def test_add_range_empty(self, async_session):
        """Test an empty collection returns 0"""
        repo = UserRepository(async_session)

        assert await repo.add_range([]) == 0
        assert await repo.bulk_add(iter([])) == 0
        assert await repo.bulk_update([]) == 0
        assert await repo.bulk_delete_entities([]) == 0
        assert await repo.bulk_delete_by_id([]) == 0

    @pytest.mark.asyncio
    async def test_none_arguments(self, async_session):
        """Test None arguments raise InvalidArgumentError"""
        repo = UserRepository(async_session)

        with pytest.raises(InvalidArgumentError):
            await repo.add(None)
        with pytest.raises(InvalidArgumentError):
            await repo.add_range(None)
        with pytest.raises(InvalidArgumentError):
            await repo.update(None)

    @pytest.mark.asyncio
    async def test_add_or_update_missing_row(self, async_session, make_user):
        """Test add_or_update of an unknown entity fails instead of inserting"""
        repo = UserRepository(async_session)

        with pytest.raises(StaleDataError):
            await repo.add_or_update(make_user())

        assert await repo.count() == 0

    @pytest.mark.asyncio
    async def test_delete_missing_row_raises(self, async_session, make_user):
        """Test delete of an entity with no row raises StaleDataError"""
        repo = UserRepository(async_session)
        await repo.add(make_user())

        with pytest.raises(StaleDataError):
            await repo.delete(make_user())

        assert await repo.count() == 1

    @pytest.mark.asyncio
    async def test_delete_by_id_missing(self, async_session):
        """Test delete_by_id of an unknown id raises InvalidArgumentError"""
        with pytest.raises(InvalidArgumentError):
            await UserRepository(async_session).delete_by_id(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_delete_range_returns_count(self, async_session, make_user):
        """Test the async delete_range returns the number of deleted rows"""
        repo = UserRepository(async_session)
        await repo.add_range([make_user(last_name="X"), make_user(last_name="X")])

        assert await repo.delete_range(User.last_name == "X") == 2
        assert await repo.delete_range(User.last_name == "X") == 0

    @pytest.mark.asyncio
    async def test_bulk_delete_by_id(self, async_session, make_user):
        """Test bulk_delete_by_id removes the given ids"""
        repo = UserRepository(async_session)
        batch = [make_user() for _ in range(3)]
        await repo.add_range(batch)

        assert await repo.bulk_delete_by_id([u.id for u in batch[:2]]) == 2
        assert await repo.count() == 1

    @pytest.mark.asyncio
    async def test_no_tracking(self, async_session_factory, make_user):
        """Test default reads return detached snapshots"""
        user = make_user()
        async with async_session_factory() as session:
            await UserRepository(session).add(user)

        async with async_session_factory() as session:
            repo = UserRepository(session)
            detached = await repo.first_or_default(User.id == user.id)
            tracked = await repo.get_single(User.id == user.id, no_tracking=False)

            assert detached not in session
            assert tracked in session

    @pytest.mark.asyncio
    async def test_get_list_with_include(self, async_session_factory, make_user, make_entry):
        """Test get_list with ordering and eager loading"""
        user = make_user()
        async with async_session_factory() as session:
            await UserRepository(session).add(user)
            await EntryRepository(session).add_range(
                [make_entry(user, subject=s) for s in ("b", "a", "c")]
            )

        async with async_session_factory() as session:
            found = await EntryRepository(session).get_list(
                Entry.created_by_id == user.id,
                Entry.created_by,
                order_by="subject",
            )

        assert [e.subject for e in found] == ["a", "b", "c"]
        assert all(e.created_by.id == user.id for e in found)

    @pytest.mark.asyncio
    async def test_get_by_id_with_nested_include(
        self, async_session_factory, make_user, make_entry, make_comment
    ):
        """Test get_by_id loads a nested relationship path"""
        user = make_user(user_name="author")
        entry = make_entry(user)
        async with async_session_factory() as session:
            await UserRepository(session).add(user)
            await EntryRepository(session).add(entry)
            await EntryCommentRepository(session).add(make_comment(entry, user))

        async with async_session_factory() as session:
            loaded = await EntryRepository(session).get_by_id(
                entry.id, "entry_comments.created_by"
            )

        (comment,) = loaded.entry_comments
        assert comment.created_by.user_name == "author"

    @pytest.mark.asyncio
    async def test_to_list_with_tracking(self, async_session, make_user):
        """Test a tracking query returns entities that can be saved directly"""
        repo = UserRepository(async_session)
        await repo.add(make_user(first_name="Before"))

        (user,) = await repo.to_list(repo.get(User.first_name == "Before", no_tracking=False))
        user.first_name = "After"
        await repo.save_changes()

        assert await repo.exists(User.first_name == "After")


class TestTypedRepositories:
    """Test per-entity repositories"""

    @pytest.mark.asyncio
    async def test_bound_model_classes(self, async_session):
        """Test each repository is bound to its entity"""
        assert UserRepository(async_session).model_class is User
        assert EntryRepository(async_session).model_class is Entry
        assert EntryCommentRepository(async_session).model_class is EntryComment
        assert EmailConfirmationRepository(async_session).model_class is EmailConfirmation

    @pytest.mark.asyncio
    async def test_interfaces(self, async_session):
        """Test repositories implement their interfaces"""
        users = UserRepository(async_session)

        assert isinstance(users, IUserRepository)
        assert isinstance(users, IGenericRepository)
        assert isinstance(EntryRepository(async_session), IEntryRepository)
        assert isinstance(users, GenericRepository)
        assert users.session is async_session

    @pytest.mark.asyncio
    async def test_email_confirmation_repository(self, async_session, make_user):
        """Test the confirmation repository persists confirmation tokens"""
        user = make_user(email_confirmed=False)
        await UserRepository(async_session).add(user)
        repo = EmailConfirmationRepository(async_session)

        confirmation = EmailConfirmation(new_email_address=user.email_address, user_id=user.id)
        await repo.add(confirmation)

        assert await repo.count(EmailConfirmation.user_id == user.id) == 1
        assert await repo.delete_by_id(confirmation.id) == 1
