"""
Tests for the per-owner applications state container
"""
import asyncio
from dataclasses import replace
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
import pytest_asyncio

from conftest import OTHER_WALLET, WALLET
from core.exceptions import (
    NotAuthenticatedException,
    PersistenceException,
    RecordNotFoundException,
    ValidationException
)
from application.repositories.interfaces import IApplicationRepository
from application.services.application_tracking import (
    ApplicationsState,
    ApplicationsStateRegistry,
    LoadState
)
from application.services.wallet_session import WalletSession
from domain.entities import NewApplication
from domain.enums import ApplicationStatus


@pytest.fixture
def mock_repository(make_application):
    repo = AsyncMock(spec=IApplicationRepository)
    repo.list_by_owner.return_value = [make_application(), make_application()]
    return repo


@pytest_asyncio.fixture
async def state(repository):
    container = ApplicationsState(repository)
    await container.set_owner(WALLET)
    return container


class TestOwnerIdentity:
    """Binding to a wallet"""

    @pytest.mark.asyncio
    async def test_initial_load(self, repository, acme_fields):
        await repository.insert(WALLET, NewApplication.from_dict(acme_fields))

        container = ApplicationsState(repository)
        assert container.state == LoadState.UNINITIALIZED

        await container.set_owner(WALLET)
        assert container.state == LoadState.READY
        assert len(container) == 1
        assert container.error is None

    @pytest.mark.asyncio
    async def test_owner_switch_clears_records(self, state, acme_fields):
        await state.create(acme_fields)

        await state.set_owner(OTHER_WALLET)

        assert state.owner_id == OTHER_WALLET
        assert state.applications == ()

    @pytest.mark.asyncio
    async def test_no_owner_is_empty_and_ready(self, state, acme_fields):
        await state.create(acme_fields)

        await state.set_owner(None)

        assert state.applications == ()
        assert state.state == LoadState.READY
        assert await state.get_timeline(uuid4()) == []

    @pytest.mark.asyncio
    async def test_follows_wallet_session(self, repository, acme_fields):
        session = WalletSession()
        container = ApplicationsState(repository)
        await container.bind(session)
        assert container.owner_id is None

        await session.connect(WALLET)
        await container.create(acme_fields)
        assert len(container) == 1

        await session.disconnect()
        assert container.owner_id is None
        assert len(container) == 0

        container.unbind()
        await session.connect(OTHER_WALLET)
        assert container.owner_id is None


class TestMutations:
    """Create, update, status change and removal"""

    @pytest.mark.asyncio
    async def test_create_prepends(self, state, acme_fields):
        first = await state.create(acme_fields)
        second = await state.create({**acme_fields, "company_name": "Globex"})

        assert [a.id for a in state.applications] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_create_acme(self, state, acme_fields):
        await state.create(acme_fields)

        assert len(state.applications) == 1
        assert state.get_stats().total == 1
        assert state.get_company_names() == ["Acme"]

    @pytest.mark.asyncio
    async def test_create_without_owner(self, repository, acme_fields):
        container = ApplicationsState(repository)
        await container.set_owner(None)

        with pytest.raises(NotAuthenticatedException):
            await container.create(acme_fields)
        assert container.applications == ()

    @pytest.mark.asyncio
    async def test_create_invalid_leaves_list(self, state, acme_fields):
        with pytest.raises(ValidationException):
            await state.create({**acme_fields, "company_name": ""})
        assert state.applications == ()

    @pytest.mark.asyncio
    async def test_update_replaces_in_place(self, state, acme_fields):
        created = await state.create(acme_fields)
        other = await state.create({**acme_fields, "company_name": "Globex"})

        updated = await state.update(created.id, {"position_title": "Lead"})

        assert updated.position_title == "Lead"
        assert [a.id for a in state.applications] == [other.id, created.id]
        assert state.get(created.id).position_title == "Lead"

    @pytest.mark.asyncio
    async def test_update_status_records_timeline(self, state, acme_fields):
        created = await state.create(acme_fields)

        await state.update_status(created.id, ApplicationStatus.ENTREVISTA_PROGRAMADA, note="Monday 10am")

        assert state.get(created.id).status == ApplicationStatus.ENTREVISTA_PROGRAMADA
        timeline = await state.get_timeline(created.id)
        assert len(timeline) == 1
        assert timeline[0].old_status == ApplicationStatus.PENDIENTE
        assert timeline[0].new_status == ApplicationStatus.ENTREVISTA_PROGRAMADA

    @pytest.mark.asyncio
    async def test_remove_missing_leaves_list(self, state, acme_fields):
        await state.create(acme_fields)
        before = state.applications

        with pytest.raises(PersistenceException):
            await state.remove(uuid4())
        assert state.applications == before

    @pytest.mark.asyncio
    async def test_remove(self, state, acme_fields):
        created = await state.create(acme_fields)

        await state.remove(created.id)

        assert state.get(created.id) is None
        assert len(state) == 0

    @pytest.mark.asyncio
    async def test_status_change_on_uncached_record(self, state, repository, acme_fields):
        # Written behind the container's back, so it is not cached
        stored = await repository.insert(WALLET, NewApplication.from_dict(acme_fields))
        assert state.get(stored.id) is None

        await state.update_status(stored.id, ApplicationStatus.ACEPTADA, note="Offer received")

        timeline = await state.get_timeline(stored.id)
        assert len(timeline) == 1
        assert timeline[0].old_status is None
        assert timeline[0].new_status == ApplicationStatus.ACEPTADA

    @pytest.mark.asyncio
    async def test_cache_matches_store_after_mutations(self, state, repository, acme_fields):
        first = await state.create(acme_fields)
        second = await state.create({**acme_fields, "company_name": "Globex"})
        third = await state.create({**acme_fields, "company_name": "Initech"})

        await state.update(first.id, {"position_title": "Lead"})
        await state.update_status(third.id, ApplicationStatus.RECHAZADA, note="No fit")
        await state.remove(second.id)

        stored = await repository.list_by_owner(WALLET)
        def summary(apps):
            return [(a.id, a.company_name, a.position_title, a.status) for a in apps]

        assert summary(state.applications) == summary(stored)
        assert [a.id for a in state.applications] == [third.id, first.id]


class TestLoadFailures:
    """Failed and superseded loads"""

    @pytest.mark.asyncio
    async def test_failure_keeps_last_good_list(self, mock_repository):
        container = ApplicationsState(mock_repository, load_error_message="load failed")
        await container.set_owner(WALLET)
        assert len(container) == 2

        mock_repository.list_by_owner.side_effect = PersistenceException("db down")
        with pytest.raises(PersistenceException):
            await container.refresh()

        assert len(container) == 2
        assert container.state == LoadState.ERRORED
        assert container.error == "load failed"

    @pytest.mark.asyncio
    async def test_initial_failure_is_recorded_not_raised(self, mock_repository):
        mock_repository.list_by_owner.side_effect = PersistenceException("db down")
        container = ApplicationsState(mock_repository)

        await container.set_owner(WALLET)

        assert container.state == LoadState.ERRORED
        assert container.error
        assert container.applications == ()

    @pytest.mark.asyncio
    async def test_late_load_after_owner_change_is_dropped(self, mock_repository, make_application):
        release = asyncio.Event()
        stale = [make_application()]

        async def slow_list(owner_id):
            if owner_id == WALLET:
                await release.wait()
                return stale
            return []

        mock_repository.list_by_owner.side_effect = slow_list
        container = ApplicationsState(mock_repository)

        first = asyncio.create_task(container.set_owner(WALLET))
        await asyncio.sleep(0)
        await container.set_owner(OTHER_WALLET)
        release.set()
        await first

        assert container.owner_id == OTHER_WALLET
        assert container.applications == ()

    @pytest.mark.asyncio
    async def test_removed_record_not_resurrected_by_late_load(self, mock_repository, make_application):
        doomed = make_application()
        mock_repository.list_by_owner.return_value = [doomed]
        container = ApplicationsState(mock_repository)
        await container.set_owner(WALLET)

        release = asyncio.Event()

        async def slow_list(owner_id):
            await release.wait()
            return [doomed]

        mock_repository.list_by_owner.side_effect = slow_list
        pending = asyncio.create_task(container.refresh())
        await asyncio.sleep(0)

        await container.remove(doomed.id)
        release.set()
        await pending

        assert container.get(doomed.id) is None

    @pytest.mark.asyncio
    async def test_create_during_load_is_kept(self, mock_repository, make_application):
        container = ApplicationsState(mock_repository)
        await container.set_owner(WALLET)
        snapshot = list(container.applications)

        release = asyncio.Event()

        async def slow_list(owner_id):
            await release.wait()
            return snapshot

        created = make_application(company_name="Globex")
        mock_repository.list_by_owner.side_effect = slow_list
        mock_repository.insert.return_value = created

        pending = asyncio.create_task(container.refresh())
        await asyncio.sleep(0)
        await container.create({"company_name": "Globex", "position_title": "Dev", "platform": "linkedin"})
        release.set()
        await pending

        assert container.applications[0] == created
        assert len(container) == len(snapshot) + 1
        assert container.state == LoadState.READY

    @pytest.mark.asyncio
    async def test_update_during_load_is_not_reverted(self, mock_repository, make_application):
        original = make_application()
        mock_repository.list_by_owner.return_value = [original]
        container = ApplicationsState(mock_repository)
        await container.set_owner(WALLET)

        release = asyncio.Event()

        async def slow_list(owner_id):
            await release.wait()
            return [original]

        edited = replace(original, position_title="Lead")
        mock_repository.list_by_owner.side_effect = slow_list
        mock_repository.update.return_value = edited

        pending = asyncio.create_task(container.refresh())
        await asyncio.sleep(0)
        await container.update(original.id, {"position_title": "Lead"})
        release.set()
        await pending

        assert container.get(original.id).position_title == "Lead"
        assert len(container) == 1

    @pytest.mark.asyncio
    async def test_load_after_writes_uses_fetched_rows(self, mock_repository, make_application):
        original = make_application()
        mock_repository.list_by_owner.return_value = [original]
        container = ApplicationsState(mock_repository)
        await container.set_owner(WALLET)

        mock_repository.update.return_value = replace(original, position_title="Lead")
        await container.update(original.id, {"position_title": "Lead"})

        # Store changed afterwards (e.g. another session); a fresh load wins
        mock_repository.list_by_owner.return_value = [replace(original, position_title="Staff")]
        await container.refresh()

        assert container.get(original.id).position_title == "Staff"


class TestLateMutations:
    """Mutations resolving after the owner changed"""

    @staticmethod
    def _blocking(release, result):
        async def _call(*args, **kwargs):
            await release.wait()
            return result
        return _call

    @pytest.mark.asyncio
    async def test_failed_update_leaves_cache(self, mock_repository):
        container = ApplicationsState(mock_repository)
        await container.set_owner(WALLET)
        before = container.applications
        target = before[0]

        mock_repository.update.side_effect = PersistenceException("db down")
        with pytest.raises(PersistenceException):
            await container.update(target.id, {"position_title": "Lead"})

        mock_repository.update_status.side_effect = RecordNotFoundException("Application", str(target.id))
        with pytest.raises(PersistenceException):
            await container.update_status(target.id, ApplicationStatus.ACEPTADA)

        assert container.applications == before

    @pytest.mark.asyncio
    async def test_create_after_owner_change_not_cached(self, mock_repository, make_application):
        container = ApplicationsState(mock_repository)
        await container.set_owner(WALLET)

        release = asyncio.Event()
        mock_repository.insert.side_effect = self._blocking(release, make_application(company_name="Late"))

        pending = asyncio.create_task(
            container.create({"company_name": "Late", "position_title": "Dev", "platform": "indeed"})
        )
        await asyncio.sleep(0)
        await container.set_owner(OTHER_WALLET)
        release.set()
        created = await pending

        assert container.owner_id == OTHER_WALLET
        assert container.get(created.id) is None
        assert len(container) == 2

    @pytest.mark.asyncio
    async def test_update_after_owner_change_not_applied(self, mock_repository, make_application):
        shared = make_application()
        mock_repository.list_by_owner.return_value = [shared]
        container = ApplicationsState(mock_repository)
        await container.set_owner(WALLET)

        release = asyncio.Event()
        mock_repository.update.side_effect = self._blocking(release, replace(shared, position_title="Lead"))

        pending = asyncio.create_task(container.update(shared.id, {"position_title": "Lead"}))
        await asyncio.sleep(0)
        await container.set_owner(OTHER_WALLET)
        release.set()
        await pending

        assert container.get(shared.id).position_title == shared.position_title

    @pytest.mark.asyncio
    async def test_remove_after_owner_change_not_applied(self, mock_repository, make_application):
        shared = make_application()
        mock_repository.list_by_owner.return_value = [shared]
        container = ApplicationsState(mock_repository)
        await container.set_owner(WALLET)

        release = asyncio.Event()
        mock_repository.remove.side_effect = self._blocking(release, None)

        pending = asyncio.create_task(container.remove(shared.id))
        await asyncio.sleep(0)
        await container.set_owner(OTHER_WALLET)
        release.set()
        await pending

        assert container.get(shared.id) == shared


class TestRegistry:
    """One container per wallet"""

    @pytest.mark.asyncio
    async def test_reuses_container(self, repository):
        registry = ApplicationsStateRegistry(repository)

        first = await registry.get(WALLET)
        second = await registry.get(WALLET)

        assert first is second
        assert WALLET in registry
        assert len(registry) == 1

        registry.discard(WALLET)
        assert WALLET not in registry

    @pytest.mark.asyncio
    async def test_retries_errored_container(self, make_application):
        repo = AsyncMock(spec=IApplicationRepository)
        repo.list_by_owner.side_effect = PersistenceException("db down")
        registry = ApplicationsStateRegistry(repo)

        container = await registry.get(WALLET)
        assert container.state == LoadState.ERRORED

        repo.list_by_owner.side_effect = None
        repo.list_by_owner.return_value = [make_application()]
        container = await registry.get(WALLET)

        assert container.state == LoadState.READY
        assert len(container) == 1

    @pytest.mark.asyncio
    async def test_slow_wallet_does_not_block_others(self):
        release = asyncio.Event()

        async def list_by_owner(owner_id):
            if owner_id == WALLET:
                await release.wait()
            return []

        repo = AsyncMock(spec=IApplicationRepository)
        repo.list_by_owner.side_effect = list_by_owner
        registry = ApplicationsStateRegistry(repo)

        slow = asyncio.create_task(registry.get(WALLET))
        await asyncio.sleep(0)
        other = await asyncio.wait_for(registry.get(OTHER_WALLET), timeout=1)

        assert other.owner_id == OTHER_WALLET
        assert not slow.done()

        release.set()
        assert (await slow).state == LoadState.READY

    @pytest.mark.asyncio
    async def test_concurrent_first_access_loads_once(self):
        repo = AsyncMock(spec=IApplicationRepository)
        repo.list_by_owner.return_value = []
        registry = ApplicationsStateRegistry(repo)

        first, second = await asyncio.gather(registry.get(WALLET), registry.get(WALLET))

        assert first is second
        assert repo.list_by_owner.await_count == 1

    @pytest.mark.asyncio
    async def test_evicts_least_recently_used(self):
        repo = AsyncMock(spec=IApplicationRepository)
        repo.list_by_owner.return_value = []
        registry = ApplicationsStateRegistry(repo, max_size=2)

        await registry.get("GBWALLETA")
        await registry.get("GBWALLETB")
        await registry.get("GBWALLETA")
        await registry.get("GBWALLETC")

        assert len(registry) == 2
        assert "GBWALLETA" in registry
        assert "GBWALLETC" in registry
        assert "GBWALLETB" not in registry
