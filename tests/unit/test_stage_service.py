"""
Unit tests for StageService.

Repositories are MagicMocks whose async methods operate on in-memory lists,
so the lifecycle rules run without a database. The clock is fixed.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from jobtrack.core.errors import (
    ApplicationNotFound,
    ApplicationStageNotFound,
    InternalError,
    InvalidStatus,
    StageTemplateNotFound,
)
from jobtrack.models.application import Application
from jobtrack.models.application_stage import ApplicationStage
from jobtrack.models.stage_template import StageTemplate
from jobtrack.services.stage_events import StageAction
from jobtrack.services.stage_service import StageService, resolve_completed_at, select_current_stage

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
EARLIER = NOW - timedelta(days=2)
USER_ID = uuid.uuid4()


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------
def _make_application(current_stage_id: uuid.UUID | None = None) -> Application:
    application = Application()
    application.id = uuid.uuid4()
    application.user_id = USER_ID
    application.name = "Backend Engineer"
    application.status = "active"
    application.current_stage_id = current_stage_id
    return application


def _make_template(name: str) -> StageTemplate:
    template = StageTemplate()
    template.id = uuid.uuid4()
    template.user_id = USER_ID
    template.name = name
    template.order = 0
    return template


def _make_stage(
    application: Application,
    template: StageTemplate,
    status: str = "active",
    order: int = 0,
    completed_at: datetime | None = None,
    minutes: int = 0,
) -> ApplicationStage:
    stage = ApplicationStage()
    stage.id = uuid.uuid4()
    stage.application_id = application.id
    stage.stage_template_id = template.id
    stage.status = status
    stage.order = order
    stage.started_at = EARLIER + timedelta(minutes=minutes)
    stage.completed_at = completed_at
    stage.created_at = EARLIER + timedelta(minutes=minutes)
    return stage


class _Harness:
    """StageService wired to in-memory repositories."""

    def __init__(
        self,
        application: Application | None,
        templates: list[StageTemplate],
        stages: list[ApplicationStage] | None = None,
    ):
        self.application = application
        self.templates = {t.id: t for t in templates}
        self.stages = stages if stages is not None else []
        self.created_count = 0

        async def _update(db, obj, changes):
            for field, value in changes.items():
                setattr(obj, field, value)
            return obj

        async def _create_stage(db, data):
            stage = ApplicationStage(**data)
            stage.id = uuid.uuid4()
            self.created_count += 1
            stage.created_at = NOW + timedelta(microseconds=self.created_count)
            self.stages.append(stage)
            return stage

        async def _get_stage(db, stage_id):
            return next((s for s in self.stages if s.id == stage_id), None)

        async def _list_stages(db, application_id):
            return sorted(
                (s for s in self.stages if s.application_id == application_id),
                key=lambda s: (s.order, s.created_at),
            )

        async def _delete_stage(db, stage_id):
            before = len(self.stages)
            self.stages[:] = [s for s in self.stages if s.id != stage_id]
            return len(self.stages) < before

        async def _get_template(db, user_id, template_id):
            return self.templates.get(template_id)

        async def _get_names(db, user_id, ids):
            return {i: self.templates[i].name for i in ids if i in self.templates}

        self.application_repo = MagicMock()
        self.application_repo.get_for_user = AsyncMock(return_value=application)
        self.application_repo.update = AsyncMock(side_effect=_update)

        self.stage_repo = MagicMock()
        self.stage_repo.create = AsyncMock(side_effect=_create_stage)
        self.stage_repo.update = AsyncMock(side_effect=_update)
        self.stage_repo.get = AsyncMock(side_effect=_get_stage)
        self.stage_repo.list_by_application = AsyncMock(side_effect=_list_stages)
        self.stage_repo.delete = AsyncMock(side_effect=_delete_stage)

        self.template_repo = MagicMock()
        self.template_repo.get_for_user = AsyncMock(side_effect=_get_template)
        self.template_repo.get_names = AsyncMock(side_effect=_get_names)

        self.comment_repo = MagicMock()
        self.comment_repo.create = AsyncMock(return_value=MagicMock())

        self.recorder = MagicMock()
        self.db = AsyncMock()
        # async with db.begin_nested(): ...
        self.db.begin_nested = MagicMock()

        self.service = StageService(
            application_repo=self.application_repo,
            stage_repo=self.stage_repo,
            template_repo=self.template_repo,
            comment_repo=self.comment_repo,
            recorder=self.recorder,
            clock=lambda: NOW,
        )

    def stage(self, stage_id: uuid.UUID) -> ApplicationStage:
        return next(s for s in self.stages if s.id == stage_id)

    def recorded_actions(self) -> list[str]:
        return [c.args[0].action for c in self.recorder.record.call_args_list]


@pytest.fixture
def applied() -> StageTemplate:
    return _make_template("Applied")


@pytest.fixture
def screening() -> StageTemplate:
    return _make_template("Screening")


@pytest.fixture
def interview() -> StageTemplate:
    return _make_template("Interview")


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------
class TestResolveCompletedAt:
    def test_explicit_value_wins(self):
        assert resolve_completed_at(None, "pending", EARLIER, NOW) == EARLIER
        assert resolve_completed_at(NOW, "completed", EARLIER, NOW) == EARLIER

    def test_completed_stamps_now_when_unset(self):
        assert resolve_completed_at(None, "completed", None, NOW) == NOW

    def test_completed_keeps_existing_time(self):
        assert resolve_completed_at(EARLIER, "completed", None, NOW) == EARLIER

    @pytest.mark.parametrize("status", ["pending", "active"])
    def test_open_statuses_clear(self, status):
        assert resolve_completed_at(EARLIER, status, None, NOW) is None

    @pytest.mark.parametrize("status", ["skipped", "cancelled"])
    def test_skipped_and_cancelled_are_not_stamped(self, status):
        assert resolve_completed_at(None, status, None, NOW) is None
        assert resolve_completed_at(EARLIER, status, None, NOW) == EARLIER

    def test_no_status_change_keeps_value(self):
        assert resolve_completed_at(EARLIER, None, None, NOW) == EARLIER


class TestSelectCurrentStage:
    def test_empty(self):
        assert select_current_stage([]) is None

    def test_prefers_latest_active_or_completed(self, applied, screening, interview):
        app = _make_application()
        first = _make_stage(app, applied, status="completed", order=0)
        second = _make_stage(app, screening, status="active", order=1, minutes=1)
        third = _make_stage(app, interview, status="skipped", order=2, minutes=2)
        assert select_current_stage([first, second, third]) is second

    def test_falls_back_to_newest_when_none_qualify(self, applied, screening):
        app = _make_application()
        first = _make_stage(app, applied, status="cancelled", order=0)
        second = _make_stage(app, screening, status="pending", order=1, minutes=1)
        assert select_current_stage([first, second]) is second


# ---------------------------------------------------------------------------
# append_stage
# ---------------------------------------------------------------------------
class TestAppendStage:
    @pytest.mark.asyncio
    async def test_first_stage_becomes_current(self, applied):
        app = _make_application()
        h = _Harness(app, [applied])

        result = await h.service.append_stage(h.db, USER_ID, app.id, applied.id)

        assert result.order == 0
        assert result.status == "active"
        assert result.stage_name == "Applied"
        assert result.started_at == NOW
        assert result.completed_at is None
        assert app.current_stage_id == result.id
        h.db.commit.assert_awaited_once()
        assert h.recorded_actions() == [StageAction.ADD_STAGE]

    @pytest.mark.asyncio
    async def test_second_stage_closes_previous(self, applied, screening):
        app = _make_application()
        h = _Harness(app, [applied, screening])

        first = await h.service.append_stage(h.db, USER_ID, app.id, applied.id)
        second = await h.service.append_stage(h.db, USER_ID, app.id, screening.id)

        closed = h.stage(first.id)
        assert closed.status == "completed"
        assert closed.completed_at == NOW
        assert second.order == 1
        assert second.status == "active"
        assert app.current_stage_id == second.id

        event = h.recorder.record.call_args_list[-1].args[0]
        assert event.action == StageAction.CHANGE_STAGE
        assert event.previous_stage_name == "Applied"
        assert event.stage_name == "Screening"

    @pytest.mark.asyncio
    async def test_orders_equal_pre_append_count(self, applied, screening, interview):
        app = _make_application()
        h = _Harness(app, [applied, screening, interview])

        orders = []
        for template in (applied, screening, interview, applied):
            stage = await h.service.append_stage(h.db, USER_ID, app.id, template.id)
            orders.append(stage.order)

        assert orders == [0, 1, 2, 3]

    @pytest.mark.asyncio
    async def test_already_completed_current_is_left_alone(self, applied, screening):
        app = _make_application()
        done = _make_stage(app, applied, status="completed", completed_at=EARLIER)
        app.current_stage_id = done.id
        h = _Harness(app, [applied, screening], [done])

        await h.service.append_stage(h.db, USER_ID, app.id, screening.id)

        assert done.completed_at == EARLIER
        assert h.recorded_actions() == [StageAction.ADD_STAGE]

    @pytest.mark.asyncio
    async def test_dangling_pointer_is_tolerated(self, applied):
        app = _make_application(current_stage_id=uuid.uuid4())
        h = _Harness(app, [applied])

        result = await h.service.append_stage(h.db, USER_ID, app.id, applied.id)

        assert app.current_stage_id == result.id

    @pytest.mark.asyncio
    async def test_note_is_attached_trimmed(self, applied):
        app = _make_application()
        h = _Harness(app, [applied])

        result = await h.service.append_stage(h.db, USER_ID, app.id, applied.id, note="  Sent via referral  ")

        data = h.comment_repo.create.await_args.args[1]
        assert data["content"] == "Sent via referral"
        assert data["stage_id"] == result.id
        assert data["application_id"] == app.id

    @pytest.mark.asyncio
    async def test_blank_note_is_ignored(self, applied):
        app = _make_application()
        h = _Harness(app, [applied])

        await h.service.append_stage(h.db, USER_ID, app.id, applied.id, note="   ")

        h.comment_repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failing_comment_store_does_not_fail_append(self, applied):
        app = _make_application()
        h = _Harness(app, [applied])
        h.comment_repo.create = AsyncMock(side_effect=RuntimeError("comments down"))

        result = await h.service.append_stage(h.db, USER_ID, app.id, applied.id, note="hello")

        assert result.stage_name == "Applied"
        assert app.current_stage_id == result.id

    @pytest.mark.asyncio
    async def test_failing_note_still_records_stage_change(self, applied, screening):
        app = _make_application()
        h = _Harness(app, [applied, screening])
        first = await h.service.append_stage(h.db, USER_ID, app.id, applied.id)
        h.comment_repo.create = AsyncMock(side_effect=RuntimeError("comments down"))

        result = await h.service.append_stage(h.db, USER_ID, app.id, screening.id, note="call booked")

        assert result.stage_name == "Screening"
        assert h.stage(first.id).status == "completed"
        assert app.current_stage_id == result.id
        event = h.recorder.record.call_args_list[-1].args[0]
        assert event.action == StageAction.CHANGE_STAGE
        assert event.previous_stage_name == "Applied"
        h.db.begin_nested.assert_called_once()

    @pytest.mark.asyncio
    async def test_unknown_application(self, applied):
        h = _Harness(None, [applied])

        with pytest.raises(ApplicationNotFound):
            await h.service.append_stage(h.db, USER_ID, uuid.uuid4(), applied.id)
        h.stage_repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_template_changes_nothing(self, applied):
        app = _make_application()
        h = _Harness(app, [applied])

        with pytest.raises(StageTemplateNotFound):
            await h.service.append_stage(h.db, USER_ID, app.id, uuid.uuid4())
        assert h.stages == []
        assert app.current_stage_id is None

    @pytest.mark.asyncio
    async def test_commit_failure_rolls_back(self, applied):
        app = _make_application()
        h = _Harness(app, [applied])
        h.db.commit = AsyncMock(side_effect=RuntimeError("connection lost"))

        with pytest.raises(InternalError) as exc_info:
            await h.service.append_stage(h.db, USER_ID, app.id, applied.id)

        h.db.rollback.assert_awaited_once()
        assert exc_info.value.message == "Failed to add stage"
        assert h.recorded_actions() == []

    @pytest.mark.asyncio
    async def test_recorder_failure_is_not_propagated(self, applied):
        app = _make_application()
        h = _Harness(app, [applied])
        h.recorder.record.side_effect = RuntimeError("sink down")

        result = await h.service.append_stage(h.db, USER_ID, app.id, applied.id)

        assert result.status == "active"


# ---------------------------------------------------------------------------
# update_stage_status
# ---------------------------------------------------------------------------
class TestUpdateStageStatus:
    @pytest.mark.asyncio
    async def test_reactivating_completed_stage_clears_completed_at(self, applied):
        app = _make_application()
        stage = _make_stage(app, applied, status="completed", completed_at=EARLIER)
        app.current_stage_id = stage.id
        h = _Harness(app, [applied], [stage])

        result = await h.service.update_stage_status(h.db, USER_ID, app.id, stage.id, "active")

        assert result.status == "active"
        assert result.completed_at is None
        assert result.stage_name == "Applied"

    @pytest.mark.asyncio
    async def test_completed_stamps_now(self, applied):
        app = _make_application()
        stage = _make_stage(app, applied)
        h = _Harness(app, [applied], [stage])

        result = await h.service.update_stage_status(h.db, USER_ID, app.id, stage.id, "completed")

        assert result.completed_at == NOW

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["skipped", "cancelled"])
    async def test_skipped_and_cancelled_leave_completed_at_unset(self, applied, status):
        app = _make_application()
        stage = _make_stage(app, applied)
        h = _Harness(app, [applied], [stage])

        result = await h.service.update_stage_status(h.db, USER_ID, app.id, stage.id, status)

        assert result.status == status
        assert result.completed_at is None

    @pytest.mark.asyncio
    async def test_explicit_completed_at_is_used(self, applied):
        app = _make_application()
        stage = _make_stage(app, applied)
        h = _Harness(app, [applied], [stage])

        result = await h.service.update_stage_status(
            h.db, USER_ID, app.id, stage.id, "skipped", completed_at=EARLIER
        )

        assert result.completed_at == EARLIER

    @pytest.mark.asyncio
    async def test_second_active_stage_is_permitted(self, applied, screening):
        app = _make_application()
        first = _make_stage(app, applied, status="completed", completed_at=EARLIER)
        second = _make_stage(app, screening, status="active", order=1, minutes=1)
        app.current_stage_id = second.id
        h = _Harness(app, [applied, screening], [first, second])

        await h.service.update_stage_status(h.db, USER_ID, app.id, first.id, "active")

        assert [s.status for s in h.stages] == ["active", "active"]
        assert app.current_stage_id == second.id

    @pytest.mark.asyncio
    async def test_invalid_status(self, applied):
        app = _make_application()
        stage = _make_stage(app, applied)
        h = _Harness(app, [applied], [stage])

        with pytest.raises(InvalidStatus) as exc_info:
            await h.service.update_stage_status(h.db, USER_ID, app.id, stage.id, "interviewing")

        assert exc_info.value.code == "INVALID_STATUS"
        assert stage.status == "active"
        h.db.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_stage_of_another_application(self, applied):
        app = _make_application()
        other = _make_application()
        stage = _make_stage(other, applied)
        h = _Harness(app, [applied], [stage])

        with pytest.raises(ApplicationStageNotFound):
            await h.service.update_stage_status(h.db, USER_ID, app.id, stage.id, "completed")

    @pytest.mark.asyncio
    async def test_deleted_template_yields_no_name(self, applied):
        app = _make_application()
        stage = _make_stage(app, applied)
        h = _Harness(app, [], [stage])

        result = await h.service.update_stage_status(h.db, USER_ID, app.id, stage.id, "completed")

        assert result.stage_name is None
        assert result.status == "completed"


# ---------------------------------------------------------------------------
# complete_stage
# ---------------------------------------------------------------------------
class TestCompleteStage:
    @pytest.mark.asyncio
    async def test_completes_with_now(self, applied):
        app = _make_application()
        stage = _make_stage(app, applied)
        h = _Harness(app, [applied], [stage])

        result = await h.service.complete_stage(h.db, USER_ID, app.id, stage.id)

        assert result.status == "completed"
        assert result.completed_at == NOW
        assert h.recorded_actions() == [StageAction.COMPLETE_STAGE]

    @pytest.mark.asyncio
    async def test_twice_is_idempotent(self, applied):
        app = _make_application()
        stage = _make_stage(app, applied)
        h = _Harness(app, [applied], [stage])
        clock_values = iter([NOW, NOW + timedelta(hours=1)])
        h.service.clock = lambda: next(clock_values)

        first = await h.service.complete_stage(h.db, USER_ID, app.id, stage.id)
        second = await h.service.complete_stage(h.db, USER_ID, app.id, stage.id)

        assert first.completed_at == second.completed_at == NOW
        assert second.status == "completed"

    @pytest.mark.asyncio
    async def test_explicit_time_overrides(self, applied):
        app = _make_application()
        stage = _make_stage(app, applied, status="completed", completed_at=NOW)
        h = _Harness(app, [applied], [stage])

        result = await h.service.complete_stage(h.db, USER_ID, app.id, stage.id, completed_at=EARLIER)

        assert result.completed_at == EARLIER

    @pytest.mark.asyncio
    async def test_does_not_move_pointer(self, applied, screening):
        app = _make_application()
        first = _make_stage(app, applied)
        second = _make_stage(app, screening, order=1, minutes=1)
        app.current_stage_id = second.id
        h = _Harness(app, [applied, screening], [first, second])

        await h.service.complete_stage(h.db, USER_ID, app.id, first.id)

        assert app.current_stage_id == second.id

    @pytest.mark.asyncio
    async def test_unknown_stage(self, applied):
        app = _make_application()
        h = _Harness(app, [applied])

        with pytest.raises(ApplicationStageNotFound):
            await h.service.complete_stage(h.db, USER_ID, app.id, uuid.uuid4())


# ---------------------------------------------------------------------------
# delete_stage
# ---------------------------------------------------------------------------
class TestDeleteStage:
    @pytest.mark.asyncio
    async def test_deleting_current_recomputes_to_previous_completed(self, applied, screening):
        app = _make_application()
        h = _Harness(app, [applied, screening])
        first = await h.service.append_stage(h.db, USER_ID, app.id, applied.id)
        second = await h.service.append_stage(h.db, USER_ID, app.id, screening.id)

        await h.service.delete_stage(h.db, USER_ID, app.id, second.id)

        assert app.current_stage_id == first.id
        assert h.stage(first.id).status == "completed"
        assert h.recorded_actions()[-1] == StageAction.DELETE_STAGE

    @pytest.mark.asyncio
    async def test_deleting_only_stage_nulls_pointer(self, applied):
        app = _make_application()
        h = _Harness(app, [applied])
        only = await h.service.append_stage(h.db, USER_ID, app.id, applied.id)

        await h.service.delete_stage(h.db, USER_ID, app.id, only.id)

        assert h.stages == []
        assert app.current_stage_id is None

    @pytest.mark.asyncio
    async def test_deleting_non_current_keeps_pointer(self, applied, screening):
        app = _make_application()
        h = _Harness(app, [applied, screening])
        first = await h.service.append_stage(h.db, USER_ID, app.id, applied.id)
        second = await h.service.append_stage(h.db, USER_ID, app.id, screening.id)
        h.application_repo.update.reset_mock()

        await h.service.delete_stage(h.db, USER_ID, app.id, first.id)

        assert app.current_stage_id == second.id
        h.application_repo.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_skips_skipped_and_pending_stages(self, applied, screening, interview):
        app = _make_application()
        first = _make_stage(app, applied, status="completed", order=0, completed_at=EARLIER)
        second = _make_stage(app, screening, status="skipped", order=1, minutes=1)
        third = _make_stage(app, interview, status="active", order=2, minutes=2)
        app.current_stage_id = third.id
        h = _Harness(app, [applied, screening, interview], [first, second, third])

        await h.service.delete_stage(h.db, USER_ID, app.id, third.id)

        assert app.current_stage_id == first.id

    @pytest.mark.asyncio
    async def test_falls_back_to_newest_remaining(self, applied, screening, interview):
        app = _make_application()
        first = _make_stage(app, applied, status="cancelled", order=0)
        second = _make_stage(app, screening, status="pending", order=1, minutes=1)
        third = _make_stage(app, interview, status="active", order=2, minutes=2)
        app.current_stage_id = third.id
        h = _Harness(app, [applied, screening, interview], [first, second, third])

        await h.service.delete_stage(h.db, USER_ID, app.id, third.id)

        assert app.current_stage_id == second.id

    @pytest.mark.asyncio
    async def test_repoints_to_most_recently_created_when_order_repeats(self, applied, screening, interview):
        # newer was appended after earlier deletes, so its order sits below older's
        app = _make_application()
        older = _make_stage(app, applied, status="completed", order=2, completed_at=EARLIER, minutes=1)
        newer = _make_stage(app, screening, status="completed", order=1, completed_at=EARLIER, minutes=5)
        current = _make_stage(app, interview, status="active", order=2, minutes=10)
        app.current_stage_id = current.id
        h = _Harness(app, [applied, screening, interview], [older, newer, current])

        await h.service.delete_stage(h.db, USER_ID, app.id, current.id)

        assert app.current_stage_id == newer.id

    @pytest.mark.asyncio
    async def test_unknown_stage(self, applied):
        app = _make_application()
        h = _Harness(app, [applied])

        with pytest.raises(ApplicationStageNotFound):
            await h.service.delete_stage(h.db, USER_ID, app.id, uuid.uuid4())
        h.stage_repo.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_commit_failure_rolls_back(self, applied):
        app = _make_application()
        stage = _make_stage(app, applied)
        app.current_stage_id = stage.id
        h = _Harness(app, [applied], [stage])
        h.db.commit = AsyncMock(side_effect=RuntimeError("deadlock"))

        with pytest.raises(InternalError):
            await h.service.delete_stage(h.db, USER_ID, app.id, stage.id)

        h.db.rollback.assert_awaited_once()


# ---------------------------------------------------------------------------
# Pointer invariant over a mixed sequence of operations
# ---------------------------------------------------------------------------
class TestPointerInvariant:
    @pytest.mark.asyncio
    async def test_pointer_tracks_stage_set(self, applied, screening, interview):
        app = _make_application()
        h = _Harness(app, [applied, screening, interview])

        def check():
            ids = {s.id for s in h.stages}
            if ids:
                assert app.current_stage_id in ids
            else:
                assert app.current_stage_id is None

        a = await h.service.append_stage(h.db, USER_ID, app.id, applied.id)
        check()
        b = await h.service.append_stage(h.db, USER_ID, app.id, screening.id)
        check()
        await h.service.update_stage_status(h.db, USER_ID, app.id, b.id, "cancelled")
        check()
        c = await h.service.append_stage(h.db, USER_ID, app.id, interview.id)
        check()
        await h.service.delete_stage(h.db, USER_ID, app.id, a.id)
        check()
        await h.service.delete_stage(h.db, USER_ID, app.id, c.id)
        check()
        assert app.current_stage_id == b.id
        await h.service.delete_stage(h.db, USER_ID, app.id, b.id)
        check()


# ---------------------------------------------------------------------------
# list_stages
# ---------------------------------------------------------------------------
class TestListStages:
    @pytest.mark.asyncio
    async def test_ordered_with_names(self, applied, screening):
        app = _make_application()
        h = _Harness(app, [applied, screening])
        await h.service.append_stage(h.db, USER_ID, app.id, applied.id)
        await h.service.append_stage(h.db, USER_ID, app.id, screening.id)

        stages = await h.service.list_stages(h.db, USER_ID, app.id)

        assert [s.stage_name for s in stages] == ["Applied", "Screening"]
        assert [s.order for s in stages] == [0, 1]

    @pytest.mark.asyncio
    async def test_name_lookup_failure_degrades_to_none(self, applied):
        app = _make_application()
        stage = _make_stage(app, applied)
        h = _Harness(app, [applied], [stage])
        h.template_repo.get_names = AsyncMock(side_effect=RuntimeError("boom"))

        stages = await h.service.list_stages(h.db, USER_ID, app.id)

        assert len(stages) == 1
        assert stages[0].stage_name is None

    @pytest.mark.asyncio
    async def test_unknown_application(self):
        h = _Harness(None, [])

        with pytest.raises(ApplicationNotFound):
            await h.service.list_stages(h.db, USER_ID, uuid.uuid4())
