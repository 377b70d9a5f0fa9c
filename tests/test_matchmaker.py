"""Tests for the matchmaker against a real store."""

import pytest

from judging_engine.core.errors import (
    ForbiddenError,
    InvalidStateError,
    NoEligibleTeamsError,
    NotFoundError,
)
from judging_engine.models import AssignmentStatus, JudgeClass, JudgingMode, TeamStatus


class TestNextAssignment:
    """Tests for JudgingEngine.get_next_assignment."""

    async def test_creates_pending_assignment(self, engine, make_event):
        """Test a fresh judge receives a pending assignment to an approved team."""
        event, teams, (judge,) = await make_event()

        assignment = await engine.get_next_assignment(event.id, judge.id)

        assert assignment.status == AssignmentStatus.PENDING
        assert assignment.event_id == event.id
        assert assignment.judge_id == judge.id
        assert assignment.team_id in {t.id for t in teams}
        stored_judge = await engine.store.rosters.get_judge(judge.id)
        assert stored_judge.current_assignment_id == assignment.id

    async def test_reuses_pending_assignment(self, engine, make_event):
        """Test asking twice returns the same pending assignment."""
        event, _, (judge,) = await make_event()

        first = await engine.get_next_assignment(event.id, judge.id)
        second = await engine.get_next_assignment(event.id, judge.id)

        assert second.id == first.id
        assert len(await engine.assignments.list_for_judge(event.id, judge.id)) == 1

    async def test_inactive_event(self, engine, make_event):
        """Test no assignments are handed out before the event starts."""
        event, _, (judge,) = await make_event(activate=False)

        with pytest.raises(InvalidStateError):
            await engine.get_next_assignment(event.id, judge.id)

    async def test_completed_event(self, engine, make_event):
        """Test no assignments are handed out after the event ends."""
        event, _, (judge,) = await make_event()
        await engine.store.events.advance_status(event.id, "completed")

        with pytest.raises(InvalidStateError):
            await engine.get_next_assignment(event.id, judge.id)

    async def test_unknown_event_and_judge(self, engine, make_event):
        """Test unknown ids surface as NotFoundError."""
        event, _, (judge,) = await make_event()

        with pytest.raises(NotFoundError):
            await engine.get_next_assignment("missing", judge.id)
        with pytest.raises(NotFoundError):
            await engine.get_next_assignment(event.id, "missing")

    async def test_judge_from_other_event(self, engine, make_event):
        """Test a judge cannot draw assignments from an event they are not in."""
        event, _, _ = await make_event()
        _, _, (outsider,) = await make_event()

        with pytest.raises(ForbiddenError):
            await engine.get_next_assignment(event.id, outsider.id)

    async def test_never_repeats_a_team(self, engine, make_event):
        """Test a judge visits each team at most once, then is exhausted."""
        event, teams, (judge,) = await make_event(mode=JudgingMode.CRITERIA_BASED, teams=4)
        seen = []

        for _ in teams:
            assignment = await engine.get_next_assignment(event.id, judge.id)
            seen.append(assignment.team_id)
            await _complete(engine, assignment)

        assert sorted(seen) == sorted(t.id for t in teams)
        with pytest.raises(NoEligibleTeamsError):
            await engine.get_next_assignment(event.id, judge.id)

    async def test_exhaustion_recurs(self, engine, make_event):
        """Test an exhausted judge stays exhausted until something changes."""
        event, _, (judge,) = await make_event(mode=JudgingMode.CRITERIA_BASED, teams=1)
        await _complete(engine, await engine.get_next_assignment(event.id, judge.id))

        for _ in range(2):
            with pytest.raises(NoEligibleTeamsError) as exc_info:
                await engine.get_next_assignment(event.id, judge.id)
            assert exc_info.value.judge_id == judge.id

    async def test_new_team_ends_exhaustion(self, engine, make_event):
        """Test approving another team gives an exhausted judge more work."""
        event, _, (judge,) = await make_event(mode=JudgingMode.CRITERIA_BASED, teams=1)
        await _complete(engine, await engine.get_next_assignment(event.id, judge.id))
        late = await engine.store.rosters.add_team(
            "Late Team", status=TeamStatus.APPROVED, location="T9"
        )

        assignment = await engine.get_next_assignment(event.id, judge.id)

        assert assignment.team_id == late.id

    async def test_only_approved_teams(self, engine, make_event):
        """Test pending and rejected teams are never assigned."""
        event, teams, (judge,) = await make_event(teams=1)
        await engine.store.rosters.add_team("Pending", status=TeamStatus.PENDING, location="P1")
        await engine.store.rosters.add_team("Rejected", status=TeamStatus.REJECTED, location="R1")

        assignment = await engine.get_next_assignment(event.id, judge.id)
        assert assignment.team_id == teams[0].id
        await engine.record_first_visit(judge.id, assignment.id)

        with pytest.raises(NoEligibleTeamsError):
            await engine.get_next_assignment(event.id, judge.id)

    async def test_pairwise_requires_location(self, engine, make_event):
        """Test pairwise judges are only sent to teams with a table."""
        event, _, (judge,) = await make_event(teams=0)
        await engine.store.rosters.add_team("Nowhere", status=TeamStatus.APPROVED)

        with pytest.raises(NoEligibleTeamsError):
            await engine.get_next_assignment(event.id, judge.id)

    async def test_criteria_ignores_location(self, engine, make_event):
        """Test criteria judging does not need team locations."""
        event, _, (judge,) = await make_event(mode=JudgingMode.CRITERIA_BASED, teams=0)
        team = await engine.store.rosters.add_team("Nowhere", status=TeamStatus.APPROVED)

        assignment = await engine.get_next_assignment(event.id, judge.id)

        assert assignment.team_id == team.id

    async def test_participant_skips_own_team(self, engine, make_event):
        """Test participant judges never judge their own team."""
        event, teams, _ = await make_event(mode=JudgingMode.PAIRWISE_PARTICIPANT, teams=2)
        judge = await engine.store.rosters.add_judge(
            event.id,
            "Builder",
            judge_class=JudgeClass.INTERNAL_PARTICIPANT,
            team_id=teams[0].id,
        )

        assignment = await engine.get_next_assignment(event.id, judge.id)
        assert assignment.team_id == teams[1].id
        await engine.record_first_visit(judge.id, assignment.id)

        with pytest.raises(NoEligibleTeamsError):
            await engine.get_next_assignment(event.id, judge.id)

    async def test_skipped_team_stays_eligible(self, engine, make_event):
        """Test skipping does not count as judging the team."""
        event, (team,), (judge,) = await make_event(teams=1)

        skipped = await engine.get_next_assignment(event.id, judge.id)
        await engine.skip_assignment(skipped.id)
        again = await engine.get_next_assignment(event.id, judge.id)

        assert again.id != skipped.id
        assert again.team_id == team.id

    async def test_under_judged_team_first(self, engine, make_event):
        """Test a team below the per-project target is preferred."""
        event, teams, judges = await make_event(
            mode=JudgingMode.CRITERIA_BASED, teams=2, judges=2, min_judges_per_project=1
        )
        first = await engine.get_next_assignment(event.id, judges[0].id)
        await _complete(engine, first)

        second = await engine.get_next_assignment(event.id, judges[1].id)

        assert second.team_id != first.team_id
        assert {first.team_id, second.team_id} == {t.id for t in teams}


class TestStalePendingAssignment:
    """Tests for pending assignments whose team stopped being judgeable."""

    async def test_rejected_team_is_replaced(self, engine, make_event):
        """Test a visit to a team rejected mid-event is skipped and a new team chosen."""
        event, teams, (judge,) = await make_event(teams=2)
        stale = await engine.get_next_assignment(event.id, judge.id)
        await engine.store.rosters.update_team(stale.team_id, status=TeamStatus.REJECTED)

        fresh = await engine.get_next_assignment(event.id, judge.id)

        assert fresh.id != stale.id
        assert fresh.team_id == next(t.id for t in teams if t.id != stale.team_id)
        old = await engine.assignments.get_assignment(stale.id)
        assert old.status == AssignmentStatus.SKIPPED
        stored_judge = await engine.store.rosters.get_judge(judge.id)
        assert stored_judge.current_assignment_id == fresh.id

    async def test_team_without_table_is_replaced(self, engine, make_event):
        """Test a pairwise visit to a team that lost its location is dropped."""
        event, teams, (judge,) = await make_event(teams=2)
        stale = await engine.get_next_assignment(event.id, judge.id)
        await engine.store.rosters.update_team(stale.team_id, location="")

        fresh = await engine.get_next_assignment(event.id, judge.id)

        assert fresh.team_id != stale.team_id
        old = await engine.assignments.get_assignment(stale.id)
        assert old.status == AssignmentStatus.SKIPPED

    async def test_criteria_visit_survives_lost_location(self, engine, make_event):
        """Test criteria judging keeps a visit whose team lost its location."""
        event, _, (judge,) = await make_event(mode=JudgingMode.CRITERIA_BASED, teams=2)
        first = await engine.get_next_assignment(event.id, judge.id)
        await engine.store.rosters.update_team(first.team_id, location="")

        again = await engine.get_next_assignment(event.id, judge.id)

        assert again.id == first.id

    async def test_no_replacement_keeps_the_skip(self, engine, make_event):
        """Test the stale visit stays skipped even when the judge is then exhausted."""
        event, (team,), (judge,) = await make_event(teams=1)
        stale = await engine.get_next_assignment(event.id, judge.id)
        await engine.store.rosters.update_team(team.id, status=TeamStatus.REJECTED)

        with pytest.raises(NoEligibleTeamsError):
            await engine.get_next_assignment(event.id, judge.id)

        old = await engine.assignments.get_assignment(stale.id)
        assert old.status == AssignmentStatus.SKIPPED
        stored_judge = await engine.store.rosters.get_judge(judge.id)
        assert stored_judge.current_assignment_id is None


async def _complete(engine, assignment):
    """Close an assignment the way a criteria judge would."""
    event = await engine.store.events.get_event(assignment.event_id)
    criteria = await engine.store.events.list_criteria(event.id)
    if not criteria:
        criteria = [await engine.store.events.add_criterion(event.id, "Overall")]
    await engine.submit_criteria_result(assignment.id, {criteria[0].id: 5})

