"""Tests for pairwise vote resolution."""

import pytest

from judging_engine.core.errors import (
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from judging_engine.models import AssignmentStatus, JudgingMode, TeamStatus
from judging_engine.ranking import calculate_expected_win_chance


async def _second_visit(engine, event, judge):
    """Walk a judge to their second team and return (baseline_team_id, assignment)."""
    first = await engine.get_next_assignment(event.id, judge.id)
    await engine.record_first_visit(judge.id, first.id)
    second = await engine.get_next_assignment(event.id, judge.id)
    return first.team_id, second


def _by_team(standings):
    return {s.team_id: s for s in standings}


class TestRecordVote:
    """Tests for applying a vote."""

    async def test_first_win_from_zero(self, engine, make_event):
        """Test an outright win between unrated teams moves them to +16 / -16."""
        event, _, (judge,) = await make_event(teams=2)
        baseline, assignment = await _second_visit(engine, event, judge)

        outcome = await engine.record_vote(
            judge.id, event.id, assignment.team_id, baseline, False, assignment.id
        )

        assert outcome.winner_score == pytest.approx(16.0)
        assert outcome.loser_score == pytest.approx(-16.0)
        rows = _by_team(await engine.get_team_standings(event.id))
        assert rows[assignment.team_id].rating == pytest.approx(16.0)
        assert rows[baseline].rating == pytest.approx(-16.0)
        assert rows[assignment.team_id].confidence == 1
        assert rows[baseline].confidence == 1

    async def test_draw_from_zero(self, engine, make_event):
        """Test a draw between unrated teams keeps both at zero but adds confidence."""
        event, _, (judge,) = await make_event(teams=2)
        baseline, assignment = await _second_visit(engine, event, judge)

        outcome = await engine.record_vote(
            judge.id, event.id, baseline, assignment.team_id, True, assignment.id
        )

        assert outcome.winner_score == pytest.approx(0.0)
        assert outcome.loser_score == pytest.approx(0.0)
        rows = _by_team(await engine.get_team_standings(event.id))
        assert rows[baseline].confidence == 1
        assert rows[assignment.team_id].confidence == 1

    async def test_vote_closes_assignment(self, engine, make_event):
        """Test the vote completes the assignment and frees the judge."""
        event, _, (judge,) = await make_event(teams=2)
        baseline, assignment = await _second_visit(engine, event, judge)

        await engine.record_vote(
            judge.id, event.id, baseline, assignment.team_id, False, assignment.id
        )

        stored = await engine.assignments.get_assignment(assignment.id)
        assert stored.status == AssignmentStatus.COMPLETED
        assert (await engine.store.rosters.get_judge(judge.id)).current_assignment_id is None

    async def test_second_vote_uses_current_ratings(self, engine, make_event):
        """Test consecutive votes chain through the stored ratings."""
        event, _, (judge,) = await make_event(teams=3)
        baseline, assignment = await _second_visit(engine, event, judge)
        await engine.record_vote(
            judge.id, event.id, assignment.team_id, baseline, False, assignment.id
        )
        third = await engine.get_next_assignment(event.id, judge.id)

        outcome = await engine.record_vote(
            judge.id, event.id, assignment.team_id, third.team_id, False, third.id
        )

        gain = 32 * (1 - calculate_expected_win_chance(16.0, 0.0))
        assert outcome.winner_score == pytest.approx(16.0 + gain)
        assert outcome.loser_score == pytest.approx(-gain)
        rows = _by_team(await engine.get_team_standings(event.id))
        assert rows[assignment.team_id].confidence == 2
        assert sum(r.rating for r in rows.values()) == pytest.approx(0.0)

    async def test_repeat_vote_rejected(self, engine, make_event):
        """Test a retried vote on the same assignment changes nothing."""
        event, _, (judge,) = await make_event(teams=2)
        baseline, assignment = await _second_visit(engine, event, judge)
        await engine.record_vote(
            judge.id, event.id, assignment.team_id, baseline, False, assignment.id
        )

        with pytest.raises(InvalidStateError):
            await engine.record_vote(
                judge.id, event.id, assignment.team_id, baseline, False, assignment.id
            )

        rows = _by_team(await engine.get_team_standings(event.id))
        assert rows[assignment.team_id].rating == pytest.approx(16.0)
        assert rows[assignment.team_id].confidence == 1

    async def test_assignment_of_other_judge(self, engine, make_event):
        """Test a judge cannot vote on another judge's assignment."""
        event, _, (judge, other) = await make_event(teams=2, judges=2)
        baseline, assignment = await _second_visit(engine, event, judge)

        with pytest.raises(ForbiddenError):
            await engine.record_vote(
                other.id, event.id, assignment.team_id, baseline, False, assignment.id
            )

        stored = await engine.assignments.get_assignment(assignment.id)
        assert stored.status == AssignmentStatus.PENDING

    async def test_assignment_of_other_event(self, engine, make_event):
        """Test an assignment cannot be resolved through another event."""
        event, _, (judge,) = await make_event(teams=2)
        other_event, _, _ = await make_event(teams=0)
        baseline, assignment = await _second_visit(engine, event, judge)

        with pytest.raises(ForbiddenError):
            await engine.record_vote(
                judge.id, other_event.id, assignment.team_id, baseline, False, assignment.id
            )

    async def test_vote_must_include_assigned_team(self, engine, make_event):
        """Test a vote that leaves out the visited team is rejected."""
        event, teams, (judge,) = await make_event(teams=3)
        baseline, assignment = await _second_visit(engine, event, judge)
        outsider = next(t.id for t in teams if t.id not in (baseline, assignment.team_id))

        with pytest.raises(ValidationError, match="assigned team"):
            await engine.record_vote(judge.id, event.id, baseline, outsider, False, assignment.id)

    async def test_same_team_twice(self, engine, make_event):
        """Test a team cannot beat itself."""
        event, _, (judge,) = await make_event(teams=2)
        _, assignment = await _second_visit(engine, event, judge)

        with pytest.raises(ValidationError):
            await engine.record_vote(
                judge.id, event.id, assignment.team_id, assignment.team_id, False, assignment.id
            )

    @pytest.mark.parametrize("field", ["winner", "loser", "assignment"])
    async def test_missing_references(self, engine, make_event, field):
        """Test votes without both teams and an assignment are rejected."""
        event, _, (judge,) = await make_event(teams=2)
        baseline, assignment = await _second_visit(engine, event, judge)
        args = {
            "winner": assignment.team_id,
            "loser": baseline,
            "assignment": assignment.id,
        }
        args[field] = ""

        with pytest.raises(ValidationError):
            await engine.record_vote(
                judge.id, event.id, args["winner"], args["loser"], False, args["assignment"]
            )

    async def test_unknown_team(self, engine, make_event):
        """Test a vote naming a missing team."""
        event, _, (judge,) = await make_event(teams=2)
        _, assignment = await _second_visit(engine, event, judge)

        with pytest.raises(NotFoundError):
            await engine.record_vote(
                judge.id, event.id, assignment.team_id, "ghost", False, assignment.id
            )

    @pytest.mark.parametrize("status", [TeamStatus.REJECTED, TeamStatus.PENDING])
    async def test_team_no_longer_approved(self, engine, make_event, status):
        """Test a vote naming a team that lost its approval changes nothing."""
        event, _, (judge,) = await make_event(teams=2)
        baseline, assignment = await _second_visit(engine, event, judge)
        await engine.store.rosters.update_team(baseline, status=status)

        with pytest.raises(InvalidStateError, match="not approved"):
            await engine.record_vote(
                judge.id, event.id, assignment.team_id, baseline, False, assignment.id
            )

        stored = await engine.assignments.get_assignment(assignment.id)
        assert stored.status == AssignmentStatus.PENDING
        rows = _by_team(await engine.get_team_standings(event.id))
        assert all(r.confidence == 0 for r in rows.values())

    async def test_unknown_assignment(self, engine, make_event):
        """Test a vote naming a missing assignment."""
        event, teams, (judge,) = await make_event(teams=2)

        with pytest.raises(NotFoundError):
            await engine.record_vote(judge.id, event.id, teams[0].id, teams[1].id, False, "ghost")

    async def test_inactive_event(self, engine, make_event):
        """Test votes are refused once the event is over."""
        event, _, (judge,) = await make_event(teams=2)
        baseline, assignment = await _second_visit(engine, event, judge)
        await engine.store.events.advance_status(event.id, "completed")

        with pytest.raises(InvalidStateError):
            await engine.record_vote(
                judge.id, event.id, assignment.team_id, baseline, False, assignment.id
            )

    async def test_criteria_event(self, engine, make_event):
        """Test votes are refused in criteria-based events."""
        event, teams, (judge,) = await make_event(mode=JudgingMode.CRITERIA_BASED, teams=2)
        assignment = await engine.get_next_assignment(event.id, judge.id)

        with pytest.raises(InvalidStateError):
            await engine.record_vote(
                judge.id, event.id, teams[0].id, teams[1].id, False, assignment.id
            )

    async def test_custom_initial_rating(self, store, database_url, make_event):
        """Test unrated teams start from the configured initial rating."""
        from judging_engine.core.config import EngineConfig, RatingConfig
        from judging_engine.engine import JudgingEngine

        engine = JudgingEngine(
            store,
            EngineConfig(database_url=database_url, rating=RatingConfig(initial_rating=100)),
        )
        event, _, (judge,) = await make_event(teams=2)
        baseline, assignment = await _second_visit(engine, event, judge)

        outcome = await engine.record_vote(
            judge.id, event.id, assignment.team_id, baseline, False, assignment.id
        )

        assert outcome.winner_score == pytest.approx(116.0)
        assert outcome.loser_score == pytest.approx(84.0)
