"""
Leaderboard aggregation over resolved submissions.

rank() is a read-only projection recomputed from the store on every call.
"""

from typing import List

from .models import LeaderboardEntry, ACCEPTED
from .store import Store


def rank(store: Store, event_id: str) -> List[LeaderboardEntry]:
    """
    Rank the participants of an event.

    Only accepted submissions add to score and solved; every submission to
    the event's questions counts toward last_submission_time.

    Order: score descending, solved descending, earlier last submission
    first (participants without submissions last on that key). Remaining
    ties keep participant order.
    """
    question_ids = {q.id for q in store.get_event_questions(event_id)}
    entries = []

    for user in store.get_event_participants(event_id):
        submissions = [
            s for s in store.get_user_submissions(user.id)
            if s.question_id in question_ids
        ]
        accepted = [s for s in submissions if s.status == ACCEPTED]

        entries.append(LeaderboardEntry(
            user=user,
            score=sum(s.score for s in accepted),
            solved=len({s.question_id for s in accepted}),
            last_submission_time=max((s.submitted_at for s in submissions), default=None),
        ))

    def sort_key(entry: LeaderboardEntry):
        no_time = entry.last_submission_time is None
        timestamp = 0.0 if no_time else entry.last_submission_time.timestamp()
        return (-entry.score, -entry.solved, no_time, timestamp)

    return sorted(entries, key=sort_key)


def format_leaderboard(entries: List[LeaderboardEntry]) -> str:
    """Format ranked entries as a text table."""
    lines = [f"{'#':>3}  {'User':<20} {'Score':>6} {'Solved':>7}  Last submission"]
    lines.append("-" * 60)
    for position, entry in enumerate(entries, start=1):
        last = entry.last_submission_time.strftime("%Y-%m-%d %H:%M:%S") if entry.last_submission_time else "-"
        lines.append(f"{position:>3}  {entry.user.username:<20} {entry.score:>6} {entry.solved:>7}  {last}")
    return "\n".join(lines)
