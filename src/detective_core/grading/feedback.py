"""Player-facing feedback text for verdicts and investigation progress."""

from detective_core.models.session import Verdict


def verdict_feedback(verdict: Verdict, matched_count: int) -> str:
    """Feedback message for a graded diagnosis."""
    if verdict == Verdict.CORRECT:
        return "Case closed! You've correctly identified the root cause."

    if verdict == Verdict.PARTIAL:
        if matched_count <= 1:
            return (
                "You've touched on something relevant, but the diagnosis needs more detail. "
                "What specifically is causing the problem?"
            )
        return (
            "You're on the right track! Your diagnosis mentions relevant concepts "
            "but hasn't pinpointed the exact root cause."
        )

    return (
        "That doesn't match the evidence. Consider what the symptoms have in common "
        "and what changed before things went wrong."
    )


def investigation_nudge(clues_revealed: int, total_clues: int, hints_available: int) -> str:
    """
    Suggest the next investigative step for an in-progress session.

    Points at unrevealed evidence first, then at unused hints, then falls
    back to general advice about connecting the symptoms.
    """
    remaining = max(0, total_clues - clues_revealed)
    if remaining == 1:
        return "There is 1 more clue to discover. Try investigating more evidence."
    if remaining > 1:
        return f"There are {remaining} more clues to discover. Try investigating more evidence."

    if hints_available > 0:
        return (
            f"All evidence is on the table. {hints_available} unused "
            f"hint{'s' if hints_available != 1 else ''} can point you at what matters."
        )

    return (
        "Look at the code and configuration clues closely, then check the timeline: "
        "when did things start going wrong, and what changed?"
    )
