from elo_bot.database.models import ChallengeOutcome
from elo_bot.operations.challenge_operations import (
    ChallengeAccepted, ChallengeProposed, PendingEntry, PendingSummary
)
from elo_bot.operations.player_operations import PlayerRating
from elo_bot.utils.elo_exceptions import DuplicateChallengeError, StoreUnavailableError
from elo_bot.utils.embeds import (
    build_accepted_embed, build_proposed_embed, build_pending_embed, build_rating_embed
)
from elo_bot.utils.error_embeds import ErrorEmbeds


def _accepted(outcome):
    return ChallengeAccepted(
        challenge_id=7,
        caller_name="Yvonne",
        opponent_name="Xavier",
        outcome=outcome,
        caller_elo=384.0,
        opponent_elo=416.0,
        caller_delta=-16.0,
        opponent_delta=16.0,
    )


def test_accepted_embed_names_winner_from_callers_outcome():
    embed = build_accepted_embed(_accepted(ChallengeOutcome.LOSE))

    assert embed.description == "**Xavier** won against **Yvonne**."
    fields = {f.name: f.value for f in embed.fields}
    assert fields == {"Yvonne": "384 (-16)", "Xavier": "416 (+16)"}
    assert embed.footer.text == "Challenge #7"


def test_accepted_embed_when_confirmer_won():
    embed = build_accepted_embed(_accepted(ChallengeOutcome.WIN))
    assert embed.description == "**Yvonne** won against **Xavier**."


def test_proposed_embed_mentions_opponent():
    result = ChallengeProposed(
        challenge_id=3,
        caller_name="Xavier",
        opponent_name="Yvonne",
        outcome=ChallengeOutcome.WIN,
        caller_delta=16.0,
        opponent_delta=-16.0,
    )
    embed = build_proposed_embed(result, "<@2>")
    assert "**Xavier** reports that they **won**" in embed.description
    assert "<@2>" in embed.description


def test_rating_embed_rounds_elo():
    embed = build_rating_embed(PlayerRating(uid="1", name="Alice", elo=415.6))
    assert embed.description == "Elo: **416**"


def test_pending_embed():
    empty = build_pending_embed(PendingSummary())
    assert empty.description == "You have no pending challenges."

    entry = PendingEntry(
        challenge_id=1, challenger_id="2", challenger_name="Bob",
        opponent_id="1", opponent_name="Alice", outcome=ChallengeOutcome.LOSE
    )
    embed = build_pending_embed(PendingSummary(incoming=[entry]))
    assert [f.name for f in embed.fields] == ["Awaiting your confirmation"]
    assert embed.fields[0].value == "#1: **Bob** lost vs **Alice**"


def test_error_embeds_use_user_message():
    embed = ErrorEmbeds.from_exception(DuplicateChallengeError("Alice", "Bob"))
    assert "already have a pending challenge with **Bob**" in embed.description

    db_embed = ErrorEmbeds.from_exception(StoreUnavailableError("create_challenge", "locked"))
    assert db_embed.title == "Database Error"


def test_pending_embed_fields_stay_within_discord_limit():
    incoming = [
        PendingEntry(
            challenge_id=n,
            challenger_id=str(n),
            challenger_name=f"Challenger with a rather long display name {n}",
            opponent_id="0",
            opponent_name="Yvonne",
            outcome=ChallengeOutcome.WIN,
        )
        for n in range(60)
    ]
    embed = build_pending_embed(PendingSummary(incoming=incoming))

    value = embed.fields[0].value
    assert len(value) <= 1024
    assert value.startswith("#0: ")
    assert value.splitlines()[-1].endswith("more")
    shown = len(value.splitlines()) - 1
    assert value.splitlines()[-1] == f"…and {60 - shown} more"


def test_pending_embed_short_list_is_not_truncated():
    entry = PendingEntry(1, "1", "Xavier", "2", "Yvonne", ChallengeOutcome.LOSE)
    embed = build_pending_embed(PendingSummary(outgoing=[entry]))

    assert embed.fields[0].value == "#1: **Xavier** lost vs **Yvonne**"
