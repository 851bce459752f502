import pytest

from elo_bot.operations.player_operations import PlayerOperations
from elo_bot.utils.elo_exceptions import (
    InvalidNameError, AlreadyRegisteredError,
    CallerNotRegisteredError, UserNotFoundError
)


def test_register_trims_name_and_uses_initial_elo(run_with_db, settings):
    async def body(db):
        ops = PlayerOperations(db, settings)
        return await ops.register("1", "  Alice  ")

    player = run_with_db(body)
    assert player.name == "Alice"
    assert player.elo == 400


@pytest.mark.parametrize("raw_name", ["", "   ", None])
def test_register_rejects_blank_names(run_with_db, settings, raw_name):
    async def body(db):
        ops = PlayerOperations(db, settings)
        with pytest.raises(InvalidNameError):
            await ops.register("1", raw_name)
        return await db.get_player("1")

    assert run_with_db(body) is None


def test_register_twice_keeps_original_record(run_with_db, settings):
    async def body(db):
        ops = PlayerOperations(db, settings)
        await ops.register("1", "Alice")
        await db.set_player_rating("1", 431.5)

        with pytest.raises(AlreadyRegisteredError) as excinfo:
            await ops.register("1", "Alicia")
        return excinfo.value, await db.get_player("1")

    error, player = run_with_db(body)
    assert error.existing_name == "Alice"
    assert "Alice" in error.user_message
    assert player.name == "Alice"
    assert player.elo == 431.5


def test_inspect_defaults_to_caller(run_with_db, settings):
    async def body(db):
        ops = PlayerOperations(db, settings)
        await ops.register("1", "Alice")
        await ops.register("2", "Bob")
        return await ops.inspect("1"), await ops.inspect("1", "2")

    own, other = run_with_db(body)
    assert (own.name, own.elo) == ("Alice", 400)
    assert (other.name, other.elo) == ("Bob", 400)


def test_inspect_errors(run_with_db, settings):
    async def body(db):
        ops = PlayerOperations(db, settings)
        with pytest.raises(CallerNotRegisteredError):
            await ops.inspect("1")

        await ops.register("1", "Alice")
        with pytest.raises(UserNotFoundError) as excinfo:
            await ops.inspect("1", "42")
        return excinfo.value

    assert run_with_db(body).uid == "42"
