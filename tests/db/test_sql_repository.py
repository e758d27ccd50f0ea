"""Unit tests for lesson_chess/db/sql_repository.py"""

from dataclasses import replace
from uuid import uuid4

import pytest
from sqlalchemy.orm import Session

from lesson_chess.chess.game import Game
from lesson_chess.chess.square import Square
from lesson_chess.core.shared_types import Status
from lesson_chess.db.sql_repository import GameModel, SQLGameRepository


@pytest.fixture
def model() -> GameModel:
    """A game with some history: castling flags, last move and snapshots all filled in"""
    game = Game.new_game()
    for from_name, to_name in [("e2", "e4"), ("e7", "e5"), ("e1", "e2")]:
        game = game.make_move(
            Square.from_algebraic(from_name), Square.from_algebraic(to_name)
        ).game
    return replace(
        game.to_model(),
        registered_players={"white": "player_white", "black": "player_black"},
    )


def test_create_game(db_session_repo: Session, model: GameModel) -> None:
    """Conversion from a GameModel to DBGame for a new entry to the database."""
    repo = SQLGameRepository(db_session_repo)
    record_in_db, _ = repo.create_game(model)
    assert isinstance(record_in_db, GameModel)
    assert record_in_db == model


def test_get_game_by_id(db_session_repo: Session, model: GameModel) -> None:
    """Create a game, then fetch it from db. The game comes back exactly as it went in."""
    repo = SQLGameRepository(db_session_repo)
    expected_game, game_id = repo.create_game(model)
    game_found = repo.get_game(game_id)
    assert isinstance(game_found, GameModel)
    assert game_found == expected_game
    assert game_found.status == Status.IN_PROGRESS.value
    assert game_found.castling_flags == ["white-king"]
    assert Game.from_model(game_found) == Game.from_model(model)


def test_get_unknown_game(db_session_repo: Session, model: GameModel) -> None:
    """
    Should return None if ID does not match anything in database.

    NOTE with an empty database, any id is a valid test case.
    """
    repo = SQLGameRepository(db_session_repo)
    assert repo.get_game(uuid4()) is None

    # Now do it with creating a game, but retrieving from the wrong ID
    repo.create_game(model)
    assert repo.get_game(uuid4()) is None


def test_update_game(db_session_repo: Session, model: GameModel) -> None:
    """JSON columns must pick up the new values (they are re-assigned, not mutated)"""
    repo = SQLGameRepository(db_session_repo)
    _, game_id = repo.create_game(model)

    undone = Game.from_model(model).undo()
    new_model = replace(undone.to_model(), registered_players=model.registered_players)
    updated = repo.update_game(game_id, new_model)
    assert updated == new_model

    db_session_repo.expire_all()
    stored = repo.get_game(game_id)
    assert stored == new_model
    assert stored is not None
    assert stored.castling_flags == []
    assert len(stored.history) == 2


def test_update_unknown_game(db_session_repo: Session, model: GameModel) -> None:
    repo = SQLGameRepository(db_session_repo)
    assert repo.update_game(uuid4(), model) is None


def test_delete_game(db_session_repo: Session, model: GameModel) -> None:
    repo = SQLGameRepository(db_session_repo)
    _, game_id = repo.create_game(model)
    deleted = repo.delete_game(game_id)
    assert deleted == model
    assert repo.get_game(game_id) is None
    assert repo.delete_game(game_id) is None


def test_sandbox_game_without_status(db_session_repo: Session) -> None:
    repo = SQLGameRepository(db_session_repo)
    stored, game_id = repo.create_game(Game.empty_board().to_model())
    assert stored.sandbox
    assert stored.status is None
    assert stored.pending_promotion is None
    assert repo.get_game(game_id) == stored
