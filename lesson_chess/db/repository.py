"""Storage interface the service depends on (SQLAlchemy implementation in sql_repository.py, the service tests use an in-memory one)"""

from typing import Protocol
from uuid import UUID

from lesson_chess.core.models import GameModel


class GameRepository(Protocol):
    """Lesson games by ID. None means: no record with that ID."""

    def get_game(self, game_id: UUID) -> GameModel | None: ...

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """The store hands out the ID of the new record."""
        ...

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        """Overwrite the whole record (games are stored as complete snapshots, never patched)."""
        ...

    def delete_game(self, game_id: UUID) -> GameModel | None: ...
