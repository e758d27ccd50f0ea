"""SQLAlchemy backed GameRepository: one row in the games table per lesson game."""

import logging
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from lesson_chess.core.models import GameModel
from lesson_chess.db.schema import DBGame

logger = logging.getLogger(__name__)


class SQLGameRepository:
    """Every write commits right away: a request handled by the service is one transaction."""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_game(self, game_id: UUID) -> GameModel | None:
        row = self.db.get(DBGame, game_id)
        return _row_to_model(row) if row is not None else None

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        row = DBGame(id=uuid4())
        _write_row(row, game)
        self.db.add(row)
        stored = self._commit(row)
        logger.debug("Stored new game %s", row.id)
        return stored, row.id

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        row = self.db.get(DBGame, game_id)
        if row is None:
            logger.warning("Cannot update game %s: no such record", game_id)
            return None
        _write_row(row, game)
        return self._commit(row)

    def delete_game(self, game_id: UUID) -> GameModel | None:
        """Hands back what was stored, so the caller can tell a deleted game from an unknown one."""
        row = self.db.get(DBGame, game_id)
        if row is None:
            return None
        deleted = _row_to_model(row)
        self.db.delete(row)
        self.db.commit()
        return deleted

    def _commit(self, row: DBGame) -> GameModel:
        self.db.commit()
        self.db.refresh(row)
        return _row_to_model(row)


def _write_row(row: DBGame, game: GameModel) -> None:
    """NOTE JSON columns only notice re-assignment, never in-place mutation. So always assign fresh values."""
    row.board = [list(rank) for rank in game.board]
    row.side_to_move = game.side_to_move
    row.last_move = game.last_move
    row.castling_flags = list(game.castling_flags)
    row.history = list(game.history)
    row.pending_promotion = game.pending_promotion
    row.sandbox = game.sandbox
    row.status = game.status
    row.registered_players = dict(game.registered_players)


def _row_to_model(row: DBGame) -> GameModel:
    return GameModel(
        board=row.board,
        side_to_move=row.side_to_move,
        last_move=row.last_move,
        castling_flags=row.castling_flags,
        history=row.history,
        pending_promotion=row.pending_promotion,
        sandbox=row.sandbox,
        status=row.status,
        registered_players=row.registered_players,
    )
