"""Orchestration of communication from API router to business logic and persistence layers (and the reverse direction)."""

import logging
from dataclasses import replace
from typing import Callable
from uuid import UUID

from lesson_chess.api.models import (
    BoardActionRequest,
    CreateGameRequest,
    DeleteGameRequest,
    GameResponse,
    GetGameRequest,
    JoinGameRequest,
    LegalMovesRequest,
    LegalMovesResponse,
    MoveRequest,
    PlacePieceRequest,
    PromotionRequest,
    RemovePieceRequest,
)
from lesson_chess.chess.game import Game, MoveResult, Rejection
from lesson_chess.chess.pieces import Piece
from lesson_chess.chess.square import Square
from lesson_chess.core.exceptions import (
    GameStateError,
    IllegalMoveError,
    NotYourTurnError,
    PromotionError,
    RepositoryError,
)
from lesson_chess.core.models import GameModel
from lesson_chess.core.shared_types import Color
from lesson_chess.db.repository import GameRepository

logger = logging.getLogger(__name__)

PROMOTION_REJECTIONS = {
    Rejection.PROMOTION_PENDING,
    Rejection.NO_PROMOTION_PENDING,
    Rejection.INVALID_PROMOTION_CHOICE,
}


class ChessService:
    """
    Orchestration of layers for a lesson game.

    NOTE Requests for the same game must be handled one at a time (the host serializes them, e.g. one request per room).
    The domain objects hold no state of their own, so that is the only place where ordering matters.
    """

    def __init__(self, repository: GameRepository) -> None:
        self.repo = repository

    # -- API routes logic ---
    def create_game(self, request: CreateGameRequest) -> GameResponse:
        """First player (usually the coach) creates a new game, either from the starting position or as a sandbox board."""
        game = Game.empty_board() if request.sandbox else Game.new_game()
        model = replace(
            game.to_model(),
            registered_players={request.color.value: request.player_name},
        )
        stored_game, game_id = self.repo.create_game(model)
        logger.info(
            "Created %s game %s for %s",
            "sandbox" if request.sandbox else "standard",
            game_id,
            request.player_name,
        )
        return self._create_game_response(game_id, stored_game)

    def join_game(self, request: JoinGameRequest) -> GameResponse:
        """Second player requested to join a game. Gets whatever color is left."""
        stored_model = self._fetch_game(request.game_id)
        players = stored_model.registered_players
        if len(players) >= len(Color):
            raise GameStateError(
                f"Cannot join this game. Both colors are taken: {players}"
            )
        if request.player_name in players.values():
            raise GameStateError(f"{request.player_name} already joined this game.")

        taken_color = Color(next(iter(players))) if players else Color.BLACK
        new_players = {**players, taken_color.opponent.value: request.player_name}
        with_player_registered = replace(stored_model, registered_players=new_players)
        self.repo.update_game(request.game_id, with_player_registered)
        return self._create_game_response(request.game_id, with_player_registered)

    def get_game_state(self, request: GetGameRequest) -> GameResponse:
        """
        Retrieve current game state.
        ----
        Used in "polling" loop by frontend to check when it is the player's turn for instance.
        """
        game_model = self._fetch_game(request.game_id)
        return self._create_game_response(request.game_id, game_model)

    def legal_moves(self, request: LegalMovesRequest) -> LegalMovesResponse:
        """Move hints for the selected square."""
        stored_model = self._fetch_game(request.game_id)
        self._assert_registered(stored_model, request.player_name)
        game = Game.from_model(stored_model)
        destinations = game.legal_destinations(Square(*request.square))
        return LegalMovesResponse(
            game_id=request.game_id,
            player_name=request.player_name,
            square=request.square,
            legal_moves=[(square.row, square.col) for square in destinations],
        )

    def make_move(self, request: MoveRequest) -> GameResponse:
        """Make a move attempt. Nothing gets stored when the game rejects it."""
        stored_model = self._fetch_game(request.game_id)
        game = Game.from_model(stored_model)
        if not game.sandbox:
            self._assert_your_turn(stored_model, game, request.player_name)
        else:
            self._assert_registered(stored_model, request.player_name)

        result = game.make_move(Square(*request.from_square), Square(*request.to_square))
        return self._store_result(request.game_id, stored_model, result)

    def promote(self, request: PromotionRequest) -> GameResponse:
        """Finish a pawn move to the far side of the board by choosing the new piece."""
        stored_model = self._fetch_game(request.game_id)
        game = Game.from_model(stored_model)
        if not game.sandbox:
            self._assert_your_turn(stored_model, game, request.player_name)
        else:
            self._assert_registered(stored_model, request.player_name)

        result = game.promote(request.promote_to)
        return self._store_result(request.game_id, stored_model, result)

    def undo_move(self, request: BoardActionRequest) -> GameResponse:
        """Go back one step (the previous position is restored from history)."""
        return self._update_board(request, Game.undo)

    def reset_board(self, request: BoardActionRequest) -> GameResponse:
        """Back to the starting position (also leaves sandbox mode)."""
        return self._update_board(request, Game.reset)

    def clear_board(self, request: BoardActionRequest) -> GameResponse:
        """Empty the board. Switches the game to sandbox mode."""
        return self._update_board(request, Game.clear)

    def place_piece(self, request: PlacePieceRequest) -> GameResponse:
        piece = Piece(request.piece_type, request.color)
        square = Square(*request.square)
        return self._update_board(request, lambda game: game.place_piece(square, piece))

    def remove_piece(self, request: RemovePieceRequest) -> GameResponse:
        square = Square(*request.square)
        return self._update_board(request, lambda game: game.remove_piece(square))

    def delete_game(self, request: DeleteGameRequest) -> None:
        """Handle a request to delete a Game record."""
        deleted = self.repo.delete_game(request.game_id)
        if deleted is None:
            raise RepositoryError(f"Game with game_id={request.game_id} not found.")
        logger.info("Deleted game %s", request.game_id)

    # -- Internal helpers --
    def _update_board(
        self,
        request: BoardActionRequest | PlacePieceRequest | RemovePieceRequest,
        action: Callable[[Game], Game],
    ) -> GameResponse:
        """Shared flow for the board actions any registered player may take."""
        stored_model = self._fetch_game(request.game_id)
        self._assert_registered(stored_model, request.player_name)
        updated = action(Game.from_model(stored_model))
        return self._store_game(request.game_id, stored_model, updated)

    def _store_result(
        self, game_id: UUID, stored_model: GameModel, result: MoveResult
    ) -> GameResponse:
        """Persist accepted transitions. Rejections turn into exceptions for the caller, the stored game stays as it was."""
        if result.rejection in PROMOTION_REJECTIONS:
            raise PromotionError(result.message)
        if result.rejection is not None:
            raise IllegalMoveError(result.message)
        return self._store_game(game_id, stored_model, result.game)

    def _store_game(
        self, game_id: UUID, stored_model: GameModel, game: Game
    ) -> GameResponse:
        updated_model = replace(
            game.to_model(), registered_players=stored_model.registered_players
        )
        self.repo.update_game(game_id, updated_model)
        return self._create_game_response(game_id, updated_model)

    def _create_game_response(self, game_id: UUID, model: GameModel) -> GameResponse:
        """Convert info in GameModel to a GameResponse (for game with given ID.). The status is derived again, never read back."""
        game = Game.from_model(model)
        status = game.status()
        pending = game.pending_promotion
        checked_king = status.checked_king if status else None
        return GameResponse(
            game_id=game_id,
            players=model.registered_players,
            board=model.board,
            side_to_move=game.side_to_move,
            sandbox=game.sandbox,
            status=status.status if status else None,
            status_text=status.describe() if status else None,
            in_check=status.in_check if status else False,
            checked_king=(checked_king.row, checked_king.col) if checked_king else None,
            winner=status.winner if status else None,
            awaiting_promotion=(pending.row, pending.col) if pending else None,
            move_count=game.move_count,
        )

    def _fetch_game(self, game_id: UUID) -> GameModel:
        """Attempt to find the game in the repository and raise error if it fails."""
        game_model = self.repo.get_game(game_id)
        if game_model is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        return game_model

    def _assert_registered(self, model: GameModel, player: str) -> None:
        if player not in model.registered_players.values():
            raise GameStateError(f"{player} is not a player in this game.")

    def _assert_your_turn(self, model: GameModel, game: Game, player: str) -> None:
        """You must wait for your turn before making a move."""
        self._assert_registered(model, player)
        player_to_move = model.registered_players.get(game.side_to_move.value)
        if player != player_to_move:
            raise NotYourTurnError(
                f"It is not your turn. Waiting for {player_to_move or game.side_to_move.value} to make a move first."
            )
