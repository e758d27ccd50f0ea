"""Requests and Response models"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from lesson_chess.chess.square import BOARD_DIMENSIONS
from lesson_chess.core.exceptions import InvalidRequestError
from lesson_chess.core.models import BoardRows
from lesson_chess.core.shared_types import Color, PieceType, Status

PieceColor = str
PlayerName = str
Coordinates = tuple[int, int]


def _validate_coordinates(value: Coordinates) -> Coordinates:
    """(row, col), both within the board. Row 0 is black's home rank."""
    num_rows, num_cols = BOARD_DIMENSIONS
    row, col = value
    if not (0 <= row < num_rows and 0 <= col < num_cols):
        raise InvalidRequestError(
            f"Square {value!r} is not on the {num_rows}x{num_cols} board."
        )
    return value


# --- REQUEST MODELS ---
class CreateGameRequest(BaseModel):
    player_name: str
    color: Color
    sandbox: bool = False


class JoinGameRequest(BaseModel):
    game_id: UUID
    player_name: str


class GetGameRequest(BaseModel):
    game_id: UUID


class LegalMovesRequest(BaseModel):
    game_id: UUID
    player_name: str
    square: Coordinates

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: Coordinates) -> Coordinates:
        return _validate_coordinates(value)


class MoveRequest(BaseModel):
    game_id: UUID
    player_name: str
    from_square: Coordinates
    to_square: Coordinates

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: Coordinates) -> Coordinates:
        return _validate_coordinates(value)


class PromotionRequest(BaseModel):
    """NOTE the choice is kept as plain text: rejecting a bad choice is the game's job (the promotion stays pending)."""

    game_id: UUID
    player_name: str
    promote_to: str


class BoardActionRequest(BaseModel):
    """Undo / reset / clear: only need to know which game and who is asking."""

    game_id: UUID
    player_name: str


class PlacePieceRequest(BaseModel):
    game_id: UUID
    player_name: str
    square: Coordinates
    piece_type: PieceType
    color: Color

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: Coordinates) -> Coordinates:
        return _validate_coordinates(value)


class RemovePieceRequest(BaseModel):
    game_id: UUID
    player_name: str
    square: Coordinates

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: Coordinates) -> Coordinates:
        return _validate_coordinates(value)


class DeleteGameRequest(BaseModel):
    game_id: UUID


# --- RESPONSE MODELS ---
class GameResponse(BaseModel):
    game_id: UUID
    players: dict[PieceColor, PlayerName]
    board: BoardRows
    side_to_move: Color
    sandbox: bool
    status: Optional[Status]
    status_text: Optional[str]
    in_check: bool
    checked_king: Optional[Coordinates]
    winner: Optional[Color]
    awaiting_promotion: Optional[Coordinates]
    move_count: int


class LegalMovesResponse(BaseModel):
    game_id: UUID
    player_name: str
    square: Coordinates
    legal_moves: list[Coordinates]
