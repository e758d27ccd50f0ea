"""Defines the chess pieces"""

from dataclasses import dataclass
from typing import Self

from lesson_chess.core.exceptions import InvalidRequestError
from lesson_chess.core.shared_types import Color, PieceType

# Pieces a pawn may turn into when reaching the far side of the board
PROMOTION_OPTIONS: tuple[PieceType, ...] = (
    PieceType.QUEEN,
    PieceType.ROOK,
    PieceType.BISHOP,
    PieceType.KNIGHT,
)

# White moves UP the board (towards row 0), black moves DOWN
PAWN_DIRECTION: dict[Color, int] = {Color.WHITE: -1, Color.BLACK: 1}
PAWN_START_ROW: dict[Color, int] = {Color.WHITE: 6, Color.BLACK: 1}
PROMOTION_ROW: dict[Color, int] = {Color.WHITE: 0, Color.BLACK: 7}
HOME_ROW: dict[Color, int] = {Color.WHITE: 7, Color.BLACK: 0}


@dataclass(frozen=True)
class Piece:
    type: PieceType
    color: Color

    @classmethod
    def from_dict(cls, data: dict[str, str]) -> Self:
        """Inverse of `to_dict`: {"type": "queen", "color": "white"}"""
        try:
            return cls(PieceType(data["type"]), Color(data["color"]))
        except (KeyError, ValueError) as exc:
            raise InvalidRequestError(f"Cannot interpret {data!r} as a piece.") from exc

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type.value, "color": self.color.value}

    def promoted_to(self, new_type: PieceType) -> Self:
        """Pieces are values: promotion hands back a new piece of the same color."""
        return type(self)(new_type, self.color)
