"""Helpers for implementing Castling rules. Need to be imported by multiple sources"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Self

from lesson_chess.chess.pieces import HOME_ROW
from lesson_chess.chess.square import Square
from lesson_chess.core.exceptions import InvalidRequestError
from lesson_chess.core.shared_types import Color

KING_START_COL = 4


class CastlingSide(Enum):
    """Values are the column of the rook taking part in the castling move."""

    KING_SIDE = 7
    QUEEN_SIDE = 0

    @classmethod
    def from_king_step(cls, dc: int) -> Self:
        return cls.KING_SIDE if dc > 0 else cls.QUEEN_SIDE


@dataclass(frozen=True)
class CastlingSquares:
    """
    Store the squares where king/rook start from/end up in by castling.
    `king_passes` is the square the king crosses on its way (must not be attacked either).
    """

    king_from: Square
    king_to: Square
    king_passes: Square
    rook_from: Square
    rook_to: Square

    @classmethod
    def for_side(cls, color: Color, side: CastlingSide) -> Self:
        row = HOME_ROW[color]
        step = 1 if side == CastlingSide.KING_SIDE else -1
        king_to_col = KING_START_COL + 2 * step
        return cls(
            king_from=Square(row, KING_START_COL),
            king_to=Square(row, king_to_col),
            king_passes=Square(row, KING_START_COL + step),
            rook_from=Square(row, side.value),
            # the rook lands right next to the king, on the side the king came from
            rook_to=Square(row, king_to_col - step),
        )


# The moves (in classical chess) made when castling
CASTLING_RULES: dict[tuple[Color, CastlingSide], CastlingSquares] = {
    (color, side): CastlingSquares.for_side(color, side)
    for color in Color
    for side in CastlingSide
}


def king_key(color: Color) -> str:
    return f"{color.value}-king"


def rook_key(color: Color, origin_col: int) -> str:
    return f"{color.value}-rook-{origin_col}"


@dataclass(frozen=True)
class CastlingRights:
    """
    Memory of which castling pieces have ever left their starting square.

    Flags only ever go from False to True during a game. A fresh set of flags is only created when the board gets reset.
    """

    white_king_moved: bool = False
    white_rook_a_moved: bool = False
    white_rook_h_moved: bool = False
    black_king_moved: bool = False
    black_rook_a_moved: bool = False
    black_rook_h_moved: bool = False

    def king_moved(self, color: Color) -> bool:
        return getattr(self, f"{color.value}_king_moved")

    def rook_moved(self, color: Color, side: CastlingSide) -> bool:
        return getattr(self, _rook_field(color, side))

    def with_king_moved(self, color: Color) -> Self:
        return replace(self, **{f"{color.value}_king_moved": True})

    def with_rook_moved(self, color: Color, side: CastlingSide) -> Self:
        return replace(self, **{_rook_field(color, side): True})

    def to_keys(self) -> list[str]:
        """Encode as the keys of the pieces that have moved: 'white-king', 'black-rook-7', ..."""
        keys: list[str] = []
        for color in Color:
            if self.king_moved(color):
                keys.append(king_key(color))
            for side in (CastlingSide.QUEEN_SIDE, CastlingSide.KING_SIDE):
                if self.rook_moved(color, side):
                    keys.append(rook_key(color, side.value))
        return keys

    @classmethod
    def from_keys(cls, keys: Iterable[str]) -> Self:
        rights = cls()
        for key in keys:
            rights = rights._with_key(key)
        return rights

    def _with_key(self, key: str) -> Self:
        for color in Color:
            if key == king_key(color):
                return self.with_king_moved(color)
            for side in CastlingSide:
                if key == rook_key(color, side.value):
                    return self.with_rook_moved(color, side)
        raise InvalidRequestError(f"Unknown castling flag: {key!r}")


def _rook_field(color: Color, side: CastlingSide) -> str:
    file_name = "a" if side == CastlingSide.QUEEN_SIDE else "h"
    return f"{color.value}_rook_{file_name}_moved"
