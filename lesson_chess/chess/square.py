"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass

from lesson_chess.core.exceptions import InvalidSquareError

# Chess board is always 8x8: (number of rows, number of columns)
BOARD_DIMENSIONS = (8, 8)


@dataclass(frozen=True)
class Square:
    """
    Grid coordinates.

    Row 0 is Black's home rank (the 8th rank), row 7 is White's home rank (the 1st rank).
    Column 0 is the a-file.
    """

    row: int
    col: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Square names: 'a8' is (0, 0), 'h1' is (7, 7)"""
        col = ord(sq[0]) - ord("a")
        row = BOARD_DIMENSIONS[0] - int(sq[1:])
        return cls(row, col)

    def to_algebraic(self) -> str:
        return f"{chr(self.col + ord('a'))}{BOARD_DIMENSIONS[0] - self.row}"

    def is_within_bounds(self) -> bool:
        return (0 <= self.row < BOARD_DIMENSIONS[0]) and (
            0 <= self.col < BOARD_DIMENSIONS[1]
        )

    def offset(self, dr: int, dc: int) -> Square:
        return Square(self.row + dr, self.col + dc)


def validate_square(square: Square) -> Square:
    """Reject coordinates outside of the board before they reach any indexing logic."""
    if not square.is_within_bounds():
        raise InvalidSquareError(
            f"Square ({square.row}, {square.col}) is outside of the {BOARD_DIMENSIONS[0]}x{BOARD_DIMENSIONS[1]} board."
        )
    return square


def all_squares() -> list[Square]:
    return [
        Square(row, col)
        for row in range(BOARD_DIMENSIONS[0])
        for col in range(BOARD_DIMENSIONS[1])
    ]
