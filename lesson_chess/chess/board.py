"""The Game board: which piece stands where. Every change hands back a new Board (copy-on-write)"""

from dataclasses import dataclass
from typing import Optional, Self

from lesson_chess.chess.pieces import Piece
from lesson_chess.chess.square import BOARD_DIMENSIONS, Square, all_squares
from lesson_chess.core.exceptions import InvalidRequestError, MissingKingError
from lesson_chess.core.shared_types import Color, PieceType

Grid = tuple[tuple[Optional[Piece], ...], ...]

BACK_RANK: tuple[PieceType, ...] = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)


@dataclass(frozen=True)
class Board:
    squares: Grid

    @classmethod
    def empty(cls) -> Self:
        """Sandbox board: no pieces at all"""
        num_rows, num_cols = BOARD_DIMENSIONS
        return cls(tuple(tuple(None for _ in range(num_cols)) for _ in range(num_rows)))

    @classmethod
    def starting_position(cls) -> Self:
        """
        Standard layout.
        * row 0: black pieces, row 1: black pawns
        * row 6: white pawns, row 7: white pieces
        """

        def back_rank(color: Color) -> tuple[Piece, ...]:
            return tuple(Piece(piece_type, color) for piece_type in BACK_RANK)

        def pawns(color: Color) -> tuple[Piece, ...]:
            return tuple(Piece(PieceType.PAWN, color) for _ in range(BOARD_DIMENSIONS[1]))

        empty_row = tuple(None for _ in range(BOARD_DIMENSIONS[1]))
        return cls(
            (
                back_rank(Color.BLACK),
                pawns(Color.BLACK),
                empty_row,
                empty_row,
                empty_row,
                empty_row,
                pawns(Color.WHITE),
                back_rank(Color.WHITE),
            )
        )

    @classmethod
    def from_pieces(cls, pieces: dict[Square, Piece]) -> Self:
        """Convenience constructor (mostly for setting up positions in tests / lessons)."""
        return cls.empty().with_changes(pieces)

    # --- SERIALIZATION ---
    @classmethod
    def from_rows(cls, rows: list[list[Optional[dict[str, str]]]]) -> Self:
        """
        Inverse of `to_rows`.
        ---

        The host persists a board as an 8x8 array of nullable {"type": ..., "color": ...} objects.
        """
        num_rows, num_cols = BOARD_DIMENSIONS
        if len(rows) != num_rows or any(len(row) != num_cols for row in rows):
            raise InvalidRequestError(
                f"Board must be {num_rows}x{num_cols}, got {len(rows)} rows."
            )
        return cls(
            tuple(
                tuple(Piece.from_dict(cell) if cell is not None else None for cell in row)
                for row in rows
            )
        )

    def to_rows(self) -> list[list[Optional[dict[str, str]]]]:
        return [
            [piece.to_dict() if piece is not None else None for piece in row]
            for row in self.squares
        ]

    # --- QUERIES ---
    def piece(self, square: Square) -> Optional[Piece]:
        return self.squares[square.row][square.col]

    def is_empty(self, square: Square) -> bool:
        return self.piece(square) is None

    def locate_color(self, color: Color) -> list[Square]:
        return [
            square
            for square in all_squares()
            if (piece := self.piece(square)) is not None and piece.color == color
        ]

    def locate_pieces(self, piece: Piece) -> list[Square]:
        return [square for square in all_squares() if self.piece(square) == piece]

    def find_king(self, color: Color) -> Square:
        """Every reachable position has exactly one king per color."""
        kings = self.locate_pieces(Piece(PieceType.KING, color))
        if len(kings) != 1:
            raise MissingKingError(
                f"Expected exactly one {color.value} king on the board, found {len(kings)}."
            )
        return kings[0]

    def has_king(self, color: Color) -> bool:
        return len(self.locate_pieces(Piece(PieceType.KING, color))) == 1

    # --- UPDATES (copy-on-write) ---
    def with_changes(self, changes: dict[Square, Optional[Piece]]) -> Self:
        """Return a copy of the board with the given squares (re)assigned. None empties a square."""
        rows: list[list[Optional[Piece]]] = [list(row) for row in self.squares]
        for square, piece in changes.items():
            rows[square.row][square.col] = piece
        return type(self)(tuple(tuple(row) for row in rows))

    def move_piece(self, from_square: Square, to_square: Square) -> Self:
        """Relocate whatever stands on from_square. Anything on to_square is captured."""
        return self.with_changes({from_square: None, to_square: self.piece(from_square)})

    def place_piece(self, piece: Piece, square: Square) -> Self:
        return self.with_changes({square: piece})

    def remove_piece(self, square: Square) -> Self:
        return self.with_changes({square: None})

    def render(self) -> str:
        """Plain text diagram, handy in log messages and failing test output."""
        symbols = {
            PieceType.PAWN: "p",
            PieceType.KNIGHT: "n",
            PieceType.BISHOP: "b",
            PieceType.ROOK: "r",
            PieceType.QUEEN: "q",
            PieceType.KING: "k",
        }

        def cell(piece: Optional[Piece]) -> str:
            if piece is None:
                return "."
            symbol = symbols[piece.type]
            return symbol.upper() if piece.color == Color.WHITE else symbol

        return "\n".join("".join(cell(piece) for piece in row) for row in self.squares)

    def __repr__(self) -> str:
        return f"Board(\n{self.render()}\n)"
