"""
Full legality filter
-----

A move is legal when it is pseudo-legal (moves.py) AND after making it your own king is not in check.
This is what enforces pins: a piece may not move (the king included) in a way that exposes its own king.
"""

import logging
from typing import Optional

from lesson_chess.chess.board import Board
from lesson_chess.chess.castling import CASTLING_RULES, CastlingRights, CastlingSide
from lesson_chess.chess.moves import (
    MoveRecord,
    is_castling_move,
    is_en_passant_move,
    is_in_check,
    is_pseudo_legal,
)
from lesson_chess.chess.square import Square, all_squares, validate_square
from lesson_chess.core.exceptions import MissingKingError
from lesson_chess.core.shared_types import Color

logger = logging.getLogger(__name__)


def board_after_move(board: Board, from_square: Square, to_square: Square) -> Board:
    """
    The board after moving from_square -> to_square (no legality checks are done here)
    ----

    * castling: the rook jumps over to the square right next to the king's destination.
    * en passant: the pawn that gets taken stands on the row we came from, in the file we go to.
    """
    piece = board.piece(from_square)
    assert piece is not None, f"No piece to move on {from_square}"

    if is_castling_move(board, from_square, to_square):
        side = CastlingSide.from_king_step(to_square.col - from_square.col)
        rook_squares = CASTLING_RULES[(piece.color, side)]
        return board.with_changes(
            {
                from_square: None,
                to_square: piece,
                rook_squares.rook_from: None,
                rook_squares.rook_to: board.piece(rook_squares.rook_from),
            }
        )

    if is_en_passant_move(board, from_square, to_square):
        taken_square = Square(from_square.row, to_square.col)
        return board.with_changes(
            {from_square: None, to_square: piece, taken_square: None}
        )

    return board.move_piece(from_square, to_square)


def is_legal_move(
    board: Board,
    from_square: Square,
    to_square: Square,
    last_move: Optional[MoveRecord] = None,
    castling_rights: Optional[CastlingRights] = None,
) -> bool:
    """
    Pseudo-legal and does not leave your own king in check
    ---

    plan:
    1. check the movement pattern of the piece
    2. make the candidate move on a copy of the board
    3. determine if the mover's king is in check on the new board
    """
    validate_square(from_square)
    validate_square(to_square)

    piece = board.piece(from_square)
    if piece is None:
        return False

    if not is_pseudo_legal(
        board, from_square, to_square, last_move, castling_rights=castling_rights
    ):
        return False

    simulated = board_after_move(board, from_square, to_square)
    return not is_in_check(simulated, piece.color)


def legal_destinations(
    board: Board,
    square: Square,
    last_move: Optional[MoveRecord] = None,
    castling_rights: Optional[CastlingRights] = None,
) -> list[Square]:
    """
    All squares the piece on `square` may legally move to
    ----

    Simply tries all 64 destinations. An empty square has no destinations.

    NOTE Fails closed: if the mover's king is missing (corrupted position), no move is legal.
    """
    validate_square(square)
    piece = board.piece(square)
    if piece is None:
        return []

    try:
        return [
            destination
            for destination in all_squares()
            if is_legal_move(board, square, destination, last_move, castling_rights)
        ]
    except MissingKingError:
        logger.error(
            "Refusing to generate moves for %s on %s: %s king missing from the board\n%s",
            piece.type.value,
            square.to_algebraic(),
            piece.color.value,
            board.render(),
        )
        return []


def all_legal_moves(
    board: Board,
    color: Color,
    last_move: Optional[MoveRecord] = None,
    castling_rights: Optional[CastlingRights] = None,
) -> dict[Square, list[Square]]:
    """Legal destinations of every piece of `color` that has at least one."""
    moves: dict[Square, list[Square]] = {}
    for square in board.locate_color(color):
        destinations = legal_destinations(board, square, last_move, castling_rights)
        if destinations:
            moves[square] = destinations
    return moves


def has_any_legal_move(
    board: Board,
    color: Color,
    last_move: Optional[MoveRecord] = None,
    castling_rights: Optional[CastlingRights] = None,
) -> bool:
    """Stops searching at the first legal move found."""
    return any(
        legal_destinations(board, square, last_move, castling_rights)
        for square in board.locate_color(color)
    )
