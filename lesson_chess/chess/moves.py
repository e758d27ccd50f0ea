"""
Geometry/Base movement and capturing/attacking rules

Key idea: Use strategy pattern to define the movement pattern of each piece type.

Everything in here is *pseudo-legal*: it obeys the movement pattern of a piece and path clearance,
but does not care if the mover leaves their own king in check. That filter lives in legality.py.

NOTE check detection also lives here (and NOT in legality.py): it only ever asks pseudo-legal questions.
If it used the full legality filter, "is the king in check" would depend on "is the king in check after a
hypothetical move", which never terminates.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Self

from lesson_chess.chess.board import Board
from lesson_chess.chess.castling import CASTLING_RULES, CastlingRights, CastlingSide
from lesson_chess.chess.pieces import PAWN_DIRECTION, PAWN_START_ROW, Piece
from lesson_chess.chess.square import Square
from lesson_chess.core.shared_types import Color, PieceType

Vector = tuple[int, int]


@dataclass(frozen=True)
class MoveRecord:
    """The last move applied. Needed to decide if en passant is allowed on the very next move."""

    from_square: Square
    to_square: Square
    piece: Piece

    def is_double_pawn_push(self) -> bool:
        return (
            self.piece.type == PieceType.PAWN
            and abs(self.to_square.row - self.from_square.row) == 2
        )

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        return cls(
            from_square=Square(*data["from"]),
            to_square=Square(*data["to"]),
            piece=Piece.from_dict(data["piece"]),
        )

    def to_dict(self) -> dict:
        return {
            "from": [self.from_square.row, self.from_square.col],
            "to": [self.to_square.row, self.to_square.col],
            "piece": self.piece.to_dict(),
        }


@dataclass(frozen=True)
class Candidate:
    """Everything a movement rule needs to judge a single (from -> to) request."""

    board: Board
    from_square: Square
    to_square: Square
    piece: Piece
    last_move: Optional[MoveRecord] = None
    castling_rights: Optional[CastlingRights] = None

    @property
    def dr(self) -> int:
        return self.to_square.row - self.from_square.row

    @property
    def dc(self) -> int:
        return self.to_square.col - self.from_square.col

    @property
    def target(self) -> Optional[Piece]:
        return self.board.piece(self.to_square)


# --- PATH HELPERS ---
def squares_between(from_square: Square, to_square: Square) -> list[Square]:
    """
    Squares strictly in between two squares on the same row, column or diagonal.

    Needed for checking that the line of sight of a sliding piece is clear
    (and that the squares between king and rook are empty when castling).
    """
    dr = to_square.row - from_square.row
    dc = to_square.col - from_square.col
    if not (dr == 0 or dc == 0 or abs(dr) == abs(dc)):
        raise ValueError(
            f"squares_between requires both squares on a shared line. \n from: {from_square}\n to:{to_square}"
        )

    step: Vector = (_sign(dr), _sign(dc))
    squares_found: list[Square] = []
    square = from_square.offset(*step)
    while square != to_square:
        squares_found.append(square)
        square = square.offset(*step)
    return squares_found


def is_path_clear(board: Board, from_square: Square, to_square: Square) -> bool:
    return all(board.is_empty(square) for square in squares_between(from_square, to_square))


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


# --- MOVEMENT RULES ---
def pawn_rule(candidate: Candidate) -> bool:
    """
    A pawn:
    - moves by a single square forward (onto an empty square)
    - can move by two from its starting row, when both squares are empty
    - takes diagonally
    - takes en passant: diagonally onto an empty square, right after the opponent's pawn passed it by a double push
    """
    color = candidate.piece.color
    direction = PAWN_DIRECTION[color]
    board = candidate.board

    if candidate.dc == 0:
        if candidate.target is not None:
            return False
        if candidate.dr == direction:
            return True
        if candidate.from_square.row == PAWN_START_ROW[color] and candidate.dr == 2 * direction:
            return board.is_empty(candidate.from_square.offset(direction, 0))
        return False

    if abs(candidate.dc) == 1 and candidate.dr == direction:
        if candidate.target is not None:
            return True
        return is_en_passant_capture(candidate)
    return False


def is_en_passant_capture(candidate: Candidate) -> bool:
    """The last move was the opponent's double pawn push, landing right next to our pawn, on the file we move to."""
    last_move = candidate.last_move
    if last_move is None or not last_move.is_double_pawn_push():
        return False
    if last_move.piece.color == candidate.piece.color:
        return False
    lands_next_to_us = (
        last_move.to_square.row == candidate.from_square.row
        and last_move.to_square.col == candidate.to_square.col
    )
    return lands_next_to_us and candidate.board.piece(last_move.to_square) == last_move.piece


def knight_rule(candidate: Candidate) -> bool:
    """Knights jump: |delta_row| + |delta_col| = 3, neither of them zero"""
    return (abs(candidate.dr), abs(candidate.dc)) in {(2, 1), (1, 2)}


def bishop_rule(candidate: Candidate) -> bool:
    """Bishops move diagonally: |delta_row| = |delta_col|"""
    if abs(candidate.dr) != abs(candidate.dc) or candidate.dr == 0:
        return False
    return is_path_clear(candidate.board, candidate.from_square, candidate.to_square)


def rook_rule(candidate: Candidate) -> bool:
    """Rooks move either horizontally or vertically"""
    if (candidate.dr == 0) == (candidate.dc == 0):
        return False
    return is_path_clear(candidate.board, candidate.from_square, candidate.to_square)


def queen_rule(candidate: Candidate) -> bool:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return bishop_rule(candidate) or rook_rule(candidate)


def king_rule(candidate: Candidate) -> bool:
    """
    The king can move by a single square at the time.

    Castling is modelled as a special king move: two squares along its home row.
    """
    if abs(candidate.dr) <= 1 and abs(candidate.dc) <= 1:
        return True
    if candidate.dr == 0 and abs(candidate.dc) == 2:
        return can_castle(candidate)
    return False


# -- STRATEGY PATTERN: MOVEMENT RULES ---
PseudoLegalFn = Callable[[Candidate], bool]
MOVEMENT_RULES: dict[PieceType, PseudoLegalFn] = {
    PieceType.PAWN: pawn_rule,
    PieceType.KNIGHT: knight_rule,
    PieceType.BISHOP: bishop_rule,
    PieceType.ROOK: rook_rule,
    PieceType.QUEEN: queen_rule,
    PieceType.KING: king_rule,
}


def is_pseudo_legal(
    board: Board,
    from_square: Square,
    to_square: Square,
    last_move: Optional[MoveRecord] = None,
    allow_king_capture: bool = False,
    castling_rights: Optional[CastlingRights] = None,
) -> bool:
    """
    Does the move obey the movement pattern of the piece standing on from_square?
    ----

    * You can never land on your own piece.
    * You can never capture the opponent's king. Unless the question actually is
      "is this square attacked?" (check detection), then `allow_king_capture` is set.
    * Castling is only considered when castling_rights are supplied.
    """
    piece = board.piece(from_square)
    if piece is None or from_square == to_square:
        return False

    target = board.piece(to_square)
    if target is not None:
        if target.color == piece.color:
            return False
        if target.type == PieceType.KING and not allow_king_capture:
            return False

    candidate = Candidate(board, from_square, to_square, piece, last_move, castling_rights)
    movement_rule: PseudoLegalFn = MOVEMENT_RULES[piece.type]
    return movement_rule(candidate)


# --- CHECK DETECTION / ATTACKING RULES ---
def is_square_attacked(board: Board, square: Square, by_color: Color) -> bool:
    """
    Could any piece of `by_color` move onto `square`?

    ---
    Only asks pseudo-legal questions (with king capture allowed), never the full legality filter.
    """
    return any(
        is_pseudo_legal(board, attacker, square, allow_king_capture=True)
        for attacker in board.locate_color(by_color)
    )


def is_in_check(board: Board, color: Color) -> bool:
    """
    Is the king of `color` attacked?

    Raises MissingKingError if that king is not on the board (should be unreachable for engine-made positions).
    """
    king_square = board.find_king(color)
    return is_square_attacked(board, king_square, color.opponent)


# -- CASTLING MOVES ---
def can_castle(candidate: Candidate) -> bool:
    """
    **you are allowed to castle if**

    * Neither the king nor the rook on that side ever moved (and the rook is still there).
    * Every square in between the two is empty.
    * You are not currently in check (you cannot castle out of check).
    * The king does not pass through, or land on, an attacked square.
    """
    rights = candidate.castling_rights
    if rights is None:
        return False

    color = candidate.piece.color
    side = CastlingSide.from_king_step(candidate.dc)
    squares = CASTLING_RULES[(color, side)]
    if (candidate.from_square, candidate.to_square) != (squares.king_from, squares.king_to):
        return False

    # Cannot castle if either piece moved before.
    if rights.king_moved(color) or rights.rook_moved(color, side):
        return False

    board = candidate.board
    if board.piece(squares.rook_from) != Piece(PieceType.ROOK, color):
        return False

    # Cannot castle if any of the squares in between is occupied
    if not is_path_clear(board, squares.king_from, squares.rook_from):
        return False

    # Cannot castle out of a check.
    if is_in_check(board, color):
        return False

    # Walk the king over: neither the square it crosses nor the one it lands on may be attacked
    for king_square in (squares.king_passes, squares.king_to):
        if is_in_check(board.move_piece(squares.king_from, king_square), color):
            return False
    return True


def is_castling_move(board: Board, from_square: Square, to_square: Square) -> bool:
    """A king stepping two squares sideways is always a castling move"""
    piece = board.piece(from_square)
    return (
        piece is not None
        and piece.type == PieceType.KING
        and from_square.row == to_square.row
        and abs(to_square.col - from_square.col) == 2
    )


def is_en_passant_move(board: Board, from_square: Square, to_square: Square) -> bool:
    """A pawn changing files without anything to capture on the target square must be taking en passant"""
    piece = board.piece(from_square)
    return (
        piece is not None
        and piece.type == PieceType.PAWN
        and from_square.col != to_square.col
        and board.is_empty(to_square)
    )
