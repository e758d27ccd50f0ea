"""
Game status derivation.

The status is never stored as the truth: it gets recomputed from (board, side to move, last move, castling rights)
every time somebody asks for it.
"""

from dataclasses import dataclass
from typing import Optional

from lesson_chess.chess.board import Board
from lesson_chess.chess.castling import CastlingRights
from lesson_chess.chess.legality import has_any_legal_move
from lesson_chess.chess.moves import MoveRecord, is_in_check
from lesson_chess.chess.square import Square
from lesson_chess.core.shared_types import Color, Status


@dataclass(frozen=True)
class GameStatus:
    """
    One of
    * IN_PROGRESS (with the side to move and whether its king is in check)
    * CHECKMATE (with the winner)
    * STALEMATE
    """

    status: Status
    side_to_move: Color
    in_check: bool = False
    winner: Optional[Color] = None
    checked_king: Optional[Square] = None

    @property
    def is_over(self) -> bool:
        return self.status in (Status.CHECKMATE, Status.STALEMATE)

    def describe(self) -> str:
        """Status line for the UI"""
        side = self.side_to_move.value.capitalize()
        if self.status == Status.CHECKMATE:
            assert self.winner is not None
            return f"{self.winner.value.capitalize()} won by checkmate"
        if self.status == Status.STALEMATE:
            return "Draw by stalemate"
        if self.in_check:
            return f"{side} king is in check"
        return f"{side} to move"


def derive_status(
    board: Board,
    side_to_move: Color,
    last_move: Optional[MoveRecord] = None,
    castling_rights: Optional[CastlingRights] = None,
) -> GameStatus:
    """
    * In check without a legal move --> checkmate, the opponent wins
    * Not in check without a legal move --> stalemate (draw)
    * Anything else --> still in progress

    NOTE repetition, the 50 move rule and insufficient material are not checked.
    Raises MissingKingError when the side to move has no king: a corrupted position is reported, not guessed at.
    """
    in_check = is_in_check(board, side_to_move)
    can_move = has_any_legal_move(board, side_to_move, last_move, castling_rights)
    checked_king = board.find_king(side_to_move) if in_check else None

    if not can_move and in_check:
        return GameStatus(
            Status.CHECKMATE,
            side_to_move,
            in_check=True,
            winner=side_to_move.opponent,
            checked_king=checked_king,
        )
    if not can_move:
        return GameStatus(Status.STALEMATE, side_to_move)
    return GameStatus(
        Status.IN_PROGRESS, side_to_move, in_check=in_check, checked_king=checked_king
    )
