"""
The Game class will be the entrypoint into the domain layer for the service layer.

It is the explicit game context {board, side to move, last move, castling rights, history, ...}.
A Game is never changed in place: every operation hands back a new Game, so earlier values can be kept around
(that is how undo works) and a rejected attempt leaves the caller with the unchanged game.
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Any, Optional, Self

from lesson_chess.chess.board import Board
from lesson_chess.chess.castling import CASTLING_RULES, CastlingRights, CastlingSide
from lesson_chess.chess.legality import board_after_move, legal_destinations
from lesson_chess.chess.moves import MoveRecord
from lesson_chess.chess.pieces import PROMOTION_OPTIONS, PROMOTION_ROW, Piece
from lesson_chess.chess.square import Square, validate_square
from lesson_chess.chess.status import GameStatus, derive_status
from lesson_chess.core.exceptions import BoardCorruptionError, GameStateError, InvalidSquareError
from lesson_chess.core.models import GameModel
from lesson_chess.core.shared_types import Color, PieceType

logger = logging.getLogger(__name__)


class Rejection(Enum):
    """Why a move / promotion attempt was not accepted. None of these change the game."""

    INVALID_SQUARE = auto()
    NO_PIECE_AT_ORIGIN = auto()
    NOT_SIDE_TO_MOVE = auto()
    ILLEGAL_MOVE = auto()
    GAME_OVER = auto()
    PROMOTION_PENDING = auto()
    NO_PROMOTION_PENDING = auto()
    INVALID_PROMOTION_CHOICE = auto()
    CORRUPT_POSITION = auto()


@dataclass(frozen=True)
class Snapshot:
    """Everything needed to go back to an earlier point in the game."""

    board: Board
    side_to_move: Color
    last_move: Optional[MoveRecord]
    castling_rights: CastlingRights
    pending_promotion: Optional[Square]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            board=Board.from_rows(data["board"]),
            side_to_move=Color(data["side_to_move"]),
            last_move=MoveRecord.from_dict(data["last_move"]) if data["last_move"] else None,
            castling_rights=CastlingRights.from_keys(data["castling_flags"]),
            pending_promotion=_square_from_list(data["pending_promotion"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "board": self.board.to_rows(),
            "side_to_move": self.side_to_move.value,
            "last_move": self.last_move.to_dict() if self.last_move else None,
            "castling_flags": self.castling_rights.to_keys(),
            "pending_promotion": _square_to_list(self.pending_promotion),
        }


@dataclass(frozen=True)
class MoveResult:
    """Outcome of an attempt. When rejected, `game` is the very same (unchanged) game the attempt was made on."""

    game: "Game"
    rejection: Optional[Rejection] = None
    message: str = ""

    @property
    def accepted(self) -> bool:
        return self.rejection is None


@dataclass(frozen=True)
class Game:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    board: Board
    side_to_move: Color = Color.WHITE
    last_move: Optional[MoveRecord] = None
    castling_rights: CastlingRights = field(default_factory=CastlingRights)
    history: tuple[Snapshot, ...] = ()
    pending_promotion: Optional[Square] = None
    sandbox: bool = False

    @classmethod
    def new_game(cls) -> Self:
        """Standard starting position, white to move"""
        return cls(board=Board.starting_position())

    @classmethod
    def empty_board(cls) -> Self:
        """Sandbox / demo mode: empty board, pieces get placed freely"""
        return cls(board=Board.empty(), sandbox=True)

    @classmethod
    def from_model(cls, model: GameModel) -> Self:
        """Define how to construct a Game from the information the Service layer actually has"""
        snapshot = Snapshot.from_dict(
            {
                "board": model.board,
                "side_to_move": model.side_to_move,
                "last_move": model.last_move,
                "castling_flags": model.castling_flags,
                "pending_promotion": model.pending_promotion,
            }
        )
        return cls(
            board=snapshot.board,
            side_to_move=snapshot.side_to_move,
            last_move=snapshot.last_move,
            castling_rights=snapshot.castling_rights,
            history=tuple(Snapshot.from_dict(entry) for entry in model.history),
            pending_promotion=snapshot.pending_promotion,
            sandbox=model.sandbox,
        )

    def to_model(self) -> GameModel:
        """Encode back into a format the Service layer uses (players are added by the service, the game does not know them)"""
        current = self._snapshot().to_dict()
        status = self.status()
        return GameModel(
            board=current["board"],
            side_to_move=current["side_to_move"],
            last_move=current["last_move"],
            castling_flags=current["castling_flags"],
            history=[snapshot.to_dict() for snapshot in self.history],
            pending_promotion=current["pending_promotion"],
            sandbox=self.sandbox,
            status=status.status.value if status else None,
        )

    @property
    def move_count(self) -> int:
        return len(self.history)

    def status(self) -> Optional[GameStatus]:
        """
        Derived fresh on every call.

        A sandbox board does not need kings (yet). Without both of them there simply is no status.
        """
        if self.sandbox and not (
            self.board.has_king(Color.WHITE) and self.board.has_king(Color.BLACK)
        ):
            return None
        return derive_status(
            self.board, self.side_to_move, self.last_move, self.castling_rights
        )

    def legal_destinations(self, square: Square) -> list[Square]:
        """
        Squares the piece on `square` can go to. Used to render move hints.

        NOTE raises InvalidSquareError for coordinates off the board.
        """
        validate_square(square)
        if self.pending_promotion is not None:
            return []
        return legal_destinations(
            self.board, square, self.last_move, self.castling_rights
        )

    def make_move(self, from_square: Square, to_square: Square) -> MoveResult:
        """
        Attempt to make a move
        -----

        1. reject anything off the board, or while a promotion still needs to be chosen
        2. reject moving nothing, or the opponent's pieces, or moving after the game ended (not in sandbox mode)
           (a board missing a king is refused as well, the same way legal_destinations refuses it)
        3. reject anything that is not a legal destination
        4. update the board (NOTE: if castling, move the king and the rook. If en passant, remove the pawn taken)
        5. update castling rights and the last move
        6. pawn reached the far side? --> wait for the promotion choice. Otherwise pass the turn.
        """
        try:
            validate_square(from_square)
            validate_square(to_square)
        except InvalidSquareError as exc:
            return self._reject(Rejection.INVALID_SQUARE, str(exc))

        if self.pending_promotion is not None:
            return self._reject(
                Rejection.PROMOTION_PENDING,
                f"Choose a piece to promote to on {self.pending_promotion.to_algebraic()} first.",
            )

        piece = self.board.piece(from_square)
        if piece is None:
            return self._reject(
                Rejection.NO_PIECE_AT_ORIGIN,
                f"There is no piece on {from_square.to_algebraic()}.",
            )

        if not self.sandbox:
            if piece.color != self.side_to_move:
                return self._reject(
                    Rejection.NOT_SIDE_TO_MOVE,
                    f"It is {self.side_to_move.value}'s turn to move.",
                )
            try:
                status = self.status()
            except BoardCorruptionError as exc:
                logger.error("Refusing to move on a broken position: %s\n%s", exc, self.board.render())
                return self._reject(Rejection.CORRUPT_POSITION, str(exc))
            if status is not None and status.is_over:
                return self._reject(Rejection.GAME_OVER, status.describe())

        if to_square not in self.legal_destinations(from_square):
            return self._reject(
                Rejection.ILLEGAL_MOVE,
                f"Move not allowed: {from_square.to_algebraic()} -> {to_square.to_algebraic()}",
            )

        new_game = self._apply(from_square, to_square, piece)
        logger.debug(
            "%s %s moved %s -> %s",
            piece.color.value,
            piece.type.value,
            from_square.to_algebraic(),
            to_square.to_algebraic(),
        )
        return MoveResult(new_game)

    def promote(self, choice: PieceType | str) -> MoveResult:
        """
        Finish a pawn move that reached the far side of the board.

        The provisional pawn is replaced by the chosen piece (same color) and only now the turn passes.
        An invalid choice leaves the promotion pending.
        """
        if self.pending_promotion is None:
            return self._reject(
                Rejection.NO_PROMOTION_PENDING, "There is no pawn waiting for promotion."
            )

        piece_type = _parse_promotion_choice(choice)
        if piece_type is None:
            return self._reject(
                Rejection.INVALID_PROMOTION_CHOICE,
                f"Cannot promote to {choice!r}. Pick one of {', '.join(option.value for option in PROMOTION_OPTIONS)}.",
            )

        square = self.pending_promotion
        pawn = self.board.piece(square)
        assert pawn is not None, "A pending promotion always has its pawn on the board"
        promoted = replace(
            self,
            board=self.board.place_piece(pawn.promoted_to(piece_type), square),
            pending_promotion=None,
            side_to_move=self._next_side_to_move(),
        )
        logger.debug(
            "%s pawn on %s promoted to %s",
            pawn.color.value,
            square.to_algebraic(),
            piece_type.value,
        )
        return MoveResult(promoted)

    def undo(self) -> Self:
        """
        Go back to the state before the last transition, restored from history.

        (Replaying an inverse move cannot restore castling rights or the last move, so we never do that.)
        """
        if not self.history:
            logger.debug("Nothing to undo")
            return self
        previous = self.history[-1]
        return replace(
            self,
            board=previous.board,
            side_to_move=previous.side_to_move,
            last_move=previous.last_move,
            castling_rights=previous.castling_rights,
            pending_promotion=previous.pending_promotion,
            history=self.history[:-1],
        )

    def reset(self) -> Self:
        """Back to the starting position. The only way (besides clear) castling rights get renewed."""
        return type(self).new_game()

    def clear(self) -> Self:
        """Empty the board and switch to sandbox mode"""
        return type(self).empty_board()

    def place_piece(self, square: Square, piece: Piece) -> Self:
        """Sandbox only: put a piece on a square (replacing whatever stood there)"""
        self._assert_editable()
        validate_square(square)
        if piece.type == PieceType.KING:
            other_kings = [
                located for located in self.board.locate_pieces(piece) if located != square
            ]
            if other_kings:
                raise GameStateError(
                    f"There already is a {piece.color.value} king on {other_kings[0].to_algebraic()}."
                )
        return self._with_edit(self.board.place_piece(piece, square))

    def remove_piece(self, square: Square) -> Self:
        """Sandbox only: take a piece off the board"""
        self._assert_editable()
        validate_square(square)
        if self.board.is_empty(square):
            raise GameStateError(f"There is no piece on {square.to_algebraic()}.")
        return self._with_edit(self.board.remove_piece(square))

    # -- PRIVATE HELPERS ---
    def _snapshot(self) -> Snapshot:
        return Snapshot(
            self.board,
            self.side_to_move,
            self.last_move,
            self.castling_rights,
            self.pending_promotion,
        )

    def _reject(self, rejection: Rejection, message: str) -> MoveResult:
        logger.info("Rejected (%s): %s", rejection.name, message)
        return MoveResult(self, rejection, message)

    def _next_side_to_move(self) -> Color:
        """In sandbox mode both colors can move freely, the turn never passes."""
        return self.side_to_move if self.sandbox else self.side_to_move.opponent

    def _apply(self, from_square: Square, to_square: Square, piece: Piece) -> Self:
        """
        Board, castling rights, last move and history change together, in a single new Game.

        NOTE history keeps one full snapshot per accepted move, and it is stored with the game.
        That is fine for lessons (a few hundred moves at most), there is no cap.
        """
        board = board_after_move(self.board, from_square, to_square)
        reaches_far_side = (
            piece.type == PieceType.PAWN and to_square.row == PROMOTION_ROW[piece.color]
        )
        return replace(
            self,
            board=board,
            last_move=MoveRecord(from_square, to_square, piece),
            castling_rights=self._updated_castling_rights(from_square, to_square, piece),
            history=self.history + (self._snapshot(),),
            pending_promotion=to_square if reaches_far_side else None,
            side_to_move=self.side_to_move if reaches_far_side else self._next_side_to_move(),
        )

    def _updated_castling_rights(
        self, from_square: Square, to_square: Square, piece: Piece
    ) -> CastlingRights:
        """
        * moving your king --> it has moved, forever
        * castling --> the rook that jumped over has moved as well
        * moving a rook out of a corner column --> the rook of that side has moved, forever
        * anything leaving or landing on a corner square (a capture of the corner rook included)
          --> the rook belonging there has moved, forever. Another rook arriving later does not undo that.
        """
        rights = self.castling_rights
        if piece.type == PieceType.KING:
            rights = rights.with_king_moved(piece.color)
            if abs(to_square.col - from_square.col) == 2:
                side = CastlingSide.from_king_step(to_square.col - from_square.col)
                rights = rights.with_rook_moved(piece.color, side)
        for (color, side), squares in CASTLING_RULES.items():
            rook_left_corner_column = (
                piece.type == PieceType.ROOK and piece.color == color and from_square.col == side.value
            )
            if rook_left_corner_column or squares.rook_from in (from_square, to_square):
                rights = rights.with_rook_moved(color, side)
        return rights

    def _assert_editable(self) -> None:
        if not self.sandbox:
            raise GameStateError("Pieces can only be placed / removed on a sandbox board.")
        if self.pending_promotion is not None:
            raise GameStateError("Choose a piece to promote to first.")

    def _with_edit(self, board: Board) -> Self:
        return replace(self, board=board, history=self.history + (self._snapshot(),))


def _parse_promotion_choice(choice: PieceType | str) -> Optional[PieceType]:
    try:
        piece_type = PieceType(str(choice).lower())
    except ValueError:
        return None
    return piece_type if piece_type in PROMOTION_OPTIONS else None


def _square_from_list(coordinates: Optional[list[int]]) -> Optional[Square]:
    return Square(*coordinates) if coordinates is not None else None


def _square_to_list(square: Optional[Square]) -> Optional[list[int]]:
    return [square.row, square.col] if square is not None else None
