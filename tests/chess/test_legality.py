"""Unit tests for /lesson_chess/chess/legality.py"""

import logging
from typing import Callable

import pytest

from lesson_chess.chess.board import Board
from lesson_chess.chess.castling import CastlingRights, CastlingSide
from lesson_chess.chess.legality import (
    all_legal_moves,
    board_after_move,
    has_any_legal_move,
    is_legal_move,
    legal_destinations,
)
from lesson_chess.chess.moves import MoveRecord
from lesson_chess.chess.pieces import Piece
from lesson_chess.chess.square import Square
from lesson_chess.core.exceptions import InvalidSquareError
from lesson_chess.core.shared_types import Color, PieceType

MakeBoard = Callable[[dict[str, str]], Board]
Squares = Callable[..., set[Square]]


def _sq(name: str) -> Square:
    return Square.from_algebraic(name)


def _destinations(board: Board, name: str, **kwargs) -> set[Square]:
    return set(legal_destinations(board, _sq(name), **kwargs))


@pytest.fixture
def castling_board(make_board: MakeBoard) -> Board:
    """Kings and rooks on their starting squares, nothing in between"""
    return make_board({"e1": "K", "a1": "R", "h1": "R", "e8": "k", "a8": "r", "h8": "r"})


# --- INITIAL POSITION ---
@pytest.mark.parametrize("col", range(8))
def test_initial_pawn_moves(col: int) -> None:
    """One or two squares forward, for both colors"""
    board = Board.starting_position()
    assert set(legal_destinations(board, Square(6, col))) == {Square(5, col), Square(4, col)}
    assert set(legal_destinations(board, Square(1, col))) == {Square(2, col), Square(3, col)}


def test_initial_knight_moves(squares: Squares) -> None:
    board = Board.starting_position()
    assert _destinations(board, "b1") == squares("a3", "c3")
    assert _destinations(board, "g1") == squares("f3", "h3")
    assert _destinations(board, "b8") == squares("a6", "c6")


@pytest.mark.parametrize("name", ["a1", "c1", "d1", "e1", "f1", "h1", "a8", "c8", "d8", "e8", "f8", "h8"])
def test_initial_pieces_are_blocked(name: str) -> None:
    """Everything but pawns and knights is stuck behind its own pawns"""
    assert _destinations(Board.starting_position(), name) == set()


def test_twenty_moves_at_the_start() -> None:
    moves = all_legal_moves(Board.starting_position(), Color.WHITE)
    assert sum(len(destinations) for destinations in moves.values()) == 20
    assert len(moves) == 10  # 8 pawns + 2 knights


def test_empty_square_has_no_destinations() -> None:
    assert _destinations(Board.starting_position(), "e4") == set()


def test_off_the_board() -> None:
    with pytest.raises(InvalidSquareError):
        legal_destinations(Board.starting_position(), Square(8, 0))
    with pytest.raises(InvalidSquareError):
        is_legal_move(Board.starting_position(), Square(6, 4), Square(6, -1))


# --- KING SAFETY ---
def test_pinned_piece_cannot_move(make_board: MakeBoard) -> None:
    """Bishop on e2 shields its king from the rook on e8"""
    board = make_board({"e1": "K", "e2": "B", "e8": "r", "a8": "k"})
    assert _destinations(board, "e2") == set()


def test_pinned_piece_may_move_along_the_pin(make_board: MakeBoard, squares: Squares) -> None:
    board = make_board({"e1": "K", "e2": "R", "e8": "r", "a8": "k"})
    assert _destinations(board, "e2") == squares("e3", "e4", "e5", "e6", "e7", "e8")


def test_must_resolve_check(make_board: MakeBoard, squares: Squares) -> None:
    """In check by the rook on e8: block on e-file, or move the king off it"""
    board = make_board({"e1": "K", "a4": "R", "e8": "r", "a8": "k"})
    assert _destinations(board, "a4") == squares("e4")
    assert _destinations(board, "e1") == squares("d1", "d2", "f1", "f2")


def test_king_cannot_step_into_attack(make_board: MakeBoard, squares: Squares) -> None:
    board = make_board({"e1": "K", "d8": "r", "f8": "r", "a8": "k"})
    assert _destinations(board, "e1") == squares("e2")


def test_kings_keep_their_distance(make_board: MakeBoard, squares: Squares) -> None:
    """The opposing king covers the squares around it"""
    board = make_board({"e4": "K", "e6": "k"})
    destinations = _destinations(board, "e4")
    assert destinations.isdisjoint(squares("d5", "e5", "f5"))
    assert destinations == squares("d4", "f4", "d3", "e3", "f3")


def test_king_cannot_take_protected_piece(make_board: MakeBoard) -> None:
    board = make_board({"e1": "K", "e2": "q", "e3": "r", "a8": "k"})
    assert _sq("e2") not in _destinations(board, "e1")


def test_king_may_take_unprotected_piece(make_board: MakeBoard) -> None:
    board = make_board({"e1": "K", "e2": "q", "a8": "k"})
    assert _sq("e2") in _destinations(board, "e1")


# --- MISSING KING: FAIL CLOSED ---
def test_no_moves_without_own_king(make_board: MakeBoard, caplog: pytest.LogCaptureFixture) -> None:
    """A corrupted position does not produce any moves, and the corruption gets logged"""
    board = make_board({"d4": "Q", "e8": "k"})
    with caplog.at_level(logging.ERROR):
        assert legal_destinations(board, _sq("d4")) == []
    assert "king missing" in caplog.text


# --- EN PASSANT ---
def test_en_passant(make_board: MakeBoard) -> None:
    """Black just played d7-d5 next to the white pawn on e5: exd6 takes the pawn on d5"""
    board = make_board({"e1": "K", "e8": "k", "e5": "P", "d5": "p"})
    last_move = MoveRecord(_sq("d7"), _sq("d5"), Piece(PieceType.PAWN, Color.BLACK))
    assert _sq("d6") in _destinations(board, "e5", last_move=last_move)

    after = board_after_move(board, _sq("e5"), _sq("d6"))
    assert after.piece(_sq("d6")) == Piece(PieceType.PAWN, Color.WHITE)
    assert after.is_empty(_sq("d5"))
    assert after.is_empty(_sq("e5"))


def test_en_passant_only_on_the_very_next_move(make_board: MakeBoard) -> None:
    board = make_board({"e1": "K", "e8": "k", "e5": "P", "d5": "p", "h7": "p"})
    last_move = MoveRecord(_sq("h7"), _sq("h6"), Piece(PieceType.PAWN, Color.BLACK))
    assert _sq("d6") not in _destinations(board, "e5", last_move=last_move)


def test_en_passant_exposing_the_king(make_board: MakeBoard) -> None:
    """Both pawns leave the 5th rank at once: the rook on a5 would hit the king on h5"""
    board = make_board({"h5": "K", "e8": "k", "e5": "P", "d5": "p", "a5": "r"})
    last_move = MoveRecord(_sq("d7"), _sq("d5"), Piece(PieceType.PAWN, Color.BLACK))
    assert _sq("d6") not in _destinations(board, "e5", last_move=last_move)


# --- CASTLING ---
def test_castling_both_sides(castling_board: Board) -> None:
    rights = CastlingRights()
    white_king = _destinations(castling_board, "e1", castling_rights=rights)
    black_king = _destinations(castling_board, "e8", castling_rights=rights)
    assert {_sq("g1"), _sq("c1")} <= white_king
    assert {_sq("g8"), _sq("c8")} <= black_king


def test_castling_moves_the_rook(castling_board: Board) -> None:
    after = board_after_move(castling_board, _sq("e1"), _sq("g1"))
    assert after.piece(_sq("g1")) == Piece(PieceType.KING, Color.WHITE)
    assert after.piece(_sq("f1")) == Piece(PieceType.ROOK, Color.WHITE)
    assert after.is_empty(_sq("e1"))
    assert after.is_empty(_sq("h1"))

    after = board_after_move(castling_board, _sq("e8"), _sq("c8"))
    assert after.piece(_sq("c8")) == Piece(PieceType.KING, Color.BLACK)
    assert after.piece(_sq("d8")) == Piece(PieceType.ROOK, Color.BLACK)
    assert after.is_empty(_sq("a8"))


def test_no_castling_after_king_moved(castling_board: Board) -> None:
    rights = CastlingRights().with_king_moved(Color.WHITE)
    white_king = _destinations(castling_board, "e1", castling_rights=rights)
    assert _sq("g1") not in white_king
    assert _sq("c1") not in white_king


def test_no_castling_after_rook_moved(castling_board: Board) -> None:
    rights = CastlingRights().with_rook_moved(Color.WHITE, CastlingSide.KING_SIDE)
    white_king = _destinations(castling_board, "e1", castling_rights=rights)
    assert _sq("g1") not in white_king
    assert _sq("c1") in white_king


def test_no_castling_through_pieces(castling_board: Board) -> None:
    board = castling_board.place_piece(Piece(PieceType.KNIGHT, Color.WHITE), _sq("b1"))
    white_king = _destinations(board, "e1", castling_rights=CastlingRights())
    assert _sq("c1") not in white_king
    assert _sq("g1") in white_king


def test_no_castling_out_of_check(castling_board: Board) -> None:
    board = castling_board.place_piece(Piece(PieceType.ROOK, Color.BLACK), _sq("e5"))
    white_king = _destinations(board, "e1", castling_rights=CastlingRights())
    assert _sq("g1") not in white_king
    assert _sq("c1") not in white_king


def test_no_castling_through_check(castling_board: Board) -> None:
    """Black rook covers f1: the king would pass an attacked square on the king side"""
    board = castling_board.place_piece(Piece(PieceType.ROOK, Color.BLACK), _sq("f5"))
    white_king = _destinations(board, "e1", castling_rights=CastlingRights())
    assert _sq("g1") not in white_king
    assert _sq("c1") in white_king


def test_no_castling_into_check(castling_board: Board) -> None:
    board = castling_board.place_piece(Piece(PieceType.BISHOP, Color.BLACK), _sq("e3"))
    white_king = _destinations(board, "e1", castling_rights=CastlingRights())
    assert _sq("c1") not in white_king  # bishop on e3 hits c1


def test_has_any_legal_move(make_board: MakeBoard) -> None:
    assert has_any_legal_move(Board.starting_position(), Color.WHITE)
    # lone king in the corner, boxed in by the queen: nothing to do
    board = make_board({"a8": "k", "b6": "Q", "c1": "K"})
    assert not has_any_legal_move(board, Color.BLACK)
