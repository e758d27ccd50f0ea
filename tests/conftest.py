"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Callable, Generator

import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from lesson_chess.chess.board import Board
from lesson_chess.chess.pieces import Piece
from lesson_chess.chess.square import Square
from lesson_chess.core.shared_types import Color, PieceType
from lesson_chess.db.schema import Base

# Setup an in-memory SQLite database for testing
DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)

LETTER_TO_PIECE: dict[str, PieceType] = {
    "p": PieceType.PAWN,
    "n": PieceType.KNIGHT,
    "b": PieceType.BISHOP,
    "r": PieceType.ROOK,
    "q": PieceType.QUEEN,
    "k": PieceType.KING,
}


def board_from(placement: dict[str, str]) -> Board:
    return Board.from_pieces(
        {
            Square.from_algebraic(name): Piece(
                LETTER_TO_PIECE[letter.lower()],
                Color.WHITE if letter.isupper() else Color.BLACK,
            )
            for name, letter in placement.items()
        }
    )


def squares_named(*names: str) -> set[Square]:
    return {Square.from_algebraic(name) for name in names}


@pytest.fixture
def make_board() -> Callable[[dict[str, str]], Board]:
    """
    Quick way to set up a position: make_board({"e1": "K", "e8": "k", "d7": "p"})
    Upper case letters are white pieces, lower case letters black pieces.
    """
    return board_from


@pytest.fixture
def squares() -> Callable[..., set[Square]]:
    """squares("a3", "c3") --> set of Square objects"""
    return squares_named


@pytest.fixture
def db_session_repo() -> Generator[Session, None, None]:
    """Connection to a test database. Tables are removed at teardown to make unit tests of repository independent of each other."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        Base.metadata.drop_all(bind=engine)
        db.close()
