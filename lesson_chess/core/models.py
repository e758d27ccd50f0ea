"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
Hence, both the API layer (higher) and domain/db layers (lower) will use model(s) defined here to send to/receive from the Service
(Decouples the data model specific to the DB layer, API layer, or domain layer from the information needed to send across boundaries)
"""

from dataclasses import dataclass, field
from typing import Any, Optional

# Type aliases to make GameModel easier to read
PieceColor = str
PlayerName = str
BoardRows = list[list[Optional[dict[str, str]]]]


@dataclass
class GameModel:
    """Transport-safe representation of a lesson game used between API, Service, DB, and Game layers."""

    board: BoardRows
    side_to_move: PieceColor
    last_move: Optional[dict[str, Any]]
    castling_flags: list[str]
    history: list[dict[str, Any]]
    pending_promotion: Optional[list[int]]
    sandbox: bool
    status: Optional[str]
    registered_players: dict[PieceColor, PlayerName] = field(default_factory=dict)
