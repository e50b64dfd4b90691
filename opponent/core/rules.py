"""Rules-engine seam between the search core and a chess library.

The evaluator, searcher and selector never call python-chess directly for
anything that mutates or inspects game state. They receive an object that
satisfies :class:`RulesEngine` and hand it the position they were given.

Usage (example):

    from opponent.core.rules import PythonChessRules, applied_move

    rules = PythonChessRules()
    board = chess.Board()
    for move in rules.legal_moves(board):
        with applied_move(rules, board, move):
            ...  # board has the move on it here
        # and is back to where it started here

"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Protocol

import chess


class RulesEngine(Protocol):
    """Everything the search core needs from a chess rules implementation."""

    def legal_moves(self, position: Any) -> List[Any]: ...

    def apply_move(self, position: Any, move: Any) -> None: ...

    def undo_move(self, position: Any) -> None: ...

    def is_checkmate(self, position: Any) -> bool: ...

    def is_draw(self, position: Any) -> bool: ...

    def side_to_move(self, position: Any) -> chess.Color: ...

    def piece_at(self, position: Any, square: chess.Square) -> Optional[chess.Piece]: ...

    def neutral_move(self, position: Any) -> Optional[Any]: ...


@contextmanager
def applied_move(rules: RulesEngine, position: Any, move: Any) -> Iterator[Any]:
    """Apply ``move`` for the duration of the block, undo it on every exit."""
    rules.apply_move(position, move)
    try:
        yield position
    finally:
        rules.undo_move(position)


class PythonChessRules:
    """:class:`RulesEngine` over a mutable ``chess.Board``."""

    def legal_moves(self, position: chess.Board) -> List[chess.Move]:
        return list(position.legal_moves)

    def apply_move(self, position: chess.Board, move: chess.Move) -> None:
        position.push(move)

    def undo_move(self, position: chess.Board) -> None:
        position.pop()

    def is_checkmate(self, position: chess.Board) -> bool:
        return position.is_checkmate()

    def is_draw(self, position: chess.Board) -> bool:
        return draw_reason(position) is not None

    def side_to_move(self, position: chess.Board) -> chess.Color:
        return position.turn

    def piece_at(self, position: chess.Board, square: chess.Square) -> Optional[chess.Piece]:
        return position.piece_at(square)

    def neutral_move(self, position: chess.Board) -> Optional[chess.Move]:
        # A null move hands the turn over without touching the pieces.
        # It is not a legal way out of check, so there is none then.
        if position.is_check():
            return None
        return chess.Move.null()


def draw_reason(board: chess.Board) -> Optional[str]:
    """Name of the draw rule that ends the game, or None."""
    if board.is_stalemate():
        return "stalemate"
    if board.is_insufficient_material():
        return "insufficient_material"
    if board.halfmove_clock >= 100:
        return "fifty_moves"
    if board.is_repetition(3):
        return "threefold_repetition"
    return None
