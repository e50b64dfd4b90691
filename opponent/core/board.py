"""Board wrapper over python-chess providing move history and game status."""

from typing import List, Optional

import chess

from opponent.core.rules import draw_reason


class ChessBoard:
    def __init__(self, fen: str = None):
        """Initialize from FEN or the standard starting position."""
        self.board = chess.Board(fen) if fen else chess.Board()
        self.move_history: List[str] = []

    def reset(self):
        """Reset to the initial position."""
        self.board.reset()
        self.move_history.clear()

    def set_fen(self, fen: str):
        """Set board state from a FEN string. Raises ValueError if invalid."""
        self.board.set_fen(fen)
        self.move_history.clear()

    def get_fen(self) -> str:
        """Return the current FEN."""
        return self.board.fen()

    def make_move(self, move_str: str) -> bool:
        """Push a UCI move (e.g. 'e2e4'). Returns True if legal."""
        try:
            move = chess.Move.from_uci(move_str)
        except ValueError:
            return False
        if move not in self.board.legal_moves:
            move = self._auto_queen(move)
            if move is None:
                return False
        self.push(move)
        return True

    def push(self, move: chess.Move):
        """Push an already validated move and record it in SAN."""
        self.move_history.append(self.board.san(move))
        self.board.push(move)

    def _auto_queen(self, move: chess.Move) -> Optional[chess.Move]:
        # 'e7e8' from a pawn means 'e7e8q'
        if move.promotion is not None:
            return None
        piece = self.board.piece_at(move.from_square)
        if piece is None or piece.piece_type != chess.PAWN:
            return None
        promo = chess.Move(move.from_square, move.to_square, promotion=chess.QUEEN)
        return promo if promo in self.board.legal_moves else None

    def undo_move(self) -> bool:
        """Pop the last move. Returns False when there is nothing to undo."""
        if not self.board.move_stack:
            return False
        self.board.pop()
        if self.move_history:
            self.move_history.pop()
        return True

    def get_legal_moves(self):
        """Return legal moves as UCI strings."""
        return [m.uci() for m in self.board.legal_moves]

    def turn_name(self) -> str:
        return "white" if self.board.turn == chess.WHITE else "black"

    def status(self) -> str:
        """checkmate, a draw rule name, check or ongoing."""
        if self.board.is_checkmate():
            return "checkmate"
        reason = draw_reason(self.board)
        if reason is not None:
            return reason
        if self.board.is_check():
            return "check"
        return "ongoing"

    def is_game_over(self) -> bool:
        """Check if the game has ended."""
        return self.status() not in ("check", "ongoing")

    def result_message(self) -> Optional[str]:
        status = self.status()
        if status == "checkmate":
            winner = "Black" if self.board.turn == chess.WHITE else "White"
            return f"{winner} wins by checkmate!"
        if status == "stalemate":
            return "Game ended in stalemate."
        if status == "threefold_repetition":
            return "Game ended by threefold repetition."
        if status == "insufficient_material":
            return "Game ended due to insufficient material."
        if status == "fifty_moves":
            return "Game ended in draw."
        return None

    def print_board(self):
        """Print ASCII representation."""
        print(self.board)
