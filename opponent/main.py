import logging
import random
from typing import Optional

import chess

from opponent.config import CONFIG, Config
from opponent.core.board import ChessBoard
from opponent.core.evaluator import Evaluator
from opponent.core.rules import PythonChessRules
from opponent.core.search import Searcher
from opponent.core.selector import MoveSelector

logger = logging.getLogger(__name__)


class Engine:
    """One game between a human and the computer opponent."""

    def __init__(
        self,
        difficulty: Optional[int] = None,
        human_color: chess.Color = chess.WHITE,
        fen: Optional[str] = None,
        config: Config = CONFIG,
        rng: Optional[random.Random] = None,
    ):
        self.config = config
        self.board = ChessBoard(fen)
        self.human_color = human_color
        self.difficulty = config.difficulty.default_difficulty
        if difficulty is not None:
            self.set_difficulty(difficulty)

        rules = PythonChessRules()
        evaluator = Evaluator(rules, config.weights, config.tables)
        self.selector = MoveSelector(
            Searcher(evaluator, rules), rules, config.difficulty, rng
        )

    def set_difficulty(self, difficulty: int):
        if difficulty not in self.config.difficulty.levels:
            levels = self.config.difficulty.levels
            raise ValueError(f"difficulty must be between {levels.start} and {levels.stop - 1}")
        self.difficulty = difficulty

    def is_engine_turn(self) -> bool:
        return self.board.board.turn != self.human_color and not self.board.is_game_over()

    def make_move(self, move_uci: str) -> bool:
        return self.board.make_move(move_uci)

    def get_best_move(self) -> Optional[str]:
        """Play the engine's reply on the board. Returns its UCI or None if the game is over."""
        if self.board.is_game_over():
            return None
        move = self.selector.select_move(self.board.board, self.difficulty)
        self.board.push(move)
        logger.debug("engine played %s at difficulty %d", move.uci(), self.difficulty)
        return move.uci()

    def undo(self) -> int:
        """Take back the last move pair so the human is to move again.

        Returns how many moves were taken back.
        """
        undone = 0
        for _ in range(2):
            if not self.board.undo_move():
                break
            undone += 1
            if self.board.board.turn == self.human_color:
                break
        return undone

    def reset(self, fen: Optional[str] = None):
        if fen:
            self.board.set_fen(fen)
        else:
            self.board.reset()

    def print_board(self):
        self.board.print_board()
