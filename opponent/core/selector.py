"""Difficulty-aware move selection on top of :class:`Searcher`."""

import logging
import random
from typing import Any, List, Optional, Tuple

import chess

from opponent.config import CONFIG, DifficultyConfig
from opponent.core.rules import RulesEngine, applied_move
from opponent.core.search import INF, Searcher
from opponent.core.utils import describe_score

logger = logging.getLogger(__name__)


class GameOverError(ValueError):
    """Asked for a move in a position where the game has already ended."""


class MoveSelector:
    def __init__(
        self,
        searcher: Optional[Searcher] = None,
        rules: Optional[RulesEngine] = None,
        difficulty: Optional[DifficultyConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        self.searcher = searcher or Searcher(rules=rules)
        self.rules = rules or self.searcher.rules
        self.difficulty = difficulty or CONFIG.difficulty
        # Private generator so seeding it never touches the module-level one.
        self.rng = rng or random.Random()

    def depth_for(self, difficulty: int) -> int:
        return self.difficulty.depth_by_level.get(difficulty, self.difficulty.fallback_depth)

    def select_move(self, position, difficulty: Optional[int] = None) -> Any:
        """Pick the reply for ``difficulty`` (1 easiest .. 5 hardest).

        Raises GameOverError if the position has no move to play.
        """
        if difficulty is None:
            difficulty = self.difficulty.default_difficulty
        moves = self._playable_moves(position)
        depth = self.depth_for(difficulty)

        if (
            difficulty < self.difficulty.weaken_below
            and self.rng.random() < self.difficulty.random_move_probability
        ):
            move = self.rng.choice(moves)
            logger.info("difficulty %d: playing random move %s", difficulty, move)
            return move

        move, _score = self.find_best_move(position, depth, moves)
        return move

    def find_best_move(self, position, depth: int, moves: Optional[List[Any]] = None) -> Tuple[Any, Optional[int]]:
        """Best root move at ``depth`` and its score (None when not searched)."""
        if moves is None:
            moves = self._playable_moves(position)
        if len(moves) == 1:
            return moves[0], None

        moves = list(moves)
        # Shuffled so that equal scores are broken at random.
        self.rng.shuffle(moves)

        maximizing = self.rules.side_to_move(position) == chess.WHITE
        best_move = None
        best_score = -INF if maximizing else INF
        self.searcher.reset_stats()

        for move in moves:
            with applied_move(self.rules, position, move):
                score = self.searcher.minimax(position, depth - 1, -INF, INF, not maximizing)
            if maximizing:
                if score > best_score:
                    best_score, best_move = score, move
            elif score < best_score:
                best_score, best_move = score, move

        logger.debug(
            "depth %d: best %s (%s), %d nodes",
            depth, best_move, describe_score(best_score), self.searcher.nodes,
        )
        return best_move, best_score

    def _playable_moves(self, position) -> List[Any]:
        if self.searcher.is_terminal(position):
            raise GameOverError("game is already over")
        moves = self.rules.legal_moves(position)
        if not moves:
            raise GameOverError("no legal moves")
        return moves
