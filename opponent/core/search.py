from typing import Optional

from opponent.core.evaluator import Evaluator, mate_score
from opponent.core.rules import RulesEngine, PythonChessRules, applied_move

# Larger than any evaluation, including the checkmate sentinel.
INF = 10**9


class Searcher:
    """Fixed-depth minimax over a shared, mutable position.

    The position is changed in place and restored before every return:
    each child is explored inside ``applied_move`` so an early cutoff or an
    exception still undoes the move.
    """

    def __init__(
        self,
        evaluator: Optional[Evaluator] = None,
        rules: Optional[RulesEngine] = None,
        pruning: bool = True,
    ):
        self.rules = rules or PythonChessRules()
        self.evaluator = evaluator or Evaluator(self.rules)
        self.pruning = pruning
        self.nodes = 0

    def reset_stats(self):
        self.nodes = 0

    def is_terminal(self, position) -> bool:
        return self.rules.is_checkmate(position) or self.rules.is_draw(position)

    def minimax(self, position, depth: int, alpha: int, beta: int, maximizing: bool) -> int:
        self.nodes += 1
        if depth <= 0:
            return self.evaluator.evaluate(position)
        # Terminal nodes are scored here so the checks are not repeated in evaluate.
        if self.rules.is_checkmate(position):
            return mate_score(self.rules.side_to_move(position), depth)
        if self.rules.is_draw(position):
            return 0

        moves = self.rules.legal_moves(position)
        if not moves:
            return self.evaluator.evaluate(position)

        if maximizing:
            best = -INF
            for move in moves:
                with applied_move(self.rules, position, move):
                    value = self.minimax(position, depth - 1, alpha, beta, False)
                best = max(best, value)
                alpha = max(alpha, value)
                if self.pruning and beta <= alpha:
                    break  # beta cutoff
            return best

        best = INF
        for move in moves:
            with applied_move(self.rules, position, move):
                value = self.minimax(position, depth - 1, alpha, beta, True)
            best = min(best, value)
            beta = min(beta, value)
            if self.pruning and beta <= alpha:
                break  # alpha cutoff
        return best
