"""Static evaluator: material, pawn advancement, tables, mobility and structure."""

from typing import Optional

import chess

from opponent.config import CONFIG, PIECE_VALUES, EvaluationWeights, PieceSquareTables
from opponent.core.rules import RulesEngine, PythonChessRules, applied_move

CHECKMATE_SCORE = 10_000_000

PAWN_ADVANCE_BONUS = 10
CENTER_BONUS = 10
KING_SHIELD_BONUS = 5
PAWN_STRUCTURE_PENALTY = 10

CENTER_SQUARES = (chess.D4, chess.D5, chess.E4, chess.E5)


def mate_score(mated: chess.Color, depth: int = 0) -> int:
    """Score for ``mated`` being checkmated with ``depth`` plies of search left.

    Mates found with more depth left are nearer the root, so they score further
    from zero than slower mates.
    """
    score = CHECKMATE_SCORE + max(depth, 0)
    return -score if mated == chess.WHITE else score


class Evaluator:
    def __init__(
        self,
        rules: Optional[RulesEngine] = None,
        weights: Optional[EvaluationWeights] = None,
        tables: Optional[PieceSquareTables] = None,
    ):
        self.rules = rules or PythonChessRules()
        self.weights = weights or CONFIG.weights
        self.tables = tables or CONFIG.tables

    def evaluate(self, position) -> int:
        """Return static eval in centipawns, positive favors White."""
        rules = self.rules
        if rules.is_checkmate(position):
            # The side to move is the one that got mated.
            return mate_score(rules.side_to_move(position))
        if rules.is_draw(position):
            return 0

        w = self.weights
        score = 0

        # Gather pieces once, the later terms only look at these.
        pawns = {chess.WHITE: [], chess.BLACK: []}
        kings = {}
        for sq in chess.SQUARES:
            piece = rules.piece_at(position, sq)
            if piece is None:
                continue
            sign = 1 if piece.color == chess.WHITE else -1
            pt = piece.piece_type
            rank = chess.square_rank(sq)

            value = PIECE_VALUES[pt] * w.material // 100
            if pt == chess.PAWN:
                advanced = rank if piece.color == chess.WHITE else 7 - rank
                value += advanced * PAWN_ADVANCE_BONUS
                pawns[piece.color].append(sq)
            elif pt == chess.KING:
                kings[piece.color] = sq

            if w.position:
                table = self.tables.get(pt)
                if table is not None:
                    # Tables are drawn from White's side; Black reads them flipped.
                    row = 7 - rank if piece.color == chess.WHITE else rank
                    value += table[row][chess.square_file(sq)] * w.position // 10

            score += sign * value

        if w.mobility:
            score += self._mobility(position) * w.mobility

        if w.center_control:
            for sq in CENTER_SQUARES:
                piece = rules.piece_at(position, sq)
                if piece is not None:
                    bonus = CENTER_BONUS * w.center_control
                    score += bonus if piece.color == chess.WHITE else -bonus

        if w.king_protection:
            shield = self._king_shield(pawns, kings, chess.WHITE) - self._king_shield(pawns, kings, chess.BLACK)
            score += shield * KING_SHIELD_BONUS * w.king_protection

        if w.pawn_structure:
            weak = self._weak_pawns(pawns[chess.WHITE]) - self._weak_pawns(pawns[chess.BLACK])
            score -= weak * PAWN_STRUCTURE_PENALTY * w.pawn_structure

        return score

    def _mobility(self, position) -> int:
        """Legal move differential, White minus Black. Zero when no neutral move exists."""
        rules = self.rules
        neutral = rules.neutral_move(position)
        if neutral is None:
            return 0
        own = len(rules.legal_moves(position))
        with applied_move(rules, position, neutral):
            other = len(rules.legal_moves(position))
        if rules.side_to_move(position) == chess.WHITE:
            return own - other
        return other - own

    @staticmethod
    def _king_shield(pawns, kings, color: chess.Color) -> int:
        king_sq = kings.get(color)
        if king_sq is None:
            return 0
        rank = chess.square_rank(king_sq) + (1 if color == chess.WHITE else -1)
        if not 0 <= rank <= 7:
            return 0
        file = chess.square_file(king_sq)
        shield = {
            chess.square(f, rank)
            for f in range(max(0, file - 1), min(7, file + 1) + 1)
        }
        return sum(1 for sq in pawns[color] if sq in shield)

    @staticmethod
    def _weak_pawns(pawns) -> int:
        """Doubled pawns beyond the first on a file, plus isolated pawns."""
        per_file = [0] * 8
        for sq in pawns:
            per_file[chess.square_file(sq)] += 1

        weak = 0
        for file, count in enumerate(per_file):
            if count == 0:
                continue
            weak += count - 1
            left = per_file[file - 1] if file > 0 else 0
            right = per_file[file + 1] if file < 7 else 0
            if left == 0 and right == 0:
                weak += count
        return weak
