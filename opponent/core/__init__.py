"""Core components: rules adapter, board wrapper, evaluator, search and move selection."""

from .board import ChessBoard
from .evaluator import Evaluator
from .rules import PythonChessRules, RulesEngine, applied_move
from .search import Searcher
from .selector import GameOverError, MoveSelector
