# opponent/config.py
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Dict, Any, Mapping, Tuple
import os
import tomllib

import chess

# Defaults (centipawns)
PIECE_VALUES = {
    chess.PAWN: 100,
    chess.KNIGHT: 320,
    chess.BISHOP: 330,
    chess.ROOK: 500,
    chess.QUEEN: 900,
    chess.KING: 20000,
}

# Row 0 is the eighth rank as White sees the board, column 0 is the a-file.
DEFAULT_PAWN_TABLE = (
    (0, 0, 0, 0, 0, 0, 0, 0),
    (50, 50, 50, 50, 50, 50, 50, 50),
    (10, 10, 20, 30, 30, 20, 10, 10),
    (5, 5, 10, 25, 25, 10, 5, 5),
    (0, 0, 0, 20, 20, 0, 0, 0),
    (5, -5, -10, 0, 0, -10, -5, 5),
    (5, 10, 10, -20, -20, 10, 10, 5),
    (0, 0, 0, 0, 0, 0, 0, 0),
)

Grid = Tuple[Tuple[int, ...], ...]


@dataclass(frozen=True)
class EvaluationWeights:
    material: int = 100
    position: int = 10
    mobility: int = 5
    king_protection: int = 3
    pawn_structure: int = 2
    center_control: int = 4

    def __post_init__(self):
        for name, value in vars(self).items():
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"weight '{name}' must be an integer, got {value!r}")
            if value < 0:
                raise ValueError(f"weight '{name}' must be non-negative, got {value}")


def _freeze_grid(name: str, grid) -> Grid:
    rows = tuple(tuple(int(v) for v in row) for row in grid)
    if len(rows) != 8 or any(len(row) != 8 for row in rows):
        raise ValueError(f"piece-square table '{name}' must be 8x8")
    return rows


@dataclass(frozen=True)
class PieceSquareTables:
    """Read-only 8x8 grids keyed by python-chess piece type."""

    tables: Mapping[chess.PieceType, Grid] = field(
        default_factory=lambda: {chess.PAWN: DEFAULT_PAWN_TABLE}
    )

    def __post_init__(self):
        frozen = {
            pt: _freeze_grid(chess.piece_name(pt), grid)
            for pt, grid in self.tables.items()
        }
        object.__setattr__(self, "tables", MappingProxyType(frozen))

    def get(self, piece_type: chess.PieceType):
        return self.tables.get(piece_type)

    @classmethod
    def from_names(cls, raw: Mapping[str, Any]) -> "PieceSquareTables":
        """Build from a ``{"pawn": [[...], ...]}`` mapping (TOML layout)."""
        tables = {}
        for name, grid in raw.items():
            try:
                piece_type = chess.PIECE_NAMES.index(name.lower())
            except ValueError:
                raise ValueError(f"unknown piece name in tables: {name!r}") from None
            tables[piece_type] = grid
        return cls(tables)


@dataclass
class DifficultyConfig:
    default_difficulty: int = 3
    depth_by_level: Dict[int, int] = field(
        default_factory=lambda: {1: 1, 2: 2, 3: 3, 4: 4, 5: 5}
    )
    fallback_depth: int = 3
    weaken_below: int = 3  # levels under this sometimes play a random move
    random_move_probability: float = 0.3

    @property
    def levels(self) -> range:
        return range(min(self.depth_by_level), max(self.depth_by_level) + 1)


@dataclass
class ServiceConfig:
    engine_name: str = "Chess Opponent"
    human_color: str = "white"


@dataclass
class Config:
    weights: EvaluationWeights = field(default_factory=EvaluationWeights)
    tables: PieceSquareTables = field(default_factory=PieceSquareTables)
    difficulty: DifficultyConfig = field(default_factory=DifficultyConfig)
    service: ServiceConfig = field(default_factory=ServiceConfig)
    log_level: str = "INFO"

    @staticmethod
    def load_from_toml(path: str = "config.toml") -> "Config":
        cfg = Config()
        if not os.path.exists(path):
            return cfg
        with open(path, "rb") as f:
            raw = tomllib.load(f)
        return Config.from_dict(raw)

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "Config":
        cfg = Config()
        if "weights" in raw:
            known = {k: v for k, v in raw["weights"].items() if hasattr(cfg.weights, k)}
            cfg.weights = replace(cfg.weights, **known)
        if "tables" in raw:
            cfg.tables = PieceSquareTables.from_names(raw["tables"])
        if "difficulty" in raw:
            for k, v in raw["difficulty"].items():
                if k == "depth_by_level":
                    v = {int(level): int(depth) for level, depth in v.items()}
                if hasattr(cfg.difficulty, k):
                    setattr(cfg.difficulty, k, v)
        if "service" in raw:
            for k, v in raw["service"].items():
                if hasattr(cfg.service, k):
                    setattr(cfg.service, k, v)
        if "log_level" in raw:
            cfg.log_level = str(raw["log_level"]).upper()
        return cfg


# single globally importable config instance
CONFIG = Config.load_from_toml(os.environ.get("OPPONENT_CONFIG_TOML", "config.toml"))
# allow env override of the starting difficulty for quick debugging
override_difficulty = os.environ.get("OPPONENT_DIFFICULTY")
if override_difficulty and override_difficulty.isdigit():
    CONFIG.difficulty.default_difficulty = int(override_difficulty)
