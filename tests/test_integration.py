"""
Integration test suite for the chess opponent.

Tests components working together end-to-end:
- Full games (engine vs engine at low difficulty)
- Game session: human moves, engine replies, take-backs, difficulty changes
- Terminal interface command handling
- FastAPI REST API
"""

import random

import chess
import pytest

from opponent.config import Config, EvaluationWeights
from opponent.core.selector import GameOverError
from opponent.main import Engine

BACK_RANK = "6k1/5ppp/8/8/8/8/8/R3K3 w - - 0 1"
HANGING_QUEEN = "4k3/8/8/8/q7/8/8/R3K3 w - - 0 1"
FOOLS_MATE = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 0 1"


# ════════════════════════════════════════════════════════════════════════════
#  ENGINE VS ENGINE: FULL GAME SIMULATIONS
# ════════════════════════════════════════════════════════════════════════════


class TestFullGame:
    """Tests that the engine can keep playing without crashing."""

    def test_engine_vs_engine_low_difficulty(self):
        engine = Engine(difficulty=1, rng=random.Random(3))
        plies = 0
        while not engine.board.is_game_over() and plies < 40:
            fen_before = engine.board.get_fen()
            move = engine.get_best_move()
            assert move is not None
            assert chess.Move.from_uci(move) in chess.Board(fen_before).legal_moves
            plies += 1
        assert len(engine.board.move_history) == plies
        assert plies > 10

    def test_engine_alternating_colors(self):
        engine = Engine(difficulty=2, rng=random.Random(8))
        for i in range(6):
            expected_turn = chess.WHITE if i % 2 == 0 else chess.BLACK
            assert engine.board.board.turn == expected_turn
            engine.get_best_move()

    def test_engine_plays_endgame_kqk(self):
        engine = Engine(difficulty=3, fen="8/8/8/8/8/4K3/7Q/k7 w - - 0 1", rng=random.Random(1))
        for _ in range(6):
            if engine.board.is_game_over():
                break
            engine.get_best_move()
        # the queen is never thrown away
        assert engine.board.is_game_over() or engine.board.board.pieces(chess.QUEEN, chess.WHITE)


# ════════════════════════════════════════════════════════════════════════════
#  GAME SESSION
# ════════════════════════════════════════════════════════════════════════════


class TestGameSession:
    def setup_method(self):
        self.engine = Engine(difficulty=2, rng=random.Random(0))

    def test_default_difficulty_from_config(self):
        assert Engine().difficulty == Config().difficulty.default_difficulty

    def test_human_move_then_reply(self):
        assert self.engine.make_move("e2e4")
        assert self.engine.is_engine_turn()
        reply = self.engine.get_best_move()
        assert reply is not None
        assert self.engine.board.board.turn == chess.WHITE
        assert len(self.engine.board.move_history) == 2

    def test_illegal_human_move(self):
        assert not self.engine.make_move("e2e5")
        assert self.engine.board.get_fen() == chess.STARTING_FEN

    def test_undo_takes_back_pair(self):
        self.engine.make_move("e2e4")
        self.engine.get_best_move()
        assert self.engine.undo() == 2
        assert self.engine.board.get_fen() == chess.STARTING_FEN
        assert self.engine.board.move_history == []

    def test_undo_single_when_no_reply_yet(self):
        self.engine.make_move("e2e4")
        assert self.engine.undo() == 1
        assert self.engine.board.get_fen() == chess.STARTING_FEN

    def test_undo_on_fresh_board(self):
        assert self.engine.undo() == 0

    def test_human_playing_black(self):
        engine = Engine(difficulty=1, human_color=chess.BLACK, rng=random.Random(4))
        assert engine.is_engine_turn()
        engine.get_best_move()
        assert not engine.is_engine_turn()
        engine.make_move(engine.board.get_legal_moves()[0])
        engine.get_best_move()
        assert engine.undo() == 2
        assert len(engine.board.move_history) == 1

    @pytest.mark.parametrize("level", [0, 6, -3])
    def test_invalid_difficulty(self, level):
        with pytest.raises(ValueError):
            self.engine.set_difficulty(level)
        with pytest.raises(ValueError):
            Engine(difficulty=level)

    def test_set_difficulty(self):
        self.engine.set_difficulty(5)
        assert self.engine.difficulty == 5

    def test_reply_captures_queen(self):
        engine = Engine(difficulty=3, fen=HANGING_QUEEN, rng=random.Random(2))
        assert engine.get_best_move() == "a1a4"
        assert engine.board.move_history == ["Rxa4"]

    def test_reply_delivers_mate(self):
        engine = Engine(difficulty=3, fen=BACK_RANK, human_color=chess.BLACK, rng=random.Random(2))
        assert engine.get_best_move() == "a1a8"
        assert engine.board.status() == "checkmate"
        assert engine.board.result_message() == "White wins by checkmate!"

    def test_game_over_returns_none(self):
        engine = Engine(fen=FOOLS_MATE)
        assert engine.get_best_move() is None
        with pytest.raises(GameOverError):
            engine.selector.select_move(engine.board.board, 3)

    def test_reset(self):
        self.engine.make_move("d2d4")
        self.engine.reset()
        assert self.engine.board.get_fen() == chess.STARTING_FEN
        self.engine.reset(BACK_RANK)
        assert self.engine.board.get_fen() == BACK_RANK

    def test_custom_config(self):
        weights = EvaluationWeights(material=100, position=0, mobility=0,
                                    king_protection=0, pawn_structure=0, center_control=0)
        engine = Engine(difficulty=3, fen=HANGING_QUEEN, config=Config(weights=weights),
                        rng=random.Random(6))
        assert engine.selector.searcher.evaluator.weights is weights
        assert engine.get_best_move() == "a1a4"

    def test_search_leaves_board_intact(self):
        self.engine.make_move("e2e4")
        board = self.engine.board.board
        before = (board.fen(), list(board.move_stack))
        self.engine.selector.find_best_move(board, 2)
        assert (board.fen(), list(board.move_stack)) == before


# ════════════════════════════════════════════════════════════════════════════
#  TERMINAL INTERFACE
# ════════════════════════════════════════════════════════════════════════════


class TestCLI:
    def setup_method(self):
        from interface.cli import handle_command

        self.handle = handle_command
        self.engine = Engine(difficulty=1, rng=random.Random(0))

    def test_quit(self):
        assert self.handle(self.engine, "quit") is False

    def test_move(self):
        assert self.handle(self.engine, "e2e4") is True
        assert self.engine.board.move_history == ["e4"]

    def test_illegal_move(self, capsys):
        self.handle(self.engine, "e2e5")
        assert "Illegal move" in capsys.readouterr().out

    def test_level(self):
        self.handle(self.engine, "level 4")
        assert self.engine.difficulty == 4

    def test_bad_level(self, capsys):
        self.handle(self.engine, "level 9")
        assert self.engine.difficulty == 1
        assert "difficulty must be between 1 and 5" in capsys.readouterr().out

    def test_undo_and_reset(self):
        self.handle(self.engine, "e2e4")
        self.handle(self.engine, "undo")
        assert self.engine.board.get_fen() == chess.STARTING_FEN
        self.handle(self.engine, "d2d4")
        self.handle(self.engine, "reset")
        assert self.engine.board.get_fen() == chess.STARTING_FEN

    def test_blank_line(self):
        assert self.handle(self.engine, "   ") is True

    def test_main_quits(self, monkeypatch, capsys):
        from interface.cli import main

        monkeypatch.setattr("builtins.input", lambda prompt="": "quit")
        main(["--difficulty", "1", "--color", "black"])
        out = capsys.readouterr().out
        assert "Engine plays:" in out

    def test_main_reports_result(self, monkeypatch, capsys):
        from interface.cli import main

        inputs = iter(["a1a8"])
        monkeypatch.setattr("builtins.input", lambda prompt="": next(inputs))
        main(["--fen", BACK_RANK])
        out = capsys.readouterr().out
        assert "Game Over" in out
        assert "White wins by checkmate!" in out


# ════════════════════════════════════════════════════════════════════════════
#  REST API
# ════════════════════════════════════════════════════════════════════════════


class TestAPIIntegration:
    """Tests FastAPI REST API endpoints."""

    @pytest.fixture(autouse=True)
    def setup_client(self):
        from fastapi.testclient import TestClient
        from interface.api import app, engine

        self.client = TestClient(app)
        self.engine = engine
        # Reset state before each test
        engine.reset()
        engine.set_difficulty(2)
        engine.selector.rng = random.Random(0)

    def test_get_board_initial(self):
        response = self.client.get("/board")
        assert response.status_code == 200
        data = response.json()
        assert data["fen"] == chess.STARTING_FEN
        assert data["turn"] == "white"
        assert data["status"] == "ongoing"
        assert data["is_game_over"] is False
        assert data["result"] is None
        assert data["history"] == []
        assert data["difficulty"] == 2
        assert len(data["legal_moves"]) == 20

    def test_post_move_gets_reply(self):
        response = self.client.post("/move", json={"move": "e2e4"})
        assert response.status_code == 200
        data = response.json()
        assert data["move"] == "e2e4"
        assert data["ai_move"] is not None
        assert data["turn"] == "white"
        assert len(data["history"]) == 2
        assert data["history"][0] == "e4"

    def test_post_move_without_reply(self):
        response = self.client.post("/move", json={"move": "e2e4", "reply": False})
        data = response.json()
        assert data["ai_move"] is None
        assert data["turn"] == "black"

    def test_post_move_illegal(self):
        response = self.client.post("/move", json={"move": "e2e5"})
        assert response.status_code == 400

    def test_post_move_invalid_format(self):
        response = self.client.post("/move", json={"move": "zzzz"})
        assert response.status_code == 400

    def test_set_position_valid(self):
        fen = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"
        response = self.client.post("/position", json={"fen": fen})
        assert response.status_code == 200
        assert response.json()["fen"] == fen

    def test_set_position_invalid(self):
        response = self.client.post("/position", json={"fen": "invalid"})
        assert response.status_code == 400

    def test_ai_move(self):
        response = self.client.post("/ai-move", json={})
        assert response.status_code == 200
        data = response.json()
        move = chess.Move.from_uci(data["ai_move"])
        assert move in chess.Board().legal_moves
        assert data["turn"] == "black"

    def test_ai_move_with_difficulty(self):
        self.client.post("/position", json={"fen": HANGING_QUEEN})
        response = self.client.post("/ai-move", json={"difficulty": 3})
        assert response.status_code == 200
        assert response.json()["ai_move"] == "a1a4"
        assert response.json()["difficulty"] == 3

    def test_ai_move_bad_difficulty(self):
        response = self.client.post("/ai-move", json={"difficulty": 9})
        assert response.status_code == 422

    def test_ai_move_game_over_returns_400(self):
        self.client.post("/position", json={"fen": FOOLS_MATE})
        response = self.client.post("/ai-move", json={})
        assert response.status_code == 400

    def test_move_game_over_returns_400(self):
        self.client.post("/position", json={"fen": FOOLS_MATE})
        response = self.client.post("/move", json={"move": "e2e4"})
        assert response.status_code == 400

    def test_mating_move_ends_game(self):
        self.client.post("/position", json={"fen": BACK_RANK})
        response = self.client.post("/move", json={"move": "a1a8"})
        data = response.json()
        assert data["ai_move"] is None
        assert data["status"] == "checkmate"
        assert data["result"] == "White wins by checkmate!"

    def test_undo(self):
        self.client.post("/move", json={"move": "e2e4"})
        response = self.client.post("/undo")
        data = response.json()
        assert data["undone"] == 2
        assert data["fen"] == chess.STARTING_FEN

    def test_set_difficulty(self):
        response = self.client.post("/difficulty", json={"difficulty": 4})
        assert response.status_code == 200
        assert response.json() == {"difficulty": 4}
        assert self.client.get("/board").json()["difficulty"] == 4

    @pytest.mark.parametrize("level", [0, 6])
    def test_set_difficulty_out_of_range(self, level):
        response = self.client.post("/difficulty", json={"difficulty": level})
        assert response.status_code == 422

    def test_reset_board(self):
        self.client.post("/move", json={"move": "e2e4"})
        response = self.client.post("/reset")
        assert response.status_code == 200
        assert response.json()["fen"] == chess.STARTING_FEN
        assert response.json()["history"] == []
