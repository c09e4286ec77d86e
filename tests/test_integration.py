"""
Integration test suite for the chessbot engine.

Tests components working together end-to-end:
- Search + Evaluator + python-chess adapter on real positions
- Background search lifecycle (start/stop/callback)
- UCI protocol integration
- FastAPI REST API integration
"""

import threading
import time

import chess
import pytest

from chessbot.core.board import ChessPosition
from chessbot.core.budget import SearchBudget
from chessbot.core.evaluator import Evaluator
from chessbot.core.search import BUDGET_EXHAUSTED, NO_SUCCESSORS, SearchEngine
from chessbot.main import Engine

FOOLS_MATE = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 0 1"


# ════════════════════════════════════════════════════════════════════════════
#  SEARCH PIPELINE
# ════════════════════════════════════════════════════════════════════════════


class TestSearchPipeline:
    def test_white_takes_hanging_queen(self):
        engine = Engine(depth=2)
        board = chess.Board("4k3/8/8/3q4/8/8/8/3RK3 w - - 0 1")
        move, result = engine.find_best_move(board)
        assert move == chess.Move.from_uci("d1d5")
        assert result.maximizing is True

    def test_black_takes_hanging_queen(self):
        engine = Engine(depth=2)
        board = chess.Board("3rk3/8/8/8/3Q4/8/8/4K3 b - - 0 1")
        move, result = engine.find_best_move(board)
        assert move == chess.Move.from_uci("d8d4")
        assert result.maximizing is False

    def test_full_depth_endgame_returns_legal_move(self):
        engine = Engine()
        board = chess.Board("4k3/8/8/8/8/8/4P3/4K3 w - - 0 1")
        move, result = engine.find_best_move(board)
        assert result.depth == 4
        assert move in board.legal_moves

    def test_select_move_returns_successor_position(self):
        board = chess.Board("4k3/8/8/3q4/8/8/8/3RK3 w - - 0 1")
        choice = SearchEngine(Evaluator(), depth=2).select_move(ChessPosition(board))
        assert isinstance(choice, ChessPosition)
        expected = board.copy()
        expected.push(chess.Move.from_uci("d1d5"))
        assert choice.board.board_fen() == expected.board_fen()

    def test_checkmated_root_has_no_move(self):
        move, result = Engine(depth=2).find_best_move(chess.Board(FOOLS_MATE))
        assert move is None
        assert result.choice.reason == NO_SUCCESSORS

    def test_node_budget_limits_search(self):
        budget = SearchBudget(node_limit=50)
        board = chess.Board()
        move, result = Engine(depth=4).find_best_move(board, budget=budget)
        assert move in board.legal_moves
        assert budget.nodes <= 50 + 1

    def test_spent_budget_gives_no_move(self):
        budget = SearchBudget()
        budget.stop()
        move, result = Engine(depth=2).find_best_move(chess.Board(), budget=budget)
        assert move is None
        assert result.choice.reason == BUDGET_EXHAUSTED

    def test_search_does_not_mutate_board(self):
        board = chess.Board("r1bqkbnr/pppp1ppp/2n5/4p3/4P3/5N2/PPPP1PPP/RNBQKB1R w KQkq - 2 3")
        fen = board.fen()
        Engine(depth=2).find_best_move(board)
        assert board.fen() == fen

    def test_engine_vs_engine_plays_legal_moves(self):
        engine = Engine(depth=1)
        board = chess.Board()
        for _ in range(12):
            if board.is_game_over():
                break
            move, _ = engine.find_best_move(board)
            assert move in board.legal_moves
            board.push(move)
        assert len(board.move_stack) > 0

    def test_get_best_move_on_own_board(self):
        engine = Engine(depth=2)
        assert engine.make_move("e2e4")
        move, value = engine.get_best_move()
        assert chess.Move.from_uci(move) in engine.board.board.legal_moves
        assert isinstance(value, float)

    def test_explicit_zero_depth_rejected(self):
        with pytest.raises(ValueError):
            Engine(depth=0)


# ════════════════════════════════════════════════════════════════════════════
#  INTERACTIVE CLI
# ════════════════════════════════════════════════════════════════════════════


class TestCLI:
    def _run(self, monkeypatch, inputs):
        from chessbot.config import CONFIG
        from interface import cli

        monkeypatch.setattr(CONFIG.search, "depth", 1)
        feed = iter(inputs)
        monkeypatch.setattr("builtins.input", lambda prompt="": next(feed))
        cli.main()

    def test_moves_lists_legal_moves(self, monkeypatch, capsys):
        self._run(monkeypatch, ["moves", "quit"])
        out = capsys.readouterr().out
        assert "Legal moves:" in out
        assert "e2e4" in out

    def test_move_engine_reply_then_undo(self, monkeypatch, capsys):
        boards = []
        from chessbot import main as engine_main

        original_init = engine_main.Engine.__init__

        def tracking_init(self, *args, **kwargs):
            original_init(self, *args, **kwargs)
            boards.append(self.board)

        monkeypatch.setattr(engine_main.Engine, "__init__", tracking_init)
        self._run(monkeypatch, ["e2e4", "undo", "quit"])
        out = capsys.readouterr().out
        assert "Engine plays:" in out
        assert boards[0].get_fen() == chess.STARTING_FEN
        assert boards[0].move_history == []

    def test_illegal_move_reported(self, monkeypatch, capsys):
        self._run(monkeypatch, ["e2e5", "quit"])
        assert "Illegal move" in capsys.readouterr().out


# ════════════════════════════════════════════════════════════════════════════
#  BACKGROUND SEARCH
# ════════════════════════════════════════════════════════════════════════════


class TestAsyncSearch:
    def test_callback_receives_result(self):
        engine = Engine(depth=2)
        board = chess.Board("4k3/8/8/3q4/8/8/8/3RK3 w - - 0 1")
        done = threading.Event()
        results = []

        def callback(move, result):
            results.append((move, result))
            done.set()

        engine.start_search(board, callback=callback)
        assert done.wait(timeout=10)
        assert results[0][0] == chess.Move.from_uci("d1d5")

    def test_stop_halts_deep_search(self):
        engine = Engine(depth=8)
        board = chess.Board()
        done = threading.Event()
        results = []

        def callback(move, result):
            results.append(move)
            done.set()

        engine.start_search(board, callback=callback)
        time.sleep(0.1)
        engine.stop()
        assert done.wait(timeout=2.0), "search didn't stop within timeout"
        assert results[0] in board.legal_moves

    def test_time_limit_halts_deep_search(self):
        engine = Engine(depth=8)
        done = threading.Event()
        engine.start_search(chess.Board(), time_limit_ms=100, callback=lambda m, r: done.set())
        assert done.wait(timeout=2.0)

    def test_stop_before_start_is_safe(self):
        Engine(depth=2).stop()

    def test_restart_stops_running_search(self):
        engine = Engine(depth=8)
        results = []
        engine.start_search(chess.Board(), callback=lambda m, r: results.append(("deep", r.depth)))
        time.sleep(0.1)
        engine.start_search(chess.Board(), depth=1, callback=lambda m, r: results.append(("quick", r.depth)))
        engine.wait(timeout=10)
        assert results == [("deep", 8), ("quick", 1)]

    def test_concurrent_engines_agree(self):
        board = chess.Board("3rk3/8/8/8/3Q4/8/8/4K3 b - - 0 1")
        engine = Engine(depth=2)
        moves = []
        lock = threading.Lock()

        def worker():
            move, _ = engine.find_best_move(board)
            with lock:
                moves.append(move)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)
        assert moves == [chess.Move.from_uci("d8d4")] * 4


# ════════════════════════════════════════════════════════════════════════════
#  UCI PROTOCOL INTEGRATION
# ════════════════════════════════════════════════════════════════════════════


class TestUCIIntegration:
    def _make_uci(self):
        from interface.uci import UCI

        return UCI()

    def test_uci_handshake(self, capsys):
        uci = self._make_uci()
        assert uci.handle("uci") is True
        out = capsys.readouterr().out
        assert "id name" in out
        assert out.strip().endswith("uciok")

    def test_isready(self, capsys):
        self._make_uci().handle("isready")
        assert "readyok" in capsys.readouterr().out

    def test_quit(self):
        assert self._make_uci().handle("quit") is False

    def test_position_startpos(self):
        uci = self._make_uci()
        uci._parse_position(["startpos"])
        assert uci.board.fen() == chess.STARTING_FEN

    def test_position_startpos_moves(self):
        uci = self._make_uci()
        uci._parse_position(["startpos", "moves", "e2e4", "e7e5"])
        expected = chess.Board()
        expected.push_uci("e2e4")
        expected.push_uci("e7e5")
        assert uci.board.fen() == expected.fen()

    def test_position_fen_moves(self):
        uci = self._make_uci()
        fen = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"
        uci._parse_position(["fen"] + fen.split() + ["moves", "e7e5"])
        expected = chess.Board(fen)
        expected.push_uci("e7e5")
        assert uci.board.fen() == expected.fen()

    def test_position_invalid_fen_keeps_board(self):
        uci = self._make_uci()
        old_fen = uci.board.fen()
        uci._parse_position(["fen", "invalid", "fen", "string"])
        assert uci.board.fen() == old_fen

    def test_position_illegal_move_keeps_board(self):
        uci = self._make_uci()
        old_fen = uci.board.fen()
        uci._parse_position(["startpos", "moves", "e2e5"])
        assert uci.board.fen() == old_fen

    def test_position_empty(self):
        uci = self._make_uci()
        uci._parse_position([])
        assert uci.board.fen() == chess.STARTING_FEN

    def test_position_moves_without_setup_keeps_board(self):
        uci = self._make_uci()
        uci._parse_position(["startpos", "moves", "e2e4"])
        old_fen = uci.board.fen()
        assert uci.handle("position moves e7e5") is True
        assert uci.board.fen() == old_fen

    def test_blank_command_is_ignored(self):
        assert self._make_uci().handle("   ") is True

    def test_go_depth_zero_uses_default(self):
        uci = self._make_uci()
        calls = []

        def mock_start_search(board, depth=None, time_limit_ms=None, node_limit=None, callback=None):
            calls.append(depth)

        uci.engine.start_search = mock_start_search
        uci._parse_go(["depth", "0"])
        assert calls == [uci.depth]

    def test_go_parsing(self):
        uci = self._make_uci()
        calls = []

        def mock_start_search(board, depth=None, time_limit_ms=None, node_limit=None, callback=None):
            calls.append((depth, time_limit_ms, node_limit))

        uci.engine.start_search = mock_start_search
        uci._parse_go(["depth", "3"])
        uci._parse_go(["movetime", "1000"])
        uci._parse_go(["nodes", "500"])
        uci._parse_go(["infinite"])
        uci._parse_go(["wtime", "60000", "btime", "60000"])
        assert calls == [
            (3, None, None),
            (uci.depth, 1000, None),
            (uci.depth, None, 500),
            (uci.depth, None, None),
            (uci.depth, None, None),
        ]

    def test_setoption_depth(self):
        uci = self._make_uci()
        uci._parse_setoption(["name", "Depth", "value", "2"])
        assert uci.depth == 2
        uci._parse_setoption(["name", "Hash", "value", "128"])
        uci._parse_setoption([])
        uci._parse_setoption(["name"])
        uci._parse_setoption(["name", "Depth", "value", "0"])
        assert uci.depth == 2

    def test_setoption_depth_above_advertised_max(self, capsys):
        from interface.uci import MAX_DEPTH

        uci = self._make_uci()
        uci.handle("uci")
        assert f"max {MAX_DEPTH}" in capsys.readouterr().out
        uci._parse_setoption(["name", "Depth", "value", str(MAX_DEPTH)])
        assert uci.depth == MAX_DEPTH
        uci._parse_setoption(["name", "Depth", "value", "20"])
        assert uci.depth == MAX_DEPTH

    def test_second_go_stops_first_and_both_report(self, capsys):
        uci = self._make_uci()
        uci.handle("position startpos")
        uci.handle("go depth 8")
        time.sleep(0.1)
        uci.handle("go depth 1")
        uci.engine.wait(timeout=10)
        out = capsys.readouterr().out
        assert out.count("bestmove ") == 2

    def test_go_prints_bestmove(self, capsys):
        uci = self._make_uci()
        uci.handle("position fen 4k3/8/8/3q4/8/8/8/3RK3 w - - 0 1")
        uci.handle("go depth 2")
        uci.engine.wait(timeout=10)
        out = capsys.readouterr().out
        assert "info depth 2" in out
        assert "bestmove d1d5" in out

    def test_go_on_mated_position(self, capsys):
        uci = self._make_uci()
        uci._parse_position(["fen"] + FOOLS_MATE.split())
        uci._parse_go(["depth", "1"])
        uci.engine.wait(timeout=10)
        assert "bestmove 0000" in capsys.readouterr().out


# ════════════════════════════════════════════════════════════════════════════
#  REST API INTEGRATION
# ════════════════════════════════════════════════════════════════════════════


class TestAPIIntegration:
    @pytest.fixture(autouse=True)
    def setup_client(self):
        from fastapi.testclient import TestClient
        from interface.api import app, engine

        self.client = TestClient(app)
        engine.board.reset()

    def test_get_board_initial(self):
        data = self.client.get("/board").json()
        assert data["fen"] == chess.STARTING_FEN
        assert data["turn"] == "white"
        assert data["is_game_over"] is False
        assert len(data["legal_moves"]) == 20

    def test_post_move_valid(self):
        response = self.client.post("/move", json={"move": "e2e4"})
        assert response.status_code == 200
        assert response.json()["move"] == "e2e4"
        assert self.client.get("/board").json()["turn"] == "black"

    def test_post_move_illegal(self):
        assert self.client.post("/move", json={"move": "e2e5"}).status_code == 400

    def test_post_move_invalid_format(self):
        assert self.client.post("/move", json={"move": "zzzz"}).status_code == 400

    def test_set_position(self):
        fen = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"
        response = self.client.post("/position", json={"fen": fen})
        assert response.status_code == 200
        assert response.json()["fen"] == fen

    def test_set_position_invalid(self):
        assert self.client.post("/position", json={"fen": "invalid"}).status_code == 400

    def test_search_returns_move(self):
        self.client.post("/position", json={"fen": "4k3/8/8/3q4/8/8/8/3RK3 w - - 0 1"})
        response = self.client.post("/search", json={"depth": 2})
        assert response.status_code == 200
        data = response.json()
        assert data["best_move"] == "d1d5"
        assert data["depth"] == 2
        assert data["score"] > 0

    def test_search_rejects_bad_depth(self):
        assert self.client.post("/search", json={"depth": 0}).status_code == 422

    def test_search_game_over_returns_400(self):
        fen = "rnb1kbnr/pppp1ppp/4p3/8/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"
        self.client.post("/position", json={"fen": fen})
        assert self.client.post("/search", json={"depth": 2}).status_code == 400

    def test_evaluate_current_and_fen(self):
        assert self.client.post("/evaluate").json()["score"] == pytest.approx(
            Evaluator().evaluate(ChessPosition(chess.Board()))
        )
        data = self.client.post("/evaluate", json={"fen": "4k3/8/8/8/4P3/8/8/4K3 w - - 0 1"}).json()
        assert data["score"] == 10.5

    def test_evaluate_invalid_fen(self):
        assert self.client.post("/evaluate", json={"fen": "nope"}).status_code == 400

    def test_reset_board(self):
        self.client.post("/move", json={"move": "e2e4"})
        response = self.client.post("/reset")
        assert response.json()["fen"] == chess.STARTING_FEN
