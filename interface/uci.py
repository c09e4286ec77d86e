import logging
import sys

import chess

from chessbot.config import CONFIG, configure_logging
from chessbot.core.utils import print_info
from chessbot.main import Engine

logger = logging.getLogger(__name__)

MAX_DEPTH = 8


class UCI:
    def __init__(self):
        self.engine = Engine()
        self.board = chess.Board()
        self.depth = CONFIG.search.depth

    def run(self):
        for line in sys.stdin:
            command = line.strip()
            if not command:
                continue
            if not self.handle(command):
                break

    def handle(self, command: str) -> bool:
        """Process one command line. Returns False on quit."""
        tokens = command.split()
        if not tokens:
            return True
        name, args = tokens[0], tokens[1:]
        if name == "uci":
            print(f"id name {CONFIG.ui.engine_name}")
            print(f"id author {CONFIG.ui.engine_author}")
            print(f"option name Depth type spin default {self.depth} min 1 max {MAX_DEPTH}")
            print("uciok", flush=True)
        elif name == "isready":
            print("readyok", flush=True)
        elif name == "ucinewgame":
            self.engine.stop()
            self.board = chess.Board()
        elif name == "position":
            self._parse_position(args)
        elif name == "go":
            self._parse_go(args)
        elif name == "stop":
            self.engine.stop()
        elif name == "setoption":
            self._parse_setoption(args)
        elif name == "quit":
            self.engine.stop()
            return False
        else:
            logger.debug("ignoring unknown command %r", command)
        return True

    def _parse_position(self, args):
        if not args:
            return
        if "moves" in args:
            idx = args.index("moves")
            setup, moves = args[:idx], args[idx + 1:]
        else:
            setup, moves = args, []
        if not setup:
            return

        if setup[0] == "startpos":
            board = chess.Board()
        elif setup[0] == "fen":
            try:
                board = chess.Board(" ".join(setup[1:]))
            except ValueError:
                logger.warning("invalid FEN in position command: %s", " ".join(setup[1:]))
                return
        else:
            return

        for uci_move in moves:
            try:
                move = chess.Move.from_uci(uci_move)
            except ValueError:
                logger.warning("invalid move in position command: %s", uci_move)
                return
            if move not in board.legal_moves:
                logger.warning("illegal move in position command: %s", uci_move)
                return
            board.push(move)
        self.board = board

    def _parse_go(self, args):
        depth = self.depth
        movetime = None
        nodes = None
        i = 0
        while i < len(args):
            key = args[i]
            value = args[i + 1] if i + 1 < len(args) else None
            if key == "depth" and value and value.isdigit() and int(value) >= 1:
                depth = int(value)
                i += 2
            elif key == "movetime" and value and value.isdigit():
                movetime = int(value)
                i += 2
            elif key == "nodes" and value and value.isdigit():
                nodes = int(value)
                i += 2
            else:
                # infinite, wtime/btime and friends: search to depth until stopped
                i += 1

        white_to_move = self.board.turn == chess.WHITE

        def on_done(move, result):
            print_info(result.depth, result.value, result.nodes, result.elapsed, move, white_to_move)
            print(f"bestmove {move.uci() if move else '0000'}", flush=True)

        self.engine.start_search(self.board, depth=depth, time_limit_ms=movetime,
                                 node_limit=nodes, callback=on_done)

    def _parse_setoption(self, args):
        if "name" not in args or "value" not in args:
            return
        name = " ".join(args[args.index("name") + 1:args.index("value")])
        value = " ".join(args[args.index("value") + 1:])
        if name.lower() == "depth" and value.isdigit() and 1 <= int(value) <= MAX_DEPTH:
            self.depth = int(value)


def main():
    configure_logging()
    UCI().run()


if __name__ == "__main__":
    main()
