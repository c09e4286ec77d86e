import chess

from chessbot.config import configure_logging
from chessbot.main import Engine


def main():
    configure_logging()
    engine = Engine()
    board = engine.board.board

    while not engine.board.is_game_over():
        engine.print_board()
        print("----------------------------")

        if board.turn == chess.WHITE:  # human plays White
            user_move = input("Enter your move (uci format e2e4, 'moves', 'undo' or 'quit'): ").strip()
            if user_move in ("quit", "exit"):
                return
            if user_move == "moves":
                print("Legal moves: " + " ".join(engine.board.get_legal_moves()))
            elif user_move == "undo":
                # take back the engine reply and our own move
                engine.board.undo_move()
                engine.board.undo_move()
            elif not engine.make_move(user_move):
                print("Illegal move, try again.")
        else:
            move, value = engine.get_best_move()
            if move is None:
                print("Engine found no move.")
                break
            print(f"Engine plays: {move} | Eval: {value:.2f}")
            engine.make_move(move)

    print("Game Over")
    print(f"Result: {board.result()}")


if __name__ == "__main__":
    main()
