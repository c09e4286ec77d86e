from chessbot.config import CONFIG


def to_centipawns(score: float) -> int:
    """Convert an evaluator score to centipawns using the configured pawn value."""
    pawn = CONFIG.eval.piece_values.get("PAWN") or 1.0
    return int(round(score * 100 / pawn))


def print_info(depth, score, nodes, elapsed, move, white_to_move=True):
    """Print a UCI info line. `score` is White-positive; UCI wants side-to-move."""
    move_str = move.uci() if move else "-"
    nps = int(nodes / elapsed) if elapsed > 0 else 0
    if score in (float("inf"), float("-inf")):
        score_str = "cp 0"
    else:
        cp = to_centipawns(score)
        score_str = f"cp {cp if white_to_move else -cp}"

    print(f"info depth {depth} score {score_str} nodes {nodes} nps {nps} time {int(elapsed * 1000)} pv {move_str}", flush=True)
