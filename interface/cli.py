import argparse
import logging

import chess

from opponent.config import CONFIG
from opponent.main import Engine

HELP = "Commands: <uci move> | undo | reset | level <1-5> | quit"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Play chess against the computer.")
    parser.add_argument("--difficulty", type=int, default=CONFIG.difficulty.default_difficulty)
    parser.add_argument("--color", choices=("white", "black"), default=CONFIG.service.human_color)
    parser.add_argument("--fen", default=None)
    return parser


def handle_command(engine: Engine, line: str) -> bool:
    """Run one line of input. Returns False when the player quits."""
    parts = line.split()
    if not parts:
        return True
    cmd = parts[0].lower()
    if cmd == "quit":
        return False
    if cmd == "undo":
        print(f"Took back {engine.undo()} move(s).")
    elif cmd == "reset":
        engine.reset()
    elif cmd == "level" and len(parts) == 2 and parts[1].isdigit():
        try:
            engine.set_difficulty(int(parts[1]))
            print(f"Difficulty set to {engine.difficulty}.")
        except ValueError as e:
            print(e)
    elif not engine.make_move(cmd):
        print(f"Illegal move, try again. {HELP}")
    return True


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=CONFIG.log_level)

    human = chess.WHITE if args.color == "white" else chess.BLACK
    engine = Engine(difficulty=args.difficulty, human_color=human, fen=args.fen)
    print(HELP)

    while not engine.board.is_game_over():
        if engine.is_engine_turn():
            move = engine.get_best_move()
            print(f"Engine plays: {move}")
            continue

        engine.print_board()
        print("----------------------------")
        if not handle_command(engine, input("Your move: ")):
            return

    engine.print_board()
    print("Game Over")
    print(engine.board.result_message())


if __name__ == "__main__":
    main()
