import argparse
import logging

from shaihulud.app import Game
from shaihulud.config import FPS


def main(argv=None):
    parser = argparse.ArgumentParser(prog="shai-hulud", description="Mount, ride and dismount a sandworm.")
    parser.add_argument("--seed", type=int, default=0, help="Seed for level layouts.")
    parser.add_argument("--fps", type=int, default=FPS, help="Frame rate cap.")
    parser.add_argument("--mute", action="store_true", help="Start with sound muted.")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging verbosity.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    game = Game(seed=args.seed, fps=args.fps, mute=args.mute)
    try:
        game.run()
    except KeyboardInterrupt:
        pass
    finally:
        game.close()


if __name__ == "__main__":
    main()
