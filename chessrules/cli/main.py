from __future__ import annotations

import argparse
import logging
import time
from typing import List, Optional

import uvicorn

from ..engine.errors import PositionError
from ..engine.fen import STARTPOS_FEN
from ..engine.game import Game
from ..engine.perft import perft, perft_divide


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chessrules", description="Chess rules engine")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", type=str, default="127.0.0.1", help="Bind address")
    serve.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    serve.add_argument(
        "--log-level",
        type=str.upper,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    serve.add_argument(
        "--max-sessions", type=int, default=1024, help="Concurrent game sessions kept in memory"
    )

    p = sub.add_parser("perft", help="Count leaf nodes of the move tree")
    p.add_argument("--fen", type=str, default=STARTPOS_FEN, help="FEN string (default: startpos)")
    p.add_argument("--depth", type=int, default=3, help="Perft depth (default: 3)")
    p.add_argument("--divide", action="store_true", help="Print node counts per root move")
    return parser


def run_perft(fen: str, depth: int, divide: bool = False) -> int:
    board = Game.from_fen(fen).board
    start = time.perf_counter()
    if divide:
        split = perft_divide(board, depth)
        for uci in sorted(split):
            print(f"{uci}: {split[uci]}")
        nodes = sum(split.values())
    else:
        nodes = perft(board, depth)
    dt = time.perf_counter() - start
    print(f"nodes={nodes} depth={depth} time_ms={int(dt*1000)} nps={int(nodes/max(dt,1e-9))}")
    return nodes


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "serve":
        level = getattr(logging, args.log_level)
        logging.basicConfig(level=level)
        from ..protocol.http.app import create_app

        uvicorn.run(
            create_app(max_sessions=args.max_sessions, log_level=level),
            host=args.host,
            port=args.port,
            log_level=args.log_level.lower(),
        )
        return 0

    try:
        run_perft(args.fen, args.depth, args.divide)
    except PositionError as e:
        logger.error("invalid FEN: %s", e)
        return 2
    except ValueError as e:
        logger.error("%s", e)
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
