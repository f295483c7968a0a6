from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import List, Optional

import uvicorn

from ..engine.errors import ChessError
from ..engine.notation import to_san
from ..engine.perft import divide, perft
from ..engine.position import Position, STARTPOS_FEN


logger = logging.getLogger(__name__)

LOG_LEVELS = ("debug", "info", "warning", "error")


def _serve(args: argparse.Namespace) -> int:
    uvicorn.run(
        "chesscore.protocol.http.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        log_level=args.log_level,
    )
    return 0


def _perft(args: argparse.Namespace) -> int:
    position = Position.from_fen(args.fen)
    start = time.perf_counter()
    if args.divide and args.depth >= 1:
        counts = divide(position, args.depth)
        for uci in sorted(counts):
            print(f"{uci}: {counts[uci]}")
        nodes = sum(counts.values())
    else:
        nodes = perft(position, args.depth)
    dt = time.perf_counter() - start
    print(f"nodes={nodes} depth={args.depth} time_ms={int(dt*1000)} nps={int(nodes/max(dt,1e-9))}")
    return 0


def _moves(args: argparse.Namespace) -> int:
    position = Position.from_fen(args.fen)
    print(" ".join(to_san(position, m) for m in position.legal_moves()))
    return 0


def _show(args: argparse.Namespace) -> int:
    position = Position.from_fen(args.fen)
    print(position.board.render())
    print(position.to_fen())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chesscore", description="Chess rules engine tools")
    parser.add_argument("--log-level", choices=LOG_LEVELS, default="info", help="Logging level")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)
    serve.set_defaults(func=_serve)

    p = sub.add_parser("perft", help="Count leaf nodes of the legal move tree")
    p.add_argument("--fen", type=str, default=STARTPOS_FEN, help="FEN string (default: startpos)")
    p.add_argument("--depth", type=int, default=3, help="Perft depth (default: 3)")
    p.add_argument("--divide", action="store_true", help="Print per-root-move counts")
    p.set_defaults(func=_perft)

    m = sub.add_parser("moves", help="List legal moves in SAN")
    m.add_argument("--fen", type=str, default=STARTPOS_FEN)
    m.set_defaults(func=_moves)

    s = sub.add_parser("show", help="Print the board diagram and FEN")
    s.add_argument("--fen", type=str, default=STARTPOS_FEN)
    s.set_defaults(func=_show)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper()))
    try:
        return args.func(args)
    except ChessError as e:
        logger.debug("command failed", extra={"code": e.code})
        print(f"error [{e.code}]: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
