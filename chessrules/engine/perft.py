from __future__ import annotations

from typing import Dict

from .board import Board


def perft(board: Board, depth: int) -> int:
    """Compute perft node count for `board` at `depth`.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Children are visited by make/undo on `board` itself, which is left
    exactly as it was found.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1

    nodes = 0
    for turn in board.get_moves():
        board.make_turn(turn)
        nodes += perft(board, depth - 1)
        board.undo_turn()
    return nodes


def perft_divide(board: Board, depth: int) -> Dict[str, int]:
    """Return perft(depth - 1) below each root move, keyed by UCI text."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    out: Dict[str, int] = {}
    for turn in board.get_moves():
        board.make_turn(turn)
        out[turn.to_uci()] = perft(board, depth - 1)
        board.undo_turn()
    return out
