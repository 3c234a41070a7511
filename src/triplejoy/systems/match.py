"""Run detection over rows and columns."""
from typing import Dict, List, Mapping, Optional, Set

from esper import World

from triplejoy.components.gem import GemType
from triplejoy.constants import MIN_RUN_LENGTH
from triplejoy.systems.board_ops import Position, board_size, gem_map


def _scan_line(types: Mapping[Position, GemType], line: List[Position]) -> List[List[Position]]:
    runs: List[List[Position]] = []
    run: List[Position] = []
    last_type: Optional[GemType] = None
    for pos in line:
        tval = types.get(pos)
        if tval is not None and tval == last_type:
            run.append(pos)
        else:
            if len(run) >= MIN_RUN_LENGTH:
                runs.append(run)
            run = [pos] if tval is not None else []
            last_type = tval
    if len(run) >= MIN_RUN_LENGTH:
        runs.append(run)
    return runs


def scan_runs(types: Mapping[Position, GemType], size: int) -> List[List[Position]]:
    """Return every maximal horizontal or vertical run of length >= 3.

    Positions missing from ``types`` (cleared cells) break runs.
    """
    runs: List[List[Position]] = []
    for r in range(size):
        runs.extend(_scan_line(types, [(r, c) for c in range(size)]))
    for c in range(size):
        runs.extend(_scan_line(types, [(r, c) for r in range(size)]))
    return runs


def find_matches(world: World) -> Set[Position]:
    """Every position belonging to at least one run; intersections count once."""
    return {pos for run in scan_runs(gem_map(world), board_size(world)) for pos in run}


def find_match_groups(world: World) -> List[List[Position]]:
    """Detect matches and merge runs that share a cell into connected groups."""
    runs = scan_runs(gem_map(world), board_size(world))
    if not runs:
        return []
    groups = [set(run) for run in runs]
    merged: List[Set[Position]] = []
    while groups:
        first = groups.pop()
        changed = True
        while changed:
            changed = False
            for g in groups[:]:
                if first & g:
                    first |= g
                    groups.remove(g)
                    changed = True
        merged.append(first)
    return sorted(sorted(group) for group in merged)


def has_line_match(types: Dict[Position, GemType], pos: Position) -> bool:
    """Return True if a horizontal or vertical run of >= 3 passes through pos."""
    row, col = pos
    tval = types.get(pos)
    if tval is None:
        return False
    h_count = 1
    c_left = col - 1
    while types.get((row, c_left)) == tval:
        h_count += 1
        c_left -= 1
    c_right = col + 1
    while types.get((row, c_right)) == tval:
        h_count += 1
        c_right += 1
    if h_count >= MIN_RUN_LENGTH:
        return True
    v_count = 1
    r_up = row - 1
    while types.get((r_up, col)) == tval:
        v_count += 1
        r_up -= 1
    r_down = row + 1
    while types.get((r_down, col)) == tval:
        v_count += 1
        r_down += 1
    return v_count >= MIN_RUN_LENGTH

