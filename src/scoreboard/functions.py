import re
from typing import Dict, Iterable, List, Optional

from scoreboard.models import Player, PlayerMatchResult, RankedPlayer

# Bonus points per finishing place; anything else (unset, 11th and lower) gets 0
PLACEMENT_POINTS: Dict[int, int] = {
    1: 12,
    2: 9,
    3: 8,
    4: 7,
    5: 6,
    6: 5,
    7: 4,
    8: 3,
    9: 2,
    10: 1,
}

# kills and placements never come close to this; longer input is treated as junk
MAX_COUNT_DIGITS = 9

_LEADING_INT = re.compile(r"^\s*[+-]?[0-9]+")
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9]")


def placement_points(placement: int, table: Dict[int, int] = PLACEMENT_POINTS) -> int:
    """Get bonus points for a finishing place."""
    return table.get(placement, 0)


def _player_totals(player: Player, table: Dict[int, int]) -> tuple:
    total_kills = 0
    total_points = 0
    for result in player.match_results.values():
        if result is None:
            continue
        total_kills += result.kills
        total_points += placement_points(result.placement, table) + result.kills
    return total_kills, total_points


def compute_standings(
    players: Iterable[Player], table: Dict[int, int] = PLACEMENT_POINTS
) -> List[RankedPlayer]:
    """
    Rank players by total points (placement bonus plus kills), then by total kills.

    Players still tied keep their input order, so the same input always
    produces the same ranks.
    """
    standings = []
    for player in players:
        total_kills, total_points = _player_totals(player, table)
        standings.append(RankedPlayer(
            id=player.id,
            name=player.name,
            total_kills=total_kills,
            total_points=total_points,
            rank=0,
        ))
    standings.sort(key=lambda s: (-s.total_points, -s.total_kills))
    for i, s in enumerate(standings):
        s.rank = i + 1
    return standings


def parse_count(raw: Optional[str]) -> int:
    """Parse a kills/placement form value; malformed or negative input becomes 0."""
    if raw is None:
        return 0
    match = _LEADING_INT.match(str(raw))
    if not match:
        return 0
    digits = match.group().strip().lstrip("+-").lstrip("0")
    if len(digits) > MAX_COUNT_DIGITS:
        return 0
    return max(int(match.group()), 0)


def parse_bulk_names(text: str) -> List[str]:
    return [n.strip() for n in text.split("\n") if n.strip()]


def zero_results(match_ids: Iterable[int], placement: int = 0) -> Dict[int, PlayerMatchResult]:
    return {mid: PlayerMatchResult(kills=0, placement=placement) for mid in match_ids}


def export_filename(title: str) -> str:
    safe_title = _UNSAFE_FILENAME_CHARS.sub("_", title).lower()
    return f"{safe_title}_overall_results.png"
