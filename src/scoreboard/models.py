from dataclasses import dataclass, field
import datetime
from itertools import count
from typing import Dict, Iterator, List, Optional

DEFAULT_TITLE = "Free Fire Showdown"
DEFAULT_TEAM_COUNT = 4

def generate_id():
    import uuid
    return str(uuid.uuid4())[:8]

@dataclass
class Match:
    id: int
    name: str

@dataclass
class PlayerMatchResult:
    kills: int = 0
    placement: int = 0  # 0 = unset

@dataclass
class Player:
    id: int
    name: str
    match_results: Dict[int, PlayerMatchResult] = field(default_factory=dict)  # match id -> result

@dataclass
class RankedPlayer:
    id: int
    name: str
    total_kills: int
    total_points: int
    rank: int

@dataclass
class TournamentData:
    title: str = DEFAULT_TITLE
    date: str = field(default_factory=lambda: datetime.date.today().isoformat())
    matches: List[Match] = field(default_factory=list)
    players: List[Player] = field(default_factory=list)

    def find_match(self, match_id: int) -> Optional[Match]:
        return next((m for m in self.matches if m.id == match_id), None)

    def find_player(self, player_id: int) -> Optional[Player]:
        return next((p for p in self.players if p.id == player_id), None)

@dataclass
class EditorSession:
    id: str
    data: TournamentData
    active_match_id: int = 0
    summary: str = ""
    is_loading_summary: bool = False
    notice: Optional[str] = None
    # match and player ids share one counter so no id is ever handed out twice
    _ids: Iterator[int] = field(default_factory=lambda: count(1), init=False, repr=False)

    def next_id(self) -> int:
        return next(self._ids)

    def pop_notice(self) -> Optional[str]:
        notice, self.notice = self.notice, None
        return notice
