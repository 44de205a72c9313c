"""
In-memory registry of scoreboard editor sessions.

Every structural change to a tournament goes through TournamentStore so the
per-player match results always line up with the current list of matches.
"""

import logging
from typing import Dict, List, Optional

from scoreboard.functions import parse_bulk_names, parse_count, zero_results
from scoreboard.models import (
    DEFAULT_TEAM_COUNT,
    EditorSession,
    Match,
    Player,
    PlayerMatchResult,
    TournamentData,
    generate_id,
)

logger = logging.getLogger(__name__)

RESULT_FIELDS = ("kills", "placement")


class ScoreboardError(Exception):
    """Base class for scoreboard state errors."""

    pass


class SessionNotFound(ScoreboardError):
    pass


class MatchNotFound(ScoreboardError):
    pass


class PlayerNotFound(ScoreboardError):
    pass


class LastMatchError(ScoreboardError):
    """Raised when removing the only remaining match."""

    def __init__(self):
        super().__init__("Cannot remove the last match.")


class TournamentStore:
    def __init__(self):
        self._sessions: Dict[str, EditorSession] = {}

    # Sessions

    def create_session(self) -> EditorSession:
        session = EditorSession(id=generate_id(), data=TournamentData())
        first_match = Match(id=session.next_id(), name="Match 1")
        session.data.matches.append(first_match)
        for i in range(DEFAULT_TEAM_COUNT):
            session.data.players.append(Player(
                id=session.next_id(),
                name=f"Team {i + 1}",
                match_results={first_match.id: PlayerMatchResult(kills=0, placement=i + 1)},
            ))
        session.active_match_id = first_match.id
        self._sessions[session.id] = session
        logger.info("Created scoreboard session %s", session.id)
        return session

    def get(self, session_id: str) -> EditorSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def list_sessions(self) -> List[EditorSession]:
        return list(self._sessions.values())

    def delete(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is not None:
            logger.info("Deleted scoreboard session %s", session_id)

    # Tournament details

    def update_details(
        self, session: EditorSession, title: Optional[str] = None, date: Optional[str] = None
    ) -> None:
        if title is not None:
            session.data.title = title
        if date is not None:
            session.data.date = date

    # Matches

    def add_match(self, session: EditorSession) -> Match:
        data = session.data
        match = Match(id=session.next_id(), name=f"Match {len(data.matches) + 1}")
        data.matches.append(match)
        for p in data.players:
            p.match_results[match.id] = PlayerMatchResult()
        session.active_match_id = match.id
        return match

    def remove_match(self, session: EditorSession, match_id: int) -> None:
        data = session.data
        if data.find_match(match_id) is None:
            raise MatchNotFound(match_id)
        if len(data.matches) <= 1:
            raise LastMatchError()

        data.matches = [m for m in data.matches if m.id != match_id]
        for p in data.players:
            p.match_results.pop(match_id, None)
        if session.active_match_id == match_id:
            session.active_match_id = data.matches[0].id

    def select_match(self, session: EditorSession, match_id: int) -> None:
        if session.data.find_match(match_id) is None:
            raise MatchNotFound(match_id)
        session.active_match_id = match_id

    # Players

    def add_player(self, session: EditorSession) -> Player:
        data = session.data
        position = len(data.players) + 1
        player = Player(
            id=session.next_id(),
            name=f"Team {position}",
            match_results=zero_results((m.id for m in data.matches), placement=position),
        )
        data.players.append(player)
        return player

    def remove_player(self, session: EditorSession, player_id: int) -> None:
        session.data.players = [p for p in session.data.players if p.id != player_id]

    def rename_player(self, session: EditorSession, player_id: int, name: str) -> None:
        self._get_player(session, player_id).name = name

    def set_result(
        self, session: EditorSession, player_id: int, match_id: int, field: str, raw: Optional[str]
    ) -> PlayerMatchResult:
        if field not in RESULT_FIELDS:
            raise ValueError(f"Unknown result field: {field}")
        player = self._get_player(session, player_id)
        if session.data.find_match(match_id) is None:
            raise MatchNotFound(match_id)

        result = player.match_results.setdefault(match_id, PlayerMatchResult())
        setattr(result, field, parse_count(raw))
        return result

    def bulk_replace_players(self, session: EditorSession, text: str) -> List[Player]:
        """Replace the whole team list with one fresh team per non-blank line."""
        names = parse_bulk_names(text)
        if not names:
            return session.data.players

        match_ids = [m.id for m in session.data.matches]
        session.data.players = [
            Player(id=session.next_id(), name=name, match_results=zero_results(match_ids))
            for name in names
        ]
        return session.data.players

    def _get_player(self, session: EditorSession, player_id: int) -> Player:
        player = session.data.find_player(player_id)
        if player is None:
            raise PlayerNotFound(player_id)
        return player
