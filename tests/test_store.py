import copy
import unittest

from scoreboard.models import PlayerMatchResult
from scoreboard.store import (
    LastMatchError,
    MatchNotFound,
    PlayerNotFound,
    SessionNotFound,
    TournamentStore,
)


class StoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.store = TournamentStore()
        self.session = self.store.create_session()

    def assert_results_cover_matches(self) -> None:
        match_ids = {m.id for m in self.session.data.matches}
        for player in self.session.data.players:
            self.assertEqual(set(player.match_results), match_ids)


class SessionLifecycleTests(StoreTestCase):
    def test_new_session_defaults(self) -> None:
        data = self.session.data
        self.assertEqual(data.title, "Free Fire Showdown")
        self.assertEqual([m.name for m in data.matches], ["Match 1"])
        self.assertEqual([p.name for p in data.players], ["Team 1", "Team 2", "Team 3", "Team 4"])
        match_id = data.matches[0].id
        self.assertEqual(self.session.active_match_id, match_id)
        self.assertEqual(
            [p.match_results[match_id].placement for p in data.players], [1, 2, 3, 4]
        )
        self.assert_results_cover_matches()

    def test_get_and_delete(self) -> None:
        self.assertIs(self.store.get(self.session.id), self.session)
        self.store.delete(self.session.id)
        with self.assertRaises(SessionNotFound):
            self.store.get(self.session.id)
        # deleting twice is harmless
        self.store.delete(self.session.id)

    def test_sessions_are_independent(self) -> None:
        other = self.store.create_session()
        self.store.add_match(other)
        self.assertNotEqual(other.id, self.session.id)
        self.assertEqual(len(self.session.data.matches), 1)
        self.assertEqual(len(self.store.list_sessions()), 2)

    def test_update_details(self) -> None:
        self.store.update_details(self.session, title="Summer Skirmish", date="2025-07-01")
        self.assertEqual(self.session.data.title, "Summer Skirmish")
        self.assertEqual(self.session.data.date, "2025-07-01")
        self.store.update_details(self.session, title="Finals")
        self.assertEqual(self.session.data.date, "2025-07-01")


class MatchTests(StoreTestCase):
    def test_add_match_initializes_zero_results(self) -> None:
        match = self.store.add_match(self.session)
        self.assertEqual(match.name, "Match 2")
        self.assertEqual(self.session.active_match_id, match.id)
        for player in self.session.data.players:
            self.assertEqual(player.match_results[match.id], PlayerMatchResult(kills=0, placement=0))
        self.assert_results_cover_matches()

    def test_remove_last_match_is_rejected(self) -> None:
        before = copy.deepcopy(self.session.data)
        only_match = self.session.data.matches[0]
        with self.assertRaises(LastMatchError) as ctx:
            self.store.remove_match(self.session, only_match.id)
        self.assertEqual(str(ctx.exception), "Cannot remove the last match.")
        self.assertEqual(self.session.data, before)

    def test_remove_match_prunes_results(self) -> None:
        first = self.session.data.matches[0]
        second = self.store.add_match(self.session)
        self.store.remove_match(self.session, first.id)

        self.assertEqual([m.id for m in self.session.data.matches], [second.id])
        self.assert_results_cover_matches()

    def test_removing_active_match_activates_first(self) -> None:
        first = self.session.data.matches[0]
        self.store.add_match(self.session)
        third = self.store.add_match(self.session)
        self.store.remove_match(self.session, third.id)
        self.assertEqual(self.session.active_match_id, first.id)

    def test_removing_other_match_keeps_active(self) -> None:
        first = self.session.data.matches[0]
        second = self.store.add_match(self.session)
        self.store.remove_match(self.session, first.id)
        self.assertEqual(self.session.active_match_id, second.id)

    def test_remove_unknown_match(self) -> None:
        self.store.add_match(self.session)
        with self.assertRaises(MatchNotFound):
            self.store.remove_match(self.session, 9999)

    def test_remove_unknown_match_when_one_remains(self) -> None:
        before = copy.deepcopy(self.session.data)
        with self.assertRaises(MatchNotFound):
            self.store.remove_match(self.session, 9999)
        self.assertEqual(self.session.data, before)

    def test_ids_are_never_reused(self) -> None:
        seen = {m.id for m in self.session.data.matches} | {p.id for p in self.session.data.players}
        for _ in range(3):
            match = self.store.add_match(self.session)
            self.store.remove_match(self.session, match.id)
            player = self.store.add_player(self.session)
            self.store.remove_player(self.session, player.id)
            self.assertNotIn(match.id, seen)
            self.assertNotIn(player.id, seen)
            seen |= {match.id, player.id}

    def test_select_match(self) -> None:
        first = self.session.data.matches[0]
        self.store.add_match(self.session)
        self.store.select_match(self.session, first.id)
        self.assertEqual(self.session.active_match_id, first.id)
        with self.assertRaises(MatchNotFound):
            self.store.select_match(self.session, 9999)


class PlayerTests(StoreTestCase):
    def test_add_player(self) -> None:
        self.store.add_match(self.session)
        player = self.store.add_player(self.session)
        self.assertEqual(player.name, "Team 5")
        self.assertEqual({r.placement for r in player.match_results.values()}, {5})
        self.assertEqual({r.kills for r in player.match_results.values()}, {0})
        self.assert_results_cover_matches()

    def test_remove_and_rename(self) -> None:
        first, second = self.session.data.players[:2]
        self.store.remove_player(self.session, first.id)
        self.store.rename_player(self.session, second.id, "Booyah Squad")
        self.assertEqual(
            [p.name for p in self.session.data.players], ["Booyah Squad", "Team 3", "Team 4"]
        )
        with self.assertRaises(PlayerNotFound):
            self.store.rename_player(self.session, first.id, "Ghost")

    def test_set_result_parses_leniently(self) -> None:
        player = self.session.data.players[0]
        match_id = self.session.data.matches[0].id
        self.store.set_result(self.session, player.id, match_id, "kills", "7")
        self.store.set_result(self.session, player.id, match_id, "placement", "abc")
        self.assertEqual(player.match_results[match_id], PlayerMatchResult(kills=7, placement=0))

    def test_set_result_rejects_unknown_targets(self) -> None:
        player = self.session.data.players[0]
        match_id = self.session.data.matches[0].id
        with self.assertRaises(PlayerNotFound):
            self.store.set_result(self.session, 9999, match_id, "kills", "1")
        with self.assertRaises(MatchNotFound):
            self.store.set_result(self.session, player.id, 9999, "kills", "1")
        with self.assertRaises(ValueError):
            self.store.set_result(self.session, player.id, match_id, "name", "1")

    def test_bulk_replace_players(self) -> None:
        self.store.add_match(self.session)
        old_ids = {p.id for p in self.session.data.players}
        players = self.store.bulk_replace_players(self.session, "Alpha\nBravo\n\n Charlie \n")

        self.assertEqual([p.name for p in players], ["Alpha", "Bravo", "Charlie"])
        self.assertEqual(self.session.data.players, players)
        self.assertTrue(old_ids.isdisjoint(p.id for p in players))
        for player in players:
            for result in player.match_results.values():
                self.assertEqual(result, PlayerMatchResult(kills=0, placement=0))
        self.assert_results_cover_matches()

    def test_bulk_replace_with_no_names_is_noop(self) -> None:
        before = list(self.session.data.players)
        self.store.bulk_replace_players(self.session, "  \n\n ")
        self.assertEqual(self.session.data.players, before)


if __name__ == "__main__":
    unittest.main()
