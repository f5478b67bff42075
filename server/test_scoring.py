"""
Test suite for showdown scoring.

Run with: pytest test_scoring.py -v
"""

from cards import Card, Rank, Suit
from game import Player
from scoring import game_winners, resolve_showdown


def cards(suit, *ranks):
    return [Card.standard(suit, rank) for rank in ranks]


ROYAL = cards(Suit.SPADES, Rank.ACE, Rank.KING, Rank.QUEEN, Rank.JACK, Rank.TEN)
STRAIGHT_9 = cards(Suit.HEARTS, Rank.NINE, Rank.EIGHT) + cards(Suit.CLUBS, Rank.SEVEN, Rank.SIX, Rank.FIVE)
STRAIGHT_9_OTHER = cards(Suit.CLUBS, Rank.NINE, Rank.EIGHT) + cards(Suit.DIAMONDS, Rank.SEVEN, Rank.SIX, Rank.FIVE)
HIGH_CARD = cards(Suit.DIAMONDS, Rank.TWO, Rank.FOUR) + cards(Suit.HEARTS, Rank.SIX, Rank.JACK, Rank.KING)
PAIR = [Card.joker(1), Card.standard(Suit.CLUBS, Rank.TWO), Card.standard(Suit.DIAMONDS, Rank.FOUR),
        Card.standard(Suit.HEARTS, Rank.TEN), Card.standard(Suit.SPADES, Rank.QUEEN)]


def make_players(*hands):
    return [Player(id=f"p{i}", name=f"Player {i + 1}", hand=list(h)) for i, h in enumerate(hands)]


# =============================================================================
# Round Winners
# =============================================================================

class TestResolveShowdown:

    def test_single_winner_scores_one_point(self):
        players = make_players(HIGH_CARD, ROYAL, PAIR, STRAIGHT_9)
        showdown = resolve_showdown(players)

        assert [r.player_id for r in showdown.winners] == ["p1"]
        assert [p.score for p in players] == [0, 1, 0, 0]

    def test_results_are_in_seat_order(self):
        players = make_players(HIGH_CARD, ROYAL, PAIR, STRAIGHT_9)
        showdown = resolve_showdown(players)
        assert [r.player_id for r in showdown.results] == ["p0", "p1", "p2", "p3"]
        assert [r.evaluation.name for r in showdown.results] == [
            "High Card", "Royal Flush", "One Pair", "Straight",
        ]

    def test_tied_hands_share_the_win(self):
        players = make_players(STRAIGHT_9, HIGH_CARD, STRAIGHT_9_OTHER, PAIR)
        showdown = resolve_showdown(players)

        assert {r.player_id for r in showdown.winners} == {"p0", "p2"}
        assert [p.score for p in players] == [1, 0, 1, 0]

    def test_total_score_is_running_score(self):
        players = make_players(HIGH_CARD, ROYAL, PAIR, STRAIGHT_9)
        players[1].score = 2
        players[0].score = 1
        showdown = resolve_showdown(players)
        assert [r.total_score for r in showdown.results] == [1, 3, 0, 0]

    def test_result_to_dict(self):
        players = make_players(ROYAL)
        result = resolve_showdown(players).results[0].to_dict()
        assert result["player_id"] == "p0"
        assert result["hand_name"] == "Royal Flush"
        assert result["score"] == 90
        assert result["contributing_ranks"] == [14, 13, 12, 11, 10]
        assert result["is_round_winner"] is True
        assert result["total_score"] == 1
        assert len(result["hand"]) == 5

    def test_no_players(self):
        assert resolve_showdown([]).results == []


# =============================================================================
# Game Winners
# =============================================================================

class TestGameWinners:

    def test_highest_score_wins(self):
        players = make_players(*[[]] * 4)
        for player, score in zip(players, [1, 2, 0, 0]):
            player.score = score
        assert [p.id for p in game_winners(players)] == ["p1"]

    def test_ties_allowed(self):
        players = make_players(*[[]] * 4)
        for player, score in zip(players, [1, 1, 1, 0]):
            player.score = score
        assert [p.id for p in game_winners(players)] == ["p0", "p1", "p2"]

    def test_empty(self):
        assert game_winners([]) == []
