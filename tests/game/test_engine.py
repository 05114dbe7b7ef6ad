"""Tests for the table controller and its round state machine."""

from decimal import Decimal

import pytest

from conftest import stack
from trainer.cards import Shoe
from trainer.game import BlackjackTable, EventType, RoundPhase
from trainer.game.state import is_valid_transition
from trainer.hand import HandOutcome
from trainer.strategy import GameSettings


def start(table: BlackjackTable, bet: int, *cards: str) -> None:
    """Stack the next cards, bet and deal."""
    stack(table, *cards)
    assert table.place_bet(bet)
    assert table.start_round()


def events(table: BlackjackTable, event_type: EventType) -> list:
    return table.events.of_type(event_type)


class TestShoeControls:
    """Tests for shoe preparation through the table."""

    def test_new_table_in_setup(self, rng):
        table = BlackjackTable(rng=rng)
        assert table.phase == RoundPhase.SETUP
        assert not table.place_bet(10)
        assert not table.cut(0.5)

    def test_casino_preparation_order(self, rng):
        table = BlackjackTable(rng=rng)
        assert table.start_new_shoe()
        assert table.cut(0.3)
        assert table.set_penetration_marker(0.8)
        assert table.phase == RoundPhase.SETUP
        assert table.burn_top_card()
        assert table.phase == RoundPhase.BETTING
        assert table.cards_remaining == 311
        assert table.shoe.penetration_marker_position == 0.8
        assert not table.cut(0.5)
        assert [e.event_type for e in table.events.history if e.event_type != EventType.PHASE_CHANGED] == [
            EventType.SHOE_SHUFFLED,
            EventType.SHOE_CUT,
            EventType.PENETRATION_MARKER_SET,
            EventType.CARD_BURNED,
        ]

    def test_burned_card_not_counted(self, table):
        assert table.running_count == 0

    def test_new_shoe_changes_deck_count(self, table):
        assert table.start_new_shoe(2)
        assert table.settings.num_decks == 2
        assert table.cards_remaining == 104
        assert table.phase == RoundPhase.SETUP

    def test_invalid_deck_count_rejected(self, table):
        assert not table.start_new_shoe(0)
        assert table.settings.num_decks == 6
        assert table.phase == RoundPhase.BETTING

    def test_cannot_change_shoe_mid_round(self, table):
        start(table, 100, "10S", "10D", "6H", "8C")
        assert not table.start_new_shoe()

    def test_marker_defaults_to_settings(self, table_factory):
        table = table_factory(penetration=0.85)
        assert table.shoe.penetration_marker_position == 0.85


class TestBetting:
    """Tests for chip placement."""

    def test_place_bet_accumulates(self, table):
        assert table.place_bet(25)
        assert table.place_bet(25)
        assert table.human.current_bet == 50

    def test_bet_above_max_rejected(self, table):
        assert table.place_bet(500)
        assert not table.place_bet(5)
        assert table.human.current_bet == 500

    def test_bet_must_be_positive_chips(self, table):
        assert not table.place_bet(0)
        assert not table.place_bet(-10)

    def test_insufficient_funds(self, table_factory):
        table = table_factory(bankroll=50)
        assert not table.place_bet(100)
        event = events(table, EventType.INSUFFICIENT_FUNDS)[-1]
        assert event.data["action"] == "place_bet"
        assert table.human.current_bet == 0

    def test_below_minimum_cannot_start(self, table):
        assert table.place_bet(5)
        assert not table.start_round()
        assert table.phase == RoundPhase.BETTING

    def test_clear_bet(self, table):
        table.place_bet(40)
        assert table.clear_bet()
        assert table.human.current_bet == 0

    def test_rebet(self, table):
        assert not table.rebet()
        start(table, 40, "10S", "10D", "QH", "9C")
        table.stand()
        assert table.new_round()
        assert table.human.current_bet == 0
        assert table.rebet(2)
        assert table.human.current_bet == 80

    def test_bet_deducted_at_deal(self, table):
        start(table, 100, "10S", "10D", "6H", "8C")
        assert table.human.bankroll == Decimal("900")
        assert table.human.hands[0].bet == 100


class TestDealing:
    """Tests for the initial deal."""

    def test_deal_order_and_hole_card(self, table):
        start(table, 100, "2S", "KD", "3H", "9C")
        hand = table.human.hands[0]
        assert [str(c) for c in hand.cards] == ["2♠", "3♥"]
        assert table.dealer_hand.cards[0].face_up
        assert not table.dealer_hand.cards[1].face_up
        assert table.phase == RoundPhase.PLAYER_TURN
        # 2, K, 3 counted; the hole card waits for the reveal
        assert table.running_count == 1

    def test_hole_card_counted_at_reveal(self, table):
        start(table, 100, "10S", "10D", "QH", "5C")
        assert table.running_count == -3
        table.stand()
        # Hole 5 (+1), then the dealer draws to beat 15
        reveal = events(table, EventType.DEALER_REVEALS)[0]
        assert reveal.data["running_count"] == -2

    def test_start_round_rejected_when_reshuffle_due(self, table):
        while not table.needs_reshuffle:
            table.shoe.deal_next_card()
        table.place_bet(10)
        assert not table.start_round()
        assert table.phase == RoundPhase.BETTING
        assert events(table, EventType.INVALID_ACTION)[-1].data["action"] == "start_round"


class TestPayouts:
    """Resolution of a $100 bet."""

    def test_player_20_vs_dealer_19(self, table):
        start(table, 100, "10S", "10D", "QH", "9C")
        assert table.stand()
        assert table.phase == RoundPhase.ROUND_END
        assert table.human.bankroll == Decimal("1100")
        assert table.last_result.outcome == HandOutcome.WIN
        assert table.last_result.profit == Decimal("100")

    def test_player_blackjack(self, table):
        start(table, 100, "AS", "10D", "KH", "9C")
        assert table.phase == RoundPhase.ROUND_END
        assert table.human.bankroll == Decimal("1150")
        assert table.last_result.outcome == HandOutcome.BLACKJACK
        assert events(table, EventType.PLAYER_BLACKJACK)

    def test_both_blackjack_push(self, table):
        start(table, 100, "AS", "AD", "KH", "QC")
        assert table.phase == RoundPhase.INSURANCE
        assert table.decide_insurance(False)
        assert table.phase == RoundPhase.ROUND_END
        assert table.human.bankroll == Decimal("1000")
        assert table.last_result.outcome == HandOutcome.PUSH
        assert table.last_result.message == "Push - Bet Returned"

    def test_player_busts(self, table):
        start(table, 100, "10S", "9D", "6H", "8C", "9H")
        assert table.hit()
        assert table.phase == RoundPhase.ROUND_END
        assert table.human.bankroll == Decimal("900")
        assert table.last_result.outcome == HandOutcome.PLAYER_BUST
        # Nothing left to compare, so the dealer does not draw
        assert table.dealer_hand.num_cards == 2

    def test_dealer_busts(self, table):
        start(table, 100, "10S", "6D", "8H", "10C", "KH")
        assert table.stand()
        assert table.dealer_hand.is_busted
        assert table.human.bankroll == Decimal("1100")
        assert table.last_result.outcome == HandOutcome.DEALER_BUST

    def test_dealer_blackjack_without_ace_up(self, table):
        """No peek under a ten; the natural shows at the reveal."""
        start(table, 100, "10S", "KD", "9H", "AC")
        assert table.phase == RoundPhase.PLAYER_TURN
        table.stand()
        assert table.human.bankroll == Decimal("900")
        assert table.last_result.message == "Dealer has blackjack"

    def test_dealer_hits_soft_17(self, table_factory):
        table = table_factory(dealer_hits_soft_17=True)
        start(table, 100, "10S", "AD", "8H", "6C")
        table.decide_insurance(False)
        stack(table, "2S")
        table.stand()
        assert table.dealer_hand.value == 19
        assert table.last_result.outcome == HandOutcome.LOSE

    def test_no_hand_left_active(self, table):
        start(table, 100, "8S", "6D", "8H", "10C", "3D", "KS", "10H")
        table.split()
        table.stand()
        table.stand()
        assert table.phase == RoundPhase.ROUND_END
        assert not any(hand.is_active for hand in table.human.hands)

    def test_statistics_updated_once_per_round(self, table):
        start(table, 100, "10S", "10D", "QH", "9C")
        table.stand()
        assert table.statistics.rounds_played == 1
        assert table.statistics.net_profit == Decimal("100")
        assert table.statistics.total_wagered == Decimal("100")


class TestPlayerActions:
    """Tests for hit, stand, double, split and surrender."""

    def test_actions_rejected_outside_player_turn(self, table):
        assert not table.hit()
        event = events(table, EventType.INVALID_ACTION)[-1]
        assert event.data["action"] == "hit"
        assert event.data["phase"] == "BETTING"

    def test_double(self, table):
        start(table, 100, "5S", "6D", "6H", "10C", "KD", "9S")
        assert table.can_double
        assert table.double()
        hand = table.human.hands[0]
        assert hand.is_doubled
        assert hand.bet == 200
        assert hand.num_cards == 3
        assert table.human.bankroll == Decimal("1200")

    def test_double_three_card_hand_rejected(self, table):
        start(table, 100, "2S", "10D", "3H", "7C", "4D")
        table.hit()
        assert not table.can_double
        assert not table.double()
        hand = table.human.hands[0]
        assert hand.bet == 100
        assert hand.num_cards == 3
        assert not hand.is_doubled
        assert table.human.bankroll == Decimal("900")
        assert table.phase == RoundPhase.PLAYER_TURN

    def test_double_needs_bankroll(self, table_factory):
        table = table_factory(bankroll=150)
        start(table, 100, "5S", "6D", "6H", "10C")
        assert not table.double()
        assert events(table, EventType.INSUFFICIENT_FUNDS)
        assert table.human.bankroll == Decimal("50")

    def test_double_disabled(self, table_factory):
        table = table_factory(allow_double=False)
        start(table, 100, "5S", "6D", "6H", "10C")
        assert not table.double()

    def test_split_aces(self, table):
        start(table, 100, "AS", "6D", "AH", "10C", "KD", "9S", "2C")
        assert table.can_split
        assert table.split()
        hands = table.human.hands
        assert len(hands) == 2
        assert all(h.num_cards == 2 and h.is_finished and h.from_split_aces for h in hands)
        # 21 on split aces is not a natural
        assert not hands[0].is_blackjack
        assert not table.hit()
        assert table.phase == RoundPhase.ROUND_END
        assert table.human.bankroll == Decimal("1200")

    def test_split_eights_plays_each_hand(self, table):
        start(table, 100, "8S", "6D", "8H", "10C", "3D", "KS", "10H")
        assert table.split()
        assert table.human.bankroll == Decimal("800")
        assert table.human.current_hand_index == 0
        assert table.human.hands[0].value == 11
        assert table.can_double
        assert table.stand()
        assert table.human.current_hand_index == 1
        assert table.human.hands[1].value == 18
        assert table.stand()
        assert table.phase == RoundPhase.ROUND_END
        assert table.human.bankroll == Decimal("1200")
        assert table.statistics.hands_played == 2

    def test_split_limit(self, table):
        start(table, 100, "8S", "6D", "8H", "10C", "8D", "KS")
        assert table.split()
        assert table.human.hands[0].is_pair
        assert not table.can_split
        assert not table.split()
        assert len(table.human.hands) == 2

    def test_no_double_after_split_when_disabled(self, table_factory):
        table = table_factory(double_after_split=False)
        start(table, 100, "8S", "6D", "8H", "10C", "3D", "KS")
        table.split()
        assert not table.double()

    def test_split_unequal_rejected(self, table):
        start(table, 100, "8S", "6D", "9H", "10C")
        assert not table.split()

    def test_surrender(self, table_factory):
        table = table_factory(late_surrender=True)
        start(table, 100, "10S", "10D", "6H", "8C")
        assert table.surrender()
        assert table.phase == RoundPhase.ROUND_END
        assert table.human.bankroll == Decimal("950")
        assert table.last_result.outcome == HandOutcome.SURRENDER
        assert table.last_result.message == "Surrendered - Half bet returned"
        assert table.last_result.profit == Decimal("-50")

    def test_surrender_disabled(self, table):
        start(table, 100, "10S", "10D", "6H", "8C")
        assert not table.can_surrender
        assert not table.surrender()

    def test_surrender_after_hit_rejected(self, table_factory):
        table = table_factory(late_surrender=True)
        start(table, 100, "10S", "10D", "2H", "8C", "3D")
        table.hit()
        assert not table.surrender()
        assert table.human.bankroll == Decimal("900")


class TestInsurance:
    """Tests for the insurance side bet."""

    def test_insurance_pays_two_to_one(self, table):
        start(table, 100, "10S", "AD", "QH", "KC")
        assert table.can_insure
        assert table.decide_insurance(True)
        assert table.phase == RoundPhase.ROUND_END
        assert events(table, EventType.INSURANCE_WINS)[0].data["amount"] == Decimal("150")
        # Lost the bet, won the insurance
        assert table.human.bankroll == Decimal("1000")

    def test_insurance_lost_play_continues(self, table):
        start(table, 100, "10S", "AD", "QH", "6C")
        assert table.decide_insurance(True)
        assert table.human.bankroll == Decimal("850")
        assert table.phase == RoundPhase.PLAYER_TURN
        assert events(table, EventType.INSURANCE_LOSES)
        # The hole card stays down and uncounted
        assert not table.dealer_hand.cards[1].face_up
        assert table.running_count == -3
        table.stand()
        assert table.running_count == -2
        assert table.human.bankroll == Decimal("1050")

    def test_decide_once(self, table):
        start(table, 100, "10S", "AD", "QH", "KC")
        table.decide_insurance(False)
        assert not table.decide_insurance(True)

    def test_insurance_needs_ace(self, table):
        start(table, 100, "10S", "9D", "QH", "KC")
        assert not table.decide_insurance(True)
        assert not table.can_insure


class TestNpcSeats:
    """Tests for computer-controlled seats."""

    def test_seat_order(self, table_factory):
        table = table_factory(num_seats=3, player_seat=2, play_with_npcs=True)
        assert [p.seat_number for p in table.players] == [3, 2, 1]
        assert [p.is_human for p in table.players] == [False, True, False]

    def test_npcs_play_through_same_rules(self, table_factory):
        table = table_factory(
            num_seats=3, player_seat=2, play_with_npcs=True, npc_betting_style="flat"
        )
        start(table, 100, "10S", "10H", "10D", "7D", "8S", "9H", "7C", "KC")
        first, human, last = table.players
        assert first.hands[0].is_finished
        assert table.current_player is human
        assert table.stand()
        assert table.phase == RoundPhase.ROUND_END
        assert first.bankroll == Decimal("1010")
        assert human.bankroll == Decimal("1100")
        assert last.bankroll == Decimal("1000")
        stands = events(table, EventType.PLAYER_STAND)
        assert [e.data["seat"] for e in stands] == [3, 2, 1]

    def test_human_cannot_act_for_npc(self, table_factory):
        table = table_factory(instant=False, num_seats=2, player_seat=1, play_with_npcs=True,
                              npc_betting_style="flat")
        start(table, 100, "10S", "10H", "9D", "8S", "9H", "7C")
        # Six cards, the blackjack check, then the NPC is thinking
        table.advance(6.5)
        assert table.phase == RoundPhase.PLAYER_TURN
        assert not table.current_player.is_human
        assert not table.stand()

    def test_wonging_npc_sits_out(self, table_factory):
        table = table_factory(num_seats=2, player_seat=1, play_with_npcs=True,
                              npc_betting_style="wonging")
        start(table, 100, "10S", "10D", "QH", "9C")
        npc = table.players[0]
        assert npc.sitting_out
        assert not npc.hands
        assert npc.bankroll == Decimal("1000")
        assert events(table, EventType.SEAT_SITS_OUT)[0].data["seat"] == 2
        assert table.human.hands[0].value == 20

    def test_npc_insurance_decision(self, table_factory):
        table = table_factory(num_seats=2, player_seat=1, play_with_npcs=True,
                              npc_betting_style="flat")
        start(table, 100, "10S", "10H", "AD", "9S", "9H", "7C")
        assert table.phase == RoundPhase.INSURANCE
        table.decide_insurance(False)
        assert len(events(table, EventType.INSURANCE_DECLINED)) == 2
        assert table.human.bankroll == Decimal("900")
        assert table.stand()
        assert table.players[0].bankroll == Decimal("1010")
        assert table.human.bankroll == Decimal("1100")

    def test_natural_ranks_above_dealer_bust(self, table_factory):
        table = table_factory(num_seats=2, player_seat=1, play_with_npcs=True,
                              npc_betting_style="flat")
        # NPC stands on 16 vs 6, so the dealer draws and busts
        start(table, 100, "10S", "AH", "6D", "6S", "KH", "10D", "KS")
        assert table.phase == RoundPhase.ROUND_END
        assert table.dealer_hand.is_busted
        assert table.players[0].bankroll == Decimal("1010")
        assert table.human.bankroll == Decimal("1150")
        assert table.last_result.outcome == HandOutcome.BLACKJACK
        assert table.last_result.message == "Blackjack! Pays 3 to 2"


class TestRoundLifecycle:
    """Tests for new rounds, resets and pacing."""

    def test_new_round_only_after_round_end(self, table):
        start(table, 100, "10S", "10D", "6H", "8C")
        assert not table.new_round()

    def test_new_round_clears_table(self, table):
        start(table, 100, "10S", "10D", "QH", "9C")
        table.stand()
        assert table.new_round()
        assert table.phase == RoundPhase.BETTING
        assert not table.dealer_hand.cards
        assert not table.human.hands
        assert table.human.last_bet == 100

    def test_new_round_after_cut_card_goes_to_setup(self, table):
        start(table, 100, "10S", "10D", "QH", "9C")
        table.stand()
        while not table.needs_reshuffle:
            table.shoe.deal_next_card()
        assert table.new_round()
        assert table.phase == RoundPhase.SETUP
        assert events(table, EventType.RESHUFFLE_NEEDED)
        assert table.prepare_shoe()
        assert table.phase == RoundPhase.BETTING

    def test_reset_voids_round(self, table):
        start(table, 100, "8S", "6D", "8H", "10C", "3D", "KS")
        table.split()
        assert table.human.bankroll == Decimal("800")
        assert table.reset()
        assert table.human.bankroll == Decimal("1000")
        assert table.phase == RoundPhase.BETTING
        assert events(table, EventType.ROUND_VOIDED)
        assert table.statistics.rounds_played == 0

    def test_reset_voids_insurance_and_npc_bets(self, table_factory):
        table = table_factory(num_seats=2, player_seat=1, play_with_npcs=True,
                              npc_betting_style="flat")
        start(table, 100, "10S", "10H", "AD", "9S", "9H", "7C")
        table.decide_insurance(True)
        table.reset()
        assert all(p.bankroll == Decimal("1000") for p in table.players)

    def test_reset_after_settlement_keeps_bankroll(self, table):
        start(table, 100, "10S", "10D", "QH", "9C")
        table.stand()
        table.reset()
        assert table.human.bankroll == Decimal("1100")
        assert not events(table, EventType.ROUND_VOIDED)

    def test_reset_cancels_pending_steps(self, table_factory):
        table = table_factory(instant=False)
        stack(table, "10S", "10D", "QH", "9C")
        table.place_bet(100)
        assert table.start_round()
        assert table.phase == RoundPhase.DEALING
        assert table.pacing.pending == 5
        assert table.reset()
        assert table.pacing.pending == 0
        assert table.advance(100) == 0
        assert not table.dealer_hand.cards
        assert table.human.bankroll == Decimal("1000")
        assert table.phase == RoundPhase.BETTING

    def test_reset_with_new_deck_count_requires_new_shoe(self, table):
        assert table.reset(table.settings.with_changes(num_decks=2))
        assert table.phase == RoundPhase.SETUP
        assert not table.cut(0.5)
        assert table.prepare_shoe()
        assert table.cards_remaining == 103

    def test_reset_switches_counting_system(self, table):
        start(table, 100, "5S", "9D", "5H", "10C")
        assert table.running_count == 2
        table.reset(table.settings.with_changes(counting_system="halves"))
        assert table.counter.system.key == "halves"
        assert table.running_count == 2.5
        assert table.phase == RoundPhase.BETTING

    def test_reset_rebuilds_seats(self, table):
        table.reset(table.settings.with_changes(bankroll=Decimal("250"), betting_style="flat"))
        assert table.human.bankroll == Decimal("250")
        assert table.human.betting_style.value == "flat"

    def test_paced_deal(self, table_factory):
        table = table_factory(instant=False, play_speed="normal")
        stack(table, "10S", "10D", "QH", "9C")
        table.place_bet(100)
        table.start_round()
        assert table.advance(0.5) == 0
        assert table.advance(0.5) == 1
        assert table.human.hands[0].num_cards == 1
        table.run_pending()
        assert table.phase == RoundPhase.PLAYER_TURN
        table.stand()
        assert table.phase == RoundPhase.DEALER_TURN
        table.run_pending()
        assert table.phase == RoundPhase.ROUND_END

    def test_phase_changes_follow_round_flow(self, table):
        start(table, 100, "10S", "AD", "QH", "6C")
        table.decide_insurance(False)
        table.stand()
        table.new_round()
        changes = events(table, EventType.PHASE_CHANGED)
        assert [e.data["phase"] for e in changes][-6:] == [
            "DEALING",
            "INSURANCE",
            "PLAYER_TURN",
            "DEALER_TURN",
            "ROUND_END",
            "BETTING",
        ]
        for event in changes:
            assert is_valid_transition(RoundPhase[event.data["previous"]], RoundPhase[event.data["phase"]])

    def test_subscribe(self, table):
        seen = []
        table.subscribe(seen.append, EventType.CARD_DEALT)
        start(table, 100, "10S", "10D", "QH", "9C")
        assert len(seen) == 4
        assert seen[1].data["seat"] is None


class TestShoeExhaustion:
    """Tests for rounds near the end of the shoe."""

    def test_reserve_scales_with_seats(self, table_factory):
        assert table_factory(num_decks=1).round_reserve == 12
        table = table_factory(num_decks=1, num_seats=7, player_seat=4, play_with_npcs=True)
        assert table.round_reserve == 48
        assert not table.needs_reshuffle

    def test_start_round_needs_card_reserve(self, table_factory):
        table = table_factory(num_decks=1, penetration=0.9)
        while table.cards_remaining > table.round_reserve:
            table.shoe.deal_next_card()
        assert not table.needs_reshuffle
        assert table.place_bet(10)
        assert "start_round" in table.available_actions()

        table.shoe.deal_next_card()
        assert not table.shoe.needs_reshuffle
        assert table.needs_reshuffle
        assert "start_round" not in table.available_actions()
        assert not table.start_round()
        assert table.phase == RoundPhase.BETTING
        assert table.human.bankroll == Decimal("1000")
        assert events(table, EventType.RESHUFFLE_NEEDED)
        assert events(table, EventType.INVALID_ACTION)[-1].data["action"] == "start_round"

    def test_reset_below_reserve_goes_to_setup(self, table_factory):
        table = table_factory(num_decks=1, penetration=0.9)
        while table.cards_remaining >= table.round_reserve:
            table.shoe.deal_next_card()
        assert table.reset()
        assert table.phase == RoundPhase.SETUP
        assert table.prepare_shoe()

    def test_empty_shoe_during_play_voids_round(self, table):
        start(table, 100, "10S", "10D", "2H", "9C")
        assert table.phase == RoundPhase.PLAYER_TURN
        table.shoe._cards.clear()
        assert not table.hit()
        assert table.phase == RoundPhase.SETUP
        assert table.human.bankroll == Decimal("1000")
        assert not table.human.hands
        assert not table.dealer_hand.cards
        assert events(table, EventType.ROUND_VOIDED)
        assert events(table, EventType.RESHUFFLE_NEEDED)
        assert table.pacing.pending == 0
        assert table.statistics.rounds_played == 0
        assert table.prepare_shoe()
        assert table.phase == RoundPhase.BETTING

    def test_empty_shoe_during_double_restores_stake(self, table):
        start(table, 100, "6S", "10D", "5H", "9C")
        table.shoe._cards.clear()
        assert not table.double()
        assert table.human.bankroll == Decimal("1000")
        assert table.phase == RoundPhase.SETUP

    def test_empty_shoe_during_paced_deal(self, table_factory):
        table = table_factory(instant=False)
        assert table.place_bet(100)
        assert table.start_round()
        assert table.human.bankroll == Decimal("900")
        table.shoe._cards.clear()
        assert table.advance(100) == 0
        assert table.phase == RoundPhase.SETUP
        assert table.human.bankroll == Decimal("1000")
        assert table.pacing.pending == 0
        assert events(table, EventType.ROUND_VOIDED)
        assert table.run_pending() == 0

    @pytest.mark.parametrize("num_seats, player_seat", [(1, 1), (5, 3), (7, 4)])
    def test_whole_single_deck_shoes(self, table_factory, num_seats, player_seat):
        table = table_factory(
            num_decks=1,
            penetration=0.9,
            num_seats=num_seats,
            player_seat=player_seat,
            play_with_npcs=True,
            npc_betting_style="flat",
        )
        shoes = 0
        while shoes < 30:
            if table.phase == RoundPhase.SETUP:
                assert table.prepare_shoe()
                shoes += 1
            assert table.phase == RoundPhase.BETTING
            assert table.place_bet(10)
            bankroll = table.human.bankroll
            assert table.start_round()

            for _ in range(50):
                if table.phase == RoundPhase.INSURANCE:
                    table.decide_insurance(False)
                elif table.phase == RoundPhase.PLAYER_TURN:
                    if table.can_split:
                        table.split()
                    elif table.human.current_hand.value < 17:
                        table.hit()
                    else:
                        table.stand()
                else:
                    break

            assert table.phase in (RoundPhase.ROUND_END, RoundPhase.SETUP)
            assert table.pacing.pending == 0
            if table.phase == RoundPhase.SETUP:
                assert table.human.bankroll == bankroll
            else:
                assert table.new_round()
        assert table.human.bankroll > 0


def test_custom_shoe_is_used(rng):
    shoe = Shoe(rng=rng)
    table = BlackjackTable(GameSettings(num_decks=1), shoe=shoe, instant=True)
    assert table.prepare_shoe()
    assert shoe.cards_remaining == 51
