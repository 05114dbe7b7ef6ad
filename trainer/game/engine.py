"""Blackjack table controller with a round state machine."""

import functools
import logging
from dataclasses import dataclass
from decimal import Decimal
from random import Random
from typing import Any, Callable, TypeVar

from transitions import EventData, Machine

from trainer.cards import Card, Shoe
from trainer.counting.base import CountTracker, decks_remaining
from trainer.errors import EmptyShoe, IllegalAction, InvalidConfiguration
from trainer.game.events import EventEmitter, EventType, GameEvent
from trainer.game.pacing import PlaySpeed, TransitionKind, TransitionQueue
from trainer.game.players import Player, PlayerType
from trainer.game.snapshot import (
    AdviceView,
    BetAdviceView,
    DeviationView,
    HandView,
    RoundResultView,
    SeatView,
    StatisticsView,
    TableSnapshot,
)
from trainer.game.state import RoundPhase, is_valid_transition
from trainer.hand import Hand, HandOutcome, dealer_should_hit, settle_hand
from trainer.statistics.house_edge import HouseEdgeCalculator, player_edge, rule_variant_name
from trainer.statistics.session import SessionStatistics
from trainer.strategy.basic import Action, BasicStrategy, StrategyAdvice
from trainer.strategy.betting import BettingStyle, BetSuggestion, suggest_bet
from trainer.strategy.deviations import IndexPlay, find_deviation, insurance_advised
from trainer.strategy.npc import npc_action, npc_bet, npc_takes_insurance
from trainer.strategy.rules import GameSettings

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

HUMAN_ID = "human"

# Worst-case cards one seat can take in a round, and the dealer's share
CARDS_PER_SEAT = 6
DEALER_RESERVE = 6

_RESET_TRIGGERS = ("abort_to_betting", "abort_to_setup")

_RESULT_MESSAGES = {
    HandOutcome.BLACKJACK: "Blackjack! Pays 3 to 2",
    HandOutcome.WIN: "You win!",
    HandOutcome.DEALER_BUST: "Dealer busts - you win!",
    HandOutcome.PUSH: "Push - Bet Returned",
    HandOutcome.LOSE: "Dealer wins",
    HandOutcome.PLAYER_BUST: "Bust! Dealer wins",
    HandOutcome.SURRENDER: "Surrendered - Half bet returned",
}


@dataclass(frozen=True)
class RoundResult:
    """The human seat's visible result for a round."""

    outcome: HandOutcome
    message: str
    profit: Decimal


def guarded(method: F) -> F:
    """
    Turn a control into a bool-returning call.

    ``IllegalAction`` raised before any mutation is logged, emitted as an
    INVALID_ACTION (or INSUFFICIENT_FUNDS) event and reported as False.
    A shoe that runs dry abandons the round.
    """

    @functools.wraps(method)
    def wrapper(self: "BlackjackTable", *args: Any, **kwargs: Any) -> bool:
        try:
            method(self, *args, **kwargs)
        except IllegalAction as exc:
            self._reject(method.__name__, exc)
            return False
        except EmptyShoe:
            self._abandon_round()
            return False
        if self.instant:
            self._run_steps(self.pacing.drain)
        return True

    return wrapper  # type: ignore[return-value]


class BlackjackTable:
    """
    Blackjack table controller using a state machine.

    Owns the shoe, the count, every seat and the dealer hand. The human
    and the NPC seats go through the same transition code; NPC turns,
    dealing and dealer play are scheduled on a pacing queue so a
    presentation layer can animate them.
    """

    # State machine states
    STATES = [p.name.lower() for p in RoundPhase]

    # State machine transitions
    TRANSITIONS = [
        {"trigger": "shoe_ready", "source": "setup", "dest": "betting"},
        {"trigger": "require_setup", "source": ["betting", "round_end"], "dest": "setup"},
        {"trigger": "begin_deal", "source": "betting", "dest": "dealing"},
        {"trigger": "offer_insurance", "source": "dealing", "dest": "insurance"},
        {"trigger": "begin_play", "source": ["dealing", "insurance"], "dest": "player_turn"},
        {
            "trigger": "begin_dealer_turn",
            "source": ["dealing", "insurance", "player_turn"],
            "dest": "dealer_turn",
        },
        {"trigger": "finish_round", "source": ["insurance", "dealer_turn"], "dest": "round_end"},
        {"trigger": "open_betting", "source": "round_end", "dest": "betting"},
        # Resets may leave any phase
        {"trigger": "abort_to_betting", "source": "*", "dest": "betting"},
        {"trigger": "abort_to_setup", "source": "*", "dest": "setup"},
    ]

    def __init__(
        self,
        settings: GameSettings | None = None,
        rng: Random | None = None,
        shoe: Shoe | None = None,
        instant: bool = False,
    ) -> None:
        """
        Initialize a table.

        Args:
            settings: Table rules and layout (defaults if not provided)
            rng: Random number generator for reproducible shuffles
            shoe: Shoe to deal from (a fresh one if not provided)
            instant: Run scheduled steps as soon as a control returns
        """
        self.settings = settings or GameSettings()
        self.shoe = shoe or Shoe(rng=rng)
        self.instant = instant

        self.counter = CountTracker(self.settings.counting)
        self.strategy = BasicStrategy()
        self.events = EventEmitter()
        self.pacing = TransitionQueue(PlaySpeed(self.settings.play_speed))
        self.statistics = SessionStatistics()

        self.dealer_hand = Hand()
        self.players = self._create_seats(self.settings)
        self.last_result: RoundResult | None = None

        self._turn: int | None = None
        self._round_settled = True
        self._shoe_ready = False
        self._needs_new_shoe = False
        self._awaiting_insurance = False

        # Initialize state machine
        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="setup",
            auto_transitions=False,
            model_attribute="_machine_state",
            after_state_change="_emit_phase_change",
            send_event=True,
        )

    # ------------------------------------------------------------------
    # Read-only surface
    # ------------------------------------------------------------------

    @property
    def phase(self) -> RoundPhase:
        """Get current round phase as enum."""
        return RoundPhase[self._machine_state.upper()]  # type: ignore

    @property
    def human(self) -> Player:
        """Return the human seat."""
        return next(p for p in self.players if p.is_human)

    @property
    def current_player(self) -> Player | None:
        """Return the seat whose turn it is."""
        if self.phase != RoundPhase.PLAYER_TURN or self._turn is None:
            return None
        return self.players[self._turn]

    @property
    def dealer_up_card(self) -> Card | None:
        """Return the dealer's face-up card."""
        if not self.dealer_hand.cards:
            return None
        return self.dealer_hand.cards[0]

    @property
    def cards_remaining(self) -> int:
        return self.shoe.cards_remaining

    @property
    def penetration(self) -> float:
        return self.shoe.penetration

    @property
    def round_reserve(self) -> int:
        """Cards kept back so a full table can finish a round."""
        return CARDS_PER_SEAT * len(self.players) + DEALER_RESERVE

    @property
    def needs_reshuffle(self) -> bool:
        """True at the cut card, or when fewer than ``round_reserve`` cards remain."""
        return self.shoe.needs_reshuffle or self.shoe.cards_remaining < self.round_reserve

    @property
    def running_count(self) -> float:
        return self.counter.running_count

    @property
    def true_count(self) -> float:
        return self.counter.true_count(self.shoe.cards_remaining)

    @property
    def count_signal(self) -> float:
        """Count that drives bets, deviations and NPC insurance."""
        return self.counter.signal(self.shoe.cards_remaining)

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to table events."""
        self.events.subscribe(handler, event_type)

    # ------------------------------------------------------------------
    # Pacing
    # ------------------------------------------------------------------

    def run_pending(self) -> int:
        """Complete every scheduled step now. Returns the number run."""
        return self._run_steps(self.pacing.drain)

    def advance(self, seconds: float) -> int:
        """Let ``seconds`` pass and run the steps that fall due."""
        return self._run_steps(functools.partial(self.pacing.update, seconds))

    def _run_steps(self, run: Callable[[], int]) -> int:
        try:
            return run()
        except EmptyShoe:
            self._abandon_round()
            return 0

    # ------------------------------------------------------------------
    # Shoe controls
    # ------------------------------------------------------------------

    @guarded
    def start_new_shoe(self, deck_count: int | None = None) -> None:
        """
        Build and shuffle a new shoe and go to SETUP.

        Args:
            deck_count: Number of decks (keeps the configured count if None)
        """
        if self.phase not in (RoundPhase.SETUP, RoundPhase.BETTING, RoundPhase.ROUND_END):
            raise IllegalAction("Cannot change the shoe during a round")

        if deck_count is not None and deck_count != self.settings.num_decks:
            try:
                self.settings = self.settings.with_changes(num_decks=deck_count)
            except InvalidConfiguration as exc:
                raise IllegalAction(str(exc)) from exc

        self.shoe.start_new_shoe(self.settings.num_decks)
        self.shoe.set_penetration_marker(self.settings.penetration)
        self.counter.reset()
        self._shoe_ready = False
        self._needs_new_shoe = False
        self._clear_table()

        if self.phase != RoundPhase.SETUP:
            self.require_setup()

        self.events.emit_new(
            EventType.SHOE_SHUFFLED,
            decks=self.settings.num_decks,
            cards=self.shoe.cards_remaining,
        )

    @guarded
    def cut(self, position: float) -> None:
        """Cut the new shoe at ``position`` (clamped into [0.10, 0.90])."""
        self._require_unprepared_shoe()
        self.shoe.cut(position)
        self.events.emit_new(EventType.SHOE_CUT, position=self.shoe.cut_position)

    @guarded
    def set_penetration_marker(self, fraction: float) -> None:
        """Place the cut card (clamped into [0.65, 0.90])."""
        self._require_unprepared_shoe()
        self.shoe.set_penetration_marker(fraction)
        self.events.emit_new(
            EventType.PENETRATION_MARKER_SET,
            position=self.shoe.penetration_marker_position,
        )

    @guarded
    def burn_top_card(self) -> None:
        """Burn the top card face down; the shoe is then ready for betting."""
        self._require_unprepared_shoe()
        card = self.shoe.burn_top_card()
        self._shoe_ready = True
        self.events.emit_new(EventType.CARD_BURNED, cards_remaining=self.shoe.cards_remaining)
        logger.debug("Burned %r", card)
        self.shoe_ready()

    def prepare_shoe(self, cut_position: float = 0.5, penetration: float | None = None) -> bool:
        """Shuffle, cut, place the marker and burn in casino order."""
        marker = self.settings.penetration if penetration is None else penetration
        return (
            self.start_new_shoe()
            and self.cut(cut_position)
            and self.set_penetration_marker(marker)
            and self.burn_top_card()
        )

    def _require_unprepared_shoe(self) -> None:
        if self.phase != RoundPhase.SETUP:
            raise IllegalAction("The shoe can only be prepared during setup")
        if not self.shoe.is_loaded or self._needs_new_shoe:
            raise IllegalAction("Start a new shoe first")
        if self._shoe_ready:
            raise IllegalAction("The shoe has already been burned")

    # ------------------------------------------------------------------
    # Betting controls
    # ------------------------------------------------------------------

    @guarded
    def place_bet(self, amount: int) -> None:
        """
        Add chips to the human's bet.

        Args:
            amount: Chips to add (the total stays within max_bet and bankroll)
        """
        self._require_phase(RoundPhase.BETTING, "Bets can only be placed while betting")
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise IllegalAction("Bet amount must be a positive whole number of chips")

        human = self.human
        total = human.current_bet + amount
        if total > self.settings.max_bet:
            raise IllegalAction(f"Bet cannot exceed the table maximum of ${self.settings.max_bet}")
        if not human.can_afford(total):
            raise IllegalAction(f"Bankroll cannot cover a ${total} bet", insufficient_funds=True)

        human.current_bet = total
        self.events.emit_new(EventType.BET_PLACED, seat=human.seat_number, amount=amount, total=total)

    @guarded
    def clear_bet(self) -> None:
        """Take the human's chips back."""
        self._require_phase(RoundPhase.BETTING, "Bets can only be cleared while betting")
        self.human.current_bet = 0
        self.events.emit_new(EventType.BET_CLEARED, seat=self.human.seat_number)

    @guarded
    def rebet(self, multiplier: int = 1) -> None:
        """Repeat the previous bet, optionally multiplied (e.g. 2 for double)."""
        self._require_phase(RoundPhase.BETTING, "Bets can only be placed while betting")
        human = self.human
        if human.last_bet <= 0:
            raise IllegalAction("There is no previous bet to repeat")
        if multiplier < 1:
            raise IllegalAction("Rebet multiplier must be at least 1")

        total = human.last_bet * multiplier
        if total > self.settings.max_bet:
            raise IllegalAction(f"Bet cannot exceed the table maximum of ${self.settings.max_bet}")
        if not human.can_afford(total):
            raise IllegalAction(f"Bankroll cannot cover a ${total} bet", insufficient_funds=True)

        human.current_bet = total
        self.events.emit_new(EventType.BET_PLACED, seat=human.seat_number, amount=total, total=total)

    # ------------------------------------------------------------------
    # Round controls
    # ------------------------------------------------------------------

    @guarded
    def start_round(self) -> None:
        """Take the bets and schedule the initial deal."""
        self._require_phase(RoundPhase.BETTING, "A round can only start from betting")
        if self.needs_reshuffle:
            self.events.emit_new(EventType.RESHUFFLE_NEEDED, penetration=self.shoe.penetration)
            raise IllegalAction("Not enough cards left for a round - start a new shoe")

        human = self.human
        if human.current_bet < self.settings.min_bet:
            raise IllegalAction(f"Minimum bet is ${self.settings.min_bet}")
        if not human.can_afford(human.current_bet):
            raise IllegalAction("Bankroll cannot cover the bet", insufficient_funds=True)

        self.pacing.cancel()
        self.dealer_hand.clear()
        self.last_result = None
        self._turn = None
        self._awaiting_insurance = False

        signal = self.count_signal
        for player in self.players:
            player.reset_hands()
            player.round_start_bankroll = player.bankroll
            if not player.is_human:
                self._size_npc_bet(player, signal)
            if player.sitting_out:
                continue
            player.bankroll -= player.current_bet
            player.add_hand(bet=player.current_bet)

        self._round_settled = False
        self.begin_deal()
        self.events.emit_new(
            EventType.ROUND_STARTED,
            bets={p.seat_number: p.current_bet for p in self._seats_in_round()},
        )
        logger.info(
            "Round started: %d seat(s) in, human bet %d", len(self._seats_in_round()), human.current_bet
        )
        self._schedule_initial_deal()

    @guarded
    def hit(self) -> None:
        """Take another card on the current hand."""
        self._perform(self._require_human_turn(), Action.HIT)

    @guarded
    def stand(self) -> None:
        """Keep the current hand."""
        self._perform(self._require_human_turn(), Action.STAND)

    @guarded
    def double(self) -> None:
        """Double the bet and take exactly one more card."""
        self._perform(self._require_human_turn(), Action.DOUBLE)

    @guarded
    def split(self) -> None:
        """Split a pair into two hands."""
        self._perform(self._require_human_turn(), Action.SPLIT)

    @guarded
    def surrender(self) -> None:
        """Give up the untouched initial hand for half the bet back."""
        self._perform(self._require_human_turn(), Action.SURRENDER)

    @guarded
    def decide_insurance(self, accept: bool) -> None:
        """
        Accept or decline insurance while the dealer shows an Ace.

        Args:
            accept: True to stake half the bet on a dealer blackjack
        """
        self._require_phase(RoundPhase.INSURANCE, "Insurance is not being offered")
        if not self._awaiting_insurance:
            raise IllegalAction("Insurance has already been decided")

        human = self.human
        if accept:
            stake = Decimal(human.current_bet) / 2
            if not human.can_afford(stake):
                raise IllegalAction("Bankroll cannot cover insurance", insufficient_funds=True)
            self._take_insurance(human, stake)
        else:
            self.events.emit_new(EventType.INSURANCE_DECLINED, seat=human.seat_number)

        self._awaiting_insurance = False
        self.pacing.schedule(TransitionKind.DECISION, self._complete_insurance, "dealer peek")

    @guarded
    def new_round(self) -> None:
        """Clear the table after a settled round and open betting."""
        self._require_phase(RoundPhase.ROUND_END, "The round has not ended")
        self.pacing.cancel()
        self._clear_table()
        if self.needs_reshuffle:
            self.events.emit_new(EventType.RESHUFFLE_NEEDED, penetration=self.shoe.penetration)
            self._shoe_ready = False
            self.require_setup()
        else:
            self.open_betting()

    @guarded
    def reset(self, settings: GameSettings | None = None) -> None:
        """
        Abandon the current round, optionally applying new settings.

        An unsettled round is voided: every seat gets its round-start
        bankroll back. The table returns to BETTING, or to SETUP when a
        new shoe is required.
        """
        self.pacing.cancel()
        self._void_round()

        old = self.settings
        if settings is not None:
            self._apply_settings(old, settings)

        self._clear_table()
        if not self.shoe.is_loaded or self._needs_new_shoe or not self._shoe_ready:
            self.abort_to_setup()
        elif self.needs_reshuffle:
            self._shoe_ready = False
            self.abort_to_setup()
        else:
            self.abort_to_betting()

    # ------------------------------------------------------------------
    # Legality checks (shared by human controls and NPC turns)
    # ------------------------------------------------------------------

    @property
    def can_hit(self) -> bool:
        return self._allowed(Action.HIT)

    @property
    def can_stand(self) -> bool:
        return self._allowed(Action.STAND)

    @property
    def can_double(self) -> bool:
        return self._allowed(Action.DOUBLE)

    @property
    def can_split(self) -> bool:
        return self._allowed(Action.SPLIT)

    @property
    def can_surrender(self) -> bool:
        return self._allowed(Action.SURRENDER)

    @property
    def can_insure(self) -> bool:
        """Check if the human may still take insurance."""
        if self.phase != RoundPhase.INSURANCE or not self._awaiting_insurance:
            return False
        return self.human.can_afford(Decimal(self.human.current_bet) / 2)

    def _allowed(self, action: Action) -> bool:
        player = self.current_player
        if player is None or not player.is_human:
            return False
        try:
            self._validate(player, action)
        except IllegalAction:
            return False
        return True

    def _validate(self, player: Player, action: Action) -> Hand:
        hand = player.current_hand
        if hand is None or hand.is_finished:
            raise IllegalAction("No hand is waiting for a decision")

        if action == Action.DOUBLE:
            if not self.settings.allow_double:
                raise IllegalAction("Doubling is not offered at this table")
            if hand.num_cards != 2 or hand.is_doubled:
                raise IllegalAction("Can only double on the first two cards of a hand")
            if hand.is_split and not self.settings.double_after_split:
                raise IllegalAction("Double after split is not allowed")
            if not player.can_afford(hand.bet):
                raise IllegalAction("Bankroll cannot cover the double", insufficient_funds=True)

        elif action == Action.SPLIT:
            if not self.settings.allow_split:
                raise IllegalAction("Splitting is not offered at this table")
            if not hand.is_pair:
                raise IllegalAction("Can only split two cards of equal value")
            if len(player.hands) >= self.settings.max_resplit_hands:
                raise IllegalAction("Maximum number of split hands reached")
            if hand.cards[0].is_ace and hand.is_split and not self.settings.resplit_aces:
                raise IllegalAction("Aces cannot be re-split")
            if not player.can_afford(hand.bet):
                raise IllegalAction("Bankroll cannot cover the split", insufficient_funds=True)

        elif action == Action.SURRENDER:
            if not self.settings.late_surrender:
                raise IllegalAction("Surrender is not offered at this table")
            if len(player.hands) != 1 or not hand.is_untouched:
                raise IllegalAction("Can only surrender the untouched initial hand")

        elif action not in (Action.HIT, Action.STAND):
            raise IllegalAction(f"Unknown action {action}")

        return hand

    def _require_phase(self, phase: RoundPhase, message: str) -> None:
        if self.phase != phase:
            raise IllegalAction(message)

    def _require_human_turn(self) -> Player:
        player = self.current_player
        if player is None:
            raise IllegalAction("No hand is being played")
        if not player.is_human:
            raise IllegalAction(f"It is {player.name}'s turn")
        return player

    def _reject(self, action: str, exc: IllegalAction) -> None:
        logger.info("Rejected %s in %s: %s", action, self.phase.name, exc.message)
        event_type = EventType.INSUFFICIENT_FUNDS if exc.insufficient_funds else EventType.INVALID_ACTION
        self.events.emit_new(event_type, action=action, message=exc.message, phase=self.phase.name)

    # ------------------------------------------------------------------
    # Dealing
    # ------------------------------------------------------------------

    def _deal_to(self, hand: Hand, face_up: bool = True, seat: int | None = None) -> Card:
        """Deal the next card; face-up cards are counted as they land."""
        card = self.shoe.deal_next_card(face_up)
        hand.add_card(card)
        if face_up:
            self.counter.reveal(card)
        self.events.emit_new(
            EventType.CARD_DEALT,
            card=str(card),
            seat=seat,
            hand_value=hand.value if face_up else None,
            running_count=self.counter.running_count,
        )
        return card

    def _schedule_initial_deal(self) -> None:
        seats = self._seats_in_round()
        for player in seats:
            self._schedule_card(player.hands[0], True, player.seat_number)
        self._schedule_card(self.dealer_hand, True, None)
        for player in seats:
            self._schedule_card(player.hands[0], True, player.seat_number)
        self._schedule_card(self.dealer_hand, False, None)
        self.pacing.schedule(TransitionKind.DECISION, self._after_deal, "blackjack check")

    def _schedule_card(self, hand: Hand, face_up: bool, seat: int | None) -> None:
        label = f"deal to {'dealer' if seat is None else f'seat {seat}'}"
        self.pacing.schedule(
            TransitionKind.CARD, lambda: self._deal_to(hand, face_up, seat), label
        )

    def _after_deal(self) -> None:
        up_card = self.dealer_up_card
        if up_card is not None and up_card.is_ace:
            self.offer_insurance()
            self._awaiting_insurance = True
            self.events.emit_new(EventType.INSURANCE_OFFERED, insurance_advised=insurance_advised(self.count_signal))
            for player in self._seats_in_round():
                if not player.is_human:
                    self.pacing.schedule(
                        TransitionKind.DECISION,
                        functools.partial(self._npc_insurance, player),
                        f"{player.name} insurance",
                    )
            return
        self._settle_naturals_and_play()

    # ------------------------------------------------------------------
    # Insurance
    # ------------------------------------------------------------------

    def _take_insurance(self, player: Player, stake: Decimal) -> None:
        player.bankroll -= stake
        player.insurance_bet = stake
        self.events.emit_new(EventType.INSURANCE_TAKEN, seat=player.seat_number, amount=stake)

    def _npc_insurance(self, player: Player) -> None:
        stake = Decimal(player.current_bet) / 2
        if npc_takes_insurance(self.count_signal) and player.can_afford(stake):
            self._take_insurance(player, stake)
        else:
            self.events.emit_new(EventType.INSURANCE_DECLINED, seat=player.seat_number)

    def _complete_insurance(self) -> None:
        """Dealer peeks under the Ace once every seat has decided."""
        if self.dealer_hand.is_blackjack:
            self._reveal_hole_card()
            self.events.emit_new(EventType.DEALER_BLACKJACK)
            for player in self._seats_in_round():
                if player.insurance_bet > 0:
                    payout = player.insurance_bet * 3
                    player.bankroll += payout
                    self.events.emit_new(EventType.INSURANCE_WINS, seat=player.seat_number, amount=payout)
            self.pacing.schedule(TransitionKind.RESULT, self._settle_round, "settle")
            return

        for player in self._seats_in_round():
            if player.insurance_bet > 0:
                self.events.emit_new(
                    EventType.INSURANCE_LOSES, seat=player.seat_number, amount=player.insurance_bet
                )
        self._settle_naturals_and_play()

    # ------------------------------------------------------------------
    # Player turns
    # ------------------------------------------------------------------

    def _settle_naturals_and_play(self) -> None:
        """Stand every natural, then hand the turn to the first seat still playing."""
        for player in self._seats_in_round():
            hand = player.hands[0]
            if hand.is_blackjack:
                hand.is_finished = True
                self.events.emit_new(EventType.PLAYER_BLACKJACK, seat=player.seat_number)

        self.begin_play()
        self._turn = -1
        self._advance_turn()

    def _advance_turn(self) -> None:
        """Activate the next unfinished hand in table order, or start the dealer."""
        start = self._turn if self._turn is not None else -1
        if start >= 0 and self._activate_next_hand(self.players[start]):
            return

        for index in range(start + 1, len(self.players)):
            player = self.players[index]
            if player.in_round and not player.is_done:
                self._turn = index
                self._activate_next_hand(player)
                return

        self._turn = None
        self.begin_dealer_turn()
        self.pacing.schedule(TransitionKind.CARD, self._reveal_and_draw, "dealer reveals")

    def _activate_next_hand(self, player: Player) -> bool:
        for index, hand in enumerate(player.hands):
            if not hand.is_finished:
                player.current_hand_index = index
                hand.is_active = True
                self.events.emit_new(
                    EventType.TURN_CHANGED,
                    seat=player.seat_number,
                    hand_index=index,
                    player_type=player.player_type.value,
                )
                if not player.is_human:
                    self.pacing.schedule(
                        TransitionKind.DECISION,
                        functools.partial(self._npc_turn, player),
                        f"{player.name} decides",
                    )
                return True
        return False

    def _npc_turn(self, player: Player) -> None:
        hand = player.current_hand
        if hand is None or hand.is_finished or self.current_player is not player:
            return

        action = npc_action(
            hand,
            self.dealer_up_card,
            can_split=self._is_legal(player, Action.SPLIT, ignore_bankroll=True),
            can_double=self._is_legal(player, Action.DOUBLE, ignore_bankroll=True),
            has_bankroll=player.can_afford(hand.bet),
        )
        try:
            self._perform(player, action)
        except IllegalAction as exc:
            logger.warning("%s cannot %s (%s); standing", player.name, action, exc.message)
            self._perform(player, Action.STAND)

    def _is_legal(self, player: Player, action: Action, ignore_bankroll: bool = False) -> bool:
        try:
            self._validate(player, action)
        except IllegalAction as exc:
            return ignore_bankroll and exc.insufficient_funds
        return True

    def _perform(self, player: Player, action: Action) -> None:
        """Validate then apply one action for the seat in turn."""
        hand = self._validate(player, action)
        seat = player.seat_number

        if action == Action.HIT:
            self._deal_to(hand, seat=seat)
            self.events.emit_new(EventType.PLAYER_HIT, seat=seat, hand_value=hand.value)
            if hand.is_busted:
                self.events.emit_new(EventType.PLAYER_BUSTS, seat=seat, hand_index=player.current_hand_index)
                self._finish_hand(hand)
            elif not player.is_human:
                self.pacing.schedule(
                    TransitionKind.DECISION,
                    functools.partial(self._npc_turn, player),
                    f"{player.name} decides",
                )

        elif action == Action.STAND:
            self.events.emit_new(EventType.PLAYER_STAND, seat=seat, hand_value=hand.value)
            self._finish_hand(hand)

        elif action == Action.DOUBLE:
            player.bankroll -= hand.bet
            hand.bet *= 2
            hand.is_doubled = True
            self._deal_to(hand, seat=seat)
            self.events.emit_new(EventType.PLAYER_DOUBLE, seat=seat, hand_value=hand.value, new_bet=hand.bet)
            if hand.is_busted:
                self.events.emit_new(EventType.PLAYER_BUSTS, seat=seat, hand_index=player.current_hand_index)
            self._finish_hand(hand)

        elif action == Action.SPLIT:
            self._split(player, hand)

        elif action == Action.SURRENDER:
            hand.is_surrendered = True
            refund = Decimal(hand.bet) / 2
            player.bankroll += refund
            self.events.emit_new(EventType.PLAYER_SURRENDER, seat=seat, refund=refund)
            if player.is_human:
                self.last_result = RoundResult(
                    HandOutcome.SURRENDER, _RESULT_MESSAGES[HandOutcome.SURRENDER], -refund
                )
            self._finish_hand(hand)

    def _split(self, player: Player, hand: Hand) -> None:
        seat = player.seat_number
        player.bankroll -= hand.bet

        split_aces = hand.cards[0].is_ace
        new_hand = Hand(cards=[hand.cards.pop()], bet=hand.bet, is_split=True)
        hand.is_split = True
        player.hands.insert(player.current_hand_index + 1, new_hand)

        self._deal_to(hand, seat=seat)
        self._deal_to(new_hand, seat=seat)
        self.events.emit_new(
            EventType.PLAYER_SPLIT,
            seat=seat,
            hand1_value=hand.value,
            hand2_value=new_hand.value,
            hands=len(player.hands),
        )

        if split_aces and not self.settings.resplit_aces:
            # One card each on split aces, then both hands stand
            for split_hand in (hand, new_hand):
                split_hand.from_split_aces = True
                split_hand.is_finished = True
                split_hand.is_active = False
            self._advance_turn()
        elif not player.is_human:
            self.pacing.schedule(
                TransitionKind.DECISION,
                functools.partial(self._npc_turn, player),
                f"{player.name} decides",
            )

    def _finish_hand(self, hand: Hand) -> None:
        hand.is_finished = True
        hand.is_active = False
        self._advance_turn()

    # ------------------------------------------------------------------
    # Dealer turn and settlement
    # ------------------------------------------------------------------

    def _reveal_hole_card(self) -> None:
        if len(self.dealer_hand.cards) < 2 or self.dealer_hand.cards[1].face_up:
            return
        card = self.dealer_hand.cards[1].flipped(True)
        self.dealer_hand.cards[1] = card
        self.counter.reveal(card)
        self.events.emit_new(
            EventType.DEALER_REVEALS,
            card=str(card),
            hand_value=self.dealer_hand.value,
            running_count=self.counter.running_count,
        )

    def _hands_awaiting_dealer(self) -> bool:
        """Check whether any hand still needs comparing with a dealer total."""
        return any(
            not (hand.is_busted or hand.is_surrendered or hand.is_blackjack)
            for player in self._seats_in_round()
            for hand in player.hands
        )

    def _reveal_and_draw(self) -> None:
        self._reveal_hole_card()
        self._dealer_step()

    def _dealer_step(self) -> None:
        if self._hands_awaiting_dealer() and dealer_should_hit(
            self.dealer_hand, self.settings.dealer_hits_soft_17
        ):
            self._deal_to(self.dealer_hand)
            self.events.emit_new(EventType.DEALER_HITS, hand_value=self.dealer_hand.value)
            self.pacing.schedule(TransitionKind.CARD, self._dealer_step, "dealer draws")
            return

        if self.dealer_hand.is_blackjack:
            self.events.emit_new(EventType.DEALER_BLACKJACK)
        elif self.dealer_hand.is_busted:
            self.events.emit_new(EventType.DEALER_BUSTS, hand_value=self.dealer_hand.value)
        else:
            self.events.emit_new(EventType.DEALER_STANDS, hand_value=self.dealer_hand.value)
        self.pacing.schedule(TransitionKind.RESULT, self._settle_round, "settle")

    def _settle_round(self) -> None:
        """Pay every hand of every seat against the final dealer hand."""
        for player in self._seats_in_round():
            settled: list[tuple[HandOutcome, int]] = []
            for index, hand in enumerate(player.hands):
                outcome, credit = settle_hand(hand, self.dealer_hand)
                player.bankroll += credit
                hand.is_active = False
                hand.is_finished = True
                settled.append((outcome, hand.bet))
                self.events.emit_new(
                    EventType.HAND_SETTLED,
                    seat=player.seat_number,
                    hand_index=index,
                    outcome=outcome.value,
                    credited=credit,
                )

            profit = player.bankroll - player.round_start_bankroll
            player.last_bet = player.current_bet
            player.last_hand_won = profit > 0

            if player.is_human:
                self.last_result = self._round_result(settled, profit)
                self.statistics.record_round(settled, profit)

        self._round_settled = True
        self._turn = None
        self.finish_round()

        self.events.emit_new(
            EventType.ROUND_ENDED,
            outcome=self.last_result.outcome.value if self.last_result else None,
            profit=self.last_result.profit if self.last_result else Decimal("0"),
            bankroll=self.human.bankroll,
        )
        if self.needs_reshuffle:
            self.events.emit_new(EventType.RESHUFFLE_NEEDED, penetration=self.shoe.penetration)

        if self.last_result is not None:
            logger.info("Round ended: %s (%s)", self.last_result.outcome.value, self.last_result.profit)

    def _round_result(self, settled: list[tuple[HandOutcome, int]], profit: Decimal) -> RoundResult:
        outcomes = [outcome for outcome, _ in settled]

        if HandOutcome.SURRENDER in outcomes:
            outcome = HandOutcome.SURRENDER
        elif HandOutcome.PLAYER_BUST in outcomes:
            outcome = HandOutcome.PLAYER_BUST
        elif HandOutcome.BLACKJACK in outcomes:
            outcome = HandOutcome.BLACKJACK
        elif profit > 0 and self.dealer_hand.is_busted:
            outcome = HandOutcome.DEALER_BUST
        elif profit > 0:
            outcome = HandOutcome.WIN
        elif profit < 0:
            outcome = HandOutcome.LOSE
        else:
            outcome = HandOutcome.PUSH

        message = _RESULT_MESSAGES[outcome]
        if outcome == HandOutcome.LOSE and self.dealer_hand.is_blackjack:
            message = "Dealer has blackjack"
        return RoundResult(outcome, message, profit)

    # ------------------------------------------------------------------
    # Seats and settings
    # ------------------------------------------------------------------

    def _create_seats(self, settings: GameSettings) -> list[Player]:
        """Create seats in table order (first base, the highest seat, first)."""
        seats: list[Player] = []
        for seat in range(settings.num_seats, 0, -1):
            if seat == settings.player_seat:
                seats.append(
                    Player(
                        id=HUMAN_ID,
                        name="You",
                        player_type=PlayerType.HUMAN,
                        seat_number=seat,
                        bankroll=settings.bankroll,
                        betting_style=settings.style,
                    )
                )
            elif settings.play_with_npcs:
                seats.append(
                    Player(
                        id=f"npc-{seat}",
                        name=f"Player {seat}",
                        player_type=PlayerType.NPC,
                        seat_number=seat,
                        bankroll=settings.bankroll,
                        betting_style=BettingStyle(settings.npc_betting_style),
                    )
                )
        return seats

    def _size_npc_bet(self, player: Player, signal: float) -> None:
        bet = 0
        if player.bankroll >= self.settings.min_bet:
            bet = npc_bet(
                player.betting_style,
                signal,
                self.settings.min_bet,
                self.settings.max_bet,
                player.bankroll,
                player.last_bet,
                player.last_hand_won,
            )
        player.current_bet = bet
        if bet < self.settings.min_bet:
            player.sitting_out = True
            player.current_bet = 0
            self.events.emit_new(EventType.SEAT_SITS_OUT, seat=player.seat_number)

    def _seats_in_round(self) -> list[Player]:
        return [player for player in self.players if player.in_round]

    def _apply_settings(self, old: GameSettings, new: GameSettings) -> None:
        self.settings = new
        self.pacing.speed = PlaySpeed(new.play_speed)

        if new.counting_system != old.counting_system:
            self.counter.switch_system(new.counting)
        if new.num_decks != old.num_decks:
            self._needs_new_shoe = True
            self._shoe_ready = False

        layout = ("num_seats", "player_seat", "play_with_npcs", "bankroll", "npc_betting_style")
        if any(getattr(old, name) != getattr(new, name) for name in layout):
            self.players = self._create_seats(new)
        else:
            self.human.betting_style = new.style
        logger.info("Settings changed: %s", rule_variant_name(new))

    def _abandon_round(self) -> None:
        logger.warning("Shoe ran out in %s; voiding the round", self.phase.name)
        self.pacing.cancel()
        self._void_round()
        self._clear_table()
        self._shoe_ready = False
        self.events.emit_new(EventType.RESHUFFLE_NEEDED, penetration=self.shoe.penetration)
        self.abort_to_setup()

    def _void_round(self) -> None:
        if self._round_settled:
            return
        for player in self.players:
            if player.hands or player.insurance_bet:
                player.bankroll = player.round_start_bankroll
        self._round_settled = True
        self.events.emit_new(EventType.ROUND_VOIDED)
        logger.info("Round voided; bankrolls restored")

    def _clear_table(self) -> None:
        self.dealer_hand.clear()
        self._turn = None
        self._awaiting_insurance = False
        for player in self.players:
            player.reset_hands()
            player.current_bet = 0

    def _emit_phase_change(self, event: EventData) -> None:
        previous = RoundPhase[event.transition.source.upper()]
        if event.event.name not in _RESET_TRIGGERS and not is_valid_transition(previous, self.phase):
            logger.warning("Unexpected phase change %s -> %s", previous.name, self.phase.name)
        self.events.emit_new(EventType.PHASE_CHANGED, phase=self.phase.name, previous=previous.name)

    # ------------------------------------------------------------------
    # Coaching and snapshots
    # ------------------------------------------------------------------

    def recommended_bet(self) -> BetSuggestion:
        """Bet suggested by the human's betting style at the current count."""
        human = self.human
        return suggest_bet(
            human.betting_style,
            self.count_signal,
            self.settings.min_bet,
            self.settings.max_bet,
            human.bankroll,
            human.last_bet,
            human.last_hand_won,
        )

    def recommendation(self) -> tuple[StrategyAdvice, IndexPlay | None] | None:
        """
        Coach the human's current decision.

        Returns:
            (advice, deviation) where deviation is the index play being
            followed, or None when it is not the human's turn
        """
        player = self.current_player
        up_card = self.dealer_up_card
        if player is None or not player.is_human or up_card is None:
            return None
        hand = player.current_hand
        if hand is None or hand.is_finished:
            return None

        can_double = self.can_double
        can_split = self.can_split
        can_surrender = self.can_surrender
        advice = self.strategy.advise(hand.cards, up_card.rank, can_double, can_split)

        play = find_deviation(hand.cards, up_card.rank, self.count_signal, can_surrender)
        if play is not None:
            executable = {
                Action.DOUBLE: can_double,
                Action.SPLIT: can_split,
                Action.SURRENDER: can_surrender,
            }.get(play.deviation_action, True)
            if executable:
                return StrategyAdvice(play.deviation_action, play.description), play
        return advice, None

    def available_actions(self) -> tuple[str, ...]:
        """Controls the human can use right now."""
        phase = self.phase
        actions: list[str] = []
        if phase in (RoundPhase.SETUP, RoundPhase.BETTING, RoundPhase.ROUND_END):
            actions.append("start_new_shoe")
        if phase == RoundPhase.SETUP and self.shoe.is_loaded and not self._shoe_ready and not self._needs_new_shoe:
            actions += ["cut", "set_penetration_marker", "burn_top_card"]
        if phase == RoundPhase.BETTING:
            actions += ["place_bet", "clear_bet"]
            if self.human.last_bet > 0:
                actions.append("rebet")
            if self.human.current_bet >= self.settings.min_bet and not self.needs_reshuffle:
                actions.append("start_round")
        if phase == RoundPhase.INSURANCE and self._awaiting_insurance:
            actions.append("decide_insurance")
        for name, allowed in (
            ("hit", self.can_hit),
            ("stand", self.can_stand),
            ("double", self.can_double),
            ("split", self.can_split),
            ("surrender", self.can_surrender),
        ):
            if allowed:
                actions.append(name)
        if phase == RoundPhase.ROUND_END:
            actions.append("new_round")
        actions.append("reset")
        return tuple(actions)

    def snapshot(self) -> TableSnapshot:
        """Return an immutable view of the whole table."""
        current = self.current_player
        recommendation = self.recommendation()
        advice, play = recommendation if recommendation else (None, None)
        bet = self.recommended_bet()
        house_edge = HouseEdgeCalculator(self.settings).calculate()
        stats = self.statistics

        return TableSnapshot(
            phase=self.phase.name,
            dealer_hand=HandView.of(self.dealer_hand),
            seats=tuple(
                SeatView(
                    id=player.id,
                    name=player.name,
                    player_type=player.player_type.value,
                    seat_number=player.seat_number,
                    bankroll=player.bankroll,
                    current_bet=player.current_bet,
                    insurance_bet=player.insurance_bet,
                    betting_style=player.betting_style.value,
                    sitting_out=player.sitting_out,
                    is_current=player is current,
                    current_hand_index=player.current_hand_index,
                    hands=tuple(HandView.of(hand) for hand in player.hands),
                )
                for player in self.players
            ),
            current_seat_number=current.seat_number if current else None,
            human_seat_number=self.human.seat_number,
            counting_system=self.counter.system.name,
            running_count=self.running_count,
            true_count=round(self.true_count, 2),
            count_signal=round(self.count_signal, 2),
            aces_seen=self.counter.aces_seen,
            cards_remaining=self.shoe.cards_remaining,
            decks_remaining=decks_remaining(self.shoe.cards_remaining),
            penetration=self.shoe.penetration,
            penetration_marker=self.shoe.penetration_marker_position,
            needs_reshuffle=self.needs_reshuffle,
            available_actions=self.available_actions(),
            recommended_action=(
                AdviceView(action=advice.action.name.lower(), rationale=advice.rationale)
                if advice
                else None
            ),
            deviation=(
                DeviationView(
                    situation=play.situation,
                    basic_action=play.basic_action.name.lower(),
                    deviation_action=play.deviation_action.name.lower(),
                    index=play.index,
                    description=play.description,
                    edge_gain=play.edge_gain,
                )
                if play
                else None
            ),
            recommended_bet=BetAdviceView(amount=bet.amount, rationale=bet.rationale),
            insurance_advised=(
                insurance_advised(self.count_signal) if self.phase == RoundPhase.INSURANCE else None
            ),
            house_edge=house_edge,
            player_edge=player_edge(self.true_count, house_edge),
            rule_variant=rule_variant_name(self.settings),
            last_result=(
                RoundResultView(
                    outcome=self.last_result.outcome.value,
                    message=self.last_result.message,
                    profit=self.last_result.profit,
                )
                if self.last_result
                else None
            ),
            statistics=StatisticsView.model_validate(stats, from_attributes=True),
            pending_transitions=self.pacing.pending,
        )
