"""Property-based tests for time-weighted index accrual.

Validates invariants that must hold for any input:
1. Number arithmetic matches integer floor formulas
2. Escrow index never decreases and a single holder earns at most elapsed time
3. Gauge emission is conserved up to per-pool truncation
4. Every global index is non-decreasing across mixed deposits, withdrawals
   and vote changes
5. isoRAY slashing stays within [0, iso_ray]
6. Rate-matching never stages RAY twice for the same interval
"""

from hypothesis import given, strategies as st

from raygauge.core.domain import PersonalRewarderState, Reactor
from raygauge.core.math import SCALE, Number
from raygauge.escrow import LpEscrow
from raygauge.gauge import GaugeEmission, GaugeSettings, sync_and_stage
from raygauge.reactor import ReactorEngine, ReactorSettings, iso_ray_slash_amount
from tests.helpers import DAY, T0, address
from tests.strategies import (
    amounts,
    escrow_actions,
    nonzero_numbers,
    numbers,
    signed_actions,
    time_steps,
    vote_splits,
)


class TestNumberProperties:
    """Fixed-point арифметика."""

    @given(numbers(), numbers())
    def test_mul_truncates(self, a: Number, b: Number) -> None:
        assert (a * b).raw == a.raw * b.raw // SCALE

    @given(numbers(), nonzero_numbers())
    def test_div_truncates(self, a: Number, b: Number) -> None:
        assert (a / b).raw == a.raw * SCALE // b.raw

    @given(numbers())
    def test_floor_ceil_bracket(self, x: Number) -> None:
        assert x.floor() <= x <= x.ceil()
        assert x.ceil().raw - x.floor().raw in (0, SCALE)

    @given(numbers(), numbers())
    def test_add_sub_inverse(self, a: Number, b: Number) -> None:
        assert (a + b) - b == a

    @given(numbers())
    def test_decimal_string_roundtrip(self, x: Number) -> None:
        assert Number.from_decimal(str(x)) == x


class TestEscrowProperties:
    """Индекс LP escrow."""

    @given(escrow_actions())
    def test_index_non_decreasing(self, actions) -> None:
        escrow = LpEscrow()
        tracker = escrow.init_time_tracker(T0, address(0xA), address(0xE5C))
        r = escrow.init_personal_position(T0, tracker, address(0xA11CE))

        now = T0
        last_index = r.time_tracker.index
        last_earned = r.earned_time_units
        for step, amount in actions:
            now += step
            r = escrow.deposit(now, r.time_tracker, r.position, amount)
            assert r.time_tracker.index >= last_index
            assert r.earned_time_units >= last_earned
            last_index = r.time_tracker.index
            last_earned = r.earned_time_units

    @given(amounts(max_value=10**6), time_steps())
    def test_single_holder_earns_elapsed(self, amount: int, elapsed: int) -> None:
        """Единственный держатель получает elapsed time-units с точностью усечения"""
        escrow = LpEscrow()
        tracker = escrow.init_time_tracker(T0, address(0xA), address(0xE5C))
        r = escrow.init_personal_position(T0, tracker, address(0xA11CE))
        r = escrow.deposit(T0, r.time_tracker, r.position, amount)
        r = escrow.update_personal(T0 + elapsed, r.time_tracker, r.position)

        assert r.earned_time_units <= Number.from_natural(elapsed)
        assert r.earned_time_units.floor_to_int() >= elapsed - 1


class TestGaugeProperties:
    """Сохранение эмиссии между пулами."""

    @given(vote_splits(), amounts(max_value=10**9), time_steps(max_step=10 * DAY))
    def test_emission_conserved(self, votes: list[int], per_day: int, elapsed: int) -> None:
        emission = GaugeEmission(GaugeSettings(ray_emission_per_day=per_day))
        config = emission.init_gauge_config(T0)

        gauges = []
        for i, pool_votes in enumerate(votes):
            pool = emission.init_pool_gauge(T0, config, address(0x100 + i))
            voter = emission.init_personal_gauge(address(0x200 + i), pool.gauge)
            staker = Reactor(owner=address(0x200 + i), ray=pool_votes)
            voted = emission.change_votes(T0, pool.config, pool.gauge, voter, pool_votes, staker)
            config = voted.config
            gauges.append(voted.gauge)

        emitted = 0
        for gauge in gauges:
            synced = emission.sync_pool_index(T0 + elapsed, config, gauge)
            config = synced.config
            emitted += synced.gauge.total_ray_emitted

        # emitted <= per_day * elapsed / DAY < emitted + pools + 1
        assert emitted * DAY <= per_day * elapsed
        assert (emitted + len(votes) + 1) * DAY > per_day * elapsed


class TestMonotonicIndices:
    """Глобальные индексы не убывают при любой последовательности операций."""

    @given(signed_actions())
    def test_escrow_deposit_withdraw(self, actions) -> None:
        escrow = LpEscrow()
        tracker = escrow.init_time_tracker(T0, address(0xA), address(0xE5C))
        positions = []
        for owner in (address(0xA11CE), address(0xB0B)):
            r = escrow.init_personal_position(T0, tracker, owner)
            tracker = r.time_tracker
            positions.append(r.position)

        now = T0
        for step, who, change in actions:
            now += step
            position = positions[who]
            if change >= 0:
                r = escrow.deposit(now, tracker, position, change)
            else:
                r = escrow.withdraw(now, tracker, position, min(-change, position.amount))

            assert r.time_tracker.index >= tracker.index
            assert r.time_tracker.last_seen_ts >= tracker.last_seen_ts
            assert r.position.earned_time_units >= position.earned_time_units
            tracker = r.time_tracker
            positions[who] = r.position

        assert tracker.total_lp_deposited == sum(p.amount for p in positions)

    @given(signed_actions())
    def test_reactor_deposit_withdraw(self, actions) -> None:
        engine = ReactorEngine(ReactorSettings(ray_reward_daily_emission=100_000, iso_ray_apr_bps=5000))
        config = engine.init_reactor_config(T0)
        reactors = [engine.init_reactor(address(0xA11CE)), engine.init_reactor(address(0xB0B))]

        now = T0
        for step, who, change in actions:
            now += step
            reactor = reactors[who]
            if change >= 0:
                r = engine.deposit_ray(now, config, reactor, change)
            else:
                r = engine.withdraw_ray(now, config, reactor, min(-change, reactor.ray))

            assert r.config.ray_reward_index >= config.ray_reward_index
            assert r.config.iso_ray_index >= config.iso_ray_index
            assert r.config.rewards_emitted_until >= config.rewards_emitted_until
            config = r.config
            reactors[who] = r.reactor

        assert config.total_ray_deposited == sum(r.ray for r in reactors)

    @given(signed_actions())
    def test_gauge_pledge_unpledge(self, actions) -> None:
        emission = GaugeEmission(GaugeSettings(ray_emission_per_day=10**6))
        config = emission.init_gauge_config(T0)

        gauges, personal, reactors = [], [], []
        for i in range(2):
            pool = emission.init_pool_gauge(T0, config, address(0x100 + i))
            config = pool.config
            gauges.append(pool.gauge)
            personal.append(emission.init_personal_gauge(address(0x200 + i), pool.gauge))
            reactors.append(Reactor(owner=address(0x200 + i), ray=10**7))

        now = T0
        for step, who, change in actions:
            now += step
            if change >= 0:
                amount = min(change, reactors[who].free_votes)
            else:
                amount = -min(-change, personal[who].votes)

            previous_index = config.index
            previous_emitted = [g.total_ray_emitted for g in gauges]

            voted = emission.change_votes(now, config, gauges[who], personal[who], amount, reactors[who])
            config = voted.config
            gauges[who] = voted.gauge
            personal[who] = voted.personal_gauge
            reactors[who] = voted.reactor

            other = 1 - who
            synced = emission.sync_pool_index(now, config, gauges[other])
            config = synced.config
            gauges[other] = synced.gauge

            assert config.index >= previous_index
            for gauge, emitted in zip(gauges, previous_emitted):
                assert gauge.total_ray_emitted >= emitted

        assert config.total_votes == sum(p.votes for p in personal)
        assert [r.locked_votes for r in reactors] == [p.votes for p in personal]


class TestSlashingProperties:
    """Границы списания isoRAY."""

    @given(amounts(), st.data(), amounts(min_value=0))
    def test_slash_within_balance(self, ray_balance: int, data, iso_ray: int) -> None:
        decrease = data.draw(st.integers(min_value=0, max_value=ray_balance))
        slashed = iso_ray_slash_amount(ray_balance, decrease, iso_ray)
        assert 0 <= slashed <= iso_ray
        if decrease == 0:
            assert slashed == 0

    @given(amounts(), amounts(min_value=0))
    def test_full_withdraw_slashes_all(self, ray_balance: int, iso_ray: int) -> None:
        assert iso_ray_slash_amount(ray_balance, ray_balance, iso_ray) == iso_ray


class TestRewarderProperties:
    """Rate-matching rewarder."""

    @given(amounts(), amounts(min_value=0), st.data())
    def test_position_share_bounded_by_emission(self, delta_time: int, delta_ray: int, data) -> None:
        """Позиция с time-units <= Δ time получает не больше Δ RAY пула"""
        delta_units = data.draw(st.integers(min_value=0, max_value=delta_time))
        state = PersonalRewarderState(
            last_seen_time_units=Number.ZERO,
            last_seen_total_emitted_ray=0,
            last_updated_ts=T0,
        )
        result = sync_and_stage(state, T0 + delta_time, delta_ray, Number.from_natural(delta_units))
        assert 0 <= result.collected <= delta_ray

    @given(amounts(), amounts(min_value=0), amounts(min_value=0))
    def test_repeat_at_same_time_stages_nothing(self, delta_time: int, delta_ray: int, units: int) -> None:
        state = PersonalRewarderState(
            last_seen_time_units=Number.ZERO,
            last_seen_total_emitted_ray=0,
            last_updated_ts=T0,
        )
        now = T0 + delta_time
        first = sync_and_stage(state, now, delta_ray, Number.from_natural(units))
        second = sync_and_stage(first.state, now, delta_ray, Number.from_natural(units))
        assert second.collected == 0
        assert second.state.staged_ray == first.state.staged_ray
