"""Tests for the workflow session coalescer."""

import re
import threading

import pytest

from blogsmith.core.modules.workflow.coalescer import SessionCoalescer
from blogsmith.errors import ValidationError

MINUTE = 60_000


class TestMintToken:
    """Tests for mint_token."""

    @pytest.fixture(autouse=True)
    def setup(self, clock):
        self.clock = clock
        self.coalescer = SessionCoalescer(clock=clock)

    def test_token_format(self):
        token = self.coalescer.mint_token("u1")
        assert token == f"session_u1_{self.clock.now}"
        assert re.fullmatch(r"session_u1_\d+", token)

    def test_timestamp_non_decreasing(self):
        first = self.coalescer.mint_token("u1")
        self.clock.advance_minutes(1)
        second = self.coalescer.mint_token("u1")
        assert int(second.rsplit("_", 1)[1]) >= int(first.rsplit("_", 1)[1])

    def test_mint_does_not_store(self):
        self.coalescer.mint_token("u1")
        assert len(self.coalescer) == 0

    def test_empty_user_id_rejected(self):
        with pytest.raises(ValidationError, match="User id is required"):
            self.coalescer.mint_token("")

    def test_default_clock_uses_wall_time(self):
        token = SessionCoalescer().mint_token("u1")
        assert int(token.rsplit("_", 1)[1]) > 1_600_000_000_000


class TestGetOrCreate:
    """Tests for get_or_create."""

    @pytest.fixture(autouse=True)
    def setup(self, clock):
        self.clock = clock
        self.coalescer = SessionCoalescer(clock=clock)

    def test_immediate_calls_return_same_token(self):
        assert self.coalescer.get_or_create("u1", 30) == self.coalescer.get_or_create("u1", 30)
        assert len(self.coalescer) == 1

    def test_new_token_is_stored_with_creation_time(self):
        token = self.coalescer.get_or_create("u1")
        [record] = self.coalescer.records()
        assert record.token == token
        assert record.user_id == "u1"
        assert record.created_at == self.clock.now
        assert token in self.coalescer

    def test_reused_within_window(self):
        token_a = self.coalescer.get_or_create("u1", 30)
        self.clock.advance_minutes(10)
        assert self.coalescer.get_or_create("u1", 30) == token_a

    def test_new_token_after_window(self):
        token_a = self.coalescer.get_or_create("u1", 30)
        self.clock.advance_minutes(10)
        assert self.coalescer.get_or_create("u1", 30) == token_a
        self.clock.advance_minutes(21)
        token_b = self.coalescer.get_or_create("u1", 30)
        assert token_b != token_a
        assert token_b.startswith("session_u1_")

    def test_window_boundary(self):
        token = self.coalescer.get_or_create("u1", 30)
        self.clock.now += 30 * MINUTE - 1
        assert self.coalescer.get_or_create("u1", 30) == token
        self.clock.now += 1
        assert self.coalescer.get_or_create("u1", 30) != token

    def test_strictly_past_window_mints_new(self):
        token = self.coalescer.get_or_create("u1", 5)
        self.clock.now += 5 * MINUTE + 1
        assert self.coalescer.get_or_create("u1", 5) != token

    def test_stale_record_is_kept(self):
        self.coalescer.get_or_create("u1", 30)
        self.clock.advance_minutes(31)
        self.coalescer.get_or_create("u1", 30)
        assert len(self.coalescer) == 2

    def test_stale_record_reachable_with_larger_window(self):
        token = self.coalescer.get_or_create("u1", 30)
        self.clock.advance_minutes(31)
        assert self.coalescer.get_or_create("u1", 60) == token

    def test_users_are_independent(self):
        token_1 = self.coalescer.get_or_create("u1")
        token_2 = self.coalescer.get_or_create("u2")
        assert token_1 != token_2
        assert token_2.startswith("session_u2_")

    def test_user_id_prefix_does_not_match_other_user(self):
        token_long = self.coalescer.get_or_create("u1_extra")
        token_short = self.coalescer.get_or_create("u1")
        assert token_short != token_long

    def test_first_match_in_insertion_order(self):
        first = self.coalescer.get_or_create("u1", 30)
        self.clock.advance_minutes(20)
        second = self.coalescer.get_or_create("u1", 10)
        assert second != first
        # Both records are within a 30 minute window; the older one was inserted first
        assert self.coalescer.get_or_create("u1", 30) == first

    def test_default_window_is_thirty_minutes(self):
        token = self.coalescer.get_or_create("u1")
        self.clock.advance_minutes(29)
        assert self.coalescer.get_or_create("u1") == token
        self.clock.advance_minutes(2)
        assert self.coalescer.get_or_create("u1") != token

    def test_empty_user_id_rejected(self):
        with pytest.raises(ValidationError):
            self.coalescer.get_or_create("")
        assert len(self.coalescer) == 0

    def test_non_positive_window_rejected(self):
        with pytest.raises(ValidationError, match="window_minutes must be positive"):
            self.coalescer.get_or_create("u1", 0)

    def test_concurrent_first_calls_share_one_token(self):
        tokens: list[str] = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            tokens.append(self.coalescer.get_or_create("u1"))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(set(tokens)) == 1
        assert len(self.coalescer) == 1


class TestPruneExpired:
    """Tests for prune_expired."""

    @pytest.fixture(autouse=True)
    def setup(self, clock):
        self.clock = clock
        self.coalescer = SessionCoalescer(clock=clock)

    def test_removes_after_max_age(self):
        self.coalescer.get_or_create("u1")
        self.clock.now += 60 * MINUTE + 1
        assert self.coalescer.prune_expired(60) == 1
        assert len(self.coalescer) == 0

    def test_keeps_before_max_age(self):
        self.coalescer.get_or_create("u1")
        self.clock.now += 60 * MINUTE - 1
        assert self.coalescer.prune_expired(60) == 0
        assert len(self.coalescer) == 1

    def test_keeps_at_exact_max_age(self):
        self.coalescer.get_or_create("u1")
        self.clock.now += 60 * MINUTE
        self.coalescer.prune_expired(60)
        assert len(self.coalescer) == 1

    def test_all_users_pruned(self):
        self.coalescer.get_or_create("u1")
        self.coalescer.get_or_create("u2")
        self.clock.advance_minutes(61)
        self.coalescer.prune_expired(60)
        assert self.coalescer.records() == []

    def test_only_expired_removed(self):
        self.coalescer.get_or_create("u1")
        self.clock.advance_minutes(45)
        fresh = self.coalescer.get_or_create("u2")
        self.clock.advance_minutes(20)
        self.coalescer.prune_expired(60)
        assert [r.token for r in self.coalescer.records()] == [fresh]

    def test_idempotent(self):
        self.coalescer.get_or_create("u1")
        self.clock.advance_minutes(30)
        self.coalescer.get_or_create("u2", 10)
        self.clock.advance_minutes(40)
        self.coalescer.prune_expired(60)
        after_first = self.coalescer.records()
        assert self.coalescer.prune_expired(60) == 0
        assert self.coalescer.records() == after_first

    def test_pruned_user_gets_new_token(self):
        token = self.coalescer.get_or_create("u1", 30)
        self.clock.advance_minutes(61)
        self.coalescer.prune_expired()
        assert self.coalescer.get_or_create("u1", 120) != token

    def test_non_positive_max_age_rejected(self):
        with pytest.raises(ValidationError, match="max_age_minutes must be positive"):
            self.coalescer.prune_expired(-1)
