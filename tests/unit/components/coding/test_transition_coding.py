"""Tests for multiplicity coding of state transitions."""

import logging

import pytest

from sirsnet.components.coding import TransitionDecoder, apply_multiplicity, encode_transition
from sirsnet.constants import Compartment

S, I, R = Compartment.SUSCEPTIBLE, Compartment.INFECTED, Compartment.RECOVERED


class TestEncoding:

    @pytest.mark.parametrize("old, new, m", [(S, I, 2), (I, R, 2), (R, S, 1)])
    def test_transition_multiplicities(self, old, new, m):
        assert encode_transition(old, new) == m

    @pytest.mark.parametrize("state", [S, I, R])
    def test_no_change_no_signal(self, state):
        assert encode_transition(state, state) is None

    @pytest.mark.parametrize("old, new", [(S, R), (I, S), (R, I)])
    def test_non_edges_rejected(self, old, new):
        with pytest.raises(ValueError):
            encode_transition(old, new)

    def test_apply_multiplicity(self):
        assert apply_multiplicity(S, 2) == I
        assert apply_multiplicity(I, 2) == R
        assert apply_multiplicity(R, 1) == S
        with pytest.raises(ValueError):
            apply_multiplicity(R, 2)


class TestDecoder:

    def test_follows_full_cycle(self):
        decoder = TransitionDecoder()
        assert decoder.observe(4, 2, stamp=10) == (S, I)
        assert decoder.observe(4, 2, stamp=20) == (I, R)
        assert decoder.observe(4, 1, stamp=30) == (R, S)
        assert decoder.decoded_state(4) == S

    def test_registered_start_state(self):
        decoder = TransitionDecoder()
        decoder.register(1, I)
        assert decoder.observe(1, 2, stamp=0) == (I, R)

    def test_split_pair_is_one_up_transition(self):
        """Two multiplicity-1 events with the same sender and stamp form one up-transition."""
        decoder = TransitionDecoder()

        assert decoder.observe(2, 1, stamp=7) is None
        assert decoder.decoded_state(2) == S
        assert decoder.observe(2, 1, stamp=7) == (S, I)
        assert decoder.decoded_state(2) == I

    def test_halves_with_different_stamps_do_not_pair(self):
        decoder = TransitionDecoder()
        decoder.register(2, I)

        assert decoder.observe(2, 1, stamp=7) is None
        assert decoder.observe(2, 1, stamp=8) is None
        assert decoder.decoded_state(2) == I

    def test_inconsistent_event_is_counted(self, caplog):
        decoder = TransitionDecoder()
        decoder.register(9, R)

        with caplog.at_level(logging.WARNING):
            assert decoder.observe(9, 2, stamp=1) is None

        assert decoder.n_inconsistent == 1
        assert decoder.decoded_state(9) == R
        assert "sender 9" in caplog.text

    def test_counts_per_state(self):
        decoder = TransitionDecoder()
        decoder.register(0, S)
        decoder.register(1, I)
        decoder.register(2, I)
        assert decoder.n_in_state(I) == 2
        assert decoder.n_in_state(R) == 0

        decoder.reset()
        assert decoder.n_in_state(I) == 0
        assert decoder.decoded_state(1) == S
