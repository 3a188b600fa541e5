"""
Tests for the autoMALA transition kernel and chain driver.
"""

import dataclasses
import math
import unittest

import numpy as np
import pytest

import automala.num as gnp
import automala.mcmc.automala as am
from automala.mcmc.automala import (
    AutoMALAOptions,
    AutoMALAState,
    automala_init,
    automala_sample,
    automala_transition,
    sample_positions,
)
from automala.misc import targets


def run_chain(model, options, n, seed, x0=None):
    rng = gnp.default_rng(seed)
    state = automala_init(model, options, rng, x0)
    states = [state]
    for _ in range(n - 1):
        state = automala_transition(model, options, rng, state)
        states.append(state)
    return states


class TestInit(unittest.TestCase):
    def test_first_state(self):
        model = targets.standard_normal(3)
        options = AutoMALAOptions(epsilon_init=0.25, num_unadjusted=0)
        state = automala_init(model, options, gnp.default_rng(0))
        self.assertEqual(tuple(state.x.shape), (3,))
        self.assertEqual(tuple(state.p.shape), (3,))
        self.assertEqual(state.epsilon, 0.25)
        self.assertEqual(state.j, 0)
        self.assertTrue(state.isaccept)
        self.assertEqual(state.iteration, 1)
        self.assertTrue(0.0 < state.a <= state.b < 1.0)
        expected_lp = -0.5 * float(gnp.sum(state.x**2)) - 0.5 * float(gnp.sum(state.p**2))
        self.assertAlmostEqual(state.lp, expected_lp)

    def test_initial_position_is_used(self):
        model = targets.standard_normal(2)
        x0 = gnp.asarray([0.3, -0.2])
        state = automala_init(model, AutoMALAOptions(), gnp.default_rng(0), x0)
        self.assertTrue(np.array_equal(gnp.to_np(state.x), np.array([0.3, -0.2])))

    def test_initial_position_wrong_shape(self):
        model = targets.standard_normal(2)
        with self.assertRaises(ValueError):
            automala_init(model, AutoMALAOptions(), gnp.default_rng(0), gnp.asarray([0.0]))

    def test_int_seed(self):
        model = targets.standard_normal(2)
        s1 = automala_init(model, AutoMALAOptions(), 17)
        s2 = automala_init(model, AutoMALAOptions(), gnp.default_rng(17))
        self.assertTrue(np.array_equal(gnp.to_np(s1.x), gnp.to_np(s2.x)))
        self.assertEqual((s1.a, s1.b, s1.lp), (s2.a, s2.b, s2.lp))

    def test_transition_refuses_int_seed(self):
        model = targets.standard_normal(2)
        state = automala_init(model, AutoMALAOptions(), 17)
        with self.assertRaises(TypeError):
            automala_transition(model, AutoMALAOptions(), 17, state)

    def test_state_is_immutable(self):
        state = automala_init(targets.standard_normal(1), AutoMALAOptions(), gnp.default_rng(0))
        with self.assertRaises(dataclasses.FrozenInstanceError):
            state.epsilon = 2.0


class TestOptions(unittest.TestCase):
    def test_defaults(self):
        options = AutoMALAOptions()
        self.assertEqual(options.epsilon_init, 1.0)
        self.assertEqual(options.num_unadjusted, 1)
        self.assertIsNone(options.max_step_size_search)

    def test_epsilon_is_coerced_to_float(self):
        options = AutoMALAOptions(epsilon_init=2)
        self.assertIsInstance(options.epsilon_init, float)


def test_iteration_counter_increases_by_one():
    states = run_chain(targets.standard_normal(2), AutoMALAOptions(0.5, 0), 30, seed=1)
    assert [s.iteration for s in states] == list(range(1, 31))


def test_forced_acceptance_during_unadjusted_phase():
    # a step size far too large makes almost every adjusted proposal fail
    model = targets.standard_normal(4)
    options = AutoMALAOptions(epsilon_init=50.0, num_unadjusted=40)
    states = run_chain(model, options, 40, seed=2)
    assert all(s.isaccept for s in states)


def test_forced_acceptance_stops_at_num_unadjusted(monkeypatch):
    # forward and backward searches always disagree, so only forced steps
    # can be accepted
    calls = []

    def mismatched_selector(model, x, p, lp, a, b, epsilon_init, max_search=None):
        calls.append(None)
        return epsilon_init, len(calls) % 2

    monkeypatch.setattr(am, "step_size_selector", mismatched_selector)

    k = 5
    states = run_chain(targets.standard_normal(2), AutoMALAOptions(0.5, k), 10, seed=6)
    assert [s.isaccept for s in states[:k]] == [True] * k
    # the step out of iteration k is the first adjusted one
    assert states[k - 1].iteration == k
    assert not any(s.isaccept for s in states[k:])


def test_rejected_state_keeps_previous_position():
    model = targets.gaussian([1.0, -1.0], [[1.0, 0.8], [0.8, 1.0]])
    states = run_chain(model, AutoMALAOptions(1.5, 0), 200, seed=3)
    n_reject = 0
    for prev, cur in zip(states[:-1], states[1:]):
        if not cur.isaccept:
            n_reject += 1
            assert np.array_equal(gnp.to_np(cur.x), gnp.to_np(prev.x))
        else:
            assert not np.array_equal(gnp.to_np(cur.x), gnp.to_np(prev.x))
    assert 0 < n_reject < 199


def test_step_size_is_average_of_forward_and_backward(monkeypatch):
    calls = []
    selector = am.step_size_selector

    def recording_selector(*args, **kwargs):
        out = selector(*args, **kwargs)
        calls.append(out)
        return out

    monkeypatch.setattr(am, "step_size_selector", recording_selector)

    model = targets.standard_normal(2)
    options = AutoMALAOptions(0.7, 0)
    rng = gnp.default_rng(4)
    state = automala_init(model, options, rng)
    for _ in range(20):
        calls.clear()
        state = automala_transition(model, options, rng, state)
        assert len(calls) == 2
        (eps_fwd, j_fwd), (eps_bwd, j_bwd) = calls
        assert state.epsilon == (eps_fwd + eps_bwd) / 2
        assert state.j == j_fwd
        if j_fwd != j_bwd:
            assert not state.isaccept


def test_deterministic_given_seed():
    model = targets.standard_normal(1)
    options = AutoMALAOptions(epsilon_init=0.5, num_unadjusted=0)
    x0 = gnp.asarray([0.0])

    def triples():
        states = run_chain(model, options, 6, seed=2024, x0=x0)
        return [(gnp.to_scalar(s.x[0]), s.epsilon, s.isaccept) for s in states[1:]]

    first = triples()
    assert len(first) == 5
    assert first == triples()


def test_evaluator_failure_aborts_chain():
    def log_prob(x):
        if gnp.to_scalar(x[0]) > 0.5:
            raise ArithmeticError("outside support")
        return -0.5 * gnp.sum(x * x)

    from automala.model import LogDensityModel

    model = LogDensityModel(log_prob, 1, grad_log_prob=lambda x: -x)
    with pytest.raises(ArithmeticError):
        run_chain(model, AutoMALAOptions(1.0, 0), 200, seed=0, x0=gnp.asarray([0.0]))


class TestSample(unittest.TestCase):
    def test_length_and_discard(self):
        model = targets.standard_normal(2)
        states = automala_sample(
            model, AutoMALAOptions(0.5, 0), num_samples=25, rng=0, discard_initial=10
        )
        self.assertEqual(len(states), 25)
        self.assertEqual(states[0].iteration, 11)
        self.assertEqual(states[-1].iteration, 35)

    def test_same_seed_same_chain(self):
        model = targets.standard_normal(2)
        s1 = automala_sample(model, AutoMALAOptions(0.5, 0), num_samples=10, rng=9)
        s2 = automala_sample(model, AutoMALAOptions(0.5, 0), num_samples=10, rng=9)
        self.assertTrue(
            np.array_equal(gnp.to_np(sample_positions(s1)), gnp.to_np(sample_positions(s2)))
        )

    def test_callback(self):
        seen = []
        model = targets.standard_normal(1)
        automala_sample(model, num_samples=7, rng=0, discard_initial=3, callback=seen.append)
        self.assertEqual([s.iteration for s in seen], list(range(4, 11)))

    def test_invalid_arguments(self):
        model = targets.standard_normal(1)
        with self.assertRaises(ValueError):
            automala_sample(model, num_samples=0)
        with self.assertRaises(ValueError):
            automala_sample(model, num_samples=5, discard_initial=-1)
        with self.assertRaises(TypeError):
            automala_sample(model, num_samples=5, rng="seed")

    def test_sample_positions_shape(self):
        model = targets.standard_normal(3)
        states = automala_sample(model, num_samples=12, rng=1)
        self.assertEqual(tuple(sample_positions(states).shape), (12, 3))

    def test_progress_and_logging(self):
        model = targets.standard_normal(1)
        with self.assertLogs("automala", level="INFO") as cm:
            automala_sample(
                model, num_samples=20, rng=0, progress=True, verbose=1, log_every=10
            )
        self.assertTrue(any("iter 20/20" in line for line in cm.output))


def test_standard_normal_moments():
    model = targets.standard_normal(1)
    states = automala_sample(
        model, AutoMALAOptions(0.8, 0), num_samples=4000, rng=123, discard_initial=200
    )
    x = gnp.to_np(sample_positions(states))[:, 0]
    assert abs(np.mean(x)) < 0.2
    assert abs(np.var(x) - 1.0) < 0.3
    acc = np.mean([s.isaccept for s in states])
    assert 0.3 < acc <= 1.0
    assert all(math.isfinite(s.epsilon) and s.epsilon > 0 for s in states)


if __name__ == "__main__":
    unittest.main()
