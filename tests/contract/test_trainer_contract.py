from __future__ import annotations

import copy
from typing import List

import numpy as np
import pytest

from backpropnet.core.network import DimensionMismatchError, Network, Topology
from backpropnet.core.types import Batch, Dataset, EpochReport
from backpropnet.training.trainer import ConfigurationError, SGDOptimizer, Trainer


class _Capture:
    def __init__(self) -> None:
        self.history: List[EpochReport] = []

    def on_epoch(self, report: EpochReport) -> None:
        self.history.append(report)


def _clusters(samples_per_class: int, seed: int) -> Dataset:
    rng = np.random.default_rng(seed)
    centers = np.array([[-2.0, -2.0], [2.0, 2.0], [2.0, -2.0]])
    labels = np.repeat(np.arange(3), samples_per_class)
    inputs = centers[labels] + 0.3 * rng.standard_normal((labels.size, 2))
    return Dataset(inputs=inputs, targets=np.eye(3)[labels])


def _trainer(sizes, seed=0, lr=3.0, callbacks=None) -> Trainer:
    rng = np.random.default_rng(seed)
    network = Network(Topology(sizes))
    network.randomize(rng)
    return Trainer(network, SGDOptimizer(lr=lr), rng, callbacks=callbacks)


def test_reports_every_epoch_and_learns_separable_data():
    capture = _Capture()
    trainer = _trainer([2, 8, 3], seed=1, callbacks=[capture])
    train = _clusters(50, seed=2)
    test = _clusters(20, seed=3)

    result = trainer.run(train, test, epochs=30, batch_size=10)

    assert result.epochs == 30
    assert [r.epoch for r in capture.history] == list(range(30))
    assert all(r.total == 60 for r in capture.history)
    assert capture.history == result.reports
    assert capture.history[-1].accuracy >= 0.8


def test_runs_are_reproducible_with_the_same_seed():
    train = _clusters(20, seed=4)
    test = _clusters(5, seed=5)
    first = _trainer([2, 4, 3], seed=9)
    second = _trainer([2, 4, 3], seed=9)
    first.run(train, test, epochs=3, batch_size=7)
    second.run(train, test, epochs=3, batch_size=7)
    for key, value in first.network.state_dict().items():
        assert np.array_equal(value, second.network.state_dict()[key])


def test_zero_epochs_leaves_network_untouched():
    capture = _Capture()
    trainer = _trainer([2, 4, 3], callbacks=[capture])
    before = trainer.network.state_dict()
    result = trainer.run(_clusters(4, 0), _clusters(2, 1), epochs=0, batch_size=4)
    assert result.reports == []
    assert capture.history == []
    for key, value in trainer.network.state_dict().items():
        assert np.array_equal(value, before[key])


def test_full_batch_epoch_applies_one_averaged_update():
    train = _clusters(4, seed=6)
    trainer = _trainer([2, 3, 3], seed=2, lr=0.5)
    expected = Network(Topology([2, 3, 3]))
    expected.load_state_dict(trainer.network.state_dict())
    averaged = trainer.accumulate(train)  # order does not change a full-batch mean
    for idx, layer in enumerate(expected.trainable_layers()):
        grad_w, grad_b = averaged.layer_gradients(layer)
        expected.weights[idx] -= 0.5 * grad_w
        expected.biases[idx] -= 0.5 * grad_b

    trainer.run(train, train, epochs=1, batch_size=len(train))

    for key, value in trainer.network.state_dict().items():
        assert np.allclose(value, expected.state_dict()[key], rtol=1e-10, atol=1e-12)


def test_short_final_batch_is_averaged_over_its_own_size():
    train = _clusters(2, seed=8).take(5)
    trainer = _trainer([2, 3, 3], seed=3, lr=0.5)
    expected = Network(Topology([2, 3, 3]))
    expected.load_state_dict(trainer.network.state_dict())
    replay = Trainer(expected, SGDOptimizer(lr=0.5), copy.deepcopy(trainer.rng))

    order = copy.deepcopy(trainer.rng).permutation(len(train))
    head, tail = order[:3], order[3:]
    for rows in (head, tail):
        batch = Batch(inputs=train.inputs[rows], targets=train.targets[rows])
        averaged = replay.accumulate(batch)
        for idx, layer in enumerate(expected.trainable_layers()):
            grad_w, grad_b = averaged.layer_gradients(layer)
            expected.weights[idx] -= 0.5 * grad_w
            expected.biases[idx] -= 0.5 * grad_b

    trainer.run(train, train, epochs=1, batch_size=3)

    for key, value in trainer.network.state_dict().items():
        assert np.allclose(value, expected.state_dict()[key], rtol=1e-10, atol=1e-12)


def test_short_final_batch_is_not_padded_to_batch_size():
    trainer = _trainer([2, 3, 3], seed=3)
    tail = Batch(inputs=np.array([[1.0, -1.0], [0.5, 0.5]]), targets=np.eye(3)[[0, 2]])
    pair = trainer.accumulate(tail)
    single = [
        trainer.accumulate(Batch(inputs=x[None, :], targets=y[None, :]))
        for x, y in zip(tail.inputs, tail.targets)
    ]
    for layer in range(trainer.network.num_layers):
        assert np.allclose(pair.errors[layer], (single[0].errors[layer] + single[1].errors[layer]) / 2)


@pytest.mark.parametrize("batch_size", [0, -3, 13])
def test_invalid_batch_size_fails_fast(batch_size):
    trainer = _trainer([2, 3, 3])
    with pytest.raises(ConfigurationError):
        trainer.run(_clusters(4, 0), _clusters(1, 0), epochs=1, batch_size=batch_size)


def test_negative_epochs_fail_fast():
    trainer = _trainer([2, 3, 3])
    with pytest.raises(ConfigurationError):
        trainer.run(_clusters(4, 0), _clusters(1, 0), epochs=-1, batch_size=2)


@pytest.mark.parametrize("lr", [0.0, -1.0])
def test_non_positive_learning_rate_is_rejected(lr):
    with pytest.raises(ConfigurationError):
        SGDOptimizer(lr=lr)


def test_dataset_width_must_match_topology():
    trainer = _trainer([3, 3, 3])
    with pytest.raises(DimensionMismatchError):
        trainer.run(_clusters(4, 0), _clusters(1, 0), epochs=1, batch_size=2)
    trainer = _trainer([2, 3, 4])
    with pytest.raises(DimensionMismatchError):
        trainer.run(_clusters(4, 0), _clusters(1, 0), epochs=1, batch_size=2)


def test_evaluate_counts_argmax_matches():
    trainer = _trainer([2, 3, 3])
    test = _clusters(5, seed=7)
    correct, total = trainer.evaluate(test)
    assert total == 15
    assert 0 <= correct <= 15
