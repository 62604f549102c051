"""Behavioural tests for the online PPM language model."""

from __future__ import annotations

import logging

import numpy as np
import pytest

from ppmlm.model.config import PPMConfig
from ppmlm.model.controller import PPMLanguageModel
from ppmlm.model.estimator import EscapeMethod
from ppmlm.model.trie import ContextTrie
from ppmlm.model.vocabulary import OOV, OOV_ID, Vocabulary


@pytest.fixture()
def alternating_model() -> PPMLanguageModel:
    """N=2 over closed {a, b}, trained on a,b,a,b,a."""

    model = PPMLanguageModel(2, vocabulary=Vocabulary("ab", closed=True))
    model.observe_many("ababa")
    return model


def test_fresh_model_predicts_only_oov() -> None:
    assert PPMLanguageModel(3).predict() == {OOV: 1.0}

    closed = PPMLanguageModel(3, vocabulary=Vocabulary("ab", closed=True))
    assert closed.predict() == {OOV: 1.0, "a": 0.0, "b": 0.0}


def test_alternating_sequence_favours_the_alternate_symbol(
    alternating_model: PPMLanguageModel,
) -> None:
    model = alternating_model
    dist = model.predict()

    assert model.context == ("b", "a")
    assert model.order == 2
    assert dist["b"] > dist["a"]
    # Order 2 ("ba") has seen only b once; order 1 ("a") adds nothing new;
    # the root prices a=3 with b excluded.
    assert dist["b"] == pytest.approx(0.5)
    assert dist["a"] == pytest.approx(0.375)
    assert dist[OOV] == pytest.approx(0.125)


def test_reset_reproduces_the_root_distribution(alternating_model: PPMLanguageModel) -> None:
    model = alternating_model
    nodes_before = len(model.trie)
    model.reset()

    root = model.trie.node(model.trie.root)
    distinct = len(root.counts)
    denom = root.total + distinct
    vocab = model.vocabulary
    expected = {OOV: distinct / denom}
    for symbol in vocab.symbols():
        expected[symbol] = root.counts.get(vocab.id_of(symbol), 0) / denom

    dist = model.predict()
    assert model.context == ()
    assert len(model.trie) == nodes_before
    assert dist.keys() == expected.keys()
    for symbol, prob in expected.items():
        assert dist[symbol] == pytest.approx(prob, abs=1e-15)
    assert dist["a"] == pytest.approx(3 / 7)
    assert dist["b"] == pytest.approx(2 / 7)


def test_predict_is_idempotent(alternating_model: PPMLanguageModel) -> None:
    first_ids = alternating_model.predict_ids()
    second_ids = alternating_model.predict_ids()
    np.testing.assert_array_equal(first_ids, second_ids)
    assert alternating_model.predict() == alternating_model.predict()


def test_observe_increments_every_suffix_context_by_one() -> None:
    rng = np.random.default_rng(11)
    model = PPMLanguageModel(3)
    for raw in rng.integers(0, 6, size=500):
        symbol = int(raw)
        chain = model.trie.backoff_chain(model.context_node)
        symbol_id = model.vocabulary.lookup(symbol)
        before = [model.trie.count_of(node, symbol_id) for node in chain]
        totals_before = [model.trie.node(node).total for node in chain]

        model.observe(symbol)

        symbol_id = model.vocabulary.lookup(symbol)
        after = [model.trie.count_of(node, symbol_id) for node in chain]
        totals_after = [model.trie.node(node).total for node in chain]
        assert after == [b + 1 for b in before]
        assert totals_after == [t + 1 for t in totals_before]


def test_distribution_is_valid_after_every_observation() -> None:
    rng = np.random.default_rng(2)
    model = PPMLanguageModel(4)
    seen: set[int] = set()
    for raw in rng.integers(0, 9, size=400):
        symbol = int(raw)
        model.observe(symbol)
        seen.add(symbol)
        dist = model.predict()

        assert sum(dist.values()) == pytest.approx(1.0, abs=1e-9)
        assert all(p >= 0.0 for p in dist.values())
        assert dist[OOV] > 0.0
        assert all(dist[s] > 0.0 for s in seen)


def test_no_symbol_is_priced_at_two_orders() -> None:
    model = PPMLanguageModel(3)
    for symbol in "the quick brown fox jumps over the lazy dog, then the fox rests":
        model.observe(symbol)
        assigned = [
            symbol_id
            for contribution in model.estimator.contributions(model.context_node)
            for symbol_id in contribution.assigned
        ]
        assert len(assigned) == len(set(assigned))
        assert OOV_ID not in assigned


def test_context_pointer_never_exceeds_max_order() -> None:
    model = PPMLanguageModel(2)
    for symbol in "abracadabra":
        model.observe(symbol)
        assert model.order <= 2
    assert model.context == ("r", "a")
    assert max(node.order for _, node in model.trie.iter_nodes()) == 2


def test_stream_start_uses_shorter_contexts() -> None:
    model = PPMLanguageModel(5)
    model.observe("x")
    assert model.order == 1
    model.observe("y")
    assert model.context == ("x", "y")


def test_closed_vocabulary_flag_builds_a_closed_vocabulary() -> None:
    model = PPMLanguageModel(3, closed_vocabulary=True)
    model.observe("a")

    assert model.vocabulary.is_closed
    assert model.vocabulary.size() == 2
    assert model.predict() == {OOV: 1.0}


def test_closed_vocabulary_oov_event_resets_context_without_counting() -> None:
    vocab = Vocabulary("ab", closed=True)
    model = PPMLanguageModel(3, vocabulary=vocab)
    model.observe_many("ab")
    root_before = dict(model.trie.node(model.trie.root).counts)

    model.observe("z")

    assert model.order == 0
    assert model.trie.node(model.trie.root).counts == root_before
    assert vocab.size() == 4
    dist = model.predict()
    assert model.probability("z") == dist[OOV]
    assert dist[OOV] > 0.0


def test_open_vocabulary_grows_and_novel_symbols_get_oov_mass() -> None:
    model = PPMLanguageModel(2)
    model.observe_many("aab")
    oov_mass = model.predict()[OOV]

    assert model.probability("q") == oov_mass
    assert model.vocabulary.size() == 4
    model.observe("q")
    assert model.vocabulary.size() == 5
    assert model.predict()["q"] > 0.0


def test_models_can_share_vocabulary_and_trie() -> None:
    vocab = Vocabulary()
    trie = ContextTrie(3)
    writer = PPMLanguageModel(3, vocabulary=vocab, trie=trie)
    reader = PPMLanguageModel(3, vocabulary=vocab, trie=trie)

    writer.observe_many("hello")

    assert reader.order == 0
    assert reader.predict()["l"] == pytest.approx(writer.trie.count_of(trie.root, vocab.id_of("l")) / (5 + 4))
    reader.observe("h")
    assert reader.context == ("h",)
    assert writer.context == ("l", "l", "o")


def test_shared_trie_must_match_max_order() -> None:
    with pytest.raises(ValueError):
        PPMLanguageModel(3, trie=ContextTrie(2))


@pytest.mark.parametrize("bad_order", [0, -2])
def test_max_order_must_be_positive(bad_order: int) -> None:
    with pytest.raises(ValueError):
        PPMLanguageModel(bad_order)


def test_from_config_applies_every_field() -> None:
    config = PPMConfig(max_order=4, escape_method="d", closed_vocabulary=True)
    model = PPMLanguageModel.from_config(config)

    assert model.max_order == 4
    assert model.escape_method is EscapeMethod.D
    assert model.vocabulary.is_closed


@pytest.mark.parametrize(
    "config",
    [PPMConfig(max_order=0), PPMConfig(escape_method="Z"), PPMConfig(debug_max_messages=-1)],
)
def test_invalid_config_is_rejected(config: PPMConfig) -> None:
    with pytest.raises(ValueError):
        config.validate()


def test_top_k_ranks_known_symbols() -> None:
    model = PPMLanguageModel(2)
    model.observe_many("aaab")
    model.reset()
    dist = model.predict()

    ranked = model.top_k(5)
    assert [symbol for symbol, _ in ranked] == ["a", "b"]
    assert ranked[0][1] == pytest.approx(dist["a"])
    assert model.top_k(0) == []
    with pytest.raises(ValueError):
        model.top_k(-1)


def test_debug_logging_reports_oov_events(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="ppmlm.model.controller")
    model = PPMLanguageModel(2, vocabulary=Vocabulary("ab", closed=True), debug=True)
    model.observe_many("abz")
    model.predict()

    messages = [record.getMessage() for record in caplog.records]
    assert any("OOV event" in message for message in messages)
    assert any("predict" in message for message in messages)


def test_debug_logging_is_capped(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="ppmlm.model.controller")
    model = PPMLanguageModel(
        2, vocabulary=Vocabulary("a", closed=True), debug=True, debug_max_messages=2
    )
    model.observe_many("zzzzz")

    assert len(caplog.records) == 2
