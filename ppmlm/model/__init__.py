"""Adaptive PPM character-level language model."""

from ppmlm.model.config import PPMConfig
from ppmlm.model.controller import PPMLanguageModel
from ppmlm.model.estimator import EscapeMethod, OrderContribution, PPMEstimator
from ppmlm.model.trie import COUNT_MAX, ContextTrie, TrieNode
from ppmlm.model.vocabulary import OOV, OOV_ID, ROOT, ROOT_ID, UnknownIdError, Vocabulary

__all__ = [
    "COUNT_MAX",
    "ContextTrie",
    "EscapeMethod",
    "OOV",
    "OOV_ID",
    "OrderContribution",
    "PPMConfig",
    "PPMEstimator",
    "PPMLanguageModel",
    "ROOT",
    "ROOT_ID",
    "TrieNode",
    "UnknownIdError",
    "Vocabulary",
]
