"""Construction parameters for `PPMLanguageModel`."""

from __future__ import annotations

from dataclasses import dataclass

from ppmlm.model.estimator import EscapeMethod


@dataclass(frozen=True)
class PPMConfig:
    """Configuration for an adaptive PPM model.

    Tuning notes:
    - Larger `max_order` -> longer contexts, sharper predictions on repetitive
      input, more trie nodes.
    - `escape_method="C"` is a sound default for text. "A" escapes less
      eagerly on small counts, "D" sits between the two.
    - `closed_vocabulary=True` prices every unseen symbol as OOV instead of
      growing the vocabulary.
    """

    max_order: int = 5
    escape_method: str = "C"
    closed_vocabulary: bool = False
    debug: bool = False
    debug_max_messages: int = 20

    def validate(self) -> None:
        if self.max_order < 1:
            raise ValueError("max_order must be at least 1.")
        EscapeMethod.parse(self.escape_method)
        if self.debug_max_messages < 0:
            raise ValueError("debug_max_messages must be non-negative.")
