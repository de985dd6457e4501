"""Injected random source

Resolution code never touches the module-level ``random`` state; a
``RandomSource`` is threaded through every draw so one seed reproduces
one game.
"""

import json
import random
from typing import Any, Protocol, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    """The subset of ``random.Random`` the guild core draws from."""

    def random(self) -> float: ...

    def randint(self, a: int, b: int) -> int: ...

    def choice(self, seq: Sequence[T]) -> T: ...


def create_random_source(seed: int) -> random.Random:
    return random.Random(seed)


def roll_percent(rng: RandomSource, percent: float) -> bool:
    """True with ``percent``/100 probability. 0 never fires, 100 always fires."""
    return rng.random() * 100.0 < percent


def dump_state(rng: random.Random) -> str:
    """Serialize generator state as JSON text (lossless)."""
    version, internal, gauss_next = rng.getstate()
    return json.dumps([version, list(internal), gauss_next])


def load_state(rng: random.Random, payload: str) -> random.Random:
    version, internal, gauss_next = json.loads(payload)
    state: Any = (version, tuple(internal), gauss_next)
    rng.setstate(state)
    return rng
