import random
from typing import Sequence, TypeVar

T = TypeVar("T")

_MASK_32 = 0xFFFFFFFF


def seed_from(seed_material: str) -> int:
    """
    Fold a string into an unsigned 32-bit seed with a rolling polynomial hash.
    Order-sensitive: every character changes the result.
    """
    h = 0
    for ch in seed_material or "":
        h = (h * 31 + ord(ch)) & _MASK_32
    return h


def permute(items: Sequence[T], seed_material: str) -> list[T]:
    """
    Reproducible Fisher-Yates shuffle of a copy of `items`.

    Same sequence + same seed material -> same order on every machine. Uses a
    private generator so the global `random` state is neither read nor touched.
    """
    out = list(items)
    if len(out) < 2:
        return out

    rng = random.Random(seed_from(seed_material))
    for i in range(len(out) - 1, 0, -1):
        j = int(rng.random() * (i + 1))
        out[i], out[j] = out[j], out[i]
    return out
