# util/types.py
from typing import Protocol, Sequence
import numpy as np


# Flow: the two black-box upstreams every pipeline stage receives.
class CompletionFn(Protocol):
    async def __call__(
        self, prompt: str, *, temperature: float = 0.0, max_tokens: int = 800
    ) -> str: ...


class EmbedFn(Protocol):
    async def __call__(self, text: str) -> np.ndarray | Sequence[float]: ...
