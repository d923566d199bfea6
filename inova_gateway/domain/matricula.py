"""Account number (matricula) generation"""

import random
from typing import Callable

from inova_gateway.domain.exceptions import MatriculaGenerationError

MATRICULA_MIN = 100_000
MATRICULA_MAX = 999_999
MAX_ATTEMPTS = 10


def generate_matricula(
    exists: Callable[[int], bool],
    rng: random.Random | None = None,
    max_attempts: int = MAX_ATTEMPTS,
) -> int:
    """
    Draw random 6-digit matriculas until one is not taken.

    Raises:
        MatriculaGenerationError: after max_attempts collisions
    """
    rng = rng or random.SystemRandom()
    for _ in range(max_attempts):
        candidate = rng.randint(MATRICULA_MIN, MATRICULA_MAX)
        if not exists(candidate):
            return candidate
    raise MatriculaGenerationError("Não foi possível gerar matrícula única")
