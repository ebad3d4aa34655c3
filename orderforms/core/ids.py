"""Id generators for diagnostics. Any zero-arg callable returning a unique str works."""

import itertools
import uuid
from typing import Callable

IdGenerator = Callable[[], str]


def uuid_ids() -> str:
    return uuid.uuid4().hex


def sequential_ids(prefix: str = "diag") -> IdGenerator:
    """Deterministic ids (diag-1, diag-2, ...) for tests and stable renders."""
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"
