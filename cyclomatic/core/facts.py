"""
Stores for exported complexity facts.

A fact is the complexity score of one function, keyed by the function's
resolved identity. Facts outlive the unit that produced them, so a later
run can look up the complexity of a function whose source it never parses.
"""

import json
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple, Union

from cyclomatic.core.findings import FunctionIdentity
from cyclomatic.logging_config import get_logger

logger = get_logger(__name__)

FactKey = Union[FunctionIdentity, str]


def _key(identity: FactKey) -> str:
    if isinstance(identity, FunctionIdentity):
        return identity.key
    return identity


class FactStore(ABC):
    """Key-value store of complexity scores keyed by function identity."""

    @abstractmethod
    def export(self, identity: FunctionIdentity, score: int) -> None:
        """Record the score of a function."""
        pass

    @abstractmethod
    def lookup(self, identity: FactKey) -> Optional[int]:
        """Return the recorded score of a function, or None."""
        pass

    @abstractmethod
    def items(self) -> Iterator[Tuple[str, int]]:
        pass

    def __contains__(self, identity: FactKey) -> bool:
        return self.lookup(identity) is not None

    def __len__(self) -> int:
        return sum(1 for _ in self.items())


class MemoryFactStore(FactStore):
    """
    In-process fact store.

    Writes are serialized with a lock so units checked on different worker
    threads can export concurrently.
    """

    def __init__(self, facts: Optional[Dict[str, int]] = None):
        self._facts: Dict[str, int] = dict(facts or {})
        self._lock = threading.Lock()

    def export(self, identity: FunctionIdentity, score: int) -> None:
        key = _key(identity)
        with self._lock:
            previous = self._facts.get(key)
            self._facts[key] = score
        if previous is not None and previous != score:
            logger.debug("fact for %s replaced: %d -> %d", key, previous, score)

    def lookup(self, identity: FactKey) -> Optional[int]:
        with self._lock:
            return self._facts.get(_key(identity))

    def items(self) -> Iterator[Tuple[str, int]]:
        with self._lock:
            snapshot = sorted(self._facts.items())
        return iter(snapshot)

    def __len__(self) -> int:
        with self._lock:
            return len(self._facts)


class JsonFactStore(MemoryFactStore):
    """
    Fact store persisted as a JSON object mapping identity keys to scores.

    Existing facts are loaded on construction; call save() to write the
    current facts back.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(self._load())

    def _load(self) -> Dict[str, int]:
        if not self.path.exists():
            return {}

        data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        if not isinstance(data, dict):
            raise ValueError(f"Fact file {self.path} does not contain a JSON object")

        facts = {str(k): int(v) for k, v in data.items()}
        logger.debug("loaded %d facts from %s", len(facts), self.path)
        return facts

    def save(self) -> None:
        facts = dict(self.items())
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(facts, indent=2, sort_keys=True) + "\n", encoding="utf-8")
        logger.debug("saved %d facts to %s", len(facts), self.path)
