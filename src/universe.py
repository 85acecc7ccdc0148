"""Expected record ids for a load-test run."""

from typing import Iterator

RECORD_ID_LENGTH = 8


def format_record_id(value: int) -> str:
    """Decimal form of a record counter, as the producer writes it."""
    return str(value)


class RecordUniverse:
    """Every id the producer emitted, each flagged once it is seen at the destination.

    Flags only go from False to True. Ids outside the initial set are never
    added, so the universe always holds exactly the ids it was built with.
    """

    def __init__(self, record_ids):
        self._seen: dict[str, bool] = {record_id: False for record_id in record_ids}

    def __len__(self) -> int:
        return len(self._seen)

    def __contains__(self, record_id: str) -> bool:
        return record_id in self._seen

    def __iter__(self) -> Iterator[str]:
        return iter(self._seen)

    def mark(self, record_id: str) -> bool:
        """Flag a known id as seen. Returns False for ids outside the universe."""
        if record_id not in self._seen:
            return False
        self._seen[record_id] = True
        return True

    def found_count(self) -> int:
        return sum(1 for seen in self._seen.values() if seen)

    def missing_ids(self) -> list[str]:
        return [record_id for record_id, seen in self._seen.items() if not seen]


def build_universe(count: int, base_offset: int = 10000000) -> RecordUniverse:
    """Universe of ``count`` ids: base_offset, base_offset + 1, ...

    Raises ValueError if count is not positive.
    """
    if count < 1:
        raise ValueError(f"Record count must be positive, got {count}")
    return RecordUniverse(format_record_id(base_offset + i) for i in range(count))
