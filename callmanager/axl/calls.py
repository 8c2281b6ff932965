from dataclasses import dataclass
from typing import Any, Iterator, Optional


@dataclass(frozen=True)
class CallRecord:
    """One SOAP request/reply pair. `reply` is the raised exception if the call failed."""

    procedure: str
    elapsed: float
    request: Any
    reply: Any

    @property
    def failed(self) -> bool:
        return isinstance(self.reply, BaseException)


class CallLog:
    """Running, append-only record of the SOAP calls made by one client.

    Only kept for performance checks and debugging, nothing reads it back
    to make decisions.
    """

    def __init__(self) -> None:
        self._calls: list[CallRecord] = []

    def append(self, record: CallRecord) -> int:
        self._calls.append(record)
        return len(self._calls)

    def __len__(self) -> int:
        return len(self._calls)

    def __iter__(self) -> Iterator[CallRecord]:
        return iter(tuple(self._calls))

    def __getitem__(self, index: int) -> CallRecord:
        return self._calls[index]

    @property
    def last(self) -> Optional[CallRecord]:
        return self._calls[-1] if self._calls else None

    def total_time(self) -> float:
        return sum(c.elapsed for c in self._calls)
