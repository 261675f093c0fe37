"""Progress events emitted by upload and download transfers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Progress:
    """Fraction of the transfer done so far, in [0.0, 1.0]."""

    fraction: float

    @property
    def percent(self) -> float:
        return self.fraction * 100


@dataclass(frozen=True)
class Completed(Generic[T]):
    """
    Terminal event of a successful transfer.

    Carries the destination path for downloads and the decoded
    response for uploads. Nothing follows it in the sequence.
    """

    value: T


ProgressEvent = Union[Progress, Completed[T]]
