"""Cred score history supplied by the scoring engine"""
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Sequence, Tuple

from grain_harvest.errors import InvalidNumberError

# Opaque contributor identifier
Address = str


@dataclass(frozen=True)
class CredTimeSlice:
    """Cred scores for one completed scoring interval"""
    interval_end_ms: int
    cred: Mapping[Address, float]  # absent address = zero cred


CredHistory = Sequence[CredTimeSlice]


def _parse_cred_map(raw: Mapping[str, Any], interval_end_ms: int) -> Dict[Address, float]:
    cred: Dict[Address, float] = {}
    for address, score in raw.items():
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            raise ValueError(f"cred for {address} at {interval_end_ms} is not a number: {score!r}")
        if not math.isfinite(score):
            raise InvalidNumberError(score)
        if score < 0:
            raise ValueError(f"cred for {address} at {interval_end_ms} is negative: {score}")
        cred[address] = float(score)
    return cred


def parse_cred_history(raw: Iterable[Mapping[str, Any]]) -> Tuple[CredTimeSlice, ...]:
    """
    Convert the scoring engine's JSON history into CredTimeSlices.

    Expects a list of {"intervalEndMs": int, "cred": {address: score}} objects
    in increasing intervalEndMs order. Address order in each cred map is kept,
    since it decides the order of harvest receipts.

    Raises:
        InvalidNumberError: If any score is infinite or NaN
        ValueError: If a slice is malformed, a score is negative, or
            intervals are not strictly increasing
    """
    slices = []
    previous_end = None
    for entry in raw:
        try:
            interval_end_ms = entry['intervalEndMs']
            raw_cred = entry['cred']
        except KeyError as e:
            raise ValueError(f"cred slice is missing {e.args[0]!r}") from e
        if isinstance(interval_end_ms, bool) or not isinstance(interval_end_ms, int):
            raise ValueError(f"intervalEndMs must be an integer, got {interval_end_ms!r}")
        if previous_end is not None and interval_end_ms <= previous_end:
            raise ValueError(
                f"cred slices must have increasing intervalEndMs, got {interval_end_ms} after {previous_end}"
            )
        slices.append(CredTimeSlice(
            interval_end_ms=interval_end_ms,
            cred=_parse_cred_map(raw_cred, interval_end_ms)
        ))
        previous_end = interval_end_ms
    return tuple(slices)
