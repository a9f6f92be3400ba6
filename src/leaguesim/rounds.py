"""Ordering of fixture rounds.

A round label is either a matchday number or a date label such as ``"Mar 21"``.
Both are turned into a :class:`RoundKey` so callers can sort rounds without
caring which kind they hold.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Dict, Hashable, List, Optional, Sequence, Tuple, Union

import pandas as pd

from .standings import Fixture

# Kinds sort in this order.
NUMERIC = 0
DATE = 1
UNSCHEDULED = 2

UNSCHEDULED_LABEL = "unscheduled"

# Stands in for the year of a date label that has no fixture date behind it.
NO_YEAR = 0

# Any leap year, so "Feb 29" parses.
_LABEL_YEAR = 2000

Label = Union[str, int]


@dataclass(frozen=True, order=True)
class RoundKey:
    """Sortable token for a round label."""

    kind: int
    value: Tuple[int, ...]
    label: Label = field(compare=False)


@dataclass
class Round:
    key: RoundKey
    fixtures: List[Fixture]

    @property
    def label(self) -> Label:
        return self.key.label


def format_date_label(date: datetime) -> str:
    """Return the short label used for date-based rounds, e.g. ``"Mar 21"``."""

    return f"{date.strftime('%b')} {date.day}"


def parse_date_label(label: str) -> Tuple[int, int]:
    """Return ``(month, day)`` for a label like ``"Mar 21"``."""

    try:
        ts = pd.to_datetime(f"{label.strip()} {_LABEL_YEAR}", format="%b %d %Y")
    except ValueError as exc:
        raise ValueError(f"Unrecognized date round label: {label!r}") from exc
    return ts.month, ts.day


def _numeric_value(label: Label) -> Optional[int]:
    if isinstance(label, bool):
        return None
    if isinstance(label, int):
        return label
    text = str(label).strip()
    if re.fullmatch(r"-?\d+", text):
        return int(text)
    return None


def round_key(fixture: Fixture) -> RoundKey:
    """Return the ordering key for ``fixture``'s round.

    Date keys are ``(year, month, day)``; a label with no fixture date behind
    it gets :data:`NO_YEAR`. Raises ``ValueError`` when the label can be read
    neither as a number nor as a date.
    """

    info = fixture.round_info
    if info is None:
        if fixture.date is not None:
            d = fixture.date
            return RoundKey(DATE, (d.year, d.month, d.day), format_date_label(d))
        return RoundKey(UNSCHEDULED, (), UNSCHEDULED_LABEL)

    if info.is_date_based:
        if fixture.date is not None:
            d = fixture.date
            return RoundKey(DATE, (d.year, d.month, d.day), info.round)
        month, day = parse_date_label(str(info.round))
        return RoundKey(DATE, (NO_YEAR, month, day), info.round)

    number = _numeric_value(info.round)
    if number is None:
        raise ValueError(f"Cannot order round label {info.round!r}")
    return RoundKey(NUMERIC, (number,), info.round)


def _group_id(key: RoundKey) -> Hashable:
    # Numeric rounds are the same round whether labelled 1 or "1".
    if key.kind == NUMERIC:
        return key.kind, key.value
    return key.kind, key.label


def _without_year(key: RoundKey) -> RoundKey:
    if key.kind != DATE:
        return key
    return replace(key, value=key.value[1:])


def group_by_round(fixtures: Sequence[Fixture]) -> List[Round]:
    """Group fixtures sharing a round and return the rounds in order.

    Fixtures keep their input order inside a round. A date-based round takes
    the key of its earliest fixture. Date rounds are ordered by full date only
    when every one of them has a fixture date; otherwise all of them are
    ordered by month and day.
    """

    keyed = [(round_key(f), f) for f in fixtures]
    if any(k.kind == DATE and k.value[0] == NO_YEAR for k, _ in keyed):
        keyed = [(_without_year(k), f) for k, f in keyed]

    grouped: Dict[Hashable, List[Fixture]] = {}
    keys: Dict[Hashable, RoundKey] = {}
    for key, fixture in keyed:
        gid = _group_id(key)
        grouped.setdefault(gid, []).append(fixture)
        if gid not in keys:
            keys[gid] = key
        elif key < keys[gid]:
            # Keep the first label seen for the round.
            keys[gid] = replace(key, label=keys[gid].label)

    rounds = [Round(keys[gid], grouped[gid]) for gid in grouped]
    rounds.sort(key=lambda r: r.key)
    return rounds


def next_round(rounds: Sequence[Round], label: Label) -> Optional[Label]:
    """Return the label of the round after ``label``, or ``None`` after the last one."""

    labels = [r.label for r in rounds]
    if label not in labels:
        raise ValueError(f"Unknown round {label!r}")
    idx = labels.index(label)
    if idx + 1 < len(rounds):
        return rounds[idx + 1].label
    return None
