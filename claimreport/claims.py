from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .types import Participant, Rates, Ticket


@dataclass
class ClaimTotals:
    claimed_total: float
    approved_max: float
    # claimed_total - approved_max, positive means overclaimed
    difference: float


def participant_max(is_green: bool | None, rates: Rates) -> float:
    if rates.standard is None:
        return 0.0
    # only an explicit True counts as green travel
    if is_green is True:
        return float(rates.green if rates.green is not None else rates.standard)
    return float(rates.standard)


def claimed_total(tickets: Iterable[Ticket]) -> float:
    return sum(float(ticket.amount_eur or 0) for ticket in tickets)


def calculate_claim_totals(
    participants: Iterable[Participant],
    tickets: Iterable[Ticket],
    rates: Rates | None,
) -> ClaimTotals:
    rates = rates or Rates()
    claimed = claimed_total(tickets)
    approved = sum(participant_max(p.is_green_travel, rates) for p in participants)
    return ClaimTotals(
        claimed_total=claimed,
        approved_max=approved,
        difference=claimed - approved,
    )


def format_eur(amount: float | None) -> str:
    return f'{float(amount or 0):.2f} EUR'
