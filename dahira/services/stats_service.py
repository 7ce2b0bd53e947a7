"""Aggregate figures for the dashboard page."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date

from dahira.core.constants import Gender, MemberRole
from dahira.models.member import Member

MAX_TIMELINE_POINTS = 20


@dataclass(frozen=True)
class FeePoint:
    join_date: date
    cumulative_fees: int


@dataclass(frozen=True)
class DashboardStats:
    total_members: int
    total_men: int
    total_women: int
    total_children: int
    total_expected_fees: int
    role_counts: list[tuple[MemberRole, int]] = field(default_factory=list)
    fee_timeline: list[FeePoint] = field(default_factory=list)


def compute_dashboard_stats(members: Sequence[Member]) -> DashboardStats:
    """Count members by gender and role and total their annual fees."""

    return DashboardStats(
        total_members=len(members),
        total_men=_count_gender(members, Gender.HOMME),
        total_women=_count_gender(members, Gender.FEMME),
        total_children=_count_gender(members, Gender.ENFANT),
        total_expected_fees=sum(member.annual_fee for member in members),
        role_counts=role_counts(members),
        fee_timeline=fee_timeline(members),
    )


def role_counts(members: Sequence[Member]) -> list[tuple[MemberRole, int]]:
    """Return per-role counts in enum order, skipping empty roles."""

    counts = {role: 0 for role in MemberRole}
    for member in members:
        counts[member.role] += 1
    return [(role, count) for role, count in counts.items() if count > 0]


def fee_timeline(members: Sequence[Member]) -> list[FeePoint]:
    """Cumulative fees by join date, thinned to ``MAX_TIMELINE_POINTS``."""

    running_total = 0
    points: list[FeePoint] = []
    for member in sorted(members, key=lambda item: item.join_date):
        running_total += member.annual_fee
        points.append(FeePoint(join_date=member.join_date, cumulative_fees=running_total))

    if len(points) <= MAX_TIMELINE_POINTS:
        return points
    step = math.ceil(len(points) / MAX_TIMELINE_POINTS)
    return points[::step]


def _count_gender(members: Sequence[Member], gender: Gender) -> int:
    return sum(1 for member in members if member.gender == gender)
