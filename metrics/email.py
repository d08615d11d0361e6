"""
metrics/email.py

Email campaign metric formula implementation.

Expected inputs
---------------
campaigns : Sequence[EmailCampaignRecord]
    Campaign rows of the period, already date-filtered.

Formulas
--------
Open Rate           = opened / sent * 100
Click Rate          = clicked / sent * 100
Click-To-Open Rate  = clicked / opened * 100
Bounce Rate         = bounces / sent * 100
Unsubscribe Rate    = unsubscribes / sent * 100
Funnel              = not opened, opened but not clicked, and clicked,
                      each as a share of sent

Division-by-zero cases return 0.0 for the affected metric.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Iterable, Mapping

from metrics.base import BaseMetricFormula, safe_rate
from pulse.domain.records import EmailCampaignRecord

CAMPAIGN_RATE_FIELDS: frozenset[str] = frozenset(
    {"open_rate", "click_rate", "reported_open_rate", "reported_click_rate"}
)


@dataclass(frozen=True)
class EmailTotals:
    campaigns: int
    sent: int
    opened: int
    clicked: int
    unsubscribes: int
    bounces: int


@dataclass(frozen=True)
class EmailRates:
    open_rate: float
    click_rate: float
    click_to_open_rate: float
    bounce_rate: float
    unsubscribe_rate: float


@dataclass(frozen=True)
class FunnelBreakdown:
    """
    Partition of the sent population; sums to 100 whenever sent > 0.
    """

    not_opened: float
    opened_not_clicked: float
    clicked: float


@dataclass(frozen=True)
class CampaignSummary:
    """
    One campaign with rates computed from its own counts.

    ``reported_*`` carry the rates exported by the email platform, unchanged.
    """

    name: str
    date: str
    sent: int
    opened: int
    clicked: int
    unsubscribes: int
    bounces: int
    open_rate: float
    click_rate: float
    reported_open_rate: float
    reported_click_rate: float


@dataclass(frozen=True)
class EmailAggregate:
    totals: EmailTotals
    rates: EmailRates
    funnel: FunnelBreakdown
    campaigns: tuple[CampaignSummary, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "totals": asdict(self.totals),
            "rates": asdict(self.rates),
            "funnel": asdict(self.funnel),
            "campaigns": [asdict(campaign) for campaign in self.campaigns],
        }


class EmailMetricFormula(BaseMetricFormula):
    """
    Deterministic email campaign calculations with safe division-by-zero handling.
    """

    def calculate(self, inputs: Mapping[str, Any]) -> dict[str, Any]:
        return aggregate_email(inputs.get("campaigns") or ()).to_dict()


def aggregate_email(records: Iterable[EmailCampaignRecord]) -> EmailAggregate:
    """
    Aggregate campaign rows into totals, rates, funnel, and per-campaign rows.
    """

    rows = list(records)
    totals = EmailTotals(
        campaigns=len(rows),
        sent=sum(row.sent for row in rows),
        opened=sum(row.opened for row in rows),
        clicked=sum(row.clicked for row in rows),
        unsubscribes=sum(row.unsubscribes for row in rows),
        bounces=sum(row.bounces for row in rows),
    )
    rates = EmailRates(
        open_rate=safe_rate(totals.opened, totals.sent),
        click_rate=safe_rate(totals.clicked, totals.sent),
        click_to_open_rate=safe_rate(totals.clicked, totals.opened),
        bounce_rate=safe_rate(totals.bounces, totals.sent),
        unsubscribe_rate=safe_rate(totals.unsubscribes, totals.sent),
    )
    return EmailAggregate(
        totals=totals,
        rates=rates,
        funnel=funnel_breakdown(totals.sent, totals.opened, totals.clicked),
        campaigns=tuple(summarize_campaign(row) for row in rows),
    )


def funnel_breakdown(sent: int, opened: int, clicked: int) -> FunnelBreakdown:
    """
    Funnel shares of ``sent``; all three are 0.0 when nothing was sent.
    """
    return FunnelBreakdown(
        not_opened=safe_rate(sent - opened, sent),
        opened_not_clicked=safe_rate(opened - clicked, sent),
        clicked=safe_rate(clicked, sent),
    )


def summarize_campaign(record: EmailCampaignRecord) -> CampaignSummary:
    return CampaignSummary(
        name=record.name,
        date=record.date,
        sent=record.sent,
        opened=record.opened,
        clicked=record.clicked,
        unsubscribes=record.unsubscribes,
        bounces=record.bounces,
        open_rate=safe_rate(record.opened, record.sent),
        click_rate=safe_rate(record.clicked, record.sent),
        reported_open_rate=record.reported_open_rate,
        reported_click_rate=record.reported_click_rate,
    )


def average_rate(campaigns: Iterable[CampaignSummary], field: str) -> float:
    """
    Unweighted mean of one per-campaign rate over *campaigns*.

    The population is whatever the caller passes; the dashboard passes every
    campaign of the period, not just the ranked ones. Returns 0.0 for an
    empty population.
    """
    if field not in CAMPAIGN_RATE_FIELDS:
        raise ValueError(f"Unsupported campaign rate field: {field}")
    values = [float(getattr(campaign, field)) for campaign in campaigns]
    if not values:
        return 0.0
    return sum(values) / len(values)
