"""Aging Classifier

Pure read-side classification of open invoice balances by days past due.
No function here mutates its input or keeps state between calls.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.money import ZERO, to_money

CURRENT = "Current (0-30)"
DAYS_31_60 = "31-60"
DAYS_61_90 = "61-90"
DAYS_91_PLUS = "91+"
PAID_ZERO = "Paid/Zero"

BUCKET_ORDER = (CURRENT, DAYS_31_60, DAYS_61_90, DAYS_91_PLUS)

NO_COMPANY = "(no company)"


@dataclass(frozen=True)
class AgingLine:
    """One invoice as seen by the aging report"""
    invoice_id: int
    number: Optional[str]
    hotel_id: int
    company: str
    due_date: date
    balance: Decimal
    age_days: int
    bucket: str


@dataclass(frozen=True)
class BucketRow:
    label: str
    total: Decimal
    count: int
    invoice_ids: List[int] = field(default_factory=list)


@dataclass(frozen=True)
class AgingSummary:
    buckets: List[BucketRow]
    grand_total: Decimal
    grand_count: int


@dataclass(frozen=True)
class CompanyAging:
    company: str
    count: int
    current: Decimal
    days_31_60: Decimal
    days_61_90: Decimal
    days_91_plus: Decimal
    total: Decimal


@dataclass(frozen=True)
class CompanyBucketTotal:
    company: str
    count: int
    total: Decimal


def bucket_for(age_days: int) -> str:
    if age_days <= 30:
        return CURRENT
    if age_days <= 60:
        return DAYS_31_60
    if age_days <= 90:
        return DAYS_61_90
    return DAYS_91_PLUS


def classify(
    invoice: Invoice,
    as_of: date,
    company_name: Optional[str] = None,
    no_company_label: str = NO_COMPANY,
) -> Optional[AgingLine]:
    """Aging line for an invoice, or None for void and tombstoned invoices"""
    if invoice.deleted_at is not None or invoice.status == InvoiceStatus.VOID:
        return None
    balance = to_money(invoice.balance)
    age_days = (as_of - invoice.due_date).days
    bucket = PAID_ZERO if balance <= ZERO else bucket_for(age_days)
    return AgingLine(
        invoice_id=invoice.id,
        number=invoice.number,
        hotel_id=invoice.hotel_id,
        company=company_name or no_company_label,
        due_date=invoice.due_date,
        balance=balance,
        age_days=age_days,
        bucket=bucket,
    )


def classify_all(
    invoices: Iterable[Invoice],
    as_of: date,
    company_names: Optional[Dict[int, str]] = None,
    no_company_label: str = NO_COMPANY,
) -> List[AgingLine]:
    names = company_names or {}
    lines = []
    for invoice in invoices:
        line = classify(
            invoice,
            as_of,
            names.get(invoice.company_id) if invoice.company_id is not None else None,
            no_company_label,
        )
        if line is not None:
            lines.append(line)
    lines.sort(key=lambda l: (l.due_date, l.invoice_id))
    return lines


def summarize(lines: Iterable[AgingLine]) -> AgingSummary:
    """Totals and counts per bucket in Current -> 31-60 -> 61-90 -> 91+ order

    Paid/Zero lines are excluded. Buckets with no invoices are still listed.
    """
    totals = {label: ZERO for label in BUCKET_ORDER}
    ids: Dict[str, List[int]] = {label: [] for label in BUCKET_ORDER}
    for line in lines:
        if line.bucket not in totals:
            continue
        totals[line.bucket] += line.balance
        ids[line.bucket].append(line.invoice_id)
    rows = [
        BucketRow(label=label, total=totals[label], count=len(ids[label]), invoice_ids=sorted(ids[label]))
        for label in BUCKET_ORDER
    ]
    return AgingSummary(
        buckets=rows,
        grand_total=sum((r.total for r in rows), ZERO),
        grand_count=sum(r.count for r in rows),
    )


def breakdown_by_company(lines: Iterable[AgingLine]) -> List[CompanyAging]:
    """Per-company totals across all buckets, largest first, ties by name"""
    agg: Dict[str, Dict[str, Decimal]] = {}
    counts: Dict[str, int] = {}
    for line in lines:
        if line.bucket == PAID_ZERO:
            continue
        buckets = agg.setdefault(line.company, {label: ZERO for label in BUCKET_ORDER})
        buckets[line.bucket] += line.balance
        counts[line.company] = counts.get(line.company, 0) + 1

    rows = [
        CompanyAging(
            company=company,
            count=counts[company],
            current=buckets[CURRENT],
            days_31_60=buckets[DAYS_31_60],
            days_61_90=buckets[DAYS_61_90],
            days_91_plus=buckets[DAYS_91_PLUS],
            total=sum(buckets.values(), ZERO),
        )
        for company, buckets in agg.items()
    ]
    rows.sort(key=lambda r: (-r.total, r.company))
    return rows


def bucket_company_totals(lines: Iterable[AgingLine], bucket: str) -> List[CompanyBucketTotal]:
    """Company drill-down inside a single bucket"""
    totals: Dict[str, Decimal] = {}
    counts: Dict[str, int] = {}
    for line in lines:
        if line.bucket != bucket:
            continue
        totals[line.company] = totals.get(line.company, ZERO) + line.balance
        counts[line.company] = counts.get(line.company, 0) + 1
    rows = [CompanyBucketTotal(company=c, count=counts[c], total=t) for c, t in totals.items()]
    rows.sort(key=lambda r: (-r.total, r.company))
    return rows
