"""GetAgingReport Use Case

Read-only aging report over the caller's invoices. Nothing here writes, so
two calls with no mutation in between return identical reports.
"""

import logging
from datetime import date
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.access import AccessScope
from src.app.repositories.company_repository import CompanyRepository
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain import aging
from src.domain.errors import LedgerError
from .dtos import (
    AgingBucketDTO,
    AgingLineDTO,
    AgingReportDTO,
    CompanyAgingDTO,
    CompanyBucketTotalDTO,
)
from .errors import ledger_error

logger = logging.getLogger(__name__)


class GetAgingReport:
    """
    Use Case: Aging report

    Business Rules:
    1. Only live, non-void invoices inside the caller's scope are classified
    2. age_days = as_of - due_date; buckets 0-30, 31-60, 61-90, 91+
    3. Zero-balance invoices are tagged Paid/Zero and excluded from totals
    4. Company breakdown sorted by total descending, then name
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        company_repo: CompanyRepository,
        no_company_label: str = aging.NO_COMPANY,
    ):
        self.invoice_repo = invoice_repo
        self.company_repo = company_repo
        self.no_company_label = no_company_label

    async def _lines(self, scope: AccessScope, as_of: date, hotel_id: Optional[int]):
        if hotel_id is not None:
            scope.require_hotel(hotel_id)
        invoices = await self.invoice_repo.list_live(
            invoice_ids=scope.invoice_filter, hotel_id=hotel_id
        )
        company_ids = {inv.company_id for inv in invoices if inv.company_id is not None}
        names = await self.company_repo.get_names(company_ids) if company_ids else {}
        return aging.classify_all(invoices, as_of, names, self.no_company_label)

    async def execute(
        self,
        scope: AccessScope,
        as_of: Optional[date] = None,
        hotel_id: Optional[int] = None,
    ) -> Result[AgingReportDTO]:
        as_of = as_of or date.today()
        try:
            lines = await self._lines(scope, as_of, hotel_id)
            summary = aging.summarize(lines)
            companies = aging.breakdown_by_company(lines)

            return Return.ok(
                AgingReportDTO(
                    as_of=as_of,
                    buckets=[
                        AgingBucketDTO(
                            label=b.label, total=b.total, count=b.count, invoice_ids=b.invoice_ids
                        )
                        for b in summary.buckets
                    ],
                    grand_total=summary.grand_total,
                    grand_count=summary.grand_count,
                    companies=[CompanyAgingDTO(**c.__dict__) for c in companies],
                    lines=[AgingLineDTO(**l.__dict__) for l in lines],
                )
            )
        except LedgerError as e:
            return Return.err(ledger_error(e))
        except Exception as e:
            logger.error(f"Aging report failed: {e}")
            return Return.err(
                Error(code="AGING_REPORT_FAILED", message="Failed to build aging report", reason=str(e))
            )

    async def bucket_companies(
        self,
        scope: AccessScope,
        bucket: str,
        as_of: Optional[date] = None,
        hotel_id: Optional[int] = None,
    ) -> Result[list]:
        """Company totals inside one bucket (report drill-down)"""
        if bucket not in aging.BUCKET_ORDER:
            return Return.err(
                Error(
                    code="VALIDATION_ERROR",
                    message=f"bucket: must be one of {', '.join(aging.BUCKET_ORDER)}",
                    reason="invalid field 'bucket'",
                )
            )
        try:
            lines = await self._lines(scope, as_of or date.today(), hotel_id)
            rows = aging.bucket_company_totals(lines, bucket)
            return Return.ok([CompanyBucketTotalDTO(**r.__dict__) for r in rows])
        except LedgerError as e:
            return Return.err(ledger_error(e))
        except Exception as e:
            logger.error(f"Aging drill-down failed: {e}")
            return Return.err(
                Error(code="AGING_REPORT_FAILED", message="Failed to build aging report", reason=str(e))
            )
