"""Report generation for computed dashboard views."""

import csv
import io
import json
import logging
import os
from typing import IO, Any, List, Optional, Sequence, Union

from .amounts import (
    LocaleConfig,
    ensure_negative,
    format_currency,
    format_percent,
    parse_amount,
    parse_count,
)
from .models import DashboardViews, ProviderMatchView, ProviderRecord, ProviderSplit, ReportContext

logger = logging.getLogger(__name__)

CsvRow = List[str]

SECTION_CONTEXT = "Context"
SECTION_SUMMARY = "Summary"
SECTION_REASONS = "Unreconciled Reasons"
SECTION_MATCHED = "Matched by Providers"
SECTION_UNRECONCILED = "Unreconciled by Providers"
SECTION_SETTLED = "Settled by Providers"
SECTION_PENDING = "Pending Payment by Providers"
SECTION_COMMISSION = "Commission & Charges"

SECTIONS = (
    SECTION_CONTEXT,
    SECTION_SUMMARY,
    SECTION_REASONS,
    SECTION_MATCHED,
    SECTION_UNRECONCILED,
    SECTION_SETTLED,
    SECTION_PENDING,
    SECTION_COMMISSION,
)


class ExportError(RuntimeError):
    """Raised when an export cannot be written to its destination."""


def export_filename(context: ReportContext) -> str:
    """Return ``reconciliation_<dateField>_<start>_<end>.csv``."""
    return (
        f"reconciliation_{context.date_field.value}_"
        f"{context.start_date.isoformat()}_{context.end_date.isoformat()}.csv"
    )


def _amount(value: Any) -> str:
    return f"{parse_amount(value):.2f}"


def _debit(value: Any) -> str:
    return f"{ensure_negative(value):.2f}"


def _count(value: Any) -> str:
    return str(parse_count(value))


def _pct(value: Any) -> str:
    return f"{parse_amount(value):.2f}"


class ReportGenerator:
    """Generator for dashboard exports in various formats."""

    def __init__(self, views: DashboardViews, context: ReportContext):
        """Initialize the report generator.

        Args:
            views: The computed views to export.
            context: Date range, date field, platform and tab the views belong to.
        """
        self.views = views
        self.context = context

    def _context_rows(self) -> List[CsvRow]:
        ctx = self.context
        return [
            [SECTION_CONTEXT, "Date Range", f"{ctx.start_date.isoformat()} to {ctx.end_date.isoformat()}"],
            [SECTION_CONTEXT, "Date Field", ctx.date_field.value],
            [SECTION_CONTEXT, "Platform", ctx.platform.value],
            [SECTION_CONTEXT, "Active Tab", ctx.active_tab],
        ]

    def _summary_rows(self) -> List[CsvRow]:
        snap = self.views.snapshot
        section = SECTION_SUMMARY
        rows = [[section, "Metric", "Amount", "Orders"]]
        for label, pair in (
            ("Total Transactions", snap.total_transactions),
            ("Net Sales", snap.net_sales),
            ("Returns", snap.returns),
            ("Cancellations", snap.cancellations),
            ("Reconciled", snap.reconciled),
            ("Unreconciled", snap.unreconciled),
            ("Previous Period Carryover", snap.previous_period),
            ("Difference", snap.difference),
        ):
            rows.append([section, label, _amount(pair.amount), _count(pair.count)])

        rows.append([
            section,
            "Less Payment Received",
            _debit(snap.less_payment_received.amount),
            _count(snap.less_payment_received.count),
        ])
        rows.append([
            section,
            "More Payment Received",
            _amount(snap.excess_payment_received.amount),
            _count(snap.excess_payment_received.count),
        ])
        rows.append([section, "Matched Orders", "", _count(snap.matched_orders)])
        rows.append([section, "Return Rate (%)", _pct(snap.return_rate), ""])
        rows.append([section, "Commission Rate (%)", _pct(snap.commission_rate), ""])
        rows.append([
            section,
            "Overall Match Rate (%)",
            _pct(self.views.overall_match_rate),
            self.views.overall_status.value,
        ])
        return rows

    def _reason_rows(self) -> List[CsvRow]:
        section = SECTION_REASONS
        rows = [[section, "Reason", "Orders", "Amount"]]
        for reason in self.views.snapshot.reasons:
            rows.append([section, reason.name, _count(reason.count), _amount(reason.amount)])
        return rows

    @staticmethod
    def _flatten_matches(views: Sequence[ProviderMatchView]):
        for view in views:
            yield view.display_name, view
            for member in view.members:
                yield f"{view.display_name} > {member.display_name}", member

    def _matched_rows(self) -> List[CsvRow]:
        section = SECTION_MATCHED
        rows = [[section, "Provider", "Category", "Matched Orders", "Matched Amount", "% Matched", "Status"]]
        for label, view in self._flatten_matches(self.views.provider_matches):
            rows.append([
                section,
                label,
                view.category.value,
                _count(view.matched_count),
                _amount(view.matched_amount),
                _pct(view.percent_matched),
                view.status.value,
            ])
        return rows

    def _unreconciled_rows(self) -> List[CsvRow]:
        section = SECTION_UNRECONCILED
        rows = [[section, "Provider", "Category", "Unreconciled Orders", "Unreconciled Amount", "% Mismatched"]]
        for label, view in self._flatten_matches(self.views.provider_matches):
            rows.append([
                section,
                label,
                view.category.value,
                _count(view.unmatched_count),
                _amount(view.unmatched_amount),
                _pct(view.percent_mismatched),
            ])
        return rows

    @staticmethod
    def _split_rows(section: str, split: ProviderSplit) -> List[CsvRow]:
        def row(label: str, record: ProviderRecord) -> CsvRow:
            return [section, label, record.category.value, _count(record.order_count), _amount(record.sale_amount)]

        rows = [[section, "Provider", "Category", "Orders", "Amount"]]
        for record in split.gateways:
            rows.append(row(record.display_name, record))
        if split.cod_aggregate is not None:
            aggregate = split.cod_aggregate
            rows.append(row(aggregate.display_name, aggregate))
            for record in split.cod:
                rows.append(row(f"{aggregate.display_name} > {record.display_name}", record))
        return rows

    def _commission_rows(self) -> List[CsvRow]:
        section = SECTION_COMMISSION
        rows = [[section, "Provider", "Amount Settled", "Commission", "GST on Commission", "Total Charges"]]
        for entry in self.views.snapshot.commission:
            rows.append([
                section,
                entry.display_name,
                _amount(entry.amount_settled),
                _amount(entry.commission),
                _amount(entry.gst_on_commission),
                _amount(entry.total_charges),
            ])
        return rows

    def build_rows(self) -> List[CsvRow]:
        """Flatten every view into labelled rows, sections separated by a blank row.

        Returns:
            Rows whose first column is the section label.
        """
        sections = [
            self._context_rows(),
            self._summary_rows(),
            self._reason_rows(),
            self._matched_rows(),
            self._unreconciled_rows(),
            self._split_rows(SECTION_SETTLED, self.views.settled),
            self._split_rows(SECTION_PENDING, self.views.pending),
            self._commission_rows(),
        ]

        rows: List[CsvRow] = []
        for index, section in enumerate(sections):
            if index:
                rows.append([])
            rows.extend(section)
        return rows

    def to_csv(self) -> str:
        """Generate the CSV text of the export.

        Fields containing commas, quotes or line breaks are quoted with
        internal quotes doubled.

        Returns:
            CSV string, one line per row, ``\\n`` terminated.
        """
        output = io.StringIO()
        writer = csv.writer(output, lineterminator="\n")
        writer.writerows(self.build_rows())
        return output.getvalue()

    def write_csv(self, target: Union[str, "os.PathLike[str]", IO[str]]) -> Optional[str]:
        """Write the CSV export to a path, a directory or an open text stream.

        Args:
            target: File path, existing directory (the conventional file name
                is used inside it) or a writable text stream.

        Returns:
            The path written, or None when writing to a stream.

        Raises:
            ExportError: If the destination cannot be written.
        """
        content = self.to_csv()

        if hasattr(target, "write"):
            try:
                target.write(content)
            except (OSError, ValueError) as e:
                raise ExportError(f"Failed to write export to stream: {e}") from e
            logger.info("Export written to stream")
            return None

        path = os.fspath(target)
        if os.path.isdir(path):
            path = os.path.join(path, export_filename(self.context))

        try:
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
        except OSError as e:
            raise ExportError(f"Failed to write export to {path}: {e}") from e

        logger.info(f"Export written to {path}")
        return path

    def to_json(self, include_details: bool = True, indent: int = 2) -> str:
        """Generate JSON representation of the views.

        Args:
            include_details: If True, include every view. If False, only the summary.
            indent: JSON indentation level.

        Returns:
            JSON string.
        """
        if include_details:
            data = self.views.model_dump(mode="json")
        else:
            data = self.views.to_summary_dict()
        data["context"] = self.context.model_dump(mode="json")
        return json.dumps(data, indent=indent, ensure_ascii=False)

    def to_summary_text(self, locale: Optional[LocaleConfig] = None) -> str:
        """Generate a human-readable text summary of the views.

        Args:
            locale: Currency formatting rules for amounts.

        Returns:
            Formatted text summary.
        """
        views = self.views
        snap = views.snapshot
        ctx = self.context

        def money(value: float) -> str:
            return format_currency(value, locale)

        lines = [
            "=" * 60,
            "RECONCILIATION SUMMARY",
            "=" * 60,
            f"Platform: {ctx.platform.value}",
            f"Date Field: {ctx.date_field.value}",
            f"Date Range: {ctx.start_date.isoformat()} to {ctx.end_date.isoformat()}",
            "",
            "Totals:",
            f"  Total Transactions: {money(snap.total_transactions.amount)} ({snap.total_transactions.count} orders)",
            f"  Net Sales: {money(snap.net_sales.amount)} ({snap.net_sales.count} orders)",
            f"  Reconciled: {money(snap.reconciled.amount)} ({snap.reconciled.count} orders)",
            f"  Unreconciled: {money(snap.unreconciled.amount)} ({snap.unreconciled.count} orders)",
            f"  Less Payment Received: {money(ensure_negative(snap.less_payment_received.amount))}",
            f"  More Payment Received: {money(snap.excess_payment_received.amount)}",
            "",
            f"Match Rate: {format_percent(views.overall_match_rate)} ({views.overall_status.value})",
            f"Return Rate: {format_percent(snap.return_rate)}",
            f"Commission Rate: {format_percent(snap.commission_rate)}",
        ]

        if views.provider_matches:
            lines.extend(["", "Providers:"])
            for label, view in self._flatten_matches(views.provider_matches):
                lines.append(
                    f"  {label}: {format_percent(view.percent_matched)} matched "
                    f"[{view.status.value}]"
                )

        if views.ageing.providers:
            lines.extend([
                "",
                f"Average TAT: {views.ageing.overall_average_tat:.1f} days "
                f"across {len(views.ageing.providers)} providers",
            ])

        lines.append("=" * 60)

        return "\n".join(lines)
