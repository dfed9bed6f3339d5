# recon_insights package
__version__ = "0.1.0"

from .config import EngineSettings, get_settings

# Reconciliation exports
from .reconciliation import (
    DashboardService,
    DashboardViews,
    ReconciliationSnapshot,
    ReportContext,
    ReportGenerator,
    ExportError,
    StatusBand,
    merge_snapshots,
    parse_snapshot,
)
