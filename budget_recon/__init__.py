"""
Budget Reconciliation Service
"""

__version__ = "1.0.0"
__description__ = "Budget-vs-commitment reconciliation for construction projects"

from budget_recon.main import build_project_items_summary, build_estimate_quantity_availability
from budget_recon.state import SummaryState
from budget_recon.schemas.output import ProjectItemsSummaryResponse

__all__ = [
    "build_project_items_summary",
    "build_estimate_quantity_availability",
    "SummaryState",
    "ProjectItemsSummaryResponse",
]
