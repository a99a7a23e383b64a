"""Widget components."""

from .confirm_modal import ConfirmModal
from .form_modal import FormField, FormModal, parse_field
from .opportunity_activities_modal import OpportunityActivitiesModal
from .report_preview_modal import ReportPreviewModal

__all__ = [
    "ConfirmModal",
    "FormField",
    "FormModal",
    "OpportunityActivitiesModal",
    "ReportPreviewModal",
    "parse_field",
]
