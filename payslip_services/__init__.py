"""
payslip_services -- Package init and public API.

Responsibility:
    Orchestration over the pure calculators (payslip_engines/) and the
    validated configuration (payslip_config/): the aggregation pipeline,
    the report, interactive input collection and the version check. This
    is the only layer that prompts the user or touches the network.

Architecture position:
    Services -- orchestration over engines + config + kernel.

    Dependency direction:
        payslip_services/ -> payslip_config/, payslip_engines/, payslip_kernel/
        payslip_engines/  -> payslip_services/ (FORBIDDEN)
        payslip_kernel/   -> payslip_services/ (FORBIDDEN)

Invariants enforced:
    - Prompting and the version check finish before the pipeline runs;
      the pipeline itself is pure and idempotent.
"""

from payslip_services.collection import build_inputs, collect_inputs
from payslip_services.pipeline import (
    PayslipPipeline,
    build_band_schedule,
    resolve_car_allowance,
    run_payslip,
)
from payslip_services.report import (
    ReportSection,
    format_report,
    format_section,
    render_report,
)
from payslip_services.results import CarAllowanceResolution, PayslipResult
from payslip_services.version_check import (
    UpdateStatus,
    check_for_update,
    open_repository_page,
)

__all__ = [
    "CarAllowanceResolution",
    "PayslipPipeline",
    "PayslipResult",
    "ReportSection",
    "UpdateStatus",
    "build_band_schedule",
    "build_inputs",
    "check_for_update",
    "collect_inputs",
    "format_report",
    "format_section",
    "open_repository_page",
    "render_report",
    "resolve_car_allowance",
    "run_payslip",
]
