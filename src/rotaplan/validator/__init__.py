from rotaplan.validator.advisories import regime_advisories
from rotaplan.validator.audit import ScheduleAudit, audit_schedule
from rotaplan.validator.validator import set_status, validate_schedule

__all__ = [
    "ScheduleAudit",
    "audit_schedule",
    "regime_advisories",
    "set_status",
    "validate_schedule",
]
