from rotaplan.generator.fixed_role import fixed_role_status, fixed_role_timeline
from rotaplan.generator.orchestrator import AdaptiveOrchestrator, generate_schedule

__all__ = [
    "AdaptiveOrchestrator",
    "fixed_role_status",
    "fixed_role_timeline",
    "generate_schedule",
]
