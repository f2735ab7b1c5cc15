from .models import BuildPlan, ModulePlan, PCHPlan
from .emitter import BuildPlanEmitter, emit_plan
from .persist import list_plans, load_plan, save_plan

__all__ = [
    "BuildPlan",
    "ModulePlan",
    "PCHPlan",
    "BuildPlanEmitter",
    "emit_plan",
    "list_plans",
    "load_plan",
    "save_plan",
]
