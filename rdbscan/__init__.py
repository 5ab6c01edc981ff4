# detect if we are imported from the setup procedure (borrowed from numpy code)
try:
    __RDBSCAN_SETUP__
except NameError:
    __RDBSCAN_SETUP__ = False

if not __RDBSCAN_SETUP__:
    from .domain.models import ColumnSpec, ReadRequest, ExtractionPlan
    from .application.plan_assembler import ExtractionPlanAssembler

__version__ = "0.1.0"
