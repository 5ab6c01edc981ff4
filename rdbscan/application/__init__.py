from .plan_assembler import ExtractionPlanAssembler

__all__ = ["ExtractionPlanAssembler"]
