from fleetscore.processing.batch import BatchProcessor
from fleetscore.processing.controller import InvocationReport, RunController, RunOutcome

__all__ = ["BatchProcessor", "InvocationReport", "RunController", "RunOutcome"]
