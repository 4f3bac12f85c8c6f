"""Observables, order parameters and block averaging."""

from .averages import (
    AveragingMethod,
    BlockAverager,
    Observable,
    ObservableMismatchError,
    RunStatistics,
)
from .observables import (
    NPTObservables,
    NVTObservables,
    ObservableCalculator,
    virial_pressure,
)
from .order import nematic_order, ordering_tensor

__all__ = [
    # Averaging
    "AveragingMethod",
    "BlockAverager",
    "Observable",
    "ObservableMismatchError",
    "RunStatistics",
    # Observables
    "ObservableCalculator",
    "NVTObservables",
    "NPTObservables",
    "virial_pressure",
    # Order
    "nematic_order",
    "ordering_tensor",
]
