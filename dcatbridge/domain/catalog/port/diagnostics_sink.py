"""Port receiving every transform outcome, valid or not."""

from abc import abstractmethod
from typing import Protocol

from dcatbridge.domain.catalog.model.value import TransformOutcome
from dcatbridge.domain.shared.port import Port


class DiagnosticsSink(Port, Protocol):
    @abstractmethod
    def report(self, outcome: TransformOutcome) -> None: ...
