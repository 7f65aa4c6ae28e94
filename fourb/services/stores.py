"""
Athlete Model Storage

Protocol for the athlete model store the engine writes through, plus
an in-memory implementation. Writes are upserts keyed on athlete id;
concurrent writers resolve last-write-wins.
"""

from typing import Dict, Optional, Protocol

from ..domain.athlete import AthleteModel


class AthleteModelStore(Protocol):
    """Storage boundary for fitted athlete models."""

    def get(self, athlete_id: str) -> Optional[AthleteModel]:
        ...

    def upsert(self, model: AthleteModel) -> None:
        ...


class InMemoryAthleteModelStore:
    """Dictionary-backed AthleteModelStore."""

    def __init__(self):
        self._models: Dict[str, AthleteModel] = {}

    def get(self, athlete_id: str) -> Optional[AthleteModel]:
        return self._models.get(athlete_id)

    def upsert(self, model: AthleteModel) -> None:
        self._models[model.athlete_id] = model

    def __len__(self) -> int:
        return len(self._models)
