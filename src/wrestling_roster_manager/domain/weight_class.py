from dataclasses import dataclass


@dataclass(frozen=True)
class WeightClass:
    name: str
    max_weight: float
