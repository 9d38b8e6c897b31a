from dataclasses import dataclass

from wrestling_roster_manager.domain.division import Division
from wrestling_roster_manager.domain.weight_class import WeightClass


@dataclass(frozen=True)
class Session:
    id: str
    name: str
    custom_weights_div_i: tuple[WeightClass, ...] = ()
    custom_weights_div_ii: tuple[WeightClass, ...] = ()

    def custom_weights(self, division: Division) -> tuple[WeightClass, ...]:
        if division is Division.ONE:
            return self.custom_weights_div_i
        return self.custom_weights_div_ii
