from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Tuple

from ..core.ids import VarName
from .effects import Inventory, StatusTable
from .notify import ChangeNotifier, VariableChanged
from .prompts import Prompt
from .providers import ItemRegistry, StatusRegistry


@dataclass
class Variable:
    name: VarName
    value: float
    min: float
    max: float
    initial: float

    def clamp(self, value: float) -> float:
        return max(self.min, min(self.max, value))


@dataclass
class GameState:
    """
    Mutable state that conditions read and actions write: bounded variables,
    the player's inventory and status table, and prompts queued for display.
    """
    variables: Dict[VarName, Variable] = field(default_factory=dict)
    item_registry: ItemRegistry = field(default_factory=ItemRegistry)
    status_registry: StatusRegistry = field(default_factory=StatusRegistry)
    player_inventory: Inventory = field(default_factory=Inventory)
    player_status: StatusTable = field(default_factory=StatusTable)
    prompts: Deque[Prompt] = field(default_factory=deque)
    variable_changed: ChangeNotifier[VariableChanged] = field(default_factory=ChangeNotifier, repr=False)

    def define_var(self, name: str, initial: float, min_value: float, max_value: float):
        if min_value > max_value:
            raise ValueError(f"Variable '{name}' has min {min_value} greater than max {max_value}.")
        var = Variable(VarName(name), initial, min_value, max_value, initial)
        var.value = var.clamp(initial)
        var.initial = var.value
        self.variables[var.name] = var

    def _var(self, name: str) -> Variable:
        if name not in self.variables:
            raise ValueError(f"Variable '{name}' is not defined.")
        return self.variables[name]

    def has_var(self, name: str) -> bool:
        return name in self.variables

    def get_var(self, name: str) -> float:
        return self._var(name).value

    def get_var_limits(self, name: str) -> Tuple[float, float]:
        var = self._var(name)
        return var.min, var.max

    def set_var(self, name: str, value: float):
        """Writes a variable, clamped to its limits. Publishes only on an actual change."""
        var = self._var(name)
        new_value = var.clamp(value)
        if new_value == var.value:
            return
        var.value = new_value
        self.variable_changed.publish(self, VariableChanged(var.name, new_value))

    def change_var(self, name: str, delta: float):
        self.set_var(name, self.get_var(name) + delta)

    def post(self, prompt: Prompt):
        self.prompts.append(prompt)

    def take_prompts(self) -> List[Prompt]:
        taken = list(self.prompts)
        self.prompts.clear()
        return taken

    def reset(self):
        """Restores every variable to its initial value and empties collections and prompts."""
        for var in self.variables.values():
            var.value = var.initial
            self.variable_changed.publish(self, VariableChanged(var.name, var.value, clear=True))
        self.player_inventory.clear()
        self.player_status.clear()
        self.prompts.clear()
