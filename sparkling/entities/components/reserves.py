"""Food and neural energy reserves."""

from sparkling.math_utils import clamp


class ResourceReserves:
    """Two bounded reserves; every mutation keeps them within ``[0, max]``.

    Mutators return the amount actually applied so callers can tell a full
    reserve from a successful deposit.
    """

    def __init__(self, max_food: float, max_neural_energy: float, food: float, neural_energy: float) -> None:
        self.max_food = max_food
        self.max_neural_energy = max_neural_energy
        self._food = clamp(food, 0.0, max_food)
        self._neural_energy = clamp(neural_energy, 0.0, max_neural_energy)

    @property
    def food(self) -> float:
        return self._food

    @property
    def neural_energy(self) -> float:
        return self._neural_energy

    @property
    def food_ratio(self) -> float:
        return self._food / self.max_food

    @property
    def energy_ratio(self) -> float:
        return self._neural_energy / self.max_neural_energy

    @property
    def food_full(self) -> bool:
        return self._food >= self.max_food

    @property
    def energy_full(self) -> bool:
        return self._neural_energy >= self.max_neural_energy

    def is_depleted(self) -> bool:
        return self._food <= 0 and self._neural_energy <= 0

    def add_food(self, amount: float) -> float:
        before = self._food
        self._food = clamp(self._food + amount, 0.0, self.max_food)
        return self._food - before

    def add_neural_energy(self, amount: float) -> float:
        before = self._neural_energy
        self._neural_energy = clamp(self._neural_energy + amount, 0.0, self.max_neural_energy)
        return self._neural_energy - before

    def consume_food(self, amount: float) -> float:
        return -self.add_food(-amount)

    def consume_neural_energy(self, amount: float) -> float:
        return -self.add_neural_energy(-amount)

    def set_levels(self, food: float, neural_energy: float) -> None:
        """Overwrite both reserves (clamped); used by tests and scenario setup."""
        self._food = clamp(food, 0.0, self.max_food)
        self._neural_energy = clamp(neural_energy, 0.0, self.max_neural_energy)
