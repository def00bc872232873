class WeightConverter:
    """Utility for converting between kg and lb."""

    KG_TO_LB = 2.20462
    POUND_UNITS = {"lb", "lbs"}

    @staticmethod
    def kg_to_lb(kg: float) -> float:
        return round(kg * WeightConverter.KG_TO_LB, 2)

    @staticmethod
    def lb_to_kg(lb: float) -> float:
        return round(lb / WeightConverter.KG_TO_LB, 2)

    @classmethod
    def convert(cls, value: float, from_unit: str, to_unit: str) -> float:
        """Convert ``value`` between ``kg`` and ``lb``/``lbs``."""
        src = "lb" if from_unit in cls.POUND_UNITS else from_unit
        dst = "lb" if to_unit in cls.POUND_UNITS else to_unit
        if {src, dst} - {"kg", "lb"}:
            raise ValueError(f"unsupported unit conversion {from_unit} -> {to_unit}")
        if src == dst:
            return float(value)
        if src == "kg":
            return cls.kg_to_lb(value)
        return cls.lb_to_kg(value)
