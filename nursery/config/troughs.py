"""Trough presets.

``spoil_multiplier`` is relative to the food's base spoil time (the
player-inventory value). ``slots`` is ``None`` for weight-limited containers.
"""

NORMAL_TROUGH = "Normal"
TEK_TROUGH = "Tek Trough"
MAEWING = "Maewing"

TROUGH_TYPES = {
    NORMAL_TROUGH: {"spoil_multiplier": 4.0, "slots": 60},
    TEK_TROUGH: {"spoil_multiplier": 100.0, "slots": 100},
    # Nursing creature inventory: same decay as any creature inventory,
    # capacity comes from its carry weight.
    MAEWING: {"spoil_multiplier": 4.0, "slots": None},
}
