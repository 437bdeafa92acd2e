"""Physical and conversion constants used throughout ISOGas.

Temperatures in °C and pressures in bar absolute unless otherwise noted.
"""

# Thermodynamic
T_CELSIUS_OFFSET = 273.15  # K
T_ABSOLUTE_ZERO_C = -273.15  # °C

# Reference state (0 °C, 1 atm)
T_REFERENCE_C = 0.0  # °C
P_REFERENCE_BAR = 1.01325  # bar absolute

# Molar volume of an ideal gas at the reference state
STANDARD_MOLAR_VOLUME = 22.414  # L/mol

# Empirical volume-fraction / mole-fraction ratio for near-ideal mixtures
VOLUME_TO_MOLE_RATIO = 0.9994

# Used when a component cannot be identified
AIR_MOLAR_MASS = 28.96  # g/mol

# Conversion factors
BAR_TO_PA = 1.0e5
PA_TO_BAR = 1.0e-5
G_TO_MG = 1.0e3

# Validation envelope
T_MAX_C = 1000.0  # °C
P_MAX_BAR = 1000.0  # bar absolute

ISO_STANDARD = "ISO 14912:2023"
