"""Application-wide constants and pipeline defaults.

All energies in keV, densities in g/cm³, lengths in mm.
"""

APP_NAME = "CT Simulator"
APP_VERSION = "0.1.0"

# Spectra
SPECTRUM_FILENAME = "spectra_{kvp}.csv"
DEFAULT_KVPS = (80, 100, 140)

# Monoenergetic evaluation
MONO_ENERGIES_KEV = (80.0, 100.0, 120.0, 135.0)
REFERENCE_ENERGY_KEV = 100.0

# Hounsfield scale
HU_SCALE = 1000.0
WATER_ID = "water"

# Phantom materials
MYOCARDIUM_DENSITY_G_CM3 = 1.050
CALCIUM_INSERT_DENSITIES_G_CM3 = (0.200, 0.400, 0.800)
LUNG_AIR_FRACTION = 0.75

# Diagnostic export
SUMMARY_SCHEMA_VERSION = "1.0"
