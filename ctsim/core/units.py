"""Unit conversion module — single conversion point for physical units.

Internal (core) units:
    Energy   : keV
    Density  : g/cm³
    μ/ρ      : cm²/g
    μ        : cm⁻¹
    Angle    : radian (scanner orbit is configured in degree)
"""

import math
from typing import NewType

# Unit annotations (plain floats at runtime)
Radian = NewType('Radian', float)
PerCm = NewType('PerCm', float)


# ---------------------------------------------------------------------------
# Angle conversions
# ---------------------------------------------------------------------------

def deg_to_rad(deg: float) -> Radian:
    """Degree → Radian."""
    return Radian(deg * (math.pi / 180.0))


# ---------------------------------------------------------------------------
# Attenuation conversions
# ---------------------------------------------------------------------------

def mass_to_linear_attenuation(mu_rho: float, density_g_cm3: float) -> PerCm:
    """Mass attenuation [cm²/g] × density [g/cm³] → linear attenuation [cm⁻¹].

    Args:
        mu_rho: Mass attenuation coefficient [cm²/g].
        density_g_cm3: Material density [g/cm³].

    Returns:
        μ [cm⁻¹].
    """
    return PerCm(mu_rho * density_g_cm3)
