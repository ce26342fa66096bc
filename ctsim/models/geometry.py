"""Scanner and image geometry records.

Flat configuration consumed by the external projector / FDK
reconstruction.  All lengths in mm, orbit angles in degree.
"""

from dataclasses import dataclass

from ctsim.core.units import Radian, deg_to_rad


@dataclass(frozen=True)
class FanArcGeometry:
    """Third-generation fan-beam CT with an arc detector, circular orbit.

    Attributes:
        ns: Number of horizontal detector samples.
        nt: Number of vertical detector samples (detector rows).
        ds: Horizontal sample spacing [mm].
        dt: Vertical sample spacing [mm].
        offset_s: Detector center offset [samples] (usually 0 or 0.25).
        offset_t: Vertical detector offset [samples].
        na: Number of projection angles.
        orbit: Source orbit [degree] (360 for full fan-beam scans).
        orbit_start: Starting angle [degree].
        source_offset: Source offset [mm].
        dsd: Source-to-detector distance [mm].
        dod: Origin-to-detector distance [mm].
    """
    ns: int = 888
    nt: int = 64
    ds: float = 1.0239
    dt: float = 1.0964
    offset_s: float = 1.25
    offset_t: float = 0.0
    na: int = 984
    orbit: float = 360.0
    orbit_start: float = 0.0
    source_offset: float = 0.0
    dsd: float = 949.075
    dod: float = 408.075

    def __post_init__(self) -> None:
        for name in ("ns", "nt", "na"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        if self.ds <= 0 or self.dt <= 0:
            raise ValueError("Detector sample spacing must be positive")
        if not 0 < self.dod < self.dsd:
            raise ValueError("Require 0 < dod < dsd")

    @property
    def dso(self) -> float:
        """Source-to-origin (isocenter) distance [mm]."""
        return self.dsd - self.dod

    @property
    def orbit_rad(self) -> Radian:
        return deg_to_rad(self.orbit)

    @property
    def angular_step_rad(self) -> Radian:
        return Radian(self.orbit_rad / self.na)


# GE LightSpeed system geometry (doi: 10.1109/TMI.2006.882141)
GE_LIGHTSPEED = FanArcGeometry()

# Canon Aquilion One estimate: 0.5 mm pitch, SOD 600 mm, ODD 472 mm
CANON_AQUILION_ONE = FanArcGeometry(
    ns=888 * 2,
    nt=64,
    ds=0.5,
    dt=0.5,
    offset_s=1.25,
    na=984,
    dsd=600.0 + 472.0,
    dod=472.0,
)


@dataclass(frozen=True)
class ImageGeometry:
    """Voxel grid of the reconstructed image.

    Attributes:
        dims: Number of voxels along (x, y, z).
        deltas_mm: Voxel size along (x, y, z) [mm].
    """
    dims: tuple[int, int, int] = (300, 300, 20)
    deltas_mm: tuple[float, float, float] = (1.0, 1.0, 1.0)

    def __post_init__(self) -> None:
        if len(self.dims) != 3 or len(self.deltas_mm) != 3:
            raise ValueError("dims and deltas_mm need three entries")
        if any(n <= 0 for n in self.dims) or any(d <= 0 for d in self.deltas_mm):
            raise ValueError("dims and deltas_mm must be positive")

    @property
    def fov_mm(self) -> tuple[float, float, float]:
        """Field of view along (x, y, z) [mm]."""
        return tuple(n * d for n, d in zip(self.dims, self.deltas_mm))
