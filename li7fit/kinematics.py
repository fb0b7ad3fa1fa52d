"""Centre-of-mass to laboratory conversion for the d(6He,7Li)n reaction."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

# Masses in atomic mass units.
MASS_PROJECTILE = 6.02  # 6He
MASS_TARGET = 2.014  # 2H
MASS_EJECTILE = 7.016  # 7Li
MASS_RECOIL = 1.008  # neutron
Q_VALUE = 7.75  # MeV
VELOCITY_FACTOR = 0.983

_NUMBER = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass(frozen=True)
class Jacobians:
    """Lab angles (radians) and solid-angle Jacobians of both exit fragments."""

    lab_angle: float
    jacobian: float
    target_angle: float
    target_jacobian: float


@dataclass
class LabCrossSection:
    """Lab-frame angles (degrees) and cross sections of the 7Li and the neutron."""

    li_angles: list[float] = field(default_factory=list)
    li_xsec: list[float] = field(default_factory=list)
    n_angles: list[float] = field(default_factory=list)
    n_xsec: list[float] = field(default_factory=list)


def get_jacobians(
    theta: float, v_projectile: float, v_target: float, v_cm: float
) -> Jacobians:
    """Lab angles and Jacobians for CM angle ``theta`` (radians)."""
    vx = v_projectile * math.sin(theta)
    vz = v_projectile * math.cos(theta) + v_cm
    v_lab = math.hypot(vx, vz)
    lab_angle = math.acos(vz / v_lab)
    jacobian = (v_lab / v_projectile) ** 2 / math.cos(lab_angle - theta)

    recoil_cm = math.pi - theta
    wx = v_target * math.sin(recoil_cm)
    wz = v_target * math.cos(recoil_cm) + v_cm
    w_lab = math.hypot(wx, wz)
    target_angle = math.acos(wz / w_lab)
    target_jacobian = (w_lab / v_target) ** 2 / math.cos(target_angle - recoil_cm)
    return Jacobians(lab_angle, jacobian, target_angle, target_jacobian)


def cm_to_lab(
    theta_cm: Sequence[float],
    xsec: Sequence[float],
    energy: float,
    excitation: float,
) -> LabCrossSection:
    """Convert a CM angular distribution (degrees) to the lab frame.

    ``energy`` is the beam energy and ``excitation`` the 7Li excitation, in MeV.
    """
    if len(theta_cm) != len(xsec):
        raise ValueError("angles and cross sections differ in length")
    reduced = MASS_EJECTILE * MASS_RECOIL / (MASS_EJECTILE + MASS_RECOIL)
    v_beam = math.sqrt(2 * energy / MASS_PROJECTILE) * VELOCITY_FACTOR
    v_cm = v_beam * MASS_PROJECTILE / (MASS_PROJECTILE + MASS_TARGET)
    v_projectile_cm = v_beam - v_cm
    e_cm_in = 0.5 * MASS_PROJECTILE * (v_projectile_cm * VELOCITY_FACTOR) ** 2 + 0.5 * MASS_TARGET * (
        v_cm / VELOCITY_FACTOR
    ) ** 2
    e_cm_out = e_cm_in + Q_VALUE - excitation
    if e_cm_out < 0:
        raise ValueError(f"excitation {excitation} MeV is above the available energy")
    v_rel = math.sqrt(e_cm_out / VELOCITY_FACTOR * 2 / reduced)
    v_ejectile = v_rel * MASS_RECOIL / (MASS_RECOIL + MASS_EJECTILE)
    v_recoil = v_rel - v_ejectile

    result = LabCrossSection()
    for angle, sigma in zip(theta_cm, xsec):
        jac = get_jacobians(math.radians(angle), v_ejectile, v_recoil, v_cm)
        result.li_angles.append(math.degrees(jac.lab_angle))
        result.n_angles.append(math.degrees(jac.target_angle))
        result.li_xsec.append(abs(sigma * jac.jacobian))
        result.n_xsec.append(sigma * jac.target_jacobian)
    return result


def _leading_number(text: str) -> float:
    match = _NUMBER.match(text)
    if match is None:
        raise ValueError(f"no number at start of {text!r}")
    return float(match.group())


def read_fort202(path: str | Path) -> tuple[list[float], list[float]]:
    """Read angles and cross sections from a fixed-column fort.202 file.

    Data lines start with three spaces; the angle sits in columns 3-7 and the
    cross section in columns 15-19.
    """
    angles: list[float] = []
    xsecs: list[float] = []
    with open(path) as stream:
        for raw in stream:
            line = raw.rstrip("\n")
            if line.startswith("   "):
                angles.append(_leading_number(line[3:8]))
                xsecs.append(_leading_number(line[15:20]))
    return angles, xsecs


def integrate_cross_section(angles: Sequence[float], xsec: Sequence[float]) -> float:
    """Integrate ``2 pi sigma sin(theta) dtheta`` over lab angles in degrees."""
    total = 0.0
    for (a0, a1), sigma in zip(zip(angles, angles[1:]), xsec):
        step = math.radians(a1 - a0)
        total += 2 * math.pi * sigma * math.sin(math.radians(a0)) * abs(step)
    return total


def production_rate(
    sigma: float,
    flux: float = 20000.0,
    density: float = 1.0,
    areal: float = 0.0006,
    molar_mass: float = 16.0,
    avogadro: float = 6.02,
) -> float:
    """Detected events per second.

    ``sigma`` is in mb, ``flux`` in 1/s, ``density`` in g/cm^3, ``areal`` in
    g/cm^2, ``molar_mass`` in g/mol and ``avogadro`` in units of 1e23.
    """
    power = 1e-4  # 1e23 nuclei/mol times 1 mb = 1e-27 cm^2
    return flux * 2 * density * avogadro / molar_mass * sigma * areal / density * power