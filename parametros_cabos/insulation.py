"""Impedância série e coeficiente de potencial de uma coroa isolante."""

from typing import Optional

import numpy as np

from .constants import EPS_RAIO, J, PERMEABILIDADE_MAGNETICA, PERMISSIVIDADE_VACUO
from .uncertainty import log, valor_nominal


def _raio_interno_efetivo(raio_interno):
    return EPS_RAIO if valor_nominal(raio_interno) == 0 else raio_interno


def calcular_impedancia_isolacao(raio_externo, raio_interno, mur_ins, frequencia):
    """Z = jωμ·ln(r_ext/r_in)/(2π) [Ω/m]."""
    omega = 2 * np.pi * frequencia
    razao = raio_externo / _raio_interno_efetivo(raio_interno)
    return J * omega * PERMEABILIDADE_MAGNETICA * mur_ins * log(razao) / (2 * np.pi)


def calcular_coeficiente_potencial_isolacao(raio_externo, raio_interno, epsr_ins, frequencia,
                                            rho_ins: Optional[float] = None):
    """
    Coeficiente de potencial P = ln(r_ext/r_in)/(2π·ε_eff) [m/F], com
    ε_eff = ε0·εr + 1/(jωρ). Sem resistividade informada a isolação é ideal.
    """
    permissividade = PERMISSIVIDADE_VACUO * epsr_ins
    if rho_ins is not None and np.isfinite(valor_nominal(rho_ins)):
        omega = 2 * np.pi * frequencia
        permissividade = permissividade + 1 / (J * omega * rho_ins)
    razao = raio_externo / _raio_interno_efetivo(raio_interno)
    return log(razao) / (2 * np.pi * permissividade)
