"""Impedância interna de condutores tubulares considerando o efeito pelicular."""

import numpy as np
from scipy.special import ive, kve

from .constants import (
    EPS_RAIO,
    FATOR_COTH_MACICO,
    FATOR_RESISTENCIA_MACICO,
    J,
    PERMEABILIDADE_MAGNETICA,
    TOL_RAIO,
)
from .uncertainty import com_incerteza, coth, csch, exp, sqrt, valor_nominal


def _inverso_profundidade_pelicular(sigma_c, mur_c, frequencia):
    """m = sqrt(jωμσ) [1/m]."""
    omega = 2 * np.pi * frequencia
    return sqrt(J * omega * PERMEABILIDADE_MAGNETICA * mur_c * sigma_c)


def _raio_interno_efetivo(raio_interno):
    # Condutor maciço: raio interno nulo levaria a divisão por zero.
    return EPS_RAIO if valor_nominal(raio_interno) == 0 else raio_interno


def _eh_macico(raio_interno) -> bool:
    return abs(valor_nominal(raio_interno)) < TOL_RAIO


def _argumentos_bessel(raio_externo, raio_interno, sigma_c, mur_c, frequencia):
    m = _inverso_profundidade_pelicular(sigma_c, mur_c, frequencia)
    w_out = m * raio_externo
    w_in = m * _raio_interno_efetivo(raio_interno)
    # sc = exp(|Re w_in| - w_out) / exp(|Re w_out| - w_in), em um único expoente
    # para não estourar quando o efeito pelicular é intenso.
    sc = exp(abs(w_in.real) - abs(w_out.real) - w_out + w_in)
    return m, w_out, w_in, sc


def _denominador(w_out, w_in, sc):
    return (com_incerteza(ive, 1, w_out) * com_incerteza(kve, 1, w_in)
            - sc * com_incerteza(kve, 1, w_out) * com_incerteza(ive, 1, w_in))


def calcular_impedancia_externa(raio_externo, raio_interno, sigma_c, mur_c, frequencia,
                                formula_simplificada: bool = False):
    """
    Impedância própria da superfície externa de um condutor tubular.

    Parâmetros
    ----------
    raio_externo : float ou ValorIncerto
        raio externo do condutor [m].
    raio_interno : float ou ValorIncerto
        raio interno do condutor [m]. Zero para condutor maciço.
    sigma_c : float ou ValorIncerto
        condutividade do condutor [S/m].
    mur_c : float ou ValorIncerto
        permeabilidade magnética relativa do condutor.
    frequencia : float
        frequência [Hz].
    formula_simplificada : bool, opcional
        usa as aproximações por coth/csch em vez das funções de Bessel.

    Retorna
    -------
    complex ou ValorIncerto
        impedância por unidade de comprimento [Ω/m].
    """
    if formula_simplificada:
        m = _inverso_profundidade_pelicular(sigma_c, mur_c, frequencia)
        if _eh_macico(raio_interno):
            z1 = (m / sigma_c) / (2 * np.pi * raio_externo) * coth(FATOR_COTH_MACICO * m * raio_externo)
            z2 = FATOR_RESISTENCIA_MACICO / (sigma_c * np.pi * raio_externo ** 2)
        else:
            z1 = (m / sigma_c) / (2 * np.pi * raio_externo) * coth(m * (raio_externo - raio_interno))
            z2 = 1 / (2 * np.pi * raio_externo * (raio_interno + raio_externo) * sigma_c)
        return z1 + z2

    _, w_out, w_in, sc = _argumentos_bessel(raio_externo, raio_interno, sigma_c, mur_c, frequencia)
    n = (com_incerteza(ive, 0, w_out) * com_incerteza(kve, 1, w_in)
         + sc * com_incerteza(kve, 0, w_out) * com_incerteza(ive, 1, w_in))
    d = _denominador(w_out, w_in, sc)
    omega = 2 * np.pi * frequencia
    return (J * omega * PERMEABILIDADE_MAGNETICA * mur_c / (2 * np.pi)) * (1 / w_out) * (n / d)


def calcular_impedancia_interna(raio_externo, raio_interno, sigma_c, mur_c, frequencia,
                                formula_simplificada: bool = False):
    """Impedância própria da superfície interna de um condutor tubular [Ω/m]."""
    if formula_simplificada:
        raio_interno = _raio_interno_efetivo(raio_interno)
        m = _inverso_profundidade_pelicular(sigma_c, mur_c, frequencia)
        z1 = (m / sigma_c) / (2 * np.pi * raio_interno) * coth(m * (raio_externo - raio_interno))
        z2 = 1 / (2 * np.pi * raio_interno * (raio_interno + raio_externo) * sigma_c)
        return z1 + z2

    _, w_out, w_in, sc = _argumentos_bessel(raio_externo, raio_interno, sigma_c, mur_c, frequencia)
    n = (sc * com_incerteza(ive, 0, w_in) * com_incerteza(kve, 1, w_out)
         + com_incerteza(kve, 0, w_in) * com_incerteza(ive, 1, w_out))
    d = _denominador(w_out, w_in, sc)
    omega = 2 * np.pi * frequencia
    return (J * omega * PERMEABILIDADE_MAGNETICA * mur_c / (2 * np.pi)) * (1 / w_in) * (n / d)


def calcular_impedancia_mutua(raio_externo, raio_interno, sigma_c, mur_c, frequencia,
                              formula_simplificada: bool = False):
    """Impedância de transferência entre as superfícies interna e externa [Ω/m]."""
    if formula_simplificada:
        m = _inverso_profundidade_pelicular(sigma_c, mur_c, frequencia)
        return m / (sigma_c * np.pi * (raio_interno + raio_externo)) * csch(m * (raio_externo - raio_interno))

    _, w_out, w_in, sc = _argumentos_bessel(raio_externo, raio_interno, sigma_c, mur_c, frequencia)
    d = _denominador(w_out, w_in, sc)
    # 1/s_out = exp(w_in - |Re w_out|) tende a zero sem estourar.
    inverso_s_out = exp(w_in - abs(w_out.real))
    raio_interno = _raio_interno_efetivo(raio_interno)
    return inverso_s_out / (2 * np.pi * raio_externo * raio_interno * sigma_c * d)
