"""
Impedância e coeficiente de potencial de retorno pela terra (formulação de
Papadopoulos) para condutores enterrados em solo homogêneo.

As integrais em λ ∈ [0, ∞) têm o fator oscilante cos(λ·y). O termo direto
e^{-a1·|Δh|}/a1 decai devagar quando as profundidades são próximas; por isso
subtrai-se dele a referência e^{-Δh·√(λ²+c²)}/√(λ²+c²), cuja transformada de
cosseno é K0(c·√(Δh² + y²)), e integra-se numericamente só o restante, que
decai rápido: quadratura adaptativa até um corte e QAWF (QUADPACK) na cauda.
"""

import logging
from enum import IntEnum
from functools import lru_cache
from typing import Sequence, Tuple

import numpy as np
from scipy.integrate import quad
from scipy.special import k0

from .constants import (
    CICLOS_TRECHO_FINITO,
    CONDUTIVIDADE_AR,
    DESLOCAMENTO_PROFUNDIDADE,
    FATOR_CORTE_IMAGEM,
    J,
    LIMITE_CICLOS,
    LIMITE_SUBDIVISOES,
    PASSO_DIFERENCIACAO_INTEGRAL,
    PERMEABILIDADE_MAGNETICA,
    PERMISSIVIDADE_VACUO,
    TOL_INTEGRACAO,
)
from .errors import GeometriaInvalidaError, IntegracaoNaoConvergenteError
from .matrices import matriz_objeto
from .uncertainty import propagar_incerteza, valor_nominal


class ModoKx(IntEnum):
    """Constante de propagação longitudinal k_x usada em a0 e a1."""
    NENHUM = 0
    AR = 1
    TERRA = 2


_IMPEDANCIA = "impedancia"
_POTENCIAL = "potencial"


def _kx_quadrado(modo: int, omega: float, eps_g: float, mu_g: float, sigma_g: float) -> complex:
    if modo == ModoKx.TERRA:
        return complex(omega ** 2 * mu_g * (eps_g - J * sigma_g / omega))
    if modo == ModoKx.AR:
        return complex(omega ** 2 * PERMEABILIDADE_MAGNETICA * PERMISSIVIDADE_VACUO)
    return 0j


def _falha(resultado, tolerancia: float) -> str:
    # quad devolve a mensagem como 4º elemento quando o QUADPACK sinaliza ier > 0.
    if len(resultado) > 3 and not resultado[1] <= tolerancia * max(1.0, abs(resultado[0])):
        return str(resultado[3]).strip()
    return ""


def _integrar_cosseno(integrando, y: float, corte: float, pontos: Sequence[float],
                      tolerancia: float) -> Tuple[float, str]:
    """
    Integra integrando(λ)·cos(λ·y) em [0, ∞).

    O trecho [0, corte] usa quadratura adaptativa com pontos de quebra nas
    escalas do núcleo; a cauda usa QAWF (ou quadratura comum se y = 0).
    Retorna (valor, mensagem de falha vazia se convergiu).
    """
    pontos = sorted(p for p in pontos if 0 < p < corte) or None
    trecho = quad(lambda lam: integrando(lam) * np.cos(lam * y), 0.0, corte, points=pontos,
                  epsabs=tolerancia, epsrel=tolerancia, limit=LIMITE_SUBDIVISOES, full_output=1)
    if y > 0:
        cauda = quad(integrando, corte, np.inf, weight="cos", wvar=y, epsabs=tolerancia,
                     limit=LIMITE_SUBDIVISOES, limlst=LIMITE_CICLOS, full_output=1)
    else:
        cauda = quad(integrando, corte, np.inf, epsabs=tolerancia, epsrel=tolerancia,
                     limit=LIMITE_SUBDIVISOES, full_output=1)
    falhas = [m for m in (_falha(trecho, tolerancia), _falha(cauda, tolerancia)) if m]
    return trecho[0] + cauda[0], "; ".join(falhas)


@lru_cache(maxsize=4096)
def _integral_papadopoulos(tipo: str, h1: float, h2: float, y: float, eps_g: float, mu_g: float,
                           sigma_g: float, frequencia: float, modo_kx: int, tolerancia: float) -> complex:
    omega = 2 * np.pi * frequencia
    mu0 = PERMEABILIDADE_MAGNETICA
    gamma0_2 = J * omega * mu0 * (CONDUTIVIDADE_AR + J * omega * PERMISSIVIDADE_VACUO)
    gamma1_2 = J * omega * mu_g * (sigma_g + J * omega * eps_g)
    kx_2 = _kx_quadrado(modo_kx, omega, eps_g, mu_g, sigma_g)
    s = np.sign(h1)
    dh = abs(h1 - h2)
    distancia = np.hypot(dh, y)
    if distancia == 0:
        raise GeometriaInvalidaError("Condutores coincidentes: separação e diferença de profundidade nulas.")

    # Escala da referência subtraída: a mesma do termo imagem.
    c = 1.0 / abs(h1 + h2)
    corte = FATOR_CORTE_IMAGEM * c
    if y > 0:
        corte = min(corte, 2 * np.pi * CICLOS_TRECHO_FINITO / y)
    pontos = (float(np.sqrt(abs(gamma1_2))), c)

    def nucleo(lam: float) -> complex:
        a0 = np.sqrt(lam * lam + gamma0_2 + kx_2)
        a1 = np.sqrt(lam * lam + gamma1_2 + kx_2)
        a_ref = np.sqrt(lam * lam + c * c)
        imagem = np.exp(a1 * (h1 + h2))
        valor = (np.exp(-a1 * dh) / a1 - np.exp(-a_ref * dh) / a_ref
                 - imagem * (a0 * mu_g + a1 * mu0 * s) / (a1 * (a0 * mu_g + a1 * mu0)))
        if tipo == _POTENCIAL and s != 1:
            valor += (a1 * mu0 * mu_g * (s - 1) * (gamma0_2 - gamma1_2) * imagem
                      / ((a0 * gamma1_2 * mu0 + a1 * gamma0_2 * mu_g) * (a0 * mu_g + a1 * mu0)))
        return valor

    parte_real, falha_real = _integrar_cosseno(lambda lam: nucleo(lam).real, y, corte, pontos, tolerancia)
    parte_imag, falha_imag = _integrar_cosseno(lambda lam: nucleo(lam).imag, y, corte, pontos, tolerancia)
    if falha_real or falha_imag:
        mensagem = falha_real or falha_imag
        logging.warning(f"Quadratura de {tipo} não convergiu (h1={h1}, h2={h2}, y={y}, f={frequencia} Hz): {mensagem}")
        raise IntegracaoNaoConvergenteError(
            f"Integral de {tipo} de retorno pela terra não convergiu em f={frequencia} Hz: {mensagem}")
    integral = complex(parte_real + k0(c * distancia), parte_imag)

    if tipo == _IMPEDANCIA:
        return J * omega * mu_g / (2 * np.pi) * integral
    q = mu_g * omega * 0.5j / (np.pi * gamma1_2) * integral
    return J * omega * q


def _validar_profundidades(*profundidades) -> None:
    for h in profundidades:
        if valor_nominal(h) >= 0:
            raise GeometriaInvalidaError(
                f"Profundidade {valor_nominal(h)} m inválida: o condutor deve estar abaixo do solo (y < 0).")


def _avaliar_mutua(tipo: str, h1, h2, distancia, eps_g, mu_g, sigma_g, frequencia: float,
                   modo_kx: ModoKx, tolerancia: float, deslocamento: float):
    _validar_profundidades(h1, h2)
    # Deslocamento fixo decidido no ponto nominal: as perturbações da
    # diferenciação numérica não mudam o ramo.
    extra = deslocamento if abs(valor_nominal(h1) - valor_nominal(h2)) < deslocamento else 0.0
    modo = int(ModoKx(modo_kx))

    def integral(a, b, y, eps, mu, sigma):
        return _integral_papadopoulos(tipo, a, b + extra, abs(y), eps, mu, sigma, float(frequencia), modo, tolerancia)

    return propagar_incerteza(integral, h1, h2, distancia, eps_g, mu_g, sigma_g, passo=PASSO_DIFERENCIACAO_INTEGRAL)


def _avaliar_propria(tipo: str, h, raio, eps_g, mu_g, sigma_g, frequencia: float,
                     modo_kx: ModoKx, tolerancia: float, deslocamento: float):
    _validar_profundidades(h)
    modo = int(ModoKx(modo_kx))

    # As duas profundidades derivam da mesma variável.
    def integral(a, r, eps, mu, sigma):
        return _integral_papadopoulos(tipo, a, a + deslocamento, abs(r), eps, mu, sigma, float(frequencia),
                                      modo, tolerancia)

    return propagar_incerteza(integral, h, raio, eps_g, mu_g, sigma_g, passo=PASSO_DIFERENCIACAO_INTEGRAL)


def calcular_impedancia_mutua_terra(h1, h2, distancia, eps_g, mu_g, sigma_g, frequencia,
                                    modo_kx: ModoKx = ModoKx.NENHUM, tolerancia: float = TOL_INTEGRACAO,
                                    deslocamento: float = DESLOCAMENTO_PROFUNDIDADE):
    """
    Impedância mútua de retorno pela terra entre dois condutores enterrados.

    Parâmetros
    ----------
    h1, h2 : profundidades dos condutores [m], negativas.
    distancia : separação horizontal [m].
    eps_g, mu_g, sigma_g : permissividade [F/m], permeabilidade [H/m] e condutividade [S/m] do solo.
    frequencia : frequência [Hz].
    modo_kx : constante de propagação usada nos expoentes.
    tolerancia : tolerância da quadratura.
    deslocamento : somado a h2 quando as profundidades coincidem [m].

    Retorna
    -------
    complex ou ValorIncerto
        impedância por unidade de comprimento [Ω/m].
    """
    return _avaliar_mutua(_IMPEDANCIA, h1, h2, distancia, eps_g, mu_g, sigma_g, frequencia,
                          modo_kx, tolerancia, deslocamento)


def calcular_impedancia_propria_terra(h, raio, eps_g, mu_g, sigma_g, frequencia,
                                      modo_kx: ModoKx = ModoKx.NENHUM, tolerancia: float = TOL_INTEGRACAO,
                                      deslocamento: float = DESLOCAMENTO_PROFUNDIDADE):
    """Impedância própria de retorno pela terra; a separação é o raio externo do cabo."""
    return _avaliar_propria(_IMPEDANCIA, h, raio, eps_g, mu_g, sigma_g, frequencia,
                            modo_kx, tolerancia, deslocamento)


def calcular_coeficiente_potencial_mutuo_terra(h1, h2, distancia, eps_g, mu_g, sigma_g, frequencia,
                                               modo_kx: ModoKx = ModoKx.NENHUM, tolerancia: float = TOL_INTEGRACAO,
                                               deslocamento: float = DESLOCAMENTO_PROFUNDIDADE):
    """Coeficiente de potencial mútuo de retorno pela terra [m/F]."""
    return _avaliar_mutua(_POTENCIAL, h1, h2, distancia, eps_g, mu_g, sigma_g, frequencia,
                          modo_kx, tolerancia, deslocamento)


def calcular_coeficiente_potencial_proprio_terra(h, raio, eps_g, mu_g, sigma_g, frequencia,
                                                 modo_kx: ModoKx = ModoKx.NENHUM, tolerancia: float = TOL_INTEGRACAO,
                                                 deslocamento: float = DESLOCAMENTO_PROFUNDIDADE):
    return _avaliar_propria(_POTENCIAL, h, raio, eps_g, mu_g, sigma_g, frequencia,
                            modo_kx, tolerancia, deslocamento)


def _matrizes(funcao_propria, funcao_mutua, profundidades: Sequence, distancias, raios: Sequence,
              eps_g, mu_g, sigma_g, frequencia, **opcoes) -> Tuple[np.ndarray, np.ndarray]:
    n = len(profundidades)
    if len(raios) != n or np.shape(distancias) != (n, n):
        raise ValueError("Profundidades, raios e matriz de distâncias devem ter dimensões compatíveis.")
    propria = matriz_objeto(n, n)
    mutua = matriz_objeto(n, n)
    for i in range(n):
        propria[i, i] = funcao_propria(profundidades[i], raios[i], eps_g, mu_g, sigma_g, frequencia, **opcoes)
        for j in range(i + 1, n):
            mutua[i, j] = funcao_mutua(profundidades[i], profundidades[j], distancias[i][j],
                                       eps_g, mu_g, sigma_g, frequencia, **opcoes)
            mutua[j, i] = mutua[i, j]
    return propria, mutua


def calcular_matriz_impedancia_terra(profundidades, distancias, raios, eps_g, mu_g, sigma_g, frequencia,
                                     **opcoes) -> Tuple[np.ndarray, np.ndarray]:
    """
    Matrizes (própria, mútua) de impedância de retorno pela terra para n cabos.

    distancias[i][j] é a separação horizontal entre os cabos i e j; só o
    triângulo superior é lido.
    """
    return _matrizes(calcular_impedancia_propria_terra, calcular_impedancia_mutua_terra,
                     profundidades, distancias, raios, eps_g, mu_g, sigma_g, frequencia, **opcoes)


def calcular_matriz_coeficiente_potencial_terra(profundidades, distancias, raios, eps_g, mu_g, sigma_g,
                                                frequencia, **opcoes) -> Tuple[np.ndarray, np.ndarray]:
    """Matrizes (própria, mútua) de coeficientes de potencial de retorno pela terra para n cabos."""
    return _matrizes(calcular_coeficiente_potencial_proprio_terra, calcular_coeficiente_potencial_mutuo_terra,
                     profundidades, distancias, raios, eps_g, mu_g, sigma_g, frequencia, **opcoes)
