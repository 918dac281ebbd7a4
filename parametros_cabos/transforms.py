"""Transformações lineares: laço → fase, agrupamento/Kron e componentes simétricas."""

import logging
from typing import List, Sequence, Tuple

import numpy as np

from .constants import OPERADOR_ALPHA
from .errors import ConfiguracaoNaoSuportadaError
from .matrices import resolver


def _inversa_tv(n: int) -> np.ndarray:
    # T_V = I - superdiagonal; sua inversa é a triangular superior de uns.
    return np.triu(np.ones((n, n)))


def _tv(n: int) -> np.ndarray:
    return np.eye(n) - np.eye(n, k=1)


def _ti(n: int) -> np.ndarray:
    return np.tril(np.ones((n, n)))


def _inversa_ti(n: int) -> np.ndarray:
    return np.eye(n) - np.eye(n, k=-1)


def transformar_laco_para_fase(z_laco: np.ndarray) -> np.ndarray:
    """
    Z_fase = T_V⁻¹ · Z_laco · T_I.

    Para blocos retangulares entre cabos diferentes, T_V tem a dimensão das
    linhas e T_I a das colunas.
    """
    linhas, colunas = np.shape(z_laco)
    return _inversa_tv(linhas) @ np.asarray(z_laco) @ _ti(colunas)


def transformar_fase_para_laco(z_fase: np.ndarray) -> np.ndarray:
    """Inversa de transformar_laco_para_fase: Z_laco = T_V · Z_fase · T_I⁻¹."""
    linhas, colunas = np.shape(z_fase)
    return _tv(linhas) @ np.asarray(z_fase) @ _inversa_ti(colunas)


def reordenar_por_fase(matriz: np.ndarray, ordem_fases: Sequence[int]) -> Tuple[np.ndarray, List[int], List[int]]:
    """
    Reordena linhas e colunas: primeiro o representante (primeiro condutor) de
    cada fase positiva, na ordem da primeira ocorrência; depois os demais
    condutores de cada fase; por último os aterrados (fase 0).

    Retorna a matriz reordenada, as fases na nova ordem e os índices originais.
    """
    ordem_fases = [int(f) for f in ordem_fases]
    if len(ordem_fases) != np.shape(matriz)[0]:
        raise ValueError(f"Ordem de fases com {len(ordem_fases)} entradas para matriz {np.shape(matriz)}.")
    fases_positivas = list(dict.fromkeys(f for f in ordem_fases if f > 0))
    grupos = [[i for i, f in enumerate(ordem_fases) if f == fase] for fase in fases_positivas]
    indices: List[int] = [posicoes[0] for posicoes in grupos]
    for posicoes in grupos:
        indices.extend(posicoes[1:])
    indices.extend(i for i, f in enumerate(ordem_fases) if f == 0)
    reordenada = np.asarray(matriz)[np.ix_(indices, indices)]
    return reordenada, [ordem_fases[i] for i in indices], indices


def reduzir_feixe_kron(matriz: np.ndarray, ordem_fases: Sequence[int]) -> np.ndarray:
    """
    Agrupa condutores em paralelo de uma mesma fase e elimina os aterrados.

    Dentro de cada fase, a coluna (e depois a linha) do representante é
    subtraída das demais; os condutores restantes da fase passam a carregar
    apenas a diferença e são eliminados junto com os de fase 0 por
    Z11 - Z12·Z22⁻¹·Z21.
    """
    z, fases, _ = reordenar_por_fase(matriz, ordem_fases)
    z = np.array(z, dtype=object)
    fases_positivas = list(dict.fromkeys(f for f in fases if f > 0))
    nf = len(fases_positivas)

    grupos = {fase: [i for i, f in enumerate(fases) if f == fase] for fase in fases_positivas}
    colunas = z.copy()
    for posicoes in grupos.values():
        for p in posicoes[1:]:
            colunas[:, p] = colunas[:, p] - z[:, posicoes[0]]
    linhas = colunas.copy()
    for posicoes in grupos.values():
        for p in posicoes[1:]:
            linhas[p, :] = linhas[p, :] - colunas[posicoes[0], :]

    # Após o reordenamento os representantes ocupam as primeiras nf posições.
    representantes = list(range(nf))
    eliminados = list(range(nf, len(fases)))
    z11 = linhas[np.ix_(representantes, representantes)]
    if not eliminados:
        return z11
    z12 = linhas[np.ix_(representantes, eliminados)]
    z21 = linhas[np.ix_(eliminados, representantes)]
    z22 = linhas[np.ix_(eliminados, eliminados)]
    logging.debug(f"Redução de Kron: {nf} fase(s) mantida(s), {len(eliminados)} condutor(es) eliminado(s).")
    return z11 - z12 @ resolver(z22, z21)


def _matriz_fortescue() -> np.ndarray:
    a = OPERADOR_ALPHA
    return np.array([[1, 1, 1], [1, a**2, a], [1, a, a**2]], dtype=complex)


def aplicar_transformada_fortescue(matriz: np.ndarray) -> np.ndarray:
    """
    Z012 = T⁻¹ · Z · T para cada amostra de frequência (última dimensão de um
    array 3-D) ou para uma única matriz 3×3.
    """
    if np.shape(matriz)[:2] != (3, 3):
        raise ConfiguracaoNaoSuportadaError(
            f"A transformada de Fortescue exige exatamente 3 fases (recebido {np.shape(matriz)[0]}).")
    t = _matriz_fortescue()
    t_inv = np.linalg.inv(t)
    matriz = np.asarray(matriz)
    if matriz.ndim == 2:
        return t_inv @ matriz @ t
    resultado = np.empty_like(matriz)
    for k in range(matriz.shape[2]):
        resultado[:, :, k] = t_inv @ matriz[:, :, k] @ t
    return resultado
