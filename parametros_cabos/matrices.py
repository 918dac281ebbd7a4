"""
Álgebra linear sobre matrizes de objetos (ValorIncerto misturado com complexos).

O numpy multiplica e soma matrizes de dtype=object elemento a elemento, mas
np.linalg só aceita tipos numéricos; por isso a solução de sistemas é feita
aqui por eliminação de Gauss com pivotamento parcial.
"""

from typing import List, Sequence

import numpy as np

from .constants import EPS_LIMPEZA, TOL_PIVO
from .errors import ReducaoSingularError
from .uncertainty import ValorIncerto, incerteza, valor_nominal


def matriz_objeto(linhas: int, colunas: int) -> np.ndarray:
    """Matriz de objetos preenchida com zeros complexos."""
    matriz = np.empty((linhas, colunas), dtype=object)
    matriz.fill(0j)
    return matriz


def como_incerto(matriz: np.ndarray) -> np.ndarray:
    """Converte todos os elementos em ValorIncerto (números comuns viram valores certos)."""
    resultado = np.empty(np.shape(matriz), dtype=object)
    for indice, elemento in np.ndenumerate(np.asarray(matriz, dtype=object)):
        resultado[indice] = elemento if isinstance(elemento, ValorIncerto) else ValorIncerto(complex(elemento))
    return resultado


def valores_nominais(matriz: np.ndarray) -> np.ndarray:
    matriz = np.asarray(matriz, dtype=object)
    return np.array([valor_nominal(x) for x in matriz.flat], dtype=complex).reshape(matriz.shape)


def incertezas(matriz: np.ndarray) -> np.ndarray:
    """Desvios padrão std(Re) + j·std(Im) de cada elemento."""
    matriz = np.asarray(matriz, dtype=object)
    return np.array([complex(incerteza(x)) for x in matriz.flat], dtype=complex).reshape(matriz.shape)


def _escala(matriz: np.ndarray) -> float:
    return max((abs(valor_nominal(x)) for x in matriz.flat), default=0.0)


def resolver(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """
    Resolve A·X = B por eliminação de Gauss com pivotamento parcial.

    Parâmetros
    ----------
    a : matriz quadrada n×n (objetos ou números)
    b : vetor de n elementos ou matriz n×m

    Retorna
    -------
    X com a mesma forma de `b`, dtype=object.

    Levanta ReducaoSingularError se algum pivô for desprezível frente ao maior
    elemento de A.
    """
    a = np.array(a, dtype=object)
    b = np.array(b, dtype=object)
    vetor = b.ndim == 1
    if vetor:
        b = b.reshape(-1, 1)
    n = a.shape[0]
    if a.shape != (n, n) or b.shape[0] != n:
        raise ValueError(f"Dimensões incompatíveis: A {a.shape}, B {b.shape}.")
    if n == 0:
        return b.reshape(-1) if vetor else b

    escala = _escala(a)
    if escala == 0:
        raise ReducaoSingularError("Matriz nula não pode ser invertida.")
    m = b.shape[1]

    for k in range(n):
        pivo = max(range(k, n), key=lambda i: abs(valor_nominal(a[i, k])))
        if abs(valor_nominal(a[pivo, k])) <= TOL_PIVO * escala:
            raise ReducaoSingularError(f"Matriz singular: pivô desprezível na coluna {k}.")
        if pivo != k:
            a[[k, pivo]] = a[[pivo, k]]
            b[[k, pivo]] = b[[pivo, k]]
        for i in range(k + 1, n):
            fator = a[i, k] / a[k, k]
            for j in range(k + 1, n):
                a[i, j] = a[i, j] - fator * a[k, j]
            for j in range(m):
                b[i, j] = b[i, j] - fator * b[k, j]
            a[i, k] = 0j

    x = np.empty((n, m), dtype=object)
    for i in reversed(range(n)):
        for j in range(m):
            soma = b[i, j]
            for l in range(i + 1, n):
                soma = soma - a[i, l] * x[l, j]
            x[i, j] = soma / a[i, i]
    return x.reshape(-1) if vetor else x


def inverter(a: np.ndarray) -> np.ndarray:
    n = np.shape(a)[0]
    identidade = matriz_objeto(n, n)
    for i in range(n):
        identidade[i, i] = 1.0 + 0j
    return resolver(a, identidade)


def montar_blocos(blocos: Sequence[Sequence[np.ndarray]]) -> np.ndarray:
    """
    Monta a matriz completa a partir de uma grade de blocos de formas variáveis.

    blocos[i][j] deve ter blocos[i][0].shape[0] linhas e blocos[0][j].shape[1]
    colunas; os deslocamentos são acumulados a partir dessas dimensões.
    """
    alturas: List[int] = [np.shape(linha[0])[0] for linha in blocos]
    larguras: List[int] = [np.shape(bloco)[1] for bloco in blocos[0]] if blocos else []
    total = matriz_objeto(sum(alturas), sum(larguras))

    inicio_linha = 0
    for i, linha in enumerate(blocos):
        inicio_coluna = 0
        for j, bloco in enumerate(linha):
            if np.shape(bloco) != (alturas[i], larguras[j]):
                raise ValueError(f"Bloco ({i}, {j}) com forma {np.shape(bloco)}, esperado {(alturas[i], larguras[j])}.")
            total[inicio_linha:inicio_linha + alturas[i], inicio_coluna:inicio_coluna + larguras[j]] = bloco
            inicio_coluna += larguras[j]
        inicio_linha += alturas[i]
    return total


def _limpar_elemento(x, limite: float):
    nominal = complex(valor_nominal(x))
    zerar_real = abs(nominal.real) < limite
    zerar_imag = abs(nominal.imag) < limite
    if not isinstance(x, ValorIncerto):
        return complex(0.0 if zerar_real else nominal.real, 0.0 if zerar_imag else nominal.imag)
    componentes = {}
    for k, c in x.componentes.items():
        c = complex(c)
        c = complex(0.0 if zerar_real else c.real, 0.0 if zerar_imag else c.imag)
        if c != 0:
            componentes[k] = c
    return ValorIncerto(complex(0.0 if zerar_real else nominal.real, 0.0 if zerar_imag else nominal.imag), componentes)


def remover_valores_pequenos(dados, limite: float = EPS_LIMPEZA):
    """
    Zera as partes real e imaginária cujo valor nominal é menor que `limite`
    (por padrão o epsilon da máquina), junto com a incerteza correspondente.
    Aceita escalares ou arrays de qualquer dimensão.
    """
    if np.ndim(dados) == 0:
        return _limpar_elemento(dados, limite)
    dados = np.asarray(dados, dtype=object)
    resultado = np.empty(dados.shape, dtype=object)
    for indice, elemento in np.ndenumerate(dados):
        resultado[indice] = _limpar_elemento(elemento, limite)
    return resultado
