
import logging
from concurrent.futures import ProcessPoolExecutor
from functools import partial
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .constants import J
from .data_models import CamadaCondutora, GeometriaCabo, ModeloSolo, OpcoesCalculo, PropriedadesSolo
from .earth_return import calcular_matriz_coeficiente_potencial_terra, calcular_matriz_impedancia_terra
from .errors import GeometriaInvalidaError
from .insulation import calcular_coeficiente_potencial_isolacao, calcular_impedancia_isolacao
from .internal_impedance import calcular_impedancia_externa, calcular_impedancia_interna, calcular_impedancia_mutua
from .matrices import como_incerto, inverter, matriz_objeto, montar_blocos
from .transforms import aplicar_transformada_fortescue, reduzir_feixe_kron, transformar_laco_para_fase


# --- Cálculo por frequência (funções de módulo para poderem ir a outros processos) ---

def _parametros_terra(cabos: Sequence[GeometriaCabo], solo: PropriedadesSolo, opcoes: OpcoesCalculo):
    permissividade = 0.0 if opcoes.desprezar_permissividade_solo else solo.permissividade
    distancias = [[ci.posicao.distancia_horizontal_ate(cj.posicao) for cj in cabos] for ci in cabos]
    return (
        [c.posicao.y for c in cabos],
        distancias,
        [c.raio_externo for c in cabos],
        permissividade,
        solo.permeabilidade,
        solo.condutividade,
        solo.frequencia,
    )


def _argumentos_camada(camada: CamadaCondutora, frequencia: float, simplificada: bool):
    return (camada.raio_externo, camada.raio_interno, camada.condutividade,
            camada.permeabilidade_relativa, frequencia, simplificada)


def _matriz_laco_impedancia(cabo: GeometriaCabo, z_terra, frequencia: float, simplificada: bool) -> np.ndarray:
    """Matriz de laços de um cabo: uma linha por camada, da mais interna para a mais externa."""
    n = cabo.n_camadas
    z = matriz_objeto(n, n)
    for k, camada in enumerate(cabo.camadas):
        z_propria = calcular_impedancia_externa(*_argumentos_camada(camada, frequencia, simplificada))
        if camada.tem_isolacao:
            z_propria = z_propria + calcular_impedancia_isolacao(
                camada.raio_externo_isolacao, camada.raio_externo, camada.permeabilidade_isolacao, frequencia)
        if k < n - 1:
            proxima = _argumentos_camada(cabo.camadas[k + 1], frequencia, simplificada)
            z_propria = z_propria + calcular_impedancia_interna(*proxima)
            z_mutua = calcular_impedancia_mutua(*proxima)
            z[k, k + 1] = -z_mutua
            z[k + 1, k] = -z_mutua
        else:
            z_propria = z_propria + z_terra
        z[k, k] = z_propria
    return z


def _impedancia_na_frequencia(cabos: Sequence[GeometriaCabo], opcoes: OpcoesCalculo,
                              ordem_fases: Sequence[int], solo: PropriedadesSolo) -> np.ndarray:
    frequencia = solo.frequencia
    z_propria, z_mutua = calcular_matriz_impedancia_terra(
        *_parametros_terra(cabos, solo, opcoes), **opcoes.argumentos_integracao())
    z_terra = z_propria + z_mutua

    blocos = []
    for i, cabo_i in enumerate(cabos):
        linha = []
        for j, cabo_j in enumerate(cabos):
            if i == j:
                laco = _matriz_laco_impedancia(cabo_i, z_terra[i, i], frequencia, opcoes.formula_simplificada)
            else:
                laco = matriz_objeto(cabo_i.n_camadas, cabo_j.n_camadas)
                laco[-1, -1] = z_terra[i, j]
            linha.append(transformar_laco_para_fase(laco))
        blocos.append(linha)
    logging.debug(f"Matriz de impedância montada em f={frequencia} Hz.")
    return reduzir_feixe_kron(montar_blocos(blocos), ordem_fases)


def _matriz_potencial_cabo(cabo: GeometriaCabo, frequencia: float) -> np.ndarray:
    """P[k, l] = soma dos coeficientes das isolações m >= max(k, l)."""
    coeficientes = []
    for camada in cabo.camadas:
        if camada.tem_isolacao:
            coeficientes.append(calcular_coeficiente_potencial_isolacao(
                camada.raio_externo_isolacao, camada.raio_externo, camada.permissividade_isolacao,
                frequencia, camada.resistividade_isolacao))
        else:
            coeficientes.append(0j)
    n = cabo.n_camadas
    acumulados = [sum(coeficientes[m:], 0j) for m in range(n)]
    p = matriz_objeto(n, n)
    for k in range(n):
        for l in range(n):
            p[k, l] = acumulados[max(k, l)]
    return p


def _somar_a_todos(matriz: np.ndarray, valor) -> np.ndarray:
    resultado = matriz_objeto(*matriz.shape)
    for indice, elemento in np.ndenumerate(matriz):
        resultado[indice] = elemento + valor
    return resultado


def _admitancia_na_frequencia(cabos: Sequence[GeometriaCabo], opcoes: OpcoesCalculo,
                              ordem_fases: Sequence[int], solo: PropriedadesSolo) -> np.ndarray:
    frequencia = solo.frequencia
    p_propria, p_mutua = calcular_matriz_coeficiente_potencial_terra(
        *_parametros_terra(cabos, solo, opcoes), **opcoes.argumentos_integracao())
    p_terra = p_propria + p_mutua

    blocos = []
    for i, cabo_i in enumerate(cabos):
        linha = []
        for j, cabo_j in enumerate(cabos):
            bloco = _matriz_potencial_cabo(cabo_i, frequencia) if i == j else matriz_objeto(cabo_i.n_camadas, cabo_j.n_camadas)
            linha.append(_somar_a_todos(bloco, p_terra[i, j]))
        blocos.append(linha)
    p_fase = reduzir_feixe_kron(montar_blocos(blocos), ordem_fases)
    logging.debug(f"Matriz de admitância montada em f={frequencia} Hz.")
    return (J * 2 * np.pi * frequencia) * inverter(p_fase)


class SistemaDeCabos:
    """Gerencia um sistema de cabos enterrados e calcula suas matrizes Z e Y por unidade de comprimento."""
    def __init__(self, *, cabos: Sequence[GeometriaCabo], solo: ModeloSolo, opcoes: Optional[OpcoesCalculo] = None):
        if not cabos:
            raise GeometriaInvalidaError("O sistema deve conter ao menos um cabo.")
        self.cabos: Tuple[GeometriaCabo, ...] = tuple(cabos)
        self.solo = solo
        self.opcoes = opcoes if opcoes is not None else OpcoesCalculo()

        self.ordem_fases: List[int] = [f for cabo in self.cabos for f in cabo.fases]
        self.fases: List[int] = list(dict.fromkeys(f for f in self.ordem_fases if f > 0))
        if not self.fases:
            raise GeometriaInvalidaError("Ao menos um condutor deve pertencer a uma fase não nula.")
        self.n_fases = len(self.fases)

        self._resultados: Dict[Tuple[str, Tuple[float, ...]], np.ndarray] = {}
        logging.info(f"Sistema inicializado: {len(self.cabos)} cabo(s), {len(self.ordem_fases)} condutor(es), "
                     f"{self.n_fases} fase(s), Rho={self.solo.resistividade}Ohm.m, modelo de solo '{self.solo.modelo}'")

    def _varrer(self, funcao_por_frequencia: Callable, frequencias: Sequence[float]) -> List[np.ndarray]:
        propriedades = self.solo.propriedades(frequencias)
        calcular = partial(funcao_por_frequencia, self.cabos, self.opcoes, self.ordem_fases)
        workers = self.opcoes.max_workers
        if workers is not None and workers > 1 and len(propriedades) > 1:
            logging.info(f"Varredura de {len(propriedades)} frequência(s) em {workers} processo(s).")
            with ProcessPoolExecutor(max_workers=workers) as executor:
                return list(executor.map(calcular, propriedades))
        return [calcular(p) for p in propriedades]

    def _get_resultado(self, nome: str, funcao_por_frequencia: Callable, frequencias: Sequence[float]) -> np.ndarray:
        frequencias = tuple(float(f) for f in frequencias)
        if not frequencias:
            raise ValueError("A varredura deve conter ao menos uma frequência.")
        if any(f <= 0 for f in frequencias):
            raise ValueError("As frequências devem ser positivas.")
        chave = (nome, frequencias)
        if chave not in self._resultados:
            matrizes = self._varrer(funcao_por_frequencia, frequencias)
            resultado = np.empty((self.n_fases, self.n_fases, len(frequencias)), dtype=object)
            for k, matriz in enumerate(matrizes):
                resultado[:, :, k] = como_incerto(matriz)
            self._resultados[chave] = resultado
            logging.info(f"Matriz {nome} calculada para {len(frequencias)} frequência(s).")
        return self._resultados[chave]

    def calcular_matriz_impedancia(self, frequencias: Sequence[float]) -> np.ndarray:
        """Z[fase, fase, frequência] em Ω/m, com elementos ValorIncerto."""
        return self._get_resultado('Z', _impedancia_na_frequencia, frequencias)

    def calcular_matriz_admitancia(self, frequencias: Sequence[float]) -> np.ndarray:
        """Y[fase, fase, frequência] em S/m, com elementos ValorIncerto."""
        return self._get_resultado('Y', _admitancia_na_frequencia, frequencias)

    @staticmethod
    def calcular_componentes_simetricas(matriz: np.ndarray) -> np.ndarray:
        return aplicar_transformada_fortescue(matriz)
