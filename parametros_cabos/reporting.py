
import datetime
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

import numpy as np

from .matrices import remover_valores_pequenos
from .uncertainty import ValorIncerto, valor_nominal


@dataclass(frozen=True)
class ResumoImpedancia:
    """Resistência e indutância de um elemento diagonal de Z em uma frequência."""
    frequencia: float
    resistencia: float
    delta_resistencia: float
    delta_resistencia_pct: float
    indutancia: float
    delta_indutancia: float
    delta_indutancia_pct: float


@dataclass(frozen=True)
class ResumoAdmitancia:
    """Capacitância e condutância de um elemento diagonal de Y em uma frequência."""
    frequencia: float
    capacitancia: float
    delta_capacitancia: float
    delta_capacitancia_pct: float
    condutancia: float
    delta_condutancia: float
    delta_condutancia_pct: float


def _como_incerto(x) -> ValorIncerto:
    return x if isinstance(x, ValorIncerto) else ValorIncerto(complex(x))


def _percentual(incerteza: float, valor: float) -> float:
    return float('inf') if valor == 0 else 100 * incerteza / abs(valor)


def _parte(x: ValorIncerto, fator: float = 1.0) -> Tuple[float, float, float]:
    valor = x.nominal * fator
    incerteza = x.incerteza_real * abs(fator)
    return valor, incerteza, _percentual(incerteza, valor)


def resumir_parametros(z: np.ndarray, y: np.ndarray, frequencias: Sequence[float],
                       indice: int = 0) -> Tuple[List[ResumoImpedancia], List[ResumoAdmitancia]]:
    """
    Extrai R, L (de Z) e G, C (de Y) do elemento diagonal `indice` em cada
    frequência, com incertezas absolutas e percentuais.
    """
    resumo_z: List[ResumoImpedancia] = []
    resumo_y: List[ResumoAdmitancia] = []
    for k, f in enumerate(frequencias):
        omega = 2 * np.pi * f
        zk = _como_incerto(z[indice, indice, k])
        yk = _como_incerto(y[indice, indice, k])
        r = _parte(zk.real)
        l = _parte(zk.imag, 1 / omega)
        g = _parte(yk.real)
        c = _parte(yk.imag, 1 / omega)
        resumo_z.append(ResumoImpedancia(float(f), *r, *l))
        resumo_y.append(ResumoAdmitancia(float(f), *c, *g))
    return resumo_z, resumo_y


def _formatar_elemento(x) -> str:
    nominal = complex(valor_nominal(x))
    texto = f"({nominal.real:.6e} {nominal.imag:+.6e}j)"
    if isinstance(x, ValorIncerto) and not x.eh_certo:
        texto += f" ± ({x.incerteza_real:.2e}, {x.incerteza_imag:.2e}j)"
    return texto


def _formatar_matriz(matriz: np.ndarray, nome: str, unidades: str) -> str:
    linhas = [f"--- {nome} ({unidades}) ---"]
    for i, linha in enumerate(remover_valores_pequenos(matriz)):
        linhas.append(f"  Linha {i+1}: [" + " ".join(_formatar_elemento(val) for val in linha) + " ]")
    return "\n".join(linhas) + "\n"


def formatar_matrizes(z: np.ndarray, y: np.ndarray, frequencias: Sequence[float]) -> str:
    """Texto com as matrizes Z e Y de fase em cada frequência."""
    blocos = []
    for k, f in enumerate(frequencias):
        blocos.append(f"Frequência: {f} Hz\n")
        blocos.append(_formatar_matriz(z[:, :, k], "Matriz de Impedância de Fase (Z)", "Ohm/m"))
        blocos.append(_formatar_matriz(y[:, :, k], "Matriz de Admitância de Fase (Y)", "S/m"))
    return "\n".join(blocos)


def formatar_componentes_simetricas(z012: np.ndarray, y012: np.ndarray, frequencias: Sequence[float]) -> str:
    """Texto com as impedâncias e admitâncias de sequência (diagonais de Z012 e Y012)."""
    nomes = ("Zero", "Positiva", "Negativa")
    linhas = []
    for k, f in enumerate(frequencias):
        linhas.append(f"Frequência: {f} Hz")
        for s, nome in enumerate(nomes):
            linhas.append(f"  Sequência {nome}: Z = {_formatar_elemento(z012[s, s, k])} Ohm/m | "
                          f"Y = {_formatar_elemento(y012[s, s, k])} S/m")
    return "\n".join(linhas) + "\n"


def _formatar_resumo(resumo_z: List[ResumoImpedancia], resumo_y: List[ResumoAdmitancia]) -> str:
    linhas = [f"{'f (Hz)':>12} {'R (Ohm/m)':>13} {'ΔR%':>8} {'L (H/m)':>13} {'ΔL%':>8} "
              f"{'C (F/m)':>13} {'ΔC%':>8} {'G (S/m)':>13} {'ΔG%':>8}"]
    for rz, ry in zip(resumo_z, resumo_y):
        linhas.append(f"{rz.frequencia:12.4g} {rz.resistencia:13.5e} {rz.delta_resistencia_pct:8.3f} "
                      f"{rz.indutancia:13.5e} {rz.delta_indutancia_pct:8.3f} {ry.capacitancia:13.5e} "
                      f"{ry.delta_capacitancia_pct:8.3f} {ry.condutancia:13.5e} {ry.delta_condutancia_pct:8.3f}")
    return "\n".join(linhas) + "\n"


def montar_memorial(dados: Dict[str, Any]) -> str:
    """
    Monta o memorial de cálculo. `dados` contém 'sistema', 'frequencias', 'Z',
    'Y' e, opcionalmente, 'Z012' e 'Y012'.
    """
    sistema = dados['sistema']
    frequencias = dados['frequencias']
    partes = ["=" * 80 + "\nMEMORIAL DE CÁLCULO DE PARÂMETROS DE CABOS SUBTERRÂNEOS\n" + "=" * 80 + "\n"]
    partes.append(f"Data da Geração: {datetime.datetime.now().strftime('%d/%m/%Y %H:%M:%S')}\n\n")

    partes.append("-" * 25 + " DADOS DE ENTRADA DO SISTEMA " + "-" * 26 + "\n")
    solo = sistema.solo
    partes.append(f"Resistividade do Solo: {solo.resistividade} Ohm.m | εr = {solo.permissividade_relativa} | "
                  f"μr = {solo.permeabilidade_relativa} | Modelo: {solo.modelo}\n")
    partes.append(f"Frequências: {', '.join(f'{f:g}' for f in frequencias)} Hz\n")
    partes.append(f"Fórmula simplificada: {'sim' if sistema.opcoes.formula_simplificada else 'não'} | "
                  f"kx: {sistema.opcoes.modo_kx.name}\n\n")
    partes.append("Configuração dos Cabos:\n")
    for cabo in sistema.cabos:
        partes.append(f"  Cabo {cabo.indice}: Coordenadas=(x={cabo.posicao.x}, y={cabo.posicao.y}) m, fases {list(cabo.fases)}\n")
        for k, camada in enumerate(cabo.camadas):
            isolacao = f", isolação até {camada.raio_externo_isolacao} m" if camada.tem_isolacao else ""
            partes.append(f"    Camada {k+1}: r_in={camada.raio_interno} m, r_ext={camada.raio_externo} m, "
                          f"rho={camada.resistividade} Ohm.m{isolacao}\n")

    partes.append("\n" + "-" * 26 + " MATRIZES DE FASE POR METRO " + "-" * 26 + "\n\n")
    partes.append(formatar_matrizes(dados['Z'], dados['Y'], frequencias))

    if 'Z012' in dados and 'Y012' in dados:
        partes.append("\n" + "-" * 27 + " COMPONENTES SIMÉTRICAS " + "-" * 30 + "\n\n")
        partes.append(formatar_componentes_simetricas(dados['Z012'], dados['Y012'], frequencias))

    partes.append("\n" + "-" * 25 + " RESUMO DA PRIMEIRA FASE " + "-" * 30 + "\n\n")
    partes.append(_formatar_resumo(*resumir_parametros(dados['Z'], dados['Y'], frequencias)))
    partes.append("\n" + "=" * 80 + "\nFIM DO MEMORIAL\n" + "=" * 80 + "\n")
    return "".join(partes)


def gerar_memorial_calculo(filename: str, dados: Dict[str, Any]):
    logging.info(f"Gerando memorial de cálculo no arquivo: {filename}")
    with open(filename, 'w', encoding='utf-8') as f:
        f.write(montar_memorial(dados))
    logging.info("Memorial de cálculo gerado com sucesso.")
