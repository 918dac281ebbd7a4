
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .constants import (
    DESLOCAMENTO_PROFUNDIDADE,
    MODELO_SOLO_CONSTANTE,
    PERMEABILIDADE_MAGNETICA,
    PERMISSIVIDADE_VACUO,
    TOL_INTEGRACAO,
)
from .earth_return import ModoKx
from .errors import ConfiguracaoNaoSuportadaError, GeometriaInvalidaError
from .uncertainty import valor_nominal


def _nominal(x) -> float:
    return float(np.real(valor_nominal(x)))


@dataclass(frozen=True)
class Coordenadas:
    """Representa um ponto imutável no plano cartesiano (x, y); y < 0 abaixo do solo."""
    x: Any
    y: Any

    def distancia_horizontal_ate(self, outro: 'Coordenadas'):
        return abs(self.x - outro.x)


@dataclass(frozen=True)
class CamadaCondutora:
    """
    Camada condutora tubular (ou maciça, com raio interno nulo) e sua isolação externa opcional.
    Todos os campos numéricos aceitam float ou ValorIncerto.
    """
    raio_interno: Any
    raio_externo: Any
    resistividade: Any
    permeabilidade_relativa: Any = 1.0
    raio_externo_isolacao: Optional[Any] = None
    permeabilidade_isolacao: Optional[Any] = None
    permissividade_isolacao: Optional[Any] = None
    resistividade_isolacao: Optional[Any] = None

    def __post_init__(self):
        r_in, r_ext = _nominal(self.raio_interno), _nominal(self.raio_externo)
        if not 0 <= r_in < r_ext:
            raise GeometriaInvalidaError(f"Raios inválidos: é preciso 0 <= r_in ({r_in}) < r_ext ({r_ext}).")
        if _nominal(self.resistividade) <= 0:
            raise GeometriaInvalidaError("A resistividade do condutor deve ser positiva.")
        if _nominal(self.permeabilidade_relativa) <= 0:
            raise GeometriaInvalidaError("A permeabilidade relativa do condutor deve ser positiva.")
        if self.raio_externo_isolacao is None:
            return
        if _nominal(self.raio_externo_isolacao) <= r_ext:
            raise GeometriaInvalidaError(
                f"O raio externo da isolação ({_nominal(self.raio_externo_isolacao)}) deve exceder o do condutor ({r_ext}).")
        if self.permeabilidade_isolacao is None:
            object.__setattr__(self, 'permeabilidade_isolacao', 1.0)
        if self.permissividade_isolacao is None:
            object.__setattr__(self, 'permissividade_isolacao', 1.0)
        if _nominal(self.permeabilidade_isolacao) <= 0 or _nominal(self.permissividade_isolacao) <= 0:
            raise GeometriaInvalidaError("Permeabilidade e permissividade da isolação devem ser positivas.")
        if self.resistividade_isolacao is not None and _nominal(self.resistividade_isolacao) <= 0:
            raise GeometriaInvalidaError("A resistividade da isolação deve ser positiva.")

    @property
    def tem_isolacao(self) -> bool:
        return self.raio_externo_isolacao is not None

    @property
    def condutividade(self):
        return 1 / self.resistividade

    @property
    def raio_mais_externo(self):
        return self.raio_externo_isolacao if self.tem_isolacao else self.raio_externo


@dataclass(frozen=True)
class GeometriaCabo:
    """Cabo com camadas ordenadas da mais interna para a mais externa e uma fase por camada."""
    indice: int
    posicao: Coordenadas
    camadas: Tuple[CamadaCondutora, ...]
    fases: Tuple[int, ...]

    def __post_init__(self):
        object.__setattr__(self, 'camadas', tuple(self.camadas))
        object.__setattr__(self, 'fases', tuple(int(f) for f in self.fases))
        if not self.camadas:
            raise GeometriaInvalidaError(f"O cabo {self.indice} não possui camadas.")
        if len(self.fases) != len(self.camadas):
            raise GeometriaInvalidaError(
                f"O cabo {self.indice} tem {len(self.camadas)} camadas e {len(self.fases)} fases.")
        if any(f < 0 for f in self.fases):
            raise GeometriaInvalidaError(f"Fases do cabo {self.indice} devem ser não negativas.")
        if _nominal(self.posicao.y) >= 0:
            raise GeometriaInvalidaError(f"O cabo {self.indice} deve estar enterrado (y < 0).")
        for anterior, camada in zip(self.camadas, self.camadas[1:]):
            if _nominal(camada.raio_interno) < _nominal(anterior.raio_mais_externo):
                raise GeometriaInvalidaError(
                    f"Camadas sobrepostas no cabo {self.indice}: r_in {_nominal(camada.raio_interno)} "
                    f"< raio externo anterior {_nominal(anterior.raio_mais_externo)}.")

    @property
    def n_camadas(self) -> int:
        return len(self.camadas)

    @property
    def raio_externo(self):
        """Maior raio do cabo (condutor ou isolação), usado no retorno pela terra próprio."""
        return max((c.raio_mais_externo for c in self.camadas), key=_nominal)


@dataclass(frozen=True)
class PropriedadesSolo:
    """Propriedades absolutas do solo em uma frequência."""
    frequencia: float
    condutividade: Any
    permissividade: Any
    permeabilidade: Any


@dataclass(frozen=True)
class ModeloSolo:
    """Solo homogêneo; `modelo` identifica a dependência com a frequência."""
    resistividade: Any
    permissividade_relativa: Any = 1.0
    permeabilidade_relativa: Any = 1.0
    modelo: str = MODELO_SOLO_CONSTANTE

    def __post_init__(self):
        if _nominal(self.resistividade) <= 0:
            raise GeometriaInvalidaError("A resistividade do solo deve ser positiva.")

    def propriedades(self, frequencias: Iterable[float]) -> List[PropriedadesSolo]:
        if self.modelo != MODELO_SOLO_CONSTANTE:
            logging.error(f"Modelo de solo '{self.modelo}' não implementado.")
            raise ConfiguracaoNaoSuportadaError(
                f"Modelo de solo '{self.modelo}' não suportado; disponível: '{MODELO_SOLO_CONSTANTE}'.")
        return [
            PropriedadesSolo(
                frequencia=float(f),
                condutividade=1 / self.resistividade,
                permissividade=PERMISSIVIDADE_VACUO * self.permissividade_relativa,
                permeabilidade=PERMEABILIDADE_MAGNETICA * self.permeabilidade_relativa,
            )
            for f in frequencias
        ]


@dataclass(frozen=True)
class OpcoesCalculo:
    """Escolhas numéricas do cálculo."""
    formula_simplificada: bool = False
    modo_kx: ModoKx = ModoKx.NENHUM
    desprezar_permissividade_solo: bool = True
    tolerancia_integracao: float = TOL_INTEGRACAO
    deslocamento_profundidade: float = DESLOCAMENTO_PROFUNDIDADE
    max_workers: Optional[int] = None

    def __post_init__(self):
        try:
            object.__setattr__(self, 'modo_kx', ModoKx(self.modo_kx))
        except ValueError:
            raise ConfiguracaoNaoSuportadaError(f"Modo kx '{self.modo_kx}' inválido (use 0, 1 ou 2).") from None
        if self.tolerancia_integracao <= 0:
            raise ValueError("A tolerância de integração deve ser positiva.")
        if self.deslocamento_profundidade <= 0:
            raise ValueError("O deslocamento de profundidade deve ser positivo.")
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError("max_workers deve ser >= 1.")

    def argumentos_integracao(self) -> Dict[str, Any]:
        return {
            'modo_kx': self.modo_kx,
            'tolerancia': self.tolerancia_integracao,
            'deslocamento': self.deslocamento_profundidade,
        }


# Ordem das colunas da tabela de geometria (uma linha por camada).
COLUNAS_GEOMETRIA: Tuple[str, ...] = (
    'cabo', 'fase', 'x', 'y', 'raio_interno', 'raio_externo', 'resistividade',
    'permeabilidade_relativa', 'raio_externo_isolacao', 'permeabilidade_isolacao', 'permissividade_isolacao',
)


def _ausente(valor) -> bool:
    if valor is None:
        return True
    nominal = valor_nominal(valor)
    return isinstance(nominal, float) and np.isnan(nominal)


def geometria_de_tabela(linhas: Iterable[Sequence]) -> List[GeometriaCabo]:
    """
    Converte a tabela de geometria (colunas em COLUNAS_GEOMETRIA) em cabos.

    As linhas de um mesmo cabo ficam na ordem da mais interna para a mais
    externa; a posição do cabo é lida da sua primeira linha. Campos de isolação
    vazios (None ou NaN) indicam camada sem isolação.
    """
    agrupadas: Dict[int, Dict[str, list]] = {}
    for numero, linha in enumerate(linhas):
        if len(linha) != len(COLUNAS_GEOMETRIA):
            raise GeometriaInvalidaError(
                f"Linha {numero} com {len(linha)} colunas; esperado {len(COLUNAS_GEOMETRIA)}.")
        dados = dict(zip(COLUNAS_GEOMETRIA, linha))
        cabo = int(valor_nominal(dados['cabo']))
        grupo = agrupadas.setdefault(cabo, {'posicao': [Coordenadas(dados['x'], dados['y'])], 'camadas': [], 'fases': []})
        isolacao = {
            chave: (None if _ausente(dados[chave]) else dados[chave])
            for chave in ('raio_externo_isolacao', 'permeabilidade_isolacao', 'permissividade_isolacao')
        }
        if isolacao['raio_externo_isolacao'] is None:
            isolacao = {chave: None for chave in isolacao}
        grupo['camadas'].append(CamadaCondutora(
            raio_interno=dados['raio_interno'],
            raio_externo=dados['raio_externo'],
            resistividade=dados['resistividade'],
            permeabilidade_relativa=dados['permeabilidade_relativa'],
            **isolacao,
        ))
        grupo['fases'].append(int(valor_nominal(dados['fase'])))

    return [
        GeometriaCabo(indice=cabo, posicao=grupo['posicao'][0], camadas=tuple(grupo['camadas']), fases=tuple(grupo['fases']))
        for cabo, grupo in agrupadas.items()
    ]
