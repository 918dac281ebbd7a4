"""Parâmetros elétricos (Z e Y por unidade de comprimento) de sistemas de cabos subterrâneos."""

from .core import SistemaDeCabos
from .data_models import (
    CamadaCondutora,
    Coordenadas,
    GeometriaCabo,
    ModeloSolo,
    OpcoesCalculo,
    PropriedadesSolo,
    geometria_de_tabela,
)
from .earth_return import ModoKx
from .errors import (
    ConfiguracaoNaoSuportadaError,
    ErroCabo,
    GeometriaInvalidaError,
    IntegracaoNaoConvergenteError,
    ReducaoSingularError,
)
from .uncertainty import ValorIncerto, de_intervalo, de_percentual, medicao, medicao_complexa

__all__ = [
    "SistemaDeCabos",
    "CamadaCondutora",
    "Coordenadas",
    "GeometriaCabo",
    "ModeloSolo",
    "OpcoesCalculo",
    "PropriedadesSolo",
    "geometria_de_tabela",
    "ModoKx",
    "ErroCabo",
    "GeometriaInvalidaError",
    "ConfiguracaoNaoSuportadaError",
    "ReducaoSingularError",
    "IntegracaoNaoConvergenteError",
    "ValorIncerto",
    "medicao",
    "medicao_complexa",
    "de_intervalo",
    "de_percentual",
]
