
import logging
from typing import Any, Dict, List, Optional, Union

import numpy as np
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from .core import SistemaDeCabos
from .data_models import CamadaCondutora, Coordenadas, GeometriaCabo, ModeloSolo, OpcoesCalculo
from .errors import ErroCabo
from .matrices import incertezas, valores_nominais
from .reporting import gerar_memorial_calculo, montar_memorial
from .uncertainty import medicao

app = FastAPI(
    title="API para Cálculo de Parâmetros de Cabos Subterrâneos",
    description="Calcula as matrizes de impedância série e admitância shunt por unidade de comprimento de sistemas de cabos enterrados, com propagação de incertezas.",
    version="1.0.0"
)

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')


class MedidaInput(BaseModel):
    valor: float
    incerteza: float = 0.0


Numero = Union[float, MedidaInput]


class CoordenadasInput(BaseModel):
    x: Numero
    y: Numero


class CamadaInput(BaseModel):
    raio_interno_m: Numero
    raio_externo_m: Numero
    resistividade_ohm_m: Numero
    permeabilidade_relativa: Numero = 1.0
    raio_externo_isolacao_m: Optional[Numero] = None
    permeabilidade_isolacao: Optional[Numero] = None
    permissividade_isolacao: Optional[Numero] = None
    resistividade_isolacao_ohm_m: Optional[Numero] = None
    fase: int


class CaboInput(BaseModel):
    coord: CoordenadasInput
    camadas: List[CamadaInput]


class SoloInput(BaseModel):
    resistividade_ohm_m: Numero
    permissividade_relativa: Numero = 1.0
    permeabilidade_relativa: Numero = 1.0
    modelo: str = "CP"


class SistemaInput(BaseModel):
    frequencias_hz: List[float]
    solo: SoloInput
    cabos_config: List[CaboInput]
    formula_simplificada: bool = False
    modo_kx: int = 0
    # Se informado, o memorial também é gravado neste arquivo no servidor.
    arquivo_memorial: Optional[str] = None


def _medida(valor):
    if isinstance(valor, MedidaInput):
        return medicao(valor.valor, valor.incerteza)
    return valor


def _matriz_json(matriz: np.ndarray) -> Dict[str, Any]:
    nominais = valores_nominais(matriz)
    desvios = incertezas(matriz)
    return {
        'real': nominais.real.tolist(),
        'imag': nominais.imag.tolist(),
        'incerteza_real': desvios.real.tolist(),
        'incerteza_imag': desvios.imag.tolist(),
    }


def _montar_sistema(sistema_input: SistemaInput) -> SistemaDeCabos:
    cabos = []
    for i, c in enumerate(sistema_input.cabos_config):
        camadas = [
            CamadaCondutora(
                raio_interno=_medida(k.raio_interno_m),
                raio_externo=_medida(k.raio_externo_m),
                resistividade=_medida(k.resistividade_ohm_m),
                permeabilidade_relativa=_medida(k.permeabilidade_relativa),
                raio_externo_isolacao=_medida(k.raio_externo_isolacao_m),
                permeabilidade_isolacao=_medida(k.permeabilidade_isolacao),
                permissividade_isolacao=_medida(k.permissividade_isolacao),
                resistividade_isolacao=_medida(k.resistividade_isolacao_ohm_m),
            ) for k in c.camadas
        ]
        cabos.append(GeometriaCabo(
            indice=i + 1,
            posicao=Coordenadas(x=_medida(c.coord.x), y=_medida(c.coord.y)),
            camadas=camadas,
            fases=[k.fase for k in c.camadas],
        ))
    solo = ModeloSolo(
        resistividade=_medida(sistema_input.solo.resistividade_ohm_m),
        permissividade_relativa=_medida(sistema_input.solo.permissividade_relativa),
        permeabilidade_relativa=_medida(sistema_input.solo.permeabilidade_relativa),
        modelo=sistema_input.solo.modelo,
    )
    opcoes = OpcoesCalculo(formula_simplificada=sistema_input.formula_simplificada, modo_kx=sistema_input.modo_kx)
    return SistemaDeCabos(cabos=cabos, solo=solo, opcoes=opcoes)


@app.post("/calcular/",
          summary="Calcula as matrizes Z e Y do sistema de cabos na varredura de frequências",
          response_description="Retorna as matrizes de fase (e de sequência, se houver 3 fases) e o memorial de cálculo.")
def calcular(sistema_input: SistemaInput) -> Dict[str, Any]:
    """
    Recebe a geometria dos cabos, o solo e as frequências, realiza os cálculos e retorna as matrizes.
    """
    try:
        sistema = _montar_sistema(sistema_input)
        frequencias = sistema_input.frequencias_hz
        z = sistema.calcular_matriz_impedancia(frequencias)
        y = sistema.calcular_matriz_admitancia(frequencias)

        dados_memorial: Dict[str, Any] = {'sistema': sistema, 'frequencias': frequencias, 'Z': z, 'Y': y}
        resposta: Dict[str, Any] = {
            'n_fases': sistema.n_fases,
            'frequencias_hz': frequencias,
            'Z': _matriz_json(z),
            'Y': _matriz_json(y),
        }
        if sistema.n_fases == 3:
            dados_memorial['Z012'] = sistema.calcular_componentes_simetricas(z)
            dados_memorial['Y012'] = sistema.calcular_componentes_simetricas(y)
            resposta['Z012'] = _matriz_json(dados_memorial['Z012'])
            resposta['Y012'] = _matriz_json(dados_memorial['Y012'])

        if sistema_input.arquivo_memorial:
            gerar_memorial_calculo(sistema_input.arquivo_memorial, dados_memorial)
            with open(sistema_input.arquivo_memorial, "r", encoding="utf-8") as f:
                resposta["memorial_de_calculo"] = f.read()
        else:
            resposta["memorial_de_calculo"] = montar_memorial(dados_memorial)
        logging.info("Cálculo via API concluído com sucesso.")
        return resposta

    except (ErroCabo, ValueError) as e:
        logging.error(f"Erro na requisição: {e}", exc_info=True)
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logging.error(f"Erro inesperado no servidor: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Ocorreu um erro interno no servidor.")
