import numpy as np
import pytest

from parametros_cabos.core import SistemaDeCabos
from parametros_cabos.reporting import (
    formatar_componentes_simetricas,
    formatar_matrizes,
    gerar_memorial_calculo,
    montar_memorial,
    resumir_parametros,
)
from parametros_cabos.uncertainty import medicao_complexa

FREQUENCIAS = [50.0, 100.0]


def _matrizes_1x1():
    z = np.empty((1, 1, 2), dtype=object)
    y = np.empty((1, 1, 2), dtype=object)
    for k, f in enumerate(FREQUENCIAS):
        omega = 2 * np.pi * f
        z[0, 0, k] = medicao_complexa(complex(1e-4, omega * 2e-7), 1e-6, 0.0)
        y[0, 0, k] = complex(0.0, omega * 3e-10)
    return z, y


def test_resumo_de_r_l_c_g():
    z, y = _matrizes_1x1()
    resumo_z, resumo_y = resumir_parametros(z, y, FREQUENCIAS)
    assert [r.frequencia for r in resumo_z] == FREQUENCIAS
    assert resumo_z[0].resistencia == pytest.approx(1e-4)
    assert resumo_z[0].delta_resistencia_pct == pytest.approx(1.0)
    assert resumo_z[1].indutancia == pytest.approx(2e-7)
    assert resumo_z[1].delta_indutancia == 0.0
    assert resumo_y[0].capacitancia == pytest.approx(3e-10)
    assert resumo_y[0].condutancia == 0.0
    assert resumo_y[0].delta_condutancia_pct == float('inf')


def test_formatar_matrizes():
    z, y = _matrizes_1x1()
    texto = formatar_matrizes(z, y, FREQUENCIAS)
    assert texto.count("Linha 1") == 4
    assert "Frequência: 100.0 Hz" in texto
    assert "±" in texto


def test_formatar_componentes_simetricas():
    z012 = np.array([np.diag([3.0, 1.0, 1.0])], dtype=complex).transpose(1, 2, 0)
    texto = formatar_componentes_simetricas(z012, z012, [50.0])
    assert "Sequência Zero" in texto
    assert "Sequência Negativa" in texto


def test_memorial_de_calculo(tmp_path, solo, cabos_trifasicos):
    sistema = SistemaDeCabos(cabos=cabos_trifasicos, solo=solo)
    z = sistema.calcular_matriz_impedancia([50.0])
    y = sistema.calcular_matriz_admitancia([50.0])
    dados = {'sistema': sistema, 'frequencias': [50.0], 'Z': z, 'Y': y,
             'Z012': sistema.calcular_componentes_simetricas(z),
             'Y012': sistema.calcular_componentes_simetricas(y)}
    texto = montar_memorial(dados)
    assert "Cabo 3" in texto
    assert "COMPONENTES SIMÉTRICAS" in texto

    arquivo = tmp_path / "memorial.txt"
    gerar_memorial_calculo(str(arquivo), dados)
    assert "FIM DO MEMORIAL" in arquivo.read_text(encoding='utf-8')
