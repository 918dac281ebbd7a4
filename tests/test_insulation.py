import numpy as np
import pytest
from scipy.constants import epsilon_0, mu_0

from parametros_cabos.insulation import calcular_coeficiente_potencial_isolacao, calcular_impedancia_isolacao
from parametros_cabos.uncertainty import ValorIncerto, medicao


def test_impedancia_serie_da_isolacao():
    f = 50.0
    z = calcular_impedancia_isolacao(0.02, 0.01, 1.0, f)
    assert z == pytest.approx(1j * 2 * np.pi * f * mu_0 * np.log(2) / (2 * np.pi))


def test_coeficiente_de_potencial_sem_perdas():
    p = calcular_coeficiente_potencial_isolacao(0.02, 0.01, 2.5, 50.0)
    assert complex(p).imag == pytest.approx(0.0)
    assert complex(p).real == pytest.approx(np.log(2) / (2 * np.pi * epsilon_0 * 2.5))


def test_resistividade_infinita_equivale_a_isolacao_ideal():
    ideal = calcular_coeficiente_potencial_isolacao(0.02, 0.01, 2.5, 50.0)
    infinita = calcular_coeficiente_potencial_isolacao(0.02, 0.01, 2.5, 50.0, float("inf"))
    assert infinita == pytest.approx(ideal)


def test_isolacao_com_perdas_tem_parte_imaginaria():
    p = complex(calcular_coeficiente_potencial_isolacao(0.02, 0.01, 2.5, 50.0, 1e8))
    assert p.imag != 0.0
    assert abs(p) < np.log(2) / (2 * np.pi * epsilon_0 * 2.5)


def test_raio_interno_nulo_e_protegido():
    z = calcular_impedancia_isolacao(0.02, 0.0, 1.0, 50.0)
    assert np.isfinite(complex(z).imag)


def test_incerteza_da_permissividade():
    epsr = medicao(2.5, 0.025)
    p = calcular_coeficiente_potencial_isolacao(0.02, 0.01, epsr, 50.0)
    assert isinstance(p, ValorIncerto)
    assert p.incerteza_real / abs(p.nominal) == pytest.approx(0.01, rel=1e-6)
