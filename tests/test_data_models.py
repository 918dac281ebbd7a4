import math

import pytest
from scipy.constants import epsilon_0, mu_0

from parametros_cabos.data_models import (
    CamadaCondutora,
    Coordenadas,
    GeometriaCabo,
    ModeloSolo,
    OpcoesCalculo,
    geometria_de_tabela,
)
from parametros_cabos.earth_return import ModoKx
from parametros_cabos.errors import ConfiguracaoNaoSuportadaError, GeometriaInvalidaError
from parametros_cabos.uncertainty import medicao


def _nucleo(**kwargs):
    dados = dict(raio_interno=0.0, raio_externo=0.01, resistividade=1.7241e-8, raio_externo_isolacao=0.02)
    dados.update(kwargs)
    return CamadaCondutora(**dados)


def test_coordenadas_distancia_horizontal():
    a, b = Coordenadas(0.0, -1.0), Coordenadas(3.0, -5.0)
    assert a.distancia_horizontal_ate(b) == pytest.approx(3.0)
    assert b.distancia_horizontal_ate(a) == pytest.approx(3.0)


def test_isolacao_recebe_propriedades_padrao():
    camada = _nucleo()
    assert camada.tem_isolacao
    assert camada.permeabilidade_isolacao == 1.0
    assert camada.permissividade_isolacao == 1.0
    assert camada.raio_mais_externo == 0.02


def test_camada_sem_isolacao():
    camada = _nucleo(raio_externo_isolacao=None)
    assert not camada.tem_isolacao
    assert camada.raio_mais_externo == 0.01


@pytest.mark.parametrize("kwargs", [
    {"raio_interno": 0.02},
    {"raio_interno": -0.001},
    {"raio_externo_isolacao": 0.005},
    {"resistividade": 0.0},
    {"permeabilidade_relativa": -1.0},
    {"resistividade_isolacao": -5.0},
])
def test_camada_invalida(kwargs):
    with pytest.raises(GeometriaInvalidaError):
        _nucleo(**kwargs)


def test_camada_aceita_valores_incertos():
    camada = _nucleo(raio_externo=medicao(0.01, 1e-4))
    assert camada.raio_externo.incerteza == pytest.approx(1e-4)


def test_cabo_valido_converte_listas_em_tuplas():
    blindagem = CamadaCondutora(raio_interno=0.02, raio_externo=0.022, resistividade=2.8e-8, raio_externo_isolacao=0.025)
    cabo = GeometriaCabo(indice=1, posicao=Coordenadas(0.0, -1.0), camadas=[_nucleo(), blindagem], fases=[1, 0])
    assert cabo.camadas == (_nucleo(), blindagem)
    assert cabo.fases == (1, 0)
    assert cabo.n_camadas == 2
    assert cabo.raio_externo == 0.025


@pytest.mark.parametrize("posicao, camadas, fases", [
    (Coordenadas(0.0, 0.5), [_nucleo()], [1]),
    (Coordenadas(0.0, -1.0), [], []),
    (Coordenadas(0.0, -1.0), [_nucleo()], [1, 0]),
    (Coordenadas(0.0, -1.0), [_nucleo()], [-1]),
    (Coordenadas(0.0, -1.0), [_nucleo(), CamadaCondutora(raio_interno=0.015, raio_externo=0.03, resistividade=2.8e-8)], [1, 0]),
])
def test_cabo_invalido(posicao, camadas, fases):
    with pytest.raises(GeometriaInvalidaError):
        GeometriaCabo(indice=1, posicao=posicao, camadas=camadas, fases=fases)


def test_propriedades_do_solo_constante():
    solo = ModeloSolo(resistividade=100.0, permissividade_relativa=10.0)
    props = solo.propriedades([50.0, 1000.0])
    assert [p.frequencia for p in props] == [50.0, 1000.0]
    assert props[0].condutividade == pytest.approx(0.01)
    assert props[1].permissividade == pytest.approx(10 * epsilon_0)
    assert props[1].permeabilidade == pytest.approx(mu_0)


def test_modelo_de_solo_nao_suportado():
    with pytest.raises(ConfiguracaoNaoSuportadaError):
        ModeloSolo(resistividade=100.0, modelo="Longmire").propriedades([50.0])


def test_resistividade_do_solo_invalida():
    with pytest.raises(GeometriaInvalidaError):
        ModeloSolo(resistividade=0.0)


def test_opcoes_de_calculo():
    assert OpcoesCalculo(modo_kx=2).modo_kx is ModoKx.TERRA
    assert OpcoesCalculo().desprezar_permissividade_solo
    with pytest.raises(ConfiguracaoNaoSuportadaError):
        OpcoesCalculo(modo_kx=5)
    with pytest.raises(ValueError):
        OpcoesCalculo(max_workers=0)
    with pytest.raises(ValueError):
        OpcoesCalculo(tolerancia_integracao=0.0)


def test_geometria_de_tabela_agrupa_por_cabo():
    nan = math.nan
    linhas = [
        (1, 1, 0.0, -1.0, 0.0, 0.01, 1.7241e-8, 1.0, 0.02, 1.0, 2.3),
        (1, 0, 0.0, -1.0, 0.02, 0.022, 2.8e-8, 1.0, 0.025, 1.0, 2.3),
        (2, 2, 0.3, -1.0, 0.0, 0.01, 1.7241e-8, 1.0, nan, nan, nan),
    ]
    cabos = geometria_de_tabela(linhas)
    assert [c.indice for c in cabos] == [1, 2]
    assert cabos[0].fases == (1, 0)
    assert cabos[0].camadas[0].permissividade_isolacao == 2.3
    assert cabos[1].posicao == Coordenadas(0.3, -1.0)
    assert not cabos[1].camadas[0].tem_isolacao


def test_geometria_de_tabela_rejeita_linha_incompleta():
    with pytest.raises(GeometriaInvalidaError):
        geometria_de_tabela([(1, 1, 0.0, -1.0)])
