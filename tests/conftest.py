import pytest

from parametros_cabos.data_models import CamadaCondutora, Coordenadas, GeometriaCabo, ModeloSolo

RHO_COBRE = 1.7241e-8
RHO_ALUMINIO = 2.826e-8


def cabo_nucleo_blindagem(indice, x, fase, y=-1.0, resistividade_nucleo=RHO_COBRE):
    """Cabo unipolar: núcleo maciço isolado e blindagem tubular isolada (aterrada)."""
    nucleo = CamadaCondutora(raio_interno=0.0, raio_externo=0.01, resistividade=resistividade_nucleo,
                             raio_externo_isolacao=0.02, permissividade_isolacao=2.3)
    blindagem = CamadaCondutora(raio_interno=0.02, raio_externo=0.0215, resistividade=RHO_ALUMINIO,
                                raio_externo_isolacao=0.025, permissividade_isolacao=2.3)
    return GeometriaCabo(indice=indice, posicao=Coordenadas(x, y), camadas=(nucleo, blindagem), fases=(fase, 0))


@pytest.fixture
def solo():
    return ModeloSolo(resistividade=100.0)


@pytest.fixture
def cabos_trifasicos():
    return [cabo_nucleo_blindagem(i + 1, 0.3 * i, i + 1) for i in range(3)]
