import numpy as np
import pytest

from parametros_cabos.errors import ConfiguracaoNaoSuportadaError, ReducaoSingularError
from parametros_cabos.matrices import valores_nominais
from parametros_cabos.transforms import (
    aplicar_transformada_fortescue,
    reduzir_feixe_kron,
    reordenar_por_fase,
    transformar_fase_para_laco,
    transformar_laco_para_fase,
)
from parametros_cabos.uncertainty import medicao_complexa


def test_laco_para_fase_e_inversa():
    z_laco = np.array([[3 + 1j, -0.5], [-0.5, 2 + 2j]], dtype=complex)
    z_fase = transformar_laco_para_fase(z_laco)
    assert transformar_fase_para_laco(z_fase) == pytest.approx(z_laco)


def test_laco_para_fase_de_cabo_com_duas_camadas():
    z_laco = np.array([[4.0, -1.0], [-1.0, 3.0]], dtype=complex)
    # Soma das impedâncias de laço da camada até a mais externa, com as mútuas.
    esperado = np.array([[4 - 2 + 3, -1 + 3], [-1 + 3, 3]], dtype=complex)
    assert transformar_laco_para_fase(z_laco) == pytest.approx(esperado)


def test_bloco_retangular_entre_cabos_propaga_a_mutua_de_terra():
    laco = np.zeros((2, 3), dtype=complex)
    laco[-1, -1] = 0.7 + 0.2j
    assert transformar_laco_para_fase(laco) == pytest.approx(np.full((2, 3), 0.7 + 0.2j))


def test_reordenar_por_fase():
    matriz = np.arange(25).reshape(5, 5)
    reordenada, fases, indices = reordenar_por_fase(matriz, [0, 1, 2, 1, 0])
    assert indices == [1, 2, 3, 0, 4]
    assert fases == [1, 2, 1, 0, 0]
    assert reordenada[0, 1] == matriz[1, 2]


def test_representantes_de_fases_intercaladas_vem_primeiro():
    matriz = np.arange(16).reshape(4, 4)
    _, fases, indices = reordenar_por_fase(matriz, [1, 2, 1, 2])
    assert indices == [0, 1, 2, 3]
    assert fases == [1, 2, 1, 2]
    _, fases, indices = reordenar_por_fase(matriz, [2, 2, 1, 1])
    assert indices == [0, 2, 1, 3]
    assert fases == [2, 1, 2, 1]


def test_reducao_de_fases_intercaladas():
    zs1, zm1, zs2, zm2 = 2 + 1j, 0.5 + 0.3j, 3 + 2j, 0.4 + 0.1j
    z = np.zeros((4, 4), dtype=complex)
    z[np.ix_([0, 2], [0, 2])] = [[zs1, zm1], [zm1, zs1]]
    z[np.ix_([1, 3], [1, 3])] = [[zs2, zm2], [zm2, zs2]]
    reduzida = reduzir_feixe_kron(z, [1, 2, 1, 2])
    assert valores_nominais(reduzida) == pytest.approx(np.diag([(zs1 + zm1) / 2, (zs2 + zm2) / 2]))


def test_reordenar_rejeita_tamanho_incompativel():
    with pytest.raises(ValueError):
        reordenar_por_fase(np.eye(3), [1, 2])


def test_ordem_das_fases_na_reducao():
    z = np.array([[1.0, 0.1], [0.1, 2.0]], dtype=complex)
    assert valores_nominais(reduzir_feixe_kron(z, [2, 1])) == pytest.approx(z)
    # Condutor aterrado antes das fases: passa para o fim e é eliminado.
    reduzida = reduzir_feixe_kron(np.array([[2.0, 0.0], [0.0, 1.0]], dtype=complex), [0, 1])
    assert complex(reduzida[0, 0]) == pytest.approx(1.0)


def test_condutores_em_paralelo_simetricos():
    zs, zm = 2 + 1j, 0.5 + 0.3j
    z = np.array([[zs, zm], [zm, zs]], dtype=complex)
    reduzida = reduzir_feixe_kron(z, [1, 1])
    assert reduzida.shape == (1, 1)
    assert complex(reduzida[0, 0]) == pytest.approx((zs + zm) / 2)


def test_eliminacao_de_condutor_aterrado():
    a, b, c = 3 + 2j, 1 + 0.5j, 2 + 1j
    z = np.array([[a, b], [b, c]], dtype=complex)
    reduzida = reduzir_feixe_kron(z, [1, 0])
    assert complex(reduzida[0, 0]) == pytest.approx(a - b * b / c)


def test_reducao_singular():
    z = np.array([[1.0, 1.0], [1.0, 0.0]], dtype=complex)
    with pytest.raises(ReducaoSingularError):
        reduzir_feixe_kron(z, [1, 0])


def test_reducao_propaga_incerteza():
    z = np.empty((2, 2), dtype=object)
    z[0, 0] = medicao_complexa(3 + 2j, 0.1, 0.1)
    z[0, 1] = z[1, 0] = 1 + 0.5j
    z[1, 1] = 2 + 1j
    reduzida = reduzir_feixe_kron(z, [1, 0])
    assert reduzida[0, 0].incerteza_real == pytest.approx(0.1)


def _matriz_equilibrada(zs, zm):
    return np.array([[zs, zm, zm], [zm, zs, zm], [zm, zm, zs]], dtype=complex)


def test_fortescue_de_matriz_equilibrada():
    zs, zm = 1 + 2j, 0.2 + 0.5j
    z012 = aplicar_transformada_fortescue(_matriz_equilibrada(zs, zm))
    assert z012 == pytest.approx(np.diag([zs + 2 * zm, zs - zm, zs - zm]), abs=1e-12)


def test_fortescue_por_frequencia():
    z = np.stack([_matriz_equilibrada(1.0, 0.1), _matriz_equilibrada(2.0, 0.4)], axis=2).astype(object)
    z012 = aplicar_transformada_fortescue(z)
    assert z012.shape == (3, 3, 2)
    assert complex(z012[0, 0, 1]) == pytest.approx(2.8)
    assert complex(z012[2, 2, 0]) == pytest.approx(0.9)


def test_fortescue_exige_tres_fases():
    with pytest.raises(ConfiguracaoNaoSuportadaError):
        aplicar_transformada_fortescue(np.eye(2, dtype=complex))
