
import numpy as np
from typing import Final
from scipy.constants import mu_0, epsilon_0

# --- Constantes de Base ---
PERMEABILIDADE_MAGNETICA: Final[float] = mu_0
PERMISSIVIDADE_VACUO: Final[float] = epsilon_0
CONDUTIVIDADE_AR: Final[float] = 0.0
J: Final[complex] = 1j
OPERADOR_ALPHA: Final[complex] = np.exp(J * 2 * np.pi / 3)

# --- Tolerâncias numéricas ---
TOL_RAIO: Final[float] = 1e-6
EPS_RAIO: Final[float] = float(np.finfo(float).eps)
EPS_LIMPEZA: Final[float] = float(np.finfo(float).eps)
PASSO_DIFERENCIACAO: Final[float] = float(np.cbrt(np.finfo(float).eps))
TOL_PIVO: Final[float] = 1e-13

# Integração numérica do retorno pela terra
TOL_INTEGRACAO: Final[float] = 1e-6
DESLOCAMENTO_PROFUNDIDADE: Final[float] = 1e-3
LIMITE_SUBDIVISOES: Final[int] = 500
LIMITE_CICLOS: Final[int] = 200
# Passo relativo das diferenças centrais sobre resultados de quadratura
PASSO_DIFERENCIACAO_INTEGRAL: Final[float] = 1e-3
# Trecho finito da quadratura: múltiplo de 1/|h1 + h2| e ciclos de cos(λy) antes da cauda
FATOR_CORTE_IMAGEM: Final[float] = 50.0
CICLOS_TRECHO_FINITO: Final[int] = 50

# Aproximações da fórmula simplificada para condutor maciço
FATOR_COTH_MACICO: Final[float] = 0.733
FATOR_RESISTENCIA_MACICO: Final[float] = 0.3179

# Modelos de solo dependentes da frequência
MODELO_SOLO_CONSTANTE: Final[str] = "CP"
