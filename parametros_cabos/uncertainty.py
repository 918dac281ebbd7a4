"""
Propagação linear de incertezas de medição.

Um ValorIncerto guarda o valor nominal (real ou complexo) e, para cada fonte
independente de incerteza, a sensibilidade escalada c = ∂valor/∂fonte · σ_fonte.
Assim a variância da parte real é Σ Re(c)², a da parte imaginária é Σ Im(c)²,
e valores que compartilham fontes ficam correlacionados automaticamente.

Números comuns (float/complex) fazem o papel de valores sem incerteza em todas
as operações.
"""

import itertools
from typing import Callable, Dict, Optional, Union

import numpy as np

from .constants import PASSO_DIFERENCIACAO

Numero = Union[int, float, complex]

_contador_fontes = itertools.count()


class ValorIncerto:
    """Valor nominal acompanhado das sensibilidades às fontes de incerteza."""

    __slots__ = ("nominal", "componentes")

    # Faz os escalares do numpy delegarem as operações aos métodos refletidos.
    __array_ufunc__ = None

    def __init__(self, nominal: Numero, componentes: Optional[Dict[int, Numero]] = None):
        self.nominal = nominal
        self.componentes = componentes if componentes is not None else {}

    # --- Aritmética ---
    def __add__(self, outro):
        if isinstance(outro, np.ndarray):
            return NotImplemented
        b = valor_nominal(outro)
        return ValorIncerto(self.nominal + b, _combinar(self.componentes, 1.0, _componentes(outro), 1.0))

    __radd__ = __add__

    def __sub__(self, outro):
        if isinstance(outro, np.ndarray):
            return NotImplemented
        b = valor_nominal(outro)
        return ValorIncerto(self.nominal - b, _combinar(self.componentes, 1.0, _componentes(outro), -1.0))

    def __rsub__(self, outro):
        if isinstance(outro, np.ndarray):
            return NotImplemented
        a = valor_nominal(outro)
        return ValorIncerto(a - self.nominal, _combinar(_componentes(outro), 1.0, self.componentes, -1.0))

    def __mul__(self, outro):
        if isinstance(outro, np.ndarray):
            return NotImplemented
        b = valor_nominal(outro)
        return ValorIncerto(self.nominal * b, _combinar(self.componentes, b, _componentes(outro), self.nominal))

    __rmul__ = __mul__

    def __truediv__(self, outro):
        if isinstance(outro, np.ndarray):
            return NotImplemented
        b = valor_nominal(outro)
        valor = self.nominal / b
        return ValorIncerto(valor, _combinar(self.componentes, 1.0 / b, _componentes(outro), -valor / b))

    def __rtruediv__(self, outro):
        if isinstance(outro, np.ndarray):
            return NotImplemented
        a = valor_nominal(outro)
        valor = a / self.nominal
        return ValorIncerto(valor, _combinar(_componentes(outro), 1.0 / self.nominal, self.componentes, -valor / self.nominal))

    def __pow__(self, expoente):
        if isinstance(expoente, ValorIncerto):
            return exp(expoente * log(self))
        valor = self.nominal ** expoente
        return ValorIncerto(valor, _escalar(self.componentes, expoente * self.nominal ** (expoente - 1)))

    def __rpow__(self, base):
        return exp(self * log(base))

    def __neg__(self):
        return ValorIncerto(-self.nominal, _escalar(self.componentes, -1.0))

    def __pos__(self):
        return self

    def __abs__(self):
        if _eh_complexo(self.nominal):
            modulo = abs(self.nominal)
            if modulo == 0:
                return ValorIncerto(0.0)
            conjugado = np.conj(self.nominal)
            return ValorIncerto(modulo, {k: float(np.real(conjugado * c)) / modulo for k, c in self.componentes.items()})
        return ValorIncerto(abs(self.nominal), _escalar(self.componentes, float(np.sign(self.nominal))))

    # --- Comparações (sobre a parte real nominal) ---
    def __lt__(self, outro):
        return np.real(self.nominal) < np.real(valor_nominal(outro))

    def __le__(self, outro):
        return np.real(self.nominal) <= np.real(valor_nominal(outro))

    def __gt__(self, outro):
        return np.real(self.nominal) > np.real(valor_nominal(outro))

    def __ge__(self, outro):
        return np.real(self.nominal) >= np.real(valor_nominal(outro))

    # --- Partes de um valor complexo ---
    @property
    def real(self) -> "ValorIncerto":
        return ValorIncerto(float(np.real(self.nominal)), {k: float(np.real(c)) for k, c in self.componentes.items()})

    @property
    def imag(self) -> "ValorIncerto":
        return ValorIncerto(float(np.imag(self.nominal)), {k: float(np.imag(c)) for k, c in self.componentes.items()})

    def conjugate(self) -> "ValorIncerto":
        return ValorIncerto(np.conj(self.nominal), {k: np.conj(c) for k, c in self.componentes.items()})

    # --- Incerteza ---
    @property
    def eh_certo(self) -> bool:
        return not self.componentes

    @property
    def variancia(self) -> float:
        """Variância da parte real."""
        return float(sum(np.real(c) ** 2 for c in self.componentes.values()))

    @property
    def incerteza_real(self) -> float:
        return float(np.sqrt(self.variancia))

    @property
    def incerteza_imag(self) -> float:
        return float(np.sqrt(sum(np.imag(c) ** 2 for c in self.componentes.values())))

    @property
    def incerteza(self) -> Numero:
        """Desvio padrão; para valores complexos, std(Re) + j·std(Im)."""
        if _eh_complexo(self.nominal):
            return complex(self.incerteza_real, self.incerteza_imag)
        return self.incerteza_real

    def covariancia(self, outro: "ValorIncerto") -> float:
        """Covariância entre as partes reais de dois valores."""
        comuns = self.componentes.keys() & _componentes(outro).keys()
        return float(sum(np.real(self.componentes[k]) * np.real(outro.componentes[k]) for k in comuns))

    def __repr__(self) -> str:
        return f"ValorIncerto({self.nominal} ± {self.incerteza})"


def valor_nominal(x):
    return x.nominal if isinstance(x, ValorIncerto) else x


def incerteza(x) -> Numero:
    return x.incerteza if isinstance(x, ValorIncerto) else 0.0


def _componentes(x) -> Dict[int, Numero]:
    return x.componentes if isinstance(x, ValorIncerto) else {}


def _eh_complexo(x) -> bool:
    return isinstance(x, (complex, np.complexfloating))


def _escalar(componentes: Dict[int, Numero], fator) -> Dict[int, Numero]:
    return {k: fator * c for k, c in componentes.items()}


def _combinar(a: Dict[int, Numero], fator_a, b: Dict[int, Numero], fator_b) -> Dict[int, Numero]:
    if not b:
        return _escalar(a, fator_a)
    resultado = _escalar(a, fator_a)
    for k, c in b.items():
        resultado[k] = resultado.get(k, 0.0) + fator_b * c
    return resultado


# --- Criação de medições ---

def medicao(nominal: float, incerteza: float = 0.0) -> ValorIncerto:
    """Cria um valor real associado a uma nova fonte independente de incerteza."""
    if incerteza < 0:
        raise ValueError(f"A incerteza deve ser não negativa (recebido {incerteza}).")
    if incerteza == 0:
        return ValorIncerto(nominal)
    return ValorIncerto(nominal, {next(_contador_fontes): float(incerteza)})


def medicao_complexa(nominal: complex, incerteza_real: float = 0.0, incerteza_imag: float = 0.0) -> ValorIncerto:
    """Valor complexo com incertezas independentes nas partes real e imaginária."""
    if incerteza_real < 0 or incerteza_imag < 0:
        raise ValueError("As incertezas devem ser não negativas.")
    componentes: Dict[int, Numero] = {}
    if incerteza_real:
        componentes[next(_contador_fontes)] = complex(incerteza_real, 0.0)
    if incerteza_imag:
        componentes[next(_contador_fontes)] = complex(0.0, incerteza_imag)
    return ValorIncerto(complex(nominal), componentes)


def de_intervalo(maximo: float, minimo: float) -> ValorIncerto:
    """Valor médio do intervalo com incerteza igual à metade da amplitude."""
    return medicao((maximo + minimo) / 2, abs(maximo - minimo) / 2)


def de_percentual(valor: float, percentual: float) -> ValorIncerto:
    """Valor nominal com desvio dado em porcentagem (0 a 100)."""
    return medicao(valor, abs(percentual * valor) / 100)


# --- Funções elementares ---

def _aplicar(funcao: Callable, derivada: Callable, x):
    if not isinstance(x, ValorIncerto):
        return funcao(x)
    valor = funcao(x.nominal)
    if not x.componentes:
        return ValorIncerto(valor)
    return ValorIncerto(valor, _escalar(x.componentes, derivada(x.nominal)))


def _coth(z):
    return 1.0 / np.tanh(z)


def _csch(z):
    # Evita o overflow de sinh para argumentos grandes.
    if np.real(z) >= 0:
        e = np.exp(-z)
        return 2.0 * e / (1.0 - e * e)
    e = np.exp(z)
    return 2.0 * e / (e * e - 1.0)


def sqrt(x):
    return _aplicar(np.sqrt, lambda v: 0.5 / np.sqrt(v), x)


def exp(x):
    return _aplicar(np.exp, np.exp, x)


def log(x):
    return _aplicar(np.log, lambda v: 1.0 / v, x)


def cos(x):
    return _aplicar(np.cos, lambda v: -np.sin(v), x)


def sin(x):
    return _aplicar(np.sin, np.cos, x)


def cosh(x):
    return _aplicar(np.cosh, np.sinh, x)


def sinh(x):
    return _aplicar(np.sinh, np.cosh, x)


def tanh(x):
    return _aplicar(np.tanh, lambda v: 1.0 - np.tanh(v) ** 2, x)


def coth(x):
    return _aplicar(_coth, lambda v: -_csch(v) ** 2, x)


def csch(x):
    return _aplicar(_csch, lambda v: -_csch(v) * _coth(v), x)


def sinal(x) -> float:
    """Sinal da parte real nominal (derivada nula)."""
    return float(np.sign(np.real(valor_nominal(x))))


# --- Propagação por diferenciação numérica ---

def _derivada_parcial(funcao: Callable, nominais: list, indice: int, passo_relativo: float) -> complex:
    x = nominais[indice]
    passo = passo_relativo * (abs(x) if x != 0 else 1.0)
    acima = list(nominais)
    abaixo = list(nominais)
    acima[indice] = x + passo
    abaixo[indice] = x - passo
    passo_efetivo = acima[indice] - abaixo[indice]
    return (funcao(*acima) - funcao(*abaixo)) / passo_efetivo


def propagar_incerteza(funcao: Callable, *argumentos, passo: float = PASSO_DIFERENCIACAO):
    """
    Avalia `funcao` (escalar, de argumentos reais) no ponto nominal e propaga a
    incerteza de primeira ordem.

    O gradiente das partes real e imaginária do resultado em relação a cada
    argumento incerto é obtido por diferenças centrais e combinado com as
    sensibilidades das entradas. Sem argumentos incertos, reduz-se à avaliação
    comum. `passo` é o passo relativo das diferenças centrais.
    """
    nominais = [float(np.real(valor_nominal(a))) for a in argumentos]
    valor = funcao(*nominais)
    incertos = [i for i, a in enumerate(argumentos) if isinstance(a, ValorIncerto) and a.componentes]
    if not incertos:
        if any(isinstance(a, ValorIncerto) for a in argumentos):
            return ValorIncerto(valor)
        return valor

    componentes: Dict[int, Numero] = {}
    for i in incertos:
        derivada = _derivada_parcial(funcao, nominais, i, passo)
        for k, c in argumentos[i].componentes.items():
            componentes[k] = componentes.get(k, 0.0) + derivada * float(np.real(c))
    return ValorIncerto(valor, componentes)


def com_incerteza(funcao: Callable, ordem: int, argumento):
    """
    Avalia uma função especial `funcao(ordem, z)` (ex.: ive, kve) num argumento
    complexo possivelmente incerto.

    Para argumento sem incerteza o resultado é a avaliação comum.
    """
    if not isinstance(argumento, ValorIncerto):
        return funcao(ordem, complex(argumento))
    return propagar_incerteza(
        lambda x, y: complex(funcao(ordem, complex(x, y))),
        argumento.real,
        argumento.imag,
    )
