"""Exceções do cálculo de parâmetros de cabos."""


class ErroCabo(Exception):
    """Classe base para erros determinísticos do cálculo."""


class GeometriaInvalidaError(ErroCabo, ValueError):
    """Raios fora de ordem, camadas de espessura nula ou condutor acima do solo."""


class ConfiguracaoNaoSuportadaError(ErroCabo, ValueError):
    """Configuração sem formulação disponível (ex.: Fortescue fora de 3 fases)."""


class ReducaoSingularError(ErroCabo, ArithmeticError):
    """Bloco de eliminação (Kron) ou matriz de coeficientes de potencial não inversível."""


class IntegracaoNaoConvergenteError(ErroCabo, ArithmeticError):
    """A quadratura do retorno pela terra não atingiu a tolerância."""
