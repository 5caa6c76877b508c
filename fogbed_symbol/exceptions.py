# fogbed_symbol/exceptions.py

"""
Exceções do gerador de configuração e genesis

Todas são fatais para a execução corrente; avisos (ex: transações
duplicadas) e reaproveitamento de artefatos existentes são apenas logados.
"""

from typing import Optional, Sequence


class BootstrapError(Exception):
    """Exceção base do fogbed-symbol"""
    pass


class ConservationError(BootstrapError):
    """Supply distribuído difere do declarado ou conta residual sem saldo"""

    def __init__(self, message: str, expected: Optional[int] = None, actual: Optional[int] = None):
        self.expected = expected
        self.actual = actual
        super().__init__(message)


class MissingPrerequisiteError(BootstrapError):
    """Algo obrigatório não existe (nemesis, conta beneficiária, arquivo gerado)"""
    pass


class InvalidNetworkTypeError(BootstrapError, ValueError):
    """Tipo de rede desconhecido"""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid network type {value!r}")


class InvalidPresetError(BootstrapError, ValueError):
    """Preset malformado"""

    def __init__(self, message: str, errors: Optional[Sequence[str]] = None):
        self.errors = list(errors or [])
        super().__init__(message)


class InvalidTransactionError(BootstrapError, ValueError):
    """Payload de transação que não pode ser decodificado"""
    pass


class ProcessError(BootstrapError):
    """Comando externo (docker, nemgen) terminou com erro"""

    def __init__(self, command: Sequence[str], returncode: int, stderr: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(
            f"Command {' '.join(self.command)!r} failed (exit {returncode}): {stderr.strip()}"
        )
