# fogbed_symbol/supply.py

"""
Distribuição do supply de tokens no genesis

Regras:
- distribuição explícita é usada como está (mas sempre validada);
- senão, divisão inteira entre os beneficiários, resto somado à primeira entrada;
- opt-in: saldos externos são anexados e descontados da conta residual
  (primeira entrada).

A soma das entradas tem que ser exatamente o supply declarado.
"""

from typing import Iterable, Mapping, Optional, Sequence, Tuple

from fogbed_symbol.exceptions import ConservationError, InvalidPresetError, MissingPrerequisiteError
from fogbed_symbol.models.preset import TokenDistribution
from fogbed_symbol.utils import get_logger

logger = get_logger("supply")

Distribution = Tuple[TokenDistribution, ...]


def _label(name: Optional[str]) -> str:
    return f" for {name}" if name else ""


def total_supplied(distributions: Iterable[TokenDistribution]) -> int:
    return sum(d.amount for d in distributions)


def validate_conservation(
    distributions: Sequence[TokenDistribution], supply: int, name: Optional[str] = None
) -> None:
    """
    Raises:
        ConservationError: soma das entradas diferente do supply
    """
    supplied = total_supplied(distributions)
    if supplied != supply:
        raise ConservationError(
            f"Invalid total supplied value{_label(name)}, expected {supply} but total is {supplied}",
            expected=supply,
            actual=supplied,
        )


def distribute(
    supply: int,
    beneficiaries: Sequence[str],
    explicit: Optional[Sequence[TokenDistribution]] = None,
    name: Optional[str] = None,
) -> Distribution:
    """
    Calcula a distribuição conservativa do supply

    Args:
        supply: Supply total declarado
        beneficiaries: Endereços beneficiários (ordem define quem recebe o resto)
        explicit: Distribuição já fornecida pelo preset
        name: Nome do token (mensagens de erro)

    Returns:
        Distribution: Entradas cuja soma é exatamente `supply`
    """
    if explicit is not None:
        distributions = tuple(explicit)
    else:
        if not beneficiaries:
            raise MissingPrerequisiteError(f"No beneficiary accounts to distribute{_label(name)}")
        count = len(beneficiaries)
        amount_per_account = supply // count
        distributions = tuple(TokenDistribution(address, amount_per_account) for address in beneficiaries)
        remainder = supply - amount_per_account * count
        first = distributions[0]
        distributions = (TokenDistribution(first.address, first.amount + remainder),) + distributions[1:]
        logger.debug(
            f"Distributed {supply}{_label(name)} across {count} accounts "
            f"({amount_per_account} each, remainder {remainder})"
        )

    validate_conservation(distributions, supply, name)
    return distributions


def apply_opt_in(
    distributions: Sequence[TokenDistribution],
    balances: Mapping[str, int],
    supply: int,
    name: Optional[str] = None,
) -> Distribution:
    """
    Anexa os saldos de opt-in e desconta o total da conta residual

    Raises:
        MissingPrerequisiteError: não há conta residual
        InvalidPresetError: endereço de opt-in já presente na distribuição
        ConservationError: conta residual ficaria < 1 ou soma != supply
    """
    if not distributions:
        raise MissingPrerequisiteError(f"Residual account could not be found for opt in{_label(name)}")

    residual = distributions[0]
    existing = {d.address for d in distributions}
    duplicated = [address for address in balances if address in existing]
    if duplicated:
        raise InvalidPresetError(
            f"Opted in addresses already present in distribution{_label(name)}: {', '.join(duplicated)}",
            errors=duplicated,
        )

    opted_in = tuple(TokenDistribution(address, int(amount)) for address, amount in balances.items())
    total_opted_in = total_supplied(opted_in)
    logger.info(
        f"Removing {len(opted_in)} accounts (total of {total_opted_in}) "
        f"from residual account {residual.address}"
    )

    adjusted = TokenDistribution(residual.address, residual.amount - total_opted_in)
    result = (adjusted,) + tuple(distributions[1:]) + opted_in

    if adjusted.amount < 1:
        raise ConservationError(
            f"Residual account didn't have enough balance ({residual.amount}) "
            f"to pay opted in balances of {total_opted_in}",
            expected=total_opted_in,
            actual=residual.amount,
        )

    validate_conservation(result, supply, name)
    return result
