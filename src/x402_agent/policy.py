"""Payment policies applied to the requirements a server offers."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence

from x402.schemas import PaymentRequirements
from x402.schemas.v1 import PaymentRequirementsV1

from .constants import USDC_ADDRESSES

RequirementsView = PaymentRequirements | PaymentRequirementsV1
RequirementPredicate = Callable[[RequirementsView], bool]

# USDC has 6 decimals and is pegged 1:1 to the dollar, so 10**4 smallest units make a cent.
USDC_CENT_DIVISOR = 10**4

DEFAULT_ASSET_DIVISORS: Mapping[str, int] = {
    address.lower(): USDC_CENT_DIVISOR for address in USDC_ADDRESSES.values()
}


@dataclass(frozen=True)
class PolicyConfig:
    """Spending budget for a wallet, in minor currency units (cents).

    ``asset_divisors`` maps a lowercased asset address to the number of
    smallest asset units making up one minor currency unit. Assets that are
    not listed fall back to ``default_divisor``.
    """

    max_payment: Optional[int] = None
    asset_divisors: Mapping[str, int] = field(default_factory=lambda: dict(DEFAULT_ASSET_DIVISORS))
    default_divisor: int = USDC_CENT_DIVISOR

    @property
    def unlimited(self) -> bool:
        return not self.max_payment

    def divisor_for(self, asset: Optional[str]) -> int:
        if asset:
            return self.asset_divisors.get(asset.lower(), self.default_divisor)
        return self.default_divisor


class PolicyRejectionError(RuntimeError):
    """Raised when no payment requirement survives the wallet's policies."""

    def __init__(self, payment_required: Any, response: Any = None) -> None:
        offered = len(getattr(payment_required, "accepts", None) or [])
        super().__init__(
            f"No acceptable payment option: all {offered} payment requirement(s) rejected by policy"
        )
        self.payment_required = payment_required
        self.response = response


def amount_in_minor_units(requirement: RequirementsView, config: PolicyConfig) -> Decimal:
    raw = requirement.get_amount() or "0"
    return Decimal(int(raw)) / config.divisor_for(requirement.asset)


def within_budget(config: PolicyConfig) -> RequirementPredicate:
    """Predicate accepting requirements priced at or below ``config.max_payment``."""

    def predicate(requirement: RequirementsView) -> bool:
        if config.unlimited:
            return True
        return amount_in_minor_units(requirement, config) <= config.max_payment

    return predicate


def allow_networks(networks: Iterable[str]) -> RequirementPredicate:
    allowed = frozenset(networks)

    def predicate(requirement: RequirementsView) -> bool:
        return str(requirement.network) in allowed

    return predicate


def filter_requirements(
    requirements: Sequence[RequirementsView],
    predicates: Sequence[RequirementPredicate],
) -> List[RequirementsView]:
    return [req for req in requirements if all(check(req) for check in predicates)]


def as_payment_policy(predicate: RequirementPredicate):
    """Adapt a predicate to the x402 client policy signature ``(version, reqs) -> reqs``."""

    def policy(version: int, requirements: List[RequirementsView]) -> List[RequirementsView]:
        del version
        return [req for req in requirements if predicate(req)]

    return policy
