"""
Harvest computation: distributing a fixed amount of grain by cred.

A harvest contains receipts showing how much grain each contributor
receives, the timestamp of the harvest, and the strategy used.

Two strategies are supported:
- FAST distributes a fixed amount of grain by the cred scores of the most
  recent completed interval
- FAIR distributes a fixed amount of grain by cred across all time,
  prioritizing contributors whose lifetime earnings are lower than their
  lifetime cred share says they should be

The harvest timestamp decides which cred is in scope: a harvest with a
timestamp in the past rewards the cred of that past period, and slices
ending after the timestamp are ignored entirely.
"""
import logging
import math
from fractions import Fraction
from typing import Dict, Mapping, Tuple, Union

from grain_harvest.config import settings
from grain_harvest.errors import InvalidAmount, InvalidNumberError, UnknownStrategyType, UnsupportedStrategyVersion
from grain_harvest.grain import Grain, Ratio, ZERO, format as format_grain, proportion, scale_by_ratio, sum_grains
from grain_harvest.models.cred import Address, CredHistory
from grain_harvest.models.harvest import (
    FAIR,
    FAST,
    STRATEGY_VERSION_1,
    FairStrategy,
    FastStrategy,
    GrainReceipt,
    Harvest,
)

logger = logging.getLogger(__name__)


def harvest(
        strategy: Union[FastStrategy, FairStrategy],
        cred_history: CredHistory,
        earnings: Mapping[Address, Grain],
        timestamp_ms: int
) -> Harvest:
    """
    Compute a full harvest.

    Args:
        strategy: The strategy (and amount) to distribute with
        cred_history: Cred slices ordered by increasing interval_end_ms
        earnings: Lifetime grain already paid to each address
        timestamp_ms: Effective time of the harvest

    Returns:
        Harvest: The receipts, echoing strategy and timestamp_ms. Receipts are
        empty when no slice ends at or before timestamp_ms, or when all in-scope
        cred is zero.

    Raises:
        UnknownStrategyType: If strategy is not a FAST or FAIR strategy
        UnsupportedStrategyVersion: If the strategy version is not implemented
        InvalidAmount: If the strategy amount is negative
        InvalidNumberError: If in-scope cred is non-finite or negative
    """
    strategy_type = getattr(strategy, 'type', None)
    if strategy_type not in (FAST, FAIR):
        raise UnknownStrategyType(strategy_type)

    filtered_slices = [s for s in cred_history if s.interval_end_ms <= timestamp_ms]
    if not filtered_slices:
        logger.debug(f"No cred slices end at or before {timestamp_ms}; returning empty harvest")
        return Harvest(strategy=strategy, receipts=(), timestamp_ms=timestamp_ms)

    if strategy_type == FAST:
        _check_version(strategy)
        last_slice = filtered_slices[-1]
        receipts = compute_fast_receipts(strategy.amount, last_slice.cred)
    else:
        _check_version(strategy)
        lifetime_cred: Dict[Address, Fraction] = {}
        for cred_slice in filtered_slices:
            for address, own_cred in _exact_cred(cred_slice.cred).items():
                lifetime_cred[address] = lifetime_cred.get(address, 0) + own_cred
        receipts = compute_fair_receipts(strategy.amount, lifetime_cred, earnings)

    result = Harvest(strategy=strategy, receipts=receipts, timestamp_ms=timestamp_ms)
    logger.info(
        f"{strategy_type} harvest at {timestamp_ms}: {len(receipts)} receipts totalling "
        f"{format_grain(result.total_paid(), settings.DISPLAY_DECIMALS, settings.DISPLAY_SUFFIX)}"
    )
    return result


def _check_version(strategy: Union[FastStrategy, FairStrategy]) -> None:
    if strategy.version != STRATEGY_VERSION_1:
        raise UnsupportedStrategyVersion(strategy.type, strategy.version)


def _check_amount(harvest_amount: Grain) -> None:
    if harvest_amount < ZERO:
        raise InvalidAmount(harvest_amount)


def _exact_cred(cred: Mapping[Address, Ratio]) -> Dict[Address, Fraction]:
    """Convert cred scores to exact fractions so ratios don't pick up float error"""
    exact: Dict[Address, Fraction] = {}
    for address, score in cred.items():
        if isinstance(score, float) and not math.isfinite(score):
            raise InvalidNumberError(score)
        if score < 0:
            raise InvalidNumberError(score, "cred must be non-negative")
        exact[address] = Fraction(score)
    return exact


def compute_fast_receipts(
        harvest_amount: Grain,
        cred: Mapping[Address, float]
) -> Tuple[GrainReceipt, ...]:
    """
    Split a grain amount in proportion to the provided scores.

    Every address in `cred` gets a receipt, including zero-cred addresses.
    Receipts are rounded individually, so their sum may be off from
    harvest_amount by up to one attograin per receipt.
    """
    _check_amount(harvest_amount)

    exact_cred = _exact_cred(cred)
    total_cred = sum(exact_cred.values(), Fraction(0))
    if total_cred == 0:
        logger.debug("All cred is zero; no FAST receipts")
        return ()

    return tuple(
        GrainReceipt(address=address, amount=scale_by_ratio(harvest_amount, score / total_cred))
        for address, score in exact_cred.items()
    )


def compute_fair_receipts(
        harvest_amount: Grain,
        cred: Mapping[Address, Ratio],
        earnings: Mapping[Address, Grain]
) -> Tuple[GrainReceipt, ...]:
    """
    Distribute a fixed amount of grain to the contributors who were "most underpaid".

    A contributor is underpaid if they received a smaller share of past
    earnings than their share of cred, fairly paid if the shares are equal,
    and overpaid if their earnings share is higher.

    Imagine the entire grain supply of the project, including this harvest,
    were distributed by the current scores. That gives each contributor a
    "fair" lifetime earnings target. Usually some contributors are below
    their target and others above it.

    Summing the shortfall of everyone below target gives the total
    underpayment. As an invariant, total_underpayment = harvest_amount +
    total_overpayment, since nobody has been paid harvest_amount yet and
    every grain of overpayment to one contributor is underpayment for
    another.

    The harvest amount is then divided among underpaid contributors in
    proportion to their underpayment. Fairly paid and overpaid contributors
    get no receipt at all.
    """
    _check_amount(harvest_amount)

    exact_cred = _exact_cred(cred)
    total_earnings = sum_grains(earnings.values())
    total_cred = sum(exact_cred.values(), Fraction(0))
    if total_cred == 0:
        logger.debug("All lifetime cred is zero; no FAIR receipts")
        return ()

    target_grain_per_cred = scale_by_ratio(total_earnings + harvest_amount, 1 / total_cred)

    total_underpayment = ZERO
    underpayments: Dict[Address, Grain] = {}
    addresses = dict.fromkeys([*exact_cred, *earnings])

    for address in addresses:
        earned = earnings.get(address, ZERO)
        target = scale_by_ratio(target_grain_per_cred, exact_cred.get(address, 0))
        if target > earned:
            underpayment = target - earned
            underpayments[address] = underpayment
            total_underpayment += underpayment

    if total_underpayment == ZERO:
        logger.debug("Nobody is underpaid; no FAIR receipts")
        return ()

    return tuple(
        GrainReceipt(
            address=address,
            amount=scale_by_ratio(harvest_amount, proportion(underpayment, total_underpayment))
        )
        for address, underpayment in underpayments.items()
    )
