"""Harvest strategy, receipt and harvest model definitions"""
from typing import Annotated, Any, Dict, Literal, Tuple, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, PlainSerializer, PlainValidator, TypeAdapter

from grain_harvest.grain import Grain, from_string, sum_grains

HARVEST_VERSION_1 = 1
STRATEGY_VERSION_1 = 1

FAST = "FAST"
FAIR = "FAIR"


def _to_grain(value: Any) -> Grain:
    """Accept a Grain, a raw attograin int, or a raw attograin string"""
    if isinstance(value, Grain):
        return value
    if isinstance(value, str):
        return from_string(value)
    if isinstance(value, int) and not isinstance(value, bool):
        return Grain(value)
    raise ValueError(f"expected a grain amount, got {value!r}")


# Serialized as the raw attograin string so JSON never goes through a float
GrainAmount = Annotated[
    Grain,
    PlainValidator(_to_grain),
    PlainSerializer(str, return_type=str, when_used='json')
]


class FastStrategy(BaseModel):
    """Distribute `amount` by cred share in the most recent completed interval"""
    model_config = ConfigDict(frozen=True)

    type: Literal["FAST"] = FAST
    version: int = STRATEGY_VERSION_1
    amount: GrainAmount


class FairStrategy(BaseModel):
    """Distribute `amount` to bring lifetime earnings toward lifetime cred share"""
    model_config = ConfigDict(frozen=True)

    type: Literal["FAIR"] = FAIR
    version: int = STRATEGY_VERSION_1
    amount: GrainAmount


HarvestStrategy = Annotated[Union[FastStrategy, FairStrategy], Field(discriminator='type')]

_strategy_adapter = TypeAdapter(HarvestStrategy)


def parse_strategy(raw: Dict[str, Any]) -> Union[FastStrategy, FairStrategy]:
    """Validate a strategy record such as {"type": "FAST", "version": 1, "amount": "100"}"""
    return _strategy_adapter.validate_python(raw)


class GrainReceipt(BaseModel):
    """Grain paid to one contributor in a harvest"""
    model_config = ConfigDict(frozen=True)

    address: str
    amount: GrainAmount


class Harvest(BaseModel):
    """
    The full, versioned result of one allocation event.

    This is the unit appended to the ledger. Dump it with
    `model_dump_json(by_alias=True)` to get the camelCase wire form, which
    `Harvest.model_validate_json` reads back.

    Attributes:
        type: Always "HARVEST"
        version: Harvest record version, currently HARVEST_VERSION_1
        strategy: The strategy that produced the receipts
        receipts: One receipt per paid contributor, in allocation order
        timestamp_ms: Effective time of the harvest; cred after it is ignored
    """
    model_config = ConfigDict(frozen=True)

    type: Literal["HARVEST"] = "HARVEST"
    version: int = HARVEST_VERSION_1
    strategy: HarvestStrategy
    receipts: Tuple[GrainReceipt, ...] = ()
    timestamp_ms: int = Field(
        validation_alias=AliasChoices('timestamp_ms', 'timestampMs'),
        serialization_alias='timestampMs'
    )

    def total_paid(self) -> Grain:
        return sum_grains(receipt.amount for receipt in self.receipts)
