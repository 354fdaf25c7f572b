from decimal import Decimal, ROUND_UP
from enum import Enum
from typing import Any, Mapping, Optional

from kubernetes.utils import parse_quantity
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from kube_headroom.models.custom_errors import DimensionMismatchError

MEBIBYTE = 1024 * 1024


class ResourceDimension(str, Enum):
    cpu = "cpu"
    memory = "memory"
    pods = "pods"


class Quantity(BaseModel):
    '''
    Exact amount of a single resource dimension.

    CPU is kept in cores (so 500m is 0.5), memory in bytes and pods as a
    plain count. Amounts are Decimals so subtracting millicores never drifts.
    '''
    model_config = ConfigDict(frozen=True)

    dimension: ResourceDimension
    amount: Decimal = Decimal(0)

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, value: Any) -> Decimal:
        if value is None or value == "":
            return Decimal(0)
        if isinstance(value, Decimal):
            return value
        if isinstance(value, float):
            # Parse the shortest text form so 0.1 stays exactly 0.1
            value = repr(value)
        return parse_quantity(value)

    @classmethod
    def zero(cls, dimension: ResourceDimension) -> "Quantity":
        return cls(dimension=dimension, amount=Decimal(0))

    def __sub__(self, other: "Quantity") -> "Quantity":
        if not isinstance(other, Quantity):
            return NotImplemented
        if other.dimension != self.dimension:
            raise DimensionMismatchError(
                f"Cannot subtract {other.dimension.value} from {self.dimension.value}"
            )
        return Quantity(dimension=self.dimension, amount=self.amount - other.amount)

    def is_zero(self) -> bool:
        return self.amount == 0

    def value(self) -> int:
        return int(self.amount.to_integral_value(rounding=ROUND_UP))

    def milli_value(self) -> int:
        return int((self.amount * 1000).to_integral_value(rounding=ROUND_UP))

    def mebibytes(self) -> int:
        # int() on a Decimal truncates toward zero, also for negative headroom
        return int(Decimal(self.value()) / MEBIBYTE)

    def __str__(self):
        if self.amount == self.amount.to_integral_value():
            return str(int(self.amount))
        if self.dimension == ResourceDimension.cpu:
            return f"{self.milli_value()}m"
        return str(self.amount.normalize())


class ResourceList(BaseModel):
    cpu: Quantity
    memory: Quantity
    pods: Quantity

    @model_validator(mode="before")
    @classmethod
    def coerce_dimensions(cls, data: Any):
        # Accept raw strings/numbers per dimension and fill missing ones with zero
        if isinstance(data, Mapping):
            data = dict(data)
            for dimension in ResourceDimension:
                data[dimension.value] = _coerce(data.get(dimension.value), dimension)
        return data

    @classmethod
    def from_kubernetes(cls, resources: Optional[Mapping[str, Any]]):
        '''
        Build from a raw resource mapping as returned by the API server,
        e.g. {"cpu": "500m", "memory": "512Mi"}. Unknown keys are ignored.
        '''
        resources = resources or {}
        return cls(
            cpu=resources.get("cpu"),
            memory=resources.get("memory"),
            pods=resources.get("pods"),
        )


def _coerce(value: Any, dimension: ResourceDimension) -> Quantity:
    if isinstance(value, Quantity):
        if value.dimension != dimension:
            raise DimensionMismatchError(
                f"Expected a {dimension.value} quantity, got {value.dimension.value}"
            )
        return value
    if isinstance(value, Mapping):
        return Quantity(**{**value, "dimension": dimension})
    return Quantity(dimension=dimension, amount=value)


class ResourceLedger(ResourceList):
    '''
    Remaining headroom of a single node.

    Seeded from allocatable and decremented as pods are attributed to the
    node. Values may go negative when the node is oversubscribed.
    '''

    @classmethod
    def seed(cls, allocatable: ResourceList) -> "ResourceLedger":
        # Quantities are frozen, so sharing them is safe; the ledger itself
        # is a new object and rebinding its fields never touches allocatable
        return cls(
            cpu=allocatable.cpu,
            memory=allocatable.memory,
            pods=allocatable.pods,
        )

    def decrement_pod_slot(self):
        self.pods = self.pods - Quantity(dimension=ResourceDimension.pods, amount=1)

    def decrement_by_limits(self, limits: ResourceList) -> bool:
        '''
        Subtract a container's cpu and memory limits.

        A container whose cpu and memory limits are both zero has no ceiling
        and is skipped entirely. Returns whether anything was subtracted.
        '''
        if limits.cpu.is_zero() and limits.memory.is_zero():
            return False
        self.cpu = self.cpu - limits.cpu
        self.memory = self.memory - limits.memory
        return True
