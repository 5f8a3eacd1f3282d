"""
jettoncodec Contract Facade

Thin wrapper around a deployed (or to-be-deployed) jetton minter. It builds
the minter's initial data and address, hands encoded bodies to a provider,
and reads typed results out of get-method stacks.

The provider is the transport: it knows how to serialize cells, sign and
submit messages, and run get-methods. It is abstract here. Each send_*
method issues exactly one provider call.

Usage:
    jetton = Jetton.create_from_config(owner, {"name": "MyJetton"}, code, wallet_code)
    jetton.send_deploy(provider, sender, to_nano("0.05"))
    data = jetton.get_jetton_data(provider)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntFlag
from typing import Any, Mapping, Optional, Sequence, Union

from loguru import logger

from jettoncodec.cell import Address, Cell, begin_cell
from jettoncodec.dispatch import Message, encode_message
from jettoncodec.messages import MessageEncoder, MintRequest
from jettoncodec.metadata import MetadataCellBuilder


class SendMode(IntFlag):
    NONE = 0
    PAY_GAS_SEPARATELY = 1
    IGNORE_ERRORS = 2
    DESTROY_ACCOUNT_IF_ZERO = 32
    CARRY_ALL_REMAINING_INCOMING_VALUE = 64
    CARRY_ALL_REMAINING_BALANCE = 128


# ============================================================================
# Get-method stacks
# ============================================================================

@dataclass(frozen=True)
class TupleItem:
    """One get-method stack entry: type is 'int', 'cell', 'slice' or 'null'."""
    type: str
    value: Any = None


class TupleReader:
    """Typed cursor over a get-method result stack."""

    def __init__(self, items: Sequence[TupleItem]) -> None:
        self._items = list(items)
        self._pos = 0

    @property
    def remaining(self) -> int:
        return len(self._items) - self._pos

    def _pop(self, *types: str) -> TupleItem:
        if not self.remaining:
            raise IndexError("Get-method stack is exhausted")
        item = self._items[self._pos]
        if item.type not in types:
            raise TypeError(f"Expected {' or '.join(types)} on stack, got {item.type}")
        self._pos += 1
        return item

    def read_big_number(self) -> int:
        return int(self._pop("int").value)

    def read_boolean(self) -> bool:
        # TVM true is -1
        return self.read_big_number() != 0

    def read_cell(self) -> Cell:
        return self._pop("cell", "slice").value

    def read_address(self) -> Address:
        address = self.read_cell().begin_parse().load_address()
        if address is None:
            raise ValueError("Expected an address on stack, got addr_none")
        return address


class ContractProvider(ABC):
    """Transport used by the facade. Implementations own all I/O."""

    @abstractmethod
    def internal(
        self,
        via: Any,
        *,
        value: int,
        body: Cell,
        send_mode: Optional[SendMode] = None,
        bounce: Optional[bool] = None,
    ) -> None:
        """Send an internal message carrying `body` and `value` nanotons."""
        ...

    @abstractmethod
    def get(self, method: str, stack: Sequence[TupleItem]) -> TupleReader:
        """Run a get-method and return its result stack."""
        ...


# ============================================================================
# Initial state
# ============================================================================

@dataclass(frozen=True)
class StateInit:
    code: Cell
    data: Cell

    def to_cell(self) -> Cell:
        return (
            begin_cell()
            .store_bit(0)  # split_depth
            .store_bit(0)  # special
            .store_maybe_ref(self.code)
            .store_maybe_ref(self.data)
            .store_dict(None)  # libraries
            .end_cell()
        )


def contract_address(workchain: int, init: StateInit) -> Address:
    return Address(workchain, init.to_cell().hash)


def jetton_minter_init_data(
    owner: Address,
    metadata: Mapping[str, Optional[str]],
    wallet_code: Cell,
    metadata_builder: Optional[MetadataCellBuilder] = None,
) -> Cell:
    """total_supply:Coins admin:Address content:^Cell wallet_code:^Cell"""
    content = (metadata_builder or MetadataCellBuilder()).build(metadata)
    return (
        begin_cell()
        .store_coins(0)
        .store_address(owner)
        .store_ref(content)
        .store_ref(wallet_code)
        .end_cell()
    )


@dataclass(frozen=True)
class JettonData:
    total_supply: int
    mintable: bool
    admin_address: Address
    content: Cell
    wallet_code: Cell


# ============================================================================
# Facade
# ============================================================================

class Jetton:
    """Jetton minter contract."""

    def __init__(
        self,
        address: Address,
        init: Optional[StateInit] = None,
        encoder: Optional[MessageEncoder] = None,
    ) -> None:
        self.address = address
        self.init = init
        self.encoder = encoder or MessageEncoder()

    @classmethod
    def create_from_address(cls, address: Address) -> Jetton:
        return cls(address)

    @classmethod
    def create_from_config(
        cls,
        owner: Address,
        metadata: Mapping[str, Optional[str]],
        code: Cell,
        wallet_code: Cell,
        workchain: int = 0,
    ) -> Jetton:
        data = jetton_minter_init_data(owner, metadata, wallet_code)
        init = StateInit(code, data)
        address = contract_address(workchain, init)
        logger.debug("Derived minter address {}", address.to_raw())
        return cls(address, init)

    def send_deploy(self, provider: ContractProvider, via: Any, value: int) -> None:
        logger.info("Deploying {} with {} nanotons", self.address, value)
        provider.internal(
            via,
            value=value,
            body=begin_cell().end_cell(),
            send_mode=SendMode.PAY_GAS_SEPARATELY,
        )

    def send_mint(
        self,
        provider: ContractProvider,
        via: Any,
        *,
        value: int,
        to: Address,
        amount: int,
        query_id: Optional[int] = None,
    ) -> None:
        # the attached value doubles as the transfer fee forwarded to the wallet
        body = self.encoder.mint(MintRequest(to, amount, value, query_id or 0))
        logger.info("Minting {} to {}", amount, to)
        provider.internal(
            via,
            value=value,
            body=body,
            send_mode=SendMode.PAY_GAS_SEPARATELY,
        )

    def send(
        self,
        provider: ContractProvider,
        via: Any,
        message: Union[Message, str],
        *,
        value: int,
        bounce: Optional[bool] = None,
    ) -> None:
        body = encode_message(message, self.encoder)
        logger.info("Sending {} to {}", type(message).__name__, self.address)
        provider.internal(via, value=value, body=body, bounce=bounce)

    def get_jetton_data(self, provider: ContractProvider) -> JettonData:
        stack = provider.get("get_jetton_data", [])
        return JettonData(
            total_supply=stack.read_big_number(),
            mintable=stack.read_boolean(),
            admin_address=stack.read_address(),
            content=stack.read_cell(),
            wallet_code=stack.read_cell(),
        )

    def get_wallet_address(self, provider: ContractProvider, owner: Address) -> Address:
        arg = TupleItem("slice", begin_cell().store_address(owner).end_cell())
        return provider.get("get_wallet_address", [arg]).read_address()

    def __repr__(self) -> str:
        state = "with init" if self.init else "attached"
        return f"<Jetton {self.address.to_raw()} ({state})>"
