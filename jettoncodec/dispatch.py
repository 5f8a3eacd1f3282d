"""
jettoncodec Message Dispatch

Selects the encoding path for a message sent to the minter:

    InitialConfig     -> JettonInitial frame
    BurnNotification  -> TokenBurnNotification frame
    TextMessage / str -> zero opcode + UTF-8 text

"Owner Claim" and "Mint" are ordinary text commands. They are encoded
exactly like any other text; the contract matches on the literal string.
"""

from __future__ import annotations

from typing import Optional, Union

from jettoncodec.cell import Cell
from jettoncodec.errors import InvalidMessageError
from jettoncodec.messages import (
    BurnNotification,
    InitialConfig,
    MessageEncoder,
    TextMessage,
)


OWNER_CLAIM = TextMessage("Owner Claim")
MINT = TextMessage("Mint")

Message = Union[InitialConfig, BurnNotification, TextMessage]


def encode_message(
    message: Union[Message, str],
    encoder: Optional[MessageEncoder] = None,
) -> Cell:
    """Encode one message body. Unrecognized shapes raise InvalidMessageError."""
    if isinstance(message, str):
        message = TextMessage(message)

    if not isinstance(message, (InitialConfig, BurnNotification, TextMessage)):
        raise InvalidMessageError(message)

    encoder = encoder or MessageEncoder()
    if isinstance(message, InitialConfig):
        return encoder.jetton_initial(message)
    if isinstance(message, BurnNotification):
        return encoder.burn_notification(message)
    return encoder.text(message)
