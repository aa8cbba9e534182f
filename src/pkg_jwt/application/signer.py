from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from ..config.logging import get_logger
from ..domain.constants import TokenState
from ..domain.entities import Signature
from ..domain.exceptions import CodecError, NoSignFuncError, SignError
from ..domain.ports import SignFunc

if TYPE_CHECKING:
    from .token import Token

logger = get_logger("pkg_jwt.signer")


@dataclass(slots=True)
class Signer:
    """
    Drives signature computation for one token.

    ``sign`` serializes the header and payload (reusing their caches),
    hands ``headerB64.payloadB64`` to the strategy, stores the encoded
    signature on the token and returns the compact serialization.
    """

    token: Token
    sign_func: Optional[SignFunc]

    def sign(self) -> bytes:
        """
        Raises:
            NoSignFuncError
            KeyParseFailureError
            CodecError
        """
        token = self.token
        try:
            if self.sign_func is None:
                raise NoSignFuncError(
                    f"Unable to sign data without a signing function for {token.algorithm.value!r}"
                )

            signing_input = token.signing_input()
            signature = self.sign_func(token, signing_input)
            if not isinstance(signature, (bytes, bytearray)):
                raise SignError(
                    f"Signing function returned {type(signature).__name__}, expected bytes"
                )
            token.signature = Signature.from_bytes(bytes(signature))
        except (SignError, CodecError):
            token.state = TokenState.ENCODE_ERROR
            raise

        token.state = TokenState.ENCODED
        logger.debug("token_signed", alg=token.algorithm.value, signature_bytes=len(signature))
        return signing_input + b"." + token.signature.raw


def new_signer(token: Token, sign_func: SignFunc) -> Signer:
    """
    Attach a caller-supplied signing strategy to ``token``.

    Later ``token.encode()`` calls use it in place of the registry entry.
    """
    if token is None:
        raise ValueError("Token structure must be supplied")

    token.use_sign_func(sign_func)
    return Signer(token=token, sign_func=sign_func)
