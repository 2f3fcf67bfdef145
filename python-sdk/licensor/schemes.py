from __future__ import annotations

from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

from .errors import SignatureMalformedError


class SignatureScheme:
    """A signature algorithm the verifier knows how to check."""

    code: str = ""
    aliases: tuple[str, ...] = ()
    key_size: int = 0
    signature_size: int = 0

    def check_sizes(self, signature: bytes, public_key: bytes) -> None:
        if len(public_key) != self.key_size:
            raise SignatureMalformedError(f"{self.code}: public key must be {self.key_size} bytes")
        if len(signature) != self.signature_size:
            raise SignatureMalformedError(f"{self.code}: signature must be {self.signature_size} bytes")

    def verify(self, message: bytes, signature: bytes, public_key: bytes) -> bool:
        raise NotImplementedError


class Ed25519Scheme(SignatureScheme):
    code = "ED25519_SIGN"
    aliases = ("ed25519",)
    key_size = 32
    signature_size = 64

    def verify(self, message: bytes, signature: bytes, public_key: bytes) -> bool:
        self.check_sizes(signature, public_key)
        try:
            VerifyKey(public_key).verify(message, signature)
            return True
        except BadSignatureError:
            return False


SCHEMES: dict[str, SignatureScheme] = {}


def register_scheme(scheme: SignatureScheme) -> None:
    for name in (scheme.code, *scheme.aliases):
        SCHEMES[name.lower()] = scheme


def get_scheme(name: str | None) -> SignatureScheme:
    scheme = SCHEMES.get(str(name or "").strip().lower())
    if scheme is None:
        raise SignatureMalformedError(f"unsupported signature scheme: {name}")
    return scheme


register_scheme(Ed25519Scheme())
