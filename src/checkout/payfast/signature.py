"""PayFast request signing.

The signature is an MD5 digest over a canonical parameter string:

1. fields with an empty or missing value are dropped,
2. the remaining keys are sorted by raw key name,
3. each pair is rendered ``key=value`` with the value URL-encoded the way
   JavaScript's ``encodeURIComponent`` does, spaces as ``+``,
4. pairs are joined with ``&``,
5. ``&passphrase=<encoded>`` is appended when a passphrase is configured.

The same function signs outbound payment requests and recomputes the
expected signature of inbound notifications. It performs no I/O.
"""

import hashlib
import hmac
from collections.abc import Mapping
from urllib.parse import quote_plus

SIGNATURE_FIELD = "signature"

# Characters encodeURIComponent leaves untouched besides alphanumerics
_UNRESERVED = "-_.!~*'()"


def encode_value(value) -> str:
    return quote_plus(str(value), safe=_UNRESERVED)


def canonicalize(fields: Mapping[str, object], passphrase: str = "") -> str:
    """Build the parameter string the digest is computed over."""
    pairs = [f"{key}={encode_value(fields[key])}" for key in sorted(fields) if fields[key] not in (None, "")]
    payload = "&".join(pairs)
    if passphrase:
        payload += f"&passphrase={encode_value(passphrase)}"
    return payload


def sign(fields: Mapping[str, object], passphrase: str = "") -> str:
    """Return the hex digest for ``fields``."""
    return hashlib.md5(canonicalize(fields, passphrase).encode("utf-8")).hexdigest()


def verify(fields: Mapping[str, object], signature: str | None, passphrase: str = "") -> bool:
    """Check a supplied signature against ``fields`` (signature field excluded).

    Fails closed: a missing signature never verifies.
    """
    if not signature:
        return False
    unsigned = {key: value for key, value in fields.items() if key != SIGNATURE_FIELD}
    expected = sign(unsigned, passphrase)
    return hmac.compare_digest(expected.encode("ascii"), str(signature).strip().lower().encode("utf-8"))
