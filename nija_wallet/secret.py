"""
SecretBuffer — Scoped in-memory container for secret bytes.

Security Note (Threat Model):
    Python cannot guarantee that no copy of a secret survives in memory:
    immutable ``bytes`` handed to third-party libraries are reclaimed only
    by the garbage collector. SecretBuffer bounds the exposure of the
    copies this package owns by keeping them in a mutable ``bytearray``
    that is zero-filled on release.
"""


class SecretBuffer:
    """Mutable secret bytes, wiped when the owning scope exits.

    Usage::

        with SecretBuffer(derive_key(password, salt)) as key:
            plaintext = decrypt(ciphertext, iv, key.data)
    """

    __slots__ = ("_buf",)

    def __init__(self, secret: bytes | bytearray | str):
        if isinstance(secret, str):
            secret = secret.encode("utf-8")
        self._buf: bytearray | None = bytearray(secret)

    def __enter__(self) -> "SecretBuffer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    def __len__(self) -> int:
        return len(self._buf) if self._buf is not None else 0

    def __repr__(self) -> str:
        state = "wiped" if self._buf is None else f"{len(self._buf)} bytes"
        return f"<SecretBuffer [{state}]>"

    __str__ = __repr__

    @property
    def wiped(self) -> bool:
        return self._buf is None

    @property
    def data(self) -> bytearray:
        """Return the live buffer (not a copy).

        Raises:
            ValueError: If the buffer has already been wiped.
        """
        if self._buf is None:
            raise ValueError("SecretBuffer has been wiped")
        return self._buf

    def text(self) -> str:
        """Decode the buffer as UTF-8 text (creates an immutable copy)."""
        return self.data.decode("utf-8")

    def wipe(self) -> None:
        """Zero-fill and release the buffer. Safe to call repeatedly."""
        if self._buf is not None:
            for i in range(len(self._buf)):
                self._buf[i] = 0
            self._buf = None
