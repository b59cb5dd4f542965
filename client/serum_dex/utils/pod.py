from podite import pod
from solders.pubkey import Pubkey

PUBKEY_LEN = 32


@pod(dataclass_fn=None)
class PodPubkey:
    """podite field type that reads and writes a 32 byte solders ``Pubkey``."""

    @classmethod
    def _is_static(cls) -> bool:
        return True

    @classmethod
    def _calc_size(cls, obj, **kwargs):
        return PUBKEY_LEN

    @classmethod
    def _calc_max_size(cls):
        return PUBKEY_LEN

    @classmethod
    def _from_bytes_partial(cls, buffer, **kwargs):
        raw = buffer.read(PUBKEY_LEN)
        if len(raw) != PUBKEY_LEN:
            raise ValueError(f"Buffer length is {len(raw)}, but expected {PUBKEY_LEN}")
        return Pubkey.from_bytes(raw)

    @classmethod
    def _to_bytes_partial(cls, buffer, obj, **kwargs):
        buffer.write(bytes(obj))

    @classmethod
    def _to_dict(cls, obj):
        return str(obj)

    @classmethod
    def _from_dict(cls, raw):
        return Pubkey.from_string(raw)
