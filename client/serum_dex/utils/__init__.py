from .pod import PodPubkey, PUBKEY_LEN
