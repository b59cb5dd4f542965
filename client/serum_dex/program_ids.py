import os
from typing import Optional

import spl.token.constants
from solders.pubkey import Pubkey

SPL_TOKEN_PROGRAM_ID = spl.token.constants.TOKEN_PROGRAM_ID
ASSOCIATED_TOKEN_PROGRAM_ID = spl.token.constants.ASSOCIATED_TOKEN_PROGRAM_ID

DEFAULT_SRM_MINT = "SRMuApVNdxXokk5GT7XD5cUUgXMBCoAz2LHeuAoKWRt"
DEFAULT_MSRM_MINT = "MSRMcoVyrFxnSgo5uXwone5SKcGhT1KEJMFEkMEWf9L"


def _pubkey_from_env(name: str, default: Optional[str] = None) -> Optional[Pubkey]:
    value = os.environ.get(name, default)
    if not value:
        return None
    try:
        return Pubkey.from_string(value)
    except ValueError as e:
        raise ValueError(f"Environment variable {name} is not a valid public key: {value!r}") from e


# the dex is deployed per cluster, so there is no usable default
DEX_PROGRAM_ID = _pubkey_from_env("DEX")
SRM_MINT = _pubkey_from_env("SRM_MINT", DEFAULT_SRM_MINT)
MSRM_MINT = _pubkey_from_env("MSRM_MINT", DEFAULT_MSRM_MINT)
