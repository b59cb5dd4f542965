from podite import pod, U8, Enum


@pod
class Side(Enum[U8]):
    BID = None
    ASK = None


@pod
class AccountTag(Enum[U8]):
    UNINITIALIZED = None
    MARKET = None
    EVENT_QUEUE = None
    BIDS = None
    ASKS = None
