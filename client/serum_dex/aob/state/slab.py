import struct
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

import pandas as pd
from podite import U32, U64, U128, Enum, FixedLenArray, pod, FORMAT_BORSH

from serum_dex.utils.pod import PodPubkey

from .base import AccountTag, Side

NODE_SIZE = 32
NODE_TAG_SIZE = 8
SLOT_SIZE = NODE_TAG_SIZE + NODE_SIZE

SLAB_HEADER_LEN = 97
PADDED_SLAB_HEADER_LEN = SLAB_HEADER_LEN + 7


@pod
class InnerNode:
    prefix_len: U64
    key: U128
    children: FixedLenArray[U32, 2]


@pod
class LeafNode:
    key: U128
    callback_info_pt: U64
    base_quantity: U64

    @property
    def price(self) -> int:
        """Limit price as stored on chain: the high 64 bits of the order id."""
        return self.key >> 64

    @property
    def order_id(self) -> int:
        return self.key


@pod
class FreeNode:
    next: U32


@pod
class NodeKind(Enum[U64]):
    UNINITIALIZED = None
    INNER = None
    LEAF = None
    FREE = None
    LAST_FREE = None


Node = Union[InnerNode, LeafNode, FreeNode]

_NODE_TYPES = {
    NodeKind.INNER: InnerNode,
    NodeKind.LEAF: LeafNode,
    NodeKind.FREE: FreeNode,
    NodeKind.LAST_FREE: FreeNode,
}


@pod
class SlabHeader:
    account_tag: AccountTag
    bump_index: U64
    free_list_len: U64
    free_list_head: U32
    callback_memory_offset: U64
    callback_free_list_len: U64
    callback_free_list_head: U64
    callback_bump_index: U64
    root_node: U32
    leaf_count: U64
    market_address: PodPubkey


@dataclass
class Slab:
    """
    Critbit tree holding one side of the book. Inner nodes route on the order
    id key, leaves hold resting orders.
    """
    header: SlabHeader
    buffer: bytes = field(repr=False)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Slab":
        if len(data) < PADDED_SLAB_HEADER_LEN:
            raise ValueError(f"Slab account too small: {len(data)} bytes")
        header = SlabHeader.from_bytes(data[:SLAB_HEADER_LEN], format=FORMAT_BORSH)
        return Slab(header, bytes(data))

    @property
    def capacity(self) -> int:
        return (len(self.buffer) - PADDED_SLAB_HEADER_LEN) // SLOT_SIZE

    @property
    def root(self) -> Optional[int]:
        if self.header.leaf_count == 0:
            return None
        return self.header.root_node

    def __len__(self):
        return self.header.leaf_count

    def get_node(self, key: int) -> Optional[Node]:
        if not 0 <= key < self.capacity:
            raise IndexError(f"Node {key} outside of slab with {self.capacity} slots")
        start = PADDED_SLAB_HEADER_LEN + key * SLOT_SIZE
        chunk = self.buffer[start:start + SLOT_SIZE]
        tag = struct.unpack("<Q", chunk[:NODE_TAG_SIZE])[0]
        for kind, node_type in _NODE_TYPES.items():
            if tag == int(kind):
                body = chunk[NODE_TAG_SIZE:NODE_TAG_SIZE + node_type.calc_max_size()]
                return node_type.from_bytes(body, format=FORMAT_BORSH)
        return None

    def find_min_max(self, find_max: bool) -> Optional[LeafNode]:
        key = self.root
        if key is None:
            return None
        # a well formed tree is never deeper than its node count
        for _ in range(self.capacity):
            node = self.get_node(key)
            if isinstance(node, InnerNode):
                key = node.children[1 if find_max else 0]
            elif isinstance(node, LeafNode):
                return node
            else:
                return None
        raise ValueError(f"Slab walk exceeded {self.capacity} nodes, the tree has a cycle")

    def best_order(self, side: Side) -> Optional[LeafNode]:
        # bids rank highest price first, asks lowest
        return self.find_min_max(find_max=side == Side.BID)

    def inorder_traversal(self, root: int, side: Side) -> List[Tuple[int, int, int]]:
        """(price, order_id, base_quantity) for every leaf under ``root``, best first."""
        res = []
        stack = [root]
        first = 1 if side == Side.BID else 0
        visited = 0
        while stack:
            visited += 1
            if visited > self.capacity:
                raise ValueError(f"Slab walk exceeded {self.capacity} nodes, the tree has a cycle")
            node = self.get_node(stack.pop())
            if isinstance(node, InnerNode):
                stack.append(node.children[1 - first])
                stack.append(node.children[first])
            elif isinstance(node, LeafNode):
                res.append((node.price, node.order_id, node.base_quantity))
        return res

    def order_bookify(self, side: Side, group=False) -> pd.DataFrame:
        root = self.root
        orders = [] if root is None else self.inorder_traversal(root, side)
        df = pd.DataFrame(orders, columns=["Price", "Oid", "Qty"])
        df = (
            df.sort_values(["Price", "Oid"], ascending=[side != Side.BID, True])
            .reset_index(drop=True)
        )[["Oid", "Price", "Qty"]]
        if group:
            return df.groupby("Price", sort=side != Side.BID).agg({"Qty": ["sum", "count"]})
        return df
