"""
Connection Module

Classes:
    Connection: A weighted connection between two nodes

Functions:
    prune_dead_connections: Remove connections whose nodes no longer exist
"""

from loguru import logger

from evoprop.store import Entity, EntityStore, INVALID_ID

class Connection(Entity):
    """
    A weighted, directed connection between two nodes in a neural network.

    The connection transmits the output value of its source node to its
    destination node, applying a weight multiplier to the signal. Nodes are
    referenced by ID; a connection whose source or destination no longer
    exists is dead and gets removed by 'prune_dead_connections'.

    Public Attributes:
        weight:       Weight multiplier applied to the transmitted signal
        from_node_id: ID of the source node
        to_node_id:   ID of the destination node
    """

    def __init__(self,
                 from_node_id: int   = INVALID_ID,
                 to_node_id  : int   = INVALID_ID,
                 weight      : float = 0.0):
        """
        Parameters:
            from_node_id: ID of the source node
            to_node_id:   ID of the destination node
            weight:       Weight of the connection
        """
        if from_node_id == to_node_id and from_node_id != INVALID_ID:
            raise ValueError(f"A connection cannot start and end in the same node ({from_node_id})")

        super().__init__()
        self.weight      : float = weight
        self.from_node_id: int   = from_node_id
        self.to_node_id  : int   = to_node_id

    def is_dead(self, store: EntityStore) -> bool:
        """Whether the source or the destination node no longer exists (or is about to be removed)."""
        return any(node_id not in store or store.is_dead(node_id)
                   for node_id in (self.from_node_id, self.to_node_id))

    def __repr__(self):
        return (f"Connection(id={self.id}, from_node_id={self.from_node_id}, "
                f"to_node_id={self.to_node_id}, weight={self.weight:+.6f})")

    def __str__(self):
        return f"[C{self.id},{self.from_node_id}=>{self.to_node_id},{self.weight:+.02f}]"

def prune_dead_connections(store: EntityStore) -> int:
    """
    Mark for removal all connections referencing a node that no longer exists.

    Parameters:
        store: the store holding the connections

    Returns:
        the number of connections pruned
    """
    dead = [conn.id for conn in store.of_type(Connection) if conn.is_dead(store)]
    for conn_id in dead:
        store.remove(conn_id)

    if dead:
        logger.debug("[Connection] Pruned {} dead connections", len(dead))
    return len(dead)
