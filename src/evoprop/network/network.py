"""
Network Module

Classes:
    Network: Layered view over the nodes and connections of a neural network
"""

import numpy as np
from dataclasses import dataclass
from typing      import ClassVar

from evoprop.network.connection import Connection
from evoprop.network.node       import Node
from evoprop.store              import EntityStore, INVALID_ID

@dataclass(frozen=True)
class Network:
    """
    Holds references (IDs) to the Nodes and Connections of a layered neural network.

    The network does not own its nodes and connections, they live in an
    EntityStore and are looked up there whenever needed. The layers are
    ordered input layer first; connections only run from a layer to the next.

    The order of 'connection_ids' is the order in which the connections were
    created, and it is the gene order of the network's genome: 'get_weights'
    returns, and 'set_weights' expects, one weight per connection, in this order.

    Public Attributes:
        layers:         IDs of the nodes in each layer, input layer first
        connection_ids: IDs of all the connections in the network

    Public Properties:
        input_node_ids:  IDs of the nodes in the first layer
        output_node_ids: IDs of the nodes in the last layer
        node_ids:        IDs of all the nodes, layer by layer
        is_empty:        Whether the network has no layers

    Public Methods:
        input_node_id(index):        ID of a node of the first layer
        output_node_id(index):       ID of a node of the last layer
        get_weights(store):          The genome of the network
        set_weights(store, weights): Write a genome into the network
        destroy(store):              Remove all nodes and connections from the store
    """
    layers        : tuple[tuple[int, ...], ...] = ()
    connection_ids: tuple[int, ...]             = ()

    EMPTY: ClassVar['Network']

    @property
    def input_node_ids(self) -> tuple[int, ...]:
        return self.layers[0] if self.layers else ()

    @property
    def output_node_ids(self) -> tuple[int, ...]:
        return self.layers[-1] if self.layers else ()

    @property
    def node_ids(self) -> list[int]:
        return [node_id for layer in self.layers for node_id in layer]

    @property
    def is_empty(self) -> bool:
        return not self.layers

    def input_node_id(self, index: int) -> int:
        """The ID of the node in the first layer with the given index (INVALID_ID if there is none)."""
        ids = self.input_node_ids
        return ids[index] if 0 <= index < len(ids) else INVALID_ID

    def output_node_id(self, index: int) -> int:
        """The ID of the node in the last layer with the given index (INVALID_ID if there is none)."""
        ids = self.output_node_ids
        return ids[index] if 0 <= index < len(ids) else INVALID_ID

    def get_weights(self, store: EntityStore) -> np.ndarray:
        """
        The weights of the network connections, in connection order.
        Connections that no longer exist contribute a weight of 0.0.
        """
        weights = np.zeros(len(self.connection_ids))
        for i, conn_id in enumerate(self.connection_ids):
            conn = store.get_of_type(conn_id, Connection)
            if conn is not None:
                weights[i] = conn.weight
        return weights

    def set_weights(self, store: EntityStore, weights) -> None:
        """
        Update the network connections with the given weights, in connection order.
        If the number of weights and connections differ, only the common prefix is written.
        """
        size = min(len(weights), len(self.connection_ids))
        for i in range(size):
            conn = store.get_of_type(self.connection_ids[i], Connection)
            if conn is not None:
                conn.weight = float(weights[i])

    def destroy(self, store: EntityStore) -> None:
        """Destroy the network, by marking all its connections and nodes for removal."""
        for conn_id in self.connection_ids:
            if store.get_of_type(conn_id, Connection) is not None:
                store.remove(conn_id)

        for node_id in self.node_ids:
            if store.get_of_type(node_id, Node) is not None:
                store.remove(node_id)

    def __str__(self):
        sizes = ",".join(str(len(layer)) for layer in self.layers)
        return f"Network(layers=[{sizes}], connections={len(self.connection_ids)})"

Network.EMPTY = Network()
