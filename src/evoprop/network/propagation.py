"""
Forward Propagation Module

This module evaluates the output values of the nodes of a layered Network,
one layer at a time, so that every node reads the already updated values of
the layers before it.

Classes:
    DriveMode:         Who is responsible for updating the node values of a network
    ForwardPropagator: Evaluates a network, caching its incoming connections

Functions:
    propagate:            Evaluate a network once
    incoming_connections: Map each node of a network to its incoming connection IDs
"""

from collections import defaultdict
from enum        import Enum

from evoprop.data               import DataSource
from evoprop.network.connection import Connection
from evoprop.network.network    import Network
from evoprop.network.node       import Node
from evoprop.store              import EntityStore

class DriveMode(Enum):
    """
    Who updates the node values of a network.

    AUTONOMOUS: the network is evaluated by its own ForwardPropagator
    TRAINED:    a Trainer owns the network and evaluates it as part of training
    """
    AUTONOMOUS = "autonomous"
    TRAINED    = "trained"

def incoming_connections(store: EntityStore, network: Network) -> dict[int, list[int]]:
    """
    Group the connections of a network by destination node.

    Returns:
        dictionary mapping node ID => IDs of the connections going into it, in connection order
    """
    incoming = defaultdict(list)
    for conn_id in network.connection_ids:
        conn = store.get_of_type(conn_id, Connection)
        if conn is not None:
            incoming[conn.to_node_id].append(conn_id)
    return incoming

def _evaluate_node(store: EntityStore, node: Node, conn_ids: list[int]) -> None:
    """Update the output value of a single node."""

    # Input nodes read their value from the data source
    if node.is_input_bound:
        source = store.get_of_type(node.data_source_id, DataSource)
        if source is not None:
            node.output_value = source.attribute_value(node.attribute_index)
        return

    # Nodes without incoming connections (bias nodes, unbound inputs) keep their value
    if not conn_ids:
        return

    weighted_sum = 0.0
    for conn_id in conn_ids:
        conn = store.get_of_type(conn_id, Connection)
        if conn is None:
            continue
        source_node = store.get_of_type(conn.from_node_id, Node)
        if source_node is None:
            continue
        weighted_sum += conn.weight * source_node.output_value

    node.weighted_sum = weighted_sum
    node.output_value = node.activation.compute(weighted_sum)

def propagate(store: EntityStore, network: Network, incoming: dict[int, list[int]] | None = None) -> None:
    """
    Evaluate a network once, layer by layer, input layer first.

    Node and connection IDs that no longer resolve are skipped.

    Parameters:
        store:    the store holding the network's nodes and connections
        network:  the network to evaluate
        incoming: optional precomputed result of 'incoming_connections'
    """
    if incoming is None:
        incoming = incoming_connections(store, network)

    for layer in network.layers:
        for node_id in layer:
            node = store.get_of_type(node_id, Node)
            if node is not None:
                _evaluate_node(store, node, incoming.get(node_id, []))

class ForwardPropagator:
    """
    Evaluates a network every tick, unless a Trainer is driving it.

    The incoming connections of every node are computed once, at construction;
    create a new propagator after the structure of the network changes.

    Public Attributes:
        network: The network being evaluated

    Public Methods:
        propagate():  Evaluate the network once
        tick(mode):   Evaluate the network if it is in AUTONOMOUS mode
    """

    def __init__(self, store: EntityStore, network: Network):
        """
        Parameters:
            store:   the store holding the network's nodes and connections
            network: the network to evaluate
        """
        self._store    = store
        self.network   = network
        self._incoming = incoming_connections(store, network)

    def propagate(self) -> None:
        propagate(self._store, self.network, self._incoming)

    def tick(self, mode: DriveMode = DriveMode.AUTONOMOUS) -> None:
        """
        Per-tick entry point.

        Parameters:
            mode: who currently owns the network; in TRAINED mode the
                  trainer computes the node values, so nothing is done
        """
        if mode is DriveMode.AUTONOMOUS:
            self.propagate()
