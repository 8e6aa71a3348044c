"""
Network Builder Module

This module constructs layered Networks, either from scratch, from a template
string describing the size of each layer, or by discovering the layers of an
existing graph of nodes and connections, walking backwards from its outputs.

Functions:
    build_from_template:   Create the nodes & connections of a fully connected layered network
    build_from_outputs:    Derive the layered view of an existing graph from its output nodes
    find_output_node_ids:  Find the output nodes bound to a dataset
    parse_template:        Parse a template string into (count, bias_count) pairs
    xavier_stdev:          Standard deviation of the Xavier/Glorot initializer
    randomize_weights:     Re-initialize all the weights of a network

Exceptions:
    UnsupportedTopologyError: The graph cannot be arranged in layers (it contains a cycle)
"""

import numpy as np
from collections import deque, defaultdict
from math        import sqrt
from typing      import Iterable

from loguru import logger

from evoprop.activations        import ActivationFunction
from evoprop.data               import DataSource
from evoprop.network.connection import Connection
from evoprop.network.network    import Network
from evoprop.network.node       import Node
from evoprop.store              import EntityStore, INVALID_ID

class UnsupportedTopologyError(ValueError):
    """Raised when a graph of nodes and connections cannot be arranged in layers."""
    pass

def parse_template(template: str) -> list[tuple[int, int]]:
    """
    Parse a network template into layer definitions.

    A template is a comma-separated list of layers, each written as "count[+biasCount]".
    Example: '2+1,2+1,1' describes 2 normal nodes and 1 bias node in the first and
    second layer, and a last layer with only 1 normal node.

    Parameters:
        template: the template string

    Returns:
        a (count, bias_count) pair for each layer; empty for an empty template
    """
    if template is None or not template.strip():
        return []

    layers = []
    for layer_def in template.split(","):
        parts = [part.strip() for part in layer_def.split("+")]
        if len(parts) > 2:
            raise ValueError(f"Bad layer definition '{layer_def}' in network template '{template}'")
        try:
            counts = [int(part) for part in parts]
        except ValueError:
            raise ValueError(f"Bad layer definition '{layer_def}' in network template '{template}'") from None
        if any(count < 0 for count in counts):
            raise ValueError(f"Negative node count in layer definition '{layer_def}'")

        count      = counts[0]
        bias_count = counts[1] if len(counts) > 1 else 0
        layers.append((count, bias_count))

    return layers

def xavier_stdev(size_a: int, size_b: int) -> float:
    """
    Standard deviation of the Xavier/Glorot normal initializer for
    the connections between two layers of the given sizes.
    """
    total = size_a + size_b
    return sqrt(2.0 / total) if total > 0 else 0.0

def build_from_template(store                : EntityStore,
                        template             : str,
                        data_source_id       : int                = INVALID_ID,
                        hidden_activation    : ActivationFunction = ActivationFunction.TANH,
                        output_activation    : ActivationFunction = ActivationFunction.SIGMOID) -> Network:
    """
    Generate a fully connected, layered network of Nodes and Connections from a template.

    Every non-bias node is connected to all the nodes (bias nodes included) of
    the previous layer, with weights drawn from N(0, xavier_stdev(previous, current)).
    Bias nodes output a constant 1.0 and have no incoming connections.
    The input layer and the bias nodes use the identity activation.

    If 'data_source_id' refers to a DataSource, the non-bias nodes of the first layer
    source their values from its attributes (in order), and the non-bias nodes of the
    last layer take as targets the last attributes of the data source.

    Parameters:
        store:             the store in which nodes and connections are created
        template:          the network template, e.g. "2+1,2+1,1" (see 'parse_template')
        data_source_id:    ID of the DataSource to bind input and output nodes to
        hidden_activation: activation function of the hidden layers
        output_activation: activation function of the output layer

    Returns:
        the generated Network (Network.EMPTY if the template is empty)
    """
    layer_defs = parse_template(template)
    if not layer_defs:
        return Network.EMPTY

    data_source = store.get_of_type(data_source_id, DataSource)

    layers     : list[list[int]] = []
    connections: list[int]       = []

    for layer_index, (base_count, bias_count) in enumerate(layer_defs):
        total_count    = base_count + bias_count
        is_first_layer = layer_index == 0
        is_last_layer  = layer_index == len(layer_defs) - 1
        current_layer  = []

        for node_index in range(total_count):
            is_bias = node_index >= base_count

            if is_first_layer or is_bias:
                activation = ActivationFunction.IDENTITY
            elif is_last_layer:
                activation = output_activation
            else:
                activation = hidden_activation

            node = Node(output_value=1.0 if is_bias else 0.5, activation=activation)

            # Set attributes related to the data source
            if not is_bias and data_source is not None:
                if is_first_layer:
                    node.data_source_id  = data_source.id
                    node.attribute_index = node_index
                elif is_last_layer:
                    node.data_source_id = data_source.id
                    node.target_index   = data_source.attribute_count() - (total_count - node_index)

            # Add node to the store to give it an ID
            store.insert(node)

            # Connect all the nodes in the previous layer to the new node
            if not is_bias and layers:
                prev_layer = layers[-1]
                stdev = xavier_stdev(len(prev_layer), total_count)
                for prev_id in prev_layer:
                    weight = float(np.random.normal(0.0, stdev))
                    conn   = Connection(prev_id, node.id, weight)
                    connections.append(store.insert(conn))

            current_layer.append(node.id)

        layers.append(current_layer)

    network = Network(tuple(tuple(layer) for layer in layers), tuple(connections))
    logger.debug("[Builder] Generated {} from template '{}'", network, template)
    return network

def find_output_node_ids(store: EntityStore, data_source_id: int) -> list[int]:
    """The IDs of the output nodes whose targets live in the given dataset, in store order."""
    return [node.id for node in store.of_type(Node)
            if node.data_source_id == data_source_id and node.target_index >= 0]

def _check_acyclic(store: EntityStore, output_node_ids: Iterable[int]) -> None:
    """
    Verify that the graph feeding the given output nodes is acyclic.

    Collects every node from which an output can be reached, then attempts a
    topological sort of that subgraph with Kahn's algorithm: if some node is
    never freed of incoming edges, the subgraph contains a cycle.
    """
    incoming = defaultdict(list)     # node ID => [source node ID]
    for conn in store.of_type(Connection):
        if store.get_of_type(conn.from_node_id, Node) is not None:
            incoming[conn.to_node_id].append(conn.from_node_id)

    # All nodes that can reach an output node
    reachable = set(output_node_ids)
    queue = deque(reachable)
    while queue:
        node_id = queue.popleft()
        for source_id in incoming[node_id]:
            if source_id not in reachable:
                reachable.add(source_id)
                queue.append(source_id)

    # Kahn's algorithm restricted to the reachable subgraph
    in_degree = {node_id: 0 for node_id in reachable}
    adjacency = defaultdict(list)
    for node_id in reachable:
        for source_id in incoming[node_id]:
            adjacency[source_id].append(node_id)
            in_degree[node_id] += 1

    queue  = deque(node_id for node_id, degree in in_degree.items() if degree == 0)
    sorted_count = 0
    while queue:
        node_id = queue.popleft()
        sorted_count += 1
        for neighbor in adjacency[node_id]:
            in_degree[neighbor] -= 1
            if in_degree[neighbor] == 0:
                queue.append(neighbor)

    if sorted_count < len(reachable):
        cyclic = sorted(node_id for node_id, degree in in_degree.items() if degree > 0)
        raise UnsupportedTopologyError(f"The network contains a cycle through nodes {cyclic}")

def build_from_outputs(store: EntityStore, output_node_ids: Iterable[int]) -> Network:
    """
    Derive the layered view of an existing graph of nodes and connections.

    Starting from the output nodes, repeatedly collects all the connections going
    into the current (earliest) layer, and the nodes they come from, which form
    the previous layer. Stops when a layer has no predecessors. Connections are
    listed in the order they are discovered, output side first.

    Parameters:
        store:           the store holding the nodes and connections
        output_node_ids: IDs of the nodes forming the last layer

    Returns:
        the layered Network (Network.EMPTY if there are no output nodes)

    Raises:
        UnsupportedTopologyError: if the graph feeding the outputs contains a cycle
    """
    output_layer = [node_id for node_id in dict.fromkeys(output_node_ids)
                    if store.get_of_type(node_id, Node) is not None]
    if not output_layer:
        return Network.EMPTY

    _check_acyclic(store, output_layer)

    layers         = [output_layer]
    connection_ids = []
    seen_conns     = set()
    last_layer     = set(output_layer)

    while True:
        # Find each node connected to the last layer
        this_layer = []
        for conn in store.of_type(Connection):
            if conn.to_node_id not in last_layer:
                continue
            if store.get_of_type(conn.from_node_id, Node) is None:
                continue
            if conn.from_node_id not in this_layer:
                this_layer.append(conn.from_node_id)
            if conn.id not in seen_conns:
                seen_conns.add(conn.id)
                connection_ids.append(conn.id)

        if not this_layer:
            break   # no more nodes in the network

        layers.insert(0, this_layer)
        last_layer = set(this_layer)

    network = Network(tuple(tuple(layer) for layer in layers), tuple(connection_ids))
    logger.debug("[Builder] Discovered {} from {} output nodes", network, len(output_layer))
    return network

def randomize_weights(store: EntityStore, network: Network) -> None:
    """
    Re-initialize the weights of a network using Xavier initialization.

    The connections leaving layer i get weights drawn from
    N(0, xavier_stdev(size of layer i, size of layer i+1)).
    """
    outgoing = defaultdict(list)    # node ID => [Connection]
    for conn_id in network.connection_ids:
        conn = store.get_of_type(conn_id, Connection)
        if conn is not None:
            outgoing[conn.from_node_id].append(conn)

    for i, layer in enumerate(network.layers):
        next_layer_size = len(network.layers[i + 1]) if i + 1 < len(network.layers) else 0
        stdev = xavier_stdev(len(layer), next_layer_size)
        for node_id in layer:
            for conn in outgoing[node_id]:
                conn.weight = float(np.random.normal(0.0, stdev))
