"""
Network Package

The graph model of layered neural networks (nodes and weighted connections
living in an EntityStore), the builders producing layered Network views, and
forward evaluation.

Exported Classes:
    Node:                     A computational node (neuron)
    Connection:               A weighted connection between two nodes
    Network:                  Layered view over nodes and connections
    ForwardPropagator:        Evaluates a network every tick
    DriveMode:                Who updates the node values of a network
    UnsupportedTopologyError: Raised for graphs that cannot be layered

Exported Functions:
    build_from_template:    Generate a fully connected layered network
    build_from_outputs:     Discover the layers of an existing graph
    find_output_node_ids:   Output nodes bound to a dataset
    parse_template:         Parse a network template
    xavier_stdev:           Xavier/Glorot standard deviation
    randomize_weights:      Re-initialize the weights of a network
    propagate:              Evaluate a network once
    incoming_connections:   Incoming connection IDs per node
    prune_dead_connections: Remove connections referencing missing nodes
"""

from evoprop.network.node        import Node
from evoprop.network.connection  import Connection, prune_dead_connections
from evoprop.network.network     import Network
from evoprop.network.builder     import (UnsupportedTopologyError,
                                         build_from_template,
                                         build_from_outputs,
                                         find_output_node_ids,
                                         parse_template,
                                         xavier_stdev,
                                         randomize_weights)
from evoprop.network.propagation import DriveMode, ForwardPropagator, propagate, incoming_connections

__all__ = ['Node',
           'Connection',
           'Network',
           'ForwardPropagator',
           'DriveMode',
           'UnsupportedTopologyError',
           'build_from_template',
           'build_from_outputs',
           'find_output_node_ids',
           'parse_template',
           'xavier_stdev',
           'randomize_weights',
           'propagate',
           'incoming_connections',
           'prune_dead_connections']
