"""
Unit tests for forward propagation.
"""

import pytest
import numpy as np

from evoprop.activations import ActivationFunction
from evoprop.data        import TableDataset
from evoprop.network     import (Connection, DriveMode, ForwardPropagator, Network, Node,
                                 build_from_template, incoming_connections, propagate)


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def dataset(store):
    table = TableDataset([[2.0, -1.0, 0.0]])
    store.insert(table)
    return table


@pytest.fixture
def linear_network(store, dataset):
    """
    Two bound inputs and a bias feeding one identity output:
    out = 0.5 * 2.0 + 2.0 * (-1.0) + 0.25 * 1.0 = -0.75
    """
    i0   = Node(activation=ActivationFunction.IDENTITY, data_source_id=dataset.id, attribute_index=0)
    i1   = Node(activation=ActivationFunction.IDENTITY, data_source_id=dataset.id, attribute_index=1)
    bias = Node(output_value=1.0, activation=ActivationFunction.IDENTITY)
    out  = Node(activation=ActivationFunction.IDENTITY)
    for node in (i0, i1, bias, out):
        store.insert(node)

    conns = [Connection(i0.id, out.id, 0.5), Connection(i1.id, out.id, 2.0), Connection(bias.id, out.id, 0.25)]
    for conn in conns:
        store.insert(conn)

    return Network(((i0.id, i1.id, bias.id), (out.id,)), tuple(c.id for c in conns))


def _outputs(store, network):
    return [store.get_of_type(n, Node).output_value for n in network.output_node_ids]


# ============================================================================
# Test propagate
# ============================================================================

class TestPropagate:
    """Test the propagate function."""

    def test_linear_network(self, store, linear_network):
        """Test the weighted sum of a single layer."""
        propagate(store, linear_network)

        out = store.get_of_type(linear_network.output_node_ids[0], Node)
        assert out.weighted_sum == pytest.approx(-0.75)
        assert out.output_value == pytest.approx(-0.75)

    def test_inputs_read_data_source(self, store, linear_network):
        """Test that input-bound nodes take the value of their attribute."""
        propagate(store, linear_network)
        inputs = [store.get_of_type(n, Node).output_value for n in linear_network.input_node_ids]
        assert inputs == [2.0, -1.0, 1.0]

    def test_activation_applied(self, store, linear_network):
        """Test that the activation function is applied to the weighted sum."""
        out = store.get_of_type(linear_network.output_node_ids[0], Node)
        out.activation = ActivationFunction.SIGMOID

        propagate(store, linear_network)

        assert out.weighted_sum == pytest.approx(-0.75)
        assert out.output_value == pytest.approx(1.0 / (1.0 + np.exp(0.75)))

    def test_unbound_node_without_connections_keeps_value(self, store):
        """Test that nodes without inputs keep their output value."""
        node = Node(output_value=0.3)
        store.insert(node)
        propagate(store, Network(((node.id,),), ()))
        assert node.output_value == 0.3

    def test_layers_evaluated_in_order(self, store, dataset):
        """Test that later layers read values updated in the same pass."""
        network = build_from_template(store, "2,3,1", dataset.id,
                                      hidden_activation=ActivationFunction.IDENTITY,
                                      output_activation=ActivationFunction.IDENTITY)
        network.set_weights(store, np.ones(9))

        propagate(store, network)

        # hidden = 2.0 - 1.0 = 1.0 each; output = 3 * 1.0
        assert _outputs(store, network) == [pytest.approx(3.0)]

    def test_order_within_layer_does_not_matter(self, store, dataset):
        """Test that evaluating same-layer nodes in another order gives the same outputs."""
        network = build_from_template(store, "2+1,4+1,2", dataset.id)
        propagate(store, network)
        expected = _outputs(store, network)

        shuffled = Network(tuple(tuple(reversed(layer)) for layer in network.layers), network.connection_ids)
        for node in store.of_type(Node):
            node.output_value = 1.0 if node.id in (network.layers[0][-1], network.layers[1][-1]) else 0.5
        propagate(store, shuffled)

        assert [store.get_of_type(n, Node).output_value for n in network.output_node_ids] == \
               [pytest.approx(v) for v in expected]

    def test_dangling_connection_skipped(self, store, linear_network):
        """Test that removed connections and nodes are skipped."""
        store.remove(linear_network.connection_ids[1])
        store.flush()

        propagate(store, linear_network)

        assert _outputs(store, linear_network) == [pytest.approx(0.5 * 2.0 + 0.25)]

    def test_incoming_connections(self, store, linear_network):
        """Test the grouping of connections by destination."""
        incoming = incoming_connections(store, linear_network)
        out_id = linear_network.output_node_ids[0]
        assert incoming[out_id] == list(linear_network.connection_ids)
        assert linear_network.input_node_ids[0] not in incoming


# ============================================================================
# Test ForwardPropagator
# ============================================================================

class TestForwardPropagator:
    """Test the per-tick propagator."""

    def test_tick_autonomous_propagates(self, store, linear_network):
        """Test that an autonomous tick evaluates the network."""
        propagator = ForwardPropagator(store, linear_network)
        propagator.tick(DriveMode.AUTONOMOUS)
        assert _outputs(store, linear_network) == [pytest.approx(-0.75)]

    def test_tick_trained_does_nothing(self, store, linear_network):
        """Test that a network driven by a trainer is left alone."""
        propagator = ForwardPropagator(store, linear_network)
        propagator.tick(DriveMode.TRAINED)
        assert _outputs(store, linear_network) == [0.5]

    def test_propagate_matches_function(self, store, dataset):
        """Test that the cached propagator matches the plain function."""
        network = build_from_template(store, "2+1,3+1,2", dataset.id)
        ForwardPropagator(store, network).propagate()
        cached = _outputs(store, network)

        propagate(store, network)
        assert _outputs(store, network) == [pytest.approx(v) for v in cached]
