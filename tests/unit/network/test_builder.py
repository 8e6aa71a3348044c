"""
Unit tests for the network builders.
"""

import pytest
import numpy as np
from math import sqrt

from evoprop.activations import ActivationFunction
from evoprop.data        import TableDataset
from evoprop.network     import (Connection, Network, Node, UnsupportedTopologyError,
                                 build_from_outputs, build_from_template, find_output_node_ids,
                                 parse_template, randomize_weights, xavier_stdev)
from evoprop.store       import INVALID_ID


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def dataset(store):
    """A dataset with 2 input columns and 1 target column."""
    table = TableDataset([[0.0, 1.0, 1.0],
                          [1.0, 0.0, 1.0]])
    store.insert(table)
    return table


def _layer_sizes(network):
    return [len(layer) for layer in network.layers]


# ============================================================================
# Test Template Parsing
# ============================================================================

class TestParseTemplate:
    """Test parse_template."""

    def test_counts_and_bias(self):
        """Test parsing of counts with and without bias nodes."""
        assert parse_template("2+1,3+1,1") == [(2, 1), (3, 1), (1, 0)]

    def test_whitespace_is_ignored(self):
        """Test that spaces around numbers are accepted."""
        assert parse_template(" 2 + 1 , 1 ") == [(2, 1), (1, 0)]

    def test_empty_template(self):
        """Test that empty templates have no layers."""
        assert parse_template("") == []
        assert parse_template("   ") == []

    @pytest.mark.parametrize("template", ["2,x,1", "2+1+1,1", "2,,1", "-1,2"])
    def test_bad_templates_raise(self, template):
        """Test that malformed templates are rejected."""
        with pytest.raises(ValueError):
            parse_template(template)


# ============================================================================
# Test Building From a Template
# ============================================================================

class TestBuildFromTemplate:
    """Test build_from_template."""

    def test_layer_sizes_and_connections(self, store):
        """Test the 2,2,1 scenario: 3 layers and 6 connections."""
        network = build_from_template(store, "2,2,1")

        assert _layer_sizes(network) == [2, 2, 1]
        assert len(network.connection_ids) == 6
        assert len(list(store.of_type(Node))) == 5
        assert len(list(store.of_type(Connection))) == 6

    def test_bias_nodes(self, store):
        """Test that bias nodes output 1.0, use identity and have no incoming connections."""
        network = build_from_template(store, "2+1,2+1,1")
        assert _layer_sizes(network) == [3, 3, 1]
        assert len(network.connection_ids) == 2 * 3 + 1 * 3

        targets = {store.get(conn_id).to_node_id for conn_id in network.connection_ids}
        for layer in network.layers[:-1]:
            bias = store.get_of_type(layer[-1], Node)
            assert bias.output_value == 1.0
            assert bias.activation is ActivationFunction.IDENTITY
            assert bias.id not in targets

    def test_connections_only_between_adjacent_layers(self, store):
        """Test that every connection runs from layer i to layer i+1."""
        network = build_from_template(store, "3+1,4+1,2")
        layer_of = {node_id: i for i, layer in enumerate(network.layers) for node_id in layer}

        for conn_id in network.connection_ids:
            conn = store.get_of_type(conn_id, Connection)
            assert layer_of[conn.to_node_id] == layer_of[conn.from_node_id] + 1

    def test_activations(self, store):
        """Test activation functions per layer."""
        network = build_from_template(store, "2,2,1",
                                      hidden_activation=ActivationFunction.SIGMOID,
                                      output_activation=ActivationFunction.TANH)
        activation = lambda node_id: store.get_of_type(node_id, Node).activation

        assert all(activation(n) is ActivationFunction.IDENTITY for n in network.layers[0])
        assert all(activation(n) is ActivationFunction.SIGMOID  for n in network.layers[1])
        assert all(activation(n) is ActivationFunction.TANH     for n in network.layers[2])

    def test_data_source_binding(self, store, dataset):
        """Test that inputs read attributes and outputs target the last attributes."""
        network = build_from_template(store, "2+1,2,1", dataset.id)

        inputs = [store.get_of_type(n, Node) for n in network.layers[0]]
        assert [n.attribute_index for n in inputs[:2]] == [0, 1]
        assert all(n.data_source_id == dataset.id for n in inputs[:2])
        assert inputs[2].data_source_id == INVALID_ID    # bias

        hidden = [store.get_of_type(n, Node) for n in network.layers[1]]
        assert all(n.data_source_id == INVALID_ID for n in hidden)

        output = store.get_of_type(network.layers[2][0], Node)
        assert output.data_source_id == dataset.id
        assert output.target_index == 2
        assert not output.is_input_bound

    def test_multiple_outputs_target_last_columns(self, store):
        """Test target indices for an output layer of 2 nodes."""
        table = TableDataset([[0.0, 0.0, 0.0, 0.0, 0.0]])
        store.insert(table)
        network = build_from_template(store, "3,2", table.id)

        targets = [store.get_of_type(n, Node).target_index for n in network.output_node_ids]
        assert targets == [3, 4]

    def test_unknown_data_source_leaves_nodes_unbound(self, store):
        """Test that a data source ID that does not resolve is ignored."""
        network = build_from_template(store, "2,1", data_source_id=999)
        assert all(not store.get_of_type(n, Node).is_input_bound for n in network.input_node_ids)

    def test_empty_template_creates_nothing(self, store):
        """Test that an empty template yields the empty network."""
        assert build_from_template(store, "") is Network.EMPTY
        assert len(store) == 0

    def test_xavier_initialization(self, store):
        """Test that the weights follow N(0, sqrt(2/(a+b)))."""
        network = build_from_template(store, "60,40")
        weights = network.get_weights(store)

        assert len(weights) == 2400
        assert np.std(weights)  == pytest.approx(sqrt(2.0 / 100), abs=0.01)
        assert np.mean(weights) == pytest.approx(0.0, abs=0.01)


class TestXavierStdev:
    """Test xavier_stdev."""

    def test_formula(self):
        """Test sqrt(2 / (a + b))."""
        assert xavier_stdev(2, 2) == pytest.approx(sqrt(0.5))
        assert xavier_stdev(3, 1) == pytest.approx(sqrt(0.5))

    def test_zero_sizes(self):
        """Test that empty layers give a zero deviation."""
        assert xavier_stdev(0, 0) == 0.0


# ============================================================================
# Test Building From Outputs
# ============================================================================

class TestBuildFromOutputs:
    """Test build_from_outputs and find_output_node_ids."""

    def test_rediscovers_template_network(self, store, dataset):
        """Test that the layers of a generated network are recovered from its outputs."""
        generated  = build_from_template(store, "2+1,2+1,1", dataset.id)
        output_ids = find_output_node_ids(store, dataset.id)
        discovered = build_from_outputs(store, output_ids)

        assert output_ids == list(generated.output_node_ids)
        assert discovered.layers == generated.layers
        assert set(discovered.connection_ids) == set(generated.connection_ids)
        assert len(discovered.connection_ids) == len(generated.connection_ids)

    def test_no_outputs_gives_empty_network(self, store):
        """Test that no output nodes yield the empty network."""
        assert build_from_outputs(store, []) is Network.EMPTY
        assert build_from_outputs(store, [12345]) is Network.EMPTY

    def test_single_isolated_output(self, store):
        """Test a network made of one unconnected node."""
        node = Node()
        store.insert(node)
        network = build_from_outputs(store, [node.id])
        assert network.layers == ((node.id,),)
        assert network.connection_ids == ()

    def test_cycle_raises(self, store):
        """Test that a cycle feeding the outputs is rejected."""
        a, b, c = Node(), Node(), Node()
        for node in (a, b, c):
            store.insert(node)
        for src, dst in [(a, b), (b, c), (c, b)]:
            store.insert(Connection(src.id, dst.id, 1.0))

        with pytest.raises(UnsupportedTopologyError, match="cycle"):
            build_from_outputs(store, [c.id])

    def test_cycle_is_a_value_error(self):
        """Test the exception hierarchy."""
        assert issubclass(UnsupportedTopologyError, ValueError)

    def test_dangling_connection_is_skipped(self, store):
        """Test that connections from missing nodes are ignored."""
        a, out = Node(), Node()
        store.insert(a)
        store.insert(out)
        store.insert(Connection(a.id, out.id, 1.0))
        store.insert(Connection(777, out.id, 1.0))

        network = build_from_outputs(store, [out.id])
        assert network.layers == ((a.id,), (out.id,))
        assert len(network.connection_ids) == 1


# ============================================================================
# Test Randomizing Weights
# ============================================================================

class TestRandomizeWeights:
    """Test randomize_weights."""

    def test_changes_all_weights(self, store):
        """Test that every weight gets a new value."""
        network = build_from_template(store, "3+1,2")
        before  = network.get_weights(store)

        randomize_weights(store, network)

        after = network.get_weights(store)
        assert len(after) == len(before)
        assert np.all(after != before)

    def test_distribution(self, store):
        """Test that randomized weights follow the Xavier deviation."""
        network = build_from_template(store, "50,50")
        network.set_weights(store, np.zeros(2500))

        randomize_weights(store, network)

        assert np.std(network.get_weights(store)) == pytest.approx(sqrt(2.0 / 100), abs=0.01)
