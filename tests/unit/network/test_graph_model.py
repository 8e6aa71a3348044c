"""
Unit tests for Node, Connection and Network.
"""

import pytest
import numpy as np

from evoprop.activations import ActivationFunction
from evoprop.data        import TableDataset
from evoprop.network     import Connection, Network, Node, prune_dead_connections
from evoprop.store       import INVALID_ID


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def small_network(store):
    """A 2-1 network with weights 0.5 and -1.5."""
    n0, n1, out = Node(), Node(), Node()
    for node in (n0, n1, out):
        store.insert(node)
    c0 = Connection(n0.id, out.id, 0.5)
    c1 = Connection(n1.id, out.id, -1.5)
    store.insert(c0)
    store.insert(c1)
    return Network(((n0.id, n1.id), (out.id,)), (c0.id, c1.id))


# ============================================================================
# Test Node
# ============================================================================

class TestNode:
    """Test Node attributes and bindings."""

    def test_defaults(self):
        """Test default node values."""
        node = Node()
        assert node.output_value == 0.5
        assert node.weighted_sum == 0.5
        assert node.activation is ActivationFunction.SIGMOID
        assert node.data_source_id == INVALID_ID
        assert not node.is_input_bound
        assert not node.is_output_bound

    def test_input_bound(self):
        """Test that a node with a data source and attribute is input bound."""
        node = Node(data_source_id=3, attribute_index=0)
        assert node.is_input_bound

    def test_target_overrides_attribute(self):
        """Test that output nodes are never input bound."""
        node = Node(data_source_id=3, attribute_index=0, target_index=1)
        assert node.is_output_bound
        assert not node.is_input_bound

    def test_activation_events(self):
        """Test SET_SIGMOID and CLEAR_AFUNC events."""
        node = Node(activation=ActivationFunction.TANH)
        node.handle_event("CLEAR_AFUNC")
        assert node.activation is ActivationFunction.IDENTITY
        node.handle_event("SET_SIGMOID")
        assert node.activation is ActivationFunction.SIGMOID

    def test_str(self, store):
        """Test the short string representation."""
        node = Node(output_value=1.0, activation=ActivationFunction.IDENTITY)
        store.insert(node)
        assert str(node) == f"[N{node.id},IDN,out=+1.000]"


# ============================================================================
# Test Connection
# ============================================================================

class TestConnection:
    """Test Connection invariants and pruning."""

    def test_self_connection_raises(self):
        """Test that a connection cannot loop on one node."""
        with pytest.raises(ValueError, match="same node"):
            Connection(4, 4, 1.0)

    def test_unset_connection_allowed(self):
        """Test that a connection with both ends unset can be created."""
        conn = Connection()
        assert conn.from_node_id == INVALID_ID
        assert conn.to_node_id == INVALID_ID

    def test_is_dead(self, store, small_network):
        """Test that a connection to a missing node is dead."""
        conn = store.get_of_type(small_network.connection_ids[0], Connection)
        assert not conn.is_dead(store)

        store.remove(conn.from_node_id)
        assert conn.is_dead(store)      # marked for removal counts as dead

        store.flush()
        assert conn.is_dead(store)

    def test_prune_dead_connections(self, store, small_network):
        """Test that pruning removes only dead connections."""
        store.remove(small_network.input_node_ids[0])
        store.flush()

        assert prune_dead_connections(store) == 1
        store.flush()

        remaining = list(store.of_type(Connection))
        assert [conn.id for conn in remaining] == [small_network.connection_ids[1]]


# ============================================================================
# Test Network
# ============================================================================

class TestNetwork:
    """Test the Network view."""

    def test_empty_network(self):
        """Test the shared empty network."""
        assert Network.EMPTY.is_empty
        assert Network.EMPTY.input_node_ids == ()
        assert Network.EMPTY.output_node_ids == ()
        assert Network.EMPTY.output_node_id(0) == INVALID_ID

    def test_layer_accessors(self, small_network):
        """Test input and output node accessors."""
        assert len(small_network.input_node_ids) == 2
        assert len(small_network.output_node_ids) == 1
        assert small_network.input_node_id(1) == small_network.layers[0][1]
        assert small_network.input_node_id(2) == INVALID_ID
        assert small_network.output_node_id(-1) == INVALID_ID
        assert len(small_network.node_ids) == 3

    def test_get_weights_in_connection_order(self, store, small_network):
        """Test that the genome follows connection order."""
        np.testing.assert_array_equal(small_network.get_weights(store), [0.5, -1.5])

    def test_weights_round_trip(self, store, small_network):
        """Test that setting the weights just read leaves them unchanged."""
        weights = small_network.get_weights(store)
        small_network.set_weights(store, weights)
        np.testing.assert_array_equal(small_network.get_weights(store), weights)

    def test_set_weights(self, store, small_network):
        """Test that set_weights writes the connections."""
        small_network.set_weights(store, np.array([2.0, 3.0]))
        np.testing.assert_array_equal(small_network.get_weights(store), [2.0, 3.0])

    def test_set_weights_with_length_mismatch_writes_prefix(self, store, small_network):
        """Test that only the common prefix is written."""
        small_network.set_weights(store, [7.0])
        np.testing.assert_array_equal(small_network.get_weights(store), [7.0, -1.5])

        small_network.set_weights(store, [1.0, 2.0, 3.0])
        np.testing.assert_array_equal(small_network.get_weights(store), [1.0, 2.0])

    def test_missing_connection_reads_zero(self, store, small_network):
        """Test that removed connections contribute 0.0 to the genome."""
        store.remove(small_network.connection_ids[0])
        store.flush()
        np.testing.assert_array_equal(small_network.get_weights(store), [0.0, -1.5])

    def test_destroy_removes_nodes_and_connections(self, store, small_network):
        """Test that destroy marks everything for removal."""
        dataset = TableDataset([[1.0]])
        store.insert(dataset)

        small_network.destroy(store)
        store.flush()

        assert list(store.of_type(Node)) == []
        assert list(store.of_type(Connection)) == []
        assert dataset.id in store

    def test_network_is_immutable(self, small_network):
        """Test that the layered view cannot be modified."""
        with pytest.raises(AttributeError):
            small_network.layers = ()

    def test_str(self, small_network):
        """Test the summary string."""
        assert str(small_network) == "Network(layers=[2,1], connections=2)"
