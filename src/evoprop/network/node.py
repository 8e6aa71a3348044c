"""
Node Module

Classes:
    Node: A computational node (neuron) of a layered network
"""

from evoprop.activations import ActivationFunction
from evoprop.store       import Entity, EventListener, INVALID_ID

class Node(Entity, EventListener):
    """
    A computational node (neuron) in a neural network.

    A node either sources its output value from a DataSource (input nodes) or
    computes it from its incoming connections as: activation(weighted_sum).
    An output node names, through 'target_index', the attribute of a Dataset
    holding the value it should produce; output nodes are never sourced
    from their data source, even if 'attribute_index' is set.

    Public Attributes:
        output_value:    The output value of the node
        weighted_sum:    Sum of the incoming weighted values, before activation
                         (kept for computing the activation derivative)
        activation:      The ActivationFunction applied to the weighted sum
        data_source_id:  ID of the DataSource this node is bound to (INVALID_ID if none)
        attribute_index: Attribute of the data source sourcing the output value (input nodes)
        target_index:    Attribute of the dataset holding the target value (output nodes)

    Public Properties:
        is_input_bound:  Whether the output value is sourced from the data source
        is_output_bound: Whether the node is an output node with a target value

    Events:
        SET_SIGMOID: switch the activation function to sigmoid
        CLEAR_AFUNC: switch the activation function to identity
    """

    def __init__(self,
                 output_value   : float              = 0.5,
                 activation     : ActivationFunction = ActivationFunction.SIGMOID,
                 data_source_id : int                = INVALID_ID,
                 attribute_index: int                = -1,
                 target_index   : int                = -1):
        super().__init__()
        self.output_value   : float              = output_value
        self.weighted_sum   : float              = output_value
        self.activation     : ActivationFunction = activation
        self.data_source_id : int                = data_source_id
        self.attribute_index: int                = attribute_index
        self.target_index   : int                = target_index

    @property
    def is_input_bound(self) -> bool:
        """Whether the node sources its output value from its data source."""
        return self.data_source_id >= 0 and self.attribute_index >= 0 and self.target_index < 0

    @property
    def is_output_bound(self) -> bool:
        """Whether the node has a target value in its dataset."""
        return self.target_index >= 0

    def handle_event(self, message: str) -> None:
        if message == "SET_SIGMOID":
            self.activation = ActivationFunction.SIGMOID
        elif message == "CLEAR_AFUNC":
            self.activation = ActivationFunction.IDENTITY

    def __str__(self):
        return f"[N{self.id},{self.activation.code},out={self.output_value:+.3f}]"

    def __repr__(self):
        return (f"Node(id={self.id}, output_value={self.output_value}, activation={self.activation}, "
                f"data_source_id={self.data_source_id}, attribute_index={self.attribute_index}, "
                f"target_index={self.target_index})")
