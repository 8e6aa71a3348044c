import autograd.numpy as np  # type: ignore
from enum import Enum

def identity_activation(z):
    return z

def identity_derivative(z):
    # constant, so bias and pass-through nodes do not attenuate the gradient
    return 1.0

def sigmoid_activation(z):
    Z = np.clip(z, -100, 100)   # to prevent under/overflow when calculating exp
    return 1.0 / (1.0 + np.exp(-Z))

def sigmoid_derivative(z):
    s = sigmoid_activation(z)
    return s * (1.0 - s)

def tanh_activation(z):
    return np.tanh(z)

def tanh_derivative(z):
    t = np.tanh(z)
    return 1.0 - t * t

class ActivationFunction(Enum):
    """
    The activation functions a Node can apply to its weighted sum.

    Each member pairs the function with its derivative. Both are evaluated
    at the pre-activation value (the node's weighted sum), which is what
    backpropagation needs: f'(z), not f'(f(z)).
    """
    IDENTITY = "identity"
    SIGMOID  = "sigmoid"
    TANH     = "tanh"

    def compute(self, z: float) -> float:
        """Apply the activation function to 'z'."""
        return float(_functions[self][0](z))

    def derivative(self, z: float) -> float:
        """The derivative of the activation function, evaluated at 'z'."""
        return float(_functions[self][1](z))

    @property
    def code(self) -> str:
        """3-letter identifier, used when printing nodes."""
        return activation_codes[self.value]

_functions = {
    ActivationFunction.IDENTITY: (identity_activation, identity_derivative),
    ActivationFunction.SIGMOID : (sigmoid_activation , sigmoid_derivative ),
    ActivationFunction.TANH    : (tanh_activation    , tanh_derivative    ),
    }

activations = {
    "identity": ActivationFunction.IDENTITY,
    "sigmoid" : ActivationFunction.SIGMOID,
    "tanh"    : ActivationFunction.TANH
    }

# 3-letter identifiers for each activation function
activation_codes = {
    "identity": "IDN",
    "sigmoid" : "SIG",
    "tanh"    : "TNH"
    }

def get_activation(name: str | ActivationFunction) -> ActivationFunction:
    """
    Look up an activation function by name (case insensitive).
    ActivationFunction members are returned unchanged.
    """
    if isinstance(name, ActivationFunction):
        return name
    try:
        return activations[name.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown activation function '{name}'") from None
