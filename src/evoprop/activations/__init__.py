"""
Activations Package

This package provides the activation functions applied by network nodes.

Exported:
    ActivationFunction: Enumeration of activation functions (compute + derivative)
    activations:        Dictionary mapping activation function names to enum members
    activation_codes:   Dictionary mapping activation function names to 3-letter codes
    get_activation:     Look up an activation function by name
    Individual activation functions and derivatives: identity, sigmoid, tanh
"""

from evoprop.activations.basic_activations import (
    ActivationFunction,
    activations,
    activation_codes,
    get_activation,
    identity_activation,
    identity_derivative,
    sigmoid_activation,
    sigmoid_derivative,
    tanh_activation,
    tanh_derivative
)

__all__ = [
    'ActivationFunction',
    'activations',
    'activation_codes',
    'get_activation',
    'identity_activation',
    'identity_derivative',
    'sigmoid_activation',
    'sigmoid_derivative',
    'tanh_activation',
    'tanh_derivative'
]
