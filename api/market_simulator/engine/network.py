"""Small feed-forward networks stored as plain data.

A ``NeuralNetwork`` is only layer sizes, input names and weight arrays, so it
serializes with the rest of the simulation state. Inference and training are
free functions operating on that record:

    >>> net = create_network([3, 4, 1], ["a", "b", "c"], np.random.default_rng(7))
    >>> feed_forward(net, [0.1, -0.2, 0.3]).shape
    (1,)
    >>> backpropagate(net, [0.1, -0.2, 0.3], [0.5], learning_rate=0.01)

Hidden layers use tanh, the output layer is linear.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Annotated

import numpy as np
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer, model_validator


def _to_float_array(value: object) -> np.ndarray:
    return np.array(value, dtype=np.float64)


FloatArray = Annotated[
    np.ndarray,
    BeforeValidator(_to_float_array),
    PlainSerializer(lambda a: a.tolist(), return_type=list),
]


class NeuralNetwork(BaseModel):
    """Weights and biases of a fully connected network.

    ``weights[i]`` has shape ``(layer_sizes[i + 1], layer_sizes[i])`` and
    ``biases[i]`` has shape ``(layer_sizes[i + 1],)``.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    layer_sizes: list[int] = Field(..., min_length=2)
    input_names: list[str] = Field(default_factory=list)
    weights: list[FloatArray]
    biases: list[FloatArray]

    @model_validator(mode="after")
    def validate_shapes(self) -> NeuralNetwork:
        """Validate weight and bias shapes against layer sizes."""
        expected_layers = len(self.layer_sizes) - 1
        if len(self.weights) != expected_layers or len(self.biases) != expected_layers:
            raise ValueError(
                f"Expected {expected_layers} weight/bias layers, "
                f"got {len(self.weights)} weights and {len(self.biases)} biases"
            )
        for i, (fan_in, fan_out) in enumerate(zip(self.layer_sizes[:-1], self.layer_sizes[1:])):
            if self.weights[i].shape != (fan_out, fan_in):
                raise ValueError(
                    f"Layer {i} weights have shape {self.weights[i].shape}, expected {(fan_out, fan_in)}"
                )
            if self.biases[i].shape != (fan_out,):
                raise ValueError(
                    f"Layer {i} biases have shape {self.biases[i].shape}, expected {(fan_out,)}"
                )
        if self.input_names and len(self.input_names) != self.layer_sizes[0]:
            raise ValueError(
                f"{len(self.input_names)} input names for an input layer of {self.layer_sizes[0]}"
            )
        return self

    @property
    def input_width(self) -> int:
        return self.layer_sizes[0]

    @property
    def output_width(self) -> int:
        return self.layer_sizes[-1]


def create_network(
    layer_sizes: Sequence[int],
    input_names: Sequence[str],
    rng: np.random.Generator,
) -> NeuralNetwork:
    """Build a network with Xavier-uniform weights and zero biases.

    Args:
        layer_sizes: Sizes from input to output, at least two entries.
        input_names: Feature name per input neuron (introspection only).
        rng: Generator used for the weight draw.

    Returns:
        A freshly initialized NeuralNetwork.

    Raises:
        ValueError: If fewer than two layers are given or a layer is empty.
    """
    sizes = [int(s) for s in layer_sizes]
    if len(sizes) < 2 or min(sizes) < 1:
        raise ValueError(f"Invalid layer sizes: {sizes}")

    weights = []
    biases = []
    for fan_in, fan_out in zip(sizes[:-1], sizes[1:]):
        limit = math.sqrt(6.0 / (fan_in + fan_out))
        weights.append(rng.uniform(-limit, limit, size=(fan_out, fan_in)))
        biases.append(np.zeros(fan_out))

    return NeuralNetwork(
        layer_sizes=sizes,
        input_names=list(input_names),
        weights=weights,
        biases=biases,
    )


def _activations(network: NeuralNetwork, inputs: Sequence[float] | np.ndarray) -> list[np.ndarray]:
    x = np.asarray(inputs, dtype=np.float64)
    if x.shape != (network.input_width,):
        raise ValueError(
            f"Network expects {network.input_width} inputs, got {x.shape[0] if x.ndim else 0}"
        )
    activations = [x]
    last = len(network.weights) - 1
    for i, (w, b) in enumerate(zip(network.weights, network.biases)):
        z = w @ activations[-1] + b
        activations.append(z if i == last else np.tanh(z))
    return activations


def feed_forward(network: NeuralNetwork, inputs: Sequence[float] | np.ndarray) -> np.ndarray:
    """Run inference.

    Raises:
        ValueError: If ``len(inputs)`` differs from the input layer width.
    """
    return _activations(network, inputs)[-1]


def backpropagate(
    network: NeuralNetwork,
    inputs: Sequence[float] | np.ndarray,
    targets: Sequence[float] | np.ndarray,
    learning_rate: float,
) -> None:
    """Apply one online gradient-descent step on squared error, in place.

    Args:
        network: Network to update.
        inputs: Feature vector the prediction was made from.
        targets: Desired outputs, one per output neuron.
        learning_rate: Step size.

    Raises:
        ValueError: If inputs or targets have the wrong width.
    """
    activations = _activations(network, inputs)
    target = np.asarray(targets, dtype=np.float64)
    if target.shape != (network.output_width,):
        raise ValueError(
            f"Network produces {network.output_width} outputs, got {target.size} targets"
        )

    delta = activations[-1] - target
    for i in reversed(range(len(network.weights))):
        grad_w = np.outer(delta, activations[i])
        grad_b = delta
        if i > 0:
            # Propagate through the pre-update weights.
            delta = (network.weights[i].T @ delta) * (1.0 - activations[i] ** 2)
        network.weights[i] -= learning_rate * grad_w
        network.biases[i] -= learning_rate * grad_b


def backpropagate_slot(
    network: NeuralNetwork,
    inputs: Sequence[float] | np.ndarray,
    slot: int,
    target: float,
    learning_rate: float,
) -> None:
    """Train a single output neuron, leaving the error of the others at zero."""
    targets = feed_forward(network, inputs).copy()
    targets[slot] = target
    backpropagate(network, inputs, targets, learning_rate)


def squared_error(
    network: NeuralNetwork,
    inputs: Sequence[float] | np.ndarray,
    targets: Sequence[float] | np.ndarray,
) -> float:
    """Sum of squared output errors for one sample."""
    diff = feed_forward(network, inputs) - np.asarray(targets, dtype=np.float64)
    return float(np.dot(diff, diff))
