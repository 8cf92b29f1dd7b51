"""Indices of the built-in network layer types."""

from __future__ import annotations

from enum import IntEnum

CUSTOM_BIT = 1 << 8
"""Bit set in the type index of every user-registered layer."""


class LayerType(IntEnum):
    """Built-in layer types with their fixed registry indices."""

    AbsVal = 0
    ArgMax = 1
    BatchNorm = 2
    Bias = 3
    BNLL = 4
    Concat = 5
    Convolution = 6
    Crop = 7
    Deconvolution = 8
    Dropout = 9
    Eltwise = 10
    ELU = 11
    Embed = 12
    Exp = 13
    Flatten = 14
    InnerProduct = 15
    Input = 16
    Log = 17
    LRN = 18
    MemoryData = 19
    MVN = 20
    Pooling = 21
    Power = 22
    PReLU = 23
    Proposal = 24
    Reduction = 25
    ReLU = 26
    Reshape = 27
    ROIPooling = 28
    Scale = 29
    Sigmoid = 30
    Slice = 31
    Softmax = 32
    Split = 33
    SPP = 34
    TanH = 35
    Threshold = 36
    Tile = 37
    RNN = 38
    LSTM = 39
    BinaryOp = 40
    UnaryOp = 41
    ConvolutionDepthWise = 42
    Padding = 43
    Squeeze = 44
    ExpandDims = 45
    Normalize = 46
    Permute = 47
    PriorBox = 48
    DetectionOutput = 49
    Interp = 50
    DeconvolutionDepthWise = 51
    ShuffleChannel = 52
    InstanceNorm = 53
    Clip = 54
    Reorg = 55
    YoloDetectionOutput = 56
    Quantize = 57
    Dequantize = 58
    Yolov3DetectionOutput = 59
    PSROIPooling = 60
    ROIAlign = 61
    Packing = 62
    Requantize = 63
    Cast = 64
    HardSigmoid = 65
    SELU = 66
    HardSwish = 67
    Noop = 68

    @classmethod
    def from_name(cls, name: str) -> "LayerType":
        """Look up a layer type by its exact, case-sensitive name."""
        try:
            return cls[name]
        except KeyError:
            raise ValueError(f"unknown layer type {name!r}") from None

    @staticmethod
    def is_custom(index: int) -> bool:
        """Whether a type index belongs to a user-registered layer."""
        return bool(int(index) & CUSTOM_BIT)