from .bitfield import FPClass, Float32Fields, classify, decode, fmt_bits
from .reference import QNAN, MulResult, reference_mul
from .random_vectors import DEFAULT_SEED, RandomVectorGenerator, weighted_choice
from .device import Device, FaultyDevice, NativeFloatDevice, ReferenceDevice
